# club_selection/core/security.py - Authentication utilities (student tokens, JWT, password hashing)
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional, Union
import hashlib
import secrets

import jwt
from passlib.context import CryptContext

from club_selection.core.config import settings

# Length of the hex prefix kept from the identifier digest. Changing it
# orphans every token already stored.
STUDENT_TOKEN_LENGTH = 12

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
    bcrypt__ident="2b"
)


class SecurityError(Exception):
    """Custom exception for security-related errors"""
    pass


def normalize_identifier(identifier: str) -> str:
    return identifier.lower().strip()


def resolve_student_token(identifier: str) -> str:
    """
    Map a real-world student identifier to its opaque token.

    The identifier is lowercased and trimmed, hashed with SHA-256 and the hex
    digest truncated to STUDENT_TOKEN_LENGTH characters. Bulk import and
    student self-lookup must both go through this function.

    Args:
        identifier: Plain identifier (e.g. an email address or student number)

    Returns:
        12 character lowercase hex token

    Raises:
        ValueError: If the identifier is blank
    """
    if identifier is None:
        raise ValueError("Identifier is required")

    normalized = normalize_identifier(identifier)
    if not normalized:
        raise ValueError("Identifier cannot be blank")

    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()
    return digest[:STUDENT_TOKEN_LENGTH]


class TokenManager:
    """Manages JWT creation and validation for admins and students"""

    def __init__(self):
        self.secret_key = settings.JWT_SECRET
        self.algorithm = settings.JWT_ALGORITHM
        self.issuer = settings.JWT_ISSUER
        self.audience = settings.JWT_AUDIENCE
        self.access_token_expire_minutes = settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES

    def create_access_token(
        self,
        subject: Union[str, Any],
        role: str,
        expires_delta: Optional[timedelta] = None,
        additional_claims: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Create a JWT access token.

        Args:
            subject: Token subject (admin or student id)
            role: "admin" or "student"
            expires_delta: Custom expiration time
            additional_claims: Additional JWT claims

        Returns:
            Encoded JWT token string

        Raises:
            SecurityError: If token creation fails
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))

        payload = {
            "sub": str(subject),
            "role": role,
            "iat": now,
            "exp": expire,
            "iss": self.issuer,
            "aud": self.audience,
            "jti": secrets.token_hex(16),
        }

        if additional_claims:
            reserved_claims = set(payload)
            for claim in additional_claims:
                if claim in reserved_claims:
                    raise SecurityError(f"Cannot override reserved JWT claim: {claim}")
            payload.update(additional_claims)

        try:
            return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except jwt.PyJWTError as e:
            raise SecurityError(f"Failed to create access token: {e}")

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT token.

        Raises:
            SecurityError: If the token is invalid or expired
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except jwt.ExpiredSignatureError:
            raise SecurityError("Token has expired")
        except jwt.PyJWTError as e:
            raise SecurityError(f"Invalid token: {e}")


class PasswordManager:
    """Manages admin password hashing and verification"""

    @staticmethod
    def hash_password(password: str) -> str:
        if not password:
            raise SecurityError("Password cannot be empty")
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        if not plain_password or not hashed_password:
            return False
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            return False


token_manager = TokenManager()
password_manager = PasswordManager()


def hash_password(password: str) -> str:
    return password_manager.hash_password(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return password_manager.verify_password(plain_password, hashed_password)


__all__ = [
    "STUDENT_TOKEN_LENGTH",
    "SecurityError",
    "TokenManager",
    "PasswordManager",
    "token_manager",
    "password_manager",
    "normalize_identifier",
    "resolve_student_token",
    "hash_password",
    "verify_password",
]
