# club_selection/api/deps/auth.py - JWT identity and admin authorization
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from uuid import UUID
from typing import Dict, Any

from club_selection.core.db import get_db
from club_selection.core.security import token_manager, SecurityError
from club_selection.models.admin import Admin

security = HTTPBearer()


def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Dict[str, Any]:
    """
    Decode the bearer JWT and return its claims.
    Claims: {"sub": id, "role": "admin" | "student", "token"?: student token}
    """
    try:
        claims = token_manager.decode_token(credentials.credentials)
    except SecurityError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not claims.get("sub") or claims.get("role") not in ("admin", "student"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing identity",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return claims


def require_admin(
    claims: Dict[str, Any] = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Admin:
    """Require an admin token that still maps to an existing account"""
    if claims["role"] != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    try:
        admin_id = UUID(claims["sub"])
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format"
        )

    admin = db.get(Admin, admin_id)
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    return admin
