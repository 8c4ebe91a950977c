import hashlib
from datetime import timedelta

import pytest

from club_selection.core.security import (
    STUDENT_TOKEN_LENGTH,
    SecurityError,
    resolve_student_token,
    token_manager,
    hash_password,
    verify_password,
)

pytestmark = pytest.mark.unit


def test_token_is_truncated_sha256_of_normalized_identifier():
    expected = hashlib.sha256(b"alice@example.com").hexdigest()[:STUDENT_TOKEN_LENGTH]
    assert resolve_student_token("alice@example.com") == expected
    assert len(expected) == 12


def test_token_is_deterministic_and_normalized():
    token = resolve_student_token("Alice@Example.com")
    assert token == resolve_student_token("  alice@example.com\n")
    assert token == resolve_student_token("ALICE@EXAMPLE.COM")


def test_different_identifiers_give_different_tokens():
    assert resolve_student_token("s1001") != resolve_student_token("s1002")


@pytest.mark.parametrize("identifier", ["", "   ", "\t\n", None])
def test_blank_identifier_is_rejected(identifier):
    with pytest.raises(ValueError):
        resolve_student_token(identifier)


def test_access_token_round_trip_carries_role_and_extra_claims():
    token = token_manager.create_access_token(
        subject="abc", role="student", additional_claims={"token": "0123456789ab"}
    )
    claims = token_manager.decode_token(token)
    assert claims["sub"] == "abc"
    assert claims["role"] == "student"
    assert claims["token"] == "0123456789ab"


def test_reserved_claims_cannot_be_overridden():
    with pytest.raises(SecurityError):
        token_manager.create_access_token(subject="abc", role="student", additional_claims={"role": "admin"})


def test_expired_token_is_rejected():
    token = token_manager.create_access_token(subject="abc", role="admin", expires_delta=timedelta(seconds=-1))
    with pytest.raises(SecurityError, match="expired"):
        token_manager.decode_token(token)


def test_tampered_token_is_rejected():
    token = token_manager.create_access_token(subject="abc", role="admin")
    with pytest.raises(SecurityError):
        token_manager.decode_token(token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1])


def test_password_hashing():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("", hashed)
