from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from clinicalcanvas.services.auth_service import (
    InvalidTokenError, PasswordHasher, TokenExpiredError, TokenService,
)

SECRET = "unit-secret"


@pytest.fixture
def tokens():
    return TokenService(SECRET, expire_minutes=60)


def test_issue_verify_round_trip(tokens):
    now = datetime.now(timezone.utc).replace(microsecond=0)
    claims = tokens.verify(tokens.issue(7, "alice@x.com", "counselor", now=now))
    assert claims.user_id == 7
    assert claims.email == "alice@x.com"
    assert claims.role == "counselor"
    assert claims.issued_at == now
    assert claims.expires_at == now + timedelta(minutes=60)


def test_expired_token_rejected(tokens):
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    token = tokens.issue(7, "alice@x.com", "therapist", now=issued)
    with pytest.raises(TokenExpiredError):
        tokens.verify(token)


def test_tampered_token_rejected(tokens):
    token = tokens.issue(7, "alice@x.com", "therapist")
    header, payload, signature = token.split(".")
    flipped = signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")
    with pytest.raises(InvalidTokenError):
        tokens.verify(".".join([header, payload, flipped]))


def test_token_signed_with_other_secret_rejected(tokens):
    other = TokenService("another-secret")
    with pytest.raises(InvalidTokenError):
        tokens.verify(other.issue(7, "alice@x.com", "therapist"))


def test_token_missing_claims_rejected(tokens):
    token = jwt.encode({"sub": "7"}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError) as excinfo:
        tokens.verify(token)
    assert excinfo.value.message == "Malformed token claims"


def test_password_hasher():
    hasher = PasswordHasher(rounds=1000)
    hashed = hasher.hash("pw1")
    assert hashed != "pw1"
    assert hasher.verify("pw1", hashed)
    assert not hasher.verify("pw2", hashed)
    # salt 때문에 같은 비밀번호도 해시가 다름
    assert hasher.hash("pw1") != hashed


def test_password_hasher_rejects_non_string():
    with pytest.raises(TypeError):
        PasswordHasher(rounds=1000).hash(None)
