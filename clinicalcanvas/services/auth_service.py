from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from clinicalcanvas.config import Settings
from clinicalcanvas.errors import AuthError, ForbiddenError
from clinicalcanvas.models import THERAPIST_ROLES, User

logger = logging.getLogger(__name__)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class InvalidTokenError(AuthError):
    message = "Invalid token"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers=BEARER_CHALLENGE)


class TokenExpiredError(InvalidTokenError):
    message = "Token expired"


class PasswordHasher:
    """Salted one-way password hashing (passlib)."""

    def __init__(self, rounds: int = 29000):
        self._context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )

    def hash(self, password: str) -> str:
        if not isinstance(password, (str, bytes)):
            raise TypeError("Password must be a string or bytes.")
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """
        False on mismatch. passlib raises ValueError/TypeError only when the
        input itself is malformed (unknown hash format, non-string password).
        """
        return self._context.verify(password, password_hash)


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Issues and verifies stateless HS256 bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24):
        self._secret = secret
        self._algorithm = algorithm
        self.expire_delta = timedelta(minutes=expire_minutes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(settings.jwt_secret, settings.jwt_algorithm, settings.access_token_expire_minutes)

    def issue(self, user_id: int, email: str, role: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int((now + self.expire_delta).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_for(self, user: User) -> str:
        return self.issue(user.id, user.email, user.role)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            raise InvalidTokenError() from e

        try:
            return TokenClaims(
                user_id=int(payload["sub"]),
                email=payload["email"],
                role=payload["role"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError("Malformed token claims") from e


bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    모든 보호 라우트의 입구. Authorization: Bearer <token> 을 검증하고
    이후 쿼리의 소유자 필터에 쓰일 claims 를 반환합니다 (DB 조회 없음).
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required", headers=BEARER_CHALLENGE)

    try:
        claims = tokens.verify(credentials.credentials.strip())
    except InvalidTokenError as e:
        logger.warning(f"Rejected bearer token: {e.message}")
        raise

    if claims.role not in THERAPIST_ROLES:
        raise ForbiddenError("Practice data is restricted to therapist accounts")
    return claims
