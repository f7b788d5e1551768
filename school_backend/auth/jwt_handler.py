from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from school_backend.core.config import Settings
from school_backend.models.user import ROLES


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


@dataclass(frozen=True)
class TokenClaims:
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime


def create_access_token(
    settings: Settings,
    *,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=settings.jwt_expires_minutes))
    payload = {"sub": email, "email": email, "role": role, "iat": now, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str | None) -> TokenClaims:
    if not token:
        raise TokenInvalid("token is blank")
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "role", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpired("token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenInvalid(str(exc)) from exc

    role = payload.get("role")
    if role not in ROLES:
        raise TokenInvalid("token role is not recognised")

    return TokenClaims(
        email=payload.get("email") or payload["sub"],
        role=role,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
