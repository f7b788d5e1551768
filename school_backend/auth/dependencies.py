import logging
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status

from school_backend.auth import jwt_handler
from school_backend.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    email: str
    role: str


def extract_token(authorization: str | None) -> str | None:
    """Return the token from an Authorization header.

    Accepts both ``Bearer <jwt>`` and a bare ``<jwt>`` value. Cookies are
    never consulted; the header is the only access credential.
    """
    if not authorization or not authorization.strip():
        return None
    scheme, _, credentials = authorization.strip().partition(' ')
    if scheme.lower() == 'bearer':
        return credentials.strip() or None
    return authorization.strip()


def get_current_user(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> CurrentUser:
    token = extract_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Access denied. Token missing.')

    try:
        claims = jwt_handler.decode_access_token(settings, token)
    except jwt_handler.TokenExpired as exc:
        logger.warning('Rejected expired token')
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Access denied. Token expired.') from exc
    except jwt_handler.TokenInvalid as exc:
        logger.warning('Token verification error: %s', exc)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Access denied. Invalid token.') from exc

    return CurrentUser(email=claims.email, role=claims.role)


def _require_role(user: CurrentUser, role: str) -> CurrentUser:
    if user.role != role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Permission denied')
    return user


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    return _require_role(user, 'admin')


def require_student(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    return _require_role(user, 'student')
