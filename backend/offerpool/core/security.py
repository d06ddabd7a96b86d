from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from offerpool.core.config import settings

ADMIN_ROLE = "admin"


def _create_token(subject: str, role: str, token_type: str, expires_delta: timedelta) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": subject, "role": role, "type": token_type, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(subject: str, *, role: str) -> str:
    return _create_token(subject, role, "access", timedelta(minutes=settings.admin_token_exp_minutes))


def create_admin_token(subject: str) -> str:
    return create_access_token(subject, role=ADMIN_ROLE)


def decode_token(token: str) -> Optional[dict[str, Any]]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
