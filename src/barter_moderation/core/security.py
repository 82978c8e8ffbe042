"""Bearer token helpers and the caller identity model."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from barter_moderation.core.errors import AuthError
from barter_moderation.core.settings import settings
from barter_moderation.db.time import utcnow
from barter_moderation.models.user import MODERATOR_ROLES, ROLE_ADMIN, ROLE_USER


@dataclass(frozen=True)
class Identity:
    """Authenticated caller derived from a bearer token."""

    user_id: str
    role: str = ROLE_USER

    @property
    def is_moderator(self) -> bool:
        return self.role in MODERATOR_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def create_access_token(
    user_id: str,
    role: str = ROLE_USER,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a signed access token for ``user_id``.

    Args:
        user_id: Subject placed in the ``sub`` claim.
        role: Role claim (``user``, ``moderator`` or ``admin``).
        expires_delta: Optional lifetime override.

    Returns:
        Encoded JWT string.
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": user_id,
        "role": role,
        "exp": utcnow() + lifetime,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Identity:
    """Validate ``token`` and return the identity it carries.

    Raises:
        AuthError: If the token is malformed, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise AuthError("Could not validate credentials") from err

    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        raise AuthError("Could not validate credentials")

    role = payload.get("role")
    if not isinstance(role, str) or not role:
        role = ROLE_USER
    return Identity(user_id=subject, role=role)
