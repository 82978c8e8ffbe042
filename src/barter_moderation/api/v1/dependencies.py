"""Shared API dependencies for authentication and common functionality."""

import hmac
import logging
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barter_moderation.core.errors import AuthError, DependencyError, PermissionDeniedError
from barter_moderation.core.security import Identity, decode_access_token
from barter_moderation.core.settings import settings
from barter_moderation.db.session import get_db
from barter_moderation.models import User
from barter_moderation.models.user import MODERATOR_ROLES

logger = logging.getLogger(__name__)

# Missing credentials surface as AuthError (401) instead of FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_current_identity(credentials: BearerDep, db: SessionDep) -> Identity:
    """Resolve the caller from the bearer token.

    Token claims are checked first; when the subject has a ``users`` row, a
    banned account is refused and a stored moderator/admin role applies.

    Raises:
        AuthError: If the token is missing or invalid, or the account is banned.
    """
    if credentials is None:
        raise AuthError("Unauthorized")

    identity = decode_access_token(credentials.credentials)
    try:
        user = db.get(User, identity.user_id)
    except SQLAlchemyError as err:
        raise DependencyError("Failed to load user") from err

    if user is None:
        return identity
    if user.is_banned:
        raise AuthError("Account is banned")
    if not identity.is_moderator and user.role in MODERATOR_ROLES:
        return Identity(user_id=identity.user_id, role=user.role)
    return identity


# Type alias for current identity dependency
CurrentIdentityDep = Annotated[Identity, Depends(get_current_identity)]


def require_moderator(identity: CurrentIdentityDep) -> Identity:
    """Allow moderators and admins only."""
    if not identity.is_moderator:
        raise PermissionDeniedError("Moderator access required")
    return identity


def require_admin(identity: CurrentIdentityDep) -> Identity:
    """Allow admins only."""
    if not identity.is_admin:
        raise PermissionDeniedError("Admin access required")
    return identity


ModeratorDep = Annotated[Identity, Depends(require_moderator)]
AdminDep = Annotated[Identity, Depends(require_admin)]


def _secret_matches(candidate: str | None, secret: str) -> bool:
    return candidate is not None and hmac.compare_digest(candidate.encode(), secret.encode())


def authorize_scheduler(
    credentials: BearerDep,
    db: SessionDep,
    x_cron_secret: Annotated[str | None, Header()] = None,
) -> str:
    """Authenticate the escalation trigger.

    With ``CRON_SECRET`` configured the caller must present it, either as the
    ``X-Cron-Secret`` header or as the bearer token. Without it, a moderator
    or admin token is required.

    Returns:
        A label for the caller, used in logs.
    """
    secret = settings.cron_secret
    if secret:
        bearer = credentials.credentials if credentials is not None else None
        if _secret_matches(x_cron_secret, secret) or _secret_matches(bearer, secret):
            return "scheduler"
        logger.warning("Rejected escalation trigger with invalid scheduler secret")
        raise AuthError("Unauthorized")

    identity = get_current_identity(credentials, db)
    return require_moderator(identity).user_id


SchedulerDep = Annotated[str, Depends(authorize_scheduler)]
