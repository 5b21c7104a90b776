"""Session token signing and user resolution.

A session token is ``"<user_id>.<hex HMAC-SHA256(user_id)>"`` keyed with
SESSION_SECRET. Issuing tokens is left to the login front end; this module
only verifies them and resolves the user.
"""

import hashlib
import hmac
import logging

from sqlalchemy.orm import Session

from budgetdesk.config import settings
from budgetdesk.errors import AuthenticationError, ForbiddenError
from budgetdesk.models.user import User, UserRole

logger = logging.getLogger(__name__)


def _signature(user_id: int, secret: str) -> str:
    return hmac.new(secret.encode(), str(user_id).encode(), hashlib.sha256).hexdigest()


def sign_session(user_id: int, secret: str | None = None) -> str:
    """Build a session token for ``user_id``."""
    return f"{user_id}.{_signature(user_id, secret or settings.session_secret)}"


def verify_session_token(token: str | None, secret: str | None = None) -> int | None:
    """Return the user id carried by a valid token, else None."""
    if not token or "." not in token:
        return None
    raw_id, signature = token.rsplit(".", 1)
    try:
        user_id = int(raw_id)
    except ValueError:
        return None
    expected = _signature(user_id, secret or settings.session_secret)
    if not hmac.compare_digest(expected, signature):
        return None
    return user_id


def extract_token(authorization: str | None, cookie: str | None) -> str | None:
    """Pick the session token from ``Authorization: Bearer`` or the cookie.

    The header wins when both are present.
    """
    if authorization:
        auth = authorization.strip()
        if auth.lower().startswith("bearer "):
            return auth[7:].strip()
    return cookie


def get_authenticated_user(db: Session, token: str | None) -> User:
    """Resolve the active user behind a session token.

    Raises:
        AuthenticationError: Missing/invalid token, unknown or inactive user
    """
    user_id = verify_session_token(token)
    if user_id is None:
        logger.warning("Missing or invalid session token")
        raise AuthenticationError()

    user = db.get(User, user_id)
    if not user or not user.is_active:
        logger.warning(f"Inactive or unknown user: user_id={user_id}")
        raise AuthenticationError()
    return user


def require_role(user: User, *roles: UserRole) -> User:
    """Raise ForbiddenError unless ``user`` holds one of ``roles``."""
    if user.role not in roles:
        logger.warning(
            f"User {user.id} with role {user.role.value} denied; needs one of "
            f"{[r.value for r in roles]}"
        )
        if roles == (UserRole.ADMIN,):
            raise ForbiddenError("Forbidden: Admin access required")
        raise ForbiddenError()
    return user
