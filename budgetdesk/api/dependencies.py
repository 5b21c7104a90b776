"""FastAPI dependencies for session authentication and role checks."""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from budgetdesk.config import settings
from budgetdesk.database import get_db
from budgetdesk.models.user import User, UserRole
from budgetdesk.services.auth_service import (
    extract_token,
    get_authenticated_user,
    require_role,
)


def get_current_user(
    request: Request,
    authorization: str | None = Header(None, alias="Authorization"),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> User:
    """Resolve the signed-in user from the bearer token or session cookie.

    Raises:
        AuthenticationError: 401 when no valid session is present
    """
    token = extract_token(authorization, request.cookies.get(settings.session_cookie_name))
    return get_authenticated_user(db, token)


def require_admin(user: User = Depends(get_current_user)) -> User:  # noqa: B008
    return require_role(user, UserRole.ADMIN)


def require_roles(*roles: UserRole):
    """Build a dependency that admits only users holding one of ``roles``."""

    def dependency(user: User = Depends(get_current_user)) -> User:  # noqa: B008
        return require_role(user, *roles)

    return dependency
