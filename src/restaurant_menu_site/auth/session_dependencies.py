"""FastAPI dependencies for admin authentication.

Admin endpoints only run for a client holding the id of an established
data service session.
"""

from fastapi import HTTPException

from restaurant_menu_site.models.admin_models import AuthSession
from restaurant_menu_site.services.admin_sessions import AdminContext, AdminSessionStore
from restaurant_menu_site.services.auth_service import AuthService, NotAuthenticatedError


def get_admin_session(auth_service: AuthService) -> AuthSession:
    """Return the established session of an admin client.

    Args:
        auth_service: AuthService of the requesting client

    Returns:
        AuthSession: The established session

    Raises:
        HTTPException: 401 if the client is not signed in
    """
    try:
        return auth_service.require_session()
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e


def get_admin_context(session_id: str | None, admin_sessions: AdminSessionStore) -> AdminContext:
    """Resolve the requesting client's admin context from its session id.

    A context whose session has ended (sign-out or failed refresh) is
    discarded.

    Args:
        session_id: Value of the admin session cookie, if any
        admin_sessions: Store of admin contexts

    Returns:
        AdminContext: The client's signed-in context

    Raises:
        HTTPException: 401 if the id is missing, unknown or no longer signed in
    """
    context = admin_sessions.get(session_id)
    if context is None:
        raise HTTPException(status_code=401, detail="Admin session required")

    try:
        get_admin_session(context.auth_service)
    except HTTPException:
        admin_sessions.discard(session_id)
        raise
    return context
