"""Admin authentication state and session-change notifications."""

import logging
from collections.abc import Callable
from enum import Enum

from restaurant_menu_site.models.admin_models import AuthSession
from restaurant_menu_site.services.data_service_client import DataServiceClient, SignInResult

logger = logging.getLogger(__name__)

SessionListener = Callable[[AuthSession | None], None]


class AuthState(str, Enum):
    """Authentication state of one admin client."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class NotAuthenticatedError(Exception):
    """Raised when an operation needs a signed-in admin and there is none."""


class Subscription:
    """Handle returned by ``AuthService.subscribe``."""

    def __init__(self, auth_service: "AuthService", listener: SessionListener) -> None:
        self._auth_service = auth_service
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        """Stop receiving session changes. Safe to call more than once."""
        if self.active:
            self._auth_service._listeners.remove(self._listener)
            self.active = False


class AuthService:
    """Tracks one admin client's session and notifies subscribers when it changes.

    There are two states. Signing in moves to AUTHENTICATED; signing out, or
    a session change pushed through ``set_session(None)``, moves back to
    UNAUTHENTICATED. Listeners are called synchronously with the new session
    (or None) on every change.
    """

    def __init__(self, data_service_client: DataServiceClient) -> None:
        """Initialize the auth service.

        Args:
            data_service_client: Client for the sign-in and sign-out endpoints
        """
        self.data_service_client = data_service_client
        self._session: AuthSession | None = None
        self._listeners: list[SessionListener] = []

    @property
    def session(self) -> AuthSession | None:
        return self._session

    @property
    def state(self) -> AuthState:
        return AuthState.AUTHENTICATED if self._session else AuthState.UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    def require_session(self) -> AuthSession:
        """Return the current session.

        Raises:
            NotAuthenticatedError: If no admin is signed in
        """
        if self._session is None:
            raise NotAuthenticatedError("Admin session required")
        return self._session

    def subscribe(self, listener: SessionListener) -> Subscription:
        """Register a listener for session changes.

        Args:
            listener: Called with the new session, or None after sign-out

        Returns:
            Subscription whose ``unsubscribe`` removes the listener
        """
        self._listeners.append(listener)
        return Subscription(self, listener)

    def set_session(self, session: AuthSession | None) -> None:
        """Replace the session and notify listeners if it changed."""
        changed = session != self._session
        self._session = session
        if not changed:
            return

        logger.info(f"Admin session changed: {self.state.value}")
        for listener in list(self._listeners):
            listener(session)

    async def sign_in(self, email: str, password: str) -> SignInResult:
        """Sign in with email and password.

        On failure the state is left unchanged.

        Returns:
            SignInResult from the data service
        """
        result = await self.data_service_client.sign_in(email, password)
        if result.session is not None:
            self.set_session(result.session)
        return result

    async def refresh(self) -> AuthSession:
        """Renew the session after the data service rejected its access token.

        A session that cannot be renewed is ended, which notifies listeners
        exactly like a sign-out.

        Returns:
            The renewed session

        Raises:
            NotAuthenticatedError: If there is no session or it could not be renewed
        """
        session = self.require_session()
        refreshed = await self.data_service_client.refresh_session(session)
        if refreshed is None:
            logger.warning("Admin session could not be refreshed, signing out")
            self.set_session(None)
            raise NotAuthenticatedError("Admin session expired")

        self.set_session(refreshed)
        return refreshed

    async def sign_out(self) -> None:
        """End the session locally and at the data service."""
        session = self._session
        if session is None:
            return

        if not await self.data_service_client.sign_out(session.access_token):
            logger.warning("Data service sign-out failed, clearing local session anyway")
        self.set_session(None)
