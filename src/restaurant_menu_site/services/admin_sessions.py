"""Per-client admin sessions.

Each admin client that signs in gets its own ``AuthService`` and
``AdminEditor``, keyed by an opaque session id that the client holds in an
HttpOnly cookie. Requests without a known id never see another admin's
session, rows or access token.
"""

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass

from restaurant_menu_site.services.admin_editor import AdminEditor
from restaurant_menu_site.services.auth_service import AuthService
from restaurant_menu_site.services.data_service_client import DataServiceClient

logger = logging.getLogger(__name__)

ADMIN_SESSION_COOKIE = "adminSession"


@dataclass
class AdminContext:
    """Session state and row editor of one admin client."""

    auth_service: AuthService
    admin_editor: AdminEditor


class AdminSessionStore:
    """Admin contexts keyed by session id."""

    def __init__(
        self,
        data_service_client: DataServiceClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the store.

        Args:
            data_service_client: Client shared by every admin context
            clock: Monotonic clock handed to each editor for status expiry
        """
        self.data_service_client = data_service_client
        self.clock = clock
        self._contexts: dict[str, AdminContext] = {}

    def __len__(self) -> int:
        return len(self._contexts)

    def create(self) -> tuple[str, AdminContext]:
        """Create a signed-out context whose editor follows its own session.

        Returns:
            The new session id and its context
        """
        auth_service = AuthService(data_service_client=self.data_service_client)
        admin_editor = AdminEditor(
            data_service_client=self.data_service_client,
            auth_service=auth_service,
            clock=self.clock,
        )
        admin_editor.attach()

        session_id = secrets.token_urlsafe(32)
        context = AdminContext(auth_service=auth_service, admin_editor=admin_editor)
        self._contexts[session_id] = context
        return session_id, context

    def get(self, session_id: str | None) -> AdminContext | None:
        if not session_id:
            return None
        return self._contexts.get(session_id)

    def discard(self, session_id: str | None) -> None:
        """Drop a context and detach its editor. Unknown ids are ignored."""
        if not session_id:
            return
        context = self._contexts.pop(session_id, None)
        if context is not None:
            context.admin_editor.detach()
            logger.info("Admin session discarded")

    def close(self) -> None:
        """Discard every context."""
        for session_id in list(self._contexts):
            self.discard(session_id)
