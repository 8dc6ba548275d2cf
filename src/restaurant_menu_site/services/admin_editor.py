"""Admin row editor: loads every row and commits edits one row at a time."""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from restaurant_menu_site.models.admin_models import AuthSession, EditableField, parse_image_urls
from restaurant_menu_site.observability.metrics import record_admin_update
from restaurant_menu_site.services.admin_state import (
    EditField,
    EditorAction,
    EditorState,
    LoadRows,
    RowState,
    SaveError,
    SaveStart,
    SaveSuccess,
    StatusExpired,
    ToggleError,
    ToggleStart,
    ToggleSuccess,
    reduce,
)
from restaurant_menu_site.services.auth_service import AuthService, NotAuthenticatedError, Subscription
from restaurant_menu_site.services.data_service_client import DataServiceClient, SessionExpiredError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RowNotFoundError(KeyError):
    """Raised when no edit buffer exists for a row id."""


class SaveInProgressError(Exception):
    """Raised when a save is requested while one is in flight for the same row."""


class AdminEditor:
    """Editor over all menu rows for a signed-in admin.

    Holds one edit buffer per loaded row. Text edits stay local until
    ``save_row``; ``toggle_availability`` commits immediately and reverts
    the buffer if the data service rejects it. Rows are only fetched while
    authenticated, and a sign-out discards the rows along with any response
    still in flight. A rejected access token is refreshed once and the call
    retried.
    """

    def __init__(
        self,
        data_service_client: DataServiceClient,
        auth_service: AuthService,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the editor.

        Args:
            data_service_client: Client for reading and updating rows
            auth_service: Source of the admin session
            clock: Monotonic clock used for transient status expiry
        """
        self.data_service_client = data_service_client
        self.auth_service = auth_service
        self.clock = clock
        self.state: EditorState = {}
        self.loaded = False
        self._generation = 0
        self._subscription: Subscription | None = None

    def attach(self) -> None:
        """Start following session changes."""
        if self._subscription is None:
            self._subscription = self.auth_service.subscribe(self._on_session_change)

    def detach(self) -> None:
        """Stop following session changes and drop all rows."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._reset()

    def _on_session_change(self, session: AuthSession | None) -> None:
        if session is None:
            logger.info("Admin signed out, discarding editor rows")
            self._reset()

    def _reset(self) -> None:
        self._generation += 1
        self.state = {}
        self.loaded = False

    def _dispatch(self, action: EditorAction) -> None:
        self.state = reduce(self.state, action)

    def _require_row(self, row_id: str) -> RowState:
        row_state = self.state.get(row_id)
        if row_state is None:
            raise RowNotFoundError(row_id)
        return row_state

    async def _authorized(self, request: Callable[[str], Awaitable[T]]) -> T:
        """Run an authenticated data service call, refreshing an expired token once.

        Raises:
            NotAuthenticatedError: If there is no session or it cannot be renewed
        """
        session = self.auth_service.require_session()
        try:
            return await request(session.access_token)
        except SessionExpiredError:
            logger.info("Access token rejected, refreshing admin session")

        refreshed = await self.auth_service.refresh()
        try:
            return await request(refreshed.access_token)
        except SessionExpiredError as e:
            self.auth_service.set_session(None)
            raise NotAuthenticatedError("Admin session expired") from e

    async def load(self) -> bool:
        """Fetch all rows and seed one edit buffer per row.

        Returns:
            True if rows were loaded, False if the fetch failed or was discarded

        Raises:
            NotAuthenticatedError: If no admin is signed in or the session expired
        """
        self.auth_service.require_session()
        generation = self._generation

        rows = await self._authorized(self.data_service_client.list_all_items)

        if generation != self._generation:
            logger.info("Session changed during row fetch, discarding response")
            return False
        if rows is None:
            logger.error("Failed to load admin rows")
            return False

        self._dispatch(LoadRows(rows=tuple(rows)))
        self.loaded = True
        logger.info(f"Admin editor loaded {len(rows)} rows")
        return True

    def rows(self) -> list[RowState]:
        """Row states in display order, with expired statuses cleared."""
        self._dispatch(StatusExpired(now=self.clock()))
        return list(self.state.values())

    def get_row(self, row_id: str) -> RowState:
        self._dispatch(StatusExpired(now=self.clock()))
        return self._require_row(row_id)

    def can_save(self, row_id: str) -> bool:
        """Whether the row has unsaved changes and no save in flight."""
        return self._require_row(row_id).can_save

    def edit_field(self, row_id: str, field: EditableField, value: str | bool) -> RowState:
        """Change one field of a row's buffer. Never touches the network.

        Raises:
            RowNotFoundError: If the row is not loaded
            ValueError: If the field or value is invalid
        """
        self._require_row(row_id)
        self._dispatch(EditField(row_id=row_id, field=field, value=value))
        return self.state[row_id]

    async def save_row(self, row_id: str) -> bool:
        """Commit a row's buffered image list and availability.

        On failure the buffer keeps what the admin typed so the save can be
        retried.

        Returns:
            True if the data service accepted the update

        Raises:
            RowNotFoundError: If the row is not loaded
            SaveInProgressError: If a save for this row is already in flight
            NotAuthenticatedError: If no admin is signed in or the session expired
        """
        row_state = self._require_row(row_id)
        if row_state.saving:
            raise SaveInProgressError(row_id)
        self.auth_service.require_session()

        fields = {
            "image_urls": parse_image_urls(row_state.buffer.image_urls),
            "is_available": row_state.buffer.is_available,
        }
        generation = self._generation
        self._dispatch(SaveStart(row_id=row_id))

        updated = await self._authorized(
            lambda token: self.data_service_client.update_item(row_id, fields, token)
        )

        if generation != self._generation:
            return False
        if updated is None:
            logger.error(f"Failed to save row {row_id}")
            self._dispatch(SaveError(row_id=row_id, now=self.clock()))
            record_admin_update("save", success=False)
            return False

        self._dispatch(SaveSuccess(row_id=row_id, row=updated, now=self.clock()))
        record_admin_update("save", success=True)
        return True

    async def toggle_availability(self, row_id: str, value: bool) -> bool:
        """Optimistically set availability and commit that field alone.

        The buffer shows the new value before the request is sent. If the
        data service rejects the update the previous value is restored.

        Returns:
            True if the data service accepted the update

        Raises:
            RowNotFoundError: If the row is not loaded
            NotAuthenticatedError: If no admin is signed in or the session expired
        """
        row_state = self._require_row(row_id)
        self.auth_service.require_session()
        previous_value = row_state.buffer.is_available

        generation = self._generation
        self._dispatch(ToggleStart(row_id=row_id, value=value))

        updated = await self._authorized(
            lambda token: self.data_service_client.update_item(row_id, {"is_available": value}, token)
        )

        if generation != self._generation:
            return False
        if updated is None:
            logger.error(f"Failed to toggle availability of row {row_id}, reverting")
            self._dispatch(ToggleError(row_id=row_id, previous_value=previous_value, now=self.clock()))
            record_admin_update("toggle", success=False)
            return False

        self._dispatch(ToggleSuccess(row_id=row_id, row=updated, now=self.clock()))
        record_admin_update("toggle", success=True)
        return True
