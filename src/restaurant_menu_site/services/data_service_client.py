"""Client for the hosted data service (REST tables plus password auth)."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from restaurant_menu_site.models.admin_models import AuthSession
from restaurant_menu_site.models.menu_models import MenuRow
from restaurant_menu_site.observability.decorators import traced

logger = logging.getLogger(__name__)

MENU_TABLE = "menu_items"


class SessionExpiredError(Exception):
    """Raised when the data service rejects an admin's access token."""


def _raise_if_unauthorized(error: httpx.HTTPStatusError) -> None:
    if error.response.status_code == 401:
        raise SessionExpiredError("Access token rejected by the data service") from error


@dataclass
class SignInResult:
    """Result of a password sign-in attempt.

    Attributes:
        session: The established session, None if sign-in failed
        error_message: Message to show next to the login form when sign-in failed
    """

    session: AuthSession | None
    error_message: str | None = None

    @property
    def success(self) -> bool:
        return self.session is not None


class DataServiceClient:
    """HTTP client for the menu table and auth endpoints of the data service.

    Reads use the public anon key. Admin reads and updates additionally send
    the signed-in user's access token. Failures are logged and reported as
    None/False so callers can keep their current state.
    """

    def __init__(self, base_url: str, anon_key: str, timeout_seconds: float = 10.0) -> None:
        """Initialize the data service client.

        Args:
            base_url: Project URL of the data service (e.g., "https://xyz.example.co")
            anon_key: Public anon key sent with every request
            timeout_seconds: Per-request timeout
        """
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout_seconds = timeout_seconds

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{MENU_TABLE}"

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
        }

    async def _fetch_rows(self, params: dict[str, str], access_token: str | None = None) -> list[MenuRow]:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.get(
                self.table_url, params=params, headers=self._headers(access_token)
            )
            response.raise_for_status()
            return [MenuRow(**row) for row in response.json()]

    @traced("data_service.list_available_items", timed=True)
    async def list_available_items(self) -> list[MenuRow] | None:
        """Fetch available menu rows ordered by display rank.

        Returns:
            List of rows (possibly empty), or None on failure
        """
        params = {"select": "*", "is_available": "eq.true", "order": "display_order.asc"}
        try:
            return await self._fetch_rows(params)
        except (httpx.HTTPStatusError, httpx.RequestError, ValidationError) as e:
            logger.error(f"Error fetching menu items: {e}")
            return None

    @traced("data_service.get_item_by_id", timed=True)
    async def get_item_by_id(self, item_id: str) -> MenuRow | None:
        """Fetch a single menu row.

        Args:
            item_id: The row id

        Returns:
            The row, or None if it does not exist or the fetch failed
        """
        params = {"select": "*", "id": f"eq.{item_id}"}
        try:
            rows = await self._fetch_rows(params)
        except (httpx.HTTPStatusError, httpx.RequestError, ValidationError) as e:
            logger.error(f"Error fetching menu item {item_id}: {e}")
            return None

        return rows[0] if rows else None

    @traced("data_service.list_all_items", timed=True)
    async def list_all_items(self, access_token: str) -> list[MenuRow] | None:
        """Fetch every menu row, available or not, ordered by display rank.

        Args:
            access_token: Token of the signed-in admin

        Returns:
            List of rows (possibly empty), or None on failure

        Raises:
            SessionExpiredError: If the access token is rejected
        """
        params = {"select": "*", "order": "display_order.asc"}
        try:
            return await self._fetch_rows(params, access_token)
        except httpx.HTTPStatusError as e:
            _raise_if_unauthorized(e)
            logger.error(f"Error fetching admin rows: {e}")
            return None
        except (httpx.RequestError, ValidationError) as e:
            logger.error(f"Error fetching admin rows: {e}")
            return None

    @traced("data_service.update_item", timed=True)
    async def update_item(
        self, item_id: str, fields: dict[str, Any], access_token: str
    ) -> MenuRow | None:
        """Partially update a row and return the full updated record.

        Args:
            item_id: The row id
            fields: Columns to change
            access_token: Token of the signed-in admin

        Returns:
            The updated row, or None on failure or when no row matched

        Raises:
            SessionExpiredError: If the access token is rejected
        """
        headers = self._headers(access_token)
        headers["Prefer"] = "return=representation"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.patch(
                    self.table_url,
                    params={"id": f"eq.{item_id}"},
                    json=fields,
                    headers=headers,
                )
                response.raise_for_status()
                rows = response.json()
        except httpx.HTTPStatusError as e:
            _raise_if_unauthorized(e)
            logger.error(f"Error updating menu item {item_id}: {e}")
            return None
        except httpx.RequestError as e:
            logger.error(f"Error updating menu item {item_id}: {e}")
            return None

        if not rows:
            logger.error(f"Update of menu item {item_id} matched no rows")
            return None

        try:
            return MenuRow(**rows[0])
        except ValidationError as e:
            logger.error(f"Invalid row returned for menu item {item_id}: {e}")
            return None

    async def _request_token(
        self, grant_type: str, body: dict[str, str]
    ) -> tuple[httpx.Response, dict[str, Any]]:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.post(
                f"{self.base_url}/auth/v1/token",
                params={"grant_type": grant_type},
                json=body,
                headers={"apikey": self.anon_key},
            )

        try:
            data = response.json()
        except ValueError:
            data = None
        return response, data if isinstance(data, dict) else {}

    @traced("data_service.sign_in", timed=True)
    async def sign_in(self, email: str, password: str) -> SignInResult:
        """Sign in with email and password.

        Args:
            email: Admin email
            password: Admin password

        Returns:
            SignInResult with the session, or with the service's error message
        """
        try:
            response, data = await self._request_token("password", {"email": email, "password": password})
        except httpx.RequestError as e:
            logger.error(f"Sign-in request failed: {e}")
            return SignInResult(session=None, error_message=str(e))

        if response.status_code != 200:
            message = (
                data.get("msg")
                or data.get("error_description")
                or data.get("error")
                or f"Sign-in failed ({response.status_code})"
            )
            logger.warning(f"Sign-in rejected: {message}")
            return SignInResult(session=None, error_message=message)

        session = _session_from_token_response(data, email)
        if session is None:
            logger.error("Sign-in response did not contain a usable session")
            return SignInResult(session=None, error_message="Sign-in failed: no session returned")
        return SignInResult(session=session)

    @traced("data_service.refresh_session", timed=True)
    async def refresh_session(self, session: AuthSession) -> AuthSession | None:
        """Exchange the session's refresh token for a new access token.

        Args:
            session: The session whose access token was rejected

        Returns:
            The renewed session, or None if it cannot be renewed
        """
        if not session.refresh_token:
            return None

        try:
            response, data = await self._request_token(
                "refresh_token", {"refresh_token": session.refresh_token}
            )
        except httpx.RequestError as e:
            logger.error(f"Session refresh request failed: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Session refresh rejected ({response.status_code})")
            return None

        return _session_from_token_response(data, session.user_email)

    @traced("data_service.sign_out", timed=True)
    async def sign_out(self, access_token: str) -> bool:
        """Revoke the session at the data service.

        Args:
            access_token: Token of the session to end

        Returns:
            True if the service accepted the sign-out, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    f"{self.base_url}/auth/v1/logout", headers=self._headers(access_token)
                )
                response.raise_for_status()
                return True
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Sign-out request failed: {e}")
            return False


def _session_from_token_response(data: dict[str, Any], fallback_email: str | None) -> AuthSession | None:
    """Build a session from a token grant response, or None if it carries no access token."""
    user = data.get("user")
    try:
        return AuthSession(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            user_email=user.get("email", fallback_email) if isinstance(user, dict) else fallback_email,
        )
    except (KeyError, ValidationError) as e:
        logger.error(f"Malformed token response: {e!r}")
        return None
