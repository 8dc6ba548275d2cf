"""Environment configuration shared by the local server and the Lambda handler."""

import logging
import os

from restaurant_menu_site.services.data_service_client import DataServiceClient

logger = logging.getLogger(__name__)

# First non-empty name wins. The NEXT_PUBLIC_SUPABASE_* and VITE_SUPABASE_*
# names are the ones front-end builds already define.
DATA_SERVICE_URL_VARS = ("DATA_SERVICE_URL", "NEXT_PUBLIC_SUPABASE_URL", "VITE_SUPABASE_URL")
DATA_SERVICE_ANON_KEY_VARS = (
    "DATA_SERVICE_ANON_KEY",
    "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    "VITE_SUPABASE_PUBLISHABLE_KEY",
)


def get_env_var(*names: str) -> str | None:
    """Return the first non-empty environment variable among ``names``."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def admin_cookie_secure() -> bool:
    """Whether the admin session cookie is restricted to HTTPS (ADMIN_COOKIE_SECURE)."""
    return os.getenv("ADMIN_COOKIE_SECURE", "false").lower() in ("1", "true", "yes")


def create_data_service_client() -> DataServiceClient:
    """Create the data service client from environment variables.

    Returns:
        Configured DataServiceClient

    Raises:
        ValueError: If the URL or anon key is missing
    """
    base_url = get_env_var(*DATA_SERVICE_URL_VARS)
    anon_key = get_env_var(*DATA_SERVICE_ANON_KEY_VARS)

    if not base_url or not anon_key:
        raise ValueError("DATA_SERVICE_URL and DATA_SERVICE_ANON_KEY must be set in environment")

    timeout = float(os.getenv("DATA_SERVICE_TIMEOUT_SECONDS", "10"))
    logger.info(f"Data service client configured - URL: {base_url}")
    return DataServiceClient(base_url=base_url, anon_key=anon_key, timeout_seconds=timeout)
