"""Main application entry point for the restaurant menu site.

This module provides the FastAPI application factory and configuration
for running the site locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from restaurant_menu_site.config import admin_cookie_secure, create_data_service_client
from restaurant_menu_site.handlers.api_handler import create_app
from restaurant_menu_site.observability import configure_logging, setup_observability
from restaurant_menu_site.services.admin_sessions import AdminSessionStore
from restaurant_menu_site.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the data service client
    3. Creates the catalog service and the per-client admin session store
    4. Creates the FastAPI app
    5. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing restaurant menu site...")

    data_service_client = create_data_service_client()

    catalog_service = CatalogService(data_service_client=data_service_client)
    admin_sessions = AdminSessionStore(data_service_client=data_service_client)

    logger.info("Services initialized")

    app = create_app(
        catalog_service=catalog_service,
        admin_sessions=admin_sessions,
        secure_cookies=admin_cookie_secure(),
    )

    setup_observability(app)

    logger.info("Restaurant menu site initialized successfully")
    return app


# The app is only built outside of test runs so that importing this module
# during test collection does not require data service configuration
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
