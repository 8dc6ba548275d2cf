"""Shared dependency factory for the Lambda handler.

Dependencies are created once per Lambda container and reused across
invocations, so the loaded catalog survives warm starts. Admin sessions
live in the container that signed them in; a request routed to another
container has to sign in again.
"""

import logging
import os

from fastapi import FastAPI

from restaurant_menu_site.config import admin_cookie_secure, create_data_service_client
from restaurant_menu_site.handlers.api_handler import create_app
from restaurant_menu_site.observability import configure_logging
from restaurant_menu_site.services.admin_sessions import AdminSessionStore
from restaurant_menu_site.services.catalog_service import CatalogService
from restaurant_menu_site.services.data_service_client import DataServiceClient

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_data_service_client: DataServiceClient | None = None
_catalog_service: CatalogService | None = None
_admin_sessions: AdminSessionStore | None = None
_fastapi_app: FastAPI | None = None


def get_data_service_client() -> DataServiceClient:
    """Create or retrieve the cached data service client.

    Reads the same variables as the local server, front-end fallbacks included.

    Raises:
        ValueError: If the data service URL or anon key is missing
    """
    global _data_service_client

    if _data_service_client is None:
        _data_service_client = create_data_service_client()
        logger.info("Data service client initialized")

    return _data_service_client


def get_catalog_service() -> CatalogService:
    """Create or retrieve the cached catalog service."""
    global _catalog_service

    if _catalog_service is None:
        _catalog_service = CatalogService(data_service_client=get_data_service_client())
        logger.info("Catalog service initialized")

    return _catalog_service


def get_admin_sessions() -> AdminSessionStore:
    """Create or retrieve the cached admin session store."""
    global _admin_sessions

    if _admin_sessions is None:
        _admin_sessions = AdminSessionStore(data_service_client=get_data_service_client())
        logger.info("Admin session store initialized")

    return _admin_sessions


def get_fastapi_app() -> FastAPI:
    """Create or retrieve the cached FastAPI application."""
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    _fastapi_app = create_app(
        catalog_service=get_catalog_service(),
        admin_sessions=get_admin_sessions(),
        secure_cookies=admin_cookie_secure(),
    )

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Initialize logging. Called once during Lambda cold start."""
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Lambda environment initialized")
