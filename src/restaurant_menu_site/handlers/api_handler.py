"""FastAPI application for the public menu and the admin editor."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Cookie, Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from restaurant_menu_site.auth.session_dependencies import get_admin_context
from restaurant_menu_site.models.admin_models import EditableField, RowStatusEnum
from restaurant_menu_site.models.menu_models import Category, Language, MenuItem
from restaurant_menu_site.services.admin_editor import (
    AdminEditor,
    RowNotFoundError,
    SaveInProgressError,
)
from restaurant_menu_site.services.admin_sessions import (
    ADMIN_SESSION_COOKIE,
    AdminContext,
    AdminSessionStore,
)
from restaurant_menu_site.services.admin_state import RowState
from restaurant_menu_site.services.auth_service import NotAuthenticatedError
from restaurant_menu_site.services.carousel import ImageCarousel
from restaurant_menu_site.services.catalog_service import CatalogService
from restaurant_menu_site.services.i18n_service import (
    LANGUAGE_COOKIE,
    LANGUAGE_COOKIE_MAX_AGE,
    empty_state_message,
    message,
    resolve_language,
    toggle_language,
)

logger = logging.getLogger(__name__)

MENU_PATH = "/menu"


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class CategoryResponse(BaseModel):
    en: str
    cn: str
    label: str
    selected: bool


class MenuItemResponse(BaseModel):
    """Menu card in the selected language."""

    id: str
    name: str
    secondary_name: str
    category_en: str
    category: str
    price: str
    display_price: str
    images: list[str]
    ingredients: str


class MenuResponse(BaseModel):
    language: Language
    category: str
    query: str
    categories: list[CategoryResponse]
    items: list[MenuItemResponse]
    message: str | None = None


class ProductDetailResponse(BaseModel):
    """Product detail with the carousel position."""

    item: MenuItemResponse
    language: Language
    image_index: int
    current_image: str
    previous_index: int
    next_index: int
    has_carousel: bool
    back_to: str


class LanguageResponse(BaseModel):
    language: Language


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    authenticated: bool
    email: str | None = None


class AdminRowResponse(BaseModel):
    """Editable admin row as rendered in the table."""

    id: str
    name_en: str
    name_cn: str
    image_urls: str
    is_available: bool
    saving: bool
    toggling: bool
    dirty: bool
    can_save: bool
    status: RowStatusEnum | None = None


class EditFieldRequest(BaseModel):
    field: EditableField
    value: str | bool


class AvailabilityRequest(BaseModel):
    is_available: bool


class RowCommitResponse(BaseModel):
    success: bool
    row: AdminRowResponse


def _item_response(item: MenuItem, language: Language) -> MenuItemResponse:
    return MenuItemResponse(
        id=item.id,
        name=item.localized_name(language),
        secondary_name=item.secondary_name(language),
        category_en=item.category_en,
        category=item.localized_category(language),
        price=str(item.price),
        display_price=item.display_price,
        images=list(item.images),
        ingredients=item.localized_ingredients(language),
    )


def _category_response(category: Category, language: Language, selected: str) -> CategoryResponse:
    return CategoryResponse(
        en=category.en, cn=category.cn, label=category.label(language), selected=category.en == selected
    )


def _row_response(row_state: RowState, now: float) -> AdminRowResponse:
    return AdminRowResponse(
        id=row_state.persisted.id,
        name_en=row_state.persisted.name_en,
        name_cn=row_state.persisted.name_cn,
        image_urls=row_state.buffer.image_urls,
        is_available=row_state.buffer.is_available,
        saving=row_state.saving,
        toggling=row_state.toggling,
        dirty=row_state.is_dirty,
        can_save=row_state.can_save,
        status=row_state.visible_status(now),
    )


def create_app(
    catalog_service: CatalogService,
    admin_sessions: AdminSessionStore,
    secure_cookies: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        catalog_service: Loaded menu and filtering
        admin_sessions: Per-client admin contexts, discarded at shutdown
        secure_cookies: Mark the admin session cookie as HTTPS-only

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        app.state.admin_sessions.close()
        logger.info("Admin sessions closed")

    app = FastAPI(
        title="Restaurant Menu Site API",
        description="Bilingual menu browsing and admin editing backed by the hosted data service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.catalog_service = catalog_service
    app.state.admin_sessions = admin_sessions

    def current_language(selected_language: str | None = Cookie(None, alias=LANGUAGE_COOKIE)) -> Language:
        """Dependency reading the stored language preference."""
        return resolve_language(selected_language)

    def admin_context(
        admin_session_id: str | None = Cookie(None, alias=ADMIN_SESSION_COOKIE),
    ) -> AdminContext:
        """Dependency resolving the requesting client's signed-in admin context."""
        return get_admin_context(admin_session_id, app.state.admin_sessions)

    def lookup_row(editor: AdminEditor, row_id: str) -> RowState:
        try:
            return editor.get_row(row_id)
        except RowNotFoundError as e:
            raise HTTPException(status_code=404, detail=f"Row {row_id} not found") from e

    @app.exception_handler(NotAuthenticatedError)
    async def session_expired(request: Request, exc: NotAuthenticatedError) -> JSONResponse:
        """An admin session that ended mid-request is dropped and the client must sign in again."""
        app.state.admin_sessions.discard(request.cookies.get(ADMIN_SESSION_COOKIE))
        response = JSONResponse(status_code=401, content={"detail": str(exc)})
        response.delete_cookie(ADMIN_SESSION_COOKIE)
        return response

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.get("/api/menu", response_model=MenuResponse, tags=["Menu"])
    async def get_menu(
        category: str = "All",
        q: str = "",
        language: Language = Depends(current_language),
    ) -> MenuResponse:
        """List available items filtered by category and search text.

        The catalog is fetched once and then filtered in memory.
        """
        catalog: CatalogService = app.state.catalog_service
        await catalog.ensure_loaded()

        items = catalog.filter(category=category, query=q)
        return MenuResponse(
            language=language,
            category=category,
            query=q,
            categories=[_category_response(c, language, category) for c in catalog.categories],
            items=[_item_response(item, language) for item in items],
            message=None if items else empty_state_message(language, q),
        )

    @app.post("/api/menu/reload", response_model=MenuResponse, tags=["Menu"])
    async def reload_menu(language: Language = Depends(current_language)) -> MenuResponse:
        """Fetch the catalog again. A failed fetch keeps the previous items."""
        await app.state.catalog_service.load()
        return await get_menu(category="All", q="", language=language)

    @app.get("/api/menu/{item_id}", response_model=ProductDetailResponse, tags=["Menu"])
    async def get_product(
        item_id: str,
        image: int = 0,
        language: Language = Depends(current_language),
    ) -> ProductDetailResponse:
        """Product detail view.

        Raises:
            HTTPException: 404 with a link back to the menu if the item does not exist
        """
        item = await app.state.catalog_service.get_item(item_id)
        if item is None:
            raise HTTPException(
                status_code=404,
                detail={
                    "message": message("product_not_found", language),
                    "back_to": MENU_PATH,
                    "back_label": message("back_to_menu", language),
                },
            )

        carousel = ImageCarousel(len(item.images), image)
        return ProductDetailResponse(
            item=_item_response(item, language),
            language=language,
            image_index=carousel.index,
            current_image=item.images[carousel.index],
            previous_index=carousel.previous_index,
            next_index=carousel.next_index,
            has_carousel=carousel.has_controls,
            back_to=MENU_PATH,
        )

    @app.post("/api/language/toggle", response_model=LanguageResponse, tags=["Preferences"])
    async def switch_language(
        response: Response,
        language: Language = Depends(current_language),
    ) -> LanguageResponse:
        """Flip the language preference and persist it in the client cookie."""
        new_language = toggle_language(language)
        response.set_cookie(LANGUAGE_COOKIE, new_language, max_age=LANGUAGE_COOKIE_MAX_AGE)
        return LanguageResponse(language=new_language)

    @app.get("/admin/session", response_model=SessionResponse, tags=["Admin"])
    async def get_session(
        admin_session_id: str | None = Cookie(None, alias=ADMIN_SESSION_COOKIE),
    ) -> SessionResponse:
        context = app.state.admin_sessions.get(admin_session_id)
        session = context.auth_service.session if context else None
        return SessionResponse(authenticated=session is not None, email=session.user_email if session else None)

    @app.post("/admin/login", response_model=SessionResponse, tags=["Admin"])
    async def login(
        credentials: LoginRequest,
        response: Response,
        admin_session_id: str | None = Cookie(None, alias=ADMIN_SESSION_COOKIE),
    ) -> SessionResponse:
        """Sign in, hand the client its session cookie and load the admin rows.

        Raises:
            HTTPException: 401 carrying the data service's message on failure
        """
        admin_sessions: AdminSessionStore = app.state.admin_sessions
        admin_sessions.discard(admin_session_id)

        session_id, context = admin_sessions.create()
        result = await context.auth_service.sign_in(credentials.email, credentials.password)
        if not result.success:
            admin_sessions.discard(session_id)
            raise HTTPException(status_code=401, detail=result.error_message or "Sign-in failed")

        logger.info(f"Admin signed in: {result.session.user_email}")
        response.set_cookie(
            ADMIN_SESSION_COOKIE,
            session_id,
            httponly=True,
            samesite="lax",
            secure=secure_cookies,
        )
        await context.admin_editor.load()
        return SessionResponse(authenticated=True, email=result.session.user_email)

    @app.post("/admin/logout", response_model=SessionResponse, tags=["Admin"])
    async def logout(
        response: Response,
        admin_session_id: str | None = Cookie(None, alias=ADMIN_SESSION_COOKIE),
    ) -> SessionResponse:
        context = app.state.admin_sessions.get(admin_session_id)
        if context is not None:
            await context.auth_service.sign_out()
            app.state.admin_sessions.discard(admin_session_id)
        response.delete_cookie(ADMIN_SESSION_COOKIE)
        return SessionResponse(authenticated=False)

    @app.get("/admin/rows", response_model=list[AdminRowResponse], tags=["Admin"])
    async def list_rows(context: AdminContext = Depends(admin_context)) -> list[AdminRowResponse]:
        """All rows, available or not, with their edit buffers."""
        editor = context.admin_editor
        if not editor.loaded:
            await editor.load()
        now = editor.clock()
        return [_row_response(row_state, now) for row_state in editor.rows()]

    @app.post("/admin/rows/refresh", response_model=list[AdminRowResponse], tags=["Admin"])
    async def refresh_rows(context: AdminContext = Depends(admin_context)) -> list[AdminRowResponse]:
        editor = context.admin_editor
        await editor.load()
        now = editor.clock()
        return [_row_response(row_state, now) for row_state in editor.rows()]

    @app.patch("/admin/rows/{row_id}", response_model=AdminRowResponse, tags=["Admin"])
    async def edit_row(
        row_id: str,
        edit: EditFieldRequest,
        context: AdminContext = Depends(admin_context),
    ) -> AdminRowResponse:
        """Change one buffered field. Nothing is sent to the data service."""
        editor = context.admin_editor
        lookup_row(editor, row_id)
        try:
            row_state = editor.edit_field(row_id, edit.field, edit.value)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return _row_response(row_state, editor.clock())

    @app.post("/admin/rows/{row_id}/save", response_model=RowCommitResponse, tags=["Admin"])
    async def save_row(row_id: str, context: AdminContext = Depends(admin_context)) -> RowCommitResponse:
        """Commit the row's image list and availability.

        Raises:
            HTTPException: 404 for an unknown row, 409 while a save is in flight
        """
        editor = context.admin_editor
        lookup_row(editor, row_id)
        try:
            success = await editor.save_row(row_id)
        except SaveInProgressError as e:
            raise HTTPException(status_code=409, detail=f"Save already in progress for {row_id}") from e

        return RowCommitResponse(success=success, row=_row_response(lookup_row(editor, row_id), editor.clock()))

    @app.post("/admin/rows/{row_id}/availability", response_model=RowCommitResponse, tags=["Admin"])
    async def set_availability(
        row_id: str,
        body: AvailabilityRequest,
        context: AdminContext = Depends(admin_context),
    ) -> RowCommitResponse:
        """Toggle availability immediately; reverted if the update fails."""
        editor = context.admin_editor
        lookup_row(editor, row_id)
        success = await editor.toggle_availability(row_id, body.is_available)
        return RowCommitResponse(success=success, row=_row_response(lookup_row(editor, row_id), editor.clock()))

    return app
