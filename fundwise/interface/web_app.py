"""Mini README: FastAPI application serving the Fundwise API and public view.

Structure:
    * create_application - application factory wiring the ledger, the
      credential store, the admin session registry and all routes.
    * Access dependencies - build an ``AccessContext`` per request from the
      session cookie and an optional ``X-Collection-Key`` header.

Public routes expose years, stats and expenses. Collection entries are only
returned when the access gate is open. Mutating routes require an admin
session. Domain errors become 400/404/409 responses, failed persistence a 503
with a generic message, and failed credential checks a 401 carrying
``{"success": false, "error": ...}``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from ..auth import (
    AccessContext,
    AuthResult,
    CredentialStore,
    SessionRegistry,
    ValidationFailure,
    validate_new_secret,
)
from ..configuration import FundwiseSettings, get_settings
from ..ledger import (
    EntryType,
    FundLedger,
    InMemoryRepository,
    JsonFileRepository,
    LedgerError,
    PersistenceError,
    UnknownYearError,
    YearClosedError,
    YearExistsError,
)
from ..logging_utils import get_logger
from .schemas import (
    CollectionKeyRequest,
    CollectionKeyUpdateRequest,
    EntryPayload,
    LoginRequest,
    PasswordUpdateRequest,
)

LOGGER = get_logger(__name__)


def _http_error(error: Exception) -> HTTPException:
    """Translate ledger and validation errors into HTTP errors."""

    if isinstance(error, PersistenceError):
        LOGGER.error("Storage unavailable: %s", error)
        return HTTPException(status_code=503, detail="Storage is unavailable, please try again later.")
    if isinstance(error, UnknownYearError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, (YearExistsError, YearClosedError)):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


def _auth_response(result: AuthResult) -> JSONResponse:
    return JSONResponse(result.as_dict(), status_code=200 if result.success else 401)


def _build_ledger(settings: FundwiseSettings) -> FundLedger:
    if settings.persist_ledger:
        return FundLedger(JsonFileRepository(settings.ledger_path))
    return FundLedger(InMemoryRepository())


def _build_credentials(settings: FundwiseSettings) -> CredentialStore:
    return CredentialStore(
        settings.credentials_path if settings.persist_ledger else None,
        default_username=settings.default_admin_username,
        default_password=settings.default_admin_password,
        default_collection_key=settings.default_collection_key,
    )


def create_application(
    settings: Optional[FundwiseSettings] = None,
    *,
    ledger: Optional[FundLedger] = None,
    credentials: Optional[CredentialStore] = None,
    sessions: Optional[SessionRegistry] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    ledger = ledger if ledger is not None else _build_ledger(settings)
    credentials = credentials if credentials is not None else _build_credentials(settings)
    sessions = sessions if sessions is not None else SessionRegistry()
    ledger.ensure_default_year()

    app = FastAPI(title="Fundwise", version="1.0.0")
    templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
    cookie_name = settings.session_cookie_name

    def access_context(
        request: Request,
        x_collection_key: Optional[str] = Header(None),
    ) -> AccessContext:
        context = sessions.context_for(request.cookies.get(cookie_name))
        if x_collection_key and credentials.verify_collection_key(x_collection_key).success:
            context = context.unlock_collections()
        return context

    def require_admin(context: AccessContext = Depends(access_context)) -> AccessContext:
        if not context.is_admin_session:
            raise HTTPException(status_code=401, detail="Admin session required.")
        return context

    def resolve_year_id(year: Optional[str]) -> Optional[str]:
        if year:
            return year
        latest = ledger.latest_year()
        return latest.id if latest else None

    # ------------------------------------------------------------------
    # Public views
    # ------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    async def transparency_view(
        request: Request,
        year: Optional[str] = Query(None),
        context: AccessContext = Depends(access_context),
    ) -> HTMLResponse:
        """Render the public financial summary for one fiscal year."""

        year_id = resolve_year_id(year)
        stats = ledger.stats(year_id) if year_id else None
        collections = (
            ledger.list_entries(year_id, EntryType.COLLECTION)
            if year_id and context.can_view_collections
            else []
        )
        LOGGER.debug("Rendering transparency view for year %s", year_id)
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "years": ledger.list_years(),
                "selected_year_id": year_id,
                "stats": stats.as_dict() if stats else None,
                "expenses": ledger.list_entries(year_id, EntryType.EXPENSE) if year_id else [],
                "collections": collections,
                "collections_visible": context.can_view_collections,
                "months": ledger.monthly_breakdown(year_id) if year_id else [],
            },
        )

    @app.get("/api/data")
    async def fetch_all(context: AccessContext = Depends(access_context)) -> JSONResponse:
        """Return every year and the entries the caller may see."""

        snapshot = ledger.snapshot()
        if not context.can_view_collections:
            snapshot["entries"] = [
                entry for entry in snapshot["entries"] if entry["type"] != EntryType.COLLECTION.value
            ]
        snapshot["collectionsVisible"] = context.can_view_collections
        return JSONResponse(snapshot)

    @app.get("/api/years")
    async def list_years() -> JSONResponse:
        return JSONResponse({"years": [year.as_dict() for year in ledger.list_years()]})

    @app.get("/api/years/{year_id}/stats")
    async def year_stats(year_id: str) -> JSONResponse:
        return JSONResponse(ledger.stats(year_id).as_dict())

    @app.get("/api/years/{year_id}/monthly")
    async def year_monthly(year_id: str) -> JSONResponse:
        return JSONResponse({"yearId": year_id, "months": ledger.monthly_breakdown(year_id)})

    @app.get("/api/years/{year_id}/entries")
    async def year_entries(
        year_id: str,
        entry_type: Optional[str] = Query(None, alias="type"),
        search: Optional[str] = Query(None),
        context: AccessContext = Depends(access_context),
    ) -> JSONResponse:
        """List a year's entries; collections stay hidden behind the gate."""

        try:
            parsed_type = EntryType.from_str(entry_type) if entry_type else None
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        if parsed_type is EntryType.COLLECTION and not context.can_view_collections:
            raise HTTPException(status_code=403, detail="The collection ledger is locked.")
        entries = ledger.list_entries(year_id, parsed_type, search)
        if not context.can_view_collections:
            entries = [entry for entry in entries if entry.type is EntryType.EXPENSE]
        return JSONResponse(
            {
                "yearId": year_id,
                "entries": [entry.as_dict() for entry in entries],
                "collectionsVisible": context.can_view_collections,
            }
        )

    # ------------------------------------------------------------------
    # Admin ledger management
    # ------------------------------------------------------------------

    @app.post("/api/entries")
    def save_entry(payload: EntryPayload, _: AccessContext = Depends(require_admin)) -> JSONResponse:
        try:
            stored = ledger.save_entry(payload.to_entry())
        except (LedgerError, ValueError) as error:
            raise _http_error(error) from error
        return JSONResponse({"success": True, "entry": stored.as_dict()})

    @app.delete("/api/entries/{entry_id}")
    def delete_entry(entry_id: str, _: AccessContext = Depends(require_admin)) -> JSONResponse:
        try:
            removed = ledger.delete_entry(entry_id)
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse({"success": True, "removed": removed})

    @app.post("/api/years/next")
    def create_next_year(_: AccessContext = Depends(require_admin)) -> JSONResponse:
        try:
            year = ledger.create_next_year()
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse({"success": True, "year": year.as_dict()})

    @app.post("/api/years/{year_id}/close")
    def close_year(year_id: str, _: AccessContext = Depends(require_admin)) -> JSONResponse:
        try:
            year = ledger.close_year(year_id)
        except LedgerError as error:
            raise _http_error(error) from error
        return JSONResponse({"success": True, "year": year.as_dict()})

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @app.post("/api/login")
    def login(payload: LoginRequest) -> JSONResponse:
        result = credentials.login(payload.username, payload.password)
        response = _auth_response(result)
        if result.success:
            response.set_cookie(
                cookie_name,
                sessions.issue(result.username),
                max_age=settings.session_max_age_seconds,
                httponly=True,
                samesite="lax",
            )
        return response

    @app.post("/api/logout")
    async def logout(request: Request) -> JSONResponse:
        sessions.revoke(request.cookies.get(cookie_name))
        response = JSONResponse({"success": True})
        response.delete_cookie(cookie_name)
        return response

    @app.get("/api/session")
    async def session_state(context: AccessContext = Depends(access_context)) -> JSONResponse:
        payload = {"isAdmin": context.is_admin_session}
        if context.username:
            payload["username"] = context.username
        return JSONResponse(payload)

    @app.post("/api/verify-collection-key")
    def verify_collection_key(payload: CollectionKeyRequest) -> JSONResponse:
        return _auth_response(credentials.verify_collection_key(payload.key))

    @app.post("/api/admin/update-password")
    def update_password(
        payload: PasswordUpdateRequest, _: AccessContext = Depends(require_admin)
    ) -> JSONResponse:
        try:
            validate_new_secret(payload.new_password, payload.confirm_password)
            result = credentials.update_admin_password(payload.current_password, payload.new_password)
        except ValidationFailure as error:
            return JSONResponse({"success": False, "error": str(error)}, status_code=400)
        except PersistenceError as error:
            raise _http_error(error) from error
        return _auth_response(result)

    @app.post("/api/admin/update-collection-key")
    def update_collection_key(
        payload: CollectionKeyUpdateRequest, _: AccessContext = Depends(require_admin)
    ) -> JSONResponse:
        try:
            validate_new_secret(
                payload.new_collection_key, payload.confirm_collection_key, label="Passkey"
            )
            result = credentials.update_collection_key(payload.admin_password, payload.new_collection_key)
        except ValidationFailure as error:
            return JSONResponse({"success": False, "error": str(error)}, status_code=400)
        except PersistenceError as error:
            raise _http_error(error) from error
        return _auth_response(result)

    return app
