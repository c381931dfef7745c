"""FastAPI application factory."""
from __future__ import annotations
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from intake import __version__
from intake.api.schemas.users import HealthStatus
from intake.config import Settings
from intake.domain.exceptions import (
    MalformedRequestError,
    MissingRequiredFileError,
    PayloadTooLargeError,
    PersistError,
    StorageWriteError,
    StoreUnavailableError,
)
from intake.domain.models import IngestPolicy
from intake.infra.db.record_store import RecordStore, SqlRecordStore
from intake.logging import bind_request_id, configure_logging, logger, new_request_id, reset_request_id
from intake.services.ingest_service import IngestPipeline
from intake.storage.blob_store import BlobStore, LocalBlobStore

FORM_TEMPLATE = Path(__file__).parent / "templates" / "form.html"


def create_app(
    settings: Settings | None = None,
    *,
    blob_store: BlobStore | None = None,
    record_store: RecordStore | None = None,
) -> FastAPI:
    """Build the app and its stores once; tests pass fakes for either store.

    When *record_store* is omitted it is connected from *settings*, and may
    end up None (service runs without a database).
    """
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    if blob_store is None:
        try:
            settings.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning(f"Cannot create upload directory {settings.UPLOAD_DIR}: {exc}")
        blob_store = LocalBlobStore(settings.UPLOAD_DIR)
    if record_store is None:
        from intake.db import connect_record_store
        record_store = connect_record_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Intake service {__version__} starting")
        yield
        if isinstance(record_store, SqlRecordStore):
            record_store.engine.dispose()

    app = FastAPI(
        title="User Intake API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.pipeline = IngestPipeline(blob_store, record_store)
    app.state.form_policy = IngestPolicy(
        max_body_bytes=settings.FORM_MAX_BODY_BYTES,
        image_required=False,
        pdf_required=False,
        continue_on_storage_error=settings.FORM_CONTINUE_ON_STORAGE_ERROR,
    )
    app.state.api_policy = IngestPolicy(
        max_body_bytes=settings.API_MAX_BODY_BYTES,
        image_required=True,
        pdf_required=True,
    )
    app.state.form_html = _load_form_template()

    # Import routers inside create_app() to avoid circular imports at module load time
    from intake.api.routers.form import router as form_router
    from intake.api.routers.users import router as users_router

    app.include_router(form_router)
    app.include_router(users_router)

    @app.middleware("http")
    async def _request_id(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or new_request_id()
        token = bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(MalformedRequestError)
    def _malformed(request: Request, exc: MalformedRequestError) -> JSONResponse:
        logger.warning(f"Rejected multipart body: {exc.message}")
        return JSONResponse(status_code=400, content={"detail": "File too large or invalid form data"})

    @app.exception_handler(PayloadTooLargeError)
    def _too_large(request: Request, exc: PayloadTooLargeError) -> JSONResponse:
        logger.warning(f"Rejected body over {exc.limit} bytes")
        return JSONResponse(
            status_code=400, content={"detail": f"Request body too large (limit {exc.limit} bytes)"}
        )

    @app.exception_handler(MissingRequiredFileError)
    def _missing_file(request: Request, exc: MissingRequiredFileError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": exc.message})

    @app.exception_handler(StoreUnavailableError)
    def _store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": "Database not available"})

    @app.exception_handler(StorageWriteError)
    def _storage_failed(request: Request, exc: StorageWriteError) -> JSONResponse:
        logger.error(f"Failed to save {exc.field}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": f"Failed to save {exc.field}"})

    @app.exception_handler(PersistError)
    def _persist_failed(request: Request, exc: PersistError) -> JSONResponse:
        logger.error("Database insert failed", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Database error"})

    @app.get("/health", response_model=HealthStatus, tags=["ops"])
    def health() -> HealthStatus:
        database = "connected" if app.state.pipeline.record_store_available else "unavailable"
        return HealthStatus(status="ok", database=database)

    return app


def _load_form_template() -> str | None:
    try:
        return FORM_TEMPLATE.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error(f"Cannot load form template: {exc}")
        return None
