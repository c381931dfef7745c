"""Browser form endpoints: the static page and its plain-text submit handler."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from intake.api.deps import get_form_policy, get_pipeline
from intake.domain.exceptions import (
    MalformedRequestError,
    MissingRequiredFileError,
    PersistError,
    StorageWriteError,
    StoreUnavailableError,
)
from intake.domain.models import IngestPolicy
from intake.logging import logger
from intake.services.ingest_service import IngestPipeline

router = APIRouter(tags=["form"])


@router.get("/", response_class=HTMLResponse)
def show_form(request: Request):
    html = request.app.state.form_html
    if html is None:
        return PlainTextResponse("Template not loaded", status_code=500)
    return HTMLResponse(html)


@router.post("/submit", response_class=PlainTextResponse)
async def submit_form(
    request: Request,
    pipeline: IngestPipeline = Depends(get_pipeline),
    policy: IngestPolicy = Depends(get_form_policy),
) -> PlainTextResponse:
    try:
        await pipeline.ingest(request, policy)
    except StoreUnavailableError:
        return PlainTextResponse("Data & files saved (but DB is not connected)")
    except MalformedRequestError as exc:
        logger.warning(f"Form parse failed: {exc.message}")
        return PlainTextResponse("Failed to parse form", status_code=400)
    except MissingRequiredFileError as exc:
        return PlainTextResponse(exc.message, status_code=400)
    except StorageWriteError as exc:
        logger.exception(exc)
        return PlainTextResponse("Internal server error (storage)", status_code=500)
    except PersistError as exc:
        logger.exception(exc)
        return PlainTextResponse("Internal server error (database)", status_code=500)

    return PlainTextResponse("Data & files saved successfully")
