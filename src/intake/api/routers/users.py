"""JSON user-creation endpoint. Both files are required; errors map via app handlers."""
from fastapi import APIRouter, Depends, Request
from intake.api.deps import get_api_policy, get_pipeline
from intake.api.schemas.users import ErrorDetail, UserCreated
from intake.domain.models import IngestPolicy
from intake.services.ingest_service import IngestPipeline

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post(
    "",
    response_model=UserCreated,
    status_code=201,
    responses={
        400: {"model": ErrorDetail},
        500: {"model": ErrorDetail},
        503: {"model": ErrorDetail},
    },
)
async def create_user(
    request: Request,
    pipeline: IngestPipeline = Depends(get_pipeline),
    policy: IngestPolicy = Depends(get_api_policy),
) -> UserCreated:
    """Accepts multipart/form-data with name, email, phone, city, image and pdf."""
    await pipeline.ingest(request, policy)
    return UserCreated()
