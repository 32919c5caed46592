from fastapi import APIRouter, Request

from file_manager.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint for monitoring API status and storage reachability.

    Always answers 200; `status` is "degraded" when the bucket cannot be reached.
    """
    blob_store = request.app.state.blob_store
    storage_ready = blob_store.ping()

    return HealthResponse(
        status="ok" if storage_ready else "degraded",
        bucket=request.app.state.settings.s3_bucket_name,
        components={
            "api": "ready",
            "storage": "ready" if storage_ready else "unreachable",
        },
    )
