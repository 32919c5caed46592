from importlib import resources

from fastapi import APIRouter
from fastapi.responses import FileResponse

router = APIRouter()

STATIC_DIR = resources.files("file_manager") / "static"


@router.get("/", include_in_schema=False)
async def index() -> FileResponse:
    """Serve the browser UI landing page."""
    return FileResponse(str(STATIC_DIR / "index.html"), media_type="text/html")
