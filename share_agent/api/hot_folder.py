from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_existing_hot_folder
from ..models import HotFolderStats
from ..services.hot_folder import HotFolderService

router = APIRouter(prefix="/api/hot-folder", tags=["hot-folder"])


def require_hot_folder() -> HotFolderService:
    hot_folder = get_existing_hot_folder()
    if hot_folder is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Hot folder is not enabled",
        )
    return hot_folder


@router.get("/stats", response_model=HotFolderStats)
async def get_stats(
    hot_folder: HotFolderService = Depends(require_hot_folder),
) -> HotFolderStats:
    return hot_folder.get_stats()


@router.get("/status")
async def get_status(hot_folder: HotFolderService = Depends(require_hot_folder)) -> dict:
    return {
        "status": hot_folder.get_status(),
        "current_file": hot_folder.current_file,
        "running": hot_folder.is_running,
    }


@router.post("/poll-now", status_code=status.HTTP_202_ACCEPTED)
async def poll_now(hot_folder: HotFolderService = Depends(require_hot_folder)) -> dict:
    """Wake the polling loop so the incoming folder is checked right away."""
    if not hot_folder.is_running:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Hot folder is not running"
        )
    hot_folder.poll_now()
    return {"success": True, "message": "Poll requested"}
