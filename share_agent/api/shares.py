import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from ..core.exceptions import (
    AlreadyExistsError,
    BadAddressError,
    BadPathError,
    DirectoryNotEmptyError,
    LockUnavailableError,
    NotADirError,
    NotAFileError,
    OpenError,
    RenameError,
    RenameOpenError,
    ShareError,
)
from ..dependencies import get_async_share
from ..models import (
    DirectoryListing,
    ExistsResponse,
    FileStatsResponse,
    MkdirRequest,
    RenameRequest,
    SimpleStatResponse,
    WriteResponse,
)
from ..smb import AsyncShare
from ..smb.status_translator import is_name_collision, is_not_found

router = APIRouter(prefix="/api/share", tags=["share"])


def error_status(error: ShareError) -> int:
    """HTTP status code for a classified share failure."""
    if isinstance(error, (BadPathError, BadAddressError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, (AlreadyExistsError, DirectoryNotEmptyError, NotAFileError, NotADirError)):
        return status.HTTP_409_CONFLICT
    if isinstance(error, LockUnavailableError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(error, (OpenError, RenameOpenError)) and is_not_found(error):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, RenameError) and is_name_collision(error):
        return status.HTTP_409_CONFLICT
    return status.HTTP_502_BAD_GATEWAY


def http_error(error: ShareError) -> HTTPException:
    code = error_status(error)
    if code >= 500:
        logging.error(f"Share operation failed: {error}")
    return HTTPException(status_code=code, detail=str(error))


def require_share() -> AsyncShare:
    """Share dependency that reports connect failures as HTTP errors."""
    try:
        return get_async_share()
    except ShareError as e:
        raise http_error(e) from e


@router.get("/list", response_model=DirectoryListing)
async def list_directory(
    path: str = Query("", description="Share-relative directory, empty for the root"),
    share: AsyncShare = Depends(require_share),
) -> DirectoryListing:
    try:
        entries = await share.list_dir(path)
    except ShareError as e:
        raise http_error(e) from e
    return DirectoryListing.build(path, entries)


@router.get("/exists", response_model=ExistsResponse)
async def path_exists(
    path: str = Query(...), share: AsyncShare = Depends(require_share)
) -> ExistsResponse:
    try:
        state = await share.exists(path)
    except ShareError as e:
        raise http_error(e) from e
    return ExistsResponse(path=path, state=state)


@router.get("/stat", response_model=SimpleStatResponse)
async def simple_stat(
    path: str = Query(...), share: AsyncShare = Depends(require_share)
) -> SimpleStatResponse:
    """
    Size and directory flag.

    Note: a file's size is measured by reading the whole file.
    """
    try:
        result = await share.stat(path)
    except ShareError as e:
        raise http_error(e) from e
    return SimpleStatResponse(path=path, size=result.size, is_directory=result.is_directory)


@router.get("/stats", response_model=FileStatsResponse)
async def file_stats(
    path: str = Query(...), share: AsyncShare = Depends(require_share)
) -> FileStatsResponse:
    """
    Full metadata for a file or directory.

    HTTP Status Codes:
        200: Metadata returned
        404: Nothing exists at the path
    """
    try:
        stats = await share.file_stats(path)
    except ShareError as e:
        raise http_error(e) from e

    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Not found: {path}"
        )
    return FileStatsResponse.from_stats(path, stats)


@router.get("/file")
async def read_file(
    path: str = Query(...), share: AsyncShare = Depends(require_share)
) -> Response:
    try:
        data = await share.read_file(path)
    except ShareError as e:
        raise http_error(e) from e
    return Response(content=data, media_type="application/octet-stream")


@router.put("/file", response_model=WriteResponse)
async def write_file(
    path: str = Query(...),
    data: bytes = Body(..., media_type="application/octet-stream"),
    share: AsyncShare = Depends(require_share),
) -> WriteResponse:
    """Replace the whole content of a file with the request body, creating it if missing."""
    try:
        written = await share.write_file(path, data)
    except ShareError as e:
        raise http_error(e) from e
    return WriteResponse(path=path, bytes_written=written)


@router.post("/mkdir", status_code=status.HTTP_201_CREATED)
async def make_directory(
    request: MkdirRequest, share: AsyncShare = Depends(require_share)
) -> dict:
    try:
        if request.parents:
            await share.mkdir_p(request.path)
        else:
            await share.mkdir(request.path)
    except ShareError as e:
        raise http_error(e) from e
    return {"path": request.path, "created": True}


@router.delete("/entry")
async def remove_entry(
    path: str = Query(...), share: AsyncShare = Depends(require_share)
) -> dict:
    """
    Delete a file or an empty directory. Deleting a missing path succeeds.

    HTTP Status Codes:
        200: Deleted, or nothing was there
        409: Directory is not empty
    """
    try:
        await share.rm(path)
    except ShareError as e:
        raise http_error(e) from e
    return {"path": path, "deleted": True}


@router.post("/rename")
async def rename_entry(
    request: RenameRequest, share: AsyncShare = Depends(require_share)
) -> dict:
    """
    Rename or move an entry inside the share.

    HTTP Status Codes:
        200: Renamed
        404: Source not found
        409: Destination exists and replace_if_exists is false
    """
    try:
        await share.rename(request.from_path, request.to_path, request.replace_if_exists)
    except ShareError as e:
        raise http_error(e) from e
    return {"from_path": request.from_path, "to_path": request.to_path}
