from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from typing import List, NoReturn, Optional
import logging

from auth import Capability, require
from models import AssetInfo, MessageResponse, UploadResponse

from .exceptions import AssetError, StorageUnavailable
from .service import AssetService

logger = logging.getLogger(__name__)

router = APIRouter()

# Which capability each operation needs; the store never sees any of this
ROUTE_CAPABILITIES = {
    "list": Capability.LIST,
    "upload": Capability.WRITE,
    "fetch": Capability.READ,
    "delete": Capability.WRITE,
}


def get_asset_service(request: Request) -> AssetService:
    return request.app.state.asset_service


def _raise_http(exc: AssetError, action: str) -> NoReturn:
    if isinstance(exc, StorageUnavailable):
        logger.error("Error %s: %s", action, exc.message, exc_info=exc.cause)
        raise HTTPException(status_code=exc.http_status, detail=f"Error {action}: {exc.message}")
    logger.warning("Rejected %s: %s", action, exc.message)
    raise HTTPException(status_code=exc.http_status, detail=exc.message)


@router.get("", response_model=List[AssetInfo])
def list_assets(
    service: AssetService = Depends(get_asset_service),
    principal=Depends(require(ROUTE_CAPABILITIES["list"])),
):
    try:
        return service.list_assets()
    except AssetError as e:
        _raise_http(e, "retrieving assets")


@router.post("/upload", response_model=UploadResponse)
async def upload_asset(
    file: Optional[UploadFile] = File(None),
    service: AssetService = Depends(get_asset_service),
    principal=Depends(require(ROUTE_CAPABILITIES["upload"])),
):
    logger.info("Upload attempt by %s. Has file: %s", principal.name, file is not None)
    if file is not None:
        logger.info(
            "Upload file info: Name=%s, Size=%s, ContentType=%s",
            file.filename, getattr(file, "size", None), file.content_type,
        )
    try:
        return await service.upload(
            file.filename if file is not None else None,
            file,
            getattr(file, "size", None),
        )
    except AssetError as e:
        _raise_http(e, "uploading file")
    finally:
        if file is not None:
            await file.close()


@router.get("/{filename}")
async def get_asset(
    filename: str,
    service: AssetService = Depends(get_asset_service),
    _=Depends(require(ROUTE_CAPABILITIES["fetch"])),
):
    try:
        stream = await service.fetch(filename)
    except AssetError as e:
        _raise_http(e, "reading file")

    asset = stream.asset
    # Content-Type set directly: media_type would get a charset for text/*
    return StreamingResponse(
        stream,
        headers={
            "Content-Type": asset.content_type,
            "Content-Length": str(asset.size),
            "Content-Disposition": "inline",
        },
        background=BackgroundTask(stream.close),
    )


@router.delete("/{filename}", response_model=MessageResponse)
def delete_asset(
    filename: str,
    service: AssetService = Depends(get_asset_service),
    principal=Depends(require(ROUTE_CAPABILITIES["delete"])),
):
    try:
        result = service.delete(filename)
    except AssetError as e:
        _raise_http(e, "deleting file")
    logger.info("Asset %s deleted by %s", filename, principal.name)
    return result
