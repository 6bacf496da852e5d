"""
Rent The Moment Backend — Upload & File Routes
=============================================

What:  Admin image upload/delete under /api/upload, and public serving of
       stored images at /api/files/{path}.

Form fields:
    POST /api/upload/image    "image"   one file
    POST /api/upload/images   "images"  up to MAX_UPLOAD_FILES files
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import FileResponse

from rentmoment.config import settings
from rentmoment.exceptions import ValidationFailure
from rentmoment.models.user import User
from rentmoment.schemas.common import ApiResponse, ErrorResponse
from rentmoment.schemas.upload import UploadData, UploadListData
from rentmoment.security import require_admin
from rentmoment.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Uploads"])

UPLOAD_ERRORS = {
    400: {"description": "Invalid file type, size or content", "model": ErrorResponse},
    500: {"description": "Storage error", "model": ErrorResponse},
}


def _content_length(request: Request):
    header = request.headers.get("content-length")
    return int(header) if header and header.isdigit() else None


@router.post(
    "/upload/image",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UploadData],
    responses=UPLOAD_ERRORS,
    summary="Upload one image",
)
async def upload_image(
    request: Request,
    image: UploadFile = File(..., description="JPEG, PNG or WebP image"),
    _admin: User = Depends(require_admin),
) -> ApiResponse[UploadData]:
    content = await image.read()
    stored = await file_service.save_image(
        filename=image.filename or "",
        content=content,
        content_length=_content_length(request),
    )
    return ApiResponse(message="Image uploaded successfully", data=UploadData(file=stored))


@router.post(
    "/upload/images",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UploadListData],
    responses=UPLOAD_ERRORS,
    summary="Upload several images",
)
async def upload_images(
    images: List[UploadFile] = File(..., description="JPEG, PNG or WebP images"),
    _admin: User = Depends(require_admin),
) -> ApiResponse[UploadListData]:
    if len(images) > settings.max_upload_files:
        raise ValidationFailure(
            message=f"At most {settings.max_upload_files} images can be uploaded at once",
            field="images",
        )

    # Validate everything before storing anything, so a bad file leaves no orphans
    payloads = []
    for image in images:
        content = await image.read()
        filename = image.filename or ""
        file_service.validate_extension(filename)
        file_service.validate_size(None, len(content))
        file_service.validate_mime_type(content, filename)
        payloads.append((filename, content))

    stored = [
        await file_service.save_image(filename=filename, content=content)
        for filename, content in payloads
    ]
    return ApiResponse(
        message=f"{len(stored)} images uploaded successfully",
        data=UploadListData(files=stored),
    )


@router.delete(
    "/upload/{file_path:path}",
    response_model=ApiResponse[None],
    responses={404: {"description": "File not found", "model": ErrorResponse}},
    summary="Delete a stored image",
)
async def delete_upload(
    file_path: str,
    _admin: User = Depends(require_admin),
) -> ApiResponse[None]:
    await file_service.delete_file(file_path)
    return ApiResponse(message="File deleted successfully")


@router.get(
    "/files/{file_path:path}",
    responses={404: {"description": "File not found", "model": ErrorResponse}},
    summary="Serve a stored image",
)
async def serve_file(file_path: str) -> FileResponse:
    path = file_service.resolve(file_path)
    return FileResponse(
        path=str(path),
        # Stored names are UUIDs, so content never changes under a URL
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )
