"""
Image and document upload endpoint.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from typing import Optional

from property_portal.schemas.error import get_error_responses
from property_portal.schemas.upload import UploadResponse
from property_portal.services.upload import UploadService
from property_portal.utils.dependencies import get_upload_service


router = APIRouter(tags=["Uploads"])


@router.post(
    "/upload-image",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload image or document",
    description=(
        "Multipart `file` plus `type` (problem, finished or verification-document). "
        "Images up to 4.5 MB; verification documents may also be PDF, up to 10 MB."
    ),
    responses=get_error_responses(400, 500)
)
async def upload_image(
    file: Optional[UploadFile] = File(None),
    upload_type: Optional[str] = Form(None, alias="type"),
    upload_service: UploadService = Depends(get_upload_service)
) -> UploadResponse:
    """
    Validate and store an upload.

    Raises:
        ValidationError: If the file is missing, of the wrong type or too large
        UpstreamServiceError: If blob storage fails
    """
    url = await upload_service.upload(file, upload_type)
    return UploadResponse(url=url)
