"""
Upload response schema.
"""

from property_portal.schemas.common import CamelModel


class UploadResponse(CamelModel):
    url: str
    message: str = "Image uploaded successfully"
