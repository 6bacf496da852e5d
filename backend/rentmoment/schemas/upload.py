"""Upload Schemas"""

from typing import List

from pydantic import Field

from rentmoment.schemas.common import CamelModel


class UploadedFile(CamelModel):
    url: str = Field(description="Public URL path, e.g. /api/files/2024/01/15/<uuid>.jpg")
    path: str = Field(description="Path relative to the storage root")
    filename: str = Field(description="Original client filename")
    size: int
    content_type: str


class UploadData(CamelModel):
    file: UploadedFile


class UploadListData(CamelModel):
    files: List[UploadedFile]
