from typing import List

from pydantic import Field

from catalog_api.schemas.common import CamelModel


class MediaAsset(CamelModel):
    filename: str
    original_name: str
    url: str
    size: int
    mimetype: str


class UploadedFiles(CamelModel):
    images: List[MediaAsset] = Field(default_factory=list)
    videos: List[MediaAsset] = Field(default_factory=list)


class MediaUploadResponse(CamelModel):
    success: bool = True
    message: str = "Files uploaded successfully"
    files: UploadedFiles
