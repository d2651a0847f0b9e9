from pydantic import BaseModel
from datetime import datetime


class AssetInfo(BaseModel):
    filename: str
    size: int
    dateUploaded: datetime
    url: str


class UploadResponse(BaseModel):
    message: str
    url: str


class MessageResponse(BaseModel):
    message: str
