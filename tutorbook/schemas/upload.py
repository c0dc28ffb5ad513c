# tutorbook/schemas/upload.py
from pydantic import BaseModel


class UploadedAsset(BaseModel):
    url: str
    key: str
