"""An uploaded file as the extraction chain sees it."""

from pydantic import BaseModel, Field


class UploadedDocument(BaseModel):
    name: str = Field(..., description="Original filename")
    mime_type: str = Field(default="", description="MIME type reported by the browser")
    data: bytes = Field(default=b"", description="Raw file content")

    @property
    def size(self) -> int:
        return len(self.data)
