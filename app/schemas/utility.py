"""Utility endpoint schemas."""

from pydantic import BaseModel


class WeekDayOption(BaseModel):
    value: str
    label_en: str
    label_ar: str


class UploadResponse(BaseModel):
    """Response for file upload."""

    file_url: str
    file_name: str
    file_size: int
