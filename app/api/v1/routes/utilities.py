"""Static lookups and file uploads."""

import logging
import uuid
from pathlib import Path

from fastapi import APIRouter, File, Form, UploadFile, status

from app.core.config import settings
from app.core.deps import CurrentUser
from app.core.errors import ServerError, ValidationFailed
from app.models.class_model import WeekDay
from app.models.payment import PaymentMethod
from app.schemas.common import DataResponse
from app.schemas.utility import UploadResponse, WeekDayOption
from app.schemas.validators import GRADE_LEVELS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/utilities", tags=["Utilities"])

WEEK_DAY_LABELS = {
    WeekDay.MONDAY: ("Monday", "الاثنين"),
    WeekDay.TUESDAY: ("Tuesday", "الثلاثاء"),
    WeekDay.WEDNESDAY: ("Wednesday", "الأربعاء"),
    WeekDay.THURSDAY: ("Thursday", "الخميس"),
    WeekDay.FRIDAY: ("Friday", "الجمعة"),
    WeekDay.SATURDAY: ("Saturday", "السبت"),
    WeekDay.SUNDAY: ("Sunday", "الأحد"),
}


@router.get("/grades", response_model=DataResponse[list[int]])
async def list_grades(current_user: CurrentUser):
    """Grade levels taught at the center."""
    return {"data": list(GRADE_LEVELS)}


@router.get("/payment-methods", response_model=DataResponse[list[str]])
async def list_payment_methods(current_user: CurrentUser):
    return {"data": [method.value for method in PaymentMethod]}


@router.get("/week-days", response_model=DataResponse[list[WeekDayOption]])
async def list_week_days(current_user: CurrentUser):
    """Week days with English and Arabic labels."""
    return {
        "data": [
            {"value": day.value, "label_en": label_en, "label_ar": label_ar}
            for day, (label_en, label_ar) in WEEK_DAY_LABELS.items()
        ]
    }


@router.post(
    "/upload",
    response_model=DataResponse[UploadResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    current_user: CurrentUser,
    file: UploadFile = File(...),
    upload_type: str = Form(..., alias="type"),
):
    """
    Upload a file.

    - Validates upload type and size
    - Saves under UPLOAD_DIR/<type>/
    - Returns the accessible URL
    """
    if upload_type not in settings.UPLOAD_TYPES:
        raise ValidationFailed(
            {"type": [f"Invalid upload type. Allowed types: {', '.join(settings.UPLOAD_TYPES)}"]}
        )

    content = await file.read()

    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise ValidationFailed(
            {"file": [f"File too large. Maximum size: {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB"]}
        )

    upload_dir = Path(settings.UPLOAD_DIR) / upload_type
    file_ext = Path(file.filename).suffix if file.filename else ""
    unique_filename = f"{uuid.uuid4()}{file_ext}"

    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / unique_filename).write_bytes(content)
    except OSError:
        logger.exception("Failed to store upload %s", unique_filename)
        raise ServerError("UPLOAD_ERROR", "Failed to upload file") from None

    return {
        "data": {
            "file_url": f"/{settings.UPLOAD_DIR}/{upload_type}/{unique_filename}",
            "file_name": unique_filename,
            "file_size": len(content),
        },
        "message": "File uploaded successfully",
    }
