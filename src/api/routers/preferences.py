"""API router for persisted user preferences."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.models import get_db
from src.models.schemas import OCRQualityPreference
from src.services import preferences

router = APIRouter()


@router.get("/ocr-quality", response_model=OCRQualityPreference)
async def get_ocr_quality(db: Session = Depends(get_db)) -> OCRQualityPreference:
    return OCRQualityPreference(quality=preferences.get_ocr_quality(db))


@router.put("/ocr-quality", response_model=OCRQualityPreference)
async def set_ocr_quality(
    preference: OCRQualityPreference,
    db: Session = Depends(get_db),
) -> OCRQualityPreference:
    return OCRQualityPreference(quality=preferences.set_ocr_quality(db, preference.quality))
