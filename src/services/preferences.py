import logging

from sqlalchemy.orm import Session

from src.models.domain import OCRQuality, Preference

logger = logging.getLogger(__name__)

OCR_QUALITY_KEY = "ocr_quality"
DEFAULT_OCR_QUALITY = OCRQuality.HIGH


def get_ocr_quality(db: Session) -> OCRQuality:
    record = db.get(Preference, OCR_QUALITY_KEY)
    if record is None:
        return DEFAULT_OCR_QUALITY
    try:
        return OCRQuality(record.value)
    except ValueError:
        logger.warning(f"Ignoring invalid stored OCR quality: {record.value!r}")
        return DEFAULT_OCR_QUALITY


def set_ocr_quality(db: Session, quality: OCRQuality) -> OCRQuality:
    quality = OCRQuality(quality)
    record = db.get(Preference, OCR_QUALITY_KEY)
    if record is None:
        db.add(Preference(key=OCR_QUALITY_KEY, value=quality.value))
    else:
        record.value = quality.value
    db.commit()
    return quality
