"""Unit tests for persisted preferences."""

from sqlalchemy.orm import Session

from src.models import OCRQuality, Preference
from src.services.preferences import OCR_QUALITY_KEY, get_ocr_quality, set_ocr_quality


def test_default_ocr_quality_is_high(db: Session):
    assert get_ocr_quality(db) == OCRQuality.HIGH


def test_set_and_get_ocr_quality(db: Session):
    assert set_ocr_quality(db, OCRQuality.STANDARD) == OCRQuality.STANDARD
    assert get_ocr_quality(db) == OCRQuality.STANDARD

    set_ocr_quality(db, "high")
    assert get_ocr_quality(db) == OCRQuality.HIGH
    assert db.query(Preference).count() == 1


def test_invalid_stored_value_falls_back_to_default(db: Session):
    db.add(Preference(key=OCR_QUALITY_KEY, value="ultra"))
    db.commit()

    assert get_ocr_quality(db) == OCRQuality.HIGH
