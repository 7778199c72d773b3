"""Unit tests for UI formatting helpers."""

from src.models import Confidence, DetectionResult, ScrapeProgress
from src.ui.utils.catalog_formatting import (
    brochure_link,
    catalog_table_rows,
    detection_label,
    iter_ndjson,
    progress_fraction,
)


def test_catalog_table_rows(sample_catalog):
    rows = catalog_table_rows(sample_catalog)

    assert len(rows) == 4
    assert rows[0]["Category"] == "Drills"
    assert rows[0]["Description"] == "18V brushless drill"
    assert rows[3]["Description"] == "7 inch blade"
    assert rows[3]["Source"] == "catalog.pdf"
    assert catalog_table_rows(None) == []


def test_progress_fraction():
    assert progress_fraction(None) == (0.0, "")
    assert progress_fraction(ScrapeProgress(stage="Preparing inputs...", current=0, total=0)) == (
        0.0,
        "Preparing inputs...",
    )
    assert progress_fraction(ScrapeProgress(stage="Processing URL 2 of 4...", current=1, total=4)) == (
        0.25,
        "Processing URL 2 of 4...",
    )


def test_detection_label():
    result = DetectionResult(source="a.pdf", confidence=Confidence.HIGH, summary="Catalog")
    assert detection_label(result) == "🟢 **a.pdf** (High confidence)"


def test_brochure_link():
    assert brochure_link("N/A") == ""
    assert brochure_link(None) == ""
    assert brochure_link("https://acme.example/b.pdf") == "[Brochure](https://acme.example/b.pdf)"


def test_iter_ndjson_skips_blank_lines():
    lines = ['{"type": "chunk", "text": "a"}', "", "  ", '{"type": "chunk", "text": "b"}']
    assert [event["text"] for event in iter_ndjson(lines)] == ["a", "b"]
