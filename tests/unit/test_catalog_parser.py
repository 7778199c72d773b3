"""Unit tests for decoding model answers into catalogs and detection results."""

import pytest

from src.models import Confidence
from src.services.catalog_parser import (
    DETECTION_FALLBACK_SUMMARY,
    extract_json_text,
    parse_catalog,
    parse_detection,
)
from src.services.errors import CatalogParseError, ExtractionError

CATALOG_JSON = """
{
  "supplierName": "Acme",
  "categories": [
    {
      "name": "Drills",
      "products": [
        {
          "name": "Cordless Drill",
          "description": "18V",
          "variants": [
            {"name": "Compact", "price": "$129", "sku": "CD-1", "source": "invented.example"}
          ]
        }
      ]
    }
  ]
}
"""


def test_parse_bare_json():
    catalog = parse_catalog(CATALOG_JSON)

    assert catalog.supplier_name == "Acme"
    assert catalog.categories[0].products[0].variants[0].sku == "CD-1"


def test_parse_fenced_json_with_prose():
    answer = f"Here is the catalog you asked for:\n```json\n{CATALOG_JSON}\n```\nLet me know!"
    assert parse_catalog(answer).categories[0].name == "Drills"


def test_model_supplied_source_is_discarded():
    catalog = parse_catalog(CATALOG_JSON)
    assert catalog.categories[0].products[0].variants[0].source is None


def test_missing_variant_fields_use_defaults():
    catalog = parse_catalog(
        '{"supplierName": "Acme", "categories": [{"name": "A", "products": '
        '[{"name": "P", "variants": [{"name": "V"}]}]}]}'
    )
    variant = catalog.categories[0].products[0].variants[0]
    assert (variant.price, variant.sku, variant.description) == ("N/A", "N/A", "")


def test_no_json_raises():
    with pytest.raises(CatalogParseError, match="No valid JSON object"):
        parse_catalog("I could not find any products on that page.")


def test_invalid_json_raises():
    with pytest.raises(CatalogParseError, match="unexpected format and could not be read"):
        parse_catalog('{"supplierName": "Acme", "categories": [}')


def test_missing_categories_raises():
    with pytest.raises(CatalogParseError, match="unexpected format"):
        parse_catalog('{"supplierName": "Acme"}')


def test_wrong_shape_raises():
    with pytest.raises(CatalogParseError):
        parse_catalog('{"supplierName": "Acme", "categories": [{"products": "many"}]}')


def test_parse_error_is_an_extraction_error():
    assert issubclass(CatalogParseError, ExtractionError)


def test_extract_json_text_prefers_fenced_block():
    text = '```\n{"a": 1}\n```'
    assert extract_json_text(text) == '{"a": 1}'


def test_parse_detection():
    result = parse_detection('{"confidence": "high", "summary": "A price list."}', "price.pdf")

    assert result.source == "price.pdf"
    assert result.confidence == Confidence.HIGH
    assert result.summary == "A price list."


def test_parse_detection_fallbacks():
    result = parse_detection('{"confidence": "certain"}', "https://acme.example")

    assert result.confidence == Confidence.LOW
    assert result.summary == DETECTION_FALLBACK_SUMMARY
