"""Strict decoding of model output.

The model is asked for bare JSON but sometimes wraps it in a markdown fence or
surrounds it with prose. We pull out the first fenced block (or the outermost
brace-delimited object), then validate it against the pydantic models. Any
mismatch surfaces as CatalogParseError; nothing downstream ever sees an
unvalidated dict.
"""

import json
import logging
import re
from typing import Any, Dict

from pydantic import ValidationError

from src.models.catalog import Catalog, Confidence, DetectionResult
from src.services.errors import CatalogParseError

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```|(\{[\s\S]*\})")

DETECTION_FALLBACK_SUMMARY = "Could not determine the content type."


def extract_json_text(text: str) -> str:
    stripped = (text or "").strip()
    match = _JSON_BLOCK.search(stripped)
    if not match:
        raise CatalogParseError("No valid JSON object found in the model's response.")
    return match.group(1) if match.group(1) is not None else match.group(2)


def load_json_object(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(extract_json_text(text))
    except json.JSONDecodeError as e:
        raise CatalogParseError(
            "The model's response was in an unexpected format and could not be read."
        ) from e
    if not isinstance(data, dict):
        raise CatalogParseError("The model returned data in an unexpected format.")
    return data


def parse_catalog(text: str) -> Catalog:
    data = load_json_object(text)
    if not isinstance(data.get("categories"), list):
        raise CatalogParseError("The model returned data in an unexpected format.")
    _strip_sources(data)
    try:
        return Catalog.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Catalog validation failed: {e}")
        raise CatalogParseError("The model returned data in an unexpected format.") from e


def parse_detection(text: str, source: str) -> DetectionResult:
    data = load_json_object(text)
    try:
        confidence = Confidence(str(data.get("confidence") or "Low").strip().capitalize())
    except ValueError:
        confidence = Confidence.LOW
    summary = data.get("summary") or DETECTION_FALLBACK_SUMMARY
    return DetectionResult(source=source, confidence=confidence, summary=str(summary))


def _strip_sources(data: Dict[str, Any]) -> None:
    # provenance is assigned during aggregation, never taken from the model
    for category in data.get("categories") or []:
        if not isinstance(category, dict):
            continue
        for product in category.get("products") or []:
            if not isinstance(product, dict):
                continue
            for variant in product.get("variants") or []:
                if isinstance(variant, dict):
                    variant.pop("source", None)
