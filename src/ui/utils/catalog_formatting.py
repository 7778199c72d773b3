import json
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from src.models.catalog import Catalog, Confidence, DetectionResult, ScrapeProgress

CONFIDENCE_BADGES = {
    Confidence.HIGH: "🟢",
    Confidence.MEDIUM: "🟡",
    Confidence.LOW: "🔴",
}


def catalog_table_rows(catalog: Optional[Catalog]) -> List[Dict[str, str]]:
    if catalog is None:
        return []
    rows = []
    for category in catalog.categories:
        for product in category.products:
            for variant in product.variants:
                rows.append({
                    "Category": category.name,
                    "Product Line": product.name,
                    "Variant": variant.name,
                    "Description": variant.description or product.description,
                    "Price": variant.price,
                    "SKU": variant.sku,
                    "Source": variant.source or "",
                })
    return rows


def progress_fraction(progress: Optional[ScrapeProgress]) -> Tuple[float, str]:
    if progress is None:
        return 0.0, ""
    if progress.total <= 0:
        return 0.0, progress.stage
    fraction = min(max(progress.current / progress.total, 0.0), 1.0)
    return fraction, progress.stage


def detection_label(result: DetectionResult) -> str:
    badge = CONFIDENCE_BADGES.get(result.confidence, "")
    return f"{badge} **{result.source}** ({result.confidence.value} confidence)"


def brochure_link(url: Optional[str]) -> str:
    if not url or url == "N/A":
        return ""
    return f"[Brochure]({url})"


def iter_ndjson(lines: Iterable[str]) -> Iterator[dict]:
    """Decode a newline-delimited JSON stream, skipping blank keep-alive lines."""
    for line in lines:
        line = line.strip()
        if line:
            yield json.loads(line)
