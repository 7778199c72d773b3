from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass
from typing import Any, Iterator

from src.models.catalog import NOT_AVAILABLE, Catalog
from src.models.domain import ExportFormat

CSV_COLUMNS = [
    "Supplier",
    "Category",
    "Product Line",
    "Product Line Description",
    "Variant Name",
    "Variant Description",
    "Variant Price",
    "Variant SKU",
    "Brochure URL",
    "Source",
]

UTF8_BOM = "\ufeff"
CATEGORY_BANNER = "=" * 40

MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv;charset=utf-8",
    ExportFormat.JSON: "application/json",
    ExportFormat.TXT: "text/plain",
}


@dataclass(frozen=True)
class ExportFile:
    filename: str
    media_type: str
    content: bytes


def catalog_rows(catalog: Catalog) -> Iterator[dict[str, Any]]:
    for category in catalog.categories:
        for product in category.products:
            for variant in product.variants:
                yield {
                    "Supplier": catalog.supplier_name,
                    "Category": category.name,
                    "Product Line": product.name,
                    "Product Line Description": product.description,
                    "Variant Name": variant.name,
                    "Variant Description": variant.description,
                    "Variant Price": variant.price,
                    "Variant SKU": variant.sku,
                    "Brochure URL": variant.brochure_url or NOT_AVAILABLE,
                    "Source": variant.source or NOT_AVAILABLE,
                }


def to_csv(catalog: Catalog) -> str:
    rows = list(catalog_rows(catalog))
    if not rows:
        return ""
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer, fieldnames=CSV_COLUMNS, quoting=csv.QUOTE_ALL, lineterminator="\n"
    )
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def to_json(catalog: Catalog) -> str:
    return catalog.to_json(indent=2)


def to_txt(catalog: Catalog) -> str:
    lines = [f"Supplier: {catalog.supplier_name}", ""]
    for category in catalog.categories:
        lines += [CATEGORY_BANNER, f"CATEGORY: {category.name}", CATEGORY_BANNER, ""]
        for product in category.products:
            lines += [f"Product Line: {product.name}", f"Description: {product.description}", ""]
            for variant in product.variants:
                lines += [
                    f"  - Variant: {variant.name}",
                    f"    Description: {variant.description}",
                    f"    Price: {variant.price}",
                    f"    SKU: {variant.sku}",
                    f"    Brochure: {variant.brochure_url or NOT_AVAILABLE}",
                    f"    Source: {variant.source or NOT_AVAILABLE}",
                    "",
                ]
    return "\n".join(lines) + "\n"


_FORMATTERS = {
    ExportFormat.CSV: to_csv,
    ExportFormat.JSON: to_json,
    ExportFormat.TXT: to_txt,
}


def format_catalog(catalog: Catalog, fmt: ExportFormat) -> str:
    return _FORMATTERS[ExportFormat(fmt)](catalog)


def export_filename(catalog: Catalog, fmt: ExportFormat) -> str:
    base = re.sub(r"\s+", "_", catalog.supplier_name)
    return f"{base}_catalog.{ExportFormat(fmt).value}"


def build_export(catalog: Catalog, fmt: ExportFormat) -> ExportFile:
    fmt = ExportFormat(fmt)
    content = format_catalog(catalog, fmt)
    if fmt == ExportFormat.CSV:
        content = UTF8_BOM + content
    return ExportFile(
        filename=export_filename(catalog, fmt),
        media_type=MEDIA_TYPES[fmt],
        content=content.encode("utf-8"),
    )
