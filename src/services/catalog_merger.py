from __future__ import annotations

import logging

from src.models.catalog import NOT_AVAILABLE, Catalog, Category

logger = logging.getLogger(__name__)

SUPPLIER_NOT_FOUND = "Supplier Name Not Found"


def tag_variant_sources(fragment: Catalog, source_name: str) -> Catalog:
    for category in fragment.categories:
        for product in category.products:
            for variant in product.variants:
                variant.source = source_name
    return fragment


def is_empty_result(fragment: Catalog, source_name: str) -> bool:
    if fragment.categories:
        return False
    return fragment.supplier_name in (source_name, NOT_AVAILABLE)


def merge_fragment(aggregate: Catalog, fragment: Catalog) -> Catalog:
    if _usable_supplier_name(fragment.supplier_name) and not _usable_supplier_name(
        aggregate.supplier_name
    ):
        aggregate.supplier_name = fragment.supplier_name

    for category in fragment.categories:
        existing = _find_category(aggregate, category.name)
        if existing is None:
            aggregate.categories.append(category)
        else:
            existing.products.extend(category.products)
    return aggregate


def finalize_catalog(aggregate: Catalog) -> Catalog:
    if not _usable_supplier_name(aggregate.supplier_name):
        logger.info("No supplier name found in any source")
        aggregate.supplier_name = SUPPLIER_NOT_FOUND
    return aggregate


def _usable_supplier_name(name: str | None) -> bool:
    return bool(name) and name != NOT_AVAILABLE


def _find_category(aggregate: Catalog, name: str) -> Category | None:
    key = name.casefold()
    for category in aggregate.categories:
        if category.name.casefold() == key:
            return category
    return None
