"""Derived, read-only views over an aggregate catalog.

Everything here is pure: the aggregate passed in is never mutated, and the
same arguments always produce the same view.
"""

from __future__ import annotations

import locale
import math
import re
import unicodedata
from typing import AbstractSet, Iterable, List, Optional

from src.models.catalog import NOT_AVAILABLE, Catalog, CatalogSummary, Category, ProductLine, Variant
from src.models.domain import SortOption

_COMBINING_MARKS = re.compile(r"[\u0300-\u036f]")
_NON_PRICE_CHARS = re.compile(r"[^0-9.\-]+")
_LEADING_NUMBER = re.compile(r"^-?(\d+\.?\d*|\.\d+)")


def normalize_text(text: Optional[str]) -> str:
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    return _COMBINING_MARKS.sub("", decomposed).lower()


def parse_price(price: Optional[str], ascending: bool = True) -> float:
    missing = math.inf if ascending else -math.inf
    if not price or price.lower() == NOT_AVAILABLE.lower():
        return missing
    match = _LEADING_NUMBER.match(_NON_PRICE_CHARS.sub("", price))
    if not match:
        return missing
    return float(match.group(0))


def category_names(catalog: Optional[Catalog]) -> List[str]:
    if catalog is None:
        return []
    return [category.name for category in catalog.categories]


def has_active_filters(
    selected_categories: AbstractSet[str], search_query: str, sort_option: SortOption
) -> bool:
    return bool(selected_categories) or bool(search_query.strip()) or sort_option != SortOption.DEFAULT


def derive_view(
    aggregate: Catalog,
    selected_categories: AbstractSet[str] = frozenset(),
    search_query: str = "",
    sort_option: SortOption = SortOption.DEFAULT,
) -> Catalog:
    view = aggregate.model_copy(deep=True)

    if selected_categories:
        view.categories = [c for c in view.categories if c.name in selected_categories]

    if search_query.strip():
        view.categories = _search_categories(view.categories, normalize_text(search_query))

    if sort_option != SortOption.DEFAULT:
        for category in view.categories:
            for product in category.products:
                sort_variants(product.variants, sort_option)

    return view


def summarize(catalog: Optional[Catalog]) -> CatalogSummary:
    if catalog is None:
        return CatalogSummary()
    product_lines = 0
    variants = 0
    for category in catalog.categories:
        product_lines += len(category.products)
        for product in category.products:
            variants += len(product.variants)
    return CatalogSummary(
        categories=len(catalog.categories),
        product_lines=product_lines,
        variants=variants,
    )


def sort_variants(variants: List[Variant], sort_option: SortOption) -> None:
    """Sort in place. list.sort is stable, so ties keep their relative order."""
    if sort_option in (SortOption.NAME_ASC, SortOption.NAME_DESC):
        variants.sort(key=_name_key, reverse=not sort_option.ascending)
    elif sort_option in (SortOption.PRICE_ASC, SortOption.PRICE_DESC):
        ascending = sort_option.ascending
        variants.sort(key=lambda v: parse_price(v.price, ascending), reverse=not ascending)


def _name_key(variant: Variant) -> str:
    return locale.strxfrm(normalize_text(variant.name))


def _search_categories(categories: Iterable[Category], query: str) -> List[Category]:
    result = []
    for category in categories:
        products = [p for p in (_search_product(p, query) for p in category.products) if p]
        if products:
            result.append(category.model_copy(update={"products": products}))
    return result


def _search_product(product: ProductLine, query: str) -> Optional[ProductLine]:
    if _matches(query, product.name, product.description):
        return product
    variants = [v for v in product.variants if _matches(query, v.name, v.description)]
    if not variants:
        return None
    return product.model_copy(update={"variants": variants})


def _matches(query: str, *fields: Optional[str]) -> bool:
    return any(query in normalize_text(field) for field in fields)
