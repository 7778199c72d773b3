from .catalog_merger import finalize_catalog, merge_fragment, tag_variant_sources
from .catalog_view import derive_view, summarize
from .extraction import ExtractionAdapter
from .gemini import GeminiService
from .scrape_pipeline import collect_catalog, run_scrape

__all__ = [
    "ExtractionAdapter",
    "GeminiService",
    "collect_catalog",
    "run_scrape",
    "merge_fragment",
    "tag_variant_sources",
    "finalize_catalog",
    "derive_view",
    "summarize",
]
