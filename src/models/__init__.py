from src.models.catalog import (
    NOT_AVAILABLE,
    Catalog,
    CatalogSummary,
    Category,
    ChatMessage,
    ChatRole,
    Confidence,
    DetectionResult,
    FileInput,
    ProductLine,
    ScrapeInput,
    ScrapeProgress,
    UrlInput,
    Variant,
)
from src.models.database import Base, get_db, init_db
from src.models.domain import (
    APIKey,
    ExportFormat,
    LLMProvider,
    OCRQuality,
    Preference,
    SortOption,
    ViewMode,
)

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "NOT_AVAILABLE",
    "Catalog",
    "CatalogSummary",
    "Category",
    "ProductLine",
    "Variant",
    "ChatMessage",
    "ChatRole",
    "Confidence",
    "DetectionResult",
    "UrlInput",
    "FileInput",
    "ScrapeInput",
    "ScrapeProgress",
    "APIKey",
    "Preference",
    "LLMProvider",
    "OCRQuality",
    "SortOption",
    "ExportFormat",
    "ViewMode",
]
