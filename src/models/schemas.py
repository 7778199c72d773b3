from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.catalog import Catalog, CatalogSummary, ChatMessage, ScrapeProgress
from src.models.domain import LLMProvider, OCRQuality, SortOption


class ScrapeResponse(BaseModel):
    catalog: Catalog
    summary: CatalogSummary
    sources: List[str]


class ScrapeFailure(BaseModel):
    message: str
    errors: List[str]
    partial_catalog: Optional[Catalog] = None


class ScrapeEvent(BaseModel):
    """One NDJSON line of the streaming scrape endpoint."""

    type: str = Field(..., pattern="^(progress|result|error)$")
    progress: Optional[ScrapeProgress] = None
    result: Optional[ScrapeResponse] = None
    failure: Optional[ScrapeFailure] = None


class ViewRequest(BaseModel):
    catalog: Catalog
    selected_categories: List[str] = Field(default_factory=list)
    search_query: str = ""
    sort_option: SortOption = SortOption.DEFAULT


class ViewResponse(BaseModel):
    catalog: Catalog
    summary: CatalogSummary
    categories: List[str]
    has_active_filters: bool


class ChatRequest(BaseModel):
    catalog: Catalog
    message: str = Field(..., min_length=1)
    history: List[ChatMessage] = Field(
        default_factory=list,
        description="Messages before the current turn; must not include `message` itself",
    )


class ChatEvent(BaseModel):
    type: str = Field(..., pattern="^(chunk|error)$")
    text: str


class OCRQualityPreference(BaseModel):
    quality: OCRQuality


class APIKeyCreate(BaseModel):
    provider: LLMProvider = LLMProvider.GEMINI
    api_key: str = Field(..., min_length=1)


class APIKeyUpdate(BaseModel):
    api_key: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None


class APIKeyResponse(BaseModel):
    id: int
    provider: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CredentialStatus(BaseModel):
    provider: LLMProvider
    configured: bool
