"""Catalog entities exchanged between the extractor, the merger and the views.

Attribute names are snake_case in Python and camelCase on the wire so that
exported JSON matches the schema the model is asked to fill.
"""

import enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


NOT_AVAILABLE = "N/A"


class _CatalogModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Variant(_CatalogModel):
    name: str
    description: str = ""
    price: str = NOT_AVAILABLE
    sku: str = NOT_AVAILABLE
    brochure_url: Optional[str] = Field(default=None, alias="brochureUrl")
    source: Optional[str] = None


class ProductLine(_CatalogModel):
    name: str
    description: str = ""
    variants: List[Variant] = Field(default_factory=list)


class Category(_CatalogModel):
    name: str
    products: List[ProductLine] = Field(default_factory=list)


class Catalog(_CatalogModel):
    supplier_name: str = Field(default="", alias="supplierName")
    categories: List[Category] = Field(default_factory=list)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


class CatalogSummary(BaseModel):
    categories: int = 0
    product_lines: int = Field(default=0, alias="productLines")
    variants: int = 0

    model_config = ConfigDict(populate_by_name=True)


class UrlInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["url"] = "url"
    value: str

    @property
    def source_name(self) -> str:
        return self.value


class FileInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    filename: str
    content: bytes = Field(repr=False)
    content_type: str = "application/pdf"

    @property
    def source_name(self) -> str:
        return self.filename


ScrapeInput = Union[UrlInput, FileInput]


class Confidence(str, enum.Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class DetectionResult(BaseModel):
    source: str
    confidence: Confidence = Confidence.LOW
    summary: str


class ChatRole(str, enum.Enum):
    USER = "user"
    MODEL = "model"


class ChatMessage(BaseModel):
    role: ChatRole
    text: str = ""


class ScrapeProgress(BaseModel):
    stage: str
    current: int = 0
    total: int = 0
