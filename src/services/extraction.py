"""Gemini-backed adapter that turns one input into a catalog fragment.

The adapter knows nothing about aggregation: it returns an untagged fragment
or raises ExtractionError. MissingCredentialError is allowed to escape because
it is a configuration problem rather than a per-source failure.
"""

import logging
from typing import AsyncIterator, List, Optional, Sequence

from sqlalchemy.orm import Session

from src.config import settings
from src.models.catalog import (
    Catalog,
    ChatMessage,
    Confidence,
    DetectionResult,
    FileInput,
    ScrapeInput,
    UrlInput,
)
from src.models.domain import OCRQuality
from src.prompts import load_prompt
from src.services import pdf_content
from src.services.catalog_parser import parse_catalog, parse_detection
from src.services.errors import ExtractionError, LLMError
from src.services.gemini import GOOGLE_SEARCH_TOOL, GeminiService, inline_part, text_part, user_content

logger = logging.getLogger(__name__)

DETECTION_ERROR_SUMMARY = "An error occurred during analysis."

_VARIANT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING", "description": "Specific variant name, e.g. size, colour or model number."},
        "description": {"type": "STRING", "description": "Short description specific to this variant, if any."},
        "price": {"type": "STRING", "description": "Price including currency symbol, or 'N/A'."},
        "sku": {"type": "STRING", "description": "Stock keeping unit or product code, or 'N/A'."},
        "brochureUrl": {"type": "STRING", "description": "Direct link to a brochure or datasheet, or 'N/A'."},
    },
    "required": ["name", "price", "sku"],
}

CATALOG_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "supplierName": {"type": "STRING", "description": "Name of the supplier or company."},
        "categories": {
            "type": "ARRAY",
            "description": "Product categories found in the source.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING", "description": "Category name."},
                    "products": {
                        "type": "ARRAY",
                        "description": "Product lines within this category.",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "name": {"type": "STRING", "description": "Product line name."},
                                "description": {"type": "STRING", "description": "Short description of the product line."},
                                "variants": {"type": "ARRAY", "items": _VARIANT_SCHEMA},
                            },
                            "required": ["name", "variants"],
                        },
                    },
                },
                "required": ["name", "products"],
            },
        },
    },
    "required": ["supplierName", "categories"],
}


class ExtractionAdapter:
    def __init__(self, llm: Optional[GeminiService] = None, db: Optional[Session] = None):
        self.llm = llm or GeminiService(db)

    def ensure_credentials(self) -> None:
        self.llm.require_api_key()

    def model_for(self, quality: OCRQuality) -> str:
        if OCRQuality(quality) == OCRQuality.HIGH:
            return settings.gemini_model_high
        return settings.gemini_model_standard

    async def extract(self, scrape_input: ScrapeInput, quality: OCRQuality = OCRQuality.HIGH) -> Catalog:
        model = self.model_for(quality)
        try:
            if isinstance(scrape_input, UrlInput):
                answer = await self._extract_url(scrape_input, model)
            else:
                answer = await self._extract_file(scrape_input, model)
        except LLMError as e:
            raise ExtractionError(f"The request to the AI model failed. {str(e)[:100]}...") from e
        return parse_catalog(answer)

    async def _extract_url(self, scrape_input: UrlInput, model: str) -> str:
        return await self.llm.generate(
            [user_content(text_part(load_prompt("extraction/url_user", url=scrape_input.value)))],
            model_name=model,
            system_instruction=load_prompt("extraction/url_system"),
            tools=[GOOGLE_SEARCH_TOOL],
        )

    async def _extract_file(self, scrape_input: FileInput, model: str) -> str:
        try:
            pages = f"{pdf_content.page_count(scrape_input.content)} pages"
        except ExtractionError as e:
            logger.warning(f"{scrape_input.filename}: {e}")
            pages = "page count unknown"
        logger.info(f"Sending {scrape_input.filename} ({pages}) to {model}")
        return await self.llm.generate(
            [
                user_content(
                    text_part(load_prompt("extraction/file_user", filename=scrape_input.filename)),
                    inline_part(pdf_content.PDF_MIME_TYPE, pdf_content.encode_document(scrape_input.content)),
                )
            ],
            model_name=model,
            system_instruction=load_prompt("extraction/file_system"),
            response_schema=CATALOG_RESPONSE_SCHEMA,
        )

    async def detect(self, scrape_input: ScrapeInput) -> DetectionResult:
        model = settings.gemini_model_detection
        if isinstance(scrape_input, UrlInput):
            answer = await self.llm.generate(
                [user_content(text_part(load_prompt("detection/url", url=scrape_input.value)))],
                model_name=model,
                tools=[GOOGLE_SEARCH_TOOL],
            )
        else:
            text = pdf_content.extract_text(scrape_input.content, limit=settings.pdf_text_limit)
            answer = await self.llm.generate(
                [user_content(text_part(load_prompt(
                    "detection/file", source=scrape_input.filename, content=text
                )))],
                model_name=model,
                response_mime_type="application/json",
            )
        return parse_detection(answer, scrape_input.source_name)

    async def detect_all(self, inputs: Sequence[ScrapeInput]) -> List[DetectionResult]:
        results = []
        for scrape_input in inputs:
            try:
                results.append(await self.detect(scrape_input))
            except (ExtractionError, LLMError) as e:
                logger.error(f"Error detecting products for {scrape_input.source_name}: {e}")
                results.append(
                    DetectionResult(
                        source=scrape_input.source_name,
                        confidence=Confidence.LOW,
                        summary=DETECTION_ERROR_SUMMARY,
                    )
                )
        return results

    def chat_stream(
        self,
        catalog: Catalog,
        message: str,
        history: Sequence[ChatMessage],
    ) -> AsyncIterator[str]:
        """Stream a reply; ``history`` holds only the turns before ``message``."""
        contents = [
            {"role": m.role.value, "parts": [text_part(m.text)]} for m in history
        ]
        contents.append(user_content(text_part(message)))
        return self.llm.stream(
            contents,
            model_name=settings.gemini_model_chat,
            system_instruction=load_prompt("chat/system", catalog_json=catalog.to_json(indent=2)),
        )
