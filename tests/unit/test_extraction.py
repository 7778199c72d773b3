"""Unit tests for the extraction adapter with a mocked model client."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config import settings
from src.models import ChatMessage, ChatRole, Confidence, FileInput, OCRQuality, UrlInput
from src.services.errors import CatalogParseError, ExtractionError, LLMError
from src.services.extraction import CATALOG_RESPONSE_SCHEMA, DETECTION_ERROR_SUMMARY, ExtractionAdapter

CATALOG_ANSWER = (
    '{"supplierName": "Acme", "categories": [{"name": "Drills", "products": '
    '[{"name": "Cordless", "variants": [{"name": "Compact", "price": "$129", "sku": "CD-1"}]}]}]}'
)


@pytest.fixture
def llm():
    mock_llm = MagicMock()
    mock_llm.generate = AsyncMock(return_value=CATALOG_ANSWER)
    return mock_llm


@pytest.fixture
def pdf_input(monkeypatch):
    from src.services import pdf_content

    monkeypatch.setattr(pdf_content, "page_count", lambda content: 4)
    monkeypatch.setattr(pdf_content, "extract_text", lambda content, limit=None: "Drill CD-1 $129")
    return FileInput(filename="acme.pdf", content=b"%PDF-1.4 fake")


def test_model_for_quality():
    adapter = ExtractionAdapter(llm=MagicMock())
    assert adapter.model_for(OCRQuality.HIGH) == settings.gemini_model_high
    assert adapter.model_for(OCRQuality.STANDARD) == settings.gemini_model_standard


@pytest.mark.asyncio
async def test_extract_url_uses_search_tool(llm):
    adapter = ExtractionAdapter(llm=llm)

    catalog = await adapter.extract(UrlInput(value="https://acme.example"), OCRQuality.STANDARD)

    assert catalog.supplier_name == "Acme"
    kwargs = llm.generate.call_args.kwargs
    assert kwargs["model_name"] == settings.gemini_model_standard
    assert kwargs["tools"] == [{"google_search": {}}]
    prompt_text = llm.generate.call_args.args[0][0]["parts"][0]["text"]
    assert "https://acme.example" in prompt_text


@pytest.mark.asyncio
async def test_extract_file_sends_inline_pdf_with_schema(llm, pdf_input):
    adapter = ExtractionAdapter(llm=llm)

    await adapter.extract(pdf_input, OCRQuality.HIGH)

    kwargs = llm.generate.call_args.kwargs
    assert kwargs["model_name"] == settings.gemini_model_high
    assert kwargs["response_schema"] == CATALOG_RESPONSE_SCHEMA
    parts = llm.generate.call_args.args[0][0]["parts"]
    assert parts[1]["inline_data"]["mime_type"] == "application/pdf"


@pytest.mark.asyncio
async def test_pdf_unreadable_locally_is_still_sent(llm, pdf_input, monkeypatch):
    from src.services import pdf_content

    def unreadable(content):
        raise ExtractionError("Could not read PDF: EOF marker not found")

    monkeypatch.setattr(pdf_content, "page_count", unreadable)
    adapter = ExtractionAdapter(llm=llm)

    catalog = await adapter.extract(pdf_input, OCRQuality.HIGH)

    assert catalog.supplier_name == "Acme"
    llm.generate.assert_awaited_once()


@pytest.mark.asyncio
async def test_llm_failure_becomes_extraction_error(llm):
    llm.generate.side_effect = LLMError("503 Service Unavailable")
    adapter = ExtractionAdapter(llm=llm)

    with pytest.raises(ExtractionError, match="The request to the AI model failed. 503"):
        await adapter.extract(UrlInput(value="https://acme.example"))


@pytest.mark.asyncio
async def test_unparseable_answer_raises_parse_error(llm):
    llm.generate.return_value = "Sorry, nothing here."
    adapter = ExtractionAdapter(llm=llm)

    with pytest.raises(CatalogParseError):
        await adapter.extract(UrlInput(value="https://acme.example"))


@pytest.mark.asyncio
async def test_detect_file_uses_extracted_text(llm, pdf_input):
    llm.generate.return_value = '{"confidence": "Medium", "summary": "Looks like a price list."}'
    adapter = ExtractionAdapter(llm=llm)

    result = await adapter.detect(pdf_input)

    assert result.source == "acme.pdf"
    assert result.confidence == Confidence.MEDIUM
    prompt_text = llm.generate.call_args.args[0][0]["parts"][0]["text"]
    assert "Drill CD-1 $129" in prompt_text


@pytest.mark.asyncio
async def test_detect_all_turns_failures_into_low_confidence(llm):
    llm.generate.side_effect = [
        '{"confidence": "High", "summary": "Product catalog."}',
        LLMError("timeout"),
    ]
    adapter = ExtractionAdapter(llm=llm)

    results = await adapter.detect_all([UrlInput(value="https://a.example"), UrlInput(value="https://b.example")])

    assert [r.confidence for r in results] == [Confidence.HIGH, Confidence.LOW]
    assert results[1].summary == DETECTION_ERROR_SUMMARY


def test_chat_stream_puts_history_before_current_message(sample_catalog):
    llm = MagicMock()
    adapter = ExtractionAdapter(llm=llm)
    history = [
        ChatMessage(role=ChatRole.USER, text="Cheapest drill?"),
        ChatMessage(role=ChatRole.MODEL, text="The Compact."),
    ]

    adapter.chat_stream(sample_catalog, "And the priciest?", history)

    contents = llm.stream.call_args.args[0]
    assert [(c["role"], c["parts"][0]["text"]) for c in contents] == [
        ("user", "Cheapest drill?"),
        ("model", "The Compact."),
        ("user", "And the priciest?"),
    ]
    kwargs = llm.stream.call_args.kwargs
    assert kwargs["model_name"] == settings.gemini_model_chat
    assert '"supplierName": "Acme Tools"' in kwargs["system_instruction"]


def test_ensure_credentials_delegates_to_client():
    llm = MagicMock()
    ExtractionAdapter(llm=llm).ensure_credentials()
    llm.require_api_key.assert_called_once()
