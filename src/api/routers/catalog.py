"""API router for catalog extraction, views, export and chat."""

import asyncio
import logging
from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session

from src.config import settings
from src.models import get_db
from src.models.catalog import Catalog, DetectionResult, ScrapeInput, ScrapeProgress
from src.models.domain import ExportFormat, OCRQuality
from src.models.schemas import (
    ChatEvent,
    ChatRequest,
    ScrapeEvent,
    ScrapeFailure,
    ScrapeResponse,
    ViewRequest,
    ViewResponse,
)
from src.services import preferences
from src.services.catalog_export import build_export
from src.services.catalog_view import category_names, derive_view, has_active_filters, summarize
from src.services.chat_session import ChatSubscription
from src.services.errors import InputValidationError, ScrapeRunError
from src.services.extraction import ExtractionAdapter
from src.services.input_validation import split_url_lines, validate_file_inputs, validate_url_inputs
from src.services.scrape_pipeline import ScrapeRunResult, collect_catalog

logger = logging.getLogger(__name__)

router = APIRouter()

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def get_extraction_adapter(db: Session = Depends(get_db)) -> ExtractionAdapter:
    return ExtractionAdapter(db=db)


async def _read_inputs(urls: Optional[str], files: Optional[List[UploadFile]]) -> List[ScrapeInput]:
    uploads = [f for f in (files or []) if f.filename]
    url_lines = split_url_lines(urls or "")
    if not uploads and not url_lines:
        raise InputValidationError("Please enter at least one URL or select at least one PDF file.")

    inputs: List[ScrapeInput] = []
    if url_lines:
        inputs.extend(validate_url_inputs(url_lines))
    if uploads:
        payload = [(f.filename, await f.read(), f.content_type) for f in uploads]
        inputs.extend(validate_file_inputs(payload))
    return inputs


def _resolve_quality(quality: Optional[OCRQuality], db: Session) -> OCRQuality:
    return quality or preferences.get_ocr_quality(db)


def _scrape_response(result: ScrapeRunResult) -> ScrapeResponse:
    return ScrapeResponse(
        catalog=result.catalog,
        summary=summarize(result.catalog),
        sources=result.merged_sources,
    )


def _scrape_failure(result: ScrapeRunResult) -> ScrapeFailure:
    error = ScrapeRunError(result.errors, partial_catalog=result.catalog)
    return ScrapeFailure(
        message=str(error),
        errors=error.errors,
        partial_catalog=error.partial_catalog if settings.show_partial_results else None,
    )


@router.post("/scrape", response_model=ScrapeResponse)
async def scrape(
    urls: Optional[str] = Form(default=None),
    files: Optional[List[UploadFile]] = File(default=None),
    quality: Optional[OCRQuality] = Form(default=None),
    db: Session = Depends(get_db),
    adapter: ExtractionAdapter = Depends(get_extraction_adapter),
) -> ScrapeResponse:
    """
    Extract and merge a catalog from URLs and/or PDF files.

    Inputs are processed one at a time, in the order given (URLs first).
    Any per-source failure fails the whole request with a 422 listing every
    failed source.
    """
    inputs = await _read_inputs(urls, files)
    adapter.ensure_credentials()
    result = await collect_catalog(inputs, adapter, _resolve_quality(quality, db))
    if not result.ok:
        raise HTTPException(status_code=422, detail=_scrape_failure(result).model_dump(by_alias=True))
    return _scrape_response(result)


async def scrape_events(
    inputs: List[ScrapeInput], adapter: ExtractionAdapter, quality: OCRQuality
) -> AsyncIterator[str]:
    """NDJSON lines for a run. Closing the generator cancels the run."""
    queue: asyncio.Queue[ScrapeProgress] = asyncio.Queue()
    task = asyncio.create_task(collect_catalog(inputs, adapter, quality, on_progress=queue.put_nowait))
    try:
        while not (task.done() and queue.empty()):
            try:
                progress = await asyncio.wait_for(queue.get(), timeout=0.5)
            except asyncio.TimeoutError:
                continue
            yield ScrapeEvent(type="progress", progress=progress).model_dump_json(by_alias=True) + "\n"
        result = task.result()
    finally:
        if not task.done():
            logger.info("Scrape stream closed early, cancelling run")
            task.cancel()

    if result.ok:
        event = ScrapeEvent(type="result", result=_scrape_response(result))
    else:
        event = ScrapeEvent(type="error", failure=_scrape_failure(result))
    yield event.model_dump_json(by_alias=True) + "\n"


@router.post("/scrape/stream")
async def scrape_stream(
    urls: Optional[str] = Form(default=None),
    files: Optional[List[UploadFile]] = File(default=None),
    quality: Optional[OCRQuality] = Form(default=None),
    db: Session = Depends(get_db),
    adapter: ExtractionAdapter = Depends(get_extraction_adapter),
) -> StreamingResponse:
    """Same as /scrape, reported as NDJSON progress events then one final event."""
    inputs = await _read_inputs(urls, files)
    adapter.ensure_credentials()
    return StreamingResponse(
        scrape_events(inputs, adapter, _resolve_quality(quality, db)),
        media_type=NDJSON_MEDIA_TYPE,
    )


@router.post("/detect", response_model=List[DetectionResult])
async def detect(
    urls: Optional[str] = Form(default=None),
    files: Optional[List[UploadFile]] = File(default=None),
    adapter: ExtractionAdapter = Depends(get_extraction_adapter),
) -> List[DetectionResult]:
    """Quick check of whether each input looks like a product catalog."""
    inputs = await _read_inputs(urls, files)
    adapter.ensure_credentials()
    return await adapter.detect_all(inputs)


@router.post("/view", response_model=ViewResponse)
async def view(request: ViewRequest) -> ViewResponse:
    selected = frozenset(request.selected_categories)
    derived = derive_view(request.catalog, selected, request.search_query, request.sort_option)
    return ViewResponse(
        catalog=derived,
        summary=summarize(derived),
        categories=category_names(request.catalog),
        has_active_filters=has_active_filters(selected, request.search_query, request.sort_option),
    )


@router.post("/export")
async def export(
    catalog: Catalog,
    fmt: ExportFormat = Query(default=ExportFormat.CSV, alias="format"),
) -> Response:
    export_file = build_export(catalog, fmt)
    return Response(
        content=export_file.content,
        media_type=export_file.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export_file.filename}"'},
    )


@router.post("/chat")
async def chat(
    chat_request: ChatRequest,
    request: Request,
    adapter: ExtractionAdapter = Depends(get_extraction_adapter),
) -> StreamingResponse:
    """
    Stream a reply about the given catalog as NDJSON ``chunk`` events.

    A failing stream ends with a single ``error`` event carrying the apology
    text. The stream stops early if the client disconnects.
    """
    adapter.ensure_credentials()
    subscription = ChatSubscription(
        adapter.chat_stream(chat_request.catalog, chat_request.message, chat_request.history)
    )

    async def events() -> AsyncIterator[str]:
        async for chunk in subscription.chunks():
            if await request.is_disconnected():
                subscription.cancel()
                continue
            yield ChatEvent(type="chunk", text=chunk).model_dump_json() + "\n"
        apology = subscription.error_message()
        if apology:
            yield ChatEvent(type="error", text=apology).model_dump_json() + "\n"

    return StreamingResponse(events(), media_type=NDJSON_MEDIA_TYPE)
