from typing import List, Tuple

import httpx
import streamlit as st

from src.config import settings
from src.models.catalog import DetectionResult
from src.models.domain import OCRQuality
from src.models.schemas import ScrapeEvent
from src.services import app_state
from src.ui.state import get_state, set_state
from src.ui.utils.catalog_formatting import detection_label, iter_ndjson, progress_fraction

OCR_QUALITY_LABELS = {
    OCRQuality.STANDARD: "Standard (faster)",
    OCRQuality.HIGH: "High (more accurate)",
}


def _load_ocr_quality() -> OCRQuality:
    try:
        response = httpx.get(f"{settings.api_base_url}/preferences/ocr-quality", timeout=10.0)
        response.raise_for_status()
        return OCRQuality(response.json()["quality"])
    except (httpx.HTTPError, KeyError, ValueError):
        return get_state().ocr_quality


def _save_ocr_quality(quality: OCRQuality) -> None:
    try:
        response = httpx.put(
            f"{settings.api_base_url}/preferences/ocr-quality",
            json={"quality": quality.value},
            timeout=10.0,
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        st.warning(f"⚠️ Could not save OCR quality preference: {e}")


def _request_parts(urls_text: str, uploads) -> Tuple[dict, List[tuple]]:
    data = {"urls": urls_text}
    files = [
        ("files", (upload.name, upload.getvalue(), upload.type or "application/pdf"))
        for upload in uploads or []
    ]
    return data, files


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text
    if isinstance(detail, dict):
        return detail.get("message", str(detail))
    return str(detail)


def _run_detection(urls_text: str, uploads) -> None:
    state = set_state(app_state.start_detection(get_state()))
    data, files = _request_parts(urls_text, uploads)
    try:
        with st.spinner("Analyzing sources..."):
            response = httpx.post(
                f"{settings.api_base_url}/catalog/detect",
                data=data,
                files=files or None,
                timeout=settings.llm_timeout_seconds,
            )
        if response.status_code != 200:
            set_state(app_state.fail_detection(state, _error_detail(response)))
            return
        results = [DetectionResult.model_validate(item) for item in response.json()]
        set_state(app_state.finish_detection(state, results))
    except httpx.HTTPError as e:
        set_state(app_state.fail_detection(state, f"Error contacting API: {e}"))


def _run_scrape(urls_text: str, uploads, quality: OCRQuality) -> None:
    state = set_state(app_state.start_run(get_state()))
    data, files = _request_parts(urls_text, uploads)
    data["quality"] = quality.value
    progress_bar = st.progress(0.0, text="Preparing inputs...")

    try:
        with httpx.stream(
            "POST",
            f"{settings.api_base_url}/catalog/scrape/stream",
            data=data,
            files=files or None,
            timeout=None,
        ) as response:
            if response.status_code != 200:
                response.read()
                set_state(app_state.fail_run(state, _error_detail(response)))
                return
            for payload in iter_ndjson(response.iter_lines()):
                event = ScrapeEvent.model_validate(payload)
                if event.type == "progress" and event.progress:
                    state = set_state(app_state.update_progress(state, event.progress))
                    fraction, label = progress_fraction(event.progress)
                    progress_bar.progress(fraction, text=label)
                elif event.type == "result" and event.result:
                    state = set_state(app_state.finish_run(state, event.result.catalog))
                elif event.type == "error" and event.failure:
                    state = set_state(
                        app_state.fail_run(state, event.failure.message, event.failure.partial_catalog)
                    )
    except httpx.HTTPError as e:
        set_state(app_state.fail_run(state, f"Error contacting API: {e}"))
    finally:
        progress_bar.empty()


def show():
    st.title("📦 Extract Supplier Catalog")
    st.write("Extract a normalized product catalog from supplier websites or PDF brochures.")

    state = get_state()
    busy = state.loading or state.is_detecting

    source_type = st.radio("Source", ["Website URLs", "PDF brochures"], horizontal=True)
    urls_text = ""
    uploads = []
    if source_type == "Website URLs":
        urls_text = st.text_area(
            "URLs",
            placeholder="https://supplier.example.com/products\nhttps://supplier.example.com/catalog",
            help="One URL per line",
            height=140,
        )
    else:
        uploads = st.file_uploader(
            "PDF files",
            type=["pdf"],
            accept_multiple_files=True,
        )

    qualities = list(OCRQuality)
    stored_quality = _load_ocr_quality()
    quality = st.radio(
        "OCR quality",
        qualities,
        index=qualities.index(stored_quality),
        format_func=lambda q: OCR_QUALITY_LABELS[q],
        horizontal=True,
        help="High quality uses a larger model. It is slower but reads dense brochures better.",
    )
    if quality != stored_quality:
        _save_ocr_quality(quality)
        state = set_state(app_state.set_ocr_quality(state, quality))

    col1, col2 = st.columns(2)
    with col1:
        if st.button("🔍 Detect Products", disabled=busy, use_container_width=True):
            _run_detection(urls_text, uploads)
    with col2:
        if st.button("🚀 Extract Catalog", type="primary", disabled=busy, use_container_width=True):
            _run_scrape(urls_text, uploads, quality)

    state = get_state()
    if state.error:
        st.error(f"❌ {state.error}")

    if state.detection_results:
        st.markdown("### Detection Results")
        for result in state.detection_results:
            with st.container(border=True):
                st.markdown(detection_label(result))
                st.caption(result.summary)

    if state.catalog and not state.loading:
        summary = app_state.current_summary(state)
        st.success(
            f"✅ Extracted {summary.variants} variants across {summary.categories} categories "
            f"for {state.catalog.supplier_name}. Open the Results page to explore them."
        )
