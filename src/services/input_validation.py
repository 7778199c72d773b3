from typing import Iterable, List, Tuple
from urllib.parse import urlparse

from src.models.catalog import FileInput, UrlInput
from src.services.errors import InputValidationError
from src.services.pdf_content import PDF_MIME_TYPE, looks_like_pdf


def split_url_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def validate_url_inputs(urls: Iterable[str]) -> List[UrlInput]:
    cleaned = [u.strip() for u in urls if u and u.strip()]
    if not cleaned:
        raise InputValidationError("Please enter at least one URL.")
    for url in cleaned:
        if not _is_valid_url(url):
            raise InputValidationError(f"Invalid URL format: {url}")
    return [UrlInput(value=url) for url in cleaned]


def validate_file_inputs(files: Iterable[Tuple[str, bytes, str | None]]) -> List[FileInput]:
    inputs = []
    for filename, content, content_type in files:
        if not filename:
            continue
        if not looks_like_pdf(content, content_type):
            raise InputValidationError(f"Only PDF files are supported: {filename}")
        inputs.append(FileInput(filename=filename, content=content, content_type=PDF_MIME_TYPE))
    if not inputs:
        raise InputValidationError("Please select at least one PDF file.")
    return inputs


def _is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
