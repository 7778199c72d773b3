import base64
import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from src.services.errors import ExtractionError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF-"


def looks_like_pdf(content: bytes, content_type: str | None = None) -> bool:
    if content_type and content_type != PDF_MIME_TYPE:
        return False
    return content[:1024].lstrip().startswith(PDF_MAGIC)


def extract_text(content: bytes, limit: int | None = None) -> str:
    try:
        reader = PdfReader(io.BytesIO(content))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError) as e:
        raise ExtractionError(f"Could not read PDF: {e}") from e

    text = " ".join(pages)
    return text[:limit] if limit is not None else text


def page_count(content: bytes) -> int:
    try:
        return len(PdfReader(io.BytesIO(content)).pages)
    except (PdfReadError, ValueError) as e:
        raise ExtractionError(f"Could not read PDF: {e}") from e


def encode_document(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")
