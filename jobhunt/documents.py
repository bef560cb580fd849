"""Turn an uploaded résumé (PDF or raster image) into chat content parts.

Images travel inline as base64 data URLs. PDFs are sent as their extracted
text, since OpenAI-compatible endpoints do not all accept PDF payloads.
"""
from __future__ import annotations

import base64
import io
import re
from typing import Any

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from jobhunt.config import ACCEPTED_MIME_TYPES
from jobhunt.errors import OperationFailed
from jobhunt.log import get_logger

log = get_logger(__name__)

_MAX_PDF_CHARS = 12000


def _fix_spacing(text: str) -> str:
    """Re-insert spaces when PDF extraction merges words together."""
    if not text or len(text) < 50:
        return text
    space_ratio = text.count(" ") / len(text)
    if space_ratio > 0.08:
        return text

    log.debug("Low space ratio (%.2f%%) — applying spacing fix", space_ratio * 100)
    fixed = re.sub(r"([a-z])([A-Z])", r"\1 \2", text)
    fixed = re.sub(r"([a-zA-Z])(\d)", r"\1 \2", fixed)
    fixed = re.sub(r"(\d)([a-zA-Z])", r"\1 \2", fixed)
    fixed = re.sub(r"([.!?,;:])([A-Za-z])", r"\1 \2", fixed)
    return fixed


def extract_pdf_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [_fix_spacing(page.extract_text() or "") for page in reader.pages]
    except PdfReadError as exc:
        raise OperationFailed(f"Could not read the PDF file ({exc}).") from exc
    return "\n".join(pages)


def document_parts(data: bytes, mime_type: str) -> list[dict[str, Any]]:
    if mime_type not in ACCEPTED_MIME_TYPES:
        raise OperationFailed(
            f"Unsupported file type '{mime_type}'. Please upload a PDF or Image file."
        )

    if mime_type == "application/pdf":
        text = extract_pdf_text(data)
        if not text.strip():
            raise OperationFailed(
                "Could not extract any text from the PDF. Try uploading an image of it instead."
            )
        log.info("Extracted %d characters from PDF resume", len(text))
        return [{"type": "text", "text": f"RESUME DOCUMENT:\n{text[:_MAX_PDF_CHARS]}"}]

    encoded = base64.b64encode(data).decode("ascii")
    return [{"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}}]
