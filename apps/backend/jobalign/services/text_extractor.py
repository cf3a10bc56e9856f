import io
import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from pypdf import PdfReader

logger = logging.getLogger(__name__)

_TEXT_CONTENT_TYPES = ("text/plain", "text/markdown")


class PdfTextExtractor:
    """
    Best-effort plain text extraction from an uploaded resume.

    Never raises: anything that cannot be read yields an empty string and the
    caller decides whether the text is long enough to analyze.
    """

    def extract_sync(self, data: bytes, content_type: Optional[str] = None) -> str:
        if not data:
            return ""
        if content_type and content_type.split(";")[0].strip() in _TEXT_CONTENT_TYPES:
            return data.decode("utf-8", errors="ignore").strip()
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as e:
            logger.warning(f"PDF text extraction failed: {e}")
            return ""
        text = "\n".join(pages).strip()
        logger.debug(f"Extracted {len(text)} characters from {len(pages)} PDF page(s)")
        return text

    async def extract(self, data: bytes, content_type: Optional[str] = None) -> str:
        return await run_in_threadpool(self.extract_sync, data, content_type)
