"""Text extraction from uploaded files.

PDFs are read with PyMuPDF and raster images go through Tesseract OCR.
Both libraries are blocking, so extraction runs in a worker thread and is
bounded by a timeout.
"""

import asyncio
import io
import re
from functools import lru_cache, partial
from typing import Callable, List, Optional

import fitz  # PyMuPDF
import pytesseract
from PIL import Image, ImageSequence, UnidentifiedImageError

from ...modules.common.exceptions import ExtractionError
from ..config import get_settings
from ..logging import get_logger

logger = get_logger(__name__)

UNSUPPORTED_TYPE_PLACEHOLDER = "Text extraction not supported for this file type yet."

_PDF_MIME_TYPE = "application/pdf"


def normalize_mime_type(mime_type: str) -> str:
    return mime_type.split(";")[0].strip().lower()


class TextExtractor:
    """Turns file bytes into plain text according to their declared MIME type.

    Types other than PDF and images yield ``UNSUPPORTED_TYPE_PLACEHOLDER``
    instead of failing. Unreadable input, a missing OCR engine and timeouts
    raise ``ExtractionError``.
    """

    def __init__(
        self,
        ocr_language: str = "eng",
        timeout: Optional[float] = None,
        tesseract_cmd: Optional[str] = None,
    ) -> None:
        self.ocr_language = ocr_language
        self.timeout = timeout
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    async def extract(self, data: bytes, mime_type: str, timeout: Optional[float] = None) -> str:
        """Extract text from ``data``.

        Args:
            data: Raw file bytes
            mime_type: Declared content type of the file
            timeout: Seconds to wait before giving up; defaults to the extractor's own

        Returns:
            The extracted text, possibly empty
        """
        normalized = normalize_mime_type(mime_type)
        timeout = timeout if timeout is not None else self.timeout

        extractor: Callable[[bytes], str]
        if normalized == _PDF_MIME_TYPE:
            extractor = self._extract_pdf
        elif normalized.startswith("image/"):
            extractor = partial(self._extract_image, ocr_timeout=timeout)
        else:
            logger.info(f"No text extractor for {normalized}; using placeholder text")
            return UNSUPPORTED_TYPE_PLACEHOLDER

        try:
            text = await asyncio.wait_for(asyncio.to_thread(extractor, data), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise ExtractionError(f"Text extraction for {normalized} timed out after {timeout}s") from exc

        logger.debug(f"Extracted {len(text)} characters from {normalized} file")
        return text

    def _extract_pdf(self, data: bytes) -> str:
        try:
            document = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            raise ExtractionError(f"Could not open PDF: {exc}") from exc

        try:
            if document.needs_pass:
                raise ExtractionError("PDF is encrypted")
            if document.page_count == 0:
                raise ExtractionError("PDF has no pages")

            pages: List[str] = []
            for page in document:
                blocks = page.get_text("blocks")
                # Block tuples are (x0, y0, x1, y1, text, block_no, block_type); type 0 is text.
                texts = [self._clean_text(block[4]) for block in blocks if block[6] == 0]
                page_text = "\n".join(text for text in texts if text)
                if page_text:
                    pages.append(page_text)
        except RuntimeError as exc:
            raise ExtractionError(f"Could not read PDF content: {exc}") from exc
        finally:
            document.close()

        return "\n\n".join(pages)

    def _extract_image(self, data: bytes, ocr_timeout: Optional[float] = None) -> str:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise ExtractionError(f"Could not decode image: {exc}") from exc

        frames: List[str] = []
        try:
            for frame in ImageSequence.Iterator(image):
                text = pytesseract.image_to_string(
                    frame.convert("RGB"),
                    lang=self.ocr_language,
                    timeout=ocr_timeout or 0,
                )
                cleaned = self._clean_text(text)
                if cleaned:
                    frames.append(cleaned)
        except pytesseract.TesseractNotFoundError as exc:
            raise ExtractionError("Tesseract OCR engine is not installed") from exc
        except (pytesseract.TesseractError, RuntimeError) as exc:
            raise ExtractionError(f"OCR failed: {exc}") from exc
        finally:
            image.close()

        return "\n\n".join(frames)

    @staticmethod
    def _clean_text(text: str) -> str:
        text = re.sub(r"[ \t]+", " ", text)
        text = re.sub(r"\n\s*\n+", "\n", text)
        return text.strip()


@lru_cache()
def get_text_extractor() -> TextExtractor:
    """Build the process-wide text extractor from settings."""
    settings = get_settings()
    return TextExtractor(
        ocr_language=settings.OCR_LANGUAGE,
        timeout=settings.EXTRACTION_TIMEOUT_SECONDS,
        tesseract_cmd=settings.TESSERACT_CMD or None,
    )
