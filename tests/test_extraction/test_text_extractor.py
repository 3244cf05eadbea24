"""Tests for text extraction."""

import asyncio
import io
import time

import fitz
import pytest
import pytesseract
from PIL import Image

from conftest import make_pdf
from papermind.infrastructure.extraction import UNSUPPORTED_TYPE_PLACEHOLDER, TextExtractor, normalize_mime_type
from papermind.modules.common.exceptions import ExtractionError


@pytest.fixture
def extractor():
    return TextExtractor(timeout=30)


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.asyncio
async def test_extract_pdf_text(extractor: TextExtractor):
    text = await extractor.extract(make_pdf("Quarterly tax notice", "Pay by 2025-04-15"), "application/pdf")

    assert "Quarterly tax notice" in text
    assert "Pay by 2025-04-15" in text


@pytest.mark.asyncio
async def test_extract_pdf_multiple_pages(extractor: TextExtractor):
    document = fitz.open()
    for line in ("first page", "second page"):
        document.new_page().insert_text((72, 72), line)
    data = document.tobytes()
    document.close()

    text = await extractor.extract(data, "application/pdf; charset=binary")

    assert text.index("first page") < text.index("second page")
    assert "\n\n" in text


@pytest.mark.asyncio
async def test_extract_corrupt_pdf(extractor: TextExtractor):
    with pytest.raises(ExtractionError):
        await extractor.extract(b"%PDF-1.4 truncated garbage", "application/pdf")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "mime_type",
    ["application/msword", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"],
)
async def test_word_documents_use_placeholder(extractor: TextExtractor, mime_type: str):
    assert await extractor.extract(b"anything", mime_type) == UNSUPPORTED_TYPE_PLACEHOLDER


@pytest.mark.asyncio
async def test_extract_image_uses_ocr(extractor: TextExtractor, monkeypatch):
    calls = []

    def fake_image_to_string(image, lang, timeout):
        calls.append((image.mode, lang))
        return "  Parking   fine\n\n\nDue 2025-02-01 "

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)

    text = await extractor.extract(png_bytes(), "image/png")

    assert text == "Parking fine\nDue 2025-02-01"
    assert calls == [("RGB", "eng")]


@pytest.mark.asyncio
async def test_extract_image_without_tesseract(extractor: TextExtractor, monkeypatch):
    def missing_tesseract(*args, **kwargs):
        raise pytesseract.TesseractNotFoundError()

    monkeypatch.setattr(pytesseract, "image_to_string", missing_tesseract)

    with pytest.raises(ExtractionError):
        await extractor.extract(png_bytes(), "image/png")


@pytest.mark.asyncio
async def test_extract_undecodable_image(extractor: TextExtractor):
    with pytest.raises(ExtractionError):
        await extractor.extract(b"not an image", "image/jpeg")


@pytest.mark.asyncio
async def test_extract_timeout(monkeypatch):
    extractor = TextExtractor(timeout=0.05)

    def slow_pdf(data):
        time.sleep(0.5)
        return "late"

    monkeypatch.setattr(extractor, "_extract_pdf", slow_pdf)

    with pytest.raises(ExtractionError):
        await extractor.extract(b"%PDF", "application/pdf")
    await asyncio.sleep(0.5)


def test_normalize_mime_type():
    assert normalize_mime_type(" Application/PDF; charset=binary") == "application/pdf"


@pytest.mark.asyncio
async def test_extract_image_too_large_to_decode(extractor: TextExtractor, monkeypatch):
    # A 40x20 image is a decompression bomb once the pixel limit is 100.
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(ExtractionError):
        await extractor.extract(png_bytes(), "image/png")
