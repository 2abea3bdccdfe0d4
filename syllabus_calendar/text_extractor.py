from __future__ import annotations

import io
import logging
from typing import Tuple

import pdfplumber
from fastapi import HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger("syllabus_calendar.upload")

PDF_MEDIA_TYPE = "application/pdf"
MAX_CHARACTERS = 200_000
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB
READ_CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB

EMPTY_UPLOAD_MESSAGE = "No file uploaded or file is empty"
NOT_PDF_MESSAGE = "Please select a PDF file. Only PDF syllabi are supported."
TOO_LARGE_MESSAGE = "File size too large. Please select a PDF smaller than 10MB."
PDF_FAILURE_MESSAGE = "Failed to process PDF. Please try again."
NO_TEXT_MESSAGE = "Could not extract any text from the PDF."


async def extract_text_from_upload(
    upload: UploadFile,
    *,
    max_file_size: int = MAX_FILE_SIZE,
    max_characters: int = MAX_CHARACTERS,
) -> Tuple[str, str]:
    """Validate an uploaded syllabus PDF and return ``(text, preview)``."""

    media_type = (upload.content_type or "").split(";")[0].strip().lower()
    if media_type != PDF_MEDIA_TYPE:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=NOT_PDF_MESSAGE)

    data = await _read_bytes(upload, limit=max_file_size)
    if not data:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=EMPTY_UPLOAD_MESSAGE)

    try:
        text = await run_in_threadpool(read_pdf_text, data)
    except Exception as exc:
        logger.warning("PDF decoding failed for %s: %s", upload.filename or "uploaded", exc)
        raise HTTPException(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail=PDF_FAILURE_MESSAGE
        ) from exc

    text = text.strip()
    if not text:
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail=NO_TEXT_MESSAGE)
    if len(text) > max_characters:
        text = text[:max_characters]

    preview = text[:200].replace("\n", " ")
    return text, preview


def read_pdf_text(data: bytes) -> str:
    text_chunks = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            text_chunks.append(page.extract_text() or "")
    return "\n".join(text_chunks)


async def _read_bytes(upload: UploadFile, *, limit: int = MAX_FILE_SIZE) -> bytes:
    await upload.seek(0)
    buffer = bytearray()
    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise HTTPException(
                status_code=HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=TOO_LARGE_MESSAGE,
            )
    await upload.seek(0)
    return bytes(buffer)
