"""Wire source acquisition to structuring for the image and URL entry points."""
import logging
from typing import Optional, Union

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from snapcook.app.core.errors import NotFoundError
from snapcook.app.schemas.extraction import ExtractionRequest, ImageExtractionRequest, UrlExtractionRequest
from snapcook.app.schemas.recipe import NoTextFoundResponse, OcrExtractResponse, UrlExtractResponse
from snapcook.app.services import llm_client, ocr_service_client, page_metadata, source_identifier
from snapcook.app.services.browser.base import BrowserCapability
from snapcook.app.services.source_identifier import Platform
from snapcook.app.services.storage.base import UploadStorage, stored_upload

logger = logging.getLogger(__name__)

NO_CAPTION_FOUND = "No caption found"

ImageResult = Union[OcrExtractResponse, NoTextFoundResponse]


async def structure_image_text(text: str) -> ImageResult:
    # Blank OCR output is a 200 sentinel, unlike the 404 for an empty caption.
    if ocr_service_client.is_blank(text):
        logger.info("No text found in image")
        return NoTextFoundResponse(extracted=ocr_service_client.NO_TEXT_FOUND)
    structured = await llm_client.structure_recipe(text)
    return OcrExtractResponse(parsed=text, structured=structured)


async def extract_from_image(image_bytes: bytes) -> ImageResult:
    text = await ocr_service_client.extract_text(image_bytes)
    return await structure_image_text(text)


async def extract_from_upload(upload: UploadFile, storage: UploadStorage) -> ImageResult:
    """Run OCR on an uploaded photo; the stored copy is removed as soon as OCR finishes or fails."""
    async with stored_upload(storage, upload) as path:
        image_bytes = await run_in_threadpool(path.read_bytes)
        logger.info(
            "File received",
            extra={"uploaded_filename": upload.filename, "size_bytes": len(image_bytes)},
        )
        text = await ocr_service_client.extract_text(image_bytes)
    return await structure_image_text(text)


async def extract_from_url(url: str, browser: Optional[BrowserCapability] = None) -> UrlExtractResponse:
    platform = source_identifier.classify(url)
    if platform is Platform.UNSUPPORTED:
        logger.info("Unsupported URL, skipping scrape", extra={"url": url})
        raise NotFoundError(NO_CAPTION_FOUND)

    metadata = await page_metadata.extract_page_metadata(url, platform, browser=browser)
    if not metadata.caption or not metadata.caption.strip():
        raise NotFoundError(NO_CAPTION_FOUND)

    structured = await llm_client.structure_recipe(metadata.caption)
    structured.image = metadata.thumbnail
    return UrlExtractResponse(structured=structured, thumbnail=metadata.thumbnail)


async def run_extraction(request: ExtractionRequest) -> Union[ImageResult, UrlExtractResponse]:
    if isinstance(request, ImageExtractionRequest):
        return await extract_from_image(request.image_bytes)
    if isinstance(request, UrlExtractionRequest):
        return await extract_from_url(request.url)
    raise TypeError(f"Unsupported extraction request: {type(request).__name__}")
