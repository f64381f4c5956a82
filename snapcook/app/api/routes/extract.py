import logging
from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, File, UploadFile

from snapcook.app.api.deps import get_browser, get_upload_storage
from snapcook.app.core.errors import NotFoundError, UpstreamError, ValidationError
from snapcook.app.schemas.recipe import (
    ErrorResponse,
    NoTextFoundResponse,
    OcrExtractResponse,
    UrlExtractRequest,
    UrlExtractResponse,
)
from snapcook.app.services import extraction_pipeline
from snapcook.app.services.browser.base import BrowserCapability
from snapcook.app.services.storage.base import UploadStorage

router = APIRouter(tags=["extract"])
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/url-extract", response_model=UrlExtractResponse, responses=ERROR_RESPONSES)
async def url_extract(
    payload: Optional[UrlExtractRequest] = Body(None),
    browser: BrowserCapability = Depends(get_browser),
):
    url = payload.url if payload else None
    if not url:
        raise ValidationError("URL is required")
    try:
        return await extraction_pipeline.extract_from_url(url, browser=browser)
    except (ValidationError, NotFoundError):
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("URL extraction failed", extra={"url": url})
        raise UpstreamError("Failed to process URL", detail=str(exc)) from exc


@router.post(
    "/ocr",
    response_model=Union[OcrExtractResponse, NoTextFoundResponse],
    responses=ERROR_RESPONSES,
)
async def ocr_extract(
    photo: Optional[UploadFile] = File(None),
    storage: UploadStorage = Depends(get_upload_storage),
):
    if photo is None:
        raise ValidationError("No file received")
    try:
        return await extraction_pipeline.extract_from_upload(photo, storage)
    except ValidationError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("OCR extraction failed", extra={"uploaded_filename": photo.filename})
        raise UpstreamError("OCR processing failed", detail=str(exc)) from exc
