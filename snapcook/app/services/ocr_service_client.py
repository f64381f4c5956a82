"""
Client for the Azure Computer Vision OCR endpoint.

Sends raw image bytes to the v3.2 ``/ocr`` operation with automatic language
and orientation detection, then rebuilds plain text from the returned
region -> line -> word hierarchy.
"""
import logging
from typing import Any, Dict, List

import httpx

from snapcook.app.core.config import get_settings
from snapcook.app.core.errors import OcrError

logger = logging.getLogger(__name__)

OCR_PATH = "/vision/v3.2/ocr"
OCR_PARAMS = {"language": "unk", "detectOrientation": "true"}

NO_TEXT_FOUND = "⚠️ No text found in image"


def _get_auth_headers() -> Dict[str, str]:
    settings = get_settings()
    if not settings.azure_vision_key:
        raise OcrError("OCR service is not configured", detail="AZURE_VISION_KEY must be set")
    return {
        "Ocp-Apim-Subscription-Key": settings.azure_vision_key,
        "Content-Type": "application/octet-stream",
    }


def reconstruct_text(payload: Dict[str, Any]) -> str:
    """Join words with spaces and lines with newlines, keeping region and line order."""
    if not isinstance(payload, dict):
        raise OcrError("Malformed OCR response", detail="response body is not a JSON object")

    lines: List[str] = []
    try:
        for region in payload.get("regions") or []:
            for line in region["lines"]:
                lines.append(" ".join(word["text"] for word in line["words"]))
    except (KeyError, TypeError) as exc:
        raise OcrError("Malformed OCR response", detail=f"unexpected region/line/word structure: {exc}") from exc
    return "\n".join(lines)


def is_blank(text: str) -> bool:
    return not text or not text.strip()


async def extract_text(image_bytes: bytes) -> str:
    """
    Run OCR over an image and return the recognized text.

    An empty string is a valid result meaning the image had no readable text;
    callers decide how to report it. Transport failures, error statuses and
    malformed bodies raise ``OcrError``.
    """
    settings = get_settings()
    if not settings.azure_vision_endpoint:
        raise OcrError("OCR service is not configured", detail="AZURE_VISION_ENDPOINT must be set")

    url = f"{settings.azure_vision_endpoint.rstrip('/')}{OCR_PATH}"
    headers = _get_auth_headers()
    timeout_seconds = settings.ocr_timeout_seconds

    try:
        timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(url, params=OCR_PARAMS, content=image_bytes, headers=headers)
    except httpx.TimeoutException as exc:
        logger.warning("OCR request timed out after %ss", timeout_seconds)
        raise OcrError("OCR service timed out", detail=f"no response after {timeout_seconds}s") from exc
    except httpx.HTTPError as exc:
        logger.warning("OCR request failed: %s", exc)
        raise OcrError("OCR service unreachable", detail=str(exc)) from exc

    if resp.status_code >= 400:
        logger.warning(
            "OCR service returned error: status=%s, body=%s",
            resp.status_code,
            resp.text[:1000],
        )
        raise OcrError("OCR service error", detail=f"{resp.status_code} - {resp.text[:500]}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise OcrError("Malformed OCR response", detail="response body is not valid JSON") from exc

    text = reconstruct_text(data)
    logger.debug(
        "OCR metadata: language=%s, orientation=%s, text_angle=%s",
        data.get("language"),
        data.get("orientation"),
        data.get("textAngle"),
    )
    logger.info("OCR success: bytes=%d, text_len=%d", len(image_bytes), len(text))
    return text
