"""Error taxonomy for the extraction pipeline.

Every error carries the HTTP status it maps to and renders as the uniform
``{"error": ..., "detail": ...}`` body returned by the API.
"""
from typing import Any, Dict, Optional

from starlette import status


class RecipeExtractionError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.message}: {self.detail}" if self.detail else self.message

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class ValidationError(RecipeExtractionError):
    """Required input is missing."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(RecipeExtractionError):
    """The source had no extractable content."""

    status_code = status.HTTP_404_NOT_FOUND


class UpstreamError(RecipeExtractionError):
    """An OCR, scraping or structuring capability failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class OcrError(UpstreamError):
    pass


class ScrapeError(UpstreamError):
    pass


class StructuringError(UpstreamError):
    pass


class SchemaViolationError(StructuringError):
    """The structuring reply parsed as JSON but did not match the recipe schema."""
