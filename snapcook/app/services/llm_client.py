import asyncio
import json
import logging
import re
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError as PydanticValidationError

from snapcook.app.core.config import get_settings
from snapcook.app.core.errors import SchemaViolationError, StructuringError
from snapcook.app.schemas.recipe import StructuredRecipe

logger = logging.getLogger(__name__)


RECIPE_PROMPT = """You are a helpful assistant that extracts recipe information from given text and return only structured JSON with:
- title
- ingredients (list of strings)
- instructions (list of strings, where each string is a detailed step)
- nutritional_info (estimated: total_calories, protein, carbs, fat)
- cooking_time (if present)
- serving_size (if present)
- influencer (if present)

Text: {text}"""

RECIPE_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "ingredients": {"type": "ARRAY", "items": {"type": "STRING"}},
        "instructions": {"type": "ARRAY", "items": {"type": "STRING"}},
        "influencer": {"type": "STRING"},
        "nutritional_info": {
            "type": "OBJECT",
            "properties": {
                "total_calories": {"type": "STRING"},
                "protein": {"type": "STRING"},
                "carbs": {"type": "STRING"},
                "fat": {"type": "STRING"},
            },
        },
        "cooking_time": {"type": "STRING"},
        "serving_size": {"type": "STRING"},
    },
    "required": ["title", "ingredients", "instructions"],
}

# Recipe text is not adversarial; no category should block a reply.
SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    )
]

TRANSIENT_ERRORS = (genai_errors.ServerError, httpx.TransportError)


@lru_cache
def get_genai_client() -> genai.Client:
    settings = get_settings()
    if not settings.gemini_api_key:
        raise StructuringError("Structuring service is not configured", detail="GEMINI_API_KEY must be set")
    return genai.Client(api_key=settings.gemini_api_key)


def build_prompt(text: str) -> str:
    return RECIPE_PROMPT.format(text=text)


def build_generation_config() -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=RECIPE_RESPONSE_SCHEMA,
        safety_settings=SAFETY_SETTINGS,
    )


def _strip_code_fence(text: str) -> str:
    txt = text.strip()
    if txt.startswith("```"):
        txt = re.sub(r"^```[a-zA-Z0-9_-]*\s*", "", txt, count=1)
        txt = re.sub(r"\s*```$", "", txt, count=1).strip()
    return txt


def parse_structured_response(raw: Optional[str]) -> StructuredRecipe:
    """Decode the model reply and validate it against the recipe schema."""
    if not raw or not raw.strip():
        raise StructuringError("Structuring service returned an empty response")

    cleaned = _strip_code_fence(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("Structuring reply is not JSON: %s", cleaned[:500])
        raise StructuringError("Structuring response is not valid JSON", detail=str(exc)) from exc

    if not isinstance(data, dict):
        raise SchemaViolationError(
            "Structuring response does not match the recipe schema",
            detail=f"expected a JSON object, got {type(data).__name__}",
        )
    try:
        return StructuredRecipe.model_validate(data)
    except PydanticValidationError as exc:
        raise SchemaViolationError(
            "Structuring response does not match the recipe schema", detail=str(exc)
        ) from exc


async def _generate(client: genai.Client, text: str) -> types.GenerateContentResponse:
    settings = get_settings()
    attempts = max(settings.structuring_max_retries, 0) + 1
    config = build_generation_config()
    for attempt in range(1, attempts + 1):
        try:
            return await client.aio.models.generate_content(
                model=settings.gemini_model,
                contents=build_prompt(text),
                config=config,
            )
        except TRANSIENT_ERRORS as exc:
            if attempt >= attempts:
                raise StructuringError("Structuring service unavailable", detail=str(exc)) from exc
            delay = settings.structuring_retry_backoff_seconds * (2 ** (attempt - 1))
            logger.warning(
                "Structuring attempt %d/%d failed (%s); retrying in %.1fs", attempt, attempts, exc, delay
            )
            await asyncio.sleep(delay)
        except genai_errors.APIError as exc:
            raise StructuringError("Structuring service error", detail=str(exc)) from exc
    raise StructuringError("Structuring service unavailable")


async def structure_recipe(text: str, client: Optional[genai.Client] = None) -> StructuredRecipe:
    """Turn free-form recipe text into a ``StructuredRecipe`` with one model call."""
    client = client or get_genai_client()
    response = await _generate(client, text)
    try:
        raw = response.text
    except ValueError as exc:
        raise StructuringError("Structuring response has no text", detail=str(exc)) from exc

    recipe = parse_structured_response(raw)
    logger.info(
        "Recipe structured: title=%s, ingredients=%d, instructions=%d",
        recipe.title,
        len(recipe.ingredients),
        len(recipe.instructions),
    )
    return recipe
