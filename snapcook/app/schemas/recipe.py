from typing import List, Optional

from pydantic import BaseModel


class NutritionalInfo(BaseModel):
    total_calories: Optional[str] = None
    protein: Optional[str] = None
    carbs: Optional[str] = None
    fat: Optional[str] = None


class StructuredRecipe(BaseModel):
    title: str
    ingredients: List[str]
    instructions: List[str]
    nutritional_info: Optional[NutritionalInfo] = None
    cooking_time: Optional[str] = None
    serving_size: Optional[str] = None
    influencer: Optional[str] = None
    # Set from the source thumbnail after structuring, never by the model.
    image: Optional[str] = None


class UrlExtractRequest(BaseModel):
    url: Optional[str] = None


class UrlExtractResponse(BaseModel):
    structured: StructuredRecipe
    thumbnail: Optional[str] = None


class OcrExtractResponse(BaseModel):
    parsed: str
    structured: StructuredRecipe


class NoTextFoundResponse(BaseModel):
    extracted: str


class EnvironmentStatus(BaseModel):
    azure_key_set: bool
    gemini_key_set: bool


class ServiceStatus(BaseModel):
    status: str
    message: str
    timestamp: str
    environment: EnvironmentStatus


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
