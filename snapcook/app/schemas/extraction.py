from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class ImageExtractionRequest(BaseModel):
    kind: Literal["image"] = "image"
    image_bytes: bytes


class UrlExtractionRequest(BaseModel):
    kind: Literal["url"] = "url"
    url: str


ExtractionRequest = Annotated[
    Union[ImageExtractionRequest, UrlExtractionRequest],
    Field(discriminator="kind"),
]


class PageMetadata(BaseModel):
    """Caption and thumbnail read from a post or video page."""

    caption: str = ""
    thumbnail: Optional[str] = None
