"""Classify submitted URLs by platform and derive YouTube thumbnails."""

import re
from enum import Enum
from typing import Optional

INSTAGRAM_DOMAINS = ("instagram.com",)
YOUTUBE_DOMAINS = ("youtube.com", "youtu.be")

YOUTUBE_THUMBNAIL_TEMPLATE = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"

# watch?v=, /embed/, /e/, /v/, /shorts/, youtu.be/ and /<segment>/<segment>/ shapes
_YOUTUBE_ID_RE = re.compile(
    r"(?:youtube\.com/(?:[^/\n\s]+/\S+/|(?:v|e(?:mbed)?|shorts)/|.*[?&]v=)|youtu\.be/)([\w-]{11})",
    re.ASCII,
)


class Platform(str, Enum):
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    UNSUPPORTED = "unsupported"


def classify(url: Optional[str]) -> Platform:
    if not url:
        return Platform.UNSUPPORTED
    if any(domain in url for domain in INSTAGRAM_DOMAINS):
        return Platform.INSTAGRAM
    if any(domain in url for domain in YOUTUBE_DOMAINS):
        return Platform.YOUTUBE
    return Platform.UNSUPPORTED


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    match = _YOUTUBE_ID_RE.search(url)
    return match.group(1) if match else None


def youtube_thumbnail_url(video_id: str) -> str:
    return YOUTUBE_THUMBNAIL_TEMPLATE.format(video_id=video_id)
