"""Input validators shared by the admin forms and the lesson player."""

import re
from typing import Optional

_VIDEO_ID_RE = re.compile(r"[A-Za-z0-9_-]{11}")

YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{video_id}"


def is_valid_video_id(value: Optional[str]) -> bool:
    """True for a YouTube video id: exactly 11 of [A-Za-z0-9_-]."""
    if not isinstance(value, str):
        return False
    return _VIDEO_ID_RE.fullmatch(value) is not None


def embed_url(video_id: Optional[str]) -> Optional[str]:
    if not is_valid_video_id(video_id):
        return None
    return YOUTUBE_EMBED_URL.format(video_id=video_id)


def clean_text(value: Optional[str]) -> str:
    return (value or "").strip()
