"""
Decides whether a downloaded file can go straight to transcription or needs
its audio track extracted first.

Precedence, highest first:

1. content type matches a video MIME pattern   -> NEEDS_EXTRACTION
2. content type matches an audio MIME pattern  -> AUDIO_ONLY
3. extension is audio-only                     -> AUDIO_ONLY
4. extension is an ambiguous container         -> NEEDS_EXTRACTION
5. anything else                               -> NEEDS_EXTRACTION

Content-type evidence always outranks the extension, and uncertainty always
resolves toward extraction.
"""

import os
from typing import Optional

from mediascribe.models import FileKind

# Prefix patterns, matched against the lower-cased media type without parameters
VIDEO_MIME_PATTERNS = (
    "video/",
    "application/x-matroska",
    "application/vnd.rn-realmedia",
)

AUDIO_MIME_PATTERNS = (
    "audio/",
    "application/ogg",
)

# Never anything but audio
AUDIO_ONLY_EXTENSIONS = frozenset({".mp3", ".wav", ".m4a", ".flac", ".aac", ".ogg", ".mpga"})

# Containers that can hold either audio alone or video
AMBIGUOUS_EXTENSIONS = frozenset({".mp4", ".mpeg", ".webm"})


def normalize_content_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type or None


def _matches(media_type: Optional[str], patterns) -> bool:
    return media_type is not None and any(media_type.startswith(p) for p in patterns)


def classify(path: str, content_type: Optional[str] = None) -> FileKind:
    media_type = normalize_content_type(content_type)
    if _matches(media_type, VIDEO_MIME_PATTERNS):
        return FileKind.NEEDS_EXTRACTION
    if _matches(media_type, AUDIO_MIME_PATTERNS):
        return FileKind.AUDIO_ONLY

    ext = os.path.splitext(path)[1].lower()
    if ext in AUDIO_ONLY_EXTENSIONS:
        return FileKind.AUDIO_ONLY
    if ext in AMBIGUOUS_EXTENSIONS:
        return FileKind.NEEDS_EXTRACTION
    return FileKind.NEEDS_EXTRACTION


def is_audio_file(path: str, content_type: Optional[str] = None) -> bool:
    return classify(path, content_type) is FileKind.AUDIO_ONLY
