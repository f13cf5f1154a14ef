"""Media file helpers: link scheme by extension, media lookup beside subtitles."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = frozenset({
    ".aac", ".flac", ".m4a", ".mp3", ".oga", ".ogg", ".opus", ".wav", ".wma",
})
VIDEO_EXTENSIONS = frozenset({
    ".avi", ".flv", ".m4v", ".mkv", ".mov", ".mp4", ".mpeg", ".mpg", ".ogv",
    ".rmvb", ".webm", ".wmv",
})


def is_url(ref: str) -> bool:
    return ref.startswith(("http://", "https://"))


def link_scheme_for(media_ref: str | Path) -> str:
    """``audio`` for audio files, ``video`` for everything else (URLs included)."""
    ref = str(media_ref)
    if is_url(ref):
        return "video"
    return "audio" if Path(ref).suffix.lower() in AUDIO_EXTENSIONS else "video"


def find_media_for_subtitle(subtitle_path: str | Path) -> Path | None:
    """Find the media file a subtitle belongs to.

    ``talk.en.vtt`` matches ``talk.en.mp4`` first, then ``talk.mp4``.
    Video files win over audio files with the same stem.
    """
    subtitle_path = Path(subtitle_path)
    folder = subtitle_path.parent
    stem = subtitle_path.stem
    candidates = [stem]
    while "." in stem:
        stem = stem.rsplit(".", 1)[0]
        candidates.append(stem)

    for base in candidates:
        for extensions in (VIDEO_EXTENSIONS, AUDIO_EXTENSIONS):
            for ext in sorted(extensions):
                path = folder / f"{base}{ext}"
                if path.is_file():
                    logger.debug("Media for %s: %s", subtitle_path.name, path)
                    return path
    return None
