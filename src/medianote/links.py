"""Org timestamp links: building, escaping, annotating, and finding them.

A timestamp link looks like::

    [[video:/media/talk.mkv::00:01:02][00:01:02]]

The target (``video:/media/talk.mkv::00:01:02``) is escaped the way Org 9.3+
escapes bracket links, so media paths containing brackets or backslashes
survive a round trip.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from medianote.errors import LinkParseError, TimestampParseError
from medianote.timestamps import format_timestamp, split_link_target

logger = logging.getLogger(__name__)

MEDIA_SCHEMES: tuple[str, ...] = ("video", "audio")

_ESCAPE_RE = re.compile(r"(\\*)([\[\]]|\Z)")
_UNESCAPE_RE = re.compile(r"(\\+)(?=[\[\]]|\Z)")

# [[target]] or [[target][label]]; a backslash escapes the next character.
_BRACKET_LINK_RE = re.compile(
    r"\[\[(?P<target>(?:\\.|[^\[\]\\])+)\](?:\[(?P<label>[^\]]*)\])?\]"
)
_MARKER_RE = re.compile(r"(?<![\d:])\d{2,}:[0-5]\d:[0-5]\d(?![\d:])")
_EXCESS_BLANK_LINES_RE = re.compile(r"\n(?:[ \t]*\n){3,}")


def escape_link(target: str) -> str:
    """Backslash-escape brackets, doubling any backslashes right before them or at the end."""

    def _sub(m: re.Match[str]) -> str:
        slashes, char = m.group(1), m.group(2)
        return slashes * 2 + ("\\" + char if char else "")

    return _ESCAPE_RE.sub(_sub, target)


def unescape_link(target: str) -> str:
    """Inverse of :func:`escape_link`."""
    return _UNESCAPE_RE.sub(lambda m: "\\" * (len(m.group(1)) // 2), target)


def make_timestamp_link(scheme: str, media_ref: str, seconds: int) -> str:
    stamp = format_timestamp(seconds)
    return f"[[{escape_link(f'{scheme}:{media_ref}::{stamp}')}][{stamp}]]"


def annotate_timestamps(text: str, media_ref: str, scheme: str = "video") -> str:
    """Turn every bare ``hh:mm:ss`` marker in *text* into a timestamp link.

    Markers already inside a bracket link are left alone. Replacements run
    from the end of the buffer backwards so earlier match offsets stay valid.
    """
    link_spans = [m.span() for m in _BRACKET_LINK_RE.finditer(text)]

    def _inside_link(pos: int) -> bool:
        return any(start <= pos < end for start, end in link_spans)

    markers = [m for m in _MARKER_RE.finditer(text) if not _inside_link(m.start())]
    buf = text
    for m in reversed(markers):
        h, mi, s = (int(part) for part in m.group(0).split(":"))
        link = make_timestamp_link(scheme, media_ref, h * 3600 + mi * 60 + s)
        buf = buf[: m.start()] + link + buf[m.end():]
    logger.debug("Annotated %d timestamp markers with %s links", len(markers), scheme)
    return _EXCESS_BLANK_LINES_RE.sub("\n\n", buf)


@dataclass(frozen=True)
class MediaLink:
    scheme: str
    path: str
    offset: int | None
    label: str | None = None
    start: int = 0  # character span in the source text
    end: int = 0
    line: int = 0  # 1-based

    @property
    def target(self) -> str:
        if self.offset is None:
            return f"{self.scheme}:{self.path}"
        return f"{self.scheme}:{self.path}::{format_timestamp(self.offset)}"


def _split_target(target: str, schemes: Iterable[str]) -> tuple[str, str, int | None]:
    scheme, sep, rest = target.partition(":")
    if not sep or scheme not in schemes:
        raise LinkParseError(f"not a media link: {target!r}")
    path, offset = split_link_target(rest)
    return scheme, path, offset


def parse_media_link(link: str, schemes: Iterable[str] = MEDIA_SCHEMES) -> MediaLink:
    """Parse ``[[video:path::ts][label]]`` or a bare ``video:path::ts`` target."""
    text = link.strip()
    m = _BRACKET_LINK_RE.fullmatch(text)
    if m:
        target, label = unescape_link(m.group("target")), m.group("label")
    else:
        target, label = text, None
    scheme, path, offset = _split_target(target, tuple(schemes))
    return MediaLink(scheme=scheme, path=path, offset=offset, label=label, end=len(text))


def iter_links(
    text: str,
    schemes: Iterable[str] = MEDIA_SCHEMES,
    reverse: bool = False,
) -> Iterator[MediaLink]:
    """Yield every media link in *text*, in buffer order or backwards.

    Links with a media scheme but an unparseable suffix are logged and skipped.
    """
    schemes = tuple(schemes)
    found: list[MediaLink] = []
    for m in _BRACKET_LINK_RE.finditer(text):
        target = unescape_link(m.group("target"))
        if target.partition(":")[0] not in schemes:
            continue
        try:
            scheme, path, offset = _split_target(target, schemes)
        except TimestampParseError as exc:
            logger.warning("Skipping link at offset %d: %s", m.start(), exc)
            continue
        found.append(MediaLink(
            scheme=scheme,
            path=path,
            offset=offset,
            label=m.group("label"),
            start=m.start(),
            end=m.end(),
            line=text.count("\n", 0, m.start()) + 1,
        ))
    yield from (reversed(found) if reverse else found)


def next_link(text: str, line: int, schemes: Iterable[str] = MEDIA_SCHEMES) -> MediaLink | None:
    """First media link on a line after *line*."""
    return next((link for link in iter_links(text, schemes) if link.line > line), None)


def previous_link(text: str, line: int, schemes: Iterable[str] = MEDIA_SCHEMES) -> MediaLink | None:
    """Last media link on a line before *line*."""
    return next(
        (link for link in iter_links(text, schemes, reverse=True) if link.line < line),
        None,
    )
