"""Subtitle import: turn a subtitle file into paragraph-chunked note text.

Pipeline:
1. ``parse_cues`` strips the dialect's wrapper markup and yields one
   ``Cue`` per caption, offsets truncated to whole seconds.
2. ``render_cues`` writes them line-per-cue as ``HH:MM:SS caption``,
   separated by blank lines.
3. ``merge_paragraphs`` joins cues into paragraphs and refills them. Only
   the first cue of a merged run keeps its timestamp.
"""

from __future__ import annotations

import enum
import html
import logging
import re
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from medianote.errors import (
    TimestampParseError,
    UnrecognizedFormatError,
    UnsupportedFormatError,
)
from medianote.timestamps import format_timestamp

logger = logging.getLogger(__name__)

DEFAULT_FILL_COLUMN = 70


class Dialect(enum.Enum):
    SRV1 = "srv1"
    SRV2 = "srv2"
    SRV3 = "srv3"
    TTML = "ttml"
    VTT = "vtt"
    SRT = "srt"
    JSON3 = "json3"

    @classmethod
    def from_path(cls, path: str | Path) -> Dialect:
        """Infer the dialect from the file extension."""
        ext = Path(path).suffix.lower().lstrip(".")
        try:
            return cls(ext)
        except ValueError:
            raise UnrecognizedFormatError(
                f"unrecognized subtitle format: {Path(path).name}"
            ) from None


@dataclass(frozen=True)
class Cue:
    offset: int  # whole seconds
    text: str


# ---------------------------------------------------------------------------
# Cue offsets, one grammar per native unit
# ---------------------------------------------------------------------------

_DECIMAL_SECONDS_RE = re.compile(r"^(\d+)(?:\.\d*)?$")
_MILLIS_RE = re.compile(r"^\d+$")
_CLOCK_RE = re.compile(r"^(?:(\d+):)?(\d{2}):(\d{2})(?:[.,]\d+)?$")
_OFFSET_TIME_RE = re.compile(r"^(\d+)(?:\.\d*)?(s|ms)$")


def _seconds_offset(value: str) -> int:
    m = _DECIMAL_SECONDS_RE.match(value.strip())
    if not m:
        raise TimestampParseError(f"failed to parse timestamp: {value!r}")
    return int(m.group(1))


def _millis_offset(value: str) -> int:
    value = value.strip()
    if not _MILLIS_RE.match(value):
        raise TimestampParseError(f"failed to parse timestamp: {value!r}")
    return int(value) // 1000


def _clock_offset(value: str) -> int:
    m = _CLOCK_RE.match(value.strip())
    if not m:
        raise TimestampParseError(f"failed to parse timestamp: {value!r}")
    hours = int(m.group(1) or 0)
    return hours * 3600 + int(m.group(2)) * 60 + int(m.group(3))


def _ttml_offset(value: str) -> int:
    """TTML begin: clock time (``00:01:02.500``) or offset time (``62.5s``, ``62500ms``)."""
    m = _OFFSET_TIME_RE.match(value.strip())
    if m:
        whole = int(m.group(1))
        return whole // 1000 if m.group(2) == "ms" else whole
    return _clock_offset(value)


# ---------------------------------------------------------------------------
# Caption text
# ---------------------------------------------------------------------------

_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def _clean_caption(raw: str, unescape_passes: int = 1) -> str:
    text = _BR_RE.sub(" ", raw)
    text = _TAG_RE.sub("", text)
    for _ in range(unescape_passes):
        text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


# ---------------------------------------------------------------------------
# Dialect parsers
# ---------------------------------------------------------------------------

def _element_pattern(tag: str, attr: str) -> re.Pattern[str]:
    # Self-closing elements carry no caption and are skipped.
    return re.compile(
        rf'<{tag}\b[^>]*?\b{attr}="([^"]*)"[^>]*(?<!/)>(.*?)</{tag}>',
        re.DOTALL,
    )


_SRV1_RE = _element_pattern("text", "start")
_SRV2_RE = _element_pattern("text", "t")
_SRV3_RE = _element_pattern("p", "t")
_TTML_RE = _element_pattern("p", "begin")


def _xml_cues(
    text: str,
    pattern: re.Pattern[str],
    to_seconds: Callable[[str], int],
    unescape_passes: int = 1,
) -> list[Cue]:
    return [
        Cue(offset=to_seconds(start), text=_clean_caption(body, unescape_passes))
        for start, body in pattern.findall(text)
    ]


def _parse_srv1(text: str) -> list[Cue]:
    # YouTube double-escapes entities in srv1 (&amp;#39;).
    return _xml_cues(text, _SRV1_RE, _seconds_offset, unescape_passes=2)


def _parse_srv2(text: str) -> list[Cue]:
    return _xml_cues(text, _SRV2_RE, _millis_offset)


def _parse_srv3(text: str) -> list[Cue]:
    return _xml_cues(text, _SRV3_RE, _millis_offset)


def _parse_ttml(text: str) -> list[Cue]:
    return _xml_cues(text, _TTML_RE, _ttml_offset)


_VTT_TIMING_RE = re.compile(r"^\s*(\S+)\s+-->\s+\S+")
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")


def _parse_vtt(text: str) -> list[Cue]:
    """Parse WEBVTT cue blocks. Header, NOTE, STYLE and REGION blocks have no timing line."""
    cues: list[Cue] = []
    for block in _BLANK_LINE_RE.split(text.replace("\r\n", "\n")):
        lines = block.strip("\n").split("\n")
        for i, line in enumerate(lines):
            if "-->" not in line:
                continue
            m = _VTT_TIMING_RE.match(line)
            if not m:
                raise TimestampParseError(f"failed to parse timestamp: {line!r}")
            caption = _clean_caption(" ".join(lines[i + 1:]))
            cues.append(Cue(offset=_clock_offset(m.group(1)), text=caption))
            break
    return cues


_PARSERS: dict[Dialect, Callable[[str], list[Cue]]] = {
    Dialect.SRV1: _parse_srv1,
    Dialect.SRV2: _parse_srv2,
    Dialect.SRV3: _parse_srv3,
    Dialect.TTML: _parse_ttml,
    Dialect.VTT: _parse_vtt,
}

UNSUPPORTED_DIALECTS: frozenset[Dialect] = frozenset({Dialect.SRT, Dialect.JSON3})
SUPPORTED_DIALECTS: frozenset[Dialect] = frozenset(_PARSERS)


def _parser_for(dialect: Dialect) -> Callable[[str], list[Cue]]:
    if dialect in UNSUPPORTED_DIALECTS:
        raise UnsupportedFormatError(f"unsupported subtitle format: {dialect.value}")
    return _PARSERS[dialect]


def parse_cues(text: str, dialect: Dialect) -> list[Cue]:
    """Extract cues from raw subtitle text.

    Empty captions are dropped, as is a caption repeating the previous one
    verbatim (rolling auto-generated captions emit each line twice).
    """
    parser = _parser_for(dialect)
    cues: list[Cue] = []
    for cue in parser(text):
        if not cue.text:
            continue
        if cues and cues[-1].text == cue.text:
            continue
        cues.append(cue)
    logger.debug("Parsed %d cues from %s subtitles", len(cues), dialect.value)
    return cues


def render_cues(cues: list[Cue]) -> str:
    """One ``HH:MM:SS caption`` line per cue, each followed by a blank line."""
    return "".join(f"{format_timestamp(c.offset)} {c.text}\n\n" for c in cues)


# ---------------------------------------------------------------------------
# Paragraphs
# ---------------------------------------------------------------------------

# A cue continues the previous paragraph unless the previous caption ends in
# sentence-final punctuation or a closing quote.
_CONTINUATION_RE = re.compile(r"(?<=[^.!?。！？\"”’»」』\n])\n\n\d{2,}:\d{2}:\d{2} ")


def merge_paragraphs(text: str, fill_column: int = DEFAULT_FILL_COLUMN) -> str:
    """Merge continuation cues into paragraphs and refill each paragraph."""
    merged = _CONTINUATION_RE.sub(" ", text)
    paragraphs = [p for p in merged.split("\n\n") if p.strip()]
    filled = [
        textwrap.fill(
            p.replace("\n", " "),
            width=fill_column,
            break_long_words=False,
            break_on_hyphens=False,
        )
        for p in paragraphs
    ]
    if not filled:
        return ""
    return "\n\n".join(filled) + "\n"


def normalize_subtitles(
    text: str,
    dialect: Dialect,
    fill_column: int = DEFAULT_FILL_COLUMN,
) -> str:
    """Raw subtitle text to paragraph-chunked note text."""
    return merge_paragraphs(render_cues(parse_cues(text, dialect)), fill_column)


def load_subtitle_file(path: str | Path, fill_column: int = DEFAULT_FILL_COLUMN) -> str:
    """Read and normalize a subtitle file, dialect taken from its extension.

    The format check happens before the file is read.
    """
    path = Path(path)
    dialect = Dialect.from_path(path)
    _parser_for(dialect)
    raw = path.read_text(encoding="utf-8-sig")
    result = normalize_subtitles(raw, dialect, fill_column)
    logger.info(
        "Imported %s (%s): %d paragraphs",
        path.name, dialect.value, result.count("\n\n") + 1 if result else 0,
    )
    return result
