"""Note-taking actions against a running player.

``NoteTaker`` turns player state into Org text: timestamp links for the
current position, screenshots with file links, OCR text. ``NoteLog``
keeps what an interactive session produced, in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from medianote.config import Settings
from medianote.errors import PlayerUnavailableError
from medianote.links import MediaLink, escape_link, make_timestamp_link, parse_media_link
from medianote.media import is_url, link_scheme_for
from medianote.ocr import run_ocr
from medianote.player import Player
from medianote.timestamps import format_timestamp

logger = logging.getLogger(__name__)


@dataclass
class Snippet:
    kind: str  # "link", "screenshot" or "ocr"
    text: str
    offset: int


@dataclass
class NoteLog:
    """Snippets produced during a session."""

    _snippets: list[Snippet] = field(default_factory=list)

    def add(self, kind: str, text: str, offset: int) -> Snippet:
        snippet = Snippet(kind=kind, text=text, offset=offset)
        self._snippets.append(snippet)
        return snippet

    @property
    def snippets(self) -> list[Snippet]:
        return list(self._snippets)

    def as_text(self) -> str:
        return "\n".join(s.text for s in self._snippets)

    def clear(self) -> None:
        self._snippets.clear()


class NoteTaker:
    def __init__(self, player: Player, settings: Settings) -> None:
        self.player = player
        self.settings = settings

    def current(self) -> tuple[str, int]:
        """Loaded media and the lag-adjusted position in whole seconds."""
        path = self.player.get_path()
        position = self.player.get_position()
        if not path or position is None:
            raise PlayerUnavailableError("No media is playing.")
        offset = max(0, int(position) - self.settings.timestamp_lag)
        return path, offset

    def insert_link(self) -> str:
        """Timestamp link for the current position, wrapped in prefix/suffix."""
        path, offset = self.current()
        media_ref = path if is_url(path) else str(Path(path).expanduser().resolve())
        link = make_timestamp_link(link_scheme_for(media_ref), media_ref, offset)
        if self.settings.pause_after_link:
            self.player.pause()
        logger.info("Link at %s", format_timestamp(offset))
        return f"{self.settings.link_prefix}{link}{self.settings.link_suffix}"

    def follow_link(self, link: str | MediaLink) -> MediaLink:
        """Play the linked media and seek to the link's offset."""
        target = link if isinstance(link, MediaLink) else parse_media_link(link)
        media = target.path if is_url(target.path) else str(Path(target.path).expanduser())

        try:
            playing = self.player.get_path()
        except PlayerUnavailableError:
            playing = None
        if playing != media:
            self.player.start(media)
        else:
            self.player.resume()

        if target.offset:
            self.player.seek(target.offset)
        logger.info(
            "Following %s at %s", media,
            format_timestamp(target.offset) if target.offset else "start",
        )
        return target

    def screenshot(self, directory: str | Path | None = None) -> tuple[Path, str]:
        """Capture the current frame. Returns the image path and an Org file link."""
        path, offset = self.current()
        folder = Path(directory).expanduser() if directory else self.settings.screenshot_path
        folder.mkdir(parents=True, exist_ok=True)

        stem = Path(path).stem if not is_url(path) else "stream"
        stamp = format_timestamp(offset).replace(":", "-")
        image = folder / f"{stem}-{stamp}.{self.settings.screenshot_format}"
        self.player.screenshot(image.resolve())
        logger.info("Screenshot saved: %s", image)
        return image, f"[[{escape_link(f'file:{image}')}]]"

    def ocr_screenshot(self, directory: str | Path | None = None) -> tuple[Path, str]:
        image, _ = self.screenshot(directory)
        return image, run_ocr(image, self.settings)
