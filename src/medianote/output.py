"""Output pipeline: appending to Org files and the clipboard.

Text is generated fully in memory first; the Org file is only touched once
everything upstream succeeded.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def subtitle_heading(subtitle_path: str | Path) -> str:
    """Heading title for an imported subtitle file."""
    return f"Subtitles: {Path(subtitle_path).name}"


def insert_text(
    org_path: str | Path,
    text: str,
    heading: str | None = None,
    level: int = 1,
) -> Path:
    """Append *text* to an Org file, optionally under a new heading.

    The file is created when missing. Existing content is separated from
    the new text by exactly one blank line.
    """
    org_path = Path(org_path).expanduser()
    existing = org_path.read_text(encoding="utf-8") if org_path.exists() else ""

    block = text.strip("\n")
    if heading:
        block = f"{'*' * max(level, 1)} {heading}\n{block}" if block else f"{'*' * max(level, 1)} {heading}"

    if existing.strip():
        content = existing.rstrip("\n") + "\n\n" + block + "\n"
    else:
        content = block + "\n"

    org_path.parent.mkdir(parents=True, exist_ok=True)
    org_path.write_text(content, encoding="utf-8")
    logger.info("Wrote %d characters to %s", len(block), org_path)
    return org_path


def copy_to_clipboard(text: str) -> bool:
    """Copy text to system clipboard. Returns True on success."""
    try:
        import pyperclip
        pyperclip.copy(text)
        logger.info("Copied %d characters to clipboard.", len(text))
        return True
    except Exception as exc:
        logger.warning("Could not copy to clipboard: %s", exc)
        return False
