"""OCR on screenshots through the external tesseract binary."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from medianote.config import Settings
from medianote.errors import OcrError, OcrUnavailableError

logger = logging.getLogger(__name__)

_OCR_TIMEOUT_SECONDS = 60


def run_ocr(image: str | Path, settings: Settings) -> str:
    """Return the text tesseract reads from *image*, stripped."""
    image = Path(image)
    if not image.is_file():
        raise OcrError(f"Image not found: {image}")

    binary = shutil.which(settings.ocr_command)
    if binary is None:
        raise OcrUnavailableError(
            f"OCR program '{settings.ocr_command}' not found. Install tesseract, "
            "e.g. brew install tesseract or apt install tesseract-ocr."
        )

    cmd = [binary, str(image), "stdout", "-l", settings.ocr_language]
    logger.debug("Running OCR: %s", cmd)
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=_OCR_TIMEOUT_SECONDS,
        )
    except subprocess.TimeoutExpired as exc:
        raise OcrError(f"OCR timed out after {_OCR_TIMEOUT_SECONDS}s") from exc

    if result.returncode != 0:
        raise OcrError(f"OCR failed ({result.returncode}): {(result.stderr or '').strip()}")

    text = result.stdout.strip()
    logger.info("OCR read %d characters from %s", len(text), image.name)
    return text
