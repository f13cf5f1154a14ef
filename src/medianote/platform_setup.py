"""Dependency checks: mpv, tesseract, and the two player client libraries."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys

from medianote.config import Settings

logger = logging.getLogger(__name__)


def is_macos() -> bool:
    return sys.platform == "darwin"


def _install_hint(brew: str, apt: str) -> str:
    if is_macos():
        return f"  brew install {brew}"
    return f"  sudo apt install {apt}"


def _run(cmd: list[str]) -> tuple[int, str]:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=10)
        return result.returncode, result.stdout.strip()
    except FileNotFoundError:
        return -1, ""
    except subprocess.TimeoutExpired:
        return -2, ""


def check_mpv(mpv_path: str = "mpv") -> tuple[bool, str]:
    """Check if the mpv binary is installed."""
    if not shutil.which(mpv_path):
        return False, "mpv not found. Install it with:\n" + _install_hint("mpv", "mpv")
    code, out = _run([mpv_path, "--version"])
    if code != 0:
        return False, f"mpv found but '{mpv_path} --version' failed."
    first = out.splitlines()[0] if out else "mpv"
    return True, f"{first}"


def check_tesseract(command: str = "tesseract") -> tuple[bool, str]:
    """Check if the OCR binary is installed."""
    if shutil.which(command):
        return True, f"{command} is available."
    return False, (
        f"{command} not found. Install it with:\n"
        + _install_hint("tesseract", "tesseract-ocr")
        + "\nNeeded for 'medianote ocr' and 'screenshot --ocr'."
    )


def check_jsonipc() -> tuple[bool, str]:
    """Check if python-mpv-jsonipc is importable (mpv-ipc backend)."""
    try:
        import python_mpv_jsonipc  # noqa: F401
        return True, "python-mpv-jsonipc is available."
    except ImportError:
        return False, "python-mpv-jsonipc not installed:\n  pip install python-mpv-jsonipc"


def check_libmpv() -> tuple[bool, str]:
    """Check if python-mpv can load libmpv (libmpv backend)."""
    try:
        import mpv  # noqa: F401
        return True, "libmpv is available."
    except ImportError:
        return False, "python-mpv not installed:\n  pip install python-mpv"
    except OSError as exc:
        return False, (
            f"python-mpv could not load libmpv: {exc}\n"
            + _install_hint("mpv", "libmpv2")
        )


def run_all_checks(settings: Settings) -> list[tuple[str, bool, str]]:
    """Run platform checks. Returns list of (check_name, passed, message)."""
    results: list[tuple[str, bool, str]] = []

    if settings.player_backend == "libmpv":
        ok, msg = check_libmpv()
        results.append(("libmpv", ok, msg))
    else:
        ok, msg = check_mpv(settings.mpv_path)
        results.append(("mpv", ok, msg))
        ok, msg = check_jsonipc()
        results.append(("python-mpv-jsonipc", ok, msg))

    ok, msg = check_tesseract(settings.ocr_command)
    results.append(("tesseract", ok, msg))

    for name, ok, _ in results:
        logger.debug("Check %s: %s", name, "ok" if ok else "missing")
    return results
