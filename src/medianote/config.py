"""Load, save, and validate the JSON config at ~/.config/medianote/config.json.

Commands read the file once and pass a frozen ``Settings`` around.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from medianote.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "medianote"
CONFIG_PATH = CONFIG_DIR / "config.json"

PLAYER_BACKENDS = ("mpv-ipc", "libmpv")

DEFAULTS: dict[str, dict[str, Any]] = {
    "player_backend": {
        "value": "mpv-ipc",
        "description": "Player backend: mpv-ipc (running mpv over its IPC socket) or libmpv (embedded).",
    },
    "mpv_socket": {
        "value": "/tmp/medianote-mpv.sock",
        "description": "IPC socket path used to reach mpv. Start mpv with --input-ipc-server=<path>.",
    },
    "mpv_path": {
        "value": "mpv",
        "description": "mpv executable started by the mpv-ipc backend when no player is running.",
    },
    "settle_delay": {
        "value": 0.5,
        "description": "Seconds to wait after a player command before the next query.",
    },
    "timestamp_lag": {
        "value": 0,
        "description": "Seconds subtracted from the playback position when creating a link.",
    },
    "pause_after_link": {
        "value": False,
        "description": "Pause playback after creating a timestamp link.",
    },
    "link_prefix": {
        "value": "",
        "description": "Text inserted before each created link.",
    },
    "link_suffix": {
        "value": " ",
        "description": "Text inserted after each created link.",
    },
    "fill_column": {
        "value": 70,
        "description": "Fill width for imported subtitle paragraphs.",
    },
    "screenshot_dir": {
        "value": "~/medianote/images",
        "description": "Folder for screenshots. Override with --dir.",
    },
    "screenshot_format": {
        "value": "jpg",
        "description": "Screenshot image format: jpg or png.",
    },
    "ocr_command": {
        "value": "tesseract",
        "description": "OCR executable, called as <command> <image> stdout -l <language>.",
    },
    "ocr_language": {
        "value": "eng",
        "description": "Tesseract language code(s), e.g. eng or eng+deu.",
    },
    "auto_clipboard": {
        "value": False,
        "description": "Copy generated text to the clipboard as well as printing it.",
    },
}


def _ensure_dir() -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_config() -> dict[str, Any]:
    """Return a flat dict of {key: value} from the config file, merged with defaults."""
    values: dict[str, Any] = {k: v["value"] for k, v in DEFAULTS.items()}

    if CONFIG_PATH.exists():
        try:
            raw = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
            for key, entry in raw.items():
                if key.startswith("_"):
                    continue
                if isinstance(entry, dict) and "value" in entry:
                    values[key] = entry["value"]
                else:
                    values[key] = entry
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not read config at %s: %s", CONFIG_PATH, exc)

    return values


def save_config(values: dict[str, Any]) -> None:
    """Write current values back to the config file, preserving descriptions."""
    _ensure_dir()
    data: dict[str, Any] = {
        "_description": "medianote configuration. Edit values below; descriptions are for reference."
    }
    for key, meta in DEFAULTS.items():
        data[key] = {
            "value": values.get(key, meta["value"]),
            "description": meta["description"],
        }
    CONFIG_PATH.write_text(
        json.dumps(data, indent=4, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    logger.info("Config saved to %s", CONFIG_PATH)


def init_config_if_missing() -> bool:
    """Create default config file if it doesn't exist. Return True if created."""
    if CONFIG_PATH.exists():
        return False
    defaults = {k: v["value"] for k, v in DEFAULTS.items()}
    save_config(defaults)
    return True


@dataclass(frozen=True)
class Settings:
    """Immutable view of the config, passed into each operation."""

    player_backend: str = "mpv-ipc"
    mpv_socket: str = "/tmp/medianote-mpv.sock"
    mpv_path: str = "mpv"
    settle_delay: float = 0.5
    timestamp_lag: int = 0
    pause_after_link: bool = False
    link_prefix: str = ""
    link_suffix: str = " "
    fill_column: int = 70
    screenshot_dir: str = "~/medianote/images"
    screenshot_format: str = "jpg"
    ocr_command: str = "tesseract"
    ocr_language: str = "eng"
    auto_clipboard: bool = False

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> Settings:
        known = {f.name for f in fields(cls)}
        settings = cls(**{k: v for k, v in values.items() if k in known})
        settings.validate()
        return settings

    @classmethod
    def from_config(cls, **overrides: Any) -> Settings:
        values = load_config()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_mapping(values)

    def validate(self) -> None:
        if self.player_backend not in PLAYER_BACKENDS:
            raise ConfigurationError(
                f"player_backend must be one of {', '.join(PLAYER_BACKENDS)}, "
                f"got {self.player_backend!r}"
            )
        if self.fill_column < 1:
            raise ConfigurationError(f"fill_column must be positive, got {self.fill_column}")
        if self.settle_delay < 0 or self.timestamp_lag < 0:
            raise ConfigurationError("settle_delay and timestamp_lag must not be negative")
        if self.screenshot_format not in ("jpg", "png"):
            raise ConfigurationError(
                f"screenshot_format must be jpg or png, got {self.screenshot_format!r}"
            )

    @property
    def screenshot_path(self) -> Path:
        return Path(self.screenshot_dir).expanduser()
