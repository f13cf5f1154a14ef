"""Shared fixtures: isolated config/log paths and an in-memory player."""

from __future__ import annotations

from pathlib import Path

import pytest

from medianote import config as config_module
from medianote import logging_setup
from medianote.player import Player


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    cfg_dir = tmp_path / "config"
    monkeypatch.setattr(config_module, "CONFIG_DIR", cfg_dir)
    monkeypatch.setattr(config_module, "CONFIG_PATH", cfg_dir / "config.json")
    monkeypatch.setattr(logging_setup, "LOG_DIR", cfg_dir)
    monkeypatch.setattr(logging_setup, "LOG_FILE", cfg_dir / "medianote.log")
    return cfg_dir


class FakePlayer(Player):
    """Records commands instead of driving mpv."""

    def __init__(self, path: str | None = None, position: float | None = None) -> None:
        super().__init__(settle_delay=0)
        self.path = path
        self.position = position
        self.paused = False
        self.calls: list[tuple] = []

    def start(self, path: str) -> None:
        self.calls.append(("start", path))
        self.path = path
        self.position = 0.0
        self.paused = False

    def get_position(self) -> float | None:
        return self.position

    def get_path(self) -> str | None:
        return self.path

    def seek(self, seconds: int) -> None:
        self.calls.append(("seek", seconds))
        self.position = float(seconds)

    def is_paused(self) -> bool:
        return self.paused

    def set_paused(self, paused: bool) -> None:
        self.calls.append(("pause", paused))
        self.paused = paused

    def kill(self) -> None:
        self.calls.append(("kill",))
        self.path = None
        self.position = None

    def screenshot(self, path) -> Path:
        path = Path(path)
        self.calls.append(("screenshot", str(path)))
        path.write_bytes(b"\xff\xd8fake")
        return path


@pytest.fixture
def fake_player() -> FakePlayer:
    return FakePlayer(path="/media/talk.mkv", position=62.8)
