"""Media player control.

``Player`` is the capability interface the rest of medianote uses. Two
adapters implement it:

- ``IpcPlayer`` drives a separate mpv process over its JSON IPC socket
  (python-mpv-jsonipc). It survives between medianote invocations, so
  one-shot commands like ``medianote link`` work against it.
- ``LibmpvPlayer`` embeds mpv in this process (python-mpv). It lives only as
  long as medianote does, which suits ``medianote session``.

The backend is picked once per invocation by ``create_player``.
"""

from __future__ import annotations

import enum
import logging
import os
import subprocess
import time
from abc import ABC, abstractmethod
from pathlib import Path

from medianote.config import Settings
from medianote.errors import PlayerUnavailableError

logger = logging.getLogger(__name__)

_SOCKET_WAIT_SECONDS = 5.0
_SOCKET_POLL_INTERVAL = 0.1


class Backend(enum.Enum):
    MPV_IPC = "mpv-ipc"
    LIBMPV = "libmpv"


class Player(ABC):
    """What medianote needs from a media player."""

    def __init__(self, settle_delay: float = 0.5) -> None:
        self.settle_delay = settle_delay

    def settle(self) -> None:
        """Block until the player has had time to act on the last command."""
        if self.settle_delay > 0:
            time.sleep(self.settle_delay)

    @abstractmethod
    def start(self, path: str) -> None:
        """Open *path* and start playing it."""

    @abstractmethod
    def get_position(self) -> float | None:
        """Playback position in seconds, or None when nothing is loaded."""

    @abstractmethod
    def get_path(self) -> str | None:
        """Path or URL of the loaded media, or None."""

    @abstractmethod
    def seek(self, seconds: int) -> None:
        """Seek to an absolute offset."""

    @abstractmethod
    def is_paused(self) -> bool: ...

    @abstractmethod
    def set_paused(self, paused: bool) -> None: ...

    @abstractmethod
    def kill(self) -> None:
        """Stop the player."""

    @abstractmethod
    def screenshot(self, path: str | Path) -> Path:
        """Save the current video frame to *path* and return it."""

    def pause(self) -> None:
        self.set_paused(True)

    def resume(self) -> None:
        self.set_paused(False)

    def toggle_pause(self) -> bool:
        """Flip pause state. Returns the new state."""
        paused = not self.is_paused()
        self.set_paused(paused)
        return paused


class IpcPlayer(Player):
    """mpv reached through ``--input-ipc-server``."""

    def __init__(self, socket_path: str, mpv_path: str = "mpv", settle_delay: float = 0.5) -> None:
        super().__init__(settle_delay)
        self.socket_path = socket_path
        self.mpv_path = mpv_path
        self._mpv = None

    def _connect(self):
        if self._mpv is not None:
            return self._mpv
        try:
            from python_mpv_jsonipc import MPV, MPVError
        except ImportError as exc:
            raise PlayerUnavailableError(
                "python-mpv-jsonipc is not installed (pip install python-mpv-jsonipc)."
            ) from exc
        if not os.path.exists(self.socket_path):
            raise PlayerUnavailableError(
                f"mpv is not running (no IPC socket at {self.socket_path})."
            )
        try:
            self._mpv = MPV(start_mpv=False, ipc_socket=self.socket_path)
        except (OSError, MPVError) as exc:
            raise PlayerUnavailableError(
                f"Could not connect to mpv at {self.socket_path}: {exc}"
            ) from exc
        logger.debug("Connected to mpv at %s", self.socket_path)
        return self._mpv

    def _launch(self) -> None:
        """Start a detached mpv listening on the socket and wait for the socket."""
        if os.path.exists(self.socket_path):
            # stale socket left by an mpv that is gone
            os.unlink(self.socket_path)
        cmd = [
            self.mpv_path,
            f"--input-ipc-server={self.socket_path}",
            "--idle=yes",
            "--force-window=yes",
        ]
        try:
            subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except FileNotFoundError as exc:
            raise PlayerUnavailableError(f"mpv not found: {self.mpv_path}") from exc
        logger.info("Started mpv (%s)", self.socket_path)

        deadline = time.monotonic() + _SOCKET_WAIT_SECONDS
        while not os.path.exists(self.socket_path):
            if time.monotonic() > deadline:
                raise PlayerUnavailableError(
                    f"mpv did not open its IPC socket at {self.socket_path}"
                )
            time.sleep(_SOCKET_POLL_INTERVAL)

    def start(self, path: str) -> None:
        try:
            mpv = self._connect()
        except PlayerUnavailableError:
            self._launch()
            mpv = self._connect()
        mpv.command("loadfile", path)
        mpv.pause = False
        logger.info("Playing %s", path)
        self.settle()

    def _property(self, name: str):
        mpv = self._connect()
        from python_mpv_jsonipc import MPVError

        try:
            return getattr(mpv, name)
        except MPVError:
            # "property unavailable" while idle
            return None

    def get_position(self) -> float | None:
        pos = self._property("time_pos")
        return float(pos) if pos is not None else None

    def get_path(self) -> str | None:
        return self._property("path")

    def seek(self, seconds: int) -> None:
        self._connect().command("seek", seconds, "absolute")
        self.settle()

    def is_paused(self) -> bool:
        return bool(self._property("pause"))

    def set_paused(self, paused: bool) -> None:
        self._connect().pause = paused
        self.settle()

    def kill(self) -> None:
        mpv = self._connect()
        mpv.command("quit")
        mpv.terminate()
        self._mpv = None
        logger.info("Stopped mpv")

    def screenshot(self, path: str | Path) -> Path:
        path = Path(path)
        self._connect().command("screenshot-to-file", str(path), "video")
        self.settle()
        return path


class LibmpvPlayer(Player):
    """mpv embedded through libmpv."""

    def __init__(self, settle_delay: float = 0.5) -> None:
        super().__init__(settle_delay)
        self._mpv = None

    def _instance(self):
        if self._mpv is not None:
            return self._mpv
        try:
            import mpv
        except (ImportError, OSError) as exc:
            raise PlayerUnavailableError(
                f"libmpv is not available (pip install python-mpv, and install libmpv): {exc}"
            ) from exc
        self._mpv = mpv.MPV(input_default_bindings=True, input_vo_keyboard=True, osc=True)
        return self._mpv

    def _require_running(self):
        if self._mpv is None:
            raise PlayerUnavailableError("No media is playing in this session.")
        return self._mpv

    def start(self, path: str) -> None:
        player = self._instance()
        player.play(path)
        player.pause = False
        logger.info("Playing %s", path)
        self.settle()

    def get_position(self) -> float | None:
        if self._mpv is None:
            return None
        pos = self._mpv.time_pos
        return float(pos) if pos is not None else None

    def get_path(self) -> str | None:
        return self._mpv.path if self._mpv is not None else None

    def seek(self, seconds: int) -> None:
        self._require_running().seek(seconds, reference="absolute")
        self.settle()

    def is_paused(self) -> bool:
        return bool(self._require_running().pause)

    def set_paused(self, paused: bool) -> None:
        self._require_running().pause = paused
        self.settle()

    def kill(self) -> None:
        if self._mpv is not None:
            self._mpv.terminate()
            self._mpv = None
            logger.info("Stopped embedded mpv")

    def screenshot(self, path: str | Path) -> Path:
        path = Path(path)
        self._require_running().screenshot_to_file(str(path), includes="video")
        self.settle()
        return path


def create_player(settings: Settings) -> Player:
    """Build the player adapter named by ``settings.player_backend``."""
    backend = Backend(settings.player_backend)
    if backend is Backend.MPV_IPC:
        return IpcPlayer(settings.mpv_socket, settings.mpv_path, settings.settle_delay)
    if backend is Backend.LIBMPV:
        return LibmpvPlayer(settings.settle_delay)
    raise AssertionError(f"unhandled backend {backend}")
