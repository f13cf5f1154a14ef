"""Exceptions raised by medianote.

The CLI catches ``MediaNoteError`` and reports it; nothing below retries.
"""


class MediaNoteError(Exception):
    """Base class for medianote errors."""


class ConfigurationError(MediaNoteError):
    """Invalid value in the config file."""


class UnsupportedFormatError(MediaNoteError):
    """Subtitle dialect is known but cannot be imported."""


class UnrecognizedFormatError(MediaNoteError):
    """Subtitle file extension is not a known dialect."""


class TimestampParseError(MediaNoteError, ValueError):
    """Text did not match any timestamp grammar."""


class LinkParseError(TimestampParseError):
    """Text is not a media timestamp link."""


class DependencyUnavailableError(MediaNoteError):
    """An external program or library needed for the command is missing."""


class PlayerUnavailableError(DependencyUnavailableError):
    """The media player is not running or cannot be reached."""


class OcrUnavailableError(DependencyUnavailableError):
    """The OCR binary is not installed."""


class OcrError(MediaNoteError):
    """The OCR binary ran but failed."""
