"""medianote: timestamped Org notes for audio and video."""

__version__ = "0.1.0"
