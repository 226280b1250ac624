"""Files manager — token-authenticated file storage with image thumbnails."""

__version__ = "0.1.0"
