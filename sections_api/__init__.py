"""Projects section API: sanitized HTML storage and a restricted fetch relay."""

__version__ = "1.0.0"
