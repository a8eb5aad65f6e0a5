import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger."""

    root = logging.getLogger()
    if not any(getattr(h, "_sections_api", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._sections_api = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())
