import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    # Uvicorn may have installed handlers already; add ours only once.
    if any(getattr(handler, "_payfast_bridge", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._payfast_bridge = True  # type: ignore[attr-defined]
    root.addHandler(handler)
