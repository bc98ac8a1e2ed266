"""
Shared helpers: logging setup and small numeric guards.
"""
import logging
import math
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger. Handlers are attached once by configure_logging()."""
    return logging.getLogger(name)


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a single stream handler to the package logger."""
    from ocular_screening.config import settings

    root = logging.getLogger("ocular_screening")
    root.setLevel((level or settings.log_level).upper())
    if not any(getattr(h, "_ocular_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ocular_handler = True
        root.addHandler(handler)


def finite_or(value: float, default: float = 0.0) -> float:
    """Return value as float, or default when it is NaN/inf."""
    value = float(value)
    return value if math.isfinite(value) else default
