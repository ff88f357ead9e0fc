# --- utils.py ---
import os
import sys
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resource_path(relative_path):
    """Resolve a path next to the modules, supporting PyInstaller bundles."""
    try:
        base_path = sys._MEIPASS
    except AttributeError:
        base_path = os.path.abspath(os.path.dirname(__file__))
    return os.path.join(base_path, relative_path)


def title_case(value):
    """Normalize a realm or character name: 'area-52' -> 'Area-52'."""
    return value.strip().title()


def setup_logging(level=None):
    """
    Configure the root logger with a single console handler.

    Level precedence: explicit argument, then APP_LOG_LEVEL, then INFO.
    """
    resolved = level or os.environ.get("APP_LOG_LEVEL") or "INFO"
    numeric_level = getattr(logging, resolved.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
