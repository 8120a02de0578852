import os
import json
import base64
import logging
from typing import Any, Optional

from .config import settings


# -------- logging setup --------

def setup_logger(name, level_str=settings.LOG_LEVEL):
    """
    Sets up a module logger with a console stream handler.
    Propagation stays ON so an application-level root handler still sees
    every message.
    """
    log_level = getattr(logging, str(level_str).upper(), logging.INFO)
    formatter = logging.Formatter('%(asctime)s - %(levelname)5s | %(name)s | %(message)s')

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Avoid duplicate console handlers on repeated imports
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

    logger.propagate = True
    return logger


# --- module-level logger
logger = setup_logger(__name__)


# -------- small text helpers --------

def truncate(text: str, limit: int = 120, ellipsis: str = "…") -> str:
    """Shorten text to 'limit' characters with a tidy word boundary if possible."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0]
    return (cut if cut else text[:limit]) + ellipsis


# -------- file IO helpers --------

def load_json_file(file_path) -> Optional[Any]:
    """Loads data from a JSON file."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error("File not found: %s", file_path)
        return None
    except json.JSONDecodeError:
        logger.error("Error decoding JSON from file: %s", file_path)
        return None


# -------- data URL helpers --------

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def png_to_data_url(png_bytes: bytes) -> str:
    return PNG_DATA_URL_PREFIX + base64.b64encode(png_bytes).decode("ascii")


def data_url_to_bytes(data_url: str) -> bytes:
    """Decode a base64 data URL (or a bare base64 payload) into raw bytes."""
    payload = data_url.split(",", 1)[1] if data_url.startswith("data:") else data_url
    return base64.b64decode(payload)


def save_bytes_file(data: bytes, file_path) -> None:
    """Saves raw bytes, creating directories if they don't exist."""
    directory = os.path.dirname(str(file_path))
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(file_path, 'wb') as f:
        f.write(data)
    logger.debug("Wrote %d bytes to %s", len(data), file_path)
