"""Turning local images into inline data URLs, and checking image references."""
import base64
import logging
from pathlib import Path
from urllib.parse import urlparse

from src.constants import (
    DATA_URL_PREFIX,
    DATA_URL_TEMPLATE,
    DEFAULT_MIME_TYPE,
    MIME_TYPES,
    MSG_IMAGE_ENCODED,
    MSG_IMAGE_NOT_FOUND,
    MSG_IMAGE_UNREADABLE,
    URL_SCHEMES,
)
from src.errors import ImageReadError

logger = logging.getLogger(__name__)


def mime_type_for(path: str | Path) -> str:
    """MIME type from the file extension; unknown or missing extensions fall back to JPEG."""
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def encode_image(path: str | Path) -> str:
    """Read an image from disk and return it as a ``data:<mime>;base64,...`` URL."""
    absolute = Path(path).resolve()
    match absolute.is_file():
        case True:
            pass
        case False:
            raise ImageReadError(MSG_IMAGE_NOT_FOUND % absolute)

    try:
        image_bytes = absolute.read_bytes()
    except OSError as exc:
        raise ImageReadError(MSG_IMAGE_UNREADABLE % (absolute, exc)) from exc

    encoded = base64.standard_b64encode(image_bytes).decode()
    logger.debug(MSG_IMAGE_ENCODED, path, len(image_bytes))
    return DATA_URL_TEMPLATE % (mime_type_for(absolute), encoded)


def is_valid_image_reference(value: object) -> bool:
    match value:
        case str() if value.startswith(DATA_URL_PREFIX):
            return True
        case str() if value:
            try:
                parsed = urlparse(value)
            except ValueError:
                return False
            return parsed.scheme in URL_SCHEMES and bool(parsed.netloc)
        case _:
            return False
