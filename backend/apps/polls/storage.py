"""
Outfit image storage on Django's default storage backend.

Images for one poll live in a folder named after the poll's correlation id:
``<folder>/image_a_<ts>.jpg`` and ``<folder>/image_b_<ts>.jpg``.
"""

import base64
import binascii
import logging
import time
from typing import List, Tuple

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from core.exceptions import ImageProcessingError, InvalidPollError

logger = logging.getLogger(__name__)


def decode_image_data(value: str, label: str = "image") -> bytes:
    """
    Decode a base64 image, accepting an optional ``data:...;base64,`` prefix.

    Raises:
        InvalidPollError: If the value is empty or not valid base64
    """
    if not value:
        raise InvalidPollError(f"{label} is required")
    if value.startswith("data:") and "," in value:
        value = value.split(",", 1)[1]
    try:
        data = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidPollError(f"{label} is not valid base64 image data")
    if not data:
        raise InvalidPollError(f"{label} is empty")
    return data


def store_poll_images(folder: str, image_a: bytes, image_b: bytes) -> Tuple[str, str]:
    """
    Save both images under ``folder`` and return their public URLs.

    Raises:
        ImageProcessingError: If the storage backend fails. The first image
            may already be stored; callers clean up the folder.
    """
    ts = int(time.time() * 1000)
    urls = []
    for side, data in (("a", image_a), ("b", image_b)):
        try:
            name = default_storage.save(f"{folder}/image_{side}_{ts}.jpg", ContentFile(data))
        except OSError as e:
            logger.error(f"Failed to store image {side} in folder {folder}: {e}")
            raise ImageProcessingError()
        urls.append(default_storage.url(name))
    return urls[0], urls[1]


def list_images(folder: str) -> List[str]:
    """Return the storage names of all files in ``folder``."""
    try:
        _, files = default_storage.listdir(folder)
    except FileNotFoundError:
        return []
    return [f"{folder}/{name}" for name in files]


def delete_images(folder: str) -> int:
    """
    Delete every file in ``folder``. Best-effort: failures are logged, not raised.

    Returns:
        int: Number of files deleted
    """
    deleted = 0
    try:
        names = list_images(folder)
    except Exception as e:
        logger.error(f"Failed to list images for cleanup in folder {folder}: {e}")
        return 0

    for name in names:
        try:
            default_storage.delete(name)
            deleted += 1
        except Exception as e:
            logger.error(f"Failed to delete orphaned image {name}: {e}")

    logger.info(f"Cleaned up {deleted} image(s) in folder {folder}")
    return deleted
