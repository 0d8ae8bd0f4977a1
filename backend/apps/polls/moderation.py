"""
Image moderation gate.

Sends both outfit images to the moderation-and-upload endpoint, which stores
approved images and returns their URLs. The endpoint replies with one of:

- ``{"success": true, "imageAUrl": ..., "imageBUrl": ...}``
- ``{"success": false, "error": "MODERATION_REJECTED", "rejectedImage": "A"|"B"|"both", "message": ...}``
- anything else (treated as a retryable failure)

Images the endpoint stored are its responsibility to remove: when a poll
insert fails after approval, ``discard_images`` sends
``DELETE {"pollId": <correlation id>}`` to ``MODERATION_CLEANUP_URL`` (or the
endpoint URL itself when that is empty).

When ``MODERATION_ENDPOINT_URL`` is empty, moderation is skipped and the
images are written straight to default storage.
"""

import logging
from typing import Tuple

import requests
from django.conf import settings

from core.exceptions import ImageProcessingError, ModerationRejectedError

from .storage import decode_image_data, delete_images, store_poll_images

logger = logging.getLogger(__name__)

MODERATION_REJECTED = "MODERATION_REJECTED"


def _headers():
    headers = {"Content-Type": "application/json"}
    api_key = getattr(settings, "MODERATION_API_KEY", "")
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _post_to_moderation(image_a_b64: str, image_b_b64: str, correlation_id: str) -> dict:
    try:
        response = requests.post(
            settings.MODERATION_ENDPOINT_URL,
            json={"imageA": image_a_b64, "imageB": image_b_b64, "pollId": correlation_id},
            headers=_headers(),
            timeout=getattr(settings, "MODERATION_TIMEOUT_SECONDS", 30),
        )
    except requests.RequestException as e:
        logger.error(f"Moderation request failed for {correlation_id}: {e}")
        raise ImageProcessingError()

    try:
        return response.json()
    except ValueError:
        logger.error(
            f"Moderation endpoint returned non-JSON response "
            f"(status {response.status_code}) for {correlation_id}"
        )
        raise ImageProcessingError()


def moderate_and_upload(
    image_a_b64: str, image_b_b64: str, correlation_id: str
) -> Tuple[str, str]:
    """
    Moderate and store both images under ``correlation_id``.

    Returns:
        tuple: (image_a_url, image_b_url)

    Raises:
        ModerationRejectedError: If either image is rejected (nothing stored)
        ImageProcessingError: If the endpoint or storage fails
    """
    if not getattr(settings, "MODERATION_ENDPOINT_URL", ""):
        logger.info(f"Moderation endpoint not configured; storing images for {correlation_id} directly")
        return store_poll_images(
            correlation_id,
            decode_image_data(image_a_b64, "Image A"),
            decode_image_data(image_b_b64, "Image B"),
        )

    data = _post_to_moderation(image_a_b64, image_b_b64, correlation_id)
    if not isinstance(data, dict):
        raise ImageProcessingError()

    if data.get("success"):
        image_a_url = data.get("imageAUrl")
        image_b_url = data.get("imageBUrl")
        if not image_a_url or not image_b_url:
            logger.error(f"Moderation endpoint omitted image URLs for {correlation_id}")
            raise ImageProcessingError()
        return image_a_url, image_b_url

    if data.get("error") == MODERATION_REJECTED:
        logger.info(
            f"Images rejected by moderation for {correlation_id}: "
            f"rejected_image={data.get('rejectedImage')}"
        )
        raise ModerationRejectedError(
            message=data.get("message"), rejected_image=data.get("rejectedImage")
        )

    logger.error(
        f"Moderation endpoint failed for {correlation_id}: "
        f"{data.get('error')} {data.get('message')}"
    )
    raise ImageProcessingError(data.get("message") or None)


def _request_remote_cleanup(correlation_id: str) -> bool:
    url = getattr(settings, "MODERATION_CLEANUP_URL", "") or settings.MODERATION_ENDPOINT_URL
    try:
        response = requests.delete(
            url,
            json={"pollId": correlation_id},
            headers=_headers(),
            timeout=getattr(settings, "MODERATION_TIMEOUT_SECONDS", 30),
        )
    except requests.RequestException as e:
        logger.error(f"Remote image cleanup failed for {correlation_id}: {e}")
        return False

    if response.status_code >= 400:
        logger.error(
            f"Remote image cleanup for {correlation_id} returned status {response.status_code}"
        )
        return False
    logger.info(f"Requested remote image cleanup for {correlation_id}")
    return True


def discard_images(correlation_id: str) -> None:
    """
    Remove every image stored under ``correlation_id``, wherever it lives.

    Best-effort: local files are deleted from default storage and, when a
    moderation endpoint is configured, the endpoint is asked to delete what
    it uploaded. Failures are logged, never raised.
    """
    delete_images(correlation_id)
    if getattr(settings, "MODERATION_ENDPOINT_URL", ""):
        _request_remote_cleanup(correlation_id)
