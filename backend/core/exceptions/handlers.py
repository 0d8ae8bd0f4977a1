"""
Custom exception handlers for Django REST Framework.
Provides consistent error formatting and proper HTTP status codes.
"""

import logging
import traceback

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import VotingError

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler for DRF that provides consistent error formatting.

    Args:
        exc: The exception that was raised
        context: Dictionary containing context information about the exception

    Returns:
        Response object with formatted error, or None to use default handler
    """
    # Handle custom VotingError exceptions
    if isinstance(exc, VotingError):
        data = {
            "error": exc.message,
            "error_code": exc.__class__.__name__,
            "status_code": exc.status_code,
            "retryable": exc.retryable,
        }
        data.update(exc.extra)
        return Response(data, status=exc.status_code)

    # Call REST framework's default exception handler
    response = exception_handler(exc, context)

    # If response is None, it's an unhandled exception (500 error)
    if response is None:
        logger.error(
            f"Unhandled exception: {exc.__class__.__name__}: {str(exc)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )

        # Don't expose internal details
        return Response(
            {
                "error": "An internal server error occurred",
                "error_code": "InternalServerError",
                "status_code": 500,
            },
            status=500,
        )

    custom_response_data = {
        "error": str(exc),
        "error_code": exc.__class__.__name__,
        "status_code": response.status_code,
    }

    # Add detail if it's a DRF ValidationError
    if hasattr(exc, "detail"):
        if isinstance(exc.detail, dict):
            custom_response_data["errors"] = exc.detail
        elif isinstance(exc.detail, list):
            custom_response_data["errors"] = {"detail": exc.detail}
        else:
            custom_response_data["error"] = str(exc.detail)

    response.data = custom_response_data

    return response
