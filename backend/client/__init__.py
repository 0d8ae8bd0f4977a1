"""
Python client for the WhichOneTho API.
"""

from .api import WhichOneThoAPIError, WhichOneThoClient
from .identity import ClientIdentity, IdentityResolver
from .local_state import LocalState
from .notifications import Notification, NotificationBus

__all__ = [
    "ClientIdentity",
    "IdentityResolver",
    "LocalState",
    "Notification",
    "NotificationBus",
    "WhichOneThoAPIError",
    "WhichOneThoClient",
]
