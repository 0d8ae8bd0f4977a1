"""
Client-side identity resolution.

Resolves the caller's identity lazily. The first ``resolve()`` asks the server
for an identity, which issues an anonymous one for a brand-new visitor;
concurrent callers wait on the same lock, so exactly one issuance request is
made. A transient failure yields ``None`` and the next ``resolve()`` retries.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests

from .api import WhichOneThoAPIError, WhichOneThoClient

logger = logging.getLogger(__name__)

RESOLVED = "resolved"
SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"
ANONYMOUS_UPGRADED = "anonymous_upgraded"


@dataclass(frozen=True)
class ClientIdentity:
    kind: str
    id: int
    username: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.kind == "anonymous"

    @classmethod
    def from_payload(cls, data: Dict) -> "ClientIdentity":
        return cls(kind=data["kind"], id=int(data["id"]), username=data.get("username"))


Listener = Callable[[Optional[ClientIdentity], str], None]


class IdentityResolver:
    def __init__(self, client: WhichOneThoClient):
        self.client = client
        self._identity: Optional[ClientIdentity] = None
        self._lock = threading.Lock()
        self._listeners_lock = threading.Lock()
        self._listeners: Dict[int, Listener] = {}
        self._next_token = 0

    @property
    def identity(self) -> Optional[ClientIdentity]:
        """The cached identity, without contacting the server."""
        return self._identity

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener(identity, event)`` for identity changes.

        Returns:
            A callable that unsubscribes the listener.
        """
        with self._listeners_lock:
            self._next_token += 1
            token = self._next_token
            self._listeners[token] = listener

        def unsubscribe():
            with self._listeners_lock:
                self._listeners.pop(token, None)

        return unsubscribe

    def _notify(self, identity: Optional[ClientIdentity], event: str):
        # Snapshot after the network call so late unsubscribers are skipped
        with self._listeners_lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(identity, event)
            except Exception as e:
                logger.error(f"Identity listener failed on {event}: {e}", exc_info=True)

    def resolve(self) -> Optional[ClientIdentity]:
        """
        Return the caller's identity, issuing an anonymous one if needed.

        Returns:
            The identity, or None when the server could not be reached.
        """
        if self._identity is not None:
            return self._identity

        with self._lock:
            if self._identity is not None:
                return self._identity

            try:
                payload = self.client.issue_anonymous_identity()
            except (requests.RequestException, WhichOneThoAPIError) as e:
                logger.warning(f"Identity resolution failed, will retry on next call: {e}")
                return None

            identity = ClientIdentity.from_payload(payload)
            self._identity = identity

        self._notify(identity, RESOLVED)
        return identity

    def sign_up(self, email: str, password: str, username: str) -> ClientIdentity:
        """Create a permanent account, upgrading the current anonymous identity."""
        previous = self._identity
        identity = ClientIdentity.from_payload(self.client.sign_up(email, password, username))
        with self._lock:
            self._identity = identity
        event = ANONYMOUS_UPGRADED if previous is not None and previous.is_anonymous else SIGNED_IN
        self._notify(identity, event)
        return identity

    def sign_in(self, email: str, password: str) -> ClientIdentity:
        identity = ClientIdentity.from_payload(self.client.sign_in(email, password))
        with self._lock:
            self._identity = identity
        self._notify(identity, SIGNED_IN)
        return identity

    def sign_out(self) -> None:
        self.client.sign_out()
        with self._lock:
            self._identity = None
        self._notify(None, SIGNED_OUT)
