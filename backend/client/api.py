"""
HTTP client for the WhichOneTho API.

Every request carries an explicit timeout (``WHICHONETHO_TIMEOUT`` seconds,
default 10). The anonymous-id cookie issued by the server lives in the
session's cookie jar, so one client instance is one browser-equivalent
identity.
"""

import base64
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"
DEFAULT_TIMEOUT = 10.0
CSRF_COOKIE_NAME = "csrftoken"
SAFE_METHODS = ("GET", "HEAD", "OPTIONS", "TRACE")


class WhichOneThoAPIError(Exception):
    """An error response from the API."""

    def __init__(self, status_code: int, payload: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        self.payload = payload or {}
        self.message = self.payload.get("error") or f"HTTP {status_code}"
        self.error_code = self.payload.get("error_code")
        self.retryable = bool(self.payload.get("retryable", status_code >= 500))
        super().__init__(self.message)

    @property
    def reset_at(self) -> Optional[str]:
        return self.payload.get("reset_at")

    @property
    def rejected_image(self) -> Optional[str]:
        return self.payload.get("rejected_image")


def _encode_image(image: Union[bytes, str]) -> str:
    if isinstance(image, bytes):
        return base64.b64encode(image).decode("ascii")
    return image


class WhichOneThoClient:
    """
    Thin wrapper over the REST API.

    Args:
        base_url: API root, e.g. ``https://example.com/api/v1``
            (defaults to ``WHICHONETHO_API_URL``)
        timeout: Per-request timeout in seconds (defaults to ``WHICHONETHO_TIMEOUT``)
        session: Optional pre-configured ``requests.Session``
        local_state: Optional LocalState; reported polls are recorded there and
            excluded from the feed
    """

    def __init__(self, base_url=None, timeout=None, session=None, local_state=None):
        self.base_url = (base_url or os.environ.get("WHICHONETHO_API_URL", DEFAULT_BASE_URL)).rstrip("/")
        if timeout is None:
            timeout = float(os.environ.get("WHICHONETHO_TIMEOUT", DEFAULT_TIMEOUT))
        self.timeout = timeout
        self.session = session or requests.Session()
        self.local_state = local_state
        parts = urlsplit(self.base_url)
        self._origin = f"{parts.scheme}://{parts.netloc}"

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _csrf_headers(self) -> Dict[str, str]:
        """
        Headers for Django's CSRF check on signed-in (session) writes.

        The token comes from the cookie the auth endpoints set; HTTPS also
        needs a same-origin Referer.
        """
        token = self.session.cookies.get(CSRF_COOKIE_NAME)
        if not token:
            return {}
        return {"X-CSRFToken": token, "Referer": f"{self._origin}/"}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            requests.RequestException: On network failures and timeouts
            WhichOneThoAPIError: On an error status
        """
        kwargs.setdefault("timeout", self.timeout)
        if method.upper() not in SAFE_METHODS:
            csrf_headers = self._csrf_headers()
            if csrf_headers:
                kwargs["headers"] = {**csrf_headers, **kwargs.get("headers", {})}
        response = self.session.request(method, self._url(path), **kwargs)

        if response.status_code == 204 or not response.content:
            payload = None
        else:
            try:
                payload = response.json()
            except ValueError:
                payload = None

        if response.status_code >= 400:
            logger.debug(f"{method} {path} failed with {response.status_code}: {payload}")
            raise WhichOneThoAPIError(
                response.status_code, payload if isinstance(payload, dict) else None
            )
        return payload

    # Identity

    def issue_anonymous_identity(self) -> Dict[str, Any]:
        """Get (or create on first call) this client's identity."""
        return self._request("GET", "auth/anonymous/")

    def get_current_identity(self) -> Optional[Dict[str, Any]]:
        try:
            return self._request("GET", "auth/me/")
        except WhichOneThoAPIError as e:
            if e.status_code == 401:
                return None
            raise

    def sign_up(self, email: str, password: str, username: str) -> Dict[str, Any]:
        return self._request(
            "POST", "auth/signup/", json={"email": email, "password": password, "username": username}
        )

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "auth/signin/", json={"email": email, "password": password})

    def sign_out(self) -> None:
        self._request("POST", "auth/signout/")

    def username_available(self, username: str) -> bool:
        data = self._request("GET", "auth/username-available/", params={"username": username})
        return bool(data["available"])

    # Polls

    def get_feed(
        self,
        genders: Optional[Iterable[str]] = None,
        time_filter: str = "all",
        limit: int = 20,
        exclude_ids: Optional[Iterable[int]] = None,
    ) -> List[Dict[str, Any]]:
        """Vote feed. Locally reported polls are always excluded."""
        exclude = set(exclude_ids or [])
        if self.local_state is not None:
            exclude |= self.local_state.reported_poll_ids

        params = {"time": time_filter, "limit": limit}
        if genders:
            params["genders"] = ",".join(genders)
        if exclude:
            params["exclude"] = ",".join(str(pk) for pk in sorted(exclude))
        return self._request("GET", "polls/", params=params)

    def get_poll(self, poll_id: int) -> Dict[str, Any]:
        return self._request("GET", f"polls/{poll_id}/")

    def create_poll(
        self,
        poster_gender: str,
        image_a: Union[bytes, str],
        image_b: Union[bytes, str],
        duration: int = 60,
        body_type: Optional[str] = None,
        context: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a poll. Images may be raw bytes or base64 strings."""
        return self._request(
            "POST",
            "polls/",
            json={
                "poster_gender": poster_gender,
                "image_a": _encode_image(image_a),
                "image_b": _encode_image(image_b),
                "duration": duration,
                "body_type": body_type,
                "context": context,
            },
        )

    def check_rate_limit(self) -> Dict[str, Any]:
        return self._request("GET", "polls/rate-limit/")

    def close_poll(self, poll_id: int) -> Dict[str, Any]:
        return self._request("POST", f"polls/{poll_id}/close/")

    def report_poll(self, poll_id: int, reason: str) -> Dict[str, Any]:
        """
        Report a poll and hide it locally.

        The poll is added to the local exclusion set on success and when it
        was already reported.
        """
        data = self._request("POST", f"polls/{poll_id}/report/", json={"reason": reason})
        if self.local_state is not None and (data.get("success") or data.get("already_reported")):
            self.local_state.add_reported_poll(poll_id)
        return data

    def my_polls(self) -> List[Dict[str, Any]]:
        return self._request("GET", "polls/mine/")

    def voted_polls(self) -> List[Dict[str, Any]]:
        return self._request("GET", "polls/voted/")

    # Votes

    def cast_vote(self, poll_id: int, side: str, voter_gender: Optional[str] = None) -> Dict[str, Any]:
        return self._request(
            "POST",
            "votes/cast/",
            json={"poll_id": poll_id, "side": side, "voter_gender": voter_gender},
        )

    def vote_status(self, poll_id: int) -> Dict[str, Any]:
        return self._request("GET", "votes/status/", params={"poll_id": poll_id})

    # Stats

    def stats(self) -> Dict[str, Any]:
        return self._request("GET", "stats/me/")

    def vote_timeline(self, days: int = 7) -> List[Dict[str, Any]]:
        return self._request("GET", "stats/timeline/", params={"days": days})
