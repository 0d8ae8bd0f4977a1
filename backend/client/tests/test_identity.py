"""
Tests for client-side identity resolution.
"""

import threading
import time
from unittest.mock import Mock

import requests

from client.api import WhichOneThoAPIError
from client.identity import (
    ANONYMOUS_UPGRADED,
    RESOLVED,
    SIGNED_IN,
    SIGNED_OUT,
    ClientIdentity,
    IdentityResolver,
)

ANON = {"id": 7, "kind": "anonymous", "is_anonymous": True, "created": True}


class TestResolve:
    def test_resolves_once_and_caches(self):
        api = Mock()
        api.issue_anonymous_identity.return_value = ANON
        resolver = IdentityResolver(api)

        first = resolver.resolve()
        second = resolver.resolve()

        assert first == ClientIdentity(kind="anonymous", id=7)
        assert second is first
        api.issue_anonymous_identity.assert_called_once()

    def test_concurrent_first_visit_issues_once(self):
        api = Mock()

        def slow_issue():
            time.sleep(0.05)
            return ANON

        api.issue_anonymous_identity.side_effect = slow_issue
        resolver = IdentityResolver(api)
        results = []

        threads = [threading.Thread(target=lambda: results.append(resolver.resolve())) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert api.issue_anonymous_identity.call_count == 1
        assert len(set(results)) == 1

    def test_transient_failure_returns_none_and_retries(self):
        api = Mock()
        api.issue_anonymous_identity.side_effect = [requests.exceptions.Timeout("slow"), ANON]
        resolver = IdentityResolver(api)

        assert resolver.resolve() is None
        assert resolver.resolve().id == 7

    def test_api_error_returns_none(self):
        api = Mock()
        api.issue_anonymous_identity.side_effect = WhichOneThoAPIError(503)

        assert IdentityResolver(api).resolve() is None


class TestListeners:
    def test_listener_notified_on_resolve(self):
        api = Mock()
        api.issue_anonymous_identity.return_value = ANON
        resolver = IdentityResolver(api)
        listener = Mock()
        resolver.subscribe(listener)

        identity = resolver.resolve()

        listener.assert_called_once_with(identity, RESOLVED)

    def test_unsubscribed_during_resolution_is_not_notified(self):
        api = Mock()
        resolver = IdentityResolver(api)
        listener = Mock()
        unsubscribe = resolver.subscribe(listener)

        def issue():
            unsubscribe()
            return ANON

        api.issue_anonymous_identity.side_effect = issue

        assert resolver.resolve() is not None
        listener.assert_not_called()

    def test_failing_listener_does_not_break_others(self):
        api = Mock()
        api.issue_anonymous_identity.return_value = ANON
        resolver = IdentityResolver(api)
        good = Mock()
        resolver.subscribe(Mock(side_effect=RuntimeError("boom")))
        resolver.subscribe(good)

        resolver.resolve()

        good.assert_called_once()


class TestTransitions:
    def test_sign_up_from_anonymous_is_upgrade(self):
        api = Mock()
        api.issue_anonymous_identity.return_value = ANON
        api.sign_up.return_value = {"id": 7, "kind": "permanent", "username": "ava"}
        resolver = IdentityResolver(api)
        listener = Mock()
        resolver.resolve()
        resolver.subscribe(listener)

        identity = resolver.sign_up("ava@example.com", "pw", "ava")

        assert identity == ClientIdentity(kind="permanent", id=7, username="ava")
        listener.assert_called_once_with(identity, ANONYMOUS_UPGRADED)

    def test_sign_in_and_out(self):
        api = Mock()
        api.sign_in.return_value = {"id": 9, "kind": "permanent", "username": "kai"}
        resolver = IdentityResolver(api)
        events = []
        resolver.subscribe(lambda identity, event: events.append(event))

        resolver.sign_in("kai@example.com", "pw")
        assert resolver.identity.id == 9

        resolver.sign_out()

        assert resolver.identity is None
        assert events == [SIGNED_IN, SIGNED_OUT]
        api.sign_out.assert_called_once()
