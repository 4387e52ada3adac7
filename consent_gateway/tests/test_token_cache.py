import threading
import time

import pytest

from services import TokenCache
from utils import UpstreamAuthError


class Clock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


class CountingOAuth:
    def __init__(self, expires_in=3600, error=None):
        self.calls = 0
        self.expires_in = expires_in
        self.error = error

    def fetch_token(self):
        self.calls += 1
        if self.error:
            raise self.error
        payload = {"access_token": f"token-{self.calls}"}
        if self.expires_in is not None:
            payload["expires_in"] = self.expires_in
        return payload


def test_warm_token_is_reused():
    oauth = CountingOAuth()
    cache = TokenCache(oauth, safety_margin=60, clock=Clock())

    tokens = [cache.get_token() for _ in range(5)]

    assert oauth.calls == 1
    assert {t.access_token for t in tokens} == {"token-1"}


def test_token_is_refreshed_inside_safety_margin():
    clock = Clock()
    oauth = CountingOAuth(expires_in=3600)
    cache = TokenCache(oauth, safety_margin=60, clock=clock)

    first = cache.get_token()
    clock.now += 3600 - 61
    assert cache.get_token() is first

    clock.now += 2
    second = cache.get_token()

    assert oauth.calls == 2
    assert second.access_token == "token-2"


def test_token_without_lifetime_is_not_cached():
    oauth = CountingOAuth(expires_in=None)
    cache = TokenCache(oauth, safety_margin=60, clock=Clock())

    cache.get_token()
    cache.get_token()

    assert oauth.calls == 2


def test_failure_propagates_and_caches_nothing():
    oauth = CountingOAuth(error=UpstreamAuthError("Failed to obtain access token", details={"error": "x"}))
    cache = TokenCache(oauth, clock=Clock())

    with pytest.raises(UpstreamAuthError):
        cache.get_token()
    with pytest.raises(UpstreamAuthError):
        cache.get_token()

    assert oauth.calls == 2


def test_invalidate_only_drops_matching_token():
    oauth = CountingOAuth()
    cache = TokenCache(oauth, clock=Clock())
    stale = cache.get_token()

    cache.invalidate(stale)
    fresh = cache.get_token()
    cache.invalidate(stale)

    assert cache.get_token() is fresh
    assert oauth.calls == 2


def test_concurrent_cold_callers_share_one_exchange():
    entered = threading.Event()
    release = threading.Event()

    class SlowOAuth(CountingOAuth):
        def fetch_token(self):
            entered.set()
            release.wait(timeout=5)
            return super().fetch_token()

    oauth = SlowOAuth()
    cache = TokenCache(oauth, clock=Clock())
    results = []

    def worker():
        results.append(cache.get_token())

    first = threading.Thread(target=worker)
    first.start()
    assert entered.wait(timeout=5)

    second = threading.Thread(target=worker)
    second.start()
    time.sleep(0.05)
    release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert oauth.calls == 1
    assert len(results) == 2
    assert results[0] is results[1]


def test_concurrent_callers_share_a_failed_exchange():
    entered = threading.Event()
    release = threading.Event()

    class SlowFailingOAuth(CountingOAuth):
        def fetch_token(self):
            entered.set()
            release.wait(timeout=5)
            return super().fetch_token()

    error = UpstreamAuthError("Failed to obtain access token", details={"error": "invalid_client"})
    oauth = SlowFailingOAuth(error=error)
    cache = TokenCache(oauth, clock=Clock())
    errors = []

    def worker():
        try:
            cache.get_token()
        except UpstreamAuthError as e:
            errors.append(e)

    first = threading.Thread(target=worker)
    first.start()
    assert entered.wait(timeout=5)

    waiters = [threading.Thread(target=worker) for _ in range(4)]
    for thread in waiters:
        thread.start()
    time.sleep(0.05)
    release.set()
    for thread in [first] + waiters:
        thread.join(timeout=5)

    assert oauth.calls == 1
    assert len(errors) == 5
    assert all(e is error for e in errors)


def test_caller_after_a_failed_exchange_retries():
    oauth = CountingOAuth(error=UpstreamAuthError("Failed to obtain access token"))
    cache = TokenCache(oauth, clock=Clock())

    with pytest.raises(UpstreamAuthError):
        cache.get_token()
    oauth.error = None

    assert cache.get_token().access_token == "token-2"
    assert oauth.calls == 2


def test_remaining_seconds():
    clock = Clock()
    cache = TokenCache(CountingOAuth(expires_in=120), safety_margin=0, clock=clock)
    token = cache.get_token()

    clock.now += 20

    assert cache.remaining_seconds(token) == 100
    clock.now += 500
    assert cache.remaining_seconds(token) == 0
