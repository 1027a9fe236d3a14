"""
Tests for the auth endpoint rate limiter.
"""

from noteflow.middleware.rate_limit import AUTH_LIMITS, Limit, RateLimitMiddleware


def make_limiter(limits=None):
    return RateLimitMiddleware(app=None, limits=limits or AUTH_LIMITS)


class TestSlidingWindow:
    """Test the per-(ip, endpoint) window."""

    def test_allows_up_to_limit(self):
        limiter = make_limiter({"/login": Limit(3, 60)})

        results = [limiter.check("1.2.3.4", "/login", now=100.0 + i) for i in range(3)]

        assert results == [None, None, None]

    def test_blocks_over_limit_with_retry_after(self):
        limiter = make_limiter({"/login": Limit(2, 60)})
        limiter.check("1.2.3.4", "/login", now=100.0)
        limiter.check("1.2.3.4", "/login", now=110.0)

        retry_after = limiter.check("1.2.3.4", "/login", now=120.0)

        assert retry_after == 40

    def test_window_slides(self):
        limiter = make_limiter({"/login": Limit(1, 60)})
        limiter.check("1.2.3.4", "/login", now=100.0)

        assert limiter.check("1.2.3.4", "/login", now=161.0) is None

    def test_clients_counted_separately(self):
        limiter = make_limiter({"/login": Limit(1, 60)})
        limiter.check("1.1.1.1", "/login", now=100.0)

        assert limiter.check("2.2.2.2", "/login", now=100.0) is None


class TestDefaults:
    """Test the configured auth limits."""

    def test_login_and_register_limited(self):
        limiter = make_limiter()

        assert set(limiter.limits) == {"/api/auth/login", "/api/auth/register"}
        assert limiter._match("/api/auth/login") == "/api/auth/login"
        assert limiter._match("/api/notes") is None
