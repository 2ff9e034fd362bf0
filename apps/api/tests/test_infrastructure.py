"""
Tests for ambient plumbing: rate limiting, caching, structured logging, email tasks.
"""
import json
import logging
from unittest.mock import MagicMock, patch

from core.cache import cache_key, invalidate_school_cache
from core.logging import JSONFormatter
from core.rate_limit import RateLimitMiddleware
from tasks.email_tasks import send_confirmation_email_task, send_notification_email_task


def _middleware(default_limit=60):
    return RateLimitMiddleware(app=MagicMock(), default_limit=default_limit, window=60)


class TestRateLimitBuckets:

    def test_longest_prefix_wins(self):
        mw = _middleware()
        assert mw._bucket_for("/v1/auth/signin") == ("/v1/auth/signin", 10)
        assert mw._bucket_for("/v1/admin/reports/abc/resolve") == ("/v1/admin", 50)

    def test_other_paths_use_default(self):
        assert _middleware(default_limit=99)._bucket_for("/v1/profile") == ("default", 99)

    def test_fails_open_without_redis(self):
        with patch("core.rate_limit.get_redis_client", return_value=None):
            allowed, remaining, _ = _middleware()._hit("rate_limit:ip:1.2.3.4:default", 5)
        assert allowed is True
        assert remaining == 5

    def test_blocks_past_limit(self):
        redis_client = MagicMock()
        redis_client.pipeline.return_value.execute.return_value = [6, 30]
        with patch("core.rate_limit.get_redis_client", return_value=redis_client):
            allowed, remaining, _ = _middleware()._hit("rate_limit:ip:1.2.3.4:default", 5)
        assert allowed is False
        assert remaining == 0

    def test_first_hit_sets_window(self):
        redis_client = MagicMock()
        redis_client.pipeline.return_value.execute.return_value = [1, -1]
        with patch("core.rate_limit.get_redis_client", return_value=redis_client):
            allowed, remaining, _ = _middleware()._hit("k", 5)
        assert (allowed, remaining) == (True, 4)
        redis_client.expire.assert_called_once_with("k", 60)


class TestSchoolCache:

    def test_cache_key_skips_none_and_sorts_kwargs(self):
        assert cache_key("schools", "search", None, q="state", limit=50) == "schools:search:limit:50:q:state"

    def test_invalidation_deletes_school_keys_only(self):
        redis_client = MagicMock()
        redis_client.scan_iter.return_value = iter(["schools:search:limit:50", "schools:search:limit:50:q:a"])
        redis_client.delete.return_value = 2
        with patch("core.cache.get_redis_client", return_value=redis_client):
            assert invalidate_school_cache() == 2
        redis_client.scan_iter.assert_called_once_with(match="schools:*")
        redis_client.delete.assert_called_once_with("schools:search:limit:50", "schools:search:limit:50:q:a")

    def test_invalidation_without_redis_is_noop(self):
        with patch("core.cache.get_redis_client", return_value=None):
            assert invalidate_school_cache() == 0


class TestJSONFormatter:

    def test_includes_extra_fields(self):
        record = logging.LogRecord("api", logging.INFO, __file__, 10, "hello %s", ("world",), None)
        record.extra_fields = {"user_id": "abc"}
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["user_id"] == "abc"


class TestEmailTasks:
    """Email is disabled in tests, so tasks report `skipped`."""

    def test_confirmation_skipped_when_disabled(self):
        result = send_confirmation_email_task.apply(args=("a@example.com", "http://x/auth/callback?code=c")).get()
        assert result == {"status": "skipped", "to": "a@example.com"}

    def test_notification_skipped_when_disabled(self):
        result = send_notification_email_task.apply(args=("a@example.com", "Hi", None, "/messages")).get()
        assert result["status"] == "skipped"
