"""Tests for ResponseCache."""

from visitor_stats.services.cache_service import ResponseCache, get_total_cache


class TestResponseCache:
    """Tests for TTL behaviour."""

    def test_miss_then_hit(self, total_cache):
        assert total_cache.get("https://stats.example/total") is None
        total_cache.put("https://stats.example/total", b"{}")
        assert total_cache.get("https://stats.example/total") == b"{}"

    def test_entry_expires_after_ttl(self, total_cache, fake_clock):
        total_cache.put("k", b"v")
        fake_clock.advance(59)
        assert total_cache.get("k") == b"v"
        fake_clock.advance(2)
        assert total_cache.get("k") is None

    def test_rewrite_is_idempotent(self, total_cache):
        total_cache.put("k", b"same")
        total_cache.put("k", b"same")
        assert total_cache.get("k") == b"same"

    def test_clear(self, total_cache):
        total_cache.put("k", b"v")
        total_cache.clear()
        assert total_cache.get("k") is None


def test_shared_cache_uses_configured_ttl():
    cache = get_total_cache()
    assert isinstance(cache, ResponseCache)
    assert cache.ttl_seconds == 60
    assert get_total_cache() is cache
