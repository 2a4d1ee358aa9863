"""Unit tests for the TTL cache store."""

from datetime import timedelta

import pytest

from portfolio_github.cache import CacheStore
from portfolio_github.cache_policy import CachePolicy


class TestCacheStore:
    """Test cases for CacheStore."""

    def test_get_missing_key_returns_none(self, cache):
        assert cache.get("github:repos?repo=a/b") is None
        assert cache.has("github:repos?repo=a/b") is False

    def test_set_then_get_within_ttl(self, cache, clock):
        cache.set("k", {"stars": 1}, timedelta(minutes=10))
        clock.advance(minutes=9)
        assert cache.get("k") == {"stars": 1}
        assert cache.has("k") is True

    def test_entry_absent_after_ttl(self, cache, clock):
        cache.set("k", "v", 60)
        clock.advance(seconds=61)
        assert cache.get("k") is None

    def test_entry_still_present_at_exact_expiry(self, cache, clock):
        cache.set("k", "v", 60)
        clock.advance(seconds=60)
        assert cache.get("k") == "v"

    def test_overwrite_keeps_single_entry_with_latest_value(self, cache):
        cache.set("k", "v1", 60)
        cache.set("k", "v2", 60)
        assert cache.get("k") == "v2"
        stats = cache.stats()
        assert stats.size == 1
        assert stats.keys == ["k"]

    def test_overwrite_resets_expiry(self, cache, clock):
        cache.set("k", "v1", 60)
        clock.advance(seconds=50)
        cache.set("k", "v2", 60)
        clock.advance(seconds=50)
        assert cache.get("k") == "v2"

    def test_falsy_values_are_cached(self, cache):
        cache.set("languages", {}, 60)
        assert cache.get("languages") == {}
        assert cache.has("languages") is True

    @pytest.mark.parametrize("ttl", [0, -1, timedelta(0), timedelta(seconds=-5)])
    def test_non_positive_ttl_rejected(self, cache, ttl):
        with pytest.raises(ValueError):
            cache.set("k", "v", ttl)
        assert cache.stats().size == 0

    def test_delete_is_noop_when_absent(self, cache):
        cache.delete("missing")
        cache.set("k", "v", 60)
        cache.delete("k")
        assert cache.get("k") is None

    def test_clear_removes_everything(self, cache):
        cache.set("a", 1, 60)
        cache.set("b", 2, 60)
        cache.clear()
        assert cache.stats().size == 0
        assert cache.get("a") is None

    def test_lazy_eviction(self, cache, clock):
        cache.set("a", 1, 60)
        cache.set("b", 2, 60)
        cache.set("c", 3, 600)
        clock.advance(seconds=120)

        # Expired entries are still counted until something touches them
        assert cache.stats().size == 3

        assert cache.get("a") is None
        assert cache.has("b") is False
        stats = cache.stats()
        assert stats.size == 1
        assert stats.keys == ["c"]

    def test_rate_limit_policy_ttl_is_short(self, cache, clock):
        cache.set("github:rate_limit", {"remaining": 10}, CachePolicy.RATE_LIMIT.ttl)
        clock.advance(minutes=4)
        assert cache.get("github:rate_limit") == {"remaining": 10}
        clock.advance(minutes=2)
        assert cache.get("github:rate_limit") is None

    def test_default_clock(self):
        store = CacheStore()
        store.set("k", "v", 60)
        assert store.get("k") == "v"


class TestCachePolicy:
    """Test cases for the TTL policy table."""

    def test_repository_ttls_are_twelve_hours(self):
        assert CachePolicy.REPO_INFO.ttl == timedelta(hours=12)
        assert CachePolicy.REPO_LANGUAGES.ttl == timedelta(hours=12)

    def test_rate_limit_ttl_is_five_minutes(self):
        assert CachePolicy.RATE_LIMIT.ttl == timedelta(minutes=5)

    def test_policy_keys(self):
        assert [p.key for p in CachePolicy] == ["repo_info", "repo_languages", "rate_limit"]
