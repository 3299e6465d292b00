"""Unit tests for the TTL cache and its key builders."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from order_gate.domain.cache import (
    TTLCache,
    customer_exists_key,
    customer_status_key,
    geofencing_key,
    invalidate_customer,
    restaurant_status_key,
)


class TestTTLCacheBasics:
    def test_get_returns_stored_value(self, cache):
        cache.set("k", {"v": 1})
        assert cache.get("k") == {"v": 1}
        assert cache.has("k")

    def test_missing_key_returns_default(self, cache):
        assert cache.get("nope") is None
        assert cache.get("nope", "fallback") == "fallback"
        assert not cache.has("nope")

    def test_stored_none_still_counts_as_present(self, cache):
        cache.set("k", None)
        assert cache.has("k")

    def test_invalid_default_ttl_rejected(self):
        with pytest.raises(ValueError):
            TTLCache(default_ttl_seconds=0)


class TestTTLCacheExpiry:
    def test_entry_valid_up_to_and_including_ttl(self, cache, clock):
        cache.set("k", "v", ttl=10)
        clock.advance(10)
        assert cache.get("k") == "v"
        assert not cache.is_expired("k")

    def test_entry_evicted_after_ttl(self, cache, clock):
        cache.set("k", "v", ttl=10)
        clock.advance(10.001)
        assert cache.is_expired("k")
        assert cache.get("k") is None
        assert "k" not in cache.keys()

    def test_default_ttl_applies(self, clock):
        cache = TTLCache(default_ttl_seconds=300, clock=clock)
        cache.set("k", "v")
        clock.advance(299)
        assert cache.has("k")
        clock.advance(2)
        assert not cache.has("k")

    def test_set_refreshes_timestamp(self, cache, clock):
        cache.set("k", "old", ttl=10)
        clock.advance(8)
        cache.set("k", "new", ttl=10)
        clock.advance(8)
        assert cache.get("k") == "new"

    def test_unknown_key_is_expired(self, cache):
        assert cache.is_expired("never-set")


class TestTTLCacheClear:
    def test_clear_single_key(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear("a")
        assert cache.keys() == ["b"]

    def test_clear_everything(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0

    def test_keys_returns_copy(self, cache):
        cache.set("a", 1)
        keys = cache.keys()
        keys.append("injected")
        assert cache.keys() == ["a"]

    def test_concurrent_writers_do_not_corrupt_store(self):
        cache = TTLCache()

        def writer(n: int) -> None:
            for i in range(200):
                cache.set(f"w{n}:{i}", i)
                cache.get(f"w{n}:{i}")

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(writer, range(8)))

        assert len(cache) == 8 * 200


class TestCacheKeys:
    def test_customer_keys(self):
        assert customer_exists_key("c1") == "validation:customerExists:c1"
        assert customer_status_key("c1") == "validation:customerStatus:c1"

    def test_restaurant_key_is_global(self):
        assert restaurant_status_key() == "validation:restaurantStatus"

    def test_geofencing_key_rounds_half_away_from_zero(self):
        assert geofencing_key(43.23885, 76.88975) == "validation:geofencing:43.2389,76.8898"
        assert geofencing_key(-0.00005, -33.12345) == "validation:geofencing:-0.0001,-33.1235"

    def test_geofencing_key_pads_to_four_decimals(self):
        assert geofencing_key(51.5, 0) == "validation:geofencing:51.5000,0.0000"

    def test_nearby_points_share_key(self):
        assert geofencing_key(43.23891, 76.88981) == geofencing_key(43.23894, 76.88984)

    def test_invalidate_customer_keeps_other_entries(self, cache):
        cache.set(customer_exists_key("c1"), "x")
        cache.set(customer_status_key("c1"), "x")
        cache.set(customer_exists_key("c2"), "x")
        cache.set(restaurant_status_key(), "x")
        cache.set(geofencing_key(1.0, 2.0), "x")

        invalidate_customer(cache, "c1")

        assert sorted(cache.keys()) == sorted(
            [customer_exists_key("c2"), geofencing_key(1.0, 2.0)]
        )
