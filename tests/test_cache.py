"""Tests for address normalization and the scan-scoped discovery cache."""

import pytest

from discovery.cache import DiscoveryCache
from discovery.models import UNKNOWN_DEVICE_NAME, DiscoveredDevice, HardwareAddress


def _device(address, name=UNKNOWN_DEVICE_NAME, handle=None):
    return DiscoveredDevice(address=HardwareAddress.parse(address), name=name, handle=handle)


class TestHardwareAddress:
    def test_key_is_lowercase_display_is_uppercase(self):
        address = HardwareAddress.parse("aA:bb:CC:dd:EE:ff")
        assert address.key == "aa:bb:cc:dd:ee:ff"
        assert address.display == "AA:BB:CC:DD:EE:FF"

    def test_matches_ignores_case(self):
        assert HardwareAddress.parse("AA:BB").matches(HardwareAddress.parse("aa:bb"))
        assert HardwareAddress.parse("AA:BB") == HardwareAddress.parse(" aa:bb ")

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_address_rejected(self, raw):
        with pytest.raises(ValueError):
            HardwareAddress.parse(raw)


class TestDiscoveryCache:
    def test_first_write_wins(self):
        cache = DiscoveryCache()
        first = _device("AA:01", "Speaker", handle="h1")
        second = _device("aa:01", "Renamed", handle="h2")

        assert cache.upsert(first) is True
        assert cache.upsert(second) is False

        cached = cache.lookup(HardwareAddress.parse("Aa:01"))
        assert cached.name == "Speaker"
        assert cached.handle == "h1"
        assert len(cache) == 1

    def test_values_in_insertion_order(self):
        cache = DiscoveryCache()
        for address in ("CC:03", "AA:01", "BB:02", "aa:01"):
            cache.upsert(_device(address))
        assert [d.address.display for d in cache.values()] == ["CC:03", "AA:01", "BB:02"]

    def test_lookup_miss(self):
        assert DiscoveryCache().lookup(HardwareAddress.parse("AA:01")) is None

    def test_clear(self):
        cache = DiscoveryCache()
        cache.upsert(_device("AA:01"))
        cache.clear()
        assert len(cache) == 0
        assert HardwareAddress.parse("AA:01") not in cache

    def test_to_dict_uses_display_form(self):
        assert _device("ab:cd").to_dict() == {"name": UNKNOWN_DEVICE_NAME, "address": "AB:CD"}
