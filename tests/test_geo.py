"""Location acquisition tests."""

import time

from safesignal.services.geo_service import LocationReading, LocationUnavailableError, acquire_location


def test_no_source_means_no_location():
    assert acquire_location(None) is None


def test_reading_returned():
    assert acquire_location(lambda: LocationReading(12.9, 77.6), timeout=1) == LocationReading(12.9, 77.6)


def test_timeout_returns_none_quickly():
    def hang():
        time.sleep(1)
        return LocationReading(0.0, 0.0)

    started = time.monotonic()
    assert acquire_location(hang, timeout=0.05) is None
    assert time.monotonic() - started < 0.9


def test_permission_denied_returns_none():
    def denied():
        raise LocationUnavailableError("User denied Geolocation")

    assert acquire_location(denied, timeout=1) is None


def test_provider_crash_returns_none():
    def broken():
        raise RuntimeError("gps driver exploded")

    assert acquire_location(broken, timeout=1) is None


def test_out_of_range_reading_discarded():
    assert acquire_location(lambda: LocationReading(123.0, 10.0), timeout=1) is None


def test_source_without_fix():
    assert acquire_location(lambda: None, timeout=1) is None
