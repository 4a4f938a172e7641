"""Best-effort location capture for SOS triggers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass

from safesignal.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationReading:
    """A single position fix."""

    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0


class LocationUnavailableError(Exception):
    """Raised by a location source when permission is denied or no fix exists."""


# Returns a reading, or None / raises LocationUnavailableError when there is no fix.
LocationSource = Callable[[], "LocationReading | None"]


def acquire_location(source: LocationSource | None, timeout: float | None = None) -> LocationReading | None:
    """Take one reading from `source`, waiting at most `timeout` seconds.

    Never raises: a timeout, a denied permission, a provider error or an
    out-of-range fix all yield None so the caller can proceed without a
    location. The source runs on a worker thread that is abandoned on timeout.
    """
    if source is None:
        return None
    if timeout is None:
        timeout = settings.geolocation_timeout_seconds

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="geolocation")
    future = executor.submit(source)
    try:
        reading = future.result(timeout=timeout)
    except FutureTimeoutError:
        logger.warning("Location acquisition timed out after %.1fs", timeout)
        return None
    except LocationUnavailableError as exc:
        logger.info("Location unavailable: %s", exc)
        return None
    except Exception:  # noqa: BLE001
        logger.warning("Location provider failed", exc_info=True)
        return None
    finally:
        executor.shutdown(wait=False)

    if reading is None:
        return None
    if not reading.is_valid():
        logger.warning("Discarding out-of-range location %s,%s", reading.latitude, reading.longitude)
        return None
    return reading
