"""Rate Admission Control — per-address moving-window budgets, one per admission class.

Invariants:
    - Each admission consumes budget from exactly one AdmissionClass
    - A request is admitted iff fewer than the class's limit of admissions for
      the same (class, address) fall inside the trailing window
    - Rejection carries the time until the oldest counted hit leaves the window

Design Decisions:
    - limits' MovingWindowRateLimiter: the window rolls continuously, no burst
      at bucket boundaries
    - In-process MemoryStorage: single-process uvicorn deployment; budgets reset
      on restart. A shared storage (redis://) would only change the storage line
    - Budgets are `limits` rate strings in settings ("100/15 minutes")
"""

import logging
import time

from limits import RateLimitItem, parse
from limits.aio.storage import MemoryStorage
from limits.aio.strategies import MovingWindowRateLimiter

from blog_api.config import Settings
from blog_api.core.domain_types import AdmissionClass
from blog_api.core.errors import RateLimitedError

logger = logging.getLogger(__name__)

ADMISSION_MESSAGES = {
    AdmissionClass.GENERAL: "Too many requests from this IP, please try again later",
    AdmissionClass.AUTHENTICATION: "Too many authentication attempts, please try again later",
    AdmissionClass.UPLOAD: "Too many uploads, please try again later",
}


def limits_from_settings(settings: Settings) -> dict[AdmissionClass, RateLimitItem]:
    return {
        AdmissionClass.GENERAL: parse(settings.rate_general_limit),
        AdmissionClass.AUTHENTICATION: parse(settings.rate_authentication_limit),
        AdmissionClass.UPLOAD: parse(settings.rate_upload_limit),
    }


class AdmissionRateLimiter:
    """Admits or rejects operations per (admission class, client address)."""

    def __init__(
        self,
        class_limits: dict[AdmissionClass, RateLimitItem],
        storage: MemoryStorage | None = None,
    ):
        self.class_limits = class_limits
        self.storage = storage or MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self.storage)

    async def admit(self, admission_class: AdmissionClass, address: str) -> None:
        """Record one admission or raise RateLimitedError."""
        item = self.class_limits[admission_class]
        identifiers = (admission_class.value, address)
        if await self._strategy.hit(item, *identifiers):
            return

        stats = await self._strategy.get_window_stats(item, *identifiers)
        retry_after_ms = max(int((stats.reset_time - time.time()) * 1000), 0)
        logger.warning(
            f"Rate limit exceeded for {admission_class.value}",
            extra={"client_address": address, "admission_class": admission_class.value},
        )
        raise RateLimitedError(
            ADMISSION_MESSAGES[admission_class], admission_class.value, retry_after_ms,
        )
