import asyncio
import time
from typing import Callable, Optional

from hookified.constants import CRON_SETUP_CACHE_TTL_SECONDS
from hookified.services.cron.setup_validator import CronSetupReport, CronSetupValidator


class SetupValidationCache:
    """Caches the last scheduler setup report for a fixed TTL.

    Owned by the application state. The clock is injectable so staleness
    can be tested without sleeping.
    """

    def __init__(
        self,
        validator: Optional[CronSetupValidator] = None,
        ttl_seconds: float = CRON_SETUP_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.validator = validator or CronSetupValidator()
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._report: Optional[CronSetupReport] = None
        self._checked_at: Optional[float] = None
        self._lock = asyncio.Lock()

    def is_fresh(self) -> bool:
        if self._report is None or self._checked_at is None:
            return False
        return self.clock() - self._checked_at < self.ttl_seconds

    async def get(self, refresh: bool = False) -> CronSetupReport:
        async with self._lock:
            if refresh or not self.is_fresh():
                self._report = await self.validator.validate()
                self._checked_at = self.clock()
            return self._report

    async def is_setup_valid(self) -> bool:
        return (await self.get()).is_valid

    def invalidate(self) -> None:
        self._report = None
        self._checked_at = None
