"""
Keep-Alive Task

Pings the server's own public URL so free hosting tiers don't idle it out.
"""

import asyncio
import logging

import aiohttp

from .periodic import PeriodicTask

logger = logging.getLogger(__name__)


class KeepAlivePinger(PeriodicTask):
    """
    GETs ``<self_url>/health`` on a fixed interval.

    Failures are logged and otherwise ignored.
    """

    name = "keep-alive"

    def __init__(self, self_url: str, interval_seconds: float = 300, timeout_seconds: float = 10):
        super().__init__(interval_seconds)
        self.url = f"{self_url.rstrip('/')}/health"
        self.timeout_seconds = timeout_seconds

    async def _ping(self) -> int:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.url) as response:
                return response.status

    def run_once(self) -> bool:
        """
        Ping once.

        Returns:
            True if the server answered with a non-error status
        """
        try:
            status = asyncio.run(self._ping())
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning(f"[KEEP_ALIVE] Ping to {self.url} failed: {e}")
            return False

        if status >= 400:
            logger.warning(f"[KEEP_ALIVE] Ping to {self.url} returned HTTP {status}")
            return False
        logger.info("[KEEP_ALIVE] Ping successful")
        return True
