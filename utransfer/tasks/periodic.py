"""
Periodic Task

Base class for timer-driven background jobs running on a daemon thread.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)


class PeriodicTask(ABC):
    """
    Runs ``run_once`` every ``interval_seconds`` until stopped.

    Ticks are single-flight: a tick that starts while the previous one is
    still running is skipped instead of running in parallel.
    """

    name = "periodic-task"

    def __init__(self, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval_seconds = interval_seconds
        self._run_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @abstractmethod
    def run_once(self) -> Any:
        """Do one unit of work."""

    def tick(self) -> Optional[Any]:
        """
        Run one iteration unless another is in progress.

        Returns:
            The result of run_once, or None if the tick was skipped
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning(f"{self.name}: previous run still in progress, skipping tick")
            return None
        try:
            return self.run_once()
        except Exception as e:
            logger.error(f"{self.name}: run failed: {e}", exc_info=True)
            return None
        finally:
            self._run_lock.release()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background thread; no-op if already running."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"{self.name}: started (every {self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the thread to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info(f"{self.name}: stopped")

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.tick()
