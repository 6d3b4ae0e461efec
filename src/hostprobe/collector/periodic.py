"""Generic periodic sampling collector."""

from __future__ import annotations

import logging
import threading
import time

from .base import BaseScraper, Snapshot
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class PeriodicCollector:
    """Runs one scraper on a fixed period and publishes its snapshots.

    The background thread wakes on a schedule anchored at :meth:`start`.
    Scrapes never overlap: when one overruns, the wakes it missed are
    dropped and sampling resumes at the next deadline on the grid.
    A scraper of level 0 never runs.
    """

    def __init__(self, scraper: BaseScraper, period_ms: int) -> None:
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        self._scraper = scraper
        self._period = period_ms / 1000.0
        self._store = SnapshotStore()
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._scrape_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._scraper.name

    @property
    def level(self) -> int:
        return self._scraper.level

    @property
    def period_ms(self) -> int:
        return round(self._period * 1000)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def metrics(self) -> Snapshot:
        """Latest complete snapshot; empty before the first published cycle."""
        return self._store.metrics()

    def collect_once(self) -> bool:
        """Run one scrape synchronously. Returns True if a snapshot was published.

        Scrapes of one collector are serialized, whichever thread runs them.
        """
        with self._scrape_lock:
            try:
                records = self._scraper.scrape()
            except Exception:
                logger.exception("Collector %s failed", self.name)
                return False
            if records is None:
                return False
            self._store.publish(records)
            return True

    def _run(self) -> None:
        """Background thread loop."""
        deadline = time.monotonic() + self._period
        while not self._stop_event.wait(max(0.0, deadline - time.monotonic())):
            self.collect_once()
            deadline += self._period
            now = time.monotonic()
            if now >= deadline:
                missed = int((now - deadline) // self._period) + 1
                deadline += missed * self._period
                logger.warning(
                    "Collector %s overran its period, dropped %d wake(s)", self.name, missed
                )

    def start(self) -> None:
        """Start sampling in the background."""
        if self.level <= 0:
            logger.debug("Collector %s disabled (level 0)", self.name)
            return
        if self.running:
            if self._stop_event.is_set():
                logger.warning(
                    "Collector %s is still finishing a stopped scrape, not restarted", self.name
                )
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"hostprobe-{self.name}", daemon=True
        )
        self._thread.start()
        logger.info(
            "Collector %s started (period=%.3fs, level=%d)", self.name, self._period, self.level
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the sampling thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                # kept so a restart cannot run alongside the unfinished scrape
                logger.warning("Collector %s did not stop within %.1fs", self.name, timeout)
                return
            self._thread = None
            logger.info("Collector %s stopped", self.name)
