"""Collector manager that wires the domain collectors from configuration."""

from __future__ import annotations

import logging

from ..config import ProbeConfig
from .base import BaseScraper, MetricRecord
from .cpu import CpuScraper
from .disk import DiskScraper
from .load import LoadScraper
from .memory import MemoryScraper
from .network import NetworkScraper
from .periodic import PeriodicCollector
from .provider import BaseProvider, PsutilProvider

logger = logging.getLogger(__name__)


class CollectorManager:
    """Owns one :class:`PeriodicCollector` per enabled domain.

    Instantiate it with a :class:`ProbeConfig`, then call :meth:`start` /
    :meth:`stop`. Collectors with level 0 are not created. Each collector
    samples on its own thread; :meth:`metrics` reads their snapshots
    without coordinating them.
    """

    def __init__(self, config: ProbeConfig, provider: BaseProvider | None = None) -> None:
        self._config = config
        provider = provider or PsutilProvider()
        self._collectors: list[PeriodicCollector] = []

        if config.cpu.enabled:
            self._add(CpuScraper(config.cpu.level, provider), config.cpu.period_ms)
        if config.memory.enabled:
            self._add(MemoryScraper(config.memory.level, provider), config.memory.period_ms)
        if config.load.enabled:
            self._add(LoadScraper(config.load.level, provider), config.load.period_ms)
        if config.disk.enabled:
            self._add(
                DiskScraper(config.disk.level, provider, names=config.disk.names),
                config.disk.period_ms,
            )
        if config.net.enabled:
            self._add(
                NetworkScraper(
                    config.net.level,
                    provider,
                    period_ms=config.net.period_ms,
                    interfaces=config.net.interfaces,
                ),
                config.net.period_ms,
            )

    def _add(self, scraper: BaseScraper, period_ms: int) -> None:
        self._collectors.append(PeriodicCollector(scraper, period_ms))

    @property
    def collectors(self) -> list[PeriodicCollector]:
        return list(self._collectors)

    def collect_once(self) -> None:
        """Run every collector's scrape once, synchronously."""
        for collector in self._collectors:
            collector.collect_once()

    def metrics(self) -> list[MetricRecord]:
        """Concatenated latest snapshots of all collectors."""
        records: list[MetricRecord] = []
        for collector in self._collectors:
            records.extend(collector.metrics())
        return records

    def start(self) -> None:
        """Start collecting in the background."""
        for collector in self._collectors:
            collector.start()
        logger.info("CollectorManager started (%d collector(s))", len(self._collectors))

    def stop(self) -> None:
        """Stop background collection."""
        for collector in self._collectors:
            collector.stop()
        logger.info("CollectorManager stopped")
