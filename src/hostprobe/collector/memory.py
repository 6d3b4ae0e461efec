"""Memory and swap scraper."""

from __future__ import annotations

from typing import Iterator, NamedTuple

from .base import BaseScraper, MetricRecord, Tier, counter, emit_tiers, metric_name, ratio
from .provider import BaseProvider, MemoryUsage


class MemoryView(NamedTuple):
    virtual: MemoryUsage
    swap: MemoryUsage


def _percent(view: MemoryView) -> Iterator[MetricRecord]:
    yield ratio(metric_name("os.mem"), view.virtual.used_percent)
    yield ratio(metric_name("os.swap"), view.swap.used_percent)


def _bytes(view: MemoryView) -> Iterator[MetricRecord]:
    yield counter(metric_name("os.mem.used"), view.virtual.used)
    yield counter(metric_name("os.mem.total"), view.virtual.total)
    yield counter(metric_name("os.swap.used"), view.swap.used)
    yield counter(metric_name("os.swap.total"), view.swap.total)


TIERS: tuple[Tier[MemoryView], ...] = (
    Tier("percent", 1, _percent),
    Tier("bytes", 2, _bytes),
)


class MemoryScraper(BaseScraper):
    """Collects virtual memory and swap usage gauges."""

    def __init__(self, level: int, provider: BaseProvider) -> None:
        super().__init__(level)
        self._provider = provider

    @property
    def name(self) -> str:
        return "memory"

    def scrape(self) -> list[MetricRecord]:
        view = MemoryView(
            virtual=self._provider.virtual_memory(),
            swap=self._provider.swap_memory(),
        )
        return emit_tiers(TIERS, self.level, view)
