"""Load average scraper."""

from __future__ import annotations

from typing import Iterator

from .base import BaseScraper, MetricRecord, Tier, emit_tiers, metric_name, ratio
from .provider import BaseProvider, LoadAverage


def _short(avg: LoadAverage) -> Iterator[MetricRecord]:
    yield ratio(metric_name("os.load1"), avg.load1)


def _long(avg: LoadAverage) -> Iterator[MetricRecord]:
    yield ratio(metric_name("os.load5"), avg.load5)
    yield ratio(metric_name("os.load15"), avg.load15)


TIERS: tuple[Tier[LoadAverage], ...] = (
    Tier("load1", 1, _short),
    Tier("load5-15", 2, _long),
)


class LoadScraper(BaseScraper):
    def __init__(self, level: int, provider: BaseProvider) -> None:
        super().__init__(level)
        self._provider = provider

    @property
    def name(self) -> str:
        return "load"

    def scrape(self) -> list[MetricRecord]:
        return emit_tiers(TIERS, self.level, self._provider.load_average())
