"""CPU utilization scraper."""

from __future__ import annotations

import logging
from typing import Iterator

from .base import BaseScraper, MetricRecord, Tier, emit_tiers, metric_name, ratio
from .delta import CpuFractions, cpu_fractions, mean, utilization
from .provider import BaseProvider, CpuTimes

logger = logging.getLogger(__name__)

# (metric suffix, CpuFractions attribute), in emission order
BREAKDOWN = (
    ("iowait", "iowait"),
    ("user", "user"),
    ("systems", "system"),
    ("nice", "nice"),
    ("irq", "irq"),
)


def _global(fractions: list[CpuFractions]) -> Iterator[MetricRecord]:
    yield ratio(metric_name("os.cpu"), utilization(fractions))


def _aggregates(fractions: list[CpuFractions]) -> Iterator[MetricRecord]:
    for suffix, attr in BREAKDOWN:
        value = mean(getattr(f, attr) for f in fractions) * 100
        yield ratio(metric_name(f"os.cpu.{suffix}"), value)


def _per_core(fractions: list[CpuFractions]) -> Iterator[MetricRecord]:
    for suffix, attr in BREAKDOWN:
        for idx, f in enumerate(fractions):
            # "chore" is the core index label on the wire
            yield ratio(metric_name(f"os.cpu.{suffix}", {"chore": idx}), getattr(f, attr) * 100)


TIERS: tuple[Tier[list[CpuFractions]], ...] = (
    Tier("global", 1, _global),
    Tier("breakdown", 2, _aggregates),
    Tier("per-core", 3, _per_core),
)


class CpuScraper(BaseScraper):
    """Reports CPU utilization from the delta of per-core time counters.

    The first call only retains the counters; metrics start on the second.
    """

    def __init__(self, level: int, provider: BaseProvider) -> None:
        super().__init__(level)
        self._provider = provider
        self._times: list[CpuTimes] | None = None

    @property
    def name(self) -> str:
        return "cpu"

    def scrape(self) -> list[MetricRecord] | None:
        times = self._provider.cpu_times()
        prev, self._times = self._times, times

        if prev is None:
            logger.debug("CPU baseline recorded for %d core(s)", len(times))
            return None

        fractions = cpu_fractions(prev, times)
        if fractions is None:
            logger.debug("CPU counters did not advance, skipping cycle")
            return None

        return emit_tiers(TIERS, self.level, fractions)
