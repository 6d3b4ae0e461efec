"""Network I/O scraper."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from .base import BaseScraper, MetricRecord, Tier, counter, emit_tiers, metric_name
from .delta import counter_delta, rate_per_second
from .provider import BaseProvider, NetIOCounters

logger = logging.getLogger(__name__)

LOOPBACK = "lo"


@dataclass
class NetView:
    counters: dict[str, NetIOCounters]
    rate_in: int
    rate_out: int


def _totals(view: NetView) -> Iterator[MetricRecord]:
    yield counter(metric_name("os.net.bytes", {"direction": "in"}), view.rate_in)
    yield counter(metric_name("os.net.bytes", {"direction": "out"}), view.rate_out)


def _per_iface(cls: str, iface: str, value_in: int, value_out: int) -> Iterator[MetricRecord]:
    yield counter(metric_name(cls, {"iface": iface, "direction": "in"}), value_in)
    yield counter(metric_name(cls, {"iface": iface, "direction": "out"}), value_out)


def _bytes(view: NetView) -> Iterator[MetricRecord]:
    for iface, c in view.counters.items():
        yield from _per_iface("os.net.bytes", iface, c.bytes_recv, c.bytes_sent)


def _details(view: NetView) -> Iterator[MetricRecord]:
    for iface, c in view.counters.items():
        yield from _per_iface("os.net.packets", iface, c.packets_recv, c.packets_sent)
        yield from _per_iface("os.net.errs", iface, c.errin, c.errout)
        yield from _per_iface("os.net.dropped", iface, c.dropin, c.dropout)


TIERS: tuple[Tier[NetView], ...] = (
    Tier("throughput", 1, _totals),
    Tier("iface-bytes", 2, _bytes),
    Tier("iface-details", 3, _details),
)


class NetworkScraper(BaseScraper):
    """Collects network throughput and per-interface counters.

    Throughput is the summed byte delta of all allowed interfaces divided
    by the sampling period. The loopback interface is never reported,
    whatever *interfaces* contains. The first call only retains counters.
    """

    def __init__(
        self,
        level: int,
        provider: BaseProvider,
        period_ms: int,
        interfaces: Iterable[str] = (),
    ) -> None:
        super().__init__(level)
        self._provider = provider
        self._period_ms = period_ms
        self._interfaces = frozenset(interfaces)
        self._prev_counters: dict[str, NetIOCounters] | None = None

    @property
    def name(self) -> str:
        return "network"

    def _allowed(self, iface: str) -> bool:
        if iface == LOOPBACK:
            return False
        return not self._interfaces or iface in self._interfaces

    def _rates(
        self, prev: dict[str, NetIOCounters], cur: dict[str, NetIOCounters]
    ) -> tuple[int, int]:
        total_in = total_out = 0
        for iface, c in cur.items():
            before = prev.get(iface)
            if before is None:
                continue
            delta_in = counter_delta(before.bytes_recv, c.bytes_recv)
            delta_out = counter_delta(before.bytes_sent, c.bytes_sent)
            if delta_in is None or delta_out is None:
                logger.debug("Counters of %s went backwards, leaving it out of this cycle", iface)
                continue
            total_in += delta_in
            total_out += delta_out
        return (
            rate_per_second(total_in, self._period_ms),
            rate_per_second(total_out, self._period_ms),
        )

    def scrape(self) -> list[MetricRecord] | None:
        counters = {
            iface: c
            for iface, c in self._provider.net_io_counters().items()
            if self._allowed(iface)
        }
        prev, self._prev_counters = self._prev_counters, counters

        if prev is None:
            logger.debug("Network baseline recorded for %d interface(s)", len(counters))
            return None

        rate_in, rate_out = self._rates(prev, counters)
        view = NetView(counters=counters, rate_in=rate_in, rate_out=rate_out)
        return emit_tiers(TIERS, self.level, view)
