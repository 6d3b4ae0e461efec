"""Metric records, name grammar and verbosity tiers shared by all scrapers."""

from __future__ import annotations

import abc
import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class MetricRecord:
    """A single timestamp-free metric: structured name and decimal value."""

    name: str
    value: str


Snapshot = tuple[MetricRecord, ...]


def metric_name(cls: str, *groups: dict[str, Any]) -> str:
    """Build a metric name such as ``os.net.bytes{iface=eth0,direction=in}``.

    Each label dict renders as one brace group, so
    ``metric_name("os.disk.fs", {"disk": d}, {"mount": m})`` yields the
    two-group disk form. With no groups the name ends in ``{}``.
    """
    if not groups:
        return f"{cls}{{}}"
    rendered = "".join(
        "{" + ",".join(f"{k}={v}" for k, v in group.items()) + "}"
        for group in groups
    )
    return f"{cls}{rendered}"


def format_ratio(value: float) -> str:
    """Fixed 6-digit decimal used for percentages, fractions and load."""
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite value {value!r}")
    return f"{value:.6f}"


def format_counter(value: int) -> str:
    """Unsigned base-10 text used for raw counters and byte rates."""
    value = int(value)
    if value < 0:
        raise ValueError(f"counter value must be unsigned, got {value}")
    return str(value)


def ratio(name: str, value: float) -> MetricRecord:
    return MetricRecord(name=name, value=format_ratio(value))


def counter(name: str, value: int) -> MetricRecord:
    return MetricRecord(name=name, value=format_counter(value))


@dataclass(frozen=True)
class Tier(Generic[T]):
    """A named verbosity tier contributing a fixed set of metrics.

    *build* receives the scraper's per-cycle view and yields the records
    this tier adds on top of the tiers below it.
    """

    name: str
    level: int
    build: Callable[[T], Iterable[MetricRecord]]


def emit_tiers(tiers: Iterable[Tier[T]], level: int, view: T) -> list[MetricRecord]:
    """Concatenate the records of every tier enabled at *level*, in order."""
    records: list[MetricRecord] = []
    for tier in tiers:
        if tier.level <= level:
            records.extend(tier.build(view))
    return records


class BaseScraper(abc.ABC):
    """Abstract base class for domain scrapers.

    A scraper turns one round of provider calls into an ordered metric
    sequence. Returning ``None`` means the cycle produced nothing to
    publish (first-cycle seeding or a degenerate delta) and the previous
    snapshot stays visible.
    """

    def __init__(self, level: int) -> None:
        self.level = level

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Collector name used in configuration and logs."""

    @abc.abstractmethod
    def scrape(self) -> list[MetricRecord] | None:
        """Query the provider once and build this cycle's records."""
