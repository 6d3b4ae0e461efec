"""Disk usage and IO counter scraper."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterable, Iterator

from .base import BaseScraper, MetricRecord, Tier, counter, emit_tiers, metric_name, ratio
from .provider import BaseProvider, DiskIOCounters, DiskUsage, ProviderError

logger = logging.getLogger(__name__)

FS = "os.disk.fs"

# first level at which per-device IO counters are reported
IO_LEVEL = 3


@dataclass
class DiskView:
    usage: dict[str, DiskUsage] = field(default_factory=dict)
    io: dict[str, DiskIOCounters] = field(default_factory=dict)


def _fs_name(suffix: str, device: str, usage: DiskUsage) -> str:
    return metric_name(FS + suffix, {"disk": device}, {"mount": usage.path})


def _io_name(suffix: str, device: str) -> str:
    return metric_name(FS + suffix, {"name": device})


def _used_percent(view: DiskView) -> Iterator[MetricRecord]:
    for device, usage in view.usage.items():
        yield ratio(_fs_name("", device, usage), usage.used_percent)


def _capacity(view: DiskView) -> Iterator[MetricRecord]:
    for device, usage in view.usage.items():
        yield counter(_fs_name(".used", device, usage), usage.used)
        yield counter(_fs_name(".total", device, usage), usage.total)
        yield counter(_fs_name(".inodes.used", device, usage), usage.inodes_used)
        yield counter(_fs_name(".inodes.total", device, usage), usage.inodes_total)


def _io_bytes(view: DiskView) -> Iterator[MetricRecord]:
    for device, stats in view.io.items():
        yield counter(_io_name(".bytes.read", device), stats.read_bytes)
        yield counter(_io_name(".bytes.write", device), stats.write_bytes)


def _io_ops(view: DiskView) -> Iterator[MetricRecord]:
    for device, stats in view.io.items():
        yield counter(_io_name(".io.read", device), stats.read_count)
        yield counter(_io_name(".io.write", device), stats.write_count)


def _io_timing(view: DiskView) -> Iterator[MetricRecord]:
    for device, stats in view.io.items():
        yield counter(_io_name(".io.read.ms", device), stats.read_time)
        yield counter(_io_name(".io.write.ms", device), stats.write_time)
        yield counter(_io_name(".io", device), stats.in_progress)
        yield counter(_io_name(".io.ms", device), stats.io_time)
        yield counter(_io_name(".io.weighted.ms", device), stats.weighted_io_time)


TIERS: tuple[Tier[DiskView], ...] = (
    Tier("used-percent", 1, _used_percent),
    Tier("capacity", 2, _capacity),
    Tier("io-bytes", IO_LEVEL, _io_bytes),
    Tier("io-ops", 4, _io_ops),
    Tier("io-timing", 5, _io_timing),
)


class DiskScraper(BaseScraper):
    """Collects filesystem usage per device and block IO counters.

    *names* restricts the reported devices. Usage metrics match it against
    the last component of the device path (``sda1`` for ``/dev/sda1``),
    IO metrics against the kernel device name.
    """

    def __init__(
        self, level: int, provider: BaseProvider, names: Iterable[str] = ()
    ) -> None:
        super().__init__(level)
        self._provider = provider
        self._names = frozenset(names)

    @property
    def name(self) -> str:
        return "disk"

    def _allowed(self, name: str) -> bool:
        return not self._names or name in self._names

    def _usage(self) -> dict[str, DiskUsage]:
        usage: dict[str, DiskUsage] = {}
        for part in self._provider.disk_partitions():
            if part.device in usage:
                continue
            if not self._allowed(PurePosixPath(part.device).name):
                logger.debug("Disk %s is not in the allow-list, skip it", part.device)
                continue
            try:
                usage[part.device] = self._provider.disk_usage(part.mountpoint)
            except (OSError, ProviderError) as exc:
                logger.debug("Cannot read usage of %s: %s", part.mountpoint, exc)
        return usage

    def _io(self) -> dict[str, DiskIOCounters]:
        io: dict[str, DiskIOCounters] = {}
        for device, stats in self._provider.disk_io_counters().items():
            if not self._allowed(device):
                logger.debug("Disk name %s is not in the allow-list, skip it", device)
                continue
            io[device] = stats
        return io

    def scrape(self) -> list[MetricRecord]:
        view = DiskView(usage=self._usage())
        if self.level >= IO_LEVEL:
            view.io = self._io()
        return emit_tiers(TIERS, self.level, view)
