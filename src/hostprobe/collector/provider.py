"""Raw OS counter provider.

:class:`BaseProvider` is the contract the scrapers depend on and
:class:`PsutilProvider` is the production binding. Every call may fail;
psutil errors surface as :class:`ProviderError`, plain ``OSError`` is
passed through.
"""

from __future__ import annotations

import abc
import logging
import os
from dataclasses import dataclass
from pathlib import Path

import psutil

logger = logging.getLogger(__name__)

DISKSTATS_PATH = Path("/proc/diskstats")


class ProviderError(Exception):
    """Raised when the OS statistics provider cannot produce a reading."""


@dataclass(frozen=True)
class CpuTimes:
    """Cumulative CPU times for one core, in seconds."""

    idle: float
    user: float
    system: float
    iowait: float
    nice: float
    irq: float
    total: float


@dataclass(frozen=True)
class MemoryUsage:
    total: int
    used: int
    used_percent: float


@dataclass(frozen=True)
class LoadAverage:
    load1: float
    load5: float
    load15: float


@dataclass(frozen=True)
class DiskPartition:
    device: str
    mountpoint: str


@dataclass(frozen=True)
class DiskUsage:
    path: str
    total: int
    used: int
    used_percent: float
    inodes_total: int
    inodes_used: int


@dataclass(frozen=True)
class DiskIOCounters:
    read_bytes: int
    write_bytes: int
    read_count: int
    write_count: int
    read_time: int
    write_time: int
    in_progress: int
    io_time: int
    weighted_io_time: int


@dataclass(frozen=True)
class NetIOCounters:
    bytes_recv: int
    bytes_sent: int
    packets_recv: int
    packets_sent: int
    errin: int
    errout: int
    dropin: int
    dropout: int


class BaseProvider(abc.ABC):
    """Point-in-time OS counters consumed by the domain scrapers."""

    @abc.abstractmethod
    def cpu_times(self) -> list[CpuTimes]:
        """Per-core cumulative CPU times, ordered by core index."""

    @abc.abstractmethod
    def virtual_memory(self) -> MemoryUsage:
        """Virtual memory usage."""

    @abc.abstractmethod
    def swap_memory(self) -> MemoryUsage:
        """Swap usage."""

    @abc.abstractmethod
    def load_average(self) -> LoadAverage:
        """1, 5 and 15 minute load averages."""

    @abc.abstractmethod
    def disk_partitions(self) -> list[DiskPartition]:
        """Mounted physical partitions."""

    @abc.abstractmethod
    def disk_usage(self, mountpoint: str) -> DiskUsage:
        """Usage of the filesystem mounted at *mountpoint*."""

    @abc.abstractmethod
    def disk_io_counters(self) -> dict[str, DiskIOCounters]:
        """Cumulative IO counters keyed by device name."""

    @abc.abstractmethod
    def net_io_counters(self) -> dict[str, NetIOCounters]:
        """Cumulative network counters keyed by interface name."""


def _cpu_total(times: object) -> float:
    # guest and guest_nice are already accounted inside user and nice
    return sum(
        getattr(times, field, 0.0)
        for field in ("user", "nice", "system", "idle", "iowait", "irq", "softirq", "steal")
    )


def _read_diskstats(path: Path = DISKSTATS_PATH) -> dict[str, tuple[int, int]]:
    """Return ``{device: (in_progress, weighted_io_ms)}`` from /proc/diskstats.

    psutil does not expose these two columns. Missing or unreadable files
    yield an empty mapping.
    """
    extras: dict[str, tuple[int, int]] = {}
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.debug("Cannot read %s: %s", path, exc)
        return extras
    for line in content.splitlines():
        fields = line.split()
        if len(fields) < 14:
            continue
        try:
            extras[fields[2]] = (int(fields[11]), int(fields[13]))
        except ValueError:
            logger.debug("Skipping malformed %s line: %r", path, line)
    return extras


class PsutilProvider(BaseProvider):
    """Provider backed by psutil."""

    def cpu_times(self) -> list[CpuTimes]:
        try:
            per_cpu = psutil.cpu_times(percpu=True)
        except psutil.Error as exc:
            raise ProviderError(f"cpu times unavailable: {exc}") from exc
        return [
            CpuTimes(
                idle=t.idle,
                user=t.user,
                system=t.system,
                iowait=getattr(t, "iowait", 0.0),
                nice=getattr(t, "nice", 0.0),
                irq=getattr(t, "irq", 0.0),
                total=_cpu_total(t),
            )
            for t in per_cpu
        ]

    def virtual_memory(self) -> MemoryUsage:
        try:
            mem = psutil.virtual_memory()
        except psutil.Error as exc:
            raise ProviderError(f"virtual memory unavailable: {exc}") from exc
        return MemoryUsage(total=mem.total, used=mem.used, used_percent=mem.percent)

    def swap_memory(self) -> MemoryUsage:
        try:
            swap = psutil.swap_memory()
        except psutil.Error as exc:
            raise ProviderError(f"swap memory unavailable: {exc}") from exc
        return MemoryUsage(total=swap.total, used=swap.used, used_percent=swap.percent)

    def load_average(self) -> LoadAverage:
        try:
            load1, load5, load15 = psutil.getloadavg()
        except psutil.Error as exc:
            raise ProviderError(f"load average unavailable: {exc}") from exc
        return LoadAverage(load1=load1, load5=load5, load15=load15)

    def disk_partitions(self) -> list[DiskPartition]:
        try:
            parts = psutil.disk_partitions(all=False)
        except psutil.Error as exc:
            raise ProviderError(f"disk partitions unavailable: {exc}") from exc
        return [DiskPartition(device=p.device, mountpoint=p.mountpoint) for p in parts]

    def disk_usage(self, mountpoint: str) -> DiskUsage:
        try:
            usage = psutil.disk_usage(mountpoint)
        except psutil.Error as exc:
            raise ProviderError(f"disk usage unavailable for {mountpoint}: {exc}") from exc

        inodes_total = inodes_used = 0
        if hasattr(os, "statvfs"):
            st = os.statvfs(mountpoint)
            inodes_total = st.f_files
            inodes_used = st.f_files - st.f_ffree

        return DiskUsage(
            path=mountpoint,
            total=usage.total,
            used=usage.used,
            used_percent=usage.percent,
            inodes_total=inodes_total,
            inodes_used=inodes_used,
        )

    def disk_io_counters(self) -> dict[str, DiskIOCounters]:
        try:
            counters = psutil.disk_io_counters(perdisk=True)
        except psutil.Error as exc:
            raise ProviderError(f"disk io counters unavailable: {exc}") from exc
        if not counters:
            return {}

        extras = _read_diskstats()
        result: dict[str, DiskIOCounters] = {}
        for name, c in counters.items():
            in_progress, weighted = extras.get(name, (0, 0))
            result[name] = DiskIOCounters(
                read_bytes=c.read_bytes,
                write_bytes=c.write_bytes,
                read_count=c.read_count,
                write_count=c.write_count,
                read_time=c.read_time,
                write_time=c.write_time,
                in_progress=in_progress,
                io_time=getattr(c, "busy_time", 0),
                weighted_io_time=weighted,
            )
        return result

    def net_io_counters(self) -> dict[str, NetIOCounters]:
        try:
            counters = psutil.net_io_counters(pernic=True)
        except psutil.Error as exc:
            raise ProviderError(f"network io counters unavailable: {exc}") from exc
        return {
            name: NetIOCounters(
                bytes_recv=c.bytes_recv,
                bytes_sent=c.bytes_sent,
                packets_recv=c.packets_recv,
                packets_sent=c.packets_sent,
                errin=c.errin,
                errout=c.errout,
                dropin=c.dropin,
                dropout=c.dropout,
            )
            for name, c in counters.items()
        }
