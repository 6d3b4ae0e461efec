"""In-memory provider used to drive the scrapers deterministically."""

from __future__ import annotations

from hostprobe.collector.provider import (
    BaseProvider,
    CpuTimes,
    DiskIOCounters,
    DiskPartition,
    DiskUsage,
    LoadAverage,
    MemoryUsage,
    NetIOCounters,
    ProviderError,
)


def cpu(idle: float, total: float, **fields: float) -> CpuTimes:
    values = {"user": 0.0, "system": 0.0, "iowait": 0.0, "nice": 0.0, "irq": 0.0}
    values.update(fields)
    return CpuTimes(idle=idle, total=total, **values)


def net(bytes_recv: int = 0, bytes_sent: int = 0, **fields: int) -> NetIOCounters:
    values = {
        "packets_recv": 0,
        "packets_sent": 0,
        "errin": 0,
        "errout": 0,
        "dropin": 0,
        "dropout": 0,
    }
    values.update(fields)
    return NetIOCounters(bytes_recv=bytes_recv, bytes_sent=bytes_sent, **values)


def disk_io(**fields: int) -> DiskIOCounters:
    values = dict.fromkeys(
        (
            "read_bytes",
            "write_bytes",
            "read_count",
            "write_count",
            "read_time",
            "write_time",
            "in_progress",
            "io_time",
            "weighted_io_time",
        ),
        0,
    )
    values.update(fields)
    return DiskIOCounters(**values)


def usage(path: str, used_percent: float = 50.0) -> DiskUsage:
    return DiskUsage(
        path=path,
        total=1000,
        used=int(used_percent * 10),
        used_percent=used_percent,
        inodes_total=100,
        inodes_used=10,
    )


class FakeProvider(BaseProvider):
    """Returns whatever the test assigned; ``fail`` makes every call raise."""

    def __init__(self) -> None:
        self.cpu: list[CpuTimes] = [cpu(idle=0, total=0)]
        self.virtual = MemoryUsage(total=8000, used=2000, used_percent=25.0)
        self.swap = MemoryUsage(total=1000, used=100, used_percent=10.0)
        self.load = LoadAverage(load1=0.5, load5=0.25, load15=0.125)
        self.partitions: list[DiskPartition] = []
        self.usage: dict[str, DiskUsage] = {}
        self.unreadable: set[str] = set()
        self.disk_io: dict[str, DiskIOCounters] = {}
        self.net: dict[str, NetIOCounters] = {}
        self.fail = False
        self.calls = 0

    def _call(self) -> None:
        self.calls += 1
        if self.fail:
            raise ProviderError("provider unavailable")

    def cpu_times(self) -> list[CpuTimes]:
        self._call()
        return list(self.cpu)

    def virtual_memory(self) -> MemoryUsage:
        self._call()
        return self.virtual

    def swap_memory(self) -> MemoryUsage:
        self._call()
        return self.swap

    def load_average(self) -> LoadAverage:
        self._call()
        return self.load

    def disk_partitions(self) -> list[DiskPartition]:
        self._call()
        return list(self.partitions)

    def disk_usage(self, mountpoint: str) -> DiskUsage:
        self._call()
        if mountpoint in self.unreadable:
            raise PermissionError(f"permission denied: {mountpoint}")
        return self.usage[mountpoint]

    def disk_io_counters(self) -> dict[str, DiskIOCounters]:
        self._call()
        return dict(self.disk_io)

    def net_io_counters(self) -> dict[str, NetIOCounters]:
        self._call()
        return dict(self.net)
