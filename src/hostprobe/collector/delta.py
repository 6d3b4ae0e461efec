"""Delta engine: turns two consecutive raw samples into fractions and rates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .provider import CpuTimes


@dataclass(frozen=True)
class CpuFractions:
    """Share of one core's elapsed time spent in each state, in [0, 1]."""

    idle: float
    user: float
    system: float
    iowait: float
    nice: float
    irq: float


def cpu_fractions(
    prev: Sequence[CpuTimes], cur: Sequence[CpuTimes]
) -> list[CpuFractions] | None:
    """Per-core time fractions between *prev* and *cur*.

    Returns ``None`` when the samples are not comparable: different core
    counts, or a core whose total time did not advance.
    """
    if len(prev) != len(cur) or not cur:
        return None

    fractions: list[CpuFractions] = []
    for before, now in zip(prev, cur):
        dt = now.total - before.total
        if dt <= 0:
            return None
        fractions.append(CpuFractions(
            idle=(now.idle - before.idle) / dt,
            user=(now.user - before.user) / dt,
            system=(now.system - before.system) / dt,
            iowait=(now.iowait - before.iowait) / dt,
            nice=(now.nice - before.nice) / dt,
            irq=(now.irq - before.irq) / dt,
        ))
    return fractions


def mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values)


def utilization(fractions: Sequence[CpuFractions]) -> float:
    """Global busy percentage, ``(1 - mean idle) * 100`` clamped to [0, 100]."""
    busy = (1.0 - mean(f.idle for f in fractions)) * 100
    return min(100.0, max(0.0, busy))


def counter_delta(prev: int, cur: int) -> int | None:
    """Increase of a monotonic counter, or ``None`` if it went backwards."""
    if cur < prev:
        return None
    return cur - prev


def rate_per_second(delta: int, period_ms: int) -> int:
    """Integer per-second rate of *delta* accumulated over *period_ms*."""
    return delta * 1000 // period_ms
