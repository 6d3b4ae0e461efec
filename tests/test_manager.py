"""Tests for the collector manager and the command line."""

import os
import tempfile
import types

import pytest
import yaml

from fakes import FakeProvider, cpu, net
from hostprobe import __version__
from hostprobe.cli import collect_seeded, main
from hostprobe.collector.manager import CollectorManager
from hostprobe.config import (
    CollectorConfig,
    DiskCollectorConfig,
    NetCollectorConfig,
    ProbeConfig,
)


def _config(**levels: int) -> ProbeConfig:
    return ProbeConfig(
        cpu=CollectorConfig(level=levels.get("cpu", 1)),
        memory=CollectorConfig(level=levels.get("memory", 1)),
        load=CollectorConfig(level=levels.get("load", 1)),
        disk=DiskCollectorConfig(level=levels.get("disk", 1)),
        net=NetCollectorConfig(level=levels.get("net", 1), period_ms=2000),
    )


def test_manager_builds_enabled_collectors():
    manager = CollectorManager(_config(memory=0, disk=0), provider=FakeProvider())
    assert [c.name for c in manager.collectors] == ["cpu", "load", "network"]


def test_manager_metrics_concatenates_snapshots():
    provider = FakeProvider()
    provider.cpu = [cpu(idle=0, total=0)]
    provider.net = {"eth0": net(0, 0)}
    manager = CollectorManager(_config(disk=0), provider=provider)

    assert manager.metrics() == []
    manager.collect_once()
    # cpu and network only seeded
    assert [r.name for r in manager.metrics()] == ["os.mem{}", "os.swap{}", "os.load1{}"]

    provider.cpu = [cpu(idle=25, total=100)]
    provider.net = {"eth0": net(4000, 2000)}
    manager.collect_once()
    assert [(r.name, r.value) for r in manager.metrics()] == [
        ("os.cpu{}", "75.000000"),
        ("os.mem{}", "25.000000"),
        ("os.swap{}", "10.000000"),
        ("os.load1{}", "0.500000"),
        ("os.net.bytes{direction=in}", "2000"),
        ("os.net.bytes{direction=out}", "1000"),
    ]


def test_collector_manager_start_stop():
    config = ProbeConfig(
        cpu=CollectorConfig(period_ms=20),
        memory=CollectorConfig(level=0),
        load=CollectorConfig(level=0),
        disk=DiskCollectorConfig(level=0),
        net=NetCollectorConfig(level=0),
    )
    manager = CollectorManager(config, provider=FakeProvider())
    manager.start()
    assert all(c.running for c in manager.collectors)
    manager.stop()
    assert not any(c.running for c in manager.collectors)


def test_cli_version(capsys):
    main(["version"])
    assert __version__ in capsys.readouterr().out


def test_cli_without_command_exits():
    with pytest.raises(SystemExit):
        main([])


def test_cli_snapshot(capsys):
    data = {
        "period_ms": 50,
        "cpu": {"level": 1},
        "memory": {"level": 2},
        "load": {"level": 0},
        "disk": {"level": 0},
        "net": {"level": 0},
    }
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump(data, fh)
        path = fh.name
    try:
        main(["--config", path, "snapshot"])
    finally:
        os.unlink(path)

    lines = capsys.readouterr().out.splitlines()
    names = {line.split(" ", 1)[0] for line in lines}
    assert {"os.mem{}", "os.swap{}", "os.mem.used{}", "os.mem.total{}"} <= names
    assert "os.load1{}" not in names


def test_cli_invalid_config_exits():
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump({"cpu": {"period_ms": -1}}, fh)
        path = fh.name
    try:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", path, "snapshot"])
    finally:
        os.unlink(path)
    assert exc_info.value.code == 2


class _FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class _ClockedProvider(FakeProvider):
    """Interface counters grow by 10 bytes per elapsed millisecond."""

    def __init__(self, clock: _FakeClock) -> None:
        super().__init__()
        self._clock = clock

    def net_io_counters(self):
        self._call()
        received = round(self._clock.now * 1000) * 10
        return {"eth0": net(received, received // 2)}


def test_collect_seeded_waits_per_collector_period(monkeypatch):
    clock = _FakeClock()
    monkeypatch.setattr("hostprobe.cli.time", types.SimpleNamespace(
        monotonic=clock.monotonic, sleep=clock.sleep
    ))
    config = ProbeConfig(
        cpu=CollectorConfig(period_ms=300),
        memory=CollectorConfig(level=0),
        load=CollectorConfig(level=0),
        disk=DiskCollectorConfig(level=0),
        net=NetCollectorConfig(period_ms=50),
    )
    manager = CollectorManager(config, provider=_ClockedProvider(clock))

    collect_seeded(manager.collectors)

    assert clock.sleeps == pytest.approx([0.05, 0.25])
    values = {r.name: r.value for r in manager.metrics()}
    assert values["os.net.bytes{direction=in}"] == "10000"
    assert values["os.net.bytes{direction=out}"] == "5000"


def test_cli_snapshot_rate_uses_network_period(monkeypatch, capsys):
    clock = _FakeClock()
    monkeypatch.setattr("hostprobe.cli.time", types.SimpleNamespace(
        monotonic=clock.monotonic, sleep=clock.sleep
    ))
    monkeypatch.setattr(
        "hostprobe.collector.manager.PsutilProvider", lambda: _ClockedProvider(clock)
    )
    data = {
        "cpu": {"level": 1, "period_ms": 300},
        "memory": {"level": 0},
        "load": {"level": 0},
        "disk": {"level": 0},
        "net": {"level": 1, "period_ms": 50},
    }
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump(data, fh)
        path = fh.name
    try:
        main(["--config", path, "snapshot"])
    finally:
        os.unlink(path)

    lines = capsys.readouterr().out.splitlines()
    assert "os.net.bytes{direction=in} 10000" in lines


@pytest.mark.parametrize("value", ["0", "-1", "nan", "soon"])
def test_cli_print_every_must_be_positive(value):
    with pytest.raises(SystemExit) as exc_info:
        main(["collect", "--print-every", value])
    assert exc_info.value.code == 2
