from types import SimpleNamespace

from config import AppConfig
from utils import ResourceMonitor
from utils import resource_monitor


def test_monitor_disabled_without_limits(tmp_path) -> None:
    assert ResourceMonitor.from_config(AppConfig(root_dir=tmp_path, raw={})) is None


def test_monitor_built_from_limits(tmp_path) -> None:
    config = AppConfig(root_dir=tmp_path, raw={"resource_limits": {"max_cpu_percent": 90, "max_ram_percent": 0}})

    monitor = ResourceMonitor.from_config(config)

    assert monitor is not None
    assert monitor.max_cpu_percent == 90.0
    assert monitor.enabled


def test_throttle_waits_until_usage_drops(monkeypatch) -> None:
    monitor = ResourceMonitor(max_cpu_percent=50, max_ram_percent=0, sleep_seconds=0.25)
    readings = iter([99.0, 99.0, 10.0])
    sleeps = []
    monkeypatch.setattr(resource_monitor.psutil, "cpu_percent", lambda interval=None: next(readings, 10.0))
    monkeypatch.setattr(resource_monitor.psutil, "virtual_memory", lambda: SimpleNamespace(percent=5.0))
    monkeypatch.setattr(resource_monitor.time, "sleep", sleeps.append)

    monitor.throttle()

    assert sleeps == [0.25, 0.25]


def test_throttle_gives_up_at_deadline(monkeypatch) -> None:
    monkeypatch.setattr(resource_monitor.psutil, "cpu_percent", lambda interval=None: 5.0)
    monkeypatch.setattr(resource_monitor.psutil, "virtual_memory", lambda: SimpleNamespace(percent=99.0))
    monkeypatch.setattr(resource_monitor.time, "sleep", lambda seconds: None)
    monitor = ResourceMonitor(max_cpu_percent=0, max_ram_percent=80, max_throttle_seconds=0.0)

    monitor.throttle()
