"""Shared fixtures for pynet tests."""

import pytest

from pynet.models import CPUDescriptor, DiskUsage, HostInfo, MemoryStats, NetInterface
from pynet.providers import ProviderError, SystemInfoProvider


class FakeProvider(SystemInfoProvider):
    """Provider returning canned values; any query named in ``failing`` raises."""

    def __init__(self, failing: tuple[str, ...] = (), **overrides) -> None:
        self.failing = set(failing)
        self.disk_paths: list[str] = []
        self.cpu_percent_calls: list[tuple[float, bool]] = []
        self.disk = overrides.get("disk", DiskUsage(total=100 * 1024**3, free=40 * 1024**3))
        self.memory = overrides.get(
            "memory", MemoryStats(total=8589934592, free=4294967296, cached=1073741824)
        )
        self.cpus = overrides.get(
            "cpus",
            [
                CPUDescriptor("GenuineIntel", "6", 4, "Intel(R) Core(TM) i5", 2400.0),
                CPUDescriptor("GenuineIntel", "6", 4, "Intel(R) Core(TM) i5", 2399.996),
            ],
        )
        self.percent = overrides.get("percent", 12.3456)
        self.host = overrides.get(
            "host", HostInfo(hostname="box", procs=321, platform="ubuntu", platform_version="22.04")
        )
        self.interfaces = overrides.get(
            "interfaces",
            [
                NetInterface("lo", "", ("127.0.0.1/8", "::1/128")),
                NetInterface("eth0", "aa:bb:cc:dd:ee:ff", ("10.0.0.5/24",)),
            ],
        )

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise ProviderError(f"{name} unavailable")

    def disk_usage(self, path):
        self._check("disk_usage")
        self.disk_paths.append(path)
        return self.disk

    def virtual_memory(self):
        self._check("virtual_memory")
        return self.memory

    def cpu_count(self):
        self._check("cpu_count")
        return 8

    def cpu_info(self):
        self._check("cpu_info")
        return list(self.cpus)

    def cpu_percent(self, interval=0.0, percpu=False):
        self._check("cpu_percent")
        self.cpu_percent_calls.append((interval, percpu))
        return [self.percent]

    def host_info(self):
        self._check("host_info")
        return self.host

    def net_interfaces(self):
        self._check("net_interfaces")
        return list(self.interfaces)


@pytest.fixture
def fake_provider() -> FakeProvider:
    """A provider with a typical set of canned values."""
    return FakeProvider()


@pytest.fixture
def make_provider():
    """Factory for providers with custom values or failing queries."""
    return FakeProvider
