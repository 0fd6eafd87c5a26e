"""Data models for pynet."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(slots=True, frozen=True)
class DiskUsage:
    """Disk usage of one filesystem, in bytes."""

    total: int = 0
    free: int = 0


@dataclass(slots=True, frozen=True)
class MemoryStats:
    """Virtual memory statistics, in bytes."""

    total: int = 0
    free: int = 0
    cached: int = 0


@dataclass(slots=True, frozen=True)
class CPUDescriptor:
    """Raw description of a CPU as reported by the provider."""

    vendor_id: str = ""
    family: str = ""
    cores: int = 0
    model_name: str = ""
    mhz: float = 0.0


@dataclass(slots=True, frozen=True)
class HostInfo:
    """Host identity."""

    hostname: str = ""
    procs: int = 0
    platform: str = ""
    platform_version: str = ""


@dataclass(slots=True, frozen=True)
class NetInterface:
    """A network interface with its hardware address and assigned addresses."""

    name: str
    hardware_addr: str = ""
    addrs: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class CPUInfo:
    """One row of the CPU info table."""

    index: int
    vendor_id: str
    family: str
    cores: int
    model: str
    speed: str  # e.g. "2400.00 MHz"


@dataclass(slots=True, frozen=True)
class SystemMetrics:
    """
    Immutable point-in-time capture of host metrics.

    Fields whose provider query failed keep their zero value. Used disk and
    memory are derived from total and free. The interface address mapping is
    stored read-only and left out of the hash.
    """

    # Disk usage
    disk_size: int = 0
    disk_free: int = 0

    # System memory
    total_memory: int = 0
    free_memory: int = 0
    cache_memory: int = 0

    # CPU
    num_cpu: int = 0
    cpu_info: tuple[CPUInfo, ...] = ()
    cpu_percent: float = 0.0

    # Host, platform
    hostname: str = ""
    running_processes: int = 0
    platform: str = ""
    platform_version: str = ""

    # Network identifiers
    mac_addr: str = ""
    ip_addrs: Mapping[str, tuple[str, ...]] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ip_addrs", MappingProxyType(dict(self.ip_addrs)))

    @property
    def disk_used(self) -> int:
        """Bytes in use on the disk."""
        return self.disk_size - self.disk_free

    @property
    def used_memory(self) -> int:
        """Bytes of memory in use."""
        return self.total_memory - self.free_memory
