"""
System information providers for pynet.

A provider answers the raw queries the collector needs (disk, memory, CPU,
host and network). Cross-platform queries go through psutil; the parts psutil
does not cover (CPU descriptors, platform identity) have one variant per OS.
"""

import ipaddress
import logging
import os
import platform
import socket
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path

import psutil

from pynet.models import (
    CPUDescriptor,
    DiskUsage,
    HostInfo,
    MemoryStats,
    NetInterface,
)


logger = logging.getLogger(__name__)

_ZERO_MAC = "00:00:00:00:00:00"


class ProviderError(Exception):
    """A system information query failed."""


class SystemInfoProvider(ABC):
    """Capability interface for host system queries."""

    #: Filesystem whose usage is reported.
    root_path: str = "/"

    @abstractmethod
    def disk_usage(self, path: str) -> DiskUsage:
        """Return usage of the filesystem holding ``path``."""

    @abstractmethod
    def virtual_memory(self) -> MemoryStats:
        """Return virtual memory statistics."""

    @abstractmethod
    def cpu_count(self) -> int:
        """Return the number of logical CPUs."""

    @abstractmethod
    def cpu_info(self) -> list[CPUDescriptor]:
        """Return one descriptor per CPU, in system order."""

    @abstractmethod
    def cpu_percent(self, interval: float = 0.0, percpu: bool = False) -> list[float]:
        """Return CPU utilization samples (a single aggregate unless ``percpu``)."""

    @abstractmethod
    def host_info(self) -> HostInfo:
        """Return hostname, process count and platform identity."""

    @abstractmethod
    def net_interfaces(self) -> list[NetInterface]:
        """Return network interfaces in enumeration order."""


class PsutilProvider(SystemInfoProvider):
    """
    Provider backed by psutil.

    OS variants override ``cpu_info`` and ``_platform`` where psutil has no
    portable answer.
    """

    def disk_usage(self, path: str) -> DiskUsage:
        try:
            usage = psutil.disk_usage(path)
        except (psutil.Error, OSError) as exc:
            raise ProviderError(f"disk usage for {path}: {exc}") from exc
        return DiskUsage(total=usage.total, free=usage.free)

    def virtual_memory(self) -> MemoryStats:
        try:
            mem = psutil.virtual_memory()
        except (psutil.Error, OSError) as exc:
            raise ProviderError(f"virtual memory: {exc}") from exc
        # 'cached' only exists on Linux and BSD
        return MemoryStats(
            total=mem.total,
            free=mem.free,
            cached=getattr(mem, "cached", 0),
        )

    def cpu_count(self) -> int:
        count = psutil.cpu_count(logical=True)
        if count is None:
            raise ProviderError("logical CPU count is undetermined")
        return count

    def cpu_info(self) -> list[CPUDescriptor]:
        return [
            CPUDescriptor(
                vendor_id="",
                family="",
                cores=psutil.cpu_count(logical=False) or 0,
                model_name=platform.processor(),
                mhz=self._current_mhz(),
            )
        ]

    def cpu_percent(self, interval: float = 0.0, percpu: bool = False) -> list[float]:
        try:
            percent = psutil.cpu_percent(interval=interval, percpu=percpu)
        except (psutil.Error, OSError) as exc:
            raise ProviderError(f"cpu percent: {exc}") from exc
        if percpu:
            return list(percent)
        return [percent]

    def host_info(self) -> HostInfo:
        try:
            procs = len(psutil.pids())
        except (psutil.Error, OSError) as exc:
            raise ProviderError(f"process list: {exc}") from exc
        name, version = self._platform()
        return HostInfo(
            hostname=socket.gethostname(),
            procs=procs,
            platform=name,
            platform_version=version,
        )

    def net_interfaces(self) -> list[NetInterface]:
        try:
            if_addrs = psutil.net_if_addrs()
        except (psutil.Error, OSError) as exc:
            raise ProviderError(f"network interfaces: {exc}") from exc

        interfaces: list[NetInterface] = []
        for name, addrs in if_addrs.items():
            hardware_addr = ""
            ips: list[str] = []
            for addr in addrs:
                if addr.family == psutil.AF_LINK:
                    hardware_addr = normalize_mac(addr.address)
                elif addr.family in (socket.AF_INET, socket.AF_INET6):
                    ips.append(format_address(addr.address, addr.netmask))
            interfaces.append(
                NetInterface(name=name, hardware_addr=hardware_addr, addrs=tuple(ips))
            )
        return interfaces

    def _platform(self) -> tuple[str, str]:
        """Return (platform name, platform version)."""
        return platform.system().lower(), platform.version()

    @staticmethod
    def _current_mhz() -> float:
        try:
            freq = psutil.cpu_freq()
        except (psutil.Error, OSError, NotImplementedError):
            return 0.0
        return freq.current if freq else 0.0


class LinuxProvider(PsutilProvider):
    """Linux variant: CPU descriptors from /proc/cpuinfo, identity from os-release."""

    cpuinfo_path = Path("/proc/cpuinfo")
    os_release_path = Path("/etc/os-release")

    def cpu_info(self) -> list[CPUDescriptor]:
        try:
            text = self.cpuinfo_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as exc:
            raise ProviderError(f"reading {self.cpuinfo_path}: {exc}") from exc
        return parse_cpuinfo(text, default_mhz=self._current_mhz())

    def _platform(self) -> tuple[str, str]:
        try:
            text = self.os_release_path.read_text(encoding="utf-8", errors="ignore")
        except OSError:
            return "linux", platform.release()
        data = parse_os_release(text)
        return data.get("ID", "linux"), data.get("VERSION_ID", "")


class DarwinProvider(PsutilProvider):
    """macOS variant: CPU descriptor from sysctl."""

    def cpu_info(self) -> list[CPUDescriptor]:
        try:
            cores = self._sysctl("machdep.cpu.core_count")
            hz = self._sysctl("hw.cpufrequency")
            return [
                CPUDescriptor(
                    vendor_id=self._sysctl("machdep.cpu.vendor"),
                    family=self._sysctl("machdep.cpu.family"),
                    cores=int(cores) if cores else 0,
                    model_name=self._sysctl("machdep.cpu.brand_string"),
                    mhz=int(hz) / 1_000_000 if hz else self._current_mhz(),
                )
            ]
        except ValueError as exc:
            raise ProviderError(f"parsing sysctl output: {exc}") from exc

    def _platform(self) -> tuple[str, str]:
        return "darwin", platform.mac_ver()[0]

    @staticmethod
    def _sysctl(key: str) -> str:
        """Read one sysctl value; Apple Silicon lacks some keys, which read as ''."""
        try:
            result = subprocess.run(
                ["sysctl", "-n", key],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise ProviderError(f"sysctl {key}: {exc}") from exc
        return result.stdout.strip() if result.returncode == 0 else ""


class GenericProvider(PsutilProvider):
    """Fallback for Windows and other platforms."""

    @property
    def root_path(self) -> str:
        if sys.platform == "win32":
            return os.environ.get("SystemDrive", "C:") + "\\"
        return "/"


def get_provider() -> SystemInfoProvider:
    """Return the provider variant for the running platform."""
    if sys.platform.startswith("linux"):
        return LinuxProvider()
    if sys.platform == "darwin":
        return DarwinProvider()
    return GenericProvider()


def parse_cpuinfo(text: str, default_mhz: float = 0.0) -> list[CPUDescriptor]:
    """
    Parse /proc/cpuinfo into one descriptor per processor entry.

    Architectures without vendor/family/MHz fields (e.g. ARM) leave them
    empty and fall back to ``default_mhz``.
    """
    descriptors: list[CPUDescriptor] = []
    for block in text.strip().split("\n\n"):
        fields: dict[str, str] = {}
        for line in block.splitlines():
            key, sep, value = line.partition(":")
            if sep:
                fields[key.strip()] = value.strip()
        if "processor" not in fields:
            continue

        try:
            cores = int(fields.get("cpu cores", "0"))
        except ValueError:
            cores = 0
        try:
            mhz = float(fields["cpu MHz"])
        except (KeyError, ValueError):
            mhz = default_mhz

        descriptors.append(
            CPUDescriptor(
                vendor_id=fields.get("vendor_id", ""),
                family=fields.get("cpu family", ""),
                cores=cores,
                model_name=fields.get("model name", ""),
                mhz=mhz,
            )
        )
    return descriptors


def parse_os_release(text: str) -> dict[str, str]:
    """Parse KEY=value lines of an os-release file."""
    data: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            k, v = line.split("=", 1)
            data[k] = v.strip().strip('"')
    return data


def normalize_mac(address: str) -> str:
    """Lower-case, colon-separated MAC; an all-zero address is treated as none."""
    mac = address.replace("-", ":").lower()
    if mac == _ZERO_MAC:
        return ""
    return mac


def format_address(address: str, netmask: str | None) -> str:
    """Render an IP address in CIDR form, e.g. ``192.168.1.5/24``."""
    address = address.split("%", 1)[0]  # drop IPv6 zone index
    if not netmask:
        return address
    try:
        prefix = bin(int(ipaddress.ip_address(netmask))).count("1")
    except ValueError:
        logger.debug("Unparseable netmask %r for %s", netmask, address)
        return address
    return f"{address}/{prefix}"
