"""Metrics collection engine for pynet."""

import logging
from collections.abc import Callable
from typing import TypeVar

from pynet.models import CPUInfo, SystemMetrics
from pynet.providers import SystemInfoProvider, get_provider


logger = logging.getLogger(__name__)

T = TypeVar("T")


class MetricsCollector:
    """
    Collects a SystemMetrics snapshot from a system information provider.

    Every provider query fails soft: errors are swallowed and the affected
    fields keep their zero value. Only a failed CPU utilization sample is
    reported, as a warning on the error stream.
    """

    def __init__(
        self,
        provider: SystemInfoProvider | None = None,
        disk_path: str | None = None,
        cpu_interval: float = 0.0,
    ) -> None:
        """
        Initialize the MetricsCollector.

        Args:
            provider: Provider to query. Defaults to the one for this platform.
            disk_path: Filesystem to report. Defaults to the provider's root.
            cpu_interval: CPU sampling window in seconds. 0.0 compares against
                the previous call instead of blocking.
        """
        self._provider = provider if provider is not None else get_provider()
        self._disk_path = disk_path
        self._cpu_interval = max(0.0, cpu_interval)

    @property
    def provider(self) -> SystemInfoProvider:
        """Get the provider in use."""
        return self._provider

    @property
    def disk_path(self) -> str:
        """Get the filesystem path whose usage is reported."""
        return self._disk_path or self._provider.root_path

    def collect(self) -> SystemMetrics:
        """Collect a fresh snapshot of the current system state."""
        fields: dict = {}

        # Disk usage
        disk = self._query("disk usage", self._provider.disk_usage, self.disk_path)
        if disk is not None:
            fields.update(disk_size=disk.total, disk_free=disk.free)

        # System memory
        mem = self._query("virtual memory", self._provider.virtual_memory)
        if mem is not None:
            fields.update(
                total_memory=mem.total,
                free_memory=mem.free,
                cache_memory=mem.cached,
            )

        # CPU
        num_cpu = self._query("cpu count", self._provider.cpu_count)
        if num_cpu is not None:
            fields["num_cpu"] = num_cpu

        descriptors = self._query("cpu info", self._provider.cpu_info)
        if descriptors is not None:
            fields["cpu_info"] = tuple(
                CPUInfo(
                    index=index,
                    vendor_id=c.vendor_id,
                    family=c.family,
                    cores=c.cores,
                    model=c.model_name,
                    speed=f"{c.mhz:.2f} MHz",
                )
                for index, c in enumerate(descriptors)
            )

        fields["cpu_percent"] = self._collect_cpu_percent()

        # Host, platform
        host = self._query("host info", self._provider.host_info)
        if host is not None:
            fields.update(
                hostname=host.hostname,
                running_processes=host.procs,
                platform=host.platform,
                platform_version=host.platform_version,
            )

        # Network identifiers
        interfaces = self._query("network interfaces", self._provider.net_interfaces)
        mac_addr = ""
        ip_addrs: dict[str, tuple[str, ...]] = {}
        for iface in interfaces or []:
            if iface.hardware_addr:
                mac_addr = iface.hardware_addr
            for addr in iface.addrs:
                ip_addrs[iface.name] = ip_addrs.get(iface.name, ()) + (addr,)
        fields.update(mac_addr=mac_addr, ip_addrs=ip_addrs)

        return SystemMetrics(**fields)

    def _collect_cpu_percent(self) -> float:
        """Sample aggregate CPU utilization, reporting failures."""
        try:
            percentages = self._provider.cpu_percent(self._cpu_interval, False)
            return float(percentages[0])
        except Exception as exc:
            logger.warning("error getting CPU Percent Usage: %s", exc)
            return 0.0

    def _query(self, what: str, func: Callable[..., T], *args) -> T | None:
        """Run one provider query, returning None if it fails."""
        try:
            return func(*args)
        except Exception as exc:
            # Silently leave the affected fields at their zero value
            logger.debug("Ignoring failed %s query: %s", what, exc)
            return None


def read_metrics() -> SystemMetrics:
    """Read metrics from the system using the platform's provider."""
    return MetricsCollector().collect()
