"""Console report rendering for pynet."""

import io
import sys
from typing import BinaryIO, TextIO

from rich import box
from rich.console import Console
from rich.table import Table

from pynet.metrics import read_metrics
from pynet.models import SystemMetrics

MB = 1024 * 1024
GB = 1024 * 1024 * 1024

# Files and pipes get tables at their natural width instead of 80 columns
UNWRAPPED_WIDTH = 10_000


def format_bytes(size: int) -> str:
    """
    Format bytes as a human-readable string.

    Anything below 1 GiB is shown in MB, everything else in GB.
    """
    if size < GB:
        return f"{size / MB:.2f} MB"
    return f"{size / GB:.2f} GB"


def format_disk_percent(used: int, size: int) -> str:
    """Format disk usage as a percentage, or 'n/a' for an empty disk."""
    if size == 0:
        return "n/a"
    return f"{used / size * 100:.1f}%"


def _new_table(title: str, *headers: str, inverted: bool = False) -> Table:
    """Create a titled table with the given column headers."""
    if inverted:
        table = Table(
            title=title,
            box=box.SQUARE,
            style="black on white",
            header_style="bold white on blue",
            title_style="bold blue",
        )
    else:
        table = Table(
            title=title,
            box=box.ROUNDED,
            border_style="bright_blue",
            header_style="bold bright_cyan",
            title_style="bold bright_white",
        )
    for header in headers:
        table.add_column(header, overflow="fold")
    return table


def build_tables(metrics: SystemMetrics) -> list[Table]:
    """Build the report tables for a snapshot, in display order."""
    cpu_usage = _new_table("CPU Usage", "CPUs", "CPU Usage", inverted=True)
    cpu_usage.add_row(str(metrics.num_cpu), f"{metrics.cpu_percent:.2f}%")

    cpu_info = _new_table("CPU INFO", "#", "Vendor ID", "Family", "Cores", "Model", "Speed")
    for c in metrics.cpu_info:
        cpu_info.add_row(str(c.index), c.vendor_id, c.family, str(c.cores), c.model, c.speed)

    disk = _new_table("Disk usage", "Disk Size", "Disk Free", "Disk Usage", "Disk Usage %")
    disk.add_row(
        format_bytes(metrics.disk_size),
        format_bytes(metrics.disk_free),
        format_bytes(metrics.disk_used),
        format_disk_percent(metrics.disk_used, metrics.disk_size),
    )

    memory = _new_table(
        "System Memory", "#", "Total Memory", "Free Memory", "Used Memory", "Cache Memory"
    )
    memory.add_row(
        "1",
        format_bytes(metrics.total_memory),
        format_bytes(metrics.free_memory),
        format_bytes(metrics.used_memory),
        format_bytes(metrics.cache_memory),
    )

    host = _new_table(
        "Platform/System info:", "Hostname", "Running Processes", "Platform", "Platform Version"
    )
    host.add_row(
        metrics.hostname,
        str(metrics.running_processes),
        metrics.platform,
        metrics.platform_version,
    )

    mac = _new_table("Mac Address:", "Mac Address")
    mac.add_row(metrics.mac_addr)

    network = _new_table("Network interfaces:", "Interface", "IP Addresses")
    for iface, addrs in metrics.ip_addrs.items():
        network.add_row(iface, ", ".join(addrs))

    return [cpu_usage, cpu_info, disk, memory, host, mac, network]


def format_metrics(metrics: SystemMetrics, sink: TextIO | BinaryIO | None = None) -> None:
    """
    Write the report for a snapshot to a stream.

    Args:
        metrics: Snapshot to render.
        sink: Text or binary stream to write to. Defaults to stdout. Binary
            streams receive UTF-8. The sink is never closed.
    """
    if sink is None:
        sink = sys.stdout
    if isinstance(sink, (io.RawIOBase, io.BufferedIOBase)):
        text_sink = io.TextIOWrapper(sink, encoding="utf-8", write_through=True)
        try:
            _render(metrics, text_sink)
        finally:
            text_sink.detach()
    else:
        _render(metrics, sink)


def _render(metrics: SystemMetrics, sink: TextIO) -> None:
    console = Console(file=sink, highlight=False, markup=False)
    if not console.is_terminal:
        console.width = UNWRAPPED_WIDTH
    for table in build_tables(metrics):
        console.line()
        console.print(table)
    console.line()


def write_metrics(sink: TextIO | BinaryIO | None = None) -> None:
    """Read fresh metrics and write the report to ``sink`` (stdout by default)."""
    format_metrics(read_metrics(), sink)
