"""
tcp_buffers.py
==============
Socket buffer sizing for vpstune.
Bandwidth-delay product, bounded by RAM and a fixed ceiling,
rounded down onto a small set of bucket sizes.
"""

from dataclasses import dataclass
from typing import List, Tuple

import config
from config import MiB


# ===============================================================
# Plan
# ===============================================================

@dataclass(frozen=True)
class BufferPlan:
    bucket_mb: int
    max_bytes: int
    rmem_default: int
    wmem_default: int
    tcp_rmem: Tuple[int, int, int]
    tcp_wmem: Tuple[int, int, int]

    def sysctl_items(self) -> List[Tuple[str, str]]:
        """Buffer keys in the order they are written to the config file."""
        return [
            ("net.core.rmem_default", str(self.rmem_default)),
            ("net.core.wmem_default", str(self.wmem_default)),
            ("net.core.rmem_max", str(self.max_bytes)),
            ("net.core.wmem_max", str(self.max_bytes)),
            ("net.ipv4.tcp_rmem", " ".join(str(v) for v in self.tcp_rmem)),
            ("net.ipv4.tcp_wmem", " ".join(str(v) for v in self.tcp_wmem)),
        ]


# ===============================================================
# Calculation
# ===============================================================

def bdp_bytes(bandwidth_mbps: float, rtt_ms: float) -> int:
    """Mbps * ms -> bytes in flight (1 Mbps = 125 bytes/ms)."""
    return int(round(bandwidth_mbps * 125 * rtt_ms))


def buffer_cap_bytes(mem_bytes: int, bandwidth_mbps: float, rtt_ms: float) -> int:
    two_bdp = 2 * bdp_bytes(bandwidth_mbps, rtt_ms)
    ram_share = int(round(mem_bytes * config.RAM_FRACTION))
    return min(two_bdp, ram_share, config.BUFFER_CEILING_BYTES)


def bucket_mb(cap_bytes: int) -> int:
    """Largest bucket not above the cap; anything smaller gets the smallest bucket."""
    cap_mb = cap_bytes // config.BUCKET_UNIT_BYTES
    for size in sorted(config.BUCKETS_MB, reverse=True):
        if cap_mb >= size:
            return size
    return min(config.BUCKETS_MB)


def default_buffers(bucket: int) -> Tuple[int, int]:
    for floor_mb, rmem, wmem in config.CORE_DEFAULTS:
        if bucket >= floor_mb:
            return rmem, wmem
    raise ValueError(f"no default buffers for bucket {bucket}")


def plan_buffers(
    mem_bytes: int,
    bandwidth_mbps: float = config.DEFAULT_BW_MBPS,
    rtt_ms: float = config.DEFAULT_RTT_MS,
) -> BufferPlan:
    bucket = bucket_mb(buffer_cap_bytes(mem_bytes, bandwidth_mbps, rtt_ms))
    max_bytes = bucket * MiB
    rmem_def, wmem_def = default_buffers(bucket)
    return BufferPlan(
        bucket_mb=bucket,
        max_bytes=max_bytes,
        rmem_default=rmem_def,
        wmem_default=wmem_def,
        tcp_rmem=(config.TCP_RMEM_MIN, config.TCP_RMEM_DEF, max_bytes),
        tcp_wmem=(config.TCP_WMEM_MIN, config.TCP_WMEM_DEF, max_bytes),
    )
