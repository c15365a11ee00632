"""
config.py — vpstune host tuning configuration
"""

MiB = 1024 * 1024

# Nominal link assumptions (not measured)
DEFAULT_BW_MBPS = 1000
DEFAULT_RTT_MS  = 150

# Swap
SWAPFILE              = "/swapfile"
FSTAB                 = "/etc/fstab"
SWAP_RAM_THRESHOLD_MB = 2048
SWAP_SMALL_HOST_MB    = 1536            # RAM below threshold
SWAP_LARGE_HOST_MB    = 1024

# Buffer sizing: min(2*BDP, RAM_FRACTION*RAM, BUFFER_CEILING_BYTES)
RAM_FRACTION         = 0.03
BUFFER_CEILING_BYTES = 64 * MiB
BUCKETS_MB           = (4, 8, 16, 32, 64)
BUCKET_UNIT_BYTES    = 1000 * 1000      # cap is bucketed in whole megabytes

# (bucket floor MB, rmem_default, wmem_default), first match wins
CORE_DEFAULTS = (
    (32, 262144, 524288),
    (8,  131072, 262144),
    (0,  131072, 131072),
)

TCP_RMEM_MIN = 4096
TCP_RMEM_DEF = 87380
TCP_WMEM_MIN = 4096
TCP_WMEM_DEF = 65536

# Sysctl
SYSCTL_CONF   = "/etc/sysctl.conf"
SYSCTL_DIR    = "/etc/sysctl.d"
SYSCTL_TARGET = "/etc/sysctl.d/999-net-bbr-fq.conf"
PROC_SYS      = "/proc/sys"

QDISC      = "fq"
CONGESTION = "bbr"
MTU_PROBING = 1
FASTOPEN    = 3

CONFLICT_KEYS = (
    "net.core.default_qdisc",
    "net.core.rmem_max",
    "net.core.wmem_max",
    "net.core.rmem_default",
    "net.core.wmem_default",
    "net.ipv4.tcp_rmem",
    "net.ipv4.tcp_wmem",
    "net.ipv4.tcp_congestion_control",
)
