#!/usr/bin/env python3
"""
vps_tune.py — one-shot VPS tuning (swap + BBR / TCP buffers)
=============================================================
Run as root, no arguments. Safe to re-run:
swap is only created when none is active, and the sysctl
file is rewritten deterministically.
"""

import sys

import config
from swap_provisioner import configure_swap
from sysctl_writer import (
    apply_sysctl,
    comment_out_conflicts,
    remove_conflicting_files,
    write_config,
)
from tcp_buffers import BufferPlan, plan_buffers
from utils_host import HostOps, TuneError


def require_root(ops: HostOps) -> None:
    if not ops.is_root():
        raise TuneError("must be run as root")


def optimize_bbr(
    ops: HostOps,
    sysctl_conf: str = config.SYSCTL_CONF,
    sysctl_dir: str = config.SYSCTL_DIR,
    target: str = config.SYSCTL_TARGET,
    bandwidth_mbps: float = config.DEFAULT_BW_MBPS,
    rtt_ms: float = config.DEFAULT_RTT_MS,
) -> BufferPlan:
    print("[BBR] Step 2/2: tuning BBR + TCP buffers...", flush=True)

    mem_bytes = ops.total_memory_bytes()
    print(
        f"[BBR] RAM {mem_bytes / (1024 ** 3):.2f} GiB | "
        f"assumed link {bandwidth_mbps} Mbps, {rtt_ms} ms RTT"
    )
    plan = plan_buffers(mem_bytes, bandwidth_mbps, rtt_ms)

    commented = comment_out_conflicts(sysctl_conf)
    if commented:
        print(f"[BBR] Commented out {commented} conflicting line(s) in {sysctl_conf}")
    for path in remove_conflicting_files(sysctl_dir, target):
        print(f"[BBR] Removed conflicting file {path}")

    write_config(plan, mem_bytes, target)
    print(f"[BBR] Wrote {target}")

    apply_sysctl(ops)
    print(f"[BBR] Applied. Buffer bucket: {plan.bucket_mb} MB")
    return plan


def main() -> int:
    ops = HostOps()
    try:
        require_root(ops)
        configure_swap(ops)
        optimize_bbr(ops)
    except (TuneError, OSError) as e:
        print(f"[ERR] {e}", file=sys.stderr)
        return 1

    print("[DONE] All tuning applied. A reboot is recommended so swap mounts cleanly.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
