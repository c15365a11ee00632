"""
diag.py — read-only vpstune status check.
Shows memory/swap, the live qdisc and congestion control,
and any key where the kernel disagrees with our sysctl file.
"""

import os
from typing import Dict, Optional, Tuple

import psutil

import config
from utils_host import HostOps


def read_sysctl(key: str, proc_root: str = config.PROC_SYS) -> Optional[str]:
    path = os.path.join(proc_root, *key.split("."))
    try:
        with open(path) as f:
            return f.read().strip()
    except OSError:
        return None


def parse_config(path: str) -> Dict[str, str]:
    values: Dict[str, str] = {}
    if not os.path.isfile(path):
        return values
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith(("#", ";")) or "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key.strip()] = value.strip()
    return values


def find_drift(expected: Dict[str, str], live: Dict[str, Optional[str]]) -> Dict[str, Tuple[str, Optional[str]]]:
    """Keys whose live value differs; triples are compared ignoring whitespace."""
    drift = {}
    for key, want in expected.items():
        have = live.get(key)
        if have is None or have.split() != want.split():
            drift[key] = (want, have)
    return drift


def collect_status(
    ops: HostOps,
    target: str = config.SYSCTL_TARGET,
    proc_root: str = config.PROC_SYS,
) -> dict:
    expected = parse_config(target)
    live = {key: read_sysctl(key, proc_root) for key in expected}
    return {
        "mem_mb": ops.total_memory_mb(),
        "swap_mb": ops.swap_total_mb(),
        "qdisc": read_sysctl("net.core.default_qdisc", proc_root),
        "congestion": read_sysctl("net.ipv4.tcp_congestion_control", proc_root),
        "available_cc": read_sysctl("net.ipv4.tcp_available_congestion_control", proc_root),
        "config_present": bool(expected),
        "drift": find_drift(expected, live),
    }


def main() -> int:
    print("\n=== vpstune Diagnostic ===")
    status = collect_status(HostOps())

    print("\n[1] Memory & swap:")
    print(f"RAM: {status['mem_mb']} MB ({psutil.virtual_memory().percent:.1f}% used)  |  "
          f"Swap: {status['swap_mb']} MB")

    print("\n[2] Network stack:")
    print(f"qdisc: {status['qdisc']}  |  congestion control: {status['congestion']}")
    print(f"available: {status['available_cc']}")

    print(f"\n[3] {config.SYSCTL_TARGET} vs live kernel:")
    if not status["config_present"]:
        print("not written yet (run vps_tune.py as root)")
    elif not status["drift"]:
        print("in sync")
    else:
        for key, (want, have) in sorted(status["drift"].items()):
            print(f"{key}: file={want!r} live={have!r}")

    print("\n=== End diagnostics ===\n")
    return 1 if status["drift"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
