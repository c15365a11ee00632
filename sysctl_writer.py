"""
sysctl_writer.py
================
Leaves exactly one source for the BBR / buffer keys:
legacy sysctl.conf lines are commented out, other sysctl.d
files carrying them are deleted, then our own file is written
and the kernel is told to reload everything.
"""

import glob
import os
import re
import shutil
from typing import List, Optional

import config
from tcp_buffers import BufferPlan
from utils_host import HostOps

CONFLICT_RE = re.compile(
    r"^(?:%s)\s*=" % "|".join(re.escape(k) for k in config.CONFLICT_KEYS)
)
# sysctl files carry no declared encoding; edits work on raw bytes
CONFLICT_RE_BYTES = re.compile(CONFLICT_RE.pattern.encode())


def line_conflicts(line) -> bool:
    pattern = CONFLICT_RE_BYTES if isinstance(line, bytes) else CONFLICT_RE
    return pattern.match(line) is not None


def file_conflicts(path: str) -> bool:
    with open(path, "rb") as f:
        return any(line_conflicts(line) for line in f)


def _replace_file(path: str, data: bytes, mode_from: Optional[str] = None) -> None:
    """Write next to path, then rename over it."""
    tmp = path + ".tmp"
    try:
        with open(tmp, "wb") as f:
            f.write(data)
        if mode_from:
            shutil.copymode(mode_from, tmp)
        os.replace(tmp, path)
    except OSError:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def comment_out_conflicts(conf_path: str = config.SYSCTL_CONF) -> int:
    """Prefix active conflicting lines with '# ' in place. Returns how many were touched."""
    if not os.path.isfile(conf_path):
        return 0

    with open(conf_path, "rb") as f:
        lines = f.readlines()

    hits = 0
    out = []
    for line in lines:
        if line_conflicts(line):
            out.append(b"# " + line)
            hits += 1
        else:
            out.append(line)

    if hits:
        _replace_file(conf_path, b"".join(out), mode_from=conf_path)
    return hits


def remove_conflicting_files(
    conf_dir: str = config.SYSCTL_DIR,
    target: str = config.SYSCTL_TARGET,
) -> List[str]:
    if not os.path.isdir(conf_dir):
        return []

    keep = os.path.realpath(target)
    removed = []
    for path in sorted(glob.glob(os.path.join(conf_dir, "*.conf"))):
        if not os.path.isfile(path) or os.path.realpath(path) == keep:
            continue
        if file_conflicts(path):
            os.remove(path)
            removed.append(path)
    return removed


def render_config(plan: BufferPlan, mem_bytes: int) -> str:
    mem_gib = mem_bytes / (1024 ** 3)
    lines = [
        "# Auto-generated by vpstune",
        f"# Optimized for: RAM={mem_gib:.2f}GiB, Bucket={plan.bucket_mb}MB",
        "",
        f"net.core.default_qdisc = {config.QDISC}",
        f"net.ipv4.tcp_congestion_control = {config.CONGESTION}",
        "",
    ]
    items = plan.sysctl_items()
    lines += [f"{k} = {v}" for k, v in items[:4]]
    lines.append("")
    lines += [f"{k} = {v}" for k, v in items[4:]]
    lines += [
        "",
        f"net.ipv4.tcp_mtu_probing = {config.MTU_PROBING}",
        f"net.ipv4.tcp_fastopen = {config.FASTOPEN}",
    ]
    return "\n".join(lines) + "\n"


def write_config(plan: BufferPlan, mem_bytes: int, target: str = config.SYSCTL_TARGET) -> str:
    _replace_file(target, render_config(plan, mem_bytes).encode())
    return target


def apply_sysctl(ops: HostOps) -> None:
    """Load tcp_bbr if possible, then reload every sysctl source."""
    if ops.has_command("modprobe") and not ops.try_run(["modprobe", "tcp_bbr"]):
        print("[BBR] modprobe tcp_bbr failed (built-in or unavailable), continuing.")
    ops.run(["sysctl", "--system"], quiet=True)
