"""
swap_provisioner.py — swap file creation for small VPS hosts.

- Skips entirely when any swap is already active
- 1536 MiB swap below 2 GiB RAM, 1024 MiB otherwise
- fallocate first, dd zero-fill when the filesystem refuses it
- Registers the file in fstab once
"""

import os
from typing import Optional

import config
from utils_host import HostOps, TuneError


def swap_size_mb(ram_mb: int) -> int:
    if ram_mb < config.SWAP_RAM_THRESHOLD_MB:
        return config.SWAP_SMALL_HOST_MB
    return config.SWAP_LARGE_HOST_MB


def swap_active(ops: HostOps) -> bool:
    return ops.swap_total_mb() > 0


def ensure_fstab_entry(fstab_path: str = config.FSTAB, swap_path: str = config.SWAPFILE) -> bool:
    """Append the swap mount line unless the swap path is already mentioned."""
    text = ""
    if os.path.exists(fstab_path):
        with open(fstab_path) as f:
            text = f.read()
    if swap_path in text:
        return False

    with open(fstab_path, "a") as f:
        if text and not text.endswith("\n"):
            f.write("\n")
        f.write(f"{swap_path} none swap sw 0 0\n")
    return True


def _allocate(ops: HostOps, swap_path: str, size_mb: int) -> None:
    try:
        ops.run(["fallocate", "-l", f"{size_mb}M", swap_path])
    except TuneError as e:
        print(f"[SWAP] fallocate unavailable ({e}), zero-filling instead...", flush=True)
        ops.run(["dd", "if=/dev/zero", f"of={swap_path}", "bs=1M", f"count={size_mb}"])


def configure_swap(
    ops: HostOps,
    swap_path: str = config.SWAPFILE,
    fstab_path: str = config.FSTAB,
) -> Optional[int]:
    """Create and enable a swap file when none is active. Returns the size created, if any."""
    print("[SWAP] Step 1/2: checking swap...", flush=True)

    if swap_active(ops):
        print("[SWAP] Swap already active, skipping.")
        return None

    if os.path.exists(swap_path):
        raise TuneError(
            f"{swap_path} exists but no swap is active; remove it and re-run"
        )

    ram_mb = ops.total_memory_mb()
    size_mb = swap_size_mb(ram_mb)
    print(f"[SWAP] No swap found, RAM {ram_mb} MB -> creating {size_mb} MB at {swap_path}", flush=True)

    try:
        _allocate(ops, swap_path, size_mb)
        ops.chmod(swap_path, 0o600)
        ops.run(["mkswap", swap_path])
        ops.run(["swapon", swap_path])
    except (TuneError, OSError):
        if os.path.exists(swap_path):
            os.remove(swap_path)
        raise

    try:
        added = ensure_fstab_entry(fstab_path, swap_path)
    except OSError as e:
        raise TuneError(
            f"swap is active but {fstab_path} could not be updated ({e}); "
            f"add '{swap_path} none swap sw 0 0' to it by hand"
        )
    if added:
        print(f"[SWAP] Registered {swap_path} in {fstab_path}")
    else:
        print(f"[SWAP] {fstab_path} already lists {swap_path}")

    print(f"[SWAP] Swap ready ({size_mb} MB).")
    return size_mb
