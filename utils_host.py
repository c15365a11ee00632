# utils_host.py — tiny host helpers (queries + external commands)
import os
import shutil
import subprocess
from typing import List

import psutil

from config import MiB


class TuneError(RuntimeError):
    """Fatal tuning failure; message is shown to the operator as-is."""


class HostOps:
    """Everything the tuner asks of the OS. Tests swap in a recording fake."""

    # --- queries ---
    def is_root(self) -> bool:
        return os.geteuid() == 0

    def total_memory_bytes(self) -> int:
        return psutil.virtual_memory().total

    def total_memory_mb(self) -> int:
        return self.total_memory_bytes() // MiB

    def swap_total_mb(self) -> int:
        return psutil.swap_memory().total // MiB

    def has_command(self, name: str) -> bool:
        return shutil.which(name) is not None

    # --- mutations ---
    def run(self, argv: List[str], quiet: bool = False) -> None:
        try:
            subprocess.run(
                argv,
                stdout=subprocess.DEVNULL if quiet else None,
                check=True,
            )
        except FileNotFoundError:
            raise TuneError(f"command not found: {argv[0]}")
        except subprocess.CalledProcessError as e:
            raise TuneError(f"`{' '.join(argv)}` failed with exit status {e.returncode}")

    def try_run(self, argv: List[str]) -> bool:
        try:
            subprocess.run(
                argv,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
            )
            return True
        except (OSError, subprocess.CalledProcessError):
            # Best-effort; the caller carries on without it.
            return False

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)
