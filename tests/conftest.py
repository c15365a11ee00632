import os

import pytest

from config import MiB
from utils_host import HostOps, TuneError


class FakeOps(HostOps):
    """Records commands instead of running them; fallocate/dd create the file."""

    def __init__(self, mem_mb=1024, swap_mb=0, root=True, fail=()):
        self.mem_mb = mem_mb
        self.swap_mb = swap_mb
        self.root = root
        self.fail = set(fail)
        self.commands = []
        self.modes = {}

    def is_root(self):
        return self.root

    def total_memory_bytes(self):
        return self.mem_mb * MiB

    def swap_total_mb(self):
        return self.swap_mb

    def has_command(self, name):
        return True

    def run(self, argv, quiet=False):
        self.commands.append(list(argv))
        if argv[0] in self.fail:
            raise TuneError(f"`{' '.join(argv)}` failed with exit status 1")
        if argv[0] == "fallocate":
            open(argv[-1], "wb").close()
        elif argv[0] == "dd":
            out = next(a for a in argv if a.startswith("of="))[3:]
            open(out, "wb").close()

    def try_run(self, argv):
        self.commands.append(list(argv))
        return argv[0] not in self.fail

    def chmod(self, path, mode):
        self.modes[path] = mode
        os.chmod(path, mode)

    def ran(self, name):
        return [c for c in self.commands if c[0] == name]


@pytest.fixture
def fake_ops():
    return FakeOps()
