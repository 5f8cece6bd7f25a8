"""Shared fixtures: a fake proc filesystem under tmp_path."""

import logging
from pathlib import Path

import pytest

from procinspect.procfs import ProcFS

CPUINFO = """\
processor\t: 0
vendor_id\t: GenuineIntel
model name\t: Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz
cpu MHz\t\t: 1992.000

processor\t: 1
vendor_id\t: GenuineIntel
model name\t: Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz
cpu MHz\t\t: 1992.000

"""

MEMINFO = """\
MemTotal:       16777216 kB
MemFree:         8388608 kB
MemAvailable:   12582912 kB
Active:          4194304 kB
Inactive:        2097152 kB
Active(anon):    1048576 kB
Inactive(anon):   524288 kB
"""

STAT_IDLE = "cpu  100 0 0 900 0 0 0 0 0 0\ncpu0 50 0 0 450 0 0 0 0 0 0\nintr 12345\n"
STAT_BUSY = "cpu  150 0 0 950 0 0 0 0 0 0\ncpu0 75 0 0 475 0 0 0 0 0 0\nintr 12400\n"


def status_text(pid: int, name: str, state: str, threads: int, omit: tuple[str, ...] = ()) -> str:
    """Build a <pid>/status file body."""
    lines = {
        "Name": f"Name:\t{name}",
        "Umask": "Umask:\t0022",
        "State": f"State:\t{state}",
        "Tgid": f"Tgid:\t{pid}",
        "Pid": f"Pid:\t{pid}",
        "PPid": "PPid:\t1",
        "TracerPid": "TracerPid:\t0",
        "Uid": "Uid:\t0\t0\t0\t0",
        "Threads": f"Threads:\t{threads}",
    }
    return "\n".join(line for key, line in lines.items() if key not in omit) + "\n"


class FakeProc:
    """A writable stand-in for /proc."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.proc = ProcFS(root)

    def write(self, relative: str, text: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    def add_task(
        self,
        pid: int,
        name: str = "bash",
        state: str = "S (sleeping)",
        threads: int = 1,
        omit: tuple[str, ...] = (),
    ) -> Path:
        return self.write(f"{pid}/status", status_text(pid, name, state, threads, omit))

    def remove_task(self, pid: int) -> None:
        (self.root / str(pid) / "status").unlink()


@pytest.fixture
def fake_proc(tmp_path) -> FakeProc:
    """A proc tree with identity, hardware and two task entries."""
    fake = FakeProc(tmp_path)
    fake.write("sys/kernel/hostname", "testhost\n")
    fake.write("sys/kernel/osrelease", "6.1.0-test\n")
    fake.write("uptime", "90061.54 180000.00\n")
    fake.write("cpuinfo", CPUINFO)
    fake.write("loadavg", "0.52 0.58 0.59 1/389 12345\n")
    fake.write("stat", STAT_IDLE)
    fake.write("meminfo", MEMINFO)
    fake.write("self/status", "Name:\tnot-a-task\n")
    fake.add_task(1, name="systemd", threads=1)
    fake.add_task(42, name="python3", state="R (running)", threads=4)
    return fake


@pytest.fixture
def empty_proc(tmp_path) -> FakeProc:
    """A proc tree with no files at all."""
    return FakeProc(tmp_path)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers configure_logging() attached during a test."""
    yield
    logger = logging.getLogger("procinspect")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
