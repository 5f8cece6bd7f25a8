"""Field extractors for individual proc files."""

import logging
import pwd
import re
from dataclasses import dataclass

from procinspect.models import CpuSample, LoadAverage, MemorySample, TaskRecord
from procinspect.procfs import ProcFS
from procinspect.tokenizer import TokenCursor, tokenize

logger = logging.getLogger(__name__)

TASK_NAME_WIDTH = 25

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_int(text: str | None) -> int:
    """Parse the leading integer of text, 0 if there is none."""
    if not text:
        return 0
    match = _INT_PREFIX.match(text)
    return int(match.group()) if match else 0


def parse_float(text: str | None) -> float:
    """Parse the leading number of text, 0.0 if there is none."""
    if not text:
        return 0.0
    match = _FLOAT_PREFIX.match(text)
    return float(match.group()) if match else 0.0


@dataclass(slots=True, frozen=True)
class FieldRule:
    """
    Locate a field inside a labelled proc line.

    A line matches when it contains ``label`` and none of ``excludes``. The
    matching line is tokenized on ``delimiters`` and the token at ``index``
    is the field.
    """

    label: str
    delimiters: str
    index: int
    excludes: tuple[str, ...] = ()

    def matches(self, line: str) -> bool:
        return self.label in line and not any(word in line for word in self.excludes)

    def extract(self, line: str) -> str | None:
        """Return the field from a matching line, or None if it is too short."""
        for position, token in enumerate(TokenCursor(line, self.delimiters)):
            if position == self.index:
                return token
        return None


UPTIME_RULE = FieldRule("", " |,?!\n", 0)
CPU_MODEL_RULE = FieldRule("model name", " :,?!", 2)
PROCESSOR_LABEL = "processor"
LOADAVG_DELIMITERS = " "
CPU_STAT_RULE = FieldRule("cpu", " ,?!\n", 4)
CPU_STAT_COLUMNS = range(1, 10)
MEM_TOTAL_RULE = FieldRule("MemTotal:", " ,?!\n", 1)
MEM_ACTIVE_RULE = FieldRule("Active:", " ,?!\n", 1)
TASK_NAME_RULE = FieldRule("Name:", "\t ():,?!\n", 1)
TASK_STATE_RULE = FieldRule("State:", "\t():,?!\n", 2)
TASK_PID_RULE = FieldRule("Pid:", "\t :,?!\n", 1, excludes=("PPid:", "TracerPid"))
TASK_THREADS_RULE = FieldRule("Threads:", "\t :,?!\n", 1)


def _missing(proc: ProcFS, source: str, label: str) -> None:
    logger.debug("%s: no %r line", source, label)
    proc.record_failure(source, f"missing {label!r}")


def read_hostname(proc: ProcFS) -> str:
    """Return the host name."""
    return proc.read_first_line("sys/kernel/hostname").strip()


def read_kernel_release(proc: ProcFS) -> str:
    """Return the kernel release string."""
    return proc.read_first_line("sys/kernel/osrelease").strip()


def read_uptime(proc: ProcFS) -> int:
    """Return whole seconds since boot (fractional part dropped)."""
    return parse_int(UPTIME_RULE.extract(proc.read_first_line("uptime")))


def read_cpu_model(proc: ProcFS) -> str:
    """
    Return the CPU model name from cpuinfo.

    The line is split on CPU_MODEL_RULE's delimiters; the model is the token
    at index 2 followed by everything after it on the line.
    """
    for line in proc.iter_lines("cpuinfo"):
        if not CPU_MODEL_RULE.matches(line):
            continue
        cursor = TokenCursor(line, CPU_MODEL_RULE.delimiters)
        for _ in range(CPU_MODEL_RULE.index):
            cursor.next_token()
        first = cursor.next_token()
        if first is None:
            return ""
        rest = cursor.rest or ""
        return f"{first} {rest}".strip()
    _missing(proc, "cpuinfo", CPU_MODEL_RULE.label)
    return ""


def count_processors(proc: ProcFS) -> int:
    """Count the logical processors listed in cpuinfo."""
    return sum(1 for line in proc.iter_lines("cpuinfo") if PROCESSOR_LABEL in line)


def read_load_average(proc: ProcFS) -> LoadAverage:
    """Return the 1/5/15 minute load averages."""
    tokens = tokenize(proc.read_first_line("loadavg"), LOADAVG_DELIMITERS)[:3]
    tokens += [""] * (3 - len(tokens))
    return LoadAverage(*tokens)


def read_cpu_sample(proc: ProcFS) -> CpuSample:
    """
    Return the aggregate CPU counters from stat.

    Columns 1-9 of the first "cpu" line are summed for the total; column 4
    is the idle time.
    """
    for line in proc.iter_lines("stat"):
        if not CPU_STAT_RULE.matches(line):
            continue
        total = 0
        idle = 0
        for position, token in enumerate(TokenCursor(line, CPU_STAT_RULE.delimiters)):
            if position in CPU_STAT_COLUMNS:
                value = parse_int(token)
                total += value
                if position == CPU_STAT_RULE.index:
                    idle = value
        return CpuSample(total=total, idle=idle)
    _missing(proc, "stat", CPU_STAT_RULE.label)
    return CpuSample(total=0, idle=0)


def read_memory(proc: ProcFS) -> MemorySample:
    """Return total and active memory from meminfo."""
    total: str | None = None
    active: str | None = None
    for line in proc.iter_lines("meminfo"):
        if MEM_TOTAL_RULE.matches(line):
            total = MEM_TOTAL_RULE.extract(line)
        if MEM_ACTIVE_RULE.matches(line):
            active = MEM_ACTIVE_RULE.extract(line)
    if total is None:
        _missing(proc, "meminfo", MEM_TOTAL_RULE.label)
    if active is None:
        _missing(proc, "meminfo", MEM_ACTIVE_RULE.label)
    return MemorySample(total_kb=parse_float(total), active_kb=parse_float(active))


def list_task_ids(proc: ProcFS) -> list[str]:
    """Return the proc entries whose names parse to a nonzero integer."""
    return [name for name in proc.list_entries() if parse_int(name) != 0]


def lookup_user(uid: int | None) -> str:
    """Return the login name for uid, falling back to the number itself."""
    if uid is None:
        return ""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def read_task(proc: ProcFS, task_id: str) -> TaskRecord | None:
    """
    Build a TaskRecord from <task_id>/status.

    Returns None when the status file cannot be opened (the task most likely
    exited). Fields whose line is missing are left blank.
    """
    source = f"{task_id}/status"
    uid = proc.owner_uid(source)
    failures_before = len(proc.failures)
    lines = list(proc.iter_lines(source, quiet=True))
    if not lines and len(proc.failures) > failures_before:
        return None

    name: str | None = None
    state: str | None = None
    pid: str | None = None
    threads: str | None = None
    for line in lines:
        if TASK_NAME_RULE.matches(line):
            name = TASK_NAME_RULE.extract(line)
        if TASK_STATE_RULE.matches(line):
            state = TASK_STATE_RULE.extract(line)
        if TASK_PID_RULE.matches(line):
            pid = TASK_PID_RULE.extract(line)
        if TASK_THREADS_RULE.matches(line):
            threads = TASK_THREADS_RULE.extract(line)

    for rule, value in (
        (TASK_NAME_RULE, name),
        (TASK_STATE_RULE, state),
        (TASK_PID_RULE, pid),
        (TASK_THREADS_RULE, threads),
    ):
        if value is None:
            _missing(proc, source, rule.label)

    return TaskRecord(
        pid=parse_int(pid) if pid is not None else None,
        state=state or "",
        name=(name or "")[:TASK_NAME_WIDTH],
        threads=parse_int(threads) if threads is not None else None,
        user=lookup_user(uid),
    )
