"""Data models for procinspect."""

from dataclasses import dataclass

KB_PER_GIB = 1024 * 1024


@dataclass(slots=True, frozen=True)
class ViewSelection:
    """Which report sections to render."""

    hardware: bool = True
    live: bool = False
    system: bool = True
    tasks: bool = True

    @classmethod
    def resolve(
        cls,
        *,
        all_views: bool = False,
        hardware: bool = False,
        live: bool = False,
        system: bool = False,
        tasks: bool = False,
    ) -> "ViewSelection":
        """
        Build a selection from command-line style flags.

        The live view is exclusive and switches every other section off.
        With no section requested (or all_views set) the static defaults apply.
        """
        if live:
            return cls(hardware=False, live=True, system=False, tasks=False)
        if all_views or not (hardware or system or tasks):
            return cls()
        return cls(hardware=hardware, live=False, system=system, tasks=tasks)

    @property
    def names(self) -> list[str]:
        """Names of the enabled sections, in render order."""
        order = ("live", "system", "hardware", "tasks")
        return [name for name in order if getattr(self, name)]


@dataclass(slots=True, frozen=True)
class CpuSample:
    """Aggregate CPU counters (jiffies) at one point in time."""

    total: int
    idle: int


@dataclass(slots=True, frozen=True)
class MemorySample:
    """Memory totals from meminfo, in kB."""

    total_kb: float
    active_kb: float

    @property
    def total_gib(self) -> float:
        return self.total_kb / KB_PER_GIB

    @property
    def active_gib(self) -> float:
        return self.active_kb / KB_PER_GIB

    @property
    def utilization(self) -> float:
        """Active memory as a percentage of total (0.0 when total is unknown)."""
        if self.total_kb <= 0:
            return 0.0
        return 100.0 * self.active_kb / self.total_kb


@dataclass(slots=True, frozen=True)
class LoadAverage:
    """1, 5 and 15 minute load averages as printed by the kernel."""

    one: str = ""
    five: str = ""
    fifteen: str = ""

    def __str__(self) -> str:
        return " ".join(value for value in (self.one, self.five, self.fifteen) if value)


@dataclass(slots=True, frozen=True)
class TaskRecord:
    """One row of the task list, built from <pid>/status."""

    pid: int | None
    state: str
    name: str  # at most 25 characters
    threads: int | None
    user: str


@dataclass(slots=True, frozen=True)
class ExtractionFailure:
    """A proc file that could not be read or a label that was not found."""

    source: str
    reason: str
