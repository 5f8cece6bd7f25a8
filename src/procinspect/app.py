"""procinspect - Textual dashboard."""

from enum import Enum
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Static

from procinspect.metrics import format_uptime, render_bar
from procinspect.models import LoadAverage, MemorySample, TaskRecord
from procinspect.monitor import LiveSampler, LiveSnapshot
from procinspect.procfs import ProcFS


class SortKey(Enum):
    """Sort keys for the task table."""

    PID = "pid"
    NAME = "name"
    USER = "user"
    THREADS = "threads"


class HeaderStats(Static):
    """Header widget showing host, load, CPU and memory statistics."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._hostname: str = ""
        self._uptime_seconds: int = 0
        self._load_avg: LoadAverage = LoadAverage()
        self._cpu_percent: float = 0.0
        self._memory: MemorySample | None = None
        self._failed_reads: int = 0

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_host_info(), id="host-info"),
            Static(self._get_usage_info(), id="usage-info"),
        )

    def update_stats(self, snapshot: LiveSnapshot) -> None:
        """Update the statistics from a live snapshot."""
        self._hostname = snapshot.hostname
        self._uptime_seconds = snapshot.uptime_seconds
        self._load_avg = snapshot.load_avg
        self._cpu_percent = snapshot.cpu_percent
        self._memory = snapshot.memory
        self._failed_reads = snapshot.failed_reads
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        if not self.is_mounted:
            return
        self.query_one("#host-info", Static).update(self._get_host_info())
        self.query_one("#usage-info", Static).update(self._get_usage_info())

    def _get_host_info(self) -> str:
        """Get host info display."""
        if not self._hostname:
            return "Loading host info..."
        lines = [
            f"Hostname: {self._hostname}",
            f"Uptime: {format_uptime(self._uptime_seconds)}",
            f"Load average: {self._load_avg}",
        ]
        if self._failed_reads:
            lines.append(f"[yellow]{self._failed_reads} fields unavailable[/yellow]")
        return "\n".join(lines)

    def _get_usage_info(self) -> str:
        """Get CPU and memory gauge display."""
        if self._memory is None:
            return "Loading usage info..."
        memory = self._memory
        # Escaped brackets keep Rich markup from eating the gauge
        return (
            f"CPU \\[{render_bar(self._cpu_percent)}] {self._cpu_percent:5.1f}%\n"
            f"Mem \\[{render_bar(memory.utilization)}] {memory.utilization:5.1f}% "
            f"({memory.active_gib:.1f}G/{memory.total_gib:.1f}G)"
        )


class TaskTable(Container):
    """Container for the task data table."""

    DEFAULT_CSS = """
    TaskTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize TaskTable."""
        super().__init__(*args, **kwargs)
        self._current_pids: set[int] = set()
        self._sort_key: SortKey = SortKey.PID
        self._sort_reverse: bool = False

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key and return it."""
        keys = list(SortKey)
        next_index = (keys.index(self._sort_key) + 1) % len(keys)
        self._sort_key = keys[next_index]
        # Thread counts read best largest first
        self._sort_reverse = self._sort_key is SortKey.THREADS
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the task table."""
        yield DataTable(id="task-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#task-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=7)
        table.add_column("State", key="state", width=12)
        table.add_column("Task Name", key="name", width=25)
        table.add_column("User", key="user", width=15)
        table.add_column("Tasks", key="threads", width=6)

    def update_tasks(self, tasks: list[TaskRecord]) -> None:
        """
        Update the task table with new data.

        Existing rows are updated cell by cell; rows for tasks that exited
        are removed. Tasks without a pid cannot be keyed and are not shown.
        """
        table = self.query_one("#task-table", DataTable)

        keyed = {task.pid: task for task in tasks if task.pid is not None}
        new_pids = set(keyed)

        for pid in self._current_pids - new_pids:
            table.remove_row(str(pid))

        for task in self._sort_tasks(list(keyed.values())):
            row_key = str(task.pid)
            if task.pid in self._current_pids:
                self._update_row(table, row_key, task)
            else:
                self._add_row(table, row_key, task)

        self._current_pids = new_pids

    def _sort_tasks(self, tasks: list[TaskRecord]) -> list[TaskRecord]:
        """Sort tasks based on the current sort key."""
        key_func = {
            SortKey.PID: lambda t: t.pid,
            SortKey.NAME: lambda t: t.name.lower(),
            SortKey.USER: lambda t: t.user.lower(),
            SortKey.THREADS: lambda t: t.threads or 0,
        }
        return sorted(tasks, key=key_func[self._sort_key], reverse=self._sort_reverse)

    def _update_row(self, table: DataTable, row_key: str, task: TaskRecord) -> None:
        """Update an existing row in place."""
        table.update_cell(row_key, "state", task.state)
        table.update_cell(row_key, "name", task.name)
        table.update_cell(row_key, "user", task.user)
        table.update_cell(row_key, "threads", "" if task.threads is None else str(task.threads))

    def _add_row(self, table: DataTable, row_key: str, task: TaskRecord) -> None:
        """Add a new row to the table."""
        table.add_row(
            str(task.pid),
            task.state,
            task.name,
            task.user,
            "" if task.threads is None else str(task.threads),
            key=row_key,
        )


class InspectorApp(App):
    """Full-screen live view of a proc filesystem."""

    TITLE = "procinspect"
    SUB_TITLE = "Live System Inspector"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    #host-info {
        width: 1fr;
        padding-right: 2;
    }

    #usage-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(self, proc: ProcFS | None = None, poll_rate: float = 1.0) -> None:
        """
        Initialize the InspectorApp.

        Args:
            proc: Proc filesystem to watch, the current directory by default.
            poll_rate: Seconds between samples.
        """
        super().__init__()
        self._update_queue: Queue[LiveSnapshot] = Queue()
        self._sampler = LiveSampler(proc or ProcFS(), self._update_queue, poll_rate=poll_rate)

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield TaskTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the sampler when the app is mounted."""
        self._sampler.start()
        self.set_interval(0.5, self._check_for_updates)

    def on_unmount(self) -> None:
        """Stop the sampler however the app exits."""
        self._sampler.stop()

    def _check_for_updates(self) -> None:
        """Drain the queue and show the most recent snapshot."""
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self.update_ui(snapshot)

    def update_ui(self, snapshot: LiveSnapshot) -> None:
        """Update the UI with a live snapshot."""
        self.query_one("#header-stats", HeaderStats).update_stats(snapshot)
        self.query_one(TaskTable).update_tasks(snapshot.tasks)

    def action_sort(self) -> None:
        """Cycle through sort keys."""
        new_sort_key = self.query_one(TaskTable).cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._sampler.stop()
        self.exit()
