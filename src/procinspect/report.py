"""Text report sections for procinspect."""

import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

from procinspect.extractors import (
    count_processors,
    list_task_ids,
    read_cpu_model,
    read_hostname,
    read_kernel_release,
    read_load_average,
    read_memory,
    read_task,
    read_uptime,
)
from procinspect.metrics import format_uptime, render_bar, sample_cpu
from procinspect.models import TaskRecord
from procinspect.procfs import ProcFS

logger = logging.getLogger(__name__)

HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
CURSOR_UP = "\033[A"
LIVE_LINES = 3

TASK_HEADER = (
    "  PID |        State |                 Task Name |            User | Tasks\n"
    "------+--------------+---------------------------+-----------------+-------\n"
)


def _heading(out: TextIO, title: str) -> None:
    out.write(f"{title}\n{'-' * len(title)}\n")


def _blank(value: int | None) -> str:
    return "" if value is None else str(value)


def format_cpu_line(usage: float) -> str:
    """Format the CPU usage gauge line."""
    return f"CPU Usage:    [{render_bar(usage)}] {usage:.1f}%"


def format_memory_line(proc: ProcFS) -> str:
    """Read meminfo and format the memory usage gauge line."""
    memory = read_memory(proc)
    usage = memory.utilization
    return (
        f"Memory Usage: [{render_bar(usage)}] {usage:.1f}% "
        f"({memory.active_gib:.1f} GB / {memory.total_gib:.1f} GB)"
    )


def format_load_line(proc: ProcFS) -> str:
    """Read loadavg and format it."""
    return f"Load Average (1/5/15 min): {read_load_average(proc)}"


def format_task_row(task: TaskRecord) -> str:
    """Format one fixed-width row of the task table."""
    return (
        f"{_blank(task.pid):>5} | {task.state:>12} | {task.name:>25} | "
        f"{task.user:>15} | {_blank(task.threads):>5} "
    )


def render_system(proc: ProcFS, out: TextIO | None = None) -> None:
    """Print hostname, kernel release and uptime."""
    out = out or sys.stdout
    _heading(out, "System Information")
    out.write(f"Hostname: {read_hostname(proc)}\n")
    out.write(f"Kernel Version: {read_kernel_release(proc)}\n")
    out.write(f"Uptime: {format_uptime(read_uptime(proc))}\n")


def render_hardware(
    proc: ProcFS,
    out: TextIO | None = None,
    interval: float = 1.0,
    wait=None,
) -> None:
    """
    Print CPU model, processor count, load average and usage gauges.

    Args:
        proc: Proc filesystem to read from.
        out: Stream to write to, stdout by default.
        interval: CPU sampling window in seconds.
        wait: Delay function used between the two CPU samples.
    """
    out = out or sys.stdout
    _heading(out, "Hardware Information")
    out.write(f"CPU Model: {read_cpu_model(proc)}\n")
    out.write(f"Processing Units: {count_processors(proc)}\n")
    out.write(format_load_line(proc) + "\n")
    out.write(format_cpu_line(sample_cpu(proc, interval, wait)) + "\n")
    out.write(format_memory_line(proc) + "\n")


def collect_tasks(proc: ProcFS) -> list[TaskRecord]:
    """
    Read every task in the proc root.

    Tasks whose status file disappears before it is read are skipped.
    """
    tasks: list[TaskRecord] = []
    for task_id in list_task_ids(proc):
        task = read_task(proc, task_id)
        if task is None:
            logger.debug("task %s vanished before it could be read", task_id)
            continue
        tasks.append(task)
    return tasks


def render_tasks(proc: ProcFS, out: TextIO | None = None) -> list[TaskRecord]:
    """
    Print the running task count and the task table.

    The count and the rows come from the same directory pass, so they always
    agree. Returns the rendered records.
    """
    out = out or sys.stdout
    tasks = collect_tasks(proc)
    _heading(out, "Task Information")
    out.write(f"Tasks Running: {len(tasks)}\n\n")
    out.write(TASK_HEADER)
    for task in tasks:
        out.write(format_task_row(task) + "\n")
    return tasks


@contextmanager
def hidden_cursor(out: TextIO) -> Iterator[None]:
    """Hide the terminal cursor, restoring it however the block exits."""
    out.write(HIDE_CURSOR)
    out.flush()
    try:
        yield
    finally:
        out.write(SHOW_CURSOR)
        out.flush()


def render_live(
    proc: ProcFS,
    out: TextIO | None = None,
    *,
    stop_event: threading.Event | None = None,
    max_iterations: int | None = None,
    interval: float = 1.0,
) -> int:
    """
    Redraw load average, CPU and memory gauges in place until stopped.

    Each iteration prints three lines, then moves the cursor back up over
    them. The loop ends when stop_event is set or after max_iterations
    redraws; with neither it runs until interrupted. The cursor is hidden
    while the loop runs.

    Returns:
        The number of completed redraws.
    """
    out = out or sys.stdout
    stop_event = stop_event or threading.Event()
    _heading(out, "Live CPU/Memory View")

    iterations = 0
    with hidden_cursor(out):
        try:
            while not stop_event.is_set():
                if max_iterations is not None and iterations >= max_iterations:
                    break
                proc.clear_failures()
                out.write(format_load_line(proc) + "\n")
                usage = sample_cpu(proc, interval, stop_event.wait)
                out.write(format_cpu_line(usage) + "\n")
                out.write(format_memory_line(proc) + "\n")
                out.write(CURSOR_UP * LIVE_LINES + "\r")
                out.flush()
                iterations += 1
        finally:
            # Step below the redraw area so later output does not overwrite it
            out.write("\n" * LIVE_LINES)
    return iterations
