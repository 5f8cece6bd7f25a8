"""Background sampling engine for the interactive dashboard."""

import logging
import threading
from dataclasses import dataclass
from queue import Queue

from procinspect.extractors import (
    read_cpu_sample,
    read_hostname,
    read_load_average,
    read_memory,
    read_uptime,
)
from procinspect.metrics import cpu_utilization
from procinspect.models import CpuSample, LoadAverage, MemorySample, TaskRecord
from procinspect.procfs import ProcFS
from procinspect.report import collect_tasks

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LiveSnapshot:
    """Snapshot of overall system state."""

    hostname: str
    uptime_seconds: int
    load_avg: LoadAverage
    cpu_percent: float
    memory: MemorySample
    tasks: list[TaskRecord]
    failed_reads: int


class LiveSampler:
    """
    Sampler that reads the proc filesystem on a fixed cadence.

    Runs in a separate daemon thread and pushes LiveSnapshots to a
    thread-safe Queue. CPU utilization is measured between consecutive polls,
    so the first snapshot always reports 0%.
    """

    def __init__(
        self,
        proc: ProcFS,
        update_queue: Queue[LiveSnapshot],
        poll_rate: float = 1.0,
    ) -> None:
        """
        Initialize the LiveSampler.

        Args:
            proc: Proc filesystem to sample.
            update_queue: Thread-safe queue to push updates to.
            poll_rate: How often to poll (in seconds). Default 1.0s.
        """
        self._proc = proc
        self._queue = update_queue
        self._poll_rate = poll_rate
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._previous: CpuSample | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(0.1, value)

    @property
    def is_running(self) -> bool:
        """Check if the sampler thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampling thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="LiveSampler",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the sampling thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(self.collect_snapshot())
            except Exception:
                # Keep the loop alive; the next poll may succeed
                logger.exception("sampling %s failed", self._proc.root)

            self._stop_event.wait(timeout=self._poll_rate)

    def collect_snapshot(self) -> LiveSnapshot:
        """Collect a snapshot of the current system state."""
        self._proc.clear_failures()

        sample = read_cpu_sample(self._proc)
        previous = self._previous or sample
        self._previous = sample

        return LiveSnapshot(
            hostname=read_hostname(self._proc),
            uptime_seconds=read_uptime(self._proc),
            load_avg=read_load_average(self._proc),
            cpu_percent=cpu_utilization(previous, sample),
            memory=read_memory(self._proc),
            tasks=collect_tasks(self._proc),
            failed_reads=len(self._proc.failures),
        )
