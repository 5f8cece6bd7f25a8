"""Derived metrics: uptime, CPU and memory utilization, gauges."""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from procinspect.extractors import read_cpu_sample
from procinspect.models import CpuSample
from procinspect.procfs import ProcFS

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY

BAR_SEGMENTS = 20
BAR_STEP = 100 // BAR_SEGMENTS


@dataclass(slots=True, frozen=True)
class Uptime:
    """Uptime split into calendar-agnostic units."""

    years: int
    days: int
    hours: int
    minutes: int
    seconds: int


def decompose_uptime(seconds: int) -> Uptime:
    """Split seconds into years, days, hours, minutes and seconds."""
    seconds = max(0, int(seconds))
    years, seconds = divmod(seconds, SECONDS_PER_YEAR)
    days, seconds = divmod(seconds, SECONDS_PER_DAY)
    hours, seconds = divmod(seconds, SECONDS_PER_HOUR)
    minutes, seconds = divmod(seconds, SECONDS_PER_MINUTE)
    return Uptime(years, days, hours, minutes, seconds)


def format_uptime(seconds: int) -> str:
    """
    Format uptime for display.

    Years, days and hours are shown only when nonzero; minutes and seconds
    are always shown.
    """
    uptime = decompose_uptime(seconds)
    parts = []
    if uptime.years:
        parts.append(f"{uptime.years} years")
    if uptime.days:
        parts.append(f"{uptime.days} days")
    if uptime.hours:
        parts.append(f"{uptime.hours} hours")
    parts.append(f"{uptime.minutes} minutes")
    parts.append(f"{uptime.seconds} seconds")
    return ", ".join(parts)


def cpu_utilization(first: CpuSample, second: CpuSample) -> float:
    """
    Return CPU utilization in percent between two samples.

    Defined as 0.0 when the total counter did not move.
    """
    total_delta = second.total - first.total
    idle_delta = second.idle - first.idle
    if total_delta == 0:
        return 0.0
    usage = (1.0 - idle_delta / total_delta) * 100.0
    if math.isnan(usage):
        return 0.0
    return usage


def sample_cpu(
    proc: ProcFS,
    interval: float = 1.0,
    wait: Callable[[float], object] | None = None,
) -> float:
    """
    Measure CPU utilization over interval seconds.

    Args:
        proc: Proc filesystem to read "stat" from.
        interval: Time between the two samples.
        wait: Blocking delay function, time.sleep by default. A stop event's
            wait method works too.
    """
    if wait is None:
        wait = time.sleep
    first = read_cpu_sample(proc)
    wait(interval)
    second = read_cpu_sample(proc)
    return cpu_utilization(first, second)


def render_bar(percent: float) -> str:
    """Render a 20-segment gauge, one '#' per 5%."""
    if math.isnan(percent):
        percent = 0.0
    # Halves round up
    filled = math.floor(percent + 0.5) // BAR_STEP
    filled = min(max(filled, 0), BAR_SEGMENTS)
    return "#" * filled + "-" * (BAR_SEGMENTS - filled)
