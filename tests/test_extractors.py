"""Tests for the proc field extractors."""

import os

import pytest

from procinspect.extractors import (
    CPU_STAT_RULE,
    MEM_ACTIVE_RULE,
    MEM_TOTAL_RULE,
    TASK_NAME_RULE,
    TASK_PID_RULE,
    TASK_STATE_RULE,
    TASK_THREADS_RULE,
    count_processors,
    list_task_ids,
    lookup_user,
    parse_float,
    parse_int,
    read_cpu_model,
    read_cpu_sample,
    read_hostname,
    read_kernel_release,
    read_load_average,
    read_memory,
    read_task,
    read_uptime,
)
from procinspect.models import CpuSample, LoadAverage, MemorySample


class TestNumberParsing:
    """Tests for the lenient number parsers."""

    @pytest.mark.parametrize(
        "text,expected",
        [("1234", 1234), ("90061.54", 90061), ("12abc", 12), ("abc", 0), ("", 0), (None, 0)],
    )
    def test_parse_int(self, text, expected):
        """Test parse_int reads the leading integer only."""
        assert parse_int(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [("16777216", 16777216.0), ("1.5kB", 1.5), ("kB", 0.0), (None, 0.0)],
    )
    def test_parse_float(self, text, expected):
        """Test parse_float reads the leading number only."""
        assert parse_float(text) == expected


class TestFieldRules:
    """Each label/index rule against a real-looking kernel line."""

    def test_task_name_rule(self):
        assert TASK_NAME_RULE.extract("Name:\tkworker/u8:2 ") == "kworker/u8"

    def test_task_state_rule(self):
        assert TASK_STATE_RULE.extract("State:\tS (sleeping) ") == "sleeping"

    def test_task_pid_rule_skips_ppid_and_tracer(self):
        assert TASK_PID_RULE.matches("Pid:\t42 ")
        assert not TASK_PID_RULE.matches("PPid:\t1 ")
        assert not TASK_PID_RULE.matches("TracerPid:\t0 ")
        assert TASK_PID_RULE.extract("Pid:\t42 ") == "42"

    def test_task_threads_rule(self):
        assert TASK_THREADS_RULE.extract("Threads:\t17 ") == "17"

    def test_mem_rules(self):
        assert MEM_TOTAL_RULE.extract("MemTotal:       16777216 kB ") == "16777216"
        assert MEM_ACTIVE_RULE.matches("Active:          4194304 kB ")
        assert not MEM_ACTIVE_RULE.matches("Active(anon):    1048576 kB ")

    def test_cpu_stat_rule_idle_column(self):
        assert CPU_STAT_RULE.extract("cpu  1 2 3 900 5 6 7 8 9 10 ") == "900"

    def test_short_line_yields_none(self):
        assert TASK_STATE_RULE.extract("State: ") is None


class TestIdentity:
    """Tests for hostname, kernel release and uptime."""

    def test_hostname(self, fake_proc):
        assert read_hostname(fake_proc.proc) == "testhost"

    def test_kernel_release(self, fake_proc):
        assert read_kernel_release(fake_proc.proc) == "6.1.0-test"

    def test_uptime_drops_fraction(self, fake_proc):
        assert read_uptime(fake_proc.proc) == 90061

    def test_missing_identity_files(self, empty_proc):
        assert read_hostname(empty_proc.proc) == ""
        assert read_uptime(empty_proc.proc) == 0
        assert len(empty_proc.proc.failures) == 2


class TestHardware:
    """Tests for cpuinfo, loadavg, stat and meminfo extraction."""

    def test_cpu_model(self, fake_proc):
        assert read_cpu_model(fake_proc.proc) == "Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz"

    def test_cpu_model_missing_label(self, fake_proc):
        fake_proc.write("cpuinfo", "processor\t: 0\nBogoMIPS\t: 48.00\n")
        assert read_cpu_model(fake_proc.proc) == ""
        assert fake_proc.proc.failures[-1].reason == "missing 'model name'"

    def test_count_processors(self, fake_proc):
        assert count_processors(fake_proc.proc) == 2

    def test_load_average(self, fake_proc):
        assert read_load_average(fake_proc.proc) == LoadAverage("0.52", "0.58", "0.59")
        assert str(read_load_average(fake_proc.proc)) == "0.52 0.58 0.59"

    def test_load_average_missing(self, empty_proc):
        assert read_load_average(empty_proc.proc) == LoadAverage()

    def test_cpu_sample_sums_first_nine_columns(self, fake_proc):
        fake_proc.write("stat", "cpu  1 2 3 4 5 6 7 8 9 1000\ncpu0 1 1 1 1 1 1 1 1 1 1\n")
        assert read_cpu_sample(fake_proc.proc) == CpuSample(total=45, idle=4)

    def test_cpu_sample_uses_aggregate_line(self, fake_proc):
        assert read_cpu_sample(fake_proc.proc) == CpuSample(total=1000, idle=900)

    def test_cpu_sample_missing(self, empty_proc):
        assert read_cpu_sample(empty_proc.proc) == CpuSample(total=0, idle=0)

    def test_memory(self, fake_proc):
        assert read_memory(fake_proc.proc) == MemorySample(total_kb=16777216, active_kb=4194304)

    def test_memory_missing_active(self, fake_proc):
        fake_proc.write("meminfo", "MemTotal:  1024 kB\n")
        memory = read_memory(fake_proc.proc)
        assert memory.total_kb == 1024
        assert memory.active_kb == 0
        assert [f.reason for f in fake_proc.proc.failures] == ["missing 'Active:'"]


class TestTasks:
    """Tests for task enumeration and status parsing."""

    def test_list_task_ids_only_numeric(self, fake_proc):
        assert sorted(list_task_ids(fake_proc.proc), key=int) == ["1", "42"]

    def test_zero_is_not_a_task(self, fake_proc):
        (fake_proc.root / "0").mkdir()
        assert "0" not in list_task_ids(fake_proc.proc)

    def test_read_task(self, fake_proc):
        task = read_task(fake_proc.proc, "42")
        assert task is not None
        assert task.pid == 42
        assert task.state == "running"
        assert task.name == "python3"
        assert task.threads == 4
        assert task.user == lookup_user(os.getuid())

    def test_long_name_is_truncated(self, fake_proc):
        fake_proc.add_task(7, name="a" * 40)
        task = read_task(fake_proc.proc, "7")
        assert task.name == "a" * 25

    def test_missing_threads_line(self, fake_proc):
        fake_proc.add_task(9, omit=("Threads",))
        task = read_task(fake_proc.proc, "9")
        assert task is not None
        assert task.threads is None
        assert task.pid == 9
        assert [f.reason for f in fake_proc.proc.failures] == ["missing 'Threads:'"]

    def test_vanished_task(self, fake_proc):
        fake_proc.remove_task(42)
        assert read_task(fake_proc.proc, "42") is None


def test_lookup_user_unknown_uid():
    """Test a uid without a passwd entry falls back to the number."""
    assert lookup_user(2**31 - 2) == str(2**31 - 2)


def test_lookup_user_none():
    """Test an unknown owner renders blank."""
    assert lookup_user(None) == ""
