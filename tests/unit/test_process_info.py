"""
Unit tests for single process inspection.
"""

import os
from collections import namedtuple

import psutil
import pytest

from gopsctl.process import info
from gopsctl.process.info import (
    ConnectionInfo,
    ProcessDetails,
    collect_process_details,
    format_process_details,
)
from gopsctl.utils.errors import UnresolvableTarget

CpuTimes = namedtuple("CpuTimes", "user system")
Conn = namedtuple("Conn", "laddr raddr status")


class FakeProcess:
    """psutil.Process stand-in where selected fields are denied."""

    def __init__(self, pid, denied=()):
        self.pid = pid
        self.denied = set(denied)

    def _check(self, field):
        if field in self.denied:
            raise psutil.AccessDenied(self.pid)

    def ppid(self):
        self._check("ppid")
        return 1

    def num_threads(self):
        self._check("num_threads")
        return 12

    def memory_percent(self):
        self._check("memory_percent")
        return 1.23456

    def cpu_times(self):
        self._check("cpu_percent")
        return CpuTimes(user=3.0, system=1.0)

    def create_time(self):
        return 1000.0

    def username(self):
        self._check("username")
        return "gopher"

    def cmdline(self):
        self._check("cmdline")
        return ["/usr/local/bin/api", "-listen", ":8080"]

    def net_connections(self, kind="inet"):
        self._check("connections")
        return [
            Conn(("127.0.0.1", 8080), ("127.0.0.1", 51234), "ESTABLISHED"),
            Conn(("0.0.0.0", 8080), (), "LISTEN"),
        ]


@pytest.fixture
def fake_process(monkeypatch):
    def install(denied=()):
        monkeypatch.setattr(info.psutil, "Process", lambda pid: FakeProcess(pid, denied))
        monkeypatch.setattr(info.time, "time", lambda: 1040.0)
    return install


class TestCollectProcessDetails:
    """Test field collection."""

    def test_all_fields(self, fake_process):
        fake_process()
        details = collect_process_details(99)
        assert details.ppid == 1
        assert details.num_threads == 12
        assert details.cpu_percent == pytest.approx(10.0)
        assert details.cmdline == "/usr/local/bin/api -listen :8080"
        assert details.connections[1] == ConnectionInfo("0.0.0.0", 8080, "", 0, "LISTEN")

    def test_denied_fields_omitted_others_kept(self, fake_process):
        fake_process(denied={"username", "connections", "num_threads"})
        details = collect_process_details(99)
        assert details.username is None
        assert details.connections is None
        assert details.num_threads is None
        assert details.ppid == 1
        assert details.memory_percent == 1.23456

    def test_missing_process(self, monkeypatch):
        def no_such(pid):
            raise psutil.NoSuchProcess(pid)

        monkeypatch.setattr(info.psutil, "Process", no_such)
        with pytest.raises(UnresolvableTarget, match="cannot read process info"):
            collect_process_details(424242)

    def test_current_process(self):
        details = collect_process_details(os.getpid())
        assert details.ppid == os.getppid()
        assert details.num_threads >= 1


class TestFormatProcessDetails:
    """Test output layout."""

    def test_fixed_order_and_formats(self, fake_process):
        fake_process()
        lines = format_process_details(collect_process_details(99))
        assert lines == [
            "parent PID:\t1",
            "threads:\t12",
            "memory usage:\t1.235%",
            "cpu usage:\t10.000%",
            "username:\tgopher",
            "cmd+args:\t/usr/local/bin/api -listen :8080",
            "local/remote:\t127.0.0.1:8080 <-> 127.0.0.1:51234 (ESTABLISHED)",
            "local/remote:\t0.0.0.0:8080 <-> :0 (LISTEN)",
        ]

    def test_missing_fields_silently_skipped(self):
        lines = format_process_details(ProcessDetails(pid=5, ppid=2, username="root"))
        assert lines == ["parent PID:\t2", "username:\troot"]

    def test_no_connections(self):
        assert format_process_details(ProcessDetails(pid=5, connections=[])) == []
