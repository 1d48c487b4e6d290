"""
Unit tests for Go process discovery with a faked process table.
"""

import os

import pytest

from gopsctl.process import discovery
from gopsctl.process.discovery import find_all
from gopsctl.process.models import ProcessRecord
from tests.fixtures.process_fixtures import ProcessFixtures


class FakeProc:
    """Minimal stand-in for a psutil.Process from process_iter."""

    def __init__(self, pid, ppid, name, exe):
        self.info = {"pid": pid, "ppid": ppid, "name": name, "exe": exe}


@pytest.fixture
def binaries(tmp_path):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    return {
        "api": ProcessFixtures.write_go_binary(bin_dir, "api", version="go1.21.5"),
        "tip": ProcessFixtures.write_go_binary(bin_dir, "tip", version="devel +abc123 Mon"),
        "bash": ProcessFixtures.write_plain_binary(bin_dir, "bash"),
    }


def install(monkeypatch, procs):
    seen_attrs = []

    def process_iter(attrs):
        seen_attrs.append(attrs)
        return iter(procs)

    monkeypatch.setattr(discovery.psutil, "process_iter", process_iter)
    return seen_attrs


class TestFindAll:
    """Test snapshot construction."""

    def test_only_go_processes_listed(self, monkeypatch, binaries, test_config, port_dir):
        (port_dir / "200").write_text("6060")
        install(monkeypatch, [
            FakeProc(100, 1, "bash", str(binaries["bash"])),
            FakeProc(200, 100, "api", str(binaries["api"])),
            FakeProc(300, 200, "tip", str(binaries["tip"])),
        ])

        assert find_all(test_config) == [
            ProcessRecord(200, 100, "api", str(binaries["api"]), True, "go1.21.5"),
            ProcessRecord(300, 200, "tip", str(binaries["tip"]), False, "devel +abc123 Mon"),
        ]

    def test_unreadable_and_missing_executables_skipped(self, monkeypatch, binaries, test_config, tmp_path):
        install(monkeypatch, [
            FakeProc(10, 1, "kthreadd", None),
            FakeProc(11, 1, "gone", str(tmp_path / "deleted")),
            FakeProc(12, 1, "api", str(binaries["api"])),
        ])
        assert [p.pid for p in find_all(test_config)] == [12]

    def test_own_process_excluded(self, monkeypatch, binaries, test_config):
        install(monkeypatch, [
            FakeProc(os.getpid(), 1, "api", str(binaries["api"])),
            FakeProc(12, 1, "api", str(binaries["api"])),
        ])
        assert [p.pid for p in find_all(test_config)] == [12]

    def test_shared_binary_scanned_once(self, monkeypatch, binaries, test_config):
        calls = []
        real = discovery.read_go_version

        def counting(path, **kwargs):
            calls.append(path)
            return real(path, **kwargs)

        monkeypatch.setattr(discovery, "read_go_version", counting)
        install(monkeypatch, [FakeProc(pid, 1, "api", str(binaries["api"])) for pid in (20, 21, 22)])

        assert len(find_all(test_config)) == 3
        assert calls == [str(binaries["api"])]

    def test_name_falls_back_to_executable(self, monkeypatch, binaries, test_config):
        install(monkeypatch, [FakeProc(30, None, None, str(binaries["api"]))])
        (record,) = find_all(test_config)
        assert record.exec == "api"
        assert record.ppid == 0

    def test_fresh_snapshot_each_call(self, monkeypatch, binaries, test_config, port_dir):
        install(monkeypatch, [FakeProc(40, 1, "api", str(binaries["api"]))])
        assert find_all(test_config)[0].agent is False
        (port_dir / "40").write_text("6061")
        assert find_all(test_config)[0].agent is True
