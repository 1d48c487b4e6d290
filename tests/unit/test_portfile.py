"""
Unit tests for agent port files.
"""

import os

import pytest

from gopsctl.agent import portfile
from gopsctl.agent.portfile import has_agent, port_file_path, read_port
from gopsctl.utils.errors import UnresolvableTarget


class TestPortFiles:
    """Test reading advertised agent ports."""

    def test_read_port(self, port_dir):
        pid = os.getpid()
        port_file_path(port_dir, pid).write_text("37021")
        assert read_port(port_dir, pid) == 37021
        assert has_agent(port_dir, pid)

    def test_surrounding_whitespace_allowed(self, port_dir):
        pid = os.getpid()
        port_file_path(port_dir, pid).write_text("  6060\n")
        assert read_port(port_dir, pid) == 6060

    def test_missing_port_file(self, port_dir):
        pid = os.getpid()
        assert not has_agent(port_dir, pid)
        with pytest.raises(UnresolvableTarget, match="not running the agent"):
            read_port(port_dir, pid)

    @pytest.mark.parametrize("content", ["", "abc", "-5", "70000", "60 60"])
    def test_invalid_content(self, port_dir, content):
        pid = os.getpid()
        port_file_path(port_dir, pid).write_text(content)
        with pytest.raises(UnresolvableTarget, match="invalid port"):
            read_port(port_dir, pid)

    def test_process_not_found(self, port_dir, monkeypatch):
        monkeypatch.setattr(portfile.psutil, "pid_exists", lambda pid: False)
        port_file_path(port_dir, 424242).write_text("6060")
        with pytest.raises(UnresolvableTarget, match="process 424242 not found") as exc_info:
            read_port(port_dir, 424242)
        assert exc_info.value.pid == 424242

    def test_pid_out_of_range(self, port_dir):
        pid = 99999999999999999999
        with pytest.raises(UnresolvableTarget, match=f"process {pid} not found"):
            read_port(port_dir, pid)
