"""
Pytest configuration and shared fixtures for gopsctl tests.
"""

import os
import pytest
from pathlib import Path
from typing import Generator, List

# Add src and the repository root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from gopsctl.process.models import ProcessRecord
from gopsctl.utils.config import GopsctlConfig
from gopsctl.utils.logging import setup_logging
from tests.fixtures.process_fixtures import ProcessFixtures
from tests.fixtures.agent_fixtures import FakeAgent


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route structlog through the stdlib so nothing lands on stdout."""
    setup_logging(log_level="WARNING")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch) -> Path:
    """Keep tests away from the user's config directories."""
    config_home = tmp_path / "xdg"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("GOPS_CONFIG_DIR", raising=False)
    for key in list(os.environ):
        if key.startswith("GOPSCTL_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    return config_home


@pytest.fixture
def port_dir(tmp_path: Path) -> Path:
    """Directory holding agent port files."""
    path = tmp_path / "gops"
    path.mkdir()
    return path


@pytest.fixture
def test_config(port_dir: Path) -> GopsctlConfig:
    """Configuration pointing at the temporary port directory."""
    config = GopsctlConfig()
    config.agent.config_dir = port_dir
    config.agent.timeout = 5.0
    return config


@pytest.fixture
def sample_snapshot() -> List[ProcessRecord]:
    """Parent a with agent-bearing child b."""
    return ProcessFixtures.sample_snapshot()


@pytest.fixture
def fake_agent() -> Generator[FakeAgent, None, None]:
    """Running fake agent, stopped after the test."""
    agent = FakeAgent()
    agent.start()
    yield agent
    agent.stop()
