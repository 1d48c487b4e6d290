"""
Test fixtures for gopsctl.

Provides reusable test data and fake collaborators.
"""

from .process_fixtures import ProcessFixtures
from .agent_fixtures import FakeAgent

__all__ = [
    'ProcessFixtures',
    'FakeAgent',
]
