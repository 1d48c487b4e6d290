"""Diagnostic agent addressing and transport."""

from .target import CommandTarget, parse_address, resolve_target
from .client import AgentClient
from .signals import Signal

__all__ = ["CommandTarget", "parse_address", "resolve_target", "AgentClient", "Signal"]
