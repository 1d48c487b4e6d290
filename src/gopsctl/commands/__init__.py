"""
Diagnostic commands.

The registry maps command names to handlers; dispatch() routes a name to
its handler together with a resolved target.
"""

from .registry import (
    Command,
    CommandSection,
    CommandRegistry,
    make_registry,
    build_registry,
    dispatch,
)

__all__ = [
    'Command',
    'CommandSection',
    'CommandRegistry',
    'make_registry',
    'build_registry',
    'dispatch',
]
