"""
gopsctl - list and diagnose Go processes.

This package provides:
- Discovery of Go processes on the local host
- Flat and tree views of the discovered processes
- Diagnostic commands sent to processes running the gops agent
"""

__version__ = "0.1.0"

__all__ = [
    '__version__',
]
