"""
Process data models.

ProcessRecord is a point-in-time snapshot of one OS process running a Go
binary. Records are produced fresh by every discovery call and never mutated.
"""

from dataclasses import dataclass, replace

@dataclass(frozen=True)
class ProcessRecord:
    """One discovered Go process."""
    pid: int
    ppid: int
    exec: str
    path: str
    agent: bool = False
    build_version: str = ""

    def with_version(self, build_version: str) -> "ProcessRecord":
        """Copy of this record carrying a different build version."""
        return replace(self, build_version=build_version)

