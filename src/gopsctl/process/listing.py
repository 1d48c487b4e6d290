"""
Flat process listing.

Renders a snapshot as a table whose columns are padded to the widest value
observed in each column, so rows line up on a fixed-width terminal.
"""

import re
from typing import List, Sequence

from .models import ProcessRecord

AGENT_GLYPH = "*"

_DEVEL_RE = re.compile(r"devel\s+\+\w+")


def shorten_version(version: str) -> str:
    """
    Collapse a development build version to its short form.

    "devel +abc123 Tue Jan 1 ..." becomes "devel +abc123"; release versions
    and devel strings without a "+revision" token are returned unchanged.
    """
    if not version.startswith("devel"):
        return version
    match = _DEVEL_RE.search(version)
    if match is None:
        return version
    return match.group(0)


def pad(s: str, total: int) -> str:
    """Right-pad s with spaces to total characters. Never truncates."""
    if len(s) >= total:
        return s
    return s + " " * (total - len(s))


def format_process_table(processes: Sequence[ProcessRecord]) -> List[str]:
    """
    Format processes as aligned rows.

    Columns are pid, ppid, executable (immediately followed by the agent
    glyph or a blank), normalized version and full path.
    """
    records = [p.with_version(shorten_version(p.build_version)) for p in processes]
    if not records:
        return []

    max_pid = max(len(str(p.pid)) for p in records)
    max_ppid = max(len(str(p.ppid)) for p in records)
    max_exec = max(len(p.exec) for p in records)
    max_version = max(len(p.build_version) for p in records)

    lines = []
    for p in records:
        lines.append(
            pad(str(p.pid), max_pid)
            + " "
            + pad(str(p.ppid), max_ppid)
            + " "
            + pad(p.exec, max_exec)
            + (AGENT_GLYPH if p.agent else " ")
            + " "
            + pad(p.build_version, max_version)
            + " "
            + p.path
        )
    return lines
