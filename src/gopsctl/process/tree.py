"""
Process tree construction.

PUBLIC API:
  - build_parent_index: Group a snapshot by parent pid
  - build_process_tree: Build a rich Tree from a snapshot
  - render_tree: Render a tree to plain text
  - format_node_label: Label used for one process node
"""

import io
from typing import Dict, List, Optional, Sequence, Set

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from ..utils.logging import get_logger
from .listing import AGENT_GLYPH, shorten_version
from .models import ProcessRecord

logger = get_logger(__name__)

ROOT_LABEL = "..."

ParentIndex = Dict[int, List[ProcessRecord]]


def build_parent_index(processes: Sequence[ProcessRecord]) -> ParentIndex:
    """Map each parent pid to its children, keeping snapshot order."""
    index: ParentIndex = {}
    for p in processes:
        index.setdefault(p.ppid, []).append(p)
    return index


def format_node_label(process: ProcessRecord) -> str:
    """Label for a process node: pid (exec) {version}, agent processes flagged."""
    label = f"{process.pid} ({process.exec}) {{{shorten_version(process.build_version)}}}"
    if process.agent:
        return f"[{AGENT_GLYPH}] {label}"
    return label


def _expand(
    anchor: int,
    process: Optional[ProcessRecord],
    index: ParentIndex,
    visited: Set[int],
    parent: Tree,
) -> None:
    """
    Attach the subtree keyed by anchor under parent.

    With process None the anchor is a parent pid that was not enumerated and
    gets a bare numeric node; otherwise the node describes process. The
    anchor is marked before recursing, so cycles stop at the first repeat.
    """
    if anchor in visited:
        return
    visited.add(anchor)

    if process is None:
        node = parent.add(Text(str(anchor)))
    else:
        node = parent.add(Text(format_node_label(process)))

    for child in index.get(anchor, []):
        _expand(child.pid, child, index, visited, node)


def build_process_tree(processes: Sequence[ProcessRecord]) -> Tree:
    """
    Build the process tree for a snapshot.

    Parents that were not enumerated become numeric group nodes at the top
    level, in the order their first child appears in the snapshot. Processes
    only reachable through a parent cycle (including a process listed as its
    own parent) are attached directly under the root. Every process appears
    exactly once.
    """
    index = build_parent_index(processes)
    known_pids = {p.pid for p in processes}
    visited: Set[int] = set()
    root = Tree(Text(ROOT_LABEL))

    for p in processes:
        if p.ppid not in known_pids:
            _expand(p.ppid, None, index, visited, root)

    for p in processes:
        if p.pid not in visited:
            logger.debug("process_in_parent_cycle", pid=p.pid, ppid=p.ppid)
            _expand(p.pid, p, index, visited, root)

    return root


def render_tree(tree: Tree, width: int = 1000) -> str:
    """Render a tree to plain text without colour or trailing whitespace."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width,
        color_system=None,
        force_terminal=False,
        highlight=False,
        emoji=False,
    )
    console.print(tree)
    return "\n".join(line.rstrip() for line in buffer.getvalue().splitlines())
