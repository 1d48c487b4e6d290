"""
Process discovery and presentation.

PUBLIC API:
  - ProcessRecord: One discovered Go process
  - find_all: Snapshot of all Go processes
  - shorten_version / pad / format_process_table: Flat listing
  - build_parent_index / build_process_tree / render_tree: Tree view
  - collect_process_details / format_process_details: Single process inspection
"""

from .models import ProcessRecord
from .discovery import find_all
from .listing import shorten_version, pad, format_process_table
from .tree import build_parent_index, build_process_tree, render_tree
from .info import ProcessDetails, collect_process_details, format_process_details

__all__ = [
    'ProcessRecord',
    'find_all',
    'shorten_version',
    'pad',
    'format_process_table',
    'build_parent_index',
    'build_process_tree',
    'render_tree',
    'ProcessDetails',
    'collect_process_details',
    'format_process_details',
]
