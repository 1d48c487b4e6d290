"""
Go process discovery.

Enumerates every OS process through psutil and keeps the ones whose
executable carries Go build information.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional

import psutil

from ..agent.portfile import has_agent
from ..utils.config import GopsctlConfig
from ..utils.logging import get_logger
from .buildinfo import read_go_version
from .models import ProcessRecord

logger = get_logger(__name__)


def find_all(config: Optional[GopsctlConfig] = None) -> List[ProcessRecord]:
    """
    Take a snapshot of all Go processes on the host.

    Processes that vanish or deny access while being inspected are skipped.
    The calling process itself is never listed.

    Args:
        config: Configuration (defaults used if None)

    Returns:
        Records in psutil enumeration order
    """
    config = config or GopsctlConfig()
    config_dir = config.agent.resolved_config_dir()
    own_pid = os.getpid()
    # Binaries shared by several processes are scanned once per snapshot
    versions: Dict[str, Optional[str]] = {}
    records: List[ProcessRecord] = []

    for proc in psutil.process_iter(["pid", "ppid", "name", "exe"]):
        info = proc.info
        pid = info["pid"]
        exe = info.get("exe")
        if pid == own_pid or not exe:
            continue

        if exe not in versions:
            try:
                versions[exe] = read_go_version(
                    exe,
                    max_bytes=config.discovery.max_scan_bytes,
                    chunk_size=config.discovery.chunk_size,
                )
            except OSError as e:
                logger.debug("process_skipped", pid=pid, exe=exe, reason=str(e))
                versions[exe] = None
        version = versions[exe]
        if version is None:
            continue

        records.append(ProcessRecord(
            pid=pid,
            ppid=info.get("ppid") or 0,
            exec=info.get("name") or Path(exe).name,
            path=exe,
            agent=has_agent(config_dir, pid),
            build_version=version,
        ))

    logger.debug("discovery_complete", found=len(records))
    return records
