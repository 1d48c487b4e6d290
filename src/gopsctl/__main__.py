#!/usr/bin/env python3
"""
gopsctl - Main entry point for python -m gopsctl
"""

from gopsctl.cli import run

if __name__ == "__main__":
    run()
