"""
Logging configuration for gopsctl.

This module provides centralized logging setup with:
- Structured logging through structlog
- Rich console output on stderr, keeping stdout free for command output
- Optional JSON rendering for machine consumption
"""

import logging
from typing import Optional, Dict, Any
import structlog
from rich.logging import RichHandler
from rich.console import Console


# Diagnostics go to stderr; stdout carries listings and agent output
console = Console(stderr=True)


def setup_logging(
    app_name: str = "gopsctl",
    log_level: str = "WARNING",
    log_format: str = "console",
    stream: Optional[Any] = None
) -> Dict[str, Any]:
    """
    Set up logging for the application.

    Args:
        app_name: Application name for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "console" for rich output, "json" for JSON lines
        stream: Optional stream overriding stderr

    Returns:
        Dictionary with the main logger and the effective configuration
    """
    global console
    if stream is not None:
        console = Console(file=stream)

    enable_json = log_format == "json"
    renderer = (
        structlog.processors.JSONRenderer()
        if enable_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Set up root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_json:
        handler: logging.Handler = logging.StreamHandler(console.file)
    else:
        handler = RichHandler(
            console=console,
            show_time=False,
            show_path=False,
            rich_tracebacks=False,
        )
    handler.setFormatter(logging.Formatter('%(message)s'))
    root_logger.addHandler(handler)

    main_logger = structlog.get_logger(app_name)
    main_logger.debug(
        "logging_initialized",
        app_name=app_name,
        log_level=log_level,
        log_format=log_format,
    )

    return {
        'logger': main_logger,
        'console': console,
        'config': {
            'app_name': app_name,
            'log_level': log_level,
            'log_format': log_format,
        }
    }


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance by name."""
    return structlog.get_logger(name)


# Export main setup function and utilities
__all__ = [
    'setup_logging',
    'get_logger',
]
