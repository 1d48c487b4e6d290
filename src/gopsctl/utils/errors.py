"""
Error handling framework for gopsctl.

This module provides:
- Hierarchical exception classes
- Error context preservation
- Structured error responses
- A context manager that wraps unexpected failures
"""

from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from contextlib import contextmanager
import traceback

from .logging import get_logger


logger = get_logger("gopsctl.errors")


class ErrorSeverity(Enum):
    """Error severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    SYSTEM = "system"
    NETWORK = "network"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    EXTERNAL_SERVICE = "external_service"
    USER_INPUT = "user_input"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Context information for an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    component: Optional[str] = None
    operation: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None


class GopsctlError(Exception):
    """Base exception for all gopsctl errors."""

    code: str = "GOPSCTL_ERROR"
    default_message: str = "An error occurred in gopsctl"
    severity: ErrorSeverity = ErrorSeverity.ERROR
    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        **kwargs
    ):
        """Initialize gopsctl error."""
        self.message = message or self.default_message
        self.context = context or ErrorContext()
        self.cause = cause
        self.kwargs = kwargs

        if not self.context.stack_trace and cause is not None:
            self.context.stack_trace = "".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            )

        super().__init__(self.message)

    def get_suggestions(self) -> List[str]:
        """Get error resolution suggestions."""
        return []

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "severity": self.severity.value,
                "category": self.category.value,
                "suggestions": self.get_suggestions(),
                "context": {
                    "timestamp": self.context.timestamp.isoformat(),
                    "component": self.context.component,
                    "operation": self.context.operation,
                    "metadata": self.context.metadata
                }
            }
        }


# Configuration Errors

class ConfigurationError(GopsctlError):
    """Configuration errors."""
    code = "CONFIG_ERROR"
    default_message = "Configuration error"
    category = ErrorCategory.CONFIGURATION

    def get_suggestions(self) -> List[str]:
        return [
            "Check your configuration file syntax",
            "Check GOPSCTL_* environment variables"
        ]


# Network Errors

class NetworkError(GopsctlError):
    """Network-related errors."""
    code = "NETWORK_ERROR"
    default_message = "Network error occurred"
    category = ErrorCategory.NETWORK


class AgentConnectionError(NetworkError):
    """The agent could not be reached or the exchange broke off."""
    code = "AGENT_CONNECTION_ERROR"
    default_message = "Failed to communicate with agent"

    def get_suggestions(self) -> List[str]:
        return [
            "Check that the target process is still running",
            "Check that the agent is listening on the resolved address"
        ]


# Validation Errors

class ValidationError(GopsctlError):
    """Input validation errors."""
    code = "VALIDATION_ERROR"
    default_message = "Validation error"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING

    def __init__(self, field: str, value: Any, constraint: str, **kwargs):
        self.field = field
        self.value = value
        self.constraint = constraint
        message = f"invalid {field} {value!r}: {constraint}"
        super().__init__(message, **kwargs)


class InvalidAddress(ValidationError):
    """Malformed host:port target."""
    code = "INVALID_ADDRESS"
    category = ErrorCategory.USER_INPUT

    def __init__(self, address: str, constraint: str, **kwargs):
        super().__init__("address", address, constraint, **kwargs)


# Routing Errors

class UnresolvableTarget(GopsctlError):
    """A pid that does not exist or runs no agent."""
    code = "UNRESOLVABLE_TARGET"
    default_message = "Target could not be resolved"
    category = ErrorCategory.USER_INPUT

    def __init__(self, message: Optional[str] = None, pid: Optional[int] = None, **kwargs):
        self.pid = pid
        super().__init__(message, **kwargs)

    def get_suggestions(self) -> List[str]:
        return [
            "Run gopsctl without arguments to list processes running the agent",
            "Pass host:port directly if the agent listens on a known address"
        ]


class UnknownCommand(GopsctlError):
    """Command name absent from the registry."""
    code = "UNKNOWN_COMMAND"
    default_message = "unknown subcommand"
    category = ErrorCategory.USER_INPUT
    severity = ErrorSeverity.WARNING

    def __init__(self, name: str, **kwargs):
        self.name = name
        super().__init__(f"unknown subcommand {name!r}", **kwargs)


class HandlerFailure(GopsctlError):
    """Failure reported by a dispatched command."""
    code = "HANDLER_FAILURE"
    default_message = "Command failed"
    category = ErrorCategory.EXTERNAL_SERVICE


# Error Context Manager

@contextmanager
def error_context(
    component: str,
    operation: str,
    reraise: bool = True,
    **metadata
):
    """
    Context manager for error handling with context.

    Args:
        component: Component name
        operation: Operation name
        reraise: Whether to reraise exceptions
        **metadata: Additional context metadata
    """
    context = ErrorContext(
        component=component,
        operation=operation,
        metadata=metadata
    )

    try:
        yield context
    except GopsctlError as e:
        # Update existing error context
        e.context.component = e.context.component or component
        e.context.operation = e.context.operation or operation
        e.context.metadata.update(metadata)
        logger.debug(
            "gopsctl_error_in_context",
            error=e.to_dict()
        )
        if reraise:
            raise
    except Exception as e:
        wrapped = GopsctlError(
            message=str(e),
            context=context,
            cause=e
        )
        logger.debug(
            "unexpected_error_in_context",
            error=wrapped.to_dict(),
            exc_info=True
        )
        if reraise:
            raise wrapped from e


# Export public API
__all__ = [
    # Base classes
    'GopsctlError',
    'ErrorContext',
    'ErrorSeverity',
    'ErrorCategory',

    # Error types
    'ConfigurationError',
    'NetworkError',
    'AgentConnectionError',
    'ValidationError',
    'InvalidAddress',
    'UnresolvableTarget',
    'UnknownCommand',
    'HandlerFailure',

    # Utilities
    'error_context',
]
