"""
Error handling for vcap-services commands.

Credential lookups never raise for misses; these errors cover the
command line and the local config loader.

Exit Codes:
- 0: Success (credentials found)
- 1: Not found
- 2: Usage error
- 10: Configuration error
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    NOT_FOUND = 1
    USAGE_ERROR = 2
    CONFIG_ERROR = 10
    UNKNOWN_ERROR = 127


class VcapServicesError(Exception):
    """Base exception with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(VcapServicesError):
    """Raised when a configuration file cannot be used."""

    exit_code = ExitCode.CONFIG_ERROR


class CredentialsNotFoundError(VcapServicesError):
    """Raised by strict commands when no credentials resolve."""

    exit_code = ExitCode.NOT_FOUND


F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(*, show_traceback: bool = False) -> Callable[[F], F]:
    """
    Decorator for CLI entry points that converts errors to exit codes.

    Usage:
        @main_with_error_handling()
        def main(argv=None) -> int:
            ...

    Exit codes:
        - VcapServicesError subclasses: the error's exit_code
        - KeyboardInterrupt: 130
        - Other exceptions: 127
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except VcapServicesError as e:
                from vcap_services.cli.ux import error as print_error

                logger.error(
                    "command_error",
                    error_type=type(e).__name__,
                    exit_code=int(e.exit_code),
                    **e.details,
                )
                print_error(format_error_message(e))
                return e.exit_code
            except KeyboardInterrupt:
                logger.info("command_interrupted")
                return 130
            except Exception as e:
                logger.error("unexpected_error", error_type=type(e).__name__)
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: VcapServicesError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
