"""
Error handling utilities for standardized error logging and handling.

This module provides reusable error handling patterns shared by the
export and sync commands.
"""

import logging
import sys
import traceback
from functools import wraps
from typing import Any, Callable, TypeVar

import httpx

from ..exceptions import MigrationError

# Type variable for generic function decorators
F = TypeVar("F", bound=Callable[..., Any])


def handle_http_error(error: httpx.HTTPError, operation: str, *, log_traceback: bool = True) -> None:
    """
    Handle HTTP errors with standardized logging.

    Args:
        error: The HTTP error to handle
        operation: Description of the operation that failed
        log_traceback: Whether to log the full traceback
    """
    error_message = str(error)

    if "403" in error_message:
        logging.error(
            "Permission denied during %s: the token is missing the required scopes "
            "(read:packages for the source, write:packages for the target).",
            operation,
        )
    elif "401" in error_message:
        logging.error(
            "Authentication failed during %s: Invalid or expired token. "
            "Please check the token options or GHMP_* environment variables.",
            operation,
        )
    elif "404" in error_message:
        logging.error("Resource not found during %s: %s", operation, error)
    elif "500" in error_message or "502" in error_message or "503" in error_message:
        logging.error("Server error during %s: %s", operation, error)
    else:
        logging.error("HTTP error during %s: %s", operation, error)

    if log_traceback:
        logging.debug("Traceback: %s", traceback.format_exc())


def handle_migration_error(error: MigrationError, operation: str) -> None:
    """
    Handle expected migration failures; these carry their own context so no traceback is logged.

    Args:
        error: The migration error to handle
        operation: Description of the operation that failed
    """
    logging.error("%s failed: %s", operation.capitalize(), error)
    if error.__cause__ is not None:
        logging.debug("Caused by: %r", error.__cause__)


def handle_generic_error(error: Exception, operation: str, *, log_traceback: bool = True) -> None:
    """
    Handle generic errors with standardized logging.

    Args:
        error: The exception to handle
        operation: Description of the operation that failed
        log_traceback: Whether to log the full traceback
    """
    logging.error("Unexpected error during %s: %s", operation, error)

    if log_traceback:
        logging.error("Traceback: %s", traceback.format_exc())


def with_error_handling(
    operation: str, *, exit_on_error: bool = False, exit_code: int = 1, reraise: bool = True
) -> Callable[[F], F]:
    """
    Decorator to wrap functions with consistent error handling.

    Args:
        operation: Description of the operation for logging
        exit_on_error: If True, call sys.exit on error
        exit_code: Exit code to use if exit_on_error is True
        reraise: If True, reraise the exception after logging (unless exiting)

    Returns:
        Decorator function

    Example:
        @with_error_handling("export packages", exit_on_error=True)
        def export_packages():
            ...
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except httpx.HTTPError as e:
                handle_http_error(e, operation)
                if exit_on_error:
                    sys.exit(exit_code)
                if reraise:
                    raise
            except MigrationError as e:
                handle_migration_error(e, operation)
                if exit_on_error:
                    sys.exit(exit_code)
                if reraise:
                    raise
            except Exception as e:
                handle_generic_error(e, operation)
                if exit_on_error:
                    sys.exit(exit_code)
                if reraise:
                    raise
            return None

        return wrapper  # type: ignore[return-value]

    return decorator


def log_and_exit(message: str, exit_code: int = 1) -> None:
    """
    Log an error message and exit the program.

    Args:
        message: Error message to log
        exit_code: Exit code (default: 1)
    """
    logging.error(message)
    sys.exit(exit_code)


__all__ = [
    "handle_http_error",
    "handle_migration_error",
    "handle_generic_error",
    "with_error_handling",
    "log_and_exit",
]
