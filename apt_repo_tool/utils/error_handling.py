"""
Error handling utilities for standardized error logging and handling.

This module maps the exception taxonomy onto coarse command line outcomes
and provides reusable error handling patterns for the CLI layer.
"""

import logging
import sys
import traceback
from functools import wraps
from typing import Any, Callable, TypeVar

from pydantic import ValidationError

from ..exceptions import MalformedInputError, NotFoundError, PolicyError
from .constants import EXIT_BAD_INPUT, EXIT_FORBIDDEN, EXIT_INTERNAL_ERROR, EXIT_NOT_FOUND

# Type variable for generic function decorators
F = TypeVar("F", bound=Callable[..., Any])


def exit_code_for(error: BaseException) -> int:
    """
    Classify an error into an exit code.

    Args:
        error: The exception to classify

    Returns:
        EXIT_BAD_INPUT, EXIT_FORBIDDEN, EXIT_NOT_FOUND or EXIT_INTERNAL_ERROR
    """
    if isinstance(error, (MalformedInputError, ValidationError)):
        return EXIT_BAD_INPUT
    if isinstance(error, PolicyError):
        return EXIT_FORBIDDEN
    if isinstance(error, NotFoundError):
        return EXIT_NOT_FOUND
    return EXIT_INTERNAL_ERROR


def handle_generic_error(error: Exception, operation: str, *, log_traceback: bool = True) -> None:
    """
    Handle errors with standardized logging.

    Bad input, not-found and policy errors are logged as one line; anything
    else is reported as an unexpected failure.

    Args:
        error: The exception to handle
        operation: Description of the operation that failed
        log_traceback: Whether to log the full traceback (at DEBUG)
    """
    code = exit_code_for(error)
    if code == EXIT_BAD_INPUT:
        logging.error("Invalid input during %s: %s", operation, error)
    elif code == EXIT_NOT_FOUND:
        logging.error("Not found during %s: %s", operation, error)
    elif code == EXIT_FORBIDDEN:
        logging.error("Refused during %s: %s", operation, error)
    else:
        logging.error("Unexpected error during %s: %s", operation, error)

    if log_traceback:
        logging.debug("Traceback: %s", traceback.format_exc())


def with_error_handling(operation: str, *, exit_on_error: bool = True) -> Callable[[F], F]:
    """
    Decorator to wrap functions with consistent error handling.

    Args:
        operation: Description of the operation for logging
        exit_on_error: If True, exit with the classified code; otherwise reraise

    Returns:
        Decorator function

    Example:
        @with_error_handling("include operation")
        def include():
            # Implementation
            pass
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:  # pylint: disable=broad-except
                handle_generic_error(e, operation)
                if exit_on_error:
                    sys.exit(exit_code_for(e))
                raise

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = [
    "exit_code_for",
    "handle_generic_error",
    "with_error_handling",
]
