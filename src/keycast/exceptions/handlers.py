"""
Translating low-level failures into keycast errors.

Loading and startup raise ``KeycastError`` subclasses; the mapping
pipeline never raises, it logs and returns False. The helpers here are
for the loading side:

| Situation | Code |
|-----------|------|
| YAML did not parse | `raise wrap_yaml_error(e, str(path)) from e` |
| Schema rejected the data | `raise wrap_pydantic_error(e, str(path)) from e` |
| Many independent steps | `collector = collect_errors("compile shape scripts")` |
| Log a failing step | `with ErrorContext("start devices"): ...` |
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from pydantic import ValidationError

from .base import KeycastError
from .config import ConfigFileInvalidError, ConfigValidationError

logger = logging.getLogger(__name__)


class ErrorContext:
    """
    Log a failure of the wrapped block with the operation name.

    KeycastErrors are logged by their technical message, anything else
    with a traceback. The exception propagates unless ``re_raise`` is False.
    """

    def __init__(self, operation: str, logger_instance: Optional[logging.Logger] = None, re_raise: bool = True):
        self.operation = operation
        self.logger = logger_instance or logger
        self.re_raise = re_raise
        self.error: Optional[BaseException] = None

    def __enter__(self) -> "ErrorContext":
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_val is None:
            self.logger.debug(f"Completed: {self.operation}")
            return False

        self.error = exc_val
        if isinstance(exc_val, KeycastError):
            self.logger.error(f"Failed to {self.operation}: {exc_val.technical_message}")
        else:
            self.logger.error(f"Failed to {self.operation}: {exc_val}", exc_info=True)
        return not self.re_raise


def wrap_yaml_error(error: Exception, file_path: str) -> KeycastError:
    """ConfigFileInvalidError for a PyYAML error, with line and column when known."""
    problem = getattr(error, "problem", None)
    mark = getattr(error, "problem_mark", None)
    if problem and mark is not None:
        return ConfigFileInvalidError(file_path, f"{problem} (line {mark.line + 1}, column {mark.column + 1})")
    return ConfigFileInvalidError(file_path, str(error))


def _location(err: dict) -> str:
    return ".".join(str(part) for part in err.get("loc", ())) or "config"


def wrap_pydantic_error(error: Exception, file_path: str) -> KeycastError:
    """
    ConfigValidationError for a pydantic ValidationError.

    A single problem names its field; several are listed one per line.
    """
    if not isinstance(error, ValidationError) or not error.errors():
        return ConfigValidationError(field="config", value=None, error_msg=str(error), file_path=file_path)

    errors = error.errors()
    if len(errors) == 1:
        err = errors[0]
        return ConfigValidationError(
            field=_location(err),
            value=err.get("input"),
            error_msg=err.get("msg", "validation failed"),
            file_path=file_path,
        )

    lines = "\n".join(f"  - {_location(err)}: {err.get('msg', 'validation failed')}" for err in errors)
    return ConfigValidationError(
        field="multiple fields",
        value=None,
        error_msg=f"{len(errors)} validation errors:\n{lines}",
        file_path=file_path,
    )


def format_error_for_display(error: Exception) -> tuple[str, Optional[str]]:
    """(message, recovery hint or None) for showing an error in the terminal."""
    if isinstance(error, KeycastError):
        return error.user_message, error.recovery_hint
    return f"{type(error).__name__}: {error}", None


class ErrorCollector:
    """
    Runs many independent steps, keeping going past failures.

    Example:
        ```python
        collector = collect_errors("compile shape scripts")
        for binding in store:
            with collector.try_operation(script_name(binding.device, binding)):
                shaper.register(binding)
        if collector.has_errors:
            logger.warning(collector.get_summary())
        ```
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.errors: list[tuple[str, Exception]] = []
        self.success_count = 0

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @contextmanager
    def try_operation(self, step: str) -> Iterator[None]:
        """Record an exception raised by the block instead of propagating it."""
        try:
            yield
        except Exception as e:
            logger.debug(f"{self.operation}: {step} failed: {e}")
            self.errors.append((step, e))
        else:
            self.success_count += 1

    def get_summary(self) -> str:
        if not self.errors:
            return f"All operations completed successfully ({self.success_count} total)"

        total = self.error_count + self.success_count
        lines = [f"Failed {self.error_count} of {total} operations ({self.operation}):"]
        for step, error in self.errors:
            message = error.user_message if isinstance(error, KeycastError) else str(error)
            lines.append(f"  - {step}: {message}")
        return "\n".join(lines)


def collect_errors(operation: str) -> ErrorCollector:
    """Create an ErrorCollector for a batch of steps."""
    return ErrorCollector(operation)
