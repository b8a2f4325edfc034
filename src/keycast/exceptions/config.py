"""Errors raised while loading a router configuration."""

from typing import Any, Optional

from .base import KeycastError

TARGET_FORMS = "csv, osc://host:port, udp://host:port, midi://Port Name"


class ConfigurationError(KeycastError):
    """Configuration is invalid or cannot be loaded."""


class ConfigFileInvalidError(ConfigurationError):
    """The file is not usable YAML: bad syntax, empty, or not a mapping."""

    def __init__(self, file_path: str, parse_error: str):
        lowered = parse_error.lower()
        if "tab" in lowered:
            message, hint = "Configuration file uses tabs for indentation", f"Indent {file_path} with spaces"
        elif "empty" in lowered:
            message, hint = "Configuration file is empty", f"Add an 'in' or 'pulse' section to {file_path}"
        else:
            message = "Configuration file has invalid syntax"
            hint = (
                f"{parse_error}\n"
                "Unquoted ':' or '#' inside values and a missing space after ':' are the usual causes.\n"
                f"Edit: {file_path}"
            )
        super().__init__(message, f"YAML parse error in {file_path}: {parse_error}", hint)
        self.file_path = file_path
        self.parse_error = parse_error


class ConfigValidationError(ConfigurationError):
    """A value in the file does not fit the configuration schema."""

    def __init__(self, field: str, value: Any, error_msg: str, file_path: Optional[str] = None):
        hints = [f"Update '{field}'" + (f" in {file_path}" if file_path else "")]
        if field.startswith("pulse"):
            hints.append("Each pulse needs a 'name' and exactly one of 'bpm', 'fps' or 'interval'")
        elif field.startswith("out"):
            hints.append(f"Targets look like: {TARGET_FORMS}")
        elif field.startswith("in"):
            hints.append("Device sections are lists of bindings, or mappings of key to binding")

        super().__init__(
            f"Invalid configuration value for '{field}': {error_msg}",
            f"Config validation failed for {field}={value!r}: {error_msg}",
            "\n".join(hints),
        )
        self.field = field
        self.value = value
        self.file_path = file_path
