"""
keycast exceptions.

```
KeycastError (base)
├── ConfigurationError
│   ├── ConfigFileInvalidError
│   └── ConfigValidationError
├── DeviceError
│   └── DeviceNotFoundError
└── ShapeScriptError
```

Each carries a `user_message`, a `technical_message` for logs and an
optional `recovery_hint`. Helpers for raising and collecting them live in
`keycast.exceptions.handlers`.
"""

from .base import KeycastError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorCollector,
    ErrorContext,
    collect_errors,
    format_error_for_display,
    wrap_pydantic_error,
    wrap_yaml_error,
)
from .runtime import DeviceError, DeviceNotFoundError, ShapeScriptError

__all__ = [
    # Base
    "KeycastError",
    # Config
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    # Runtime
    "DeviceError",
    "DeviceNotFoundError",
    "ShapeScriptError",
    # Handlers
    "ErrorCollector",
    "ErrorContext",
    "collect_errors",
    "format_error_for_display",
    "wrap_pydantic_error",
    "wrap_yaml_error",
]
