"""Reading and writing router configuration files.

Parse and schema failures surface as ConfigurationError subclasses with
recovery hints. Saving keeps a ``.bak`` copy of the previous file and
replaces the target in one rename.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from keycast.exceptions import (
    ConfigFileInvalidError,
    ConfigurationError,
    wrap_pydantic_error,
    wrap_yaml_error,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise wrap_yaml_error(e, str(path)) from e

    if data is None:
        raise ConfigFileInvalidError(str(path), "File is empty")
    if not isinstance(data, dict):
        raise ConfigFileInvalidError(str(path), f"Top level must be a mapping, got {type(data).__name__}")
    return data


def _replace(path: Path, content: str) -> None:
    temp_path = path.with_name(path.name + ".tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(path)
    finally:
        temp_path.unlink(missing_ok=True)


class YamlPersistence:
    """
    YAML load/save for pydantic models.

    Example Usage:
        ```python
        config = YamlPersistence.load_yaml(Path("router.yaml"), RouterConfig)
        YamlPersistence.save_yaml(store.export_config(config), Path("router.yaml"))
        ```
    """

    @staticmethod
    def load_yaml(path: Path, model_type: type[T]) -> T:
        """
        Parse ``path`` and validate it as ``model_type``.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigFileInvalidError: Bad YAML, an empty file or a non-mapping top level
            ConfigValidationError: The data does not fit the model
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        data = _read_mapping(path)
        try:
            model = model_type.model_validate(data)
        except ValidationError as e:
            logger.error(f"Invalid {model_type.__name__} in {path}: {e}")
            raise wrap_pydantic_error(e, str(path)) from e

        logger.debug(f"Loaded {model_type.__name__} from {path}")
        return model

    @staticmethod
    def save_yaml(data: dict[str, Any], path: Path, backup: bool = True) -> None:
        """
        Write ``data`` to ``path``, keeping key order.

        Args:
            data: Plain mapping, e.g. ``model.model_dump(by_alias=True)``
            path: Destination file
            backup: Copy an existing file to ``<name>.bak`` first

        Raises:
            OSError: The file could not be written
            ConfigurationError: ``data`` could not be serialized
        """
        try:
            content = yaml.safe_dump(data, sort_keys=False, indent=4, allow_unicode=True)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                user_message=f"Failed to save configuration to {path}",
                technical_message=f"Cannot serialize configuration: {e}",
                recovery_hint="Live values must be numbers, strings, booleans or lists of them",
            ) from e

        path.parent.mkdir(parents=True, exist_ok=True)
        if backup and path.exists():
            backup_path = path.with_name(path.name + ".bak")
            shutil.copy2(path, backup_path)
            logger.debug(f"Created backup: {backup_path}")

        _replace(path, content)
        logger.info(f"Saved configuration to {path}")
