"""JSON file loading with pydantic validation.

Configuration and JWKS files share one error surface: a missing file, bad
JSON or a failed validation all become a ConfigurationError naming the file
and, for validation failures, every offending field.
"""

from __future__ import annotations

__all__ = [
    "format_validation_error",
    "load_json",
    "load_validated_json",
]

import json
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from cognito_auth.exceptions import ConfigurationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def load_json(path: Path, file_type: str = "file") -> Any:
    """Parse a JSON file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not JSON.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"{file_type.capitalize()} file not found at {path}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {file_type} file {path}: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Invalid JSON in {file_type} file {path} (line {e.lineno}, column {e.colno}): {e.msg}"
        ) from e


def format_validation_error(error: ValidationError) -> list[str]:
    """One "dotted.field.path: message" line per validation problem."""
    lines = []
    for problem in error.errors():
        location = ".".join(str(part) for part in problem["loc"])
        lines.append(f"{location}: {problem['msg']}" if location else problem["msg"])
    return lines


def load_validated_json(path: Path, model_class: type[ModelT], file_type: str = "file") -> ModelT:
    """Load a JSON file into a pydantic model.

    Args:
        path: JSON file to read.
        model_class: Model to validate the parsed data against.
        file_type: Used in error messages (e.g. "configuration").

    Returns:
        Validated model instance.

    Raises:
        ConfigurationError: If loading or validation fails.
    """
    data = load_json(path, file_type)
    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        details = "\n".join(f"  {line}" for line in format_validation_error(e))
        raise ConfigurationError(f"Invalid {file_type} file {path}:\n{details}") from e
