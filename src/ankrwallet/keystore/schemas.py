"""JSON Schemas bundled with the package for on-disk formats."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema

KEYSTORE_SCHEMA = "keystore.v3.schema.json"
SCHEMA_ROOT = Path(__file__).resolve().parent / "schemas"


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@lru_cache(maxsize=None)
def _compile(path: Path) -> jsonschema.Validator:
    with path.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _describe(error: jsonschema.ValidationError) -> str:
    location = "/".join(str(part) for part in error.absolute_path) or "<root>"
    return f"{location}: {error.message}"


@dataclass(frozen=True)
class SchemaRegistry:
    """Schema files under one directory; compiled validators are cached per file."""

    schema_root: Path = SCHEMA_ROOT

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return cls()

    def validator_for(self, schema_filename: str) -> jsonschema.Validator:
        return _compile(self.schema_root / schema_filename)

    def validate_instance(self, instance: Any, schema_filename: str) -> None:
        """
        Raises:
            SchemaValidationError: Listing every violation, deepest paths first
        """
        validator = self.validator_for(schema_filename)
        errors = sorted(
            validator.iter_errors(instance),
            key=lambda e: (-len(e.absolute_path), [str(part) for part in e.absolute_path]),
        )
        if errors:
            raise SchemaValidationError(
                f"{schema_filename}: {len(errors)} violation(s)",
                errors=[_describe(err) for err in errors],
            )
