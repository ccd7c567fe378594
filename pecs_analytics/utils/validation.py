"""
Schema validation utilities for PECS analytics records.

Validates persisted session history and performance data points against
JSON Schema with clear error messages and optional repair.

Features:
- Format validation (date-time)
- Deep copy to prevent mutations
- Type coercion (numeric strings to numbers)
- Removal of unknown keys
- Duplicate session ID checks
- Transparent repair tracking
"""

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

from ..config import config


class ValidationResult:
    """
    Outcome of validating one session or data point record (or a batch).

    Attributes:
        valid: Whether the record passed validation
        errors: Human-readable error messages
        data: The validated record (repaired copy if repair was attempted)
        repairs: Repairs applied, in order
        invalid_fields: Top-level record fields that failed, e.g. ["success_rate"]
    """

    def __init__(
        self,
        valid: bool,
        errors: list[str],
        data: Any = None,
        repairs: Optional[list[str]] = None,
        invalid_fields: Optional[list[str]] = None,
    ):
        self.valid = valid
        self.errors = errors
        self.data = data
        self.repairs = repairs or []
        self.invalid_fields = invalid_fields or []

    def __bool__(self) -> bool:
        return self.valid

    @property
    def record_id(self) -> Optional[str]:
        """Session ID, or the date for data points, when the record has one."""
        if not isinstance(self.data, dict):
            return None
        label = self.data.get("id") or self.data.get("date")
        return str(label) if label else None

    def __str__(self) -> str:
        record = f"Record {self.record_id}" if self.record_id else "Record"
        if self.valid:
            msg = f"✓ {record} passed validation"
            if self.repairs:
                msg += f" (with {len(self.repairs)} repair(s))"
            return msg

        msg = f"✗ {record} failed validation with {len(self.errors)} error(s)"
        if self.invalid_fields:
            msg += f" in {', '.join(self.invalid_fields)}"
        return msg + ":\n" + "\n".join(f"  - {error}" for error in self.errors)


class SchemaValidator:
    """
    JSON Schema validator with auto-repair capabilities.

    Usage:
        validator = SchemaValidator(config.paths.session_schema)
        result = validator.validate(record)
        if not result:
            print(result.errors)
    """

    def __init__(self, schema_path: Path | str):
        """
        Initialize validator with a schema file.

        Args:
            schema_path: Path to JSON Schema file
        """
        self.schema_path = Path(schema_path)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: dict, auto_repair: bool = False) -> ValidationResult:
        """
        Validate data against schema.

        Args:
            data: Data to validate
            auto_repair: If True, attempt to fix common validation errors

        Returns:
            ValidationResult with validation status and any errors
        """
        schema_errors = list(self.validator.iter_errors(data))

        if schema_errors:
            if auto_repair and isinstance(data, dict):
                repaired_data, repairs = self._attempt_repair(data)
                result = self.validate(repaired_data, auto_repair=False)
                result.repairs = repairs
                return result
            return ValidationResult(
                valid=False,
                errors=[self._format_error(error) for error in schema_errors],
                data=data,
                invalid_fields=self._invalid_fields(schema_errors),
            )

        return ValidationResult(valid=True, errors=[], data=data)

    @staticmethod
    def _invalid_fields(errors: list[ValidationError]) -> list[str]:
        """Top-level fields named by the errors, in first-seen order."""
        fields: list[str] = []
        for error in errors:
            if error.path:
                names = [str(error.path[0])]
            elif error.validator == "required" and isinstance(error.instance, dict):
                names = [name for name in error.validator_value if name not in error.instance]
            else:
                names = []
            fields.extend(name for name in names if name not in fields)
        return fields

    def _format_error(self, error: ValidationError) -> str:
        """
        Convert ValidationError to human-readable message with details.

        Args:
            error: jsonschema ValidationError

        Returns:
            Formatted error message with validator and schema path
        """
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        schema_path = "/".join(str(p) for p in error.schema_path)
        return (
            f"At '{path}': {error.message} "
            f"[validator={error.validator}, schema_path=/{schema_path}]"
        )

    def _attempt_repair(self, data: dict) -> tuple[dict, list[str]]:
        """
        Attempt to automatically fix common validation errors.

        Args:
            data: Original data (not modified)

        Returns:
            Tuple of (repaired data, list of repairs applied)
        """
        repaired = deepcopy(data)
        repairs: list[str] = []

        # Strip unknown keys (additionalProperties: false)
        if self.schema.get("additionalProperties") is False:
            allowed = set(self.schema.get("properties", {}))
            for key in [k for k in repaired if k not in allowed]:
                repaired.pop(key)
                repairs.append(f"Removed unknown key '{key}'")

        # Coerce numeric strings ("0.8" -> 0.8) and fill declared defaults
        for key, subschema in self.schema.get("properties", {}).items():
            if key not in repaired:
                if "default" in subschema:
                    repaired[key] = subschema["default"]
                    repairs.append(f"Added default {key} = {subschema['default']}")
                continue

            value = repaired[key]
            expected = subschema.get("type")
            if isinstance(value, str) and expected in ("number", "integer"):
                coerced = _safe_number(value, integer=expected == "integer")
                if coerced is not None:
                    repaired[key] = coerced
                    repairs.append(f"Coerced {key}: '{value}' -> {coerced}")

        return repaired, repairs


def _safe_number(value: str, integer: bool = False):
    try:
        number = float(value)
    except ValueError:
        return None
    return int(number) if integer else number


class SessionHistoryValidator(SchemaValidator):
    """
    Validator for persisted session history records.

    Adds a batch check for duplicate session IDs on top of the schema.
    """

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.session_schema)

    def validate_many(self, records: list[dict]) -> ValidationResult:
        """
        Validate a list of session records.

        Args:
            records: Session dictionaries

        Returns:
            ValidationResult; errors are prefixed with the record index
        """
        errors = []
        invalid_fields: list[str] = []
        seen: set[str] = set()
        duplicates: set[str] = set()

        for i, record in enumerate(records):
            result = self.validate(record)
            errors.extend(f"Session {i}: {error}" for error in result.errors)
            invalid_fields.extend(f for f in result.invalid_fields if f not in invalid_fields)

            session_id = record.get("id") if isinstance(record, dict) else None
            if session_id in seen:
                duplicates.add(session_id)
            elif session_id:
                seen.add(session_id)

        if duplicates:
            errors.append(f"Duplicate session IDs found: {', '.join(sorted(duplicates))}")

        return ValidationResult(
            valid=not errors, errors=errors, data=records, invalid_fields=invalid_fields
        )


class DataPointValidator(SchemaValidator):
    """Validator for persisted performance data points."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.data_point_schema)


def validate_session_history(data: dict, auto_repair: bool = False) -> ValidationResult:
    """
    Quick validation of one session history record.

    Example:
        result = validate_session_history(session.to_dict())
        if not result:
            print("Errors:", result.errors)
    """
    return SessionHistoryValidator().validate(data, auto_repair=auto_repair)


def validate_data_point(data: dict, auto_repair: bool = False) -> ValidationResult:
    """Quick validation of one performance data point record."""
    return DataPointValidator().validate(data, auto_repair=auto_repair)
