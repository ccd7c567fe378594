"""
Unit tests for schema validation.

Tests:
- JSON Schema validation of session history and data points
- Auto-repair functionality
- Duplicate session ID checks
"""

import pytest

from pecs_analytics.utils.validation import (
    DataPointValidator,
    SchemaValidator,
    SessionHistoryValidator,
    ValidationResult,
    validate_data_point,
    validate_session_history,
)


@pytest.fixture
def session_record(make_session):
    return make_session().to_dict()


@pytest.fixture
def point_record(make_point):
    return make_point(0, 0.75, phase=2).to_dict()


class TestValidationResult:
    """Test suite for ValidationResult class."""

    def test_valid_result_is_truthy(self):
        """Test that valid results are truthy."""
        result = ValidationResult(valid=True, errors=[])
        assert bool(result) is True

    def test_invalid_result_is_falsy(self):
        """Test that invalid results are falsy."""
        result = ValidationResult(valid=False, errors=["error"])
        assert bool(result) is False

    def test_str_representation_valid(self):
        """Test string representation of valid result."""
        result = ValidationResult(valid=True, errors=[], repairs=["fix"])
        assert "✓" in str(result)
        assert "1 repair" in str(result)

    def test_str_representation_invalid(self):
        """Test string representation of invalid result."""
        result = ValidationResult(valid=False, errors=["error1", "error2"])
        assert "✗" in str(result)
        assert "2" in str(result)
        assert "error1" in str(result)

    def test_str_names_session_and_fields(self, session_record):
        session_record["success_rate"] = 1.4
        result = validate_session_history(session_record)

        assert result.record_id == session_record["id"]
        assert result.invalid_fields == ["success_rate"]
        assert str(result).startswith(
            f"✗ Record {session_record['id']} failed validation with 1 error(s) in success_rate:"
        )

    def test_data_point_labelled_by_date(self, point_record):
        result = validate_data_point(point_record)
        assert str(result) == f"✓ Record {point_record['date']} passed validation"


class TestSchemaValidator:
    """Test suite for the generic validator."""

    def test_valid_data(self, temp_schema_file):
        result = SchemaValidator(temp_schema_file).validate({"score": 3, "label": "x"})
        assert result.valid

    def test_error_message_has_path(self, temp_schema_file):
        result = SchemaValidator(temp_schema_file).validate({"score": "high"})
        assert not result.valid
        assert "At 'score'" in result.errors[0]
        assert "validator=type" in result.errors[0]
        assert result.invalid_fields == ["score"]

    def test_type_coercion(self, temp_schema_file):
        """Test numeric strings are coerced during repair."""
        result = SchemaValidator(temp_schema_file).validate({"score": "0.5"}, auto_repair=True)
        assert result.valid
        assert result.data["score"] == 0.5
        assert result.repairs == ["Coerced score: '0.5' -> 0.5"]

    def test_deep_copy_prevents_mutation(self, temp_schema_file):
        """Test that repair does not modify the caller's data."""
        original = {"score": 1, "extra": True}
        result = SchemaValidator(temp_schema_file).validate(original, auto_repair=True)

        assert result.valid
        assert "extra" in original
        assert "extra" not in result.data


class TestSessionHistoryValidation:
    """Test suite for session history records."""

    def test_valid_session_passes(self, session_record):
        assert validate_session_history(session_record).valid

    def test_success_rate_out_of_range(self, session_record):
        session_record["success_rate"] = 1.4
        result = validate_session_history(session_record)
        assert not result.valid
        assert any("success_rate" in error for error in result.errors)

    def test_day_of_week_out_of_range(self, session_record):
        session_record["day_of_week"] = 7
        assert not validate_session_history(session_record).valid

    def test_repair_fills_defaults_and_coerces(self, session_record):
        del session_record["completed_successfully"]
        session_record["phase"] = "2"
        session_record["notes"] = "tired today"

        result = validate_session_history(session_record, auto_repair=True)

        assert result.valid
        assert result.data["completed_successfully"] is True
        assert result.data["phase"] == 2
        assert "notes" not in result.data
        assert len(result.repairs) == 3

    def test_duplicate_session_ids(self, make_session):
        records = [make_session().to_dict() for _ in range(3)]
        records[2]["id"] = records[0]["id"]

        result = SessionHistoryValidator().validate_many(records)

        assert not result.valid
        assert result.errors == [f"Duplicate session IDs found: {records[0]['id']}"]

    def test_errors_prefixed_with_index(self, make_session):
        records = [make_session().to_dict(), make_session().to_dict()]
        records[1]["hour_of_day"] = 25

        result = SessionHistoryValidator().validate_many(records)

        assert len(result.errors) == 1
        assert result.errors[0].startswith("Session 1:")
        assert result.invalid_fields == ["hour_of_day"]


class TestDataPointValidation:
    """Test suite for performance data points."""

    def test_valid_point_passes(self, point_record):
        assert validate_data_point(point_record).valid

    def test_phase_out_of_range(self, point_record):
        point_record["phase"] = 7
        assert not DataPointValidator().validate(point_record).valid

    def test_missing_required_field(self, point_record):
        del point_record["success_rate"]
        result = validate_data_point(point_record, auto_repair=True)
        assert not result.valid
        assert any("success_rate" in error for error in result.errors)
        assert result.invalid_fields == ["success_rate"]
