"""Tests for request validation and advisories."""

from __future__ import annotations

from coilnest.application.config import (
    NestingRequestSchema,
    PartSchema,
    ValidationResult,
    validate_request,
)


def _part(**overrides) -> dict:
    data = {
        "id": "A",
        "width": 1000,
        "length": 2500,
        "quantity": 1,
        "thickness": 20,
        "grade": "SS400",
    }
    data.update(overrides)
    return data


def _request(*parts: dict, **parameters) -> NestingRequestSchema:
    return NestingRequestSchema.model_validate(
        {"parameters": parameters, "parts": list(parts)}
    )


class TestValidationResult:
    """Tests for ValidationResult exit codes."""

    def test_exit_codes(self) -> None:
        assert ValidationResult().exit_code == 0
        assert ValidationResult().add_warning("p", "w").exit_code == 2
        assert ValidationResult().add_warning("p", "w").add_error("p", "e").exit_code == 1


class TestValidateRequest:
    """Tests for validate_request."""

    def test_clean_request(self) -> None:
        result = validate_request(_request(_part()))
        assert result.is_valid
        assert not result.has_warnings

    def test_part_value_errors_use_json_paths(self) -> None:
        result = validate_request(_request(_part(), _part(id="B", width=0, quantity=0)))

        assert not result.is_valid
        assert [e.path for e in result.errors] == ["parts[1].width", "parts[1].quantity"]
        assert result.errors[0].message.startswith("Part B:")

    def test_empty_part_list_warns(self) -> None:
        result = validate_request(_request())
        assert result.is_valid
        assert [w.path for w in result.warnings] == ["parts"]

    def test_duplicate_ids_warn_once(self) -> None:
        result = validate_request(_request(_part(), _part(), _part()))
        assert [w.path for w in result.warnings] == ["parts[0].id"]
        assert "used by 3 parts" in result.warnings[0].message

    def test_part_longer_than_max_sheet_length(self) -> None:
        result = validate_request(_request(_part(length=20000)))
        assert [w.path for w in result.warnings] == ["parts[0].length"]

    def test_part_wider_than_every_coil(self) -> None:
        result = validate_request(_request(_part(width=2500, length=2600)))
        assert [w.path for w in result.warnings] == ["parts[0].width"]

    def test_rotatable_part_does_not_warn(self) -> None:
        result = validate_request(_request(_part(width=2500, length=1000)))
        assert not result.has_warnings

    def test_unreachable_minimum_weight(self) -> None:
        result = validate_request(_request(_part(thickness=2), _part(id="B", thickness=2)))

        paths = [w.path for w in result.warnings]
        assert paths == ["parameters.rollWeightRange.min"]
        assert "593.5 kg" in result.warnings[0].message

    def test_parts_argument_replaces_request_parts(self) -> None:
        replacement = [PartSchema.model_validate(_part(width=-1))]
        result = validate_request(_request(_part()), replacement)
        assert [e.path for e in result.errors] == ["parts[0].width"]
