"""Tests for error translation."""

import httpx
import pytest
from pydantic import ValidationError

from post_tracker.infrastructure.errors import (
    ErrorKind,
    GatewayError,
    Operation,
    error_from_response,
    immutable_field,
    translate_error,
)
from post_tracker.infrastructure.result import Result
from post_tracker.models import CampaignCreate


class TestErrorFromResponse:
    """PostgREST error bodies to GatewayError."""

    def test_unique_violation(self):
        error = error_from_response(
            409,
            {"code": "23505", "message": "duplicate key value violates unique constraint"},
            Operation.INSERT,
        )

        assert error.kind is ErrorKind.CONFLICT
        assert error.message == "This record already exists"
        assert error.raw.startswith("duplicate key")

    def test_foreign_key_on_delete(self):
        error = error_from_response(409, {"code": "23503", "message": "fk"}, Operation.DELETE)

        assert error.kind is ErrorKind.REFERENCE
        assert error.message == "Cannot delete this record because it is referenced by other data"

    def test_foreign_key_on_insert(self):
        error = error_from_response(409, {"code": "23503", "message": "fk"}, Operation.INSERT)

        assert error.kind is ErrorKind.REFERENCE
        assert error.message == "The parent record this refers to does not exist"

    def test_insufficient_privilege(self):
        error = error_from_response(403, {"code": "42501", "message": "rls"}, Operation.UPDATE)

        assert error.kind is ErrorKind.PERMISSION
        assert error.message == "You do not have permission to perform this action"

    def test_unauthorized_without_code(self):
        error = error_from_response(401, {"message": "Invalid API key"}, Operation.SELECT)

        assert error.kind is ErrorKind.PERMISSION

    def test_no_rows(self):
        error = error_from_response(406, {"code": "PGRST116", "message": "0 rows"}, Operation.UPDATE)

        assert error.kind is ErrorKind.NOT_FOUND
        assert error.message == "The record no longer exists"

    def test_invalid_text_is_validation(self):
        error = error_from_response(
            400,
            {"code": "22P02", "message": 'invalid input value for enum platform_type: "Vimeo"'},
            Operation.INSERT,
        )

        assert error.kind is ErrorKind.VALIDATION
        assert error.message.startswith("Validation error: invalid input value")

    def test_unknown_code_falls_back_to_raw(self):
        error = error_from_response(500, {"code": "XX000", "message": "boom"}, Operation.SELECT)

        assert error.kind is ErrorKind.UNKNOWN
        assert error.message == "Database error: boom"

    def test_empty_body(self):
        error = error_from_response(502, None, Operation.SELECT)

        assert error.message == "Database error: HTTP 502"


class TestTranslateError:

    def test_gateway_error_passes_through(self):
        original = GatewayError(ErrorKind.CONFLICT, "dup")

        assert translate_error(original) is original

    def test_validation_error_includes_field(self):
        with pytest.raises(ValidationError) as excinfo:
            CampaignCreate(name="")

        error = translate_error(excinfo.value, Operation.INSERT)

        assert error.kind is ErrorKind.VALIDATION
        assert error.message.startswith("Validation error: ")
        assert "(field: name)" in error.message

    def test_value_error_prefix_stripped(self):
        with pytest.raises(ValidationError) as excinfo:
            CampaignCreate(name="x", start_date="2024-02-01", end_date="2024-01-01")

        error = translate_error(excinfo.value)

        assert "Value error" not in error.message
        assert "end_date must be on or after start_date" in error.message

    def test_timeout(self):
        error = translate_error(httpx.ReadTimeout("timed out"))

        assert error.kind is ErrorKind.TRANSPORT
        assert error.message == "Network error: the data service did not respond in time"

    def test_connect_error(self):
        error = translate_error(httpx.ConnectError("connection refused"))

        assert error.kind is ErrorKind.TRANSPORT
        assert error.message == "Network error: connection refused"

    def test_unexpected_exception(self):
        error = translate_error(KeyError("boom"))

        assert error.kind is ErrorKind.UNKNOWN
        assert error.message

    def test_immutable_field_message(self):
        error = immutable_field("campaign_id")

        assert error.kind is ErrorKind.VALIDATION
        assert "campaign_id" in error.message


class TestResult:

    def test_ok(self):
        result = Result.ok([1, 2])

        assert result.success
        assert result.data == [1, 2]
        assert result.error is None

    def test_failure_carries_message_and_kind(self):
        result = Result.failure(GatewayError(ErrorKind.CONFLICT, "This record already exists"))

        assert not result.success
        assert result.data is None
        assert result.error == "This record already exists"
        assert result.to_dict()["error_kind"] == "conflict"
