"""Tests for map_immersion_error."""

import pytest

from immersion.application.api.v1.errors import map_immersion_error
from immersion.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    ImmersionError,
    InvalidStateError,
    NotFoundError,
    StorageUnavailableError,
    ThrottledError,
    ValidationError,
)


class TestMapImmersionError:
    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (NotFoundError("missing", code="convention_not_found"), 404),
            (ValidationError("bad"), 422),
            (InvalidStateError("wrong status", code="bad_status_transition"), 409),
            (ConflictError("stale", code="convention_updated_concurrently"), 409),
            (AuthorizationError("no", code="no_rights_on_agency"), 403),
            (StorageUnavailableError("db down"), 503),
            (ImmersionError("unknown"), 500),
        ],
    )
    def test_status_codes(self, error, status_code):
        assert map_immersion_error(error).status_code == status_code

    def test_detail_carries_code_and_message(self):
        exc = map_immersion_error(NotFoundError("Not found: c1", code="convention_not_found"))

        assert exc.detail == {"code": "convention_not_found", "message": "Not found: c1"}

    def test_validation_error_names_the_field(self):
        exc = map_immersion_error(
            ValidationError(
                "Required", field="status_justification", code="missing_status_justification"
            )
        )

        assert exc.detail["field"] == "status_justification"

    @pytest.mark.parametrize(
        "code", ["missing_token", "token_expired", "invalid_token", "token_revoked"]
    )
    def test_credential_problems_are_unauthenticated(self, code):
        exc = map_immersion_error(AuthorizationError("auth", code=code))

        assert exc.status_code == 401
        assert exc.headers == {"WWW-Authenticate": "Bearer"}

    def test_throttled_reminder_reports_the_wait(self):
        exc = map_immersion_error(
            ThrottledError("too soon", time_remaining="22h00", min_hours_between_reminder=24)
        )

        assert exc.status_code == 429
        assert exc.detail == {
            "code": "reminder_sent_too_recently",
            "message": "too soon",
            "time_remaining": "22h00",
            "min_hours_between_reminder": 24,
        }
