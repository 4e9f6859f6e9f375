"""
Status Tracker Backend: Request Schema Tests
=============================================

What we test:
    ✅ lastWaterIntake must be a UTC ISO datetime with seconds and a trailing Z
    ✅ altitude must be a strict integer in [1, 10]
    ✅ Update bodies need at least one field
    ✅ Registration follows the login rules; policy acceptance is optional
    ✅ Admin user creation (username pattern/length, password length, role)
"""

import pytest
from pydantic import ValidationError

from status_tracker.schemas.auth import CreateUserRequest, LoginRequest, RegisterRequest
from status_tracker.schemas.status import CreateStatusRequest, UpdateStatusRequest

VALID_TIME = "2024-01-15T08:30:00Z"


class TestCreateStatusRequest:

    def test_valid(self):
        req = CreateStatusRequest.model_validate({"lastWaterIntake": VALID_TIME, "altitude": 7})
        assert req.last_water_intake == VALID_TIME
        assert req.altitude == 7

    @pytest.mark.parametrize(
        "value",
        ["2024-01-15T08:30:00.123Z", "2024-01-15T08:30:00.123456789Z", "2024-02-29T23:59:59Z"],
    )
    def test_accepts_iso_variants(self, value):
        req = CreateStatusRequest.model_validate({"lastWaterIntake": value, "altitude": 5})
        assert req.last_water_intake == value

    @pytest.mark.parametrize("value", [
        "2024-01-15",
        "yesterday",
        "",
        "2024-13-45T99:00:00Z",
        "2023-02-29T08:30:00Z",
        "2024-01-15T08:30",
        "2024-01-15T08:30Z",
        "2024-01-15T08:30:00",
        "2024-01-15T08:30:00+05:00",
        "2024-01-15T08:30:00z",
        " 2024-01-15T08:30:00Z",
    ])
    def test_rejects_bad_datetimes(self, value):
        with pytest.raises(ValidationError) as exc_info:
            CreateStatusRequest.model_validate({"lastWaterIntake": value, "altitude": 5})
        assert exc_info.value.errors()[0]["loc"] == ("lastWaterIntake",)

    @pytest.mark.parametrize("altitude", [1, 10])
    def test_altitude_bounds_inclusive(self, altitude):
        req = CreateStatusRequest.model_validate(
            {"lastWaterIntake": VALID_TIME, "altitude": altitude}
        )
        assert req.altitude == altitude

    @pytest.mark.parametrize("altitude", [0, 11, -3, 7.5, 7.0, "7", True, None])
    def test_rejects_bad_altitude(self, altitude):
        with pytest.raises(ValidationError):
            CreateStatusRequest.model_validate(
                {"lastWaterIntake": VALID_TIME, "altitude": altitude}
            )

    def test_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            CreateStatusRequest.model_validate({})
        assert {e["loc"][0] for e in exc_info.value.errors()} == {"lastWaterIntake", "altitude"}


class TestUpdateStatusRequest:

    def test_partial(self):
        req = UpdateStatusRequest.model_validate({"altitude": 3})
        assert req.altitude == 3
        assert req.last_water_intake is None

    def test_empty_body_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            UpdateStatusRequest.model_validate({})
        assert "At least one field" in str(exc_info.value)

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            UpdateStatusRequest.model_validate({"altitude": 11})


class TestAuthRequests:

    def test_login_requires_both_fields(self):
        with pytest.raises(ValidationError):
            LoginRequest.model_validate({"username": "alice", "password": ""})
        with pytest.raises(ValidationError):
            LoginRequest.model_validate({"username": "", "password": "x"})

    def test_register_valid(self):
        req = RegisterRequest.model_validate(
            {"username": "alice_1", "password": "secret1", "privacyPolicyAccepted": True}
        )
        assert req.privacy_policy_accepted is True

    def test_register_policy_is_optional(self):
        req = RegisterRequest.model_validate({"username": "al", "password": "abc"})
        assert req.privacy_policy_accepted is False

    @pytest.mark.parametrize("body", [
        {"username": "", "password": "secret1"},
        {"username": "a" * 51, "password": "secret1"},
        {"username": "alice", "password": ""},
        {"username": "alice"},
    ])
    def test_register_uses_login_rules(self, body):
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate(body)

    def test_admin_create_defaults_to_viewer(self):
        req = CreateUserRequest.model_validate({"username": "carol", "password": "secret1"})
        assert req.role == "viewer"

    def test_admin_create_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            CreateUserRequest.model_validate(
                {"username": "carol", "password": "secret1", "role": "owner"}
            )

    @pytest.mark.parametrize("username", ["ab", "a" * 51, "has space", "semi;colon"])
    def test_admin_create_rejects_bad_usernames(self, username):
        with pytest.raises(ValidationError):
            CreateUserRequest.model_validate({"username": username, "password": "secret1"})

    def test_admin_create_rejects_short_password(self):
        with pytest.raises(ValidationError):
            CreateUserRequest.model_validate({"username": "carol", "password": "12345"})
