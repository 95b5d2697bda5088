"""Tests for shared input validation."""

import pytest

from roomhub.domain.errors import ValidationError, WeakPassword
from roomhub.domain.validators import (
    normalize_email,
    require_fields,
    validate_email,
    validate_password_strength,
    validate_profile_fields,
)


class TestEmail:
    def test_normalize_trims_and_lowercases(self):
        assert normalize_email("  Ana.Perez@RoomHub.CL ") == "ana.perez@roomhub.cl"

    def test_validate_returns_normalized(self):
        assert validate_email("A@X.com") == "a@x.com"

    @pytest.mark.parametrize(
        "value",
        ["", "ana", "ana@", "ana@host", "a b@x.com", "ana@@x.com", "ana@x..com", ".ana@x.com"],
    )
    def test_validate_rejects_malformed(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_email(value)

        assert exc_info.value.details == [{"field": "email", "error": "INVALID_FORMAT"}]


class TestPasswordStrength:
    def test_accepts_mixed_password(self):
        validate_password_strength("Abcdef12")

    @pytest.mark.parametrize(
        "password",
        [
            "Abc1",  # too short
            "abcdefg1",  # no uppercase
            "ABCDEFG1",  # no lowercase
            "Abcdefgh",  # no digit
            "Abcdefg٣",  # non-ASCII digit
            "Ab1" + "x" * 98,  # too long
        ],
    )
    def test_rejects_weak_passwords(self, password):
        with pytest.raises(WeakPassword):
            validate_password_strength(password)

    def test_weak_password_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_password_strength("short")

        assert exc_info.value.code == "WEAK_PASSWORD"
        assert exc_info.value.status_code == 400


class TestRequireFields:
    def test_lists_every_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            require_fields({"name": "Ana", "email": " ", "city": None}, ("name", "email", "city", "region"))

        missing = [item["field"] for item in exc_info.value.details]
        assert missing == ["email", "city", "region"]

    def test_passes_when_all_present(self):
        require_fields({"name": "Ana"}, ("name",))


class TestProfileFields:
    def test_only_present_fields_are_returned(self):
        assert validate_profile_fields({"city": " Santiago "}) == {"city": "Santiago"}

    def test_name_length_bounds(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_profile_fields({"name": "A", "last_name": "B" * 51})

        assert {item["field"] for item in exc_info.value.details} == {"name", "last_name"}

    def test_blank_region_rejected(self):
        with pytest.raises(ValidationError):
            validate_profile_fields({"region": "   "})

    def test_bio_and_habits_limits(self):
        validate_profile_fields({"bio": "x" * 500, "habits": "y" * 1000})

        with pytest.raises(ValidationError):
            validate_profile_fields({"bio": "x" * 501})
        with pytest.raises(ValidationError):
            validate_profile_fields({"habits": "y" * 1001})
