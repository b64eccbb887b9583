"""
Bug field rules, aggregate validation and sanitization.
"""

from utils.bug_validation import (
    sanitize_bug_data,
    validate_bug_data,
    validate_created_by,
    validate_description,
    validate_priority,
    validate_severity,
    validate_status,
    validate_status_patch,
    validate_title,
)


# ═══════════════════════════════════════════════════════════════════════════
# Field validators
# ═══════════════════════════════════════════════════════════════════════════


class TestFieldValidators:

    def test_title_bounds(self):
        assert validate_title("abc").is_valid
        assert validate_title("x" * 100).is_valid
        assert validate_title("ab").error == "Title must be at least 3 characters"
        assert validate_title("x" * 101).error == "Title must not exceed 100 characters"

    def test_title_required(self):
        assert validate_title(None).error == "Title is required"
        assert validate_title("   ").error == "Title is required"

    def test_title_must_be_string(self):
        assert validate_title(12345).error == "Title must be a string"

    def test_description_bounds(self):
        assert validate_description("0123456789").is_valid
        assert validate_description("Short").error == "Description must be at least 10 characters"
        assert validate_description("x" * 1001).error == "Description must not exceed 1000 characters"

    def test_created_by_bounds(self):
        assert validate_created_by("Jo").is_valid
        assert validate_created_by("J").error == "CreatedBy must be at least 2 characters"
        assert validate_created_by("x" * 51).error == "CreatedBy must not exceed 50 characters"
        assert validate_created_by("").error == "CreatedBy is required"

    def test_status_optional_unless_required(self):
        assert validate_status(None).is_valid
        assert validate_status("").is_valid
        assert validate_status(None, required=True).error == "Status is required"
        assert validate_status("in-progress").is_valid
        assert validate_status("done").error == "Status must be one of: open, in-progress, resolved, closed"

    def test_priority_and_severity(self):
        assert validate_priority("critical").is_valid
        assert validate_priority("urgent").error == "Priority must be one of: low, medium, high, critical"
        assert validate_priority("").error == "Priority is required"
        assert validate_severity("minor").is_valid
        assert validate_severity("blocker").error == "Severity must be one of: minor, major, critical"

    def test_enum_match_is_exact_before_sanitizing(self):
        assert not validate_priority("HIGH").is_valid


# ═══════════════════════════════════════════════════════════════════════════
# Aggregate validation
# ═══════════════════════════════════════════════════════════════════════════


class TestValidateBugData:

    def test_valid_body(self, valid_bug):
        result = validate_bug_data(valid_bug)
        assert result.is_valid
        assert result.errors == []

    def test_collects_every_field_error(self):
        result = validate_bug_data({
            "title": "AB",
            "description": "Short",
            "priority": "",
            "severity": "",
            "createdBy": "",
        })
        fields = {e["field"] for e in result.errors}
        assert not result.is_valid
        assert len(result.errors) >= 5
        assert fields == {"title", "description", "priority", "severity", "createdBy"}

    def test_status_required_for_full_update(self, valid_bug):
        assert validate_bug_data(valid_bug).is_valid
        result = validate_bug_data(valid_bug, require_status=True)
        assert result.errors == [{"field": "status", "message": "Status is required"}]

    def test_status_only_body_fails_full_validation(self):
        result = validate_bug_data({"status": "resolved"}, require_status=True)
        assert not result.is_valid
        assert "status" not in {e["field"] for e in result.errors}

    def test_status_patch(self):
        assert validate_status_patch({"status": "closed"}).is_valid
        assert not validate_status_patch({}).is_valid
        assert not validate_status_patch({"status": "archived"}).is_valid
        assert validate_status_patch({"status": "open", "title": "x"}).is_valid


# ═══════════════════════════════════════════════════════════════════════════
# Sanitization
# ═══════════════════════════════════════════════════════════════════════════


class TestSanitize:

    def test_trims_and_lowercases_enums(self):
        data = sanitize_bug_data({
            "title": "  Crash on save  ",
            "description": "  Stack trace attached  ",
            "status": " In-Progress ",
            "priority": "HIGH",
            "severity": "Major ",
            "createdBy": " John Doe ",
        })
        assert data == {
            "title": "Crash on save",
            "description": "Stack trace attached",
            "status": "in-progress",
            "priority": "high",
            "severity": "major",
            "createdBy": "John Doe",
        }

    def test_absent_keys_stay_absent(self):
        assert sanitize_bug_data({"status": "OPEN"}) == {"status": "open"}

    def test_non_strings_untouched(self):
        assert sanitize_bug_data({"title": 42, "priority": None}) == {"title": 42, "priority": None}
