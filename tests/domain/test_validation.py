"""Tests for declarative field validation."""

import re

from contentctl.domain.validation import FieldRule, is_blank, validate_fields

SLUG_RULE = FieldRule(required=True, pattern=re.compile(r"^[a-z0-9-]+$"))


class TestValidateFields:
    def test_valid(self) -> None:
        result = validate_fields({"title": "Hello"}, {"title": FieldRule(required=True)})
        assert result.valid
        assert result.is_valid
        assert result.errors == []

    def test_errors_aggregate_across_fields(self) -> None:
        rules = {
            "title": FieldRule(required=True),
            "author": FieldRule(required=True),
            "slug": SLUG_RULE,
        }
        result = validate_fields({"slug": "Not A Slug"}, rules)
        assert not result.valid
        assert result.errors == [
            "title is required",
            "author is required",
            "slug format is invalid",
        ]

    def test_required_short_circuits_the_field(self) -> None:
        rule = FieldRule(required=True, min_length=5, pattern=re.compile("x"))
        result = validate_fields({"title": ""}, {"title": rule})
        assert result.errors == ["title is required"]

    def test_one_field_can_fail_several_checks(self) -> None:
        rule = FieldRule(max_length=3, choices=("a", "b"), pattern=re.compile(r"^\d+$"))
        result = validate_fields({"code": "hello"}, {"code": rule})
        assert result.errors == [
            "code must not exceed 3 characters",
            "code must be one of: a, b",
            "code format is invalid",
        ]

    def test_optional_absent_field_skipped(self) -> None:
        result = validate_fields({}, {"seoTitle": FieldRule(max_length=60)})
        assert result.valid

    def test_unruled_fields_ignored(self) -> None:
        result = validate_fields({"anything": "x" * 1000}, {})
        assert result.valid

    def test_list_length(self) -> None:
        result = validate_fields({"tags": ["a"]}, {"tags": FieldRule(min_length=2)})
        assert result.errors == ["tags must be at least 2 characters"]

    def test_numeric_bounds(self) -> None:
        rule = FieldRule(number=True, minimum=1, maximum=10)
        assert validate_fields({"order": 0.5}, {"order": rule}).errors == [
            "order must be at least 1"
        ]
        assert validate_fields({"order": 11}, {"order": rule}).errors == [
            "order must not exceed 10"
        ]
        assert validate_fields({"order": "abc"}, {"order": rule}).errors == [
            "order must be a number"
        ]

    def test_zero_is_present_and_bounds_checked(self) -> None:
        rule = FieldRule(required=True, number=True, minimum=1)
        assert validate_fields({"order": 0}, {"order": rule}).errors == ["order must be at least 1"]

    def test_optional_zero_still_checks_minimum(self) -> None:
        rule = FieldRule(number=True, minimum=1)
        assert validate_fields({"views": 0}, {"views": rule}).errors == ["views must be at least 1"]

    def test_does_not_mutate_input(self) -> None:
        data = {"title": "  "}
        validate_fields(data, {"title": FieldRule(required=True)})
        assert data == {"title": "  "}


class TestIsBlank:
    def test_blank_values(self) -> None:
        for value in (None, "", "   ", [], {}):
            assert is_blank(value)

    def test_present_values(self) -> None:
        for value in ("x", ["x"], 0, 0.0, 1, False, True):
            assert not is_blank(value)
