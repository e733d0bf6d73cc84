"""
Unit tests for SQL core utilities: identifier and parameters.
"""

from datetime import datetime

import pytest

from cluster_dao.infrastructure.sql.core.identifier import (
    bare_field_name,
    escape_identifier,
    quote_identifier,
)
from cluster_dao.infrastructure.sql.core.parameters import (
    QueryFragment,
    as_clause_list,
    as_value_list,
    escape_value,
    format_template,
)


class TestQuoteIdentifier:
    """Tests for quote_identifier function."""

    def test_quote_ascii_column(self):
        """ASCII column names should be backtick-quoted."""
        assert quote_identifier("us_no") == "`us_no`"

    def test_quote_with_internal_backtick(self):
        """Internal backticks should be doubled."""
        assert quote_identifier("col`name") == "`col``name`"


class TestEscapeIdentifier:
    """Tests for escape_identifier function."""

    def test_qualified_name_quotes_each_part(self):
        assert escape_identifier("users.name") == "`users`.`name`"

    def test_plain_name(self):
        assert escape_identifier("name") == "`name`"

    def test_injection_attempt_stays_inside_quotes(self):
        assert escape_identifier("id` DESC; DROP TABLE x; --") == "`id`` DESC; DROP TABLE x; --`"


class TestBareFieldName:
    """Tests for bare_field_name function."""

    @pytest.mark.parametrize(
        "field, expected",
        [
            ("us_no", "us_no"),
            ("U.us_no", "us_no"),
            ("`name`", "name"),
            ("`U`.`name`", "name"),
            ("app.users.ctime", "ctime"),
        ],
    )
    def test_strips_qualifiers_and_backticks(self, field, expected):
        assert bare_field_name(field) == expected


class TestEscapeValue:
    """Tests for escape_value function."""

    def test_none_is_null(self):
        assert escape_value(None) == "NULL"

    def test_numbers_are_unquoted(self):
        assert escape_value(7) == "7"

    def test_string_quotes_are_escaped(self):
        assert escape_value("O'Reilly") == "'O\\'Reilly'"

    def test_datetime_is_quoted(self):
        assert escape_value(datetime(2024, 1, 2, 3, 4, 5)) == "'2024-01-02 03:04:05'"

    def test_list_becomes_comma_list(self):
        assert escape_value([1, "a"]) == "1, 'a'"

    def test_nested_lists_are_grouped(self):
        assert escape_value([[1, 2], [3, 4]]) == "(1, 2), (3, 4)"

    def test_mapping_becomes_assignments(self):
        assert escape_value({"name": "kim", "age": 3}) == "`name` = 'kim', `age` = 3"


class TestFormatTemplate:
    """Tests for format_template function."""

    def test_identifier_and_value_placeholders(self):
        sql = format_template("SELECT * FROM ?? WHERE ?? = ?", ["users", "id", 7])
        assert sql == "SELECT * FROM `users` WHERE `id` = 7"

    def test_identifier_list(self):
        sql = format_template("SELECT ?? FROM ??", [["id", "U.name"], "users"])
        assert sql == "SELECT `id`, `U`.`name` FROM `users`"

    def test_set_clause_from_mapping(self):
        sql = format_template("INSERT INTO ?? SET ?", ["users", {"name": "kim", "ctime": 10}])
        assert sql == "INSERT INTO `users` SET `name` = 'kim', `ctime` = 10"

    def test_in_list(self):
        sql = format_template("SELECT * FROM t WHERE id IN (?)", [[1, 2, 3]])
        assert sql == "SELECT * FROM t WHERE id IN (1, 2, 3)"

    def test_scalar_values_argument(self):
        assert format_template("SELECT ?", 5) == "SELECT 5"

    def test_none_values_returns_sql_unchanged(self):
        assert format_template("SELECT ?", None) == "SELECT ?"

    def test_missing_values_leave_placeholders(self):
        assert format_template("a = ? AND b = ?", [1]) == "a = 1 AND b = ?"

    def test_surplus_values_are_ignored(self):
        assert format_template("a = ?", [1, 2]) == "a = 1"

    def test_question_mark_in_value_is_not_rescanned(self):
        assert format_template("a = ? AND b = ?", ["?", 2]) == "a = '?' AND b = 2"


class TestValueHelpers:
    """Tests for as_value_list and as_clause_list."""

    def test_as_value_list(self):
        assert as_value_list(None) == []
        assert as_value_list(3) == [3]
        assert as_value_list((1, 2)) == [1, 2]

    def test_as_value_list_copies(self):
        original = [1]
        result = as_value_list(original)
        result.append(2)
        assert original == [1]

    def test_as_clause_list(self):
        assert as_clause_list(None) == []
        assert as_clause_list("id = ?") == ["id = ?"]
        assert as_clause_list(["a = ?", "AND b = ?"]) == ["a = ?", "AND b = ?"]


class TestQueryFragment:
    """Tests for QueryFragment."""

    def test_render(self):
        fragment = QueryFragment("DELETE FROM ?? WHERE id = ?", ["users", 3])
        assert fragment.render() == "DELETE FROM `users` WHERE id = 3"

    def test_default_values(self):
        assert QueryFragment("SELECT 1").values == []
