"""Tests for LIKE pattern warnings and query hashing."""

from loglens.query.validator import (
    PatternValidator,
    check_patterns,
    hash_query,
    sanitize_for_logging,
)


class TestPatternValidator:
    """Tests for PatternValidator.check."""

    def test_plain_pattern_has_no_warnings(self):
        assert check_patterns("SELECT @message WHERE @message LIKE '%error%'") == []

    def test_query_without_like(self):
        assert check_patterns("SELECT count(*) GROUP BY @logStream") == []

    def test_slash_warns(self):
        warnings = check_patterns("WHERE @message LIKE '%/api/users%'")
        assert any("'/'" in warning for warning in warnings)

    def test_regex_metacharacters_warn(self):
        warnings = check_patterns("WHERE @message LIKE '%a.b(c)%'")
        assert len(warnings) == 1
        assert "metacharacters" in warnings[0]
        assert "( ) ." in warnings[0]

    def test_interior_wildcards_warn(self):
        warnings = check_patterns("WHERE @message LIKE 'user_%_id'")
        assert any("wildcards" in warning for warning in warnings)

    def test_edge_wildcards_do_not_warn(self):
        assert check_patterns("WHERE @message LIKE '%timeout%'") == []

    def test_double_quoted_pattern_checked(self):
        warnings = check_patterns('WHERE @message LIKE "%a|b%"')
        assert len(warnings) == 1

    def test_each_pattern_checked(self):
        sql = "WHERE @message LIKE '%a/b%' AND @logStream LIKE '%x.y%'"
        assert len(check_patterns(sql)) == 2

    def test_long_query_warns(self):
        validator = PatternValidator(max_query_length=10)
        warnings = validator.check("SELECT @message, @timestamp")
        assert len(warnings) == 1
        assert "characters long" in warnings[0]


class TestHashing:
    """Tests for hash_query and sanitize_for_logging."""

    def test_hash_ignores_case_and_whitespace(self):
        assert hash_query("SELECT  @message") == hash_query("select @message")

    def test_hash_length(self):
        assert len(hash_query("SELECT @message")) == 16

    def test_hash_differs_for_different_queries(self):
        assert hash_query("SELECT @message") != hash_query("SELECT @timestamp")

    def test_sanitize_masks_strings(self):
        sanitized = sanitize_for_logging("WHERE user = 'alice@example.com'")
        assert "alice" not in sanitized
        assert "'<string>'" in sanitized

    def test_sanitize_masks_regex_literals(self):
        sanitized = sanitize_for_logging("filter @message like /secret-token/")
        assert "secret-token" not in sanitized

    def test_sanitize_truncates(self):
        sanitized = sanitize_for_logging("x" * 500, max_length=20)
        assert sanitized == "x" * 20 + "..."
