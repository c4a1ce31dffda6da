"""Query text checks, hashing and log sanitising."""

import hashlib
import logging
import re

logger = logging.getLogger(__name__)


class PatternValidator:
    """
    Reports LIKE patterns that will not behave as literal text once translated.

    The translator copies LIKE pattern text into a ``/regex/`` literal without
    escaping. This validator never blocks a query; it returns human-readable
    warnings that the CLI and API show next to the translated pipeline.

    Checks:
    - ``/`` ends the regex literal early
    - regex metacharacters change the meaning of the match
    - ``%`` or ``_`` wildcards inside the pattern are not translated
    """

    LIKE_PATTERN = re.compile(
        r"(?<![@\w.$])LIKE\s+(?:'([^']+)'|\"([^\"]+)\")",
        re.IGNORECASE,
    )

    REGEX_METACHARACTERS = set(".^$*+?()[]{}|\\")

    def __init__(self, max_query_length: int = 10000) -> None:
        """
        Initialize pattern validator.

        Args:
            max_query_length: Queries longer than this also produce a warning
        """
        self.max_query_length = max_query_length

    def check(self, sql: str) -> list[str]:
        """
        Collect warnings for a SQL-subset query.

        Args:
            sql: Query text as typed by the operator

        Returns:
            List of warning messages, empty when nothing looks suspicious
        """
        warnings: list[str] = []

        if len(sql) > self.max_query_length:
            warnings.append(
                f"Query is {len(sql)} characters long (recommended max: {self.max_query_length})"
            )

        for match in self.LIKE_PATTERN.finditer(sql):
            pattern = match.group(1) if match.group(1) is not None else match.group(2)
            warnings.extend(self._check_pattern(pattern))

        if warnings:
            logger.debug(
                "LIKE pattern warnings",
                extra={"query_hash": self.hash_query(sql), "warnings": len(warnings)},
            )

        return warnings

    def _check_pattern(self, pattern: str) -> list[str]:
        """
        Check a single LIKE pattern.

        Args:
            pattern: Raw pattern text between the quotes

        Returns:
            Warnings for this pattern
        """
        warnings = []
        core = re.sub(r"^%|%$", "", pattern)

        if "/" in core:
            warnings.append(f"Pattern {pattern!r} contains '/', which ends the regex early")

        metacharacters = sorted(set(core) & self.REGEX_METACHARACTERS)
        if metacharacters:
            warnings.append(
                f"Pattern {pattern!r} contains regex metacharacters "
                f"{' '.join(metacharacters)} that are passed through unescaped"
            )

        if "%" in core or "_" in core:
            warnings.append(
                f"Pattern {pattern!r} has interior SQL wildcards that are matched literally"
            )

        return warnings

    @staticmethod
    def hash_query(sql: str) -> str:
        """
        Generate hash of query text for deduplication.

        Args:
            sql: Query string

        Returns:
            SHA-256 hash of normalized query
        """
        normalized = " ".join(sql.lower().split())
        return hashlib.sha256(normalized.encode()).hexdigest()[:16]

    @staticmethod
    def sanitize_for_logging(sql: str, max_length: int = 200) -> str:
        """
        Sanitize query text for safe logging.

        Args:
            sql: Query string
            max_length: Maximum length for logged query

        Returns:
            Sanitized query string safe for logging
        """
        if len(sql) > max_length:
            sql = sql[:max_length] + "..."

        sql = re.sub(r"'[^']*'", "'<string>'", sql)
        sql = re.sub(r"/[^/|]*/", "/<pattern>/", sql)
        sql = re.sub(r"\b\d{10,}\b", "<number>", sql)

        return sql


_default_validator = PatternValidator()


def check_patterns(sql: str) -> list[str]:
    """
    Collect LIKE pattern warnings using the default validator.

    Args:
        sql: Query string

    Returns:
        List of warning messages
    """
    return _default_validator.check(sql)


def hash_query(sql: str) -> str:
    """
    Generate hash of query text using the default validator.

    Args:
        sql: Query string

    Returns:
        SHA-256 hash of normalized query
    """
    return PatternValidator.hash_query(sql)


def sanitize_for_logging(sql: str, max_length: int = 200) -> str:
    """
    Sanitize query text for logging using the default validator.

    Args:
        sql: Query string
        max_length: Maximum length for logged query

    Returns:
        Sanitized query string safe for logging
    """
    return PatternValidator.sanitize_for_logging(sql, max_length)
