"""Translate restricted SQL into the piped-stage query dialect.

Supported shape::

    SELECT <fields | aggregations> [FROM <source>] [WHERE <condition>]
    [GROUP BY <fields>] [ORDER BY <expr>] [LIMIT <n>]

Clauses may appear in any order. Translation never fails: input with no
recognisable clause yields ``DEFAULT_PIPELINE`` so that a half-typed query in
an editor always has something runnable behind it.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

from loglens.query.pipeline import (
    DEFAULT_FIELDS,
    DEFAULT_PIPELINE,
    Fields,
    Filter,
    Limit,
    PipelineQuery,
    Sort,
    Stage,
    Stats,
)

logger = logging.getLogger(__name__)

QUOTE_CHARS = ("'", '"', "`")

# stands in for quoted text when searching for keywords
MASK_CHAR = "\x00"

AGGREGATE_FUNCTIONS = ("count", "avg", "sum", "min", "max", "stddev", "pct", "bin")

# identifiers such as @limit or fields.count are not keywords
_NOT_IDENT = r"(?<![@\w.$])"

_FROM_RE = re.compile(
    _NOT_IDENT + r"FROM\s+(`[^`]+`|'[^']+'|\"[^\"]+\"|\S+)\s*",
    re.IGNORECASE,
)

_KEYWORD_RE = re.compile(
    _NOT_IDENT + r"(SELECT|WHERE|GROUP\s+BY|ORDER\s+BY|LIMIT)\b",
    re.IGNORECASE,
)

_AGGREGATE_RE = re.compile(
    _NOT_IDENT + r"(?:" + "|".join(AGGREGATE_FUNCTIONS) + r")\(",
    re.IGNORECASE,
)

_WHERE_TOKEN_RE = re.compile(
    r"(?P<like>" + _NOT_IDENT + r"LIKE\s+(?:'(?P<single>[^']+)'|\"(?P<double>[^\"]+)\"))"
    r"|(?P<quoted>'[^']*'|\"[^\"]*\"|`[^`]*`)"
    r"|(?P<connective>" + _NOT_IDENT + r"(?:AND|OR|NOT)\b)",
    re.IGNORECASE,
)

_WILDCARD_EDGES_RE = re.compile(r"^%|%$")

_INTEGER_RE = re.compile(r"(?<![\w.])\d+(?![\w.])")


class ClauseKind(str, Enum):
    """Recognised SQL clauses."""

    SELECT = "SELECT"
    WHERE = "WHERE"
    GROUP_BY = "GROUP BY"
    ORDER_BY = "ORDER BY"
    LIMIT = "LIMIT"


@dataclass(frozen=True)
class Clause:
    kind: ClauseKind
    body: str


def strip_comments(sql: str) -> str:
    """Remove ``--`` line comments and ``/* */`` block comments outside quotes."""
    out: list[str] = []
    i = 0
    n = len(sql)
    quote: str | None = None

    while i < n:
        ch = sql[i]

        if quote:
            out.append(ch)
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch in QUOTE_CHARS:
            quote = ch
            out.append(ch)
            i += 1
        elif sql.startswith("--", i):
            newline = sql.find("\n", i)
            if newline == -1:
                break
            out.append(" ")
            i = newline
        elif sql.startswith("/*", i):
            close = sql.find("*/", i + 2)
            if close == -1:
                break
            out.append(" ")
            i = close + 2
        else:
            out.append(ch)
            i += 1

    return "".join(out)


def normalize(sql: str) -> str:
    """Strip comments and trailing semicolons, collapse whitespace."""
    text = strip_comments(sql)
    text = " ".join(text.split())
    return text.rstrip("; ").strip()


def mask_quoted(text: str) -> str:
    """
    Replace the contents of quoted strings with MASK_CHAR.

    The result has the same length as ``text``, so match positions found in
    the mask apply to the original string. Quote characters themselves are
    kept. A quote with no closing partner is treated as a literal character
    so that clauses after a stray apostrophe (``LIKE '%can't%' LIMIT 5``) are
    still found.
    """
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        close = text.find(ch, i + 1) if ch in QUOTE_CHARS else -1
        if close == -1:
            out.append(ch)
            i += 1
            continue
        out.append(ch)
        out.append(MASK_CHAR * (close - i - 1))
        out.append(ch)
        i = close + 1
    return "".join(out)


def strip_from(text: str) -> str:
    """Remove the first ``FROM <source>`` clause; the source is passed separately."""
    match = _FROM_RE.search(mask_quoted(text))
    if not match:
        return text
    return (text[: match.start()] + text[match.end():]).strip()


def scan_clauses(text: str) -> list[Clause]:
    """
    Split text into clauses at keyword boundaries.

    One left-to-right pass over the keyword positions; each clause runs until
    the next keyword. Text ahead of the first keyword is dropped and a
    repeated clause keeps its first occurrence.
    """
    masked = mask_quoted(text)
    boundaries = [
        (match.start(), match.end(), ClauseKind(" ".join(match.group(1).upper().split())))
        for match in _KEYWORD_RE.finditer(masked)
    ]

    clauses: list[Clause] = []
    seen: set[ClauseKind] = set()
    for index, (_, body_start, kind) in enumerate(boundaries):
        body_end = boundaries[index + 1][0] if index + 1 < len(boundaries) else len(text)
        if kind in seen:
            continue
        seen.add(kind)
        clauses.append(Clause(kind=kind, body=text[body_start:body_end].strip()))

    return clauses


def _rewrite_where_token(match: re.Match) -> str:
    if match.group("like"):
        pattern = match.group("single")
        if pattern is None:
            pattern = match.group("double")
        return f"like /{_WILDCARD_EDGES_RE.sub('', pattern)}/"
    if match.group("connective"):
        return match.group("connective").lower()
    return match.group(0)


def translate_where(body: str) -> str:
    """Rewrite LIKE patterns to regex literals and lowercase connectives."""
    return _WHERE_TOKEN_RE.sub(_rewrite_where_token, body)


def has_aggregation(select_body: str) -> bool:
    return bool(_AGGREGATE_RE.search(mask_quoted(select_body)))


def translate_projection(select_body: str, group_by: str | None) -> Stage | None:
    """
    Map SELECT (and GROUP BY) to a fields or stats stage.

    ``SELECT *`` becomes the default field list. ``SELECT *`` with grouping has
    no sensible projection and yields no stage.
    """
    if not select_body:
        return None

    aggregated = has_aggregation(select_body) or bool(group_by)

    if select_body == "*":
        if aggregated:
            return None
        return Fields(DEFAULT_FIELDS)

    if aggregated:
        return Stats(select_body, group_by or None)
    return Fields(select_body)


def translate_limit(body: str) -> Limit | None:
    if not body:
        return None
    match = _INTEGER_RE.search(body)
    if match:
        return Limit(int(match.group(0)))
    return Limit(body)


def translate(sql: str) -> PipelineQuery:
    """
    Translate a SQL-subset query to a pipeline query.

    Never raises. Input without any recognisable clause yields
    DEFAULT_PIPELINE.

    Args:
        sql: Query text as typed by the operator

    Returns:
        PipelineQuery with stages in canonical order

    Example:
        >>> translate("SELECT count(*) FROM app GROUP BY @logStream").render()
        'stats count(*) by @logStream'
    """
    text = strip_from(normalize(sql or ""))
    clauses = {clause.kind: clause.body for clause in scan_clauses(text)}

    stages: list[Stage] = []

    where = clauses.get(ClauseKind.WHERE)
    if where:
        stages.append(Filter(translate_where(where)))

    if ClauseKind.SELECT in clauses:
        projection = translate_projection(
            clauses[ClauseKind.SELECT], clauses.get(ClauseKind.GROUP_BY)
        )
        if projection is not None:
            stages.append(projection)

    order_by = clauses.get(ClauseKind.ORDER_BY)
    if order_by:
        stages.append(Sort(order_by))

    limit = translate_limit(clauses.get(ClauseKind.LIMIT, ""))
    if limit is not None:
        stages.append(limit)

    if not stages:
        logger.debug("No clauses recognised, using default pipeline")
        return DEFAULT_PIPELINE

    return PipelineQuery.from_stages(stages)


def translate_to_text(sql: str) -> str:
    """Translate and render in one step."""
    return translate(sql).render()
