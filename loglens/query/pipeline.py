"""Piped-stage query representation.

A pipeline query is an ordered sequence of stages rendered as
``stage | stage | ...``. The backend requires filtering before projection or
aggregation, so stages are always emitted in the order
filter, fields/stats, sort, limit.
"""

from dataclasses import dataclass
from typing import Union

STAGE_SEPARATOR = " | "

DEFAULT_FIELDS = "@timestamp, @message, @logStream, @log"


@dataclass(frozen=True)
class Filter:
    expr: str

    def render(self) -> str:
        return f"filter {self.expr}"


@dataclass(frozen=True)
class Fields:
    expr: str

    def render(self) -> str:
        return f"fields {self.expr}"


@dataclass(frozen=True)
class Stats:
    expr: str
    group_by: str | None = None

    def render(self) -> str:
        if self.group_by:
            return f"stats {self.expr} by {self.group_by}"
        return f"stats {self.expr}"


@dataclass(frozen=True)
class Sort:
    expr: str

    def render(self) -> str:
        return f"sort {self.expr}"


@dataclass(frozen=True)
class Limit:
    # int when the clause held an integer, raw clause text otherwise
    value: Union[int, str]

    def render(self) -> str:
        return f"limit {self.value}"


Stage = Union[Filter, Fields, Stats, Sort, Limit]

_STAGE_ORDER: dict[type, int] = {
    Filter: 0,
    Fields: 1,
    Stats: 1,
    Sort: 2,
    Limit: 3,
}


@dataclass(frozen=True)
class PipelineQuery:
    """Ordered, immutable sequence of pipeline stages."""

    stages: tuple[Stage, ...]

    @classmethod
    def from_stages(cls, stages: list[Stage]) -> "PipelineQuery":
        """Build a query with stages placed in canonical order."""
        return cls(stages=tuple(sorted(stages, key=lambda s: _STAGE_ORDER[type(s)])))

    def render(self) -> str:
        return STAGE_SEPARATOR.join(stage.render() for stage in self.stages)

    def __str__(self) -> str:
        return self.render()

    def __bool__(self) -> bool:
        return bool(self.stages)


DEFAULT_PIPELINE = PipelineQuery(
    stages=(
        Fields(DEFAULT_FIELDS),
        Sort("@timestamp desc"),
        Limit(20),
    )
)
