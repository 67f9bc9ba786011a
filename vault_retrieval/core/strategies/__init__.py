"""Scoring and time-range strategies."""
from .scoring import PassThroughStrategy, ScoreThresholdStrategy, ScoringStrategy
from .time_range import (
    OrFilterTimeRangeStrategy,
    TimeRangeStrategy,
    UnionTimeRangeStrategy,
    select_time_range_strategy,
)

__all__ = [
    "ScoringStrategy",
    "ScoreThresholdStrategy",
    "PassThroughStrategy",
    "TimeRangeStrategy",
    "UnionTimeRangeStrategy",
    "OrFilterTimeRangeStrategy",
    "select_time_range_strategy",
]
