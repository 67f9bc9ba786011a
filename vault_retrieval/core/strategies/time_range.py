"""Time-range search strategies.

Date-titled notes inside the range are always included. How they are found
depends on whether the index can OR-combine filters.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import timedelta
from typing import TYPE_CHECKING, Awaitable, Callable

from ..cancellation import gather_or_cancel
from ..models.document import ChunkSource, ScoredChunk, TimeRange, dedupe_by_key
from ..models.index import FieldFilter, FilterGroup, IndexQuery

if TYPE_CHECKING:
    from ..protocols.vector_store import SearchIndexProtocol
    from ..services.reference_resolver import ExplicitReferenceResolver

logger = logging.getLogger(__name__)

QueryRunner = Callable[[IndexQuery], Awaitable[list[ScoredChunk]]]


def daily_note_titles(time_range: TimeRange, max_days: int = 365) -> list[str]:
    """Titles (YYYY-MM-DD) of every day in the range, capped to the last max_days."""
    start, end = time_range.start, time_range.end
    if (end - start).days > max_days:
        logger.warning(
            f"Date range exceeds {max_days} days, limiting to the most recent {max_days} days"
        )
        start = end - timedelta(days=max_days)

    return [(start + timedelta(days=i)).isoformat() for i in range((end - start).days + 1)]


def timestamp_filter(time_range: TimeRange) -> FilterGroup:
    """Both created_at and modified_at inside the range."""
    return FilterGroup(
        all_of=(
            FieldFilter("created_at", gte=time_range.start_datetime, lte=time_range.end_datetime),
            FieldFilter("modified_at", gte=time_range.start_datetime, lte=time_range.end_datetime),
        )
    )


class TimeRangeStrategy(ABC):
    """Base class for time-range search strategies."""

    def __init__(self, resolver: "ExplicitReferenceResolver", max_days: int = 365):
        """Initialize strategy.

        Args:
            resolver: Title resolver used for date-titled notes.
            max_days: Maximum number of days expanded into note titles.
        """
        self._resolver = resolver
        self._max_days = max_days

    @abstractmethod
    async def search(
        self, query: IndexQuery, time_range: TimeRange, run_query: QueryRunner
    ) -> list[ScoredChunk]:
        """Run query restricted to time_range."""
        ...


class UnionTimeRangeStrategy(TimeRangeStrategy):
    """Two queries then union, for indexes that only AND-combine filters."""

    async def search(
        self, query: IndexQuery, time_range: TimeRange, run_query: QueryRunner
    ) -> list[ScoredChunk]:
        titles = daily_note_titles(time_range, self._max_days)
        filtered_query = replace(query, filters=(timestamp_filter(time_range),))

        daily, filtered = await gather_or_cancel(
            self._resolver.resolve_titles(titles, source=ChunkSource.DAILY_NOTE),
            run_query(filtered_query),
        )

        logger.debug(
            f"Time range {time_range.start}..{time_range.end}: "
            f"{len(daily)} daily note chunks, {len(filtered)} filtered hits"
        )
        return dedupe_by_key(daily + filtered)


class OrFilterTimeRangeStrategy(TimeRangeStrategy):
    """Single query with `title in dates OR timestamps in range`.

    Date-titled notes the query returned are refetched whole by path; the
    ones it missed are resolved by title, so every daily note in the range
    is included however low it ranks.
    """

    async def search(
        self, query: IndexQuery, time_range: TimeRange, run_query: QueryRunner
    ) -> list[ScoredChunk]:
        titles = daily_note_titles(time_range, self._max_days)
        title_filter = FilterGroup(all_of=(FieldFilter("title", one_of=tuple(titles)),))
        combined_query = replace(
            query,
            filters=(title_filter, timestamp_filter(time_range)),
            limit=query.limit + len(titles),
        )

        results = await run_query(combined_query)

        title_set = set(titles)
        hit_titles: set[str] = set()
        hit_paths: list[str] = []
        others: list[ScoredChunk] = []
        for result in results:
            if result.chunk.title in title_set:
                hit_titles.add(result.chunk.title)
                if result.chunk.path not in hit_paths:
                    hit_paths.append(result.chunk.path)
            else:
                others.append(result)

        missing = [t for t in titles if t not in hit_titles]
        found, resolved = await gather_or_cancel(
            self._resolver.resolve_paths(hit_paths, source=ChunkSource.DAILY_NOTE),
            self._resolver.resolve_titles(missing, source=ChunkSource.DAILY_NOTE),
        )

        order = {title: i for i, title in enumerate(titles)}
        daily = sorted(found + resolved, key=lambda c: order.get(c.chunk.title, len(order)))

        logger.debug(
            f"Time range {time_range.start}..{time_range.end}: {len(daily)} daily note chunks "
            f"({len(missing)} dates resolved by title), {len(others)} filtered hits"
        )
        return dedupe_by_key(daily + others)


def select_time_range_strategy(
    index: "SearchIndexProtocol",
    resolver: "ExplicitReferenceResolver",
    max_days: int = 365,
) -> TimeRangeStrategy:
    """Pick the strategy matching the index's filter capabilities."""
    if getattr(index, "supports_or_filters", False):
        return OrFilterTimeRangeStrategy(resolver, max_days)
    return UnionTimeRangeStrategy(resolver, max_days)
