"""
Filter and derived-view pipeline.

This module contains pure functions turning the full record set and
the current filter configuration into the subset shown by both the
map and the list, plus the derived indexes (regions, counts) used to
populate the filter controls.
"""

from typing import Iterable, List, Optional, Sequence
from pydantic import BaseModel, ConfigDict

from .models import ShutdownRecord, UserProfile

ALL = "all"


class FilterConfig(BaseModel):
    """Filter controls; "all" / empty / False disable a clause"""
    model_config = ConfigDict(frozen=True)

    search: str = ""
    status: str = ALL
    reason: str = ALL
    region: str = ALL
    action: str = ALL
    mine_only: bool = False

    def reset(self) -> "FilterConfig":
        return FilterConfig()


class ViewSummary(BaseModel):
    active: int
    total: int


def has_active_filters(config: FilterConfig) -> bool:
    return bool(
        config.search.strip()
        or config.status != ALL
        or config.reason != ALL
        or config.region != ALL
        or config.action != ALL
        or config.mine_only
    )


def _matches_search(record: ShutdownRecord, query: str) -> bool:
    needle = query.lower()
    for text in (record.title, record.notes, record.region):
        if text and needle in text.lower():
            return True
    return False


def _is_mine(record: ShutdownRecord, user: Optional[UserProfile]) -> bool:
    # no known user: clause is disabled
    if user is None:
        return True
    if record.created_by == user.email:
        return True
    return any(entry.user == user.email for entry in record.activity_log)


def matches(record: ShutdownRecord, config: FilterConfig,
            current_user: Optional[UserProfile] = None) -> bool:
    """Conjunction of every enabled filter clause."""
    query = config.search.strip()
    if query and not _matches_search(record, query):
        return False
    if config.status != ALL and record.status != config.status:
        return False
    if config.reason != ALL and record.reason != config.reason:
        return False
    if config.region != ALL and record.region != config.region:
        return False
    if config.action != ALL and record.action != config.action:
        return False
    if config.mine_only and not _is_mine(record, current_user):
        return False
    return True


def filter_records(
    records: Sequence[ShutdownRecord],
    config: FilterConfig,
    current_user: Optional[UserProfile] = None,
) -> List[ShutdownRecord]:
    """
    Filter the record set, preserving the storage order.

    Args:
        records: every record, as listed by storage (newest first)
        config: filter controls
        current_user: needed only for the "mine only" clause

    Returns:
        The matching subsequence
    """
    return [r for r in records if matches(r, config, current_user)]


def distinct_regions(records: Iterable[ShutdownRecord]) -> List[str]:
    """Sorted unique non-empty regions, for the region filter's options."""
    return sorted({r.region for r in records if r.region})


def map_records(records: Iterable[ShutdownRecord]) -> List[ShutdownRecord]:
    """The map draws active shutdowns only."""
    return [r for r in records if r.is_active]


def summarize(records: Sequence[ShutdownRecord]) -> ViewSummary:
    return ViewSummary(
        active=sum(1 for r in records if r.is_active),
        total=len(records),
    )
