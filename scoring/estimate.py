"""
Effort and lifecycle estimation for one theme group.
Both are pure functions of the group's titles and status counts.
"""
from typing import List, Optional

from normalize.models import ActivityRecord
from .models import Estimate, EffortTier, LifecycleStatus
from .utils import Thresholds, count_statuses, MERGED, ACTIVE, ABANDONED, REVERT_KEYWORD


def _revert_count(records: List[ActivityRecord]) -> int:
    return sum(1 for r in records if REVERT_KEYWORD in (r.title or '').lower())


def effort_tier(records: List[ActivityRecord], thresholds: Optional[Thresholds] = None) -> str:
    """High for many records, repeated reverts or repeated abandonment; Medium for a few; Low otherwise."""
    t = thresholds or Thresholds()
    counts = count_statuses(records, t)
    if (
        len(records) >= t.high_min_records
        or _revert_count(records) >= t.high_min_reverts
        or counts[ABANDONED] >= t.high_min_abandoned
    ):
        return EffortTier.HIGH
    if len(records) >= t.medium_min_records:
        return EffortTier.MEDIUM
    return EffortTier.LOW


def lifecycle_status(records: List[ActivityRecord], thresholds: Optional[Thresholds] = None) -> str:
    t = thresholds or Thresholds()
    counts = count_statuses(records, t)
    merged = counts[MERGED]
    if counts[ABANDONED] > merged:
        return LifecycleStatus.TROUBLED
    if counts[ACTIVE] > merged:
        return LifecycleStatus.IN_REVIEW
    if merged == len(records):
        return LifecycleStatus.SHIPPED
    return LifecycleStatus.IN_PROGRESS


def estimate(records: List[ActivityRecord], thresholds: Optional[Thresholds] = None) -> Estimate:
    return Estimate(effort_tier(records, thresholds), lifecycle_status(records, thresholds))
