"""
Aggregation and ranking of classified activity records.
Groups records by theme and by author, attaches effort/status estimates and computes report observations.
"""
import logging
from typing import Dict, List, Optional

from classify.themes import ThemeRule, classify_record
from normalize.models import ActivityRecord
from .estimate import estimate
from .models import Aggregation, AuthorStat, Observations, ThemeGroup
from .utils import Thresholds, count_statuses, MERGED, ACTIVE, ABANDONED

logger = logging.getLogger(__name__)

DEFAULT_TOP_THEMES = 5
DEFAULT_TOP_AUTHORS = 8


def _group_by_theme(records: List[ActivityRecord], rules: List[ThemeRule]) -> Dict[str, List[ActivityRecord]]:
    # dict keeps first-encounter order, which is the tie-break for ranking
    by_theme: Dict[str, List[ActivityRecord]] = {}
    for r in records:
        by_theme.setdefault(classify_record(r, rules), []).append(r)
    return by_theme


def _author_stats(records: List[ActivityRecord], rules: List[ThemeRule]) -> List[AuthorStat]:
    stats: Dict[str, AuthorStat] = {}
    for r in records:
        stats.setdefault(r.author, AuthorStat(r.author)).add(classify_record(r, rules))
    return list(stats.values())


def aggregate(records: List[ActivityRecord], rules: List[ThemeRule], thresholds: Optional[Thresholds] = None) -> Aggregation:
    """
    Group records by theme and by author.
    Themes and authors are ranked by descending record count; ties keep first-encounter order.
    Every theme group gets an effort/status estimate regardless of size. No truncation happens here.
    """
    t = thresholds or Thresholds()
    groups = []
    for theme, theme_records in _group_by_theme(records, rules).items():
        est = estimate(theme_records, t)
        merged = count_statuses(theme_records, t)[MERGED]
        groups.append(ThemeGroup(theme, theme_records, est.effort_tier, est.lifecycle_status, merged_count=merged))
    # sorted() is stable
    groups = sorted(groups, key=lambda g: -g.count)
    authors = sorted(_author_stats(records, rules), key=lambda a: -a.count)
    logger.debug("Aggregated %d records into %d themes, %d authors", len(records), len(groups), len(authors))
    return Aggregation(groups, authors)


def top_themes(groups: List[ThemeGroup], k: int = DEFAULT_TOP_THEMES) -> List[ThemeGroup]:
    return list(groups[:max(0, k)])


def top_authors(stats: List[AuthorStat], n: int = DEFAULT_TOP_AUTHORS) -> List[AuthorStat]:
    return list(stats[:max(0, n)])


def compute_observations(records: List[ActivityRecord], thresholds: Optional[Thresholds] = None,
                         aggregation: Optional[Aggregation] = None) -> Observations:
    """
    Compute totals and threshold flags from the filtered, unclassified records.
    The theme breakdown is only consulted for the primary focus theme.
    """
    t = thresholds or Thresholds()
    counts = count_statuses(records, t)
    total = len(records)
    # half-up rounding to a whole percent
    merge_rate = int(counts[MERGED] * 100 / total + 0.5) if total else None
    primary_theme, primary_count = None, 0
    if aggregation and aggregation.theme_groups:
        top = aggregation.theme_groups[0]
        primary_theme, primary_count = top.theme_name, top.count
    return Observations(
        total=total,
        merged=counts[MERGED],
        active=counts[ACTIVE],
        abandoned=counts[ABANDONED],
        merge_rate=merge_rate,
        review_bottleneck=counts[ACTIVE] > t.review_bottleneck_active,
        iteration_churn=counts[ABANDONED] > t.iteration_churn_abandoned,
        primary_theme=primary_theme,
        primary_count=primary_count,
    )
