"""
Data models for aggregation results.
"""
from typing import List, Optional

from normalize.models import ActivityRecord


class EffortTier:
    LOW = 'Low'
    MEDIUM = 'Medium'
    HIGH = 'High'

    ORDER = (LOW, MEDIUM, HIGH)

    @classmethod
    def rank(cls, tier: str) -> int:
        return cls.ORDER.index(tier)


class LifecycleStatus:
    SHIPPED = 'Shipped'
    IN_REVIEW = 'In Review'
    TROUBLED = 'Troubled'
    IN_PROGRESS = 'In Progress'


class Estimate:
    def __init__(self, effort_tier: str, lifecycle_status: str):
        self.effort_tier = effort_tier
        self.lifecycle_status = lifecycle_status

    def __repr__(self):
        return f"Estimate({self.effort_tier!r}, {self.lifecycle_status!r})"


class ThemeGroup:
    """
    Records sharing a theme, with their effort tier and lifecycle status.
    """
    def __init__(self, theme_name: str, records: List[ActivityRecord], effort_tier: str, lifecycle_status: str, merged_count: int = 0):
        self.theme_name = theme_name
        self.records = records
        self.effort_tier = effort_tier
        self.lifecycle_status = lifecycle_status
        self.merged_count = merged_count

    @property
    def count(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict:
        return {
            'theme': self.theme_name,
            'count': self.count,
            'merged': self.merged_count,
            'effort_tier': self.effort_tier,
            'lifecycle_status': self.lifecycle_status,
            'records': [r.to_dict() for r in self.records],
        }


class AuthorStat:
    """
    Contribution count per author and the distinct themes they touched, in first-seen order.
    """
    def __init__(self, author: str, count: int = 0, themes: Optional[List[str]] = None):
        self.author = author
        self.count = count
        self.themes = themes or []

    def add(self, theme: str):
        self.count += 1
        if theme not in self.themes:
            self.themes.append(theme)

    def to_dict(self) -> dict:
        return {'author': self.author, 'count': self.count, 'themes': list(self.themes)}


class Aggregation:
    def __init__(self, theme_groups: List[ThemeGroup], author_stats: List[AuthorStat]):
        self.theme_groups = theme_groups
        self.author_stats = author_stats

    def to_dict(self) -> dict:
        return {
            'themes': [g.to_dict() for g in self.theme_groups],
            'authors': [a.to_dict() for a in self.author_stats],
        }


class Observations:
    """
    Totals and threshold-triggered flags over the filtered, unclassified records.
    merge_rate is None when there were no records.
    """
    def __init__(self, total: int, merged: int, active: int, abandoned: int, merge_rate: Optional[int],
                 review_bottleneck: bool, iteration_churn: bool, primary_theme: Optional[str] = None, primary_count: int = 0):
        self.total = total
        self.merged = merged
        self.active = active
        self.abandoned = abandoned
        self.merge_rate = merge_rate
        self.review_bottleneck = review_bottleneck
        self.iteration_churn = iteration_churn
        self.primary_theme = primary_theme
        self.primary_count = primary_count

    def to_dict(self) -> dict:
        return dict(vars(self))
