"""
Insights pipeline: normalize -> filter -> classify/aggregate -> render.
Each invocation is stateless; all settings travel in an InsightsConfig value.
"""
import logging
from datetime import date
from typing import Dict, List, Any, Optional

from classify.themes import ThemeRule, DEFAULT_THEME_RULES, load_theme_rules
from normalize.models import ActivityRecord, COMMIT, REVIEW, WORK_ITEM
from normalize.util import normalize_records
from report.renderer import render, render_activity_summary
from scoring.metrics import aggregate, compute_observations, DEFAULT_TOP_THEMES, DEFAULT_TOP_AUTHORS
from scoring.models import Aggregation, Observations
from scoring.utils import Thresholds, load_thresholds
from window.filters import Period, filter_records, WEEK

logger = logging.getLogger(__name__)

REVIEW_REPORT = 'review'
SUMMARY_REPORT = 'summary'

SOURCE_ORDER = (REVIEW, COMMIT, WORK_ITEM)


class InsightsConfig:
    """
    Invocation-time settings: the time window, ranking bounds, rule set, thresholds and output format.
    """
    def __init__(
        self,
        mode: str = WEEK,
        anchor: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        month: Optional[str] = None,
        top_themes: int = DEFAULT_TOP_THEMES,
        top_authors: int = DEFAULT_TOP_AUTHORS,
        rules: Optional[List[ThemeRule]] = None,
        thresholds: Optional[Thresholds] = None,
        strict: bool = False,
        report: str = REVIEW_REPORT,
        fmt: str = 'md',
        generated_at: Optional[str] = None,
    ):
        self.mode = mode
        self.anchor = anchor
        self.start = start
        self.end = end
        self.month = month
        self.top_themes = top_themes
        self.top_authors = top_authors
        self.rules = list(rules) if rules is not None else list(DEFAULT_THEME_RULES)
        self.thresholds = thresholds or Thresholds()
        self.strict = strict
        self.report = report
        self.fmt = fmt
        self.generated_at = generated_at

    @classmethod
    def from_config_file(cls, path: Optional[str] = None, **kwargs) -> 'InsightsConfig':
        """Build a config whose rules and thresholds come from the YAML config file."""
        return cls(rules=load_theme_rules(path), thresholds=load_thresholds(path), **kwargs)


class InsightsResult:
    def __init__(self, document: str, aggregation: Aggregation, observations: Observations, period: Period,
                 records: Dict[str, List[ActivityRecord]], skipped: int):
        self.document = document
        self.aggregation = aggregation
        self.observations = observations
        self.period = period
        self.records = records
        self.skipped = skipped


def run_insights(raw: Dict[str, List[Dict[str, Any]]], config: Optional[InsightsConfig] = None,
                 today: Optional[date] = None) -> InsightsResult:
    """
    Run the whole pipeline over already-collected raw records keyed by source kind.

    The clock is read once here when today is not supplied. MalformedRecord (strict mode) and
    InvalidRange propagate to the caller; no partial document is produced.
    """
    config = config or InsightsConfig()
    today = today or date.today()

    skipped = 0
    filtered: Dict[str, List[ActivityRecord]] = {}
    period = None
    for kind in SOURCE_ORDER:
        normalized = normalize_records(raw.get(kind) or [], kind, strict=config.strict)
        skipped += normalized.skipped
        result = filter_records(
            normalized.records,
            config.mode,
            anchor=config.anchor,
            start=config.start,
            end=config.end,
            month=config.month,
            today=today,
        )
        filtered[kind] = result.records
        period = period or result.period

    reviews = filtered[REVIEW]
    aggregation = aggregate(reviews, config.rules, config.thresholds)
    observations = compute_observations(reviews, config.thresholds, aggregation)
    logger.info("%s: %d PRs, %d commits, %d work items (%d skipped)", period.label, len(reviews),
                len(filtered[COMMIT]), len(filtered[WORK_ITEM]), skipped)

    if config.report == SUMMARY_REPORT:
        document = render_activity_summary(reviews + filtered[COMMIT] + filtered[WORK_ITEM], config.thresholds, skipped=skipped)
    else:
        document = render(
            aggregation,
            observations,
            period,
            fmt=config.fmt,
            top_themes=config.top_themes,
            top_authors=config.top_authors,
            totals={'reviews': len(reviews), 'commits': len(filtered[COMMIT]), 'work_items': len(filtered[WORK_ITEM])},
            skipped=skipped,
            thresholds=config.thresholds,
            generated_at=config.generated_at,
        )
    return InsightsResult(document, aggregation, observations, period, filtered, skipped)
