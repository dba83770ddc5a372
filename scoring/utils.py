"""
Scoring utility functions.
Provides threshold loading and status vocabulary helpers used by scoring.estimate and scoring.metrics.
"""
from typing import Dict, Any, Iterable, Optional
import logging
import os

import yaml

from classify.themes import default_config_path

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS = {
    # effort tier
    'high_min_records': 5,
    'high_min_reverts': 2,
    'high_min_abandoned': 3,
    'medium_min_records': 2,
    # report observations (strictly greater than)
    'review_bottleneck_active': 10,
    'iteration_churn_abandoned': 3,
}

# status vocabularies, compared case-insensitively
DEFAULT_STATUSES = {
    'merged': ['completed', 'merged', 'done', 'closed', 'resolved'],
    'active': ['active', 'open', 'draft', 'in progress', 'in review'],
    'abandoned': ['abandoned', 'declined', 'rejected', 'removed'],
}

MERGED = 'merged'
ACTIVE = 'active'
ABANDONED = 'abandoned'

REVERT_KEYWORD = 'revert'


class Thresholds:
    """
    Effort/status and observation thresholds plus the status vocabularies.
    Values are configuration defaults, not fixed rules; override them in the YAML config.
    """
    def __init__(self, values: Optional[Dict[str, Any]] = None, statuses: Optional[Dict[str, Iterable[str]]] = None):
        merged = dict(DEFAULT_THRESHOLDS)
        merged.update(values or {})
        for k, v in merged.items():
            setattr(self, k, int(v))
        vocab = {k: list(v) for k, v in DEFAULT_STATUSES.items()}
        # a scalar YAML value is a single status, not a sequence of characters
        vocab.update({k: [v] if isinstance(v, str) else list(v) for k, v in (statuses or {}).items() if k in DEFAULT_STATUSES})
        self.statuses = {k: frozenset(s.lower() for s in v) for k, v in vocab.items()}

    def status_category(self, status: str) -> Optional[str]:
        """Return 'merged', 'active', 'abandoned' or None for an unrecognized status."""
        s = (status or '').strip().lower()
        for category in (MERGED, ACTIVE, ABANDONED):
            if s in self.statuses[category]:
                return category
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {k: getattr(self, k) for k in DEFAULT_THRESHOLDS}


def count_statuses(records, thresholds: Thresholds) -> Dict[str, int]:
    """Count merged/active/abandoned records in a sequence."""
    counts = {MERGED: 0, ACTIVE: 0, ABANDONED: 0}
    for r in records:
        category = thresholds.status_category(r.status)
        if category:
            counts[category] += 1
    return counts


def load_thresholds(path: Optional[str] = None) -> Thresholds:
    """
    Load thresholds from the 'thresholds' and 'statuses' sections of the YAML config.
    Missing keys keep their defaults; an unreadable file yields all defaults.
    """
    path = path or default_config_path()
    if not os.path.exists(path):
        return Thresholds()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            doc = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Could not read thresholds from %s (%s); using defaults", path, exc)
        return Thresholds()
    if not isinstance(doc, dict):
        return Thresholds()
    values = doc.get('thresholds') if isinstance(doc.get('thresholds'), dict) else {}
    statuses = doc.get('statuses') if isinstance(doc.get('statuses'), dict) else {}
    unknown = set(values) - set(DEFAULT_THRESHOLDS)
    if unknown:
        logger.warning("Ignoring unknown thresholds in %s: %s", path, ', '.join(sorted(unknown)))
    try:
        return Thresholds({k: v for k, v in values.items() if k in DEFAULT_THRESHOLDS}, statuses)
    except (TypeError, ValueError) as exc:
        logger.warning("Invalid thresholds in %s (%s); using defaults", path, exc)
        return Thresholds()
