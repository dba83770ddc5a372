"""
Unified data model for normalized activity records.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

# source kinds a raw record may come from
COMMIT = 'commit'
REVIEW = 'review'
WORK_ITEM = 'work_item'

SOURCE_KINDS = (COMMIT, REVIEW, WORK_ITEM)


@dataclass(frozen=True)
class ActivityRecord:
    """
    Normalized activity record. Every source-specific shape is mapped into this one.
    Instances are immutable; filters and groupers only pass references around.
    """
    source_kind: str  # commit/review/work_item
    id: Union[str, int]
    title: str
    author: str
    activity_date: str  # YYYY-MM-DD
    status: str
    link: Optional[str] = None
    repository: Optional[str] = None
    item_type: Optional[str] = None  # work item type (Bug/Task/...), None for other sources

    def to_dict(self) -> dict:
        return {
            'source_kind': self.source_kind,
            'id': self.id,
            'title': self.title,
            'author': self.author,
            'activity_date': self.activity_date,
            'status': self.status,
            'link': self.link,
            'repository': self.repository,
            'item_type': self.item_type,
        }


class NormalizeResult:
    """
    Outcome of normalizing one source list: the records that survived and how many were skipped.
    """
    def __init__(self, records: List[ActivityRecord], skipped: int = 0):
        self.records = records
        self.skipped = skipped

    def __repr__(self):
        return f"NormalizeResult(records={len(self.records)}, skipped={self.skipped})"
