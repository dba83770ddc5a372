"""
Normalization helpers.
Map raw collector payloads (commits, review requests, work items) into normalize.models.ActivityRecord.
"""
import logging
import re
from datetime import date
from typing import Dict, Any, List, Optional, Tuple

from errors import MalformedRecord
from normalize.models import ActivityRecord, NormalizeResult, COMMIT, REVIEW, WORK_ITEM

logger = logging.getLogger(__name__)

# timestamp precedence per source kind: the first non-empty candidate wins.
# review requests prefer their last activity so long-lived ones surface on that day.
DATE_PRECEDENCE = {
    REVIEW: ('updatedDate', 'closedDate', 'createdDate'),
    WORK_ITEM: ('changedDate', 'createdDate'),
    COMMIT: ('date',),
}

COMMIT_STATUS = 'committed'

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def is_calendar_date(value: str) -> bool:
    """True for a real YYYY-MM-DD calendar date."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def pick_activity_date(raw: Dict[str, Any], kind: str) -> Optional[str]:
    """Return the first non-empty timestamp candidate for the kind, truncated to YYYY-MM-DD.
    Returns None when no candidate is present.
    """
    for field in DATE_PRECEDENCE.get(kind, ()):
        value = _text(raw.get(field))
        if value:
            return value[:10]
    return None


def _display_name(value: Any) -> str:
    """Collectors sometimes pass identity objects instead of plain names."""
    if isinstance(value, dict):
        return _text(value.get('displayName') or value.get('name') or value.get('uniqueName'))
    return _text(value)


def _commit_fields(raw: Dict[str, Any]) -> Tuple[Any, str, str, str, Optional[str], Optional[str], Optional[str]]:
    return (
        raw.get('hash') or raw.get('sha') or raw.get('id'),
        _text(raw.get('message') or raw.get('title')),
        _text(raw.get('author')),
        COMMIT_STATUS,
        raw.get('url') or None,
        raw.get('repo') or raw.get('repository') or None,
        None,
    )


def _review_fields(raw: Dict[str, Any]):
    return (
        raw.get('id'),
        _text(raw.get('title')),
        _display_name(raw.get('author')),
        _text(raw.get('status')),
        raw.get('url') or None,
        raw.get('repository') or None,
        None,
    )


def _work_item_fields(raw: Dict[str, Any]):
    return (
        raw.get('id'),
        _text(raw.get('title')),
        _display_name(raw.get('assignedTo') or raw.get('author')),
        _text(raw.get('state') or raw.get('status')),
        raw.get('url') or None,
        None,
        raw.get('type') or None,
    )


_FIELD_EXTRACTORS = {
    COMMIT: _commit_fields,
    REVIEW: _review_fields,
    WORK_ITEM: _work_item_fields,
}


def normalize_record(raw: Dict[str, Any], kind: str) -> ActivityRecord:
    """Map one raw record of known provenance into an ActivityRecord.

    Raises MalformedRecord when author, title or every timestamp candidate is missing,
    or when the chosen timestamp is not a calendar date.
    """
    if kind not in _FIELD_EXTRACTORS:
        raise ValueError(f"Unknown source kind: {kind}")
    if not isinstance(raw, dict):
        raise MalformedRecord(kind, ['record'])

    record_id, title, author, status, link, repository, item_type = _FIELD_EXTRACTORS[kind](raw)
    activity_date = pick_activity_date(raw, kind)

    missing = []
    if not author:
        missing.append('author')
    if not title:
        missing.append('title')
    if not activity_date:
        missing.append('timestamp')
    elif not is_calendar_date(activity_date):
        missing.append(f"timestamp ({activity_date!r})")
    if missing:
        raise MalformedRecord(kind, missing, record_id=record_id)

    return ActivityRecord(
        source_kind=kind,
        id=record_id if record_id is not None else '',
        title=title,
        author=author,
        activity_date=activity_date,
        status=status,
        link=link,
        repository=repository,
        item_type=item_type,
    )


def normalize_records(raws: List[Dict[str, Any]], kind: str, strict: bool = False) -> NormalizeResult:
    """Normalize a whole source list.

    Malformed records are skipped and counted unless strict is set, in which case the
    first one is raised annotated with its index.
    """
    records: List[ActivityRecord] = []
    skipped = 0
    for index, raw in enumerate(raws or []):
        try:
            records.append(normalize_record(raw, kind))
        except MalformedRecord as exc:
            if strict:
                raise exc.at_index(index) from exc
            skipped += 1
            logger.warning("Skipping %s", exc.at_index(index))
    logger.debug("Normalized %d %s records (%d skipped)", len(records), kind, skipped)
    return NormalizeResult(records, skipped)
