"""
Typed errors raised by the insights pipeline.
Each error names the stage that failed so callers can report it precisely.
"""
from typing import List, Optional


class InsightsError(ValueError):
    """Base class for pipeline errors."""

    stage = 'pipeline'


class MalformedRecord(InsightsError):
    """A raw record is missing a required field or carries an unusable date."""

    stage = 'normalize'

    def __init__(self, kind: str, missing: List[str], index: Optional[int] = None, record_id=None):
        self.kind = kind
        self.missing = list(missing)
        self.index = index
        self.record_id = record_id
        super().__init__(self._message())

    def _message(self) -> str:
        where = f"{self.kind} record"
        if self.index is not None:
            where += f" #{self.index}"
        if self.record_id not in (None, ''):
            where += f" (id={self.record_id})"
        return f"[{self.stage}] {where}: missing or invalid {', '.join(self.missing)}"

    def at_index(self, index: int) -> 'MalformedRecord':
        """Return a copy of this error annotated with the record's position in its source list."""
        return MalformedRecord(self.kind, self.missing, index=index, record_id=self.record_id)


class InvalidRange(InsightsError):
    """A time window could not be resolved (start after end, or an unparseable date)."""

    stage = 'filter'

    def __init__(self, message: str):
        super().__init__(f"[{self.stage}] {message}")
