"""
Read records already collected into the raw insights directory.
Collectors write one JSON array per source; acquiring them is outside this package.
"""
import json
import logging
import os
from typing import Dict, List, Any

from normalize.models import COMMIT, REVIEW, WORK_ITEM

logger = logging.getLogger(__name__)

DEFAULT_RAW_DIR = os.path.join('.insights', 'raw')

RAW_FILES = {
    REVIEW: 'prs.json',
    COMMIT: 'commits.json',
    WORK_ITEM: 'workitems.json',
}


def load_json_records(path: str) -> List[Dict[str, Any]]:
    """Load one JSON array from path. A missing file is an empty source.
    Raises ValueError when the file is not valid JSON or not an array.
    """
    if not os.path.exists(path):
        logger.debug("No raw file at %s; treating as empty", path)
        return []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array in {path}, got {type(data).__name__}")
    return data


def load_raw_dir(raw_dir: str = DEFAULT_RAW_DIR) -> Dict[str, List[Dict[str, Any]]]:
    """Return a mapping source kind -> raw records for every known raw file in raw_dir."""
    raw = {}
    for kind, filename in RAW_FILES.items():
        raw[kind] = load_json_records(os.path.join(raw_dir, filename))
        logger.debug("Loaded %d raw %s records", len(raw[kind]), kind)
    return raw
