import json

import pytest

from ingest.files import load_raw_dir, load_json_records
from normalize.models import COMMIT, REVIEW, WORK_ITEM


def test_load_raw_dir_reads_known_files(tmp_path):
    (tmp_path / 'prs.json').write_text(json.dumps([{'id': 1}]), encoding='utf-8')
    (tmp_path / 'commits.json').write_text(json.dumps([{'hash': 'a'}, {'hash': 'b'}]), encoding='utf-8')
    raw = load_raw_dir(str(tmp_path))
    assert raw[REVIEW] == [{'id': 1}]
    assert len(raw[COMMIT]) == 2
    # missing workitems.json is an empty source
    assert raw[WORK_ITEM] == []


def test_invalid_json_raises(tmp_path):
    path = tmp_path / 'prs.json'
    path.write_text('{not json', encoding='utf-8')
    with pytest.raises(ValueError) as exc:
        load_json_records(str(path))
    assert 'prs.json' in str(exc.value)


def test_non_array_raises(tmp_path):
    path = tmp_path / 'commits.json'
    path.write_text('{"hash": "a"}', encoding='utf-8')
    with pytest.raises(ValueError):
        load_json_records(str(path))
