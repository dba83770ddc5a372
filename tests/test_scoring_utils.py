import unittest
from normalize.models import ActivityRecord, REVIEW
from scoring.utils import Thresholds, count_statuses, load_thresholds, DEFAULT_THRESHOLDS, MERGED, ACTIVE, ABANDONED


class TestScoringUtils(unittest.TestCase):
    def test_status_category_case_insensitive(self):
        t = Thresholds()
        self.assertEqual(t.status_category('Completed'), MERGED)
        self.assertEqual(t.status_category('active'), ACTIVE)
        self.assertEqual(t.status_category(' ABANDONED '), ABANDONED)
        self.assertIsNone(t.status_category('committed'))
        self.assertIsNone(t.status_category(''))

    def test_count_statuses(self):
        recs = [ActivityRecord(REVIEW, i, 't', 'a', '2024-03-01', s) for i, s in enumerate(['completed', 'active', 'abandoned', 'abandoned', 'weird'])]
        self.assertEqual(count_statuses(recs, Thresholds()), {MERGED: 1, ACTIVE: 1, ABANDONED: 2})

    def test_defaults(self):
        t = Thresholds()
        self.assertEqual(t.to_dict(), DEFAULT_THRESHOLDS)

    def test_overrides(self):
        t = Thresholds({'high_min_records': '7'}, {'merged': ['shipped']})
        self.assertEqual(t.high_min_records, 7)
        self.assertEqual(t.status_category('Shipped'), MERGED)
        self.assertIsNone(t.status_category('completed'))


def test_load_thresholds_partial_override(tmp_path):
    cfg = tmp_path / 'insights.yaml'
    cfg.write_text(
        "thresholds:\n  review_bottleneck_active: 2\n  bogus: 9\nstatuses:\n  active: [waiting]\n",
        encoding='utf-8',
    )
    t = load_thresholds(str(cfg))
    assert t.review_bottleneck_active == 2
    assert t.high_min_records == DEFAULT_THRESHOLDS['high_min_records']
    assert t.status_category('waiting') == ACTIVE
    assert not hasattr(t, 'bogus')


def test_load_thresholds_scalar_status(tmp_path):
    cfg = tmp_path / 'insights.yaml'
    cfg.write_text("statuses:\n  merged: shipped\n", encoding='utf-8')
    t = load_thresholds(str(cfg))
    assert t.status_category('shipped') == MERGED
    assert t.status_category('s') is None


def test_load_thresholds_invalid_value_uses_defaults(tmp_path):
    cfg = tmp_path / 'insights.yaml'
    cfg.write_text("thresholds:\n  high_min_records: lots\n", encoding='utf-8')
    assert load_thresholds(str(cfg)).to_dict() == DEFAULT_THRESHOLDS


def test_bundled_config_matches_defaults(monkeypatch):
    monkeypatch.delenv('INSIGHTS_CONFIG', raising=False)
    assert load_thresholds().to_dict() == DEFAULT_THRESHOLDS


if __name__ == '__main__':
    unittest.main()
