from normalize.models import ActivityRecord, COMMIT, REVIEW, WORK_ITEM
from report.renderer import render_activity_summary


def test_summary_sections():
    records = [
        ActivityRecord(REVIEW, 1, 'Add cart', 'Alice', '2024-03-15', 'completed'),
        ActivityRecord(REVIEW, 2, 'Login form', 'Bob', '2024-03-15', 'active'),
        ActivityRecord(REVIEW, 3, 'Old idea', 'Bob', '2024-03-15', 'abandoned'),
    ]
    records += [ActivityRecord(COMMIT, f"c{i}", f"commit {i}", 'bob', '2024-03-15', 'committed') for i in range(6)]
    records += [
        ActivityRecord(WORK_ITEM, 7, 'Broken checkout', 'Carol', '2024-03-15', 'Active'),
        ActivityRecord(WORK_ITEM, 8, 'Docs', 'Dan', '2024-03-15', 'Closed'),
    ]
    md = render_activity_summary(records)
    assert '### Pull Requests' in md
    assert '- **Opened:** 1' in md
    assert '- **Merged:** 1' in md
    assert '- **Abandoned:** 1' in md
    assert '- #1: Add cart (Alice)' in md
    assert '**Open PRs:**' in md
    assert '**Total:** 6 commits' in md
    assert '**bob** (6):' in md
    assert '- `c0`: commit 0' in md
    assert '- ... and 1 more' in md
    assert '**Total:** 2 items changed' in md
    assert '**Active** (1):' in md
    assert '- #7: Broken checkout (Carol)' in md


def test_summary_without_activity():
    md = render_activity_summary([])
    assert 'No PR activity' in md
    assert 'No commits' in md
    assert 'No work item changes' in md


def test_summary_omits_abandoned_line_when_none():
    md = render_activity_summary([ActivityRecord(REVIEW, 1, 'x', 'A', '2024-03-15', 'completed')])
    assert 'Abandoned' not in md
    assert 'Open PRs' not in md


def test_summary_reports_skipped_records():
    md = render_activity_summary([], skipped=3)
    assert md.startswith('**Skipped records:** 3')
    assert 'Skipped records' not in render_activity_summary([])
