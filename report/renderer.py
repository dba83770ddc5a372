"""
Report renderer: format aggregated insights as Markdown, HTML, JSON or CSV.
Markdown and HTML are rendered from Jinja2 templates in report/templates.
Rendering only formats what scoring computed; it never re-derives counts or estimates.
"""

from typing import Optional, List, Dict, Any
import csv
import io
import json
import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from classify.themes import OTHER_THEME
from normalize.models import ActivityRecord, COMMIT, REVIEW, WORK_ITEM
from scoring.metrics import DEFAULT_TOP_THEMES, DEFAULT_TOP_AUTHORS
from scoring.metrics import top_themes as select_top_themes, top_authors as select_top_authors
from scoring.models import Aggregation, Observations
from scoring.utils import Thresholds, MERGED, ACTIVE, ABANDONED
from window.filters import Period

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')

# representative records listed per initiative
RECORDS_PER_THEME = 5
# summary report list sizes
SUMMARY_LIST_LIMIT = 10
SUMMARY_GROUP_LIMIT = 5

STATUS_ICONS = {MERGED: '✅', ACTIVE: '🔄'}
FALLBACK_ICON = '❌'

MODE_TITLES = {
    'day': 'Daily Review',
    'week': 'Weekly Review',
    'month': 'Monthly Review',
    'range': 'Review',
}


def short_author(name: str) -> str:
    """First word of a display name."""
    parts = (name or '').split()
    return parts[0] if parts else ''


def record_link(record: ActivityRecord) -> str:
    """Markdown link for a record when it has a URL, otherwise its title."""
    if record.link:
        return f"[{record.title}]({record.link})"
    return record.title


def _cell(value: Any) -> str:
    return str(value).replace('|', '\\|')


def _percent(value: Optional[int]) -> str:
    return 'n/a' if value is None else f"{value}%"


def _environment(thresholds: Thresholds) -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(['html.j2', 'html', 'xml']),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters['status_icon'] = lambda s: STATUS_ICONS.get(thresholds.status_category(s), FALLBACK_ICON)
    env.filters['short_author'] = short_author
    env.filters['record_link'] = record_link
    env.filters['cell'] = _cell
    env.filters['percent'] = _percent
    return env


def _initiatives(aggregation: Aggregation, k: int):
    # a lone unclassified record is not an initiative
    return [g for g in select_top_themes(aggregation.theme_groups, k) if not (g.theme_name == OTHER_THEME and g.count < 2)]


def _title(period: Period) -> str:
    return f"{period.label} {MODE_TITLES.get(period.mode, 'Review')}"


def _context(aggregation: Aggregation, observations: Observations, period: Period, top_themes_k: int,
             top_authors_n: int, totals: Optional[Dict[str, int]], skipped: int, generated_at: Optional[str]) -> Dict[str, Any]:
    totals = dict({'reviews': observations.total, 'commits': 0, 'work_items': 0}, **(totals or {}))
    return {
        'title': _title(period),
        'period': period,
        'obs': observations,
        'totals': totals,
        'skipped': skipped,
        'groups': aggregation.theme_groups,
        'initiatives': _initiatives(aggregation, top_themes_k),
        'authors': select_top_authors(aggregation.author_stats, top_authors_n),
        'per_theme': RECORDS_PER_THEME,
        'generated_at': generated_at,
    }


def render_json(context: Dict[str, Any]) -> str:
    """Export the full aggregation (all themes, top authors) as JSON."""
    payload = {
        'title': context['title'],
        'period': context['period'].to_dict(),
        'totals': context['totals'],
        'skipped': context['skipped'],
        'observations': context['obs'].to_dict(),
        'themes': [g.to_dict() for g in context['groups']],
        'authors': [a.to_dict() for a in context['authors']],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def render_csv(context: Dict[str, Any]) -> str:
    """Theme summary as CSV: one row per theme, plus a trailing skipped,N row when records were skipped."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(['theme', 'prs', 'merged', 'effort_tier', 'lifecycle_status'])
    for g in context['groups']:
        writer.writerow([g.theme_name, g.count, g.merged_count, g.effort_tier, g.lifecycle_status])
    if context['skipped']:
        # malformed records dropped before aggregation
        writer.writerow(['skipped', context['skipped']])
    return output.getvalue()


def render(
    aggregation: Aggregation,
    observations: Observations,
    period: Period,
    fmt: str = 'md',
    top_themes: int = DEFAULT_TOP_THEMES,
    top_authors: int = DEFAULT_TOP_AUTHORS,
    totals: Optional[Dict[str, int]] = None,
    skipped: int = 0,
    thresholds: Optional[Thresholds] = None,
    generated_at: Optional[str] = None,
) -> str:
    """Main render function.

    Produces the review document: header, ranked initiatives, contributor table, theme summary and
    observations. Output is deterministic for identical inputs; pass generated_at to stamp the footer.
    Unknown formats fall back to Markdown.
    """
    thresholds = thresholds or Thresholds()
    context = _context(aggregation, observations, period, top_themes, top_authors, totals, skipped, generated_at)
    fmt_l = (fmt or 'md').lower()
    if fmt_l in ('json', 'js'):
        return render_json(context)
    if fmt_l == 'csv':
        return render_csv(context)
    env = _environment(thresholds)
    if fmt_l in ('html', 'htm'):
        return env.get_template('review.html.j2').render(**context)
    return env.get_template('review.md.j2').render(**context)


def _group_in_order(records: List[ActivityRecord], key) -> List[tuple]:
    groups: Dict[str, List[ActivityRecord]] = {}
    for r in records:
        groups.setdefault(key(r), []).append(r)
    return list(groups.items())


def render_activity_summary(records: List[ActivityRecord], thresholds: Optional[Thresholds] = None, skipped: int = 0) -> str:
    """Per-source Markdown summary: PR status counts, commits by author and work items by state."""
    thresholds = thresholds or Thresholds()
    reviews = [r for r in records if r.source_kind == REVIEW]
    commits = [r for r in records if r.source_kind == COMMIT]
    work_items = [r for r in records if r.source_kind == WORK_ITEM]
    by_category: Dict[str, List[ActivityRecord]] = {MERGED: [], ACTIVE: [], ABANDONED: []}
    for r in reviews:
        category = thresholds.status_category(r.status)
        if category:
            by_category[category].append(r)
    context = {
        'reviews': reviews,
        'opened': by_category[ACTIVE],
        'merged': by_category[MERGED],
        'abandoned': by_category[ABANDONED],
        'commits': commits,
        'commits_by_author': _group_in_order(commits, lambda r: r.author),
        'work_items': work_items,
        'work_items_by_state': _group_in_order(work_items, lambda r: r.status or 'Unknown'),
        'list_limit': SUMMARY_LIST_LIMIT,
        'group_limit': SUMMARY_GROUP_LIMIT,
        'skipped': skipped,
    }
    return _environment(thresholds).get_template('summary.md.j2').render(**context)
