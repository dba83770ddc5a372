"""
CLI entry point for dev-insights. Wires the pipeline: load raw -> normalize -> filter -> aggregate -> report
"""

import argparse
import logging
import os
import sys
import webbrowser
from datetime import date, datetime, timezone

from errors import InsightsError
from ingest.files import load_raw_dir, DEFAULT_RAW_DIR
from pipeline import InsightsConfig, run_insights, REVIEW_REPORT, SUMMARY_REPORT
from scoring.metrics import DEFAULT_TOP_THEMES, DEFAULT_TOP_AUTHORS
from window.filters import DAY, WEEK, RANGE, MONTH

EXTENSIONS = {"md": "md", "html": "html", "json": "json", "csv": "csv"}


def _resolve_window(args, today: date) -> dict:
    """Translate the mutually exclusive window flags into filter settings.
    --day and --week without a value anchor on today; with no flag at all the current week is used.
    """
    if args.range:
        return {"mode": RANGE, "start": args.range[0], "end": args.range[1]}
    if args.month:
        return {"mode": MONTH, "month": args.month}
    if args.day is not None:
        return {"mode": DAY, "anchor": args.day or today.isoformat()}
    return {"mode": WEEK, "anchor": args.week or today.isoformat()}


def build_config(args, today: date) -> InsightsConfig:
    return InsightsConfig.from_config_file(
        args.config or None,
        top_themes=args.top_themes,
        top_authors=args.top_authors,
        strict=args.strict,
        report=args.report,
        fmt=(args.output or "md").lower(),
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        **_resolve_window(args, today),
    )


def _open_file_in_browser(path: str):
    """Open a file URL in the system default web browser."""
    webbrowser.open("file://" + os.path.abspath(path))


def _write_report_file(out_path: str, content: str, open_html: bool = False):
    """Write the rendered content to a file and optionally open HTML in the browser."""
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    # newline='' is safe for CSV on Windows and harmless for other formats
    with open(out_path, "w", encoding="utf-8", newline="") as fh:
        fh.write(content)
    print(f"Wrote report to {out_path}")
    if open_html:
        try:
            _open_file_in_browser(out_path)
        except webbrowser.Error:
            print("Failed to open browser automatically; file saved at", out_path)


def write_output(fmt: str, rendered: str, args, label: str = ""):
    """Write output to a file when --out-file or --open is given, otherwise to stdout."""
    if not (args.out_file or args.open):
        print(rendered)
        return
    ext = EXTENSIONS.get(fmt, "md")
    out_path = args.out_file.strip() or f"insights_{(label or 'report').replace(' ', '_')}_{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}.{ext}"
    _write_report_file(out_path, rendered, open_html=(args.open and fmt == "html"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarize collected commits, PRs and work items into a ranked review")
    parser.add_argument("--raw-dir", type=str, default=os.getenv("INSIGHTS_RAW_DIR", DEFAULT_RAW_DIR),
                        help="Directory holding prs.json, commits.json and workitems.json (env INSIGHTS_RAW_DIR)")
    window = parser.add_mutually_exclusive_group()
    window.add_argument("--day", nargs="?", const="", default=None, metavar="YYYY-MM-DD", help="Single day (default: today)")
    window.add_argument("--week", nargs="?", const="", default=None, metavar="YYYY-MM-DD", help="Monday-Sunday week containing the date (default)")
    window.add_argument("--range", nargs=2, default=None, metavar=("START", "END"), help="Inclusive date range")
    window.add_argument("--month", type=str, default=None, metavar="YYYY-MM", help="Calendar month")
    parser.add_argument("--report", choices=(REVIEW_REPORT, SUMMARY_REPORT), default=REVIEW_REPORT,
                        help="review: themed initiatives report; summary: per-source activity summary")
    parser.add_argument("--output", type=str, default="md", help="Output format (md, html, json, csv)")
    parser.add_argument("--out-file", type=str, default="", help="Output file path. If omitted the report is printed")
    parser.add_argument("--open", action="store_true", help="Write the report to a file and open HTML output in the browser")
    parser.add_argument("--config", type=str, default="", help="YAML file with themes and thresholds (env INSIGHTS_CONFIG)")
    parser.add_argument("--top-themes", type=int, default=DEFAULT_TOP_THEMES, help="Initiatives to list")
    parser.add_argument("--top-authors", type=int, default=DEFAULT_TOP_AUTHORS, help="Contributors to list")
    parser.add_argument("--strict", action="store_true", help="Fail on the first malformed record instead of skipping it")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # the only clock reading of the run
    today = date.today()
    try:
        config = build_config(args, today)
        raw = load_raw_dir(args.raw_dir)
        result = run_insights(raw, config, today=today)
    except (InsightsError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    fmt = config.fmt if config.report == REVIEW_REPORT else "md"
    write_output(fmt, result.document, args, label=result.period.label)
    return 0


if __name__ == "__main__":
    sys.exit(main())
