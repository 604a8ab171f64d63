#!/usr/bin/env python3
"""
DealScope - Command Line Demo

Runs the full dashboard flow against the configured chat model:
1. Ingest a CRM export (CSV)
2. Generate the dashboard (KPIs, charts, deals)
3. Optionally analyze meeting transcripts (.txt, .pdf, .docx)
4. Optionally accept every suggested CRM change

Usage:
    python main.py pipeline.csv
    python main.py pipeline.csv call1.txt call2.pdf --accept-all
"""

import argparse
import asyncio
import sys

from dealscope.config import get_settings
from dealscope.core.log import configure_logging
from dealscope.errors import DealScopeError
from dealscope.use_cases import DealAssistantSession, query_deals


def print_dashboard(session: DealAssistantSession):
    dashboard = session.dashboard
    print("=" * 60)
    print(dashboard.analysis_title)
    print("=" * 60)
    if dashboard.summary:
        print(dashboard.summary)
    print()

    if dashboard.kpis:
        print("KPIs:")
        for kpi in dashboard.kpis:
            print(f"  - {kpi.title}: {kpi.value}" + (f" ({kpi.insight})" if kpi.insight else ""))
        print()

    for chart in dashboard.charts:
        print(f"{chart.title} [{chart.chart_type}]")
        for item in chart.data:
            print(f"  {item.name}: {item.value:g}")
        print()

    print_deals(session)


def print_deals(session: DealAssistantSession):
    print(f"Deals ({len(session.deals)}):")
    for deal in query_deals(session.deals):
        print(f"  [{deal.row_id:>3}] {deal.deal_name} | {deal.amount} | {deal.stage}")
        print(f"        {deal.insight}")
    print()


def print_transcript_analysis(session: DealAssistantSession):
    analysis = session.transcript_analysis
    print("=" * 60)
    print(analysis.analysis_title or "Transcript Analysis")
    print("=" * 60)
    if analysis.overall_summary:
        print(analysis.overall_summary)
    print()

    for meeting in analysis.meetings:
        print(f"{meeting.meeting_title} (sentiment: {meeting.sentiment.value})")
        print(f"  {meeting.summary}")
        for item in meeting.action_items:
            print(f"  [ ] {item}")
        for risk in meeting.risks:
            print(f"  (!) {risk}")
        print()

    print("Suggested updates:")
    for update in session.pending_updates:
        print(f"  [{update.row_id}] {update.deal_name}")
        for name, change in update.changes.items():
            print(f"      {name}: {change.old_value!r} -> {change.new_value!r}")
        print(f"      because: {update.reasoning}")
    if not session.pending_updates:
        print("  (none)")

    print("Suggested new deals:")
    for creation in session.pending_creations:
        draft = creation.deal
        print(f"  [{creation.suggestion_id}] {draft.deal_name} | {draft.amount} | {draft.stage}")
        print(f"      because: {creation.reasoning}")
    if not session.pending_creations:
        print("  (none)")
    print()


async def run(args) -> int:
    session = DealAssistantSession()

    try:
        session.load_csv_file(args.csv)
    except DealScopeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Analyzing {session.file_name} ({len(session.rows)} rows)...")
    if not await session.analyze_dashboard():
        print(session.error, file=sys.stderr)
        return 1
    print_dashboard(session)

    if not args.transcripts:
        return 0

    try:
        transcript = session.load_transcripts(args.transcripts)
    except DealScopeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Analyzing {len(args.transcripts)} transcript(s)...")
    if not await session.analyze_transcripts(transcript):
        print(session.transcript_error, file=sys.stderr)
        return 1
    print_transcript_analysis(session)

    if args.accept_all:
        for suggestion in [*session.pending_updates, *session.pending_creations]:
            session.accept(suggestion, user_id="cli")
        print("All suggestions accepted.")
        print()
        print_deals(session)

    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="AI CRM dashboard from a CRM export")
    parser.add_argument("csv", help="CRM export (.csv)")
    parser.add_argument("transcripts", nargs="*", help="Meeting transcripts (.txt, .pdf, .docx)")
    parser.add_argument("--accept-all", action="store_true", help="Accept every suggested change")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(verbose=args.verbose or settings.debug, json_logs=settings.json_logs)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
