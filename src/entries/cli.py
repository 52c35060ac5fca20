#!/usr/bin/env python3
"""
Journal CLI

Usage:
    python -m src.entries.cli analyze [--text "..."] [--format json|text]
    python -m src.entries.cli add --user USER --text "..." [--date YYYY-MM-DD] [--audio-path PATH] [--no-analyze]
    python -m src.entries.cli list --user USER [--from YYYY-MM-DD] [--to YYYY-MM-DD] [--keyword WORD] [--search TEXT] [--page N] [--page-size N]
    python -m src.entries.cli get --id ID
    python -m src.entries.cli delete --id ID
    python -m src.entries.cli history --id ID
    python -m src.entries.cli delete-user --user USER

``analyze`` reads stdin when --text is omitted and never touches the database.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from typing import Any, Dict, Optional

from src.audit import AuditLogEntry, AuditLogRepository, AuditTrail, DataDeletionLogRepository
from src.insights import InsightExtractor, InsightRecord, Lexicon

from .models import EntryFilters, JournalEntry
from .repository import DEFAULT_PAGE_SIZE, EntryRepository
from .service import EntryService


def format_entry_text(entry: JournalEntry) -> str:
    """One-line summary of an entry"""
    preview = entry.transcript.strip().replace("\n", " ")
    if len(preview) > 60:
        preview = preview[:57] + "..."
    keywords = ", ".join(entry.keywords) or "-"
    return f"[{entry.id}] {entry.date} | {entry.user_id} | {preview} | keywords: {keywords}"


def format_insights_text(insights: InsightRecord) -> str:
    lines = []
    for label, values in (
        ("Wins", insights.wins),
        ("Regrets", insights.regrets),
        ("Tasks", insights.tasks),
    ):
        lines.append(f"{label}:")
        if values:
            lines.extend(f"  - {value}" for value in values)
        else:
            lines.append("  (none)")
    lines.append(f"Keywords: {', '.join(insights.keywords) or '(none)'}")
    return "\n".join(lines)


def format_audit_json(entry: AuditLogEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "operation": entry.operation.value,
        "entry_id": entry.entry_id,
        "user_id": entry.user_id,
        "timestamp": entry.timestamp,
        "before_data": entry.before_data,
        "after_data": entry.after_data,
        "changes": entry.changes,
    }


def format_audit_text(entry: AuditLogEntry) -> str:
    line = f"{entry.timestamp} {entry.operation.value} by {entry.user_id}"
    if entry.changes:
        line += f" | changed: {', '.join(sorted(entry.changes))}"
    return line


def emit(payload: Any, output_format: str, text: str) -> None:
    if output_format == "json":
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(text)


def cmd_analyze(
    extractor: InsightExtractor, text: Optional[str], output_format: str
) -> int:
    """Extract insights without storing anything"""
    transcript = text if text is not None else sys.stdin.read()
    insights = extractor.extract(transcript)
    emit(insights.model_dump(), output_format, format_insights_text(insights))
    return 0


def cmd_add(
    service: EntryService,
    user_id: str,
    text: str,
    date: Optional[str],
    audio_path: Optional[str],
    analyze: bool,
    output_format: str,
) -> int:
    if not text.strip():
        print("Error: transcript text is required.", file=sys.stderr)
        return 1
    try:
        entry = service.create_entry(
            user_id, date, text.strip(), analyze=analyze, audio_file_path=audio_path
        )
    except Exception as exc:
        print(f"Error: failed to add entry: {exc}", file=sys.stderr)
        return 1
    emit(entry.to_dict(), output_format, f"Added: {format_entry_text(entry)}")
    return 0


def cmd_list(
    repo: EntryRepository,
    user_id: str,
    filters: EntryFilters,
    page: int,
    page_size: int,
    output_format: str,
) -> int:
    try:
        result = repo.find(user_id, filters, page, page_size)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if output_format == "json":
        print(json.dumps(result.to_dict(), ensure_ascii=False))
    elif not result.entries:
        print("No entries found.")
    else:
        for entry in result.entries:
            print(format_entry_text(entry))
        print(f"Page {result.page}, {len(result.entries)} of {result.total_count} entries")
    return 0


def cmd_get(repo: EntryRepository, entry_id: int, output_format: str) -> int:
    entry = repo.get(entry_id)
    if not entry:
        print(f"Error: entry {entry_id} not found.", file=sys.stderr)
        return 1
    emit(entry.to_dict(), output_format, format_entry_text(entry))
    return 0


def cmd_delete(repo: EntryRepository, entry_id: int, output_format: str) -> int:
    if not repo.delete(entry_id):
        print(f"Error: entry {entry_id} not found.", file=sys.stderr)
        return 1
    emit({"deleted": True, "id": entry_id}, output_format, f"Deleted: ID {entry_id}")
    return 0


def cmd_delete_user(service: EntryService, user_id: str, output_format: str) -> int:
    try:
        report = service.delete_user_data(user_id, request_source="cli")
    except Exception as exc:
        print(f"Error: failed to delete data of {user_id}: {exc}", file=sys.stderr)
        return 1
    emit(
        asdict(report),
        output_format,
        f"Deleted {report.deleted_entries} entries and {report.deleted_audit_logs} audit logs of {user_id}",
    )
    return 0


def cmd_history(audit_repo: AuditLogRepository, entry_id: int, output_format: str) -> int:
    logs = audit_repo.list_for_entry(entry_id)
    if output_format == "json":
        print(json.dumps([format_audit_json(log) for log in logs], ensure_ascii=False))
    elif not logs:
        print(f"No audit history for entry {entry_id}.")
    else:
        for log in logs:
            print(format_audit_text(log))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Voice journal CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--db-path", type=str, help="SQLite database path (default: data/voice_journal.db)")
    parser.add_argument("--lexicon", type=str, help="YAML lexicon override file")

    subparsers = parser.add_subparsers(dest="command", help="Command to run", required=True)

    def add_format(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--format",
            choices=["json", "text"],
            default="text",
            help="Output format (default: text)",
        )

    parser_analyze = subparsers.add_parser("analyze", help="Extract insights from text")
    parser_analyze.add_argument("--text", help="Transcript text (stdin when omitted)")
    add_format(parser_analyze)

    parser_add = subparsers.add_parser("add", help="Add a journal entry")
    parser_add.add_argument("--user", required=True, help="User ID")
    parser_add.add_argument("--text", required=True, help="Transcript text")
    parser_add.add_argument("--date", help="Entry date (YYYY-MM-DD, default: today)")
    parser_add.add_argument("--audio-path", help="Storage path of the recording")
    parser_add.add_argument("--no-analyze", action="store_true", help="Skip insight extraction")
    add_format(parser_add)

    parser_list = subparsers.add_parser("list", help="List a user's entries")
    parser_list.add_argument("--user", required=True, help="User ID")
    parser_list.add_argument("--from", dest="start_date", help="Earliest date (inclusive)")
    parser_list.add_argument("--to", dest="end_date", help="Latest date (inclusive)")
    parser_list.add_argument(
        "--keyword",
        dest="keywords",
        action="append",
        default=[],
        help="Only entries with this keyword (repeat to match any of several)",
    )
    parser_list.add_argument("--search", help="Only entries whose transcript contains this text")
    parser_list.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    parser_list.add_argument(
        "--page-size", type=int, default=DEFAULT_PAGE_SIZE, help=f"Entries per page (default: {DEFAULT_PAGE_SIZE})"
    )
    add_format(parser_list)

    for name, help_text in (
        ("get", "Show an entry"),
        ("delete", "Delete an entry"),
        ("history", "Show the audit history of an entry"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--id", type=int, required=True, help="Entry ID")
        add_format(sub)

    parser_delete_user = subparsers.add_parser("delete-user", help="Delete every entry and audit log of a user")
    parser_delete_user.add_argument("--user", required=True, help="User ID")
    add_format(parser_delete_user)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point"""
    args = build_parser().parse_args(argv)

    lexicon = Lexicon.from_yaml(args.lexicon) if args.lexicon else None
    extractor = InsightExtractor(lexicon)

    if args.command == "analyze":
        return cmd_analyze(extractor, args.text, args.format)

    audit_repo = AuditLogRepository(db_path=args.db_path)
    repo = EntryRepository(db_path=args.db_path, audit_trail=AuditTrail(audit_repo))

    if args.command == "add":
        service = EntryService(repo, extractor, audit_repo)
        return cmd_add(
            service,
            args.user,
            args.text,
            args.date,
            args.audio_path,
            not args.no_analyze,
            args.format,
        )
    elif args.command == "list":
        filters = EntryFilters(
            start_date=args.start_date,
            end_date=args.end_date,
            keywords=args.keywords,
            search_text=args.search,
        )
        return cmd_list(repo, args.user, filters, args.page, args.page_size, args.format)
    elif args.command == "get":
        return cmd_get(repo, args.id, args.format)
    elif args.command == "delete":
        return cmd_delete(repo, args.id, args.format)
    elif args.command == "history":
        return cmd_history(audit_repo, args.id, args.format)
    elif args.command == "delete-user":
        service = EntryService(repo, extractor, audit_repo, DataDeletionLogRepository(db_path=args.db_path))
        return cmd_delete_user(service, args.user, args.format)
    else:
        print(f"Error: unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
