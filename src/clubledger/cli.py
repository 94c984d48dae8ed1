"""CLI entry point for clubledger.

Provides ``main()`` as the entry point for the ``clubledger`` console
script. Each subcommand loads one report view and renders it as text (or
JSON with ``--json``).

Usage::

    clubledger outstanding --admin            # admin outstanding-payment report
    clubledger unpaid                         # what I owe
    clubledger unpaid --admin --search jose   # wallet view, filtered
    clubledger unpaid --share-code abc123     # public share link
    clubledger match 42                       # registration panel of a match
"""

import argparse
import json
import logging
import sys

from clubledger.aggregation import summarize_report
from clubledger.config import ClientConfig
from clubledger.exceptions import ClubLedgerError, InvalidShareCode
from clubledger.formatting import format_currency, format_date
from clubledger.http_client import ReportClient
from clubledger.logging_config import setup_logging
from clubledger.models import MatchSummary, RegistrationDetail
from clubledger.registration import cost_message, registration_stats
from clubledger.report_view import (
    ReportView,
    RequestContext,
    ViewState,
    build_admin_view,
    build_report_view,
)
from clubledger.validation import validate_record, validate_records

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the clubledger CLI."""
    parser = argparse.ArgumentParser(
        prog="clubledger",
        description="Match cost and outstanding-payment reports for the club",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="API root (default: $CLUBLEDGER_BASE_URL or http://localhost:8080)",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help="Bearer token (default: $CLUBLEDGER_API_TOKEN)",
    )
    parser.add_argument(
        "--admin",
        action="store_true",
        help="Act with the admin role",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory for log files (default: data)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail the report on malformed rows instead of skipping them",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of text",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Console logging: -v for INFO, -vv for DEBUG",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("outstanding", help="Admin outstanding-payment report")

    unpaid = sub.add_parser("unpaid", help="Outstanding payments grouped by player")
    unpaid.add_argument(
        "--share-code",
        type=str,
        default=None,
        help="Share code of a public report link",
    )
    unpaid.add_argument(
        "--search",
        type=str,
        default=None,
        help="Only players whose name contains this text",
    )
    unpaid.add_argument(
        "--legacy",
        action="store_true",
        help="Use the v1 anonymous endpoint with a share code",
    )

    match = sub.add_parser("match", help="Registration stats and cost message of a match")
    match.add_argument("match_id", type=int)

    return parser


def _config_from_args(args: argparse.Namespace) -> ClientConfig:
    return ClientConfig.from_env(
        base_url=args.base_url,
        api_token=args.token,
        data_dir=args.data_dir,
        strict_records=True if args.strict else None,
    )


def _context_from_args(args: argparse.Namespace, config: ClientConfig) -> RequestContext:
    permissions = frozenset({"admin"}) if args.admin else frozenset()
    return RequestContext(token=config.api_token, permissions=permissions)


def format_outstanding(view: ReportView, config: ClientConfig) -> str:
    """Render the admin outstanding-payment report."""
    rows = view.items
    totals = summarize_report(rows, config.high_debt_threshold)
    lines = [
        "=" * 60,
        "Outstanding payments",
        "-" * 60,
        f"Total outstanding: {format_currency(totals.total_outstanding, config.currency_symbol)}",
        f"Players:           {totals.player_count}",
        f"High debt:         {totals.high_debt_count}",
        "-" * 60,
    ]
    for row in rows:
        flag = "  HIGH DEBT" if row.unpaid_amount > config.high_debt_threshold else ""
        lines.append(
            "{:<28} {:>3} matches {:>10}{}".format(
                row.player_name,
                row.match_count,
                format_currency(row.unpaid_amount, config.currency_symbol),
                flag,
            )
        )
        if row.email:
            lines.append(f"    {row.email}")
        if row.registration_summary:
            lines.append(f"    {row.registration_summary}")
    lines.append("=" * 60)
    return "\n".join(lines)


def format_grouped(view: ReportView, config: ClientConfig) -> str:
    """Render a grouped report: one block per player with their matches."""
    groups = view.items
    if not groups:
        return "No outstanding payments found"

    lines = []
    if view.query:
        lines.append(f"Showing {len(groups)} results")
    for player in groups:
        lines.append(
            "{} ({} matches) owes {}".format(
                player.player_name,
                player.match_count,
                format_currency(player.total_outstanding, config.currency_symbol),
            )
        )
        for m in player.matches:
            lines.append(
                "  {}  match {:>9}  players {:>2}  share {:>9}{}".format(
                    format_date(m.match_date, config.date_format),
                    format_currency(m.total_cost, config.currency_symbol),
                    m.match_player_count,
                    format_currency(m.individual_cost, config.currency_symbol),
                    "  paid" if m.is_paid else "",
                )
            )
    lines.append("Contact the match organizer to settle your payment")
    return "\n".join(lines)


def _dump(items: list) -> str:
    return json.dumps([i.model_dump(mode="json") for i in items], indent=2)


def _report_error(view: ReportView) -> int:
    if isinstance(view.error, InvalidShareCode):
        print("Something went wrong: this link is invalid or has expired", file=sys.stderr)
    else:
        print(f"Something went wrong: {view.error}", file=sys.stderr)
    return 1


def run_outstanding(client: ReportClient, context: RequestContext, args) -> int:
    view = build_admin_view(client, context)
    if view.load() is ViewState.ERROR:
        return _report_error(view)
    print(_dump(view.items) if args.json else format_outstanding(view, client.config))
    return 0


def run_unpaid(client: ReportClient, context: RequestContext, args) -> int:
    view = build_report_view(client, context, args.share_code, legacy=args.legacy)
    if view.load() is ViewState.ERROR:
        return _report_error(view)
    view.search(args.search)
    print(_dump(view.items) if args.json else format_grouped(view, client.config))
    return 0


def run_match(client: ReportClient, args) -> int:
    config = client.config
    ctx = {"endpoint": f"match-{args.match_id}"}
    match = validate_record(client.get_match(args.match_id), MatchSummary, ctx, strict=True)
    registrations, _ = validate_records(
        client.get_registrations_by_match(args.match_id),
        RegistrationDetail,
        ctx,
        strict=config.strict_records,
    )
    stats = registration_stats(match, registrations)
    message = cost_message(match, stats, client.get_message_template())

    if args.json:
        print(
            json.dumps(
                {
                    "match": match.model_dump(mode="json"),
                    "totalPlayers": stats.total_players,
                    "paid": stats.paid,
                    "unpaid": stats.unpaid,
                    "percentage": stats.percentage,
                    "individualCost": stats.individual_cost,
                    "message": message,
                },
                indent=2,
            )
        )
        return 0

    percentage = "-" if stats.percentage is None else f"{stats.percentage}%"
    print(f"Match {match.match_id} {format_date(match.start, config.date_format)}")
    print(f"Registered:  {stats.total_players}/{stats.invited} ({percentage})")
    print(f"Paid:        {stats.paid}")
    print(f"Unpaid:      {stats.unpaid}")
    print(f"Each pays:   {format_currency(stats.individual_cost, config.currency_symbol)}")
    if message:
        print("-" * 60)
        print(message)
    return 0


def run(args: argparse.Namespace) -> int:
    """Execute a parsed command and return the process exit code."""
    config = _config_from_args(args)
    context = _context_from_args(args, config)

    with ReportClient(config) as client:
        try:
            if args.command == "outstanding":
                return run_outstanding(client, context, args)
            if args.command == "unpaid":
                return run_unpaid(client, context, args)
            return run_match(client, args)
        except ClubLedgerError as e:
            logger.error("%s failed: %s", args.command, e)
            print(f"Something went wrong: {e}", file=sys.stderr)
            return 1
        finally:
            logger.debug("Client stats: %s", client.stats)


def main() -> None:
    """Entry point for the clubledger console script."""
    parser = build_parser()
    args = parser.parse_args()
    log_file = setup_logging(_config_from_args(args), args.command, args.verbose)
    logger.info("clubledger %s (log: %s)", args.command, log_file)
    try:
        code = run(args)
    finally:
        logging.shutdown()
    sys.exit(code)


if __name__ == "__main__":
    main()
