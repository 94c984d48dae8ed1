"""Outstanding-payment aggregation.

Turns the flat per-registration rows returned by the report endpoints into
one ``PlayerOutstandingSummary`` per player:

1. Group rows by ``player_id``.
2. Compute each row's share with the cost allocator unless the server
   already supplied ``individual_cost``.
3. Sum the unpaid shares into ``total_outstanding`` at full precision.
4. Sort players by name, ignoring case and diacritics.
5. Sort each player's matches by date, oldest first.

Everything here is pure: inputs are never mutated and the derived
structures belong to the caller.
"""

import logging
import math
from collections.abc import Iterable, Sequence

from clubledger.allocation import individual_cost
from clubledger.formatting import DEFAULT_CURRENCY_SYMBOL, format_currency
from clubledger.models import (
    AdminOutstandingRow,
    MatchCostRecord,
    MatchShare,
    PlayerOutstandingSummary,
    ReportTotals,
)
from clubledger.text import mask_email, name_sort_key, normalize_text

logger = logging.getLogger(__name__)

SUMMARY_DATE_FORMAT = "%d.%b.%Y"


def record_share(record: MatchCostRecord) -> float:
    """Return the record's share, preferring the server-computed value."""
    if record.individual_cost is not None:
        return record.individual_cost
    return individual_cost(
        record.match_cost,
        record.additional_cost,
        record.match_player_count,
        paid_for=record.paid_for,
    )


def aggregate_outstanding(
    records: Iterable[MatchCostRecord],
    *,
    unpaid_only: bool = False,
    mask_emails: bool = False,
) -> list[PlayerOutstandingSummary]:
    """Group match cost rows by player and total what each player owes.

    Args:
        records: Rows in any order, paid and unpaid mixed or pre-filtered.
        unpaid_only: Drop paid rows before grouping (the player-facing
            "what do I owe" view). Otherwise paid rows stay in the
            breakdown but never count towards ``total_outstanding``.
        mask_emails: Mask player emails for public reports.

    Returns:
        One summary per distinct ``player_id``, sorted by player name.
    """
    groups: dict[int, list[MatchCostRecord]] = {}
    for record in records:
        if unpaid_only and record.is_paid:
            continue
        groups.setdefault(record.player_id, []).append(record)

    summaries = []
    for player_id, items in groups.items():
        matches = sorted(
            (
                MatchShare(
                    match_id=item.match_id,
                    match_date=item.match_date,
                    match_cost=item.match_cost,
                    additional_cost=item.additional_cost,
                    match_player_count=item.match_player_count,
                    paid_for=item.paid_for,
                    individual_cost=record_share(item),
                    is_paid=item.is_paid,
                )
                for item in items
            ),
            key=lambda m: m.match_date,
        )

        email = next((i.player_email for i in items if i.player_email), None)
        summaries.append(
            PlayerOutstandingSummary(
                player_id=player_id,
                player_name=items[0].player_name,
                player_email=mask_email(email) if mask_emails else email,
                matches=matches,
                total_outstanding=math.fsum(
                    m.individual_cost for m in matches if not m.is_paid
                ),
            )
        )

    summaries.sort(key=lambda s: name_sort_key(s.player_name))
    logger.debug(
        "Aggregated %d players from %d rows",
        len(summaries),
        sum(len(v) for v in groups.values()),
    )
    return summaries


def filter_by_player_name(items: Sequence, query: str | None) -> list:
    """Substring filter on ``player_name`` ignoring case and diacritics.

    Works on summaries and admin rows alike. An empty query keeps every
    item. Filtering never re-aggregates, so applying the same query to
    its own output returns the same list.
    """
    if not query:
        return list(items)
    needle = normalize_text(query)
    return [item for item in items if needle in normalize_text(item.player_name)]


def _outstanding_amount(item) -> float:
    if isinstance(item, AdminOutstandingRow):
        return item.unpaid_amount
    return item.total_outstanding


def summarize_report(items: Sequence, high_debt_threshold: float = 20.0) -> ReportTotals:
    """Header totals for an outstanding-payment report.

    Accepts either grouped summaries or v1 admin rows. A player is "high
    debt" when they owe strictly more than ``high_debt_threshold``.
    """
    amounts = [_outstanding_amount(item) for item in items]
    return ReportTotals(
        total_outstanding=math.fsum(amounts),
        player_count=len(amounts),
        high_debt_count=sum(1 for a in amounts if a > high_debt_threshold),
    )


def registration_summary(
    summary: PlayerOutstandingSummary,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    date_format: str = SUMMARY_DATE_FORMAT,
) -> str:
    """Compact list of unpaid shares, newest first.

    ``"01.Mar.2024:£25.00,15.Feb.2024:£25.00"``
    """
    unpaid = sorted(summary.unpaid_matches, key=lambda m: m.match_date, reverse=True)
    return ",".join(
        f"{m.match_date.strftime(date_format)}:"
        f"{format_currency(m.individual_cost, currency_symbol)}"
        for m in unpaid
    )


def admin_rows(
    summaries: Iterable[PlayerOutstandingSummary],
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    date_format: str = SUMMARY_DATE_FORMAT,
) -> list[AdminOutstandingRow]:
    """Flatten grouped summaries into v1 admin report rows.

    Players who owe nothing are left out.
    """
    rows = []
    for summary in summaries:
        unpaid = summary.unpaid_matches
        if not unpaid:
            continue
        rows.append(
            AdminOutstandingRow(
                player_id=summary.player_id,
                player_name=summary.player_name,
                email=summary.player_email,
                match_count=len(unpaid),
                unpaid_amount=summary.total_outstanding,
                registration_summary=registration_summary(
                    summary, currency_symbol, date_format
                ),
            )
        )
    return rows
