"""Registration panel of a single match.

Derives the attendance figures shown next to a match and renders the
cost notification message that organisers paste into the club chat.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from clubledger.allocation import attendance_percentage, individual_cost
from clubledger.formatting import round_currency
from clubledger.models import MatchSummary, RegistrationDetail

_PLACEHOLDER = re.compile(r"{{(.*?)}}")


@dataclass
class RegistrationStats:
    """Attendance and cost figures for one match."""

    total_players: int
    invited: int
    paid: int
    unpaid: int
    individual_cost: float
    # None when there is nobody to compute a percentage of
    percentage: int | None


def registration_stats(
    match: MatchSummary, registrations: Sequence[RegistrationDetail]
) -> RegistrationStats:
    registered = attendants_only(registrations)
    total_players = len(registered)
    paid = sum(1 for r in registered if r.is_paid)

    return RegistrationStats(
        total_players=total_players,
        invited=len(registrations),
        paid=paid,
        unpaid=total_players - paid,
        individual_cost=individual_cost(
            match.cost, match.additional_cost, total_players
        ),
        percentage=attendance_percentage(total_players, len(registrations)),
    )


def attendants_only(
    registrations: Sequence[RegistrationDetail],
) -> list[RegistrationDetail]:
    """Rows of players who actually registered."""
    return [r for r in registrations if r.is_registered]


def bind_template(template: str, values: Mapping[str, object]) -> str:
    """Replace ``{{ key }}`` placeholders with ``values[key]``.

    Unknown keys and None values render as an empty string.
    """

    def _sub(match: re.Match) -> str:
        value = values.get(match.group(1).strip())
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_sub, template)


def cost_message(
    match: MatchSummary, stats: RegistrationStats, template: str | None
) -> str:
    """Render the match cost notification from the club's message template."""
    if not template:
        return ""
    return bind_template(
        template,
        {
            "cost": str(round_currency(match.cost)),
            "additionalCost": str(round_currency(match.additional_cost)),
            "individualCost": str(round_currency(stats.individual_cost)),
            "totalPlayer": stats.total_players,
            "customSection": match.custom_section,
        },
    )
