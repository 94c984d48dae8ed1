"""Match cost allocation.

A match's facility cost plus its additional costs (balls, drinks, ...) is
split equally between the players who registered. Shares are kept at full
float precision; rounding to currency precision happens only when a value
is displayed (see ``clubledger.formatting``).
"""

import logging
from collections.abc import Iterable, Hashable

logger = logging.getLogger(__name__)


def individual_cost(
    match_cost: float,
    additional_cost: float = 0.0,
    player_count: int = 0,
    *,
    paid_for: int = 1,
) -> float:
    """Return one registrant's share of a match's total cost.

    ``(match_cost + additional_cost) / player_count``, multiplied by
    ``paid_for`` when the registrant also pays for guests.

    A match with no registrants has nothing to allocate: the share is 0
    and the anomaly is logged, so a NaN or infinity never reaches a sum.

    Raises:
        ValueError: If a cost, the player count or ``paid_for`` is negative.
    """
    if match_cost < 0 or additional_cost < 0:
        raise ValueError(
            f"Costs must be non-negative (cost={match_cost}, "
            f"additional={additional_cost})"
        )
    if player_count < 0 or paid_for < 0:
        raise ValueError(
            f"Counts must be non-negative (players={player_count}, paid_for={paid_for})"
        )

    if player_count == 0:
        if match_cost or additional_cost:
            logger.warning(
                "Cannot split %.2f between zero registrants; allocating 0",
                match_cost + additional_cost,
            )
        return 0.0

    return paid_for * ((match_cost + additional_cost) / player_count)


def split_match_cost(
    match_cost: float,
    additional_cost: float,
    registrants: Iterable[Hashable],
) -> dict:
    """Split a match's cost equally between ``registrants``.

    Returns a dict of registrant -> share. Duplicate registrants are
    counted once.
    """
    unique = list(dict.fromkeys(registrants))
    share = individual_cost(match_cost, additional_cost, len(unique))
    return {registrant: share for registrant in unique}


def attendance_percentage(registered: int, invited: int) -> int | None:
    """Rounded percentage of invited players who registered.

    Returns None when nobody was invited; callers hide the stat.
    """
    if invited <= 0:
        return None
    return round(registered / invited * 100)
