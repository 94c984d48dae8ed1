"""Pydantic v2 models for report rows and derived report structures.

Re-exports all model classes for convenient import::

    from clubledger.models import MatchCostRecord, PlayerOutstandingSummary, ...
"""

from .match_cost import MatchCostRecord
from .registration import MatchSummary, RegistrationDetail
from .summary import (
    AdminOutstandingRow,
    MatchShare,
    PlayerOutstandingSummary,
    ReportTotals,
)

__all__ = [
    "MatchCostRecord",
    "MatchShare",
    "PlayerOutstandingSummary",
    "ReportTotals",
    "AdminOutstandingRow",
    "RegistrationDetail",
    "MatchSummary",
]
