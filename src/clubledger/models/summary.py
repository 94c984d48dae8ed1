"""Derived report models: per-player groupings and admin report rows.

These are computed in memory on every fetch and never persisted.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class MatchShare(BaseModel):
    """One line of a player's breakdown: a match and their share of it."""

    match_id: int | None = None
    match_date: datetime
    match_cost: float = Field(ge=0)
    additional_cost: float = Field(default=0.0, ge=0)
    match_player_count: int = Field(ge=0)
    paid_for: int = Field(default=1, ge=1)
    individual_cost: float = Field(ge=0)
    is_paid: bool = False

    @property
    def total_cost(self) -> float:
        """Facility cost plus extras for the whole match."""
        return self.match_cost + self.additional_cost


class PlayerOutstandingSummary(BaseModel):
    """Aggregate of one player's match shares."""

    player_id: int = Field(gt=0)
    player_name: str
    player_email: str | None = None
    matches: list[MatchShare] = Field(default_factory=list)
    total_outstanding: float = 0.0

    @property
    def match_count(self) -> int:
        return len(self.matches)

    @property
    def unpaid_matches(self) -> list[MatchShare]:
        return [m for m in self.matches if not m.is_paid]


class ReportTotals(BaseModel):
    """Header figures on the admin outstanding-payment report."""

    total_outstanding: float = 0.0
    player_count: int = 0
    high_debt_count: int = 0


class AdminOutstandingRow(BaseModel):
    """One row of the v1 admin outstanding-payment report."""

    model_config = ConfigDict(populate_by_name=True)

    player_id: int = Field(gt=0, validation_alias=AliasChoices("playerId", "player_id"))
    player_name: str = Field(validation_alias=AliasChoices("playerName", "player_name"))
    email: str | None = None
    match_count: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("matchCount", "match_count")
    )
    unpaid_amount: float = Field(
        default=0.0, validation_alias=AliasChoices("unpaidAmount", "unpaid_amount")
    )
    registration_summary: str = Field(
        default="",
        validation_alias=AliasChoices("registrationSummary", "registration_summary"),
    )
