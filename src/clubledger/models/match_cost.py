"""Pydantic v2 validation model for per-registration match cost rows.

Both report endpoint versions return this shape with slightly different
field names; aliases accept either spelling.
"""

import warnings
from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Self


class MatchCostRecord(BaseModel):
    """One registrant's exposure to one match's cost."""

    model_config = ConfigDict(populate_by_name=True)

    match_id: int | None = Field(
        default=None, gt=0, validation_alias=AliasChoices("matchId", "match_id")
    )
    match_date: datetime = Field(
        validation_alias=AliasChoices("matchDate", "date", "match_date")
    )
    match_cost: float = Field(
        ge=0, validation_alias=AliasChoices("matchCost", "match_cost")
    )
    additional_cost: float = Field(
        default=0.0,
        ge=0,
        validation_alias=AliasChoices(
            "matchAdditionalCost", "additionalCost", "additional_cost"
        ),
    )
    match_player_count: int = Field(
        ge=0, validation_alias=AliasChoices("matchPlayerCount", "match_player_count")
    )
    player_id: int = Field(gt=0, validation_alias=AliasChoices("playerId", "player_id"))
    player_name: str = Field(
        min_length=1, validation_alias=AliasChoices("playerName", "player_name")
    )
    player_email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("playerEmail", "email", "player_email"),
    )
    is_paid: bool = Field(default=False, validation_alias=AliasChoices("isPaid", "is_paid"))
    # Guests the registrant pays for, themselves included
    paid_for: int = Field(
        default=1,
        ge=1,
        validation_alias=AliasChoices("totalPlayerPaidFor", "paidFor", "paid_for"),
    )
    # Server-computed share; None means the allocator computes it
    individual_cost: float | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("individualCost", "individual_cost"),
    )

    @field_validator("additional_cost", mode="before")
    @classmethod
    def null_additional_cost(cls, value):
        """LEFT JOINed additional costs arrive as null when a match has none."""
        return 0.0 if value is None else value

    @field_validator("paid_for", mode="before")
    @classmethod
    def null_paid_for(cls, value):
        return 1 if value in (None, 0) else value

    @field_validator("match_date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are UTC so that all dates sort together."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def check_player_count(self) -> Self:
        """A registration row implies at least one registrant on the match."""
        if self.match_player_count == 0 and self.individual_cost is None:
            warnings.warn(
                f"Match {self.match_id} on {self.match_date:%Y-%m-%d} has no "
                f"registrants; player {self.player_id} is allocated nothing",
                stacklevel=2,
            )
        return self
