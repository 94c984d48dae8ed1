"""Pydantic v2 models for a match's registration panel."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RegistrationDetail(BaseModel):
    """A player row on a match; ``registration_id`` is None until they register."""

    model_config = ConfigDict(populate_by_name=True)

    registration_id: int | None = Field(
        default=None, validation_alias=AliasChoices("registrationId", "registration_id")
    )
    match_id: int = Field(gt=0, validation_alias=AliasChoices("matchId", "match_id"))
    player_id: int = Field(gt=0, validation_alias=AliasChoices("playerId", "player_id"))
    player_name: str | None = Field(
        default=None, validation_alias=AliasChoices("playerName", "player_name")
    )
    email: str | None = None
    is_paid: bool = Field(default=False, validation_alias=AliasChoices("isPaid", "is_paid"))
    total_player_paid_for: int = Field(
        default=1,
        ge=0,
        validation_alias=AliasChoices("totalPlayerPaidFor", "total_player_paid_for"),
    )

    @field_validator("is_paid", mode="before")
    @classmethod
    def null_is_paid(cls, value):
        return False if value is None else value

    @property
    def is_registered(self) -> bool:
        return bool(self.registration_id)


class MatchSummary(BaseModel):
    """Header data for one match on the admin dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    match_id: int = Field(gt=0, validation_alias=AliasChoices("matchId", "match_id"))
    sport_center_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("sportCenterName", "sport_center_name"),
    )
    court: str | None = None
    cost: float = Field(default=0.0, ge=0)
    additional_cost: float = Field(
        default=0.0,
        ge=0,
        validation_alias=AliasChoices("additionalCost", "additional_cost"),
    )
    custom_section: str | None = Field(
        default=None, validation_alias=AliasChoices("customSection", "custom_section")
    )
    start: datetime | None = None
    end: datetime | None = None

    @field_validator("cost", "additional_cost", mode="before")
    @classmethod
    def null_cost(cls, value):
        return 0.0 if value is None else value

    @field_validator("custom_section", mode="before")
    @classmethod
    def stringify_section(cls, value):
        return None if value is None else str(value)
