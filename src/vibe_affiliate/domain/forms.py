"""
vibe_affiliate.domain.forms

Input models for dashboard forms and list filters.

Responsibilities:
- Validate login/registration/campaign/profile submissions.
- Describe campaign and conversion filters applied by the mock provider.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Literal

from pydantic import Field, field_validator, model_validator

from vibe_affiliate.domain.models import (
    CampaignStatus,
    CommissionType,
    ConversionStatus,
    DomainModel,
    UserRole,
)


class LoginForm(DomainModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=256)
    remember_me: bool = False


class RegisterForm(DomainModel):
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8, max_length=256)
    confirm_password: str
    role: UserRole = UserRole.affiliate
    accept_terms: bool

    @model_validator(mode="after")
    def check_submission(self) -> RegisterForm:
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if not self.accept_terms:
            raise ValueError("Terms must be accepted")
        if self.role == UserRole.admin:
            raise ValueError("Admin accounts cannot self-register")
        if "@" not in self.email:
            raise ValueError("Invalid email address")
        return self


def campaign_terms_error(
    *,
    start_date: datetime,
    end_date: datetime | None,
    commission_type: CommissionType,
    commission_rate: float,
) -> str | None:
    """Return why a schedule/commission combination is invalid, or None."""
    if end_date is not None and end_date < start_date:
        return "endDate must not precede startDate"
    if commission_type == CommissionType.percentage and commission_rate > 100:
        return "Percentage commission cannot exceed 100"
    return None


class CreateCampaignForm(DomainModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    category: str = Field(min_length=1, max_length=100)
    landing_page_url: str = Field(min_length=1, max_length=2048)
    budget: float = Field(ge=0)
    commission_rate: float = Field(ge=0)
    commission_type: CommissionType = CommissionType.percentage
    start_date: datetime
    end_date: datetime | None = None
    countries: list[str] = Field(default_factory=lambda: ["BR"])
    requires_approval: bool = True

    @model_validator(mode="after")
    def check_dates_and_rate(self) -> CreateCampaignForm:
        error = campaign_terms_error(
            start_date=self.start_date,
            end_date=self.end_date,
            commission_type=self.commission_type,
            commission_rate=self.commission_rate,
        )
        if error:
            raise ValueError(error)
        return self


class UpdateCampaignForm(DomainModel):
    # Partial update; only fields explicitly sent are applied.
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    status: CampaignStatus | None = None
    landing_page_url: str | None = Field(default=None, max_length=2048)
    budget: float | None = Field(default=None, ge=0)
    commission_rate: float | None = Field(default=None, ge=0)
    end_date: datetime | None = None
    countries: list[str] | None = None
    is_private: bool | None = None
    requires_approval: bool | None = None
    max_daily_budget: float | None = Field(default=None, ge=0)


class UpdateProfileForm(DomainModel):
    name: str = Field(min_length=1, max_length=120)
    bio: str | None = Field(default=None, max_length=1000)
    website: str | None = Field(default=None, max_length=2048)
    company: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=40)
    country: str | None = Field(default=None, min_length=2, max_length=2)


_PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90}


class DateFilter(DomainModel):
    start: datetime
    end: datetime
    period: Literal["7d", "30d", "90d", "custom"] = "custom"

    @classmethod
    def from_period(
        cls, period: Literal["7d", "30d", "90d"], *, now: datetime | None = None
    ) -> DateFilter:
        end = now or datetime.now(tz=UTC)
        return cls(start=end - timedelta(days=_PERIOD_DAYS[period]), end=end, period=period)

    @field_validator("start", "end")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # Offset-less timestamps are read as UTC; stored timestamps are all aware.
        return value.replace(tzinfo=UTC) if value.tzinfo is None else value

    @model_validator(mode="after")
    def check_range(self) -> DateFilter:
        if self.end < self.start:
            raise ValueError("end must not precede start")
        return self


class CampaignFilter(DomainModel):
    status: list[CampaignStatus] | None = None
    category: list[str] | None = None
    country: list[str] | None = None
    search: str | None = None
    sort_by: Literal["name", "revenue", "conversions", "created"] | None = None
    sort_order: Literal["asc", "desc"] = "asc"


class ConversionFilter(DateFilter):
    status: list[ConversionStatus] | None = None
    campaign_id: str | None = None
    affiliate_id: str | None = None
    min_amount: float | None = None
    max_amount: float | None = None


class ConversionStatusUpdate(DomainModel):
    status: ConversionStatus
