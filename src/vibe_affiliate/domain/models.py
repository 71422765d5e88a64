"""
vibe_affiliate.domain.models

Core domain types for the affiliate platform.

Responsibilities:
- Status/role enumerations (stable wire values).
- Pydantic models for users, campaigns, conversions, payments, links, metrics,
  notifications and webhooks.

Attributes are snake_case in Python and camelCase on the wire (the dashboard
front-end contract); models accept either form on input.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Literal
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UserRole(enum.StrEnum):
    admin = "admin"
    affiliate = "affiliate"
    advertiser = "advertiser"
    manager = "manager"


class CampaignStatus(enum.StrEnum):
    draft = "draft"
    active = "active"
    paused = "paused"
    ended = "ended"


class ConversionStatus(enum.StrEnum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    paid = "paid"


class PaymentStatus(enum.StrEnum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class CommissionType(enum.StrEnum):
    percentage = "percentage"
    fixed = "fixed"


class Device(enum.StrEnum):
    desktop = "desktop"
    mobile = "mobile"
    tablet = "tablet"


class PaymentMethodType(enum.StrEnum):
    paypal = "paypal"
    bank_transfer = "bank_transfer"
    pix = "pix"
    crypto = "crypto"


class NotificationType(enum.StrEnum):
    info = "info"
    success = "success"
    warning = "warning"
    error = "error"


# Allowed conversion status moves; `paid` and `rejected` are terminal.
_CONVERSION_TRANSITIONS: dict[ConversionStatus, frozenset[ConversionStatus]] = {
    ConversionStatus.pending: frozenset({ConversionStatus.approved, ConversionStatus.rejected}),
    ConversionStatus.approved: frozenset({ConversionStatus.paid}),
    ConversionStatus.rejected: frozenset(),
    ConversionStatus.paid: frozenset(),
}


class DomainModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Users -------------------------------------------------------------------


class User(DomainModel):
    id: str
    email: str
    name: str
    role: UserRole
    avatar: str | None = None
    phone: str | None = None
    country: str | None = None
    timezone: str | None = None
    is_verified: bool = False
    is_active: bool = True
    last_login: datetime | None = None
    created_at: datetime
    updated_at: datetime


class NotificationChannels(DomainModel):
    email: bool = True
    push: bool = True
    sms: bool = False


class UserPreferences(DomainModel):
    notifications: NotificationChannels = Field(default_factory=NotificationChannels)
    language: str = "pt-BR"
    currency: str = "BRL"
    timezone: str = "America/Sao_Paulo"


class UserStats(DomainModel):
    total_earnings: float = 0.0
    total_conversions: int = 0
    total_clicks: int = 0
    conversion_rate: float = 0.0
    average_order_value: float = 0.0


class PaymentMethod(DomainModel):
    id: str
    user_id: str
    type: PaymentMethodType
    details: dict[str, str] = Field(default_factory=dict)
    is_default: bool = False
    is_verified: bool = False
    created_at: datetime
    updated_at: datetime


class UserProfile(User):
    bio: str | None = None
    website: str | None = None
    company: str | None = None
    tax_id: str | None = None
    payment_methods: list[PaymentMethod] = Field(default_factory=list)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    stats: UserStats = Field(default_factory=UserStats)


# --- Campaigns ---------------------------------------------------------------


class Campaign(DomainModel):
    id: str
    name: str
    description: str | None = None
    status: CampaignStatus
    category: str

    budget: float
    spent: float = 0.0
    revenue: float = 0.0
    commission_rate: float
    commission_type: CommissionType

    clicks: int = 0
    conversions: int = 0
    conversion_rate: float = 0.0
    ctr: float = 0.0
    epc: float = 0.0

    countries: list[str] = Field(default_factory=list)
    devices: list[Device] = Field(default_factory=list)
    traffic_sources: list[str] = Field(default_factory=list)

    start_date: datetime
    end_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

    advertiser_id: str
    created_by: str

    images: list[str] = Field(default_factory=list)
    banner_url: str | None = None
    landing_page_url: str

    is_private: bool = False
    requires_approval: bool = True
    max_daily_budget: float | None = None


# --- Conversions -------------------------------------------------------------


class Conversion(DomainModel):
    id: str
    campaign_id: str
    affiliate_id: str
    advertiser_id: str

    click_id: str
    transaction_id: str | None = None
    order_id: str | None = None

    amount: float
    currency: str
    commission: float

    status: ConversionStatus

    click_timestamp: datetime
    conversion_timestamp: datetime

    # Customer data is anonymized upstream; no PII beyond coarse attributes.
    customer_country: str | None = None
    customer_device: Device
    customer_os: str | None = Field(default=None, alias="customerOS")
    customer_browser: str | None = None

    referrer: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None

    created_at: datetime
    updated_at: datetime

    def can_transition_to(self, status: ConversionStatus) -> bool:
        return status in _CONVERSION_TRANSITIONS[self.status]


# --- Payments ----------------------------------------------------------------


class Payment(DomainModel):
    id: str
    user_id: str
    amount: float
    currency: str
    status: PaymentStatus
    payment_method_id: str

    # Conversion ids settled by this payment.
    conversions: list[str] = Field(default_factory=list)

    processing_fee: float | None = None
    net_amount: float

    transaction_id: str | None = None
    gateway_response: dict[str, Any] | None = None

    requested_at: datetime
    processed_at: datetime | None = None
    completed_at: datetime | None = None

    notes: str | None = None

    created_at: datetime
    updated_at: datetime


# --- Links -------------------------------------------------------------------


class UtmParams(DomainModel):
    source: str | None = None
    medium: str | None = None
    campaign: str | None = None
    content: str | None = None
    term: str | None = None


class AffiliateLink(DomainModel):
    id: str
    campaign_id: str
    affiliate_id: str

    short_url: str
    original_url: str
    slug: str | None = None

    clicks: int = 0
    unique_clicks: int = 0
    conversions: int = 0

    is_active: bool = True
    expires_at: datetime | None = None

    utm_params: UtmParams = Field(default_factory=UtmParams)

    created_at: datetime
    updated_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def tracking_url(self) -> str:
        """
        Original URL with the link's UTM params merged into the query string.

        Existing query parameters are preserved; `utm_*` keys already present
        on the original URL are overridden by the link's values.
        """
        parts = urlsplit(self.original_url)
        utm = {
            f"utm_{k}": v
            for k, v in self.utm_params.model_dump(exclude_none=True, by_alias=False).items()
        }
        query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in utm]
        query.extend(utm.items())
        return urlunsplit(parts._replace(query=urlencode(query)))


# --- Analytics ---------------------------------------------------------------


class Period(DomainModel):
    start: datetime
    end: datetime


class Growth(DomainModel):
    # Percent change against the previous period of the same length.
    revenue: float = 0.0
    commissions: float = 0.0
    clicks: float = 0.0
    conversions: float = 0.0


class CampaignPerformance(DomainModel):
    campaign_id: str
    campaign_name: str
    revenue: float
    conversions: int
    clicks: int
    conversion_rate: float


class AffiliatePerformance(DomainModel):
    affiliate_id: str
    affiliate_name: str
    revenue: float
    conversions: int
    commissions: float


class CountryPerformance(DomainModel):
    country: str
    country_name: str
    revenue: float
    conversions: int
    clicks: int


class DashboardMetrics(DomainModel):
    period: Period

    total_revenue: float
    total_commissions: float
    total_clicks: int
    total_conversions: int

    conversion_rate: float
    click_through_rate: float
    average_order_value: float
    earnings_per_click: float

    growth: Growth = Field(default_factory=Growth)

    top_campaigns: list[CampaignPerformance] = Field(default_factory=list)
    top_affiliates: list[AffiliatePerformance] = Field(default_factory=list)
    top_countries: list[CountryPerformance] = Field(default_factory=list)


class ChartDataPoint(DomainModel):
    date: str
    value: float
    label: str | None = None
    conversions: int | None = None
    clicks: int | None = None


class ChartSeries(DomainModel):
    name: str
    data: list[ChartDataPoint] = Field(default_factory=list)
    color: str | None = None


# --- Notifications / webhooks / theme ----------------------------------------


class Notification(DomainModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    is_read: bool = False
    action_url: str | None = None
    action_label: str | None = None
    created_at: datetime


class WebhookPayload(DomainModel):
    event: str
    timestamp: str
    data: dict[str, Any] = Field(default_factory=dict)
    signature: str | None = None


class AffiliateSummary(DomainModel):
    # Partial user view embedded in webhooks.
    id: str | None = None
    email: str | None = None
    name: str | None = None
    role: UserRole | None = None


class ConversionWebhookData(DomainModel):
    conversion: Conversion
    campaign: Campaign
    affiliate: AffiliateSummary = Field(default_factory=AffiliateSummary)


class ConversionWebhook(WebhookPayload):
    event: Literal["conversion.created", "conversion.updated"]
    data: ConversionWebhookData


class ThemeConfig(DomainModel):
    mode: Literal["light", "dark", "system"] = "system"
    primary_color: str
    accent_color: str
    border_radius: Literal["none", "sm", "md", "lg"] = "md"


# --- Module Notes -----------------------------------------------------------
# Enum values are part of the front-end contract; treat them as stable API.
