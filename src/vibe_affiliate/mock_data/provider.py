"""
vibe_affiliate.mock_data.provider

In-memory data provider that stands in for the dashboard's backend API.

Responsibilities:
- Hold per-instance copies of the seed fixtures.
- Expose async read/filter/mutation operations with simulated network latency.
- Derive per-user stats and chart series from the in-memory data.

Returned models are copies; callers change state only through the mutators.
"""

from __future__ import annotations

import asyncio
import random
import uuid
from collections.abc import Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any

from vibe_affiliate.domain.forms import CampaignFilter, ConversionFilter, campaign_terms_error
from vibe_affiliate.domain.models import (
    AffiliateLink,
    Campaign,
    CampaignStatus,
    ChartDataPoint,
    CommissionType,
    Conversion,
    ConversionStatus,
    DashboardMetrics,
    Device,
    Notification,
    Payment,
    PaymentMethod,
    User,
    UserProfile,
    UserRole,
    UserStats,
)
from vibe_affiliate.mock_data import fixtures
from vibe_affiliate.observability.logging import get_logger
from vibe_affiliate.security.helpers import hash_password, verify_password

log = get_logger(__name__)

_EARNING_STATUSES = frozenset({ConversionStatus.approved, ConversionStatus.paid})
_PROFILE_FIELDS = ("bio", "website", "company", "tax_id")
_USER_UPDATABLE = ("name", "phone", "country", "avatar", "timezone")


class MockDataError(Exception):
    pass


class InvalidTransitionError(MockDataError):
    def __init__(self, current: ConversionStatus, requested: ConversionStatus) -> None:
        super().__init__(f"Cannot move conversion from {current} to {requested}")
        self.current = current
        self.requested = requested


class DuplicateEmailError(MockDataError):
    pass


class InvalidCampaignError(MockDataError):
    pass


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


async def simulate_network_delay(
    min_ms: float = 200, max_ms: float = 1200, *, enabled: bool = True
) -> None:
    if not enabled:
        return
    await asyncio.sleep(random.uniform(min_ms, max_ms) / 1000)


def generate_chart_data(
    days: int = 30, *, today: date | None = None, rng: random.Random | None = None
) -> list[ChartDataPoint]:
    """
    One synthetic point per day for the last `days` days, oldest first, ending today (UTC).
    """
    rng = rng or random.Random()
    end = today or _now().date()
    points: list[ChartDataPoint] = []
    for offset in range(days - 1, -1, -1):
        day = end - timedelta(days=offset)
        points.append(
            ChartDataPoint(
                date=day.isoformat(),
                value=rng.randint(5000, 14999),
                conversions=rng.randint(50, 149),
                clicks=rng.randint(500, 1499),
            )
        )
    return points


class MockDataProvider:
    """
    Simulated dashboard API over in-memory lists.

    `simulate_latency=False` turns every delay into a no-op (tests, local scripts).
    """

    def __init__(self, *, simulate_latency: bool = True) -> None:
        self._simulate_latency = simulate_latency
        self._users = fixtures.seed_users()
        self._password_hashes = fixtures.seed_password_hashes()
        self._profiles: dict[str, dict[str, Any]] = {}
        self._campaigns = fixtures.seed_campaigns()
        self._conversions = fixtures.seed_conversions()
        self._links = fixtures.seed_affiliate_links()
        self._payment_methods = fixtures.seed_payment_methods()
        self._payments = fixtures.seed_payments()
        self._notifications = fixtures.seed_notifications()
        self._metrics = fixtures.seed_dashboard_metrics()

    async def _delay(self, min_ms: float, max_ms: float) -> None:
        await simulate_network_delay(min_ms, max_ms, enabled=self._simulate_latency)

    # --- Users ---------------------------------------------------------------

    async def get_user(self, user_id: str) -> User | None:
        await self._delay(300, 800)
        user = self._find_user(user_id)
        return user.model_copy(deep=True) if user else None

    async def list_users(self) -> list[User]:
        await self._delay(400, 1000)
        return [u.model_copy(deep=True) for u in self._users]

    async def get_user_by_email(self, email: str) -> User | None:
        await self._delay(300, 800)
        user = self._find_user_by_email(email)
        return user.model_copy(deep=True) if user else None

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        await self._delay(300, 800)
        user = self._find_user(user_id)
        if user is None:
            return None
        return UserProfile(
            **user.model_dump(),
            **self._profiles.get(user_id, {}),
            payment_methods=[
                m.model_copy(deep=True) for m in self._payment_methods if m.user_id == user_id
            ],
            stats=self._user_stats(user_id),
        )

    async def create_user(
        self, *, name: str, email: str, password: str, role: UserRole
    ) -> User:
        await self._delay(800, 1500)
        if self._find_user_by_email(email) is not None:
            raise DuplicateEmailError(f"Email already registered: {email}")
        now = _now()
        user = User(
            id=_new_id("user"),
            email=email.strip().lower(),
            name=name,
            role=role,
            is_verified=False,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self._users.append(user)
        self._password_hashes[user.id] = hash_password(password)
        log.info("mock_user_created", user_id=user.id, role=role.value)
        return user.model_copy(deep=True)

    async def update_user(self, user_id: str, data: Mapping[str, Any]) -> UserProfile | None:
        await self._delay(500, 1000)
        idx = self._user_index(user_id)
        if idx is None:
            return None
        user_fields = {k: v for k, v in data.items() if k in _USER_UPDATABLE}
        profile_fields = {k: v for k, v in data.items() if k in _PROFILE_FIELDS}
        self._users[idx] = self._users[idx].model_copy(update={**user_fields, "updated_at": _now()})
        self._profiles.setdefault(user_id, {}).update(profile_fields)
        return await self.get_user_profile(user_id)

    async def verify_credentials(self, email: str, password: str) -> User | None:
        await self._delay(300, 800)
        user = self._find_user_by_email(email)
        if user is None or not user.is_active:
            return None
        stored = self._password_hashes.get(user.id)
        if stored is None or not verify_password(password, stored):
            return None
        user.last_login = _now()
        return user.model_copy(deep=True)

    # --- Campaigns -----------------------------------------------------------

    async def list_campaigns(
        self,
        *,
        status: str | None = None,
        user_id: str | None = None,
        search: str | None = None,
    ) -> list[Campaign]:
        await self._delay(500, 1200)
        campaigns = list(self._campaigns)
        if status:
            campaigns = [c for c in campaigns if c.status == status]
        if user_id:
            campaigns = [c for c in campaigns if c.created_by == user_id]
        if search:
            campaigns = [c for c in campaigns if _matches_search(c, search)]
        return [c.model_copy(deep=True) for c in campaigns]

    async def filter_campaigns(self, flt: CampaignFilter) -> list[Campaign]:
        await self._delay(500, 1200)
        campaigns = list(self._campaigns)
        if flt.status:
            campaigns = [c for c in campaigns if c.status in flt.status]
        if flt.category:
            wanted = {c.lower() for c in flt.category}
            campaigns = [c for c in campaigns if c.category.lower() in wanted]
        if flt.country:
            wanted = {c.upper() for c in flt.country}
            campaigns = [c for c in campaigns if wanted.intersection(c.countries)]
        if flt.search:
            campaigns = [c for c in campaigns if _matches_search(c, flt.search)]
        if flt.sort_by:
            campaigns.sort(key=_CAMPAIGN_SORT_KEYS[flt.sort_by], reverse=flt.sort_order == "desc")
        return [c.model_copy(deep=True) for c in campaigns]

    async def get_campaign(self, campaign_id: str) -> Campaign | None:
        await self._delay(300, 700)
        campaign = next((c for c in self._campaigns if c.id == campaign_id), None)
        return campaign.model_copy(deep=True) if campaign else None

    async def create_campaign(self, data: Mapping[str, Any]) -> Campaign:
        await self._delay(1000, 2000)
        now = _now()

        def pick(key: str, default: Any) -> Any:
            value = data.get(key)
            return default if value is None else value

        campaign = Campaign(
            id=_new_id("camp"),
            name=pick("name", "Nova Campanha"),
            description=data.get("description"),
            status=CampaignStatus.draft,
            category=pick("category", "Outros"),
            budget=pick("budget", 0),
            spent=0,
            revenue=0,
            commission_rate=pick("commission_rate", 10),
            commission_type=pick("commission_type", CommissionType.percentage),
            clicks=0,
            conversions=0,
            conversion_rate=0,
            ctr=0,
            epc=0,
            countries=pick("countries", ["BR"]),
            devices=pick("devices", [Device.desktop, Device.mobile]),
            traffic_sources=pick("traffic_sources", []),
            start_date=pick("start_date", now),
            end_date=data.get("end_date"),
            created_at=now,
            updated_at=now,
            advertiser_id=pick("advertiser_id", "user_3"),
            created_by=pick("created_by", "user_3"),
            images=pick("images", []),
            banner_url=data.get("banner_url"),
            landing_page_url=pick("landing_page_url", ""),
            is_private=pick("is_private", False),
            requires_approval=pick("requires_approval", True),
            max_daily_budget=data.get("max_daily_budget"),
        )
        self._campaigns.append(campaign)
        log.info("mock_campaign_created", campaign_id=campaign.id, created_by=campaign.created_by)
        return campaign.model_copy(deep=True)

    async def update_campaign(self, campaign_id: str, data: Mapping[str, Any]) -> Campaign | None:
        await self._delay(800, 1500)
        idx = next((i for i, c in enumerate(self._campaigns) if c.id == campaign_id), None)
        if idx is None:
            return None
        merged = {
            **self._campaigns[idx].model_dump(),
            **{k: v for k, v in data.items() if k != "id"},
            "updated_at": _now(),
        }
        # Re-validate so a bad partial update cannot corrupt the stored campaign.
        campaign = Campaign.model_validate(merged)
        error = campaign_terms_error(
            start_date=campaign.start_date,
            end_date=campaign.end_date,
            commission_type=campaign.commission_type,
            commission_rate=campaign.commission_rate,
        )
        if error:
            raise InvalidCampaignError(error)
        self._campaigns[idx] = campaign
        return campaign.model_copy(deep=True)

    async def delete_campaign(self, campaign_id: str) -> bool:
        await self._delay(500, 1000)
        idx = next((i for i, c in enumerate(self._campaigns) if c.id == campaign_id), None)
        if idx is None:
            return False
        del self._campaigns[idx]
        log.info("mock_campaign_deleted", campaign_id=campaign_id)
        return True

    # --- Conversions ---------------------------------------------------------

    async def list_conversions(
        self,
        *,
        campaign_id: str | None = None,
        affiliate_id: str | None = None,
        status: str | None = None,
    ) -> list[Conversion]:
        await self._delay(600, 1400)
        conversions = list(self._conversions)
        if campaign_id:
            conversions = [c for c in conversions if c.campaign_id == campaign_id]
        if affiliate_id:
            conversions = [c for c in conversions if c.affiliate_id == affiliate_id]
        if status:
            conversions = [c for c in conversions if c.status == status]
        return [c.model_copy(deep=True) for c in conversions]

    async def filter_conversions(self, flt: ConversionFilter) -> list[Conversion]:
        await self._delay(600, 1400)
        result: list[Conversion] = []
        for c in self._conversions:
            if not flt.start <= c.conversion_timestamp <= flt.end:
                continue
            if flt.status and c.status not in flt.status:
                continue
            if flt.campaign_id and c.campaign_id != flt.campaign_id:
                continue
            if flt.affiliate_id and c.affiliate_id != flt.affiliate_id:
                continue
            if flt.min_amount is not None and c.amount < flt.min_amount:
                continue
            if flt.max_amount is not None and c.amount > flt.max_amount:
                continue
            result.append(c.model_copy(deep=True))
        return result

    async def get_conversion(self, conversion_id: str) -> Conversion | None:
        await self._delay(300, 700)
        conversion = next((c for c in self._conversions if c.id == conversion_id), None)
        return conversion.model_copy(deep=True) if conversion else None

    async def update_conversion_status(
        self, conversion_id: str, status: ConversionStatus
    ) -> Conversion | None:
        await self._delay(500, 1000)
        conversion = next((c for c in self._conversions if c.id == conversion_id), None)
        if conversion is None:
            return None
        if not conversion.can_transition_to(status):
            raise InvalidTransitionError(conversion.status, status)
        conversion.status = status
        conversion.updated_at = _now()
        return conversion.model_copy(deep=True)

    async def upsert_conversion(self, conversion: Conversion) -> bool:
        """
        Insert or replace by id; returns True when the conversion is new.

        Replacing a conversion with a different status must follow the status
        lifecycle, else `InvalidTransitionError` is raised and nothing changes.
        """
        await self._delay(200, 500)
        stored = conversion.model_copy(deep=True)
        for i, existing in enumerate(self._conversions):
            if existing.id == conversion.id:
                if stored.status != existing.status and not existing.can_transition_to(
                    stored.status
                ):
                    raise InvalidTransitionError(existing.status, stored.status)
                self._conversions[i] = stored
                return False
        self._conversions.append(stored)
        return True

    # --- Links ---------------------------------------------------------------

    async def list_affiliate_links(self, affiliate_id: str) -> list[AffiliateLink]:
        await self._delay(400, 900)
        return [
            link.model_copy(deep=True) for link in self._links if link.affiliate_id == affiliate_id
        ]

    async def get_link(self, link_id: str) -> AffiliateLink | None:
        await self._delay(100, 300)
        link = next((link for link in self._links if link.id == link_id), None)
        return link.model_copy(deep=True) if link else None

    async def get_link_by_slug(self, slug: str) -> AffiliateLink | None:
        await self._delay(100, 300)
        link = next((link for link in self._links if link.slug == slug), None)
        return link.model_copy(deep=True) if link else None

    async def record_click(self, link_id: str, *, unique: bool) -> AffiliateLink | None:
        await self._delay(50, 150)
        link = next((link for link in self._links if link.id == link_id), None)
        if link is None:
            return None
        link.clicks += 1
        if unique:
            link.unique_clicks += 1
        link.updated_at = _now()
        return link.model_copy(deep=True)

    # --- Payments / notifications / metrics ----------------------------------

    async def list_payments(self, user_id: str) -> list[Payment]:
        await self._delay(400, 900)
        return [p.model_copy(deep=True) for p in self._payments if p.user_id == user_id]

    async def list_payment_methods(self, user_id: str) -> list[PaymentMethod]:
        await self._delay(300, 700)
        return [m.model_copy(deep=True) for m in self._payment_methods if m.user_id == user_id]

    async def list_notifications(self, user_id: str) -> list[Notification]:
        await self._delay(300, 700)
        items = [n for n in self._notifications if n.user_id == user_id]
        items.sort(key=lambda n: n.created_at, reverse=True)
        return [n.model_copy(deep=True) for n in items]

    async def get_dashboard_metrics(self) -> DashboardMetrics:
        await self._delay(800, 1500)
        return self._metrics.model_copy(deep=True)

    # --- Internals -----------------------------------------------------------

    def _find_user(self, user_id: str) -> User | None:
        return next((u for u in self._users if u.id == user_id), None)

    def _user_index(self, user_id: str) -> int | None:
        return next((i for i, u in enumerate(self._users) if u.id == user_id), None)

    def _find_user_by_email(self, email: str) -> User | None:
        needle = email.strip().lower()
        return next((u for u in self._users if u.email.lower() == needle), None)

    def _user_stats(self, user_id: str) -> UserStats:
        conversions = [
            c for c in self._conversions if user_id in (c.affiliate_id, c.advertiser_id)
        ]
        clicks = sum(link.clicks for link in self._links if link.affiliate_id == user_id)
        earnings = sum(c.commission for c in conversions if c.status in _EARNING_STATUSES)
        return UserStats(
            total_earnings=round(earnings, 2),
            total_conversions=len(conversions),
            total_clicks=clicks,
            conversion_rate=round(len(conversions) / clicks * 100, 2) if clicks else 0.0,
            average_order_value=(
                round(sum(c.amount for c in conversions) / len(conversions), 2)
                if conversions
                else 0.0
            ),
        )


def _matches_search(campaign: Campaign, search: str) -> bool:
    needle = search.lower()
    return (
        needle in campaign.name.lower()
        or needle in (campaign.description or "").lower()
        or needle in campaign.category.lower()
    )


_CAMPAIGN_SORT_KEYS = {
    "name": lambda c: c.name.lower(),
    "revenue": lambda c: c.revenue,
    "conversions": lambda c: c.conversions,
    "created": lambda c: c.created_at,
}


# --- Module Notes -----------------------------------------------------------
# State lives for the lifetime of one provider instance (one per app); restarting the
# process resets everything to the seed fixtures.
