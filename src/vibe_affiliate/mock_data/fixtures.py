"""
vibe_affiliate.mock_data.fixtures

Seed data for the in-memory provider.

Every builder returns fresh model instances so providers never share mutable state.
"""

from __future__ import annotations

from datetime import datetime

from vibe_affiliate.domain.models import (
    AffiliateLink,
    AffiliatePerformance,
    Campaign,
    CampaignPerformance,
    CampaignStatus,
    CommissionType,
    Conversion,
    ConversionStatus,
    CountryPerformance,
    DashboardMetrics,
    Device,
    Growth,
    Notification,
    NotificationType,
    Payment,
    PaymentMethod,
    PaymentMethodType,
    PaymentStatus,
    Period,
    User,
    UserRole,
    UtmParams,
)
from vibe_affiliate.security.helpers import hash_password

# Shared demo password for the seeded accounts (dev/test only).
DEMO_PASSWORD = "vibe-demo-123"

_AVATAR = "https://images.unsplash.com/{}?w=150&h=150&fit=crop&crop=face"


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


def seed_users() -> list[User]:
    return [
        User(
            id="user_1",
            email="admin@vibe.com",
            name="Admin VIBE",
            role=UserRole.admin,
            avatar=_AVATAR.format("photo-1472099645785-5658abf4ff4e"),
            phone="+55 11 99999-9999",
            country="BR",
            timezone="America/Sao_Paulo",
            is_verified=True,
            is_active=True,
            last_login=_ts("2024-08-24T08:30:00Z"),
            created_at=_ts("2024-01-01T00:00:00Z"),
            updated_at=_ts("2024-08-24T08:30:00Z"),
        ),
        User(
            id="user_2",
            email="affiliate@example.com",
            name="João Silva",
            role=UserRole.affiliate,
            avatar=_AVATAR.format("photo-1507003211169-0a1dd7228f2d"),
            phone="+55 11 88888-8888",
            country="BR",
            timezone="America/Sao_Paulo",
            is_verified=True,
            is_active=True,
            last_login=_ts("2024-08-23T18:45:00Z"),
            created_at=_ts("2024-02-15T00:00:00Z"),
            updated_at=_ts("2024-08-23T18:45:00Z"),
        ),
        User(
            id="user_3",
            email="advertiser@company.com",
            name="Maria Santos",
            role=UserRole.advertiser,
            avatar=_AVATAR.format("photo-1494790108755-2616b612b2ad"),
            phone="+55 11 77777-7777",
            country="BR",
            timezone="America/Sao_Paulo",
            is_verified=True,
            is_active=True,
            last_login=_ts("2024-08-24T09:15:00Z"),
            created_at=_ts("2024-03-01T00:00:00Z"),
            updated_at=_ts("2024-08-24T09:15:00Z"),
        ),
    ]


def seed_password_hashes() -> dict[str, str]:
    demo = hash_password(DEMO_PASSWORD)
    return {user_id: demo for user_id in ("user_1", "user_2", "user_3")}


def seed_campaigns() -> list[Campaign]:
    return [
        Campaign(
            id="camp_1",
            name="Black Friday 2024 - Electronics",
            description="Promoção especial Black Friday com até 70% de desconto em eletrônicos",
            status=CampaignStatus.active,
            category="Eletrônicos",
            budget=100000,
            spent=65000,
            revenue=325000,
            commission_rate=8.5,
            commission_type=CommissionType.percentage,
            clicks=15420,
            conversions=1285,
            conversion_rate=8.33,
            ctr=3.2,
            epc=21.08,
            countries=["BR", "AR", "CL", "MX"],
            devices=[Device.desktop, Device.mobile, Device.tablet],
            traffic_sources=["google", "facebook", "instagram", "tiktok"],
            start_date=_ts("2024-11-01T00:00:00Z"),
            end_date=_ts("2024-12-01T23:59:59Z"),
            created_at=_ts("2024-10-15T00:00:00Z"),
            updated_at=_ts("2024-08-24T10:00:00Z"),
            advertiser_id="user_3",
            created_by="user_3",
            images=[
                "https://images.unsplash.com/photo-1560472354-b33ff0c44a43?w=800&h=400&fit=crop",
                "https://images.unsplash.com/photo-1586953208448-b95a79798f07?w=800&h=400&fit=crop",
            ],
            banner_url="https://images.unsplash.com/photo-1607082348824-0a96f2a4b9da?w=1200&h=300&fit=crop",
            landing_page_url="https://exemplo-loja.com/black-friday",
            is_private=False,
            requires_approval=True,
            max_daily_budget=5000,
        ),
        Campaign(
            id="camp_2",
            name="Curso de Marketing Digital",
            description="Curso completo de marketing digital com certificado reconhecido",
            status=CampaignStatus.active,
            category="Educação",
            budget=50000,
            spent=23000,
            revenue=150000,
            commission_rate=25,
            commission_type=CommissionType.percentage,
            clicks=8930,
            conversions=567,
            conversion_rate=6.35,
            ctr=4.1,
            epc=16.80,
            countries=["BR", "PT"],
            devices=[Device.desktop, Device.mobile],
            traffic_sources=["youtube", "google", "facebook"],
            start_date=_ts("2024-08-01T00:00:00Z"),
            end_date=_ts("2024-12-31T23:59:59Z"),
            created_at=_ts("2024-07-15T00:00:00Z"),
            updated_at=_ts("2024-08-23T15:30:00Z"),
            advertiser_id="user_3",
            created_by="user_3",
            images=["https://images.unsplash.com/photo-1516321318423-f06f85e504b3?w=800&h=400&fit=crop"],
            landing_page_url="https://cursosdigitais.com/marketing",
            is_private=False,
            requires_approval=False,
            max_daily_budget=2000,
        ),
        Campaign(
            id="camp_3",
            name="Produtos de Beleza Premium",
            description="Linha completa de cosméticos premium com ingredientes naturais",
            status=CampaignStatus.paused,
            category="Beleza e Cuidados",
            budget=75000,
            spent=41000,
            revenue=205000,
            commission_rate=12,
            commission_type=CommissionType.percentage,
            clicks=12350,
            conversions=985,
            conversion_rate=7.97,
            ctr=2.8,
            epc=16.60,
            countries=["BR"],
            devices=[Device.mobile, Device.desktop],
            traffic_sources=["instagram", "tiktok", "youtube"],
            start_date=_ts("2024-06-01T00:00:00Z"),
            created_at=_ts("2024-05-15T00:00:00Z"),
            updated_at=_ts("2024-08-20T11:20:00Z"),
            advertiser_id="user_3",
            created_by="user_3",
            images=["https://images.unsplash.com/photo-1596462502278-27bfdc403348?w=800&h=400&fit=crop"],
            landing_page_url="https://belezapremium.com",
            is_private=True,
            requires_approval=True,
        ),
    ]


def seed_conversions() -> list[Conversion]:
    return [
        Conversion(
            id="conv_1",
            campaign_id="camp_1",
            affiliate_id="user_2",
            advertiser_id="user_3",
            click_id="click_123456",
            transaction_id="tx_789012",
            order_id="order_345678",
            amount=299.90,
            currency="BRL",
            commission=25.49,
            status=ConversionStatus.approved,
            click_timestamp=_ts("2024-08-23T14:30:00Z"),
            conversion_timestamp=_ts("2024-08-23T14:45:00Z"),
            customer_country="BR",
            customer_device=Device.mobile,
            customer_os="iOS",
            customer_browser="Safari",
            referrer="https://instagram.com",
            utm_source="instagram",
            utm_medium="social",
            utm_campaign="blackfriday2024",
            created_at=_ts("2024-08-23T14:45:00Z"),
            updated_at=_ts("2024-08-24T09:00:00Z"),
        ),
        Conversion(
            id="conv_2",
            campaign_id="camp_2",
            affiliate_id="user_2",
            advertiser_id="user_3",
            click_id="click_654321",
            amount=497.00,
            currency="BRL",
            commission=124.25,
            status=ConversionStatus.pending,
            click_timestamp=_ts("2024-08-24T10:15:00Z"),
            conversion_timestamp=_ts("2024-08-24T10:30:00Z"),
            customer_country="BR",
            customer_device=Device.desktop,
            customer_os="Windows",
            customer_browser="Chrome",
            utm_source="google",
            utm_medium="search",
            utm_campaign="marketing-curso",
            created_at=_ts("2024-08-24T10:30:00Z"),
            updated_at=_ts("2024-08-24T10:30:00Z"),
        ),
    ]


def seed_affiliate_links() -> list[AffiliateLink]:
    return [
        AffiliateLink(
            id="link_1",
            campaign_id="camp_1",
            affiliate_id="user_2",
            short_url="https://vibe.ly/bf2024",
            original_url="https://exemplo-loja.com/black-friday?aff=user_2&camp=camp_1",
            slug="bf2024",
            clicks=5420,
            unique_clicks=4890,
            conversions=425,
            is_active=True,
            utm_params=UtmParams(
                source="vibe", medium="affiliate", campaign="blackfriday2024", content="user_2"
            ),
            created_at=_ts("2024-11-01T00:00:00Z"),
            updated_at=_ts("2024-08-24T08:00:00Z"),
        ),
        AffiliateLink(
            id="link_2",
            campaign_id="camp_2",
            affiliate_id="user_2",
            short_url="https://vibe.ly/marketing-curso",
            original_url="https://cursosdigitais.com/marketing?aff=user_2&camp=camp_2",
            clicks=2180,
            unique_clicks=1950,
            conversions=145,
            is_active=True,
            utm_params=UtmParams(
                source="vibe", medium="affiliate", campaign="marketing-digital", content="user_2"
            ),
            created_at=_ts("2024-08-01T00:00:00Z"),
            updated_at=_ts("2024-08-24T07:30:00Z"),
        ),
    ]


def seed_payment_methods() -> list[PaymentMethod]:
    return [
        PaymentMethod(
            id="pm_1",
            user_id="user_2",
            type=PaymentMethodType.pix,
            details={"key_type": "email", "key": "affiliate@example.com"},
            is_default=True,
            is_verified=True,
            created_at=_ts("2024-02-20T00:00:00Z"),
            updated_at=_ts("2024-02-20T00:00:00Z"),
        ),
    ]


def seed_payments() -> list[Payment]:
    return [
        Payment(
            id="pay_1",
            user_id="user_2",
            amount=25.49,
            currency="BRL",
            status=PaymentStatus.completed,
            payment_method_id="pm_1",
            conversions=["conv_1"],
            processing_fee=0.51,
            net_amount=24.98,
            transaction_id="pix_e2e_0001",
            requested_at=_ts("2024-08-24T09:05:00Z"),
            processed_at=_ts("2024-08-24T09:06:00Z"),
            completed_at=_ts("2024-08-24T09:06:30Z"),
            created_at=_ts("2024-08-24T09:05:00Z"),
            updated_at=_ts("2024-08-24T09:06:30Z"),
        ),
    ]


def seed_notifications() -> list[Notification]:
    return [
        Notification(
            id="notif_1",
            user_id="user_2",
            type=NotificationType.success,
            title="Conversão aprovada",
            message="Sua conversão conv_1 na campanha Black Friday 2024 foi aprovada.",
            action_url="/dashboard/conversions/conv_1",
            action_label="Ver conversão",
            created_at=_ts("2024-08-24T09:00:00Z"),
        ),
        Notification(
            id="notif_2",
            user_id="user_3",
            type=NotificationType.info,
            title="Nova conversão pendente",
            message="A campanha Curso de Marketing Digital recebeu uma nova conversão.",
            action_url="/dashboard/conversions/conv_2",
            action_label="Revisar",
            created_at=_ts("2024-08-24T10:30:00Z"),
        ),
    ]


def seed_dashboard_metrics() -> DashboardMetrics:
    return DashboardMetrics(
        period=Period(start=_ts("2024-08-17T00:00:00Z"), end=_ts("2024-08-24T23:59:59Z")),
        total_revenue=125487.50,
        total_commissions=15685.94,
        total_clicks=28450,
        total_conversions=1856,
        conversion_rate=6.52,
        click_through_rate=3.8,
        average_order_value=67.60,
        earnings_per_click=0.55,
        growth=Growth(revenue=18.5, commissions=22.3, clicks=15.7, conversions=12.4),
        top_campaigns=[
            CampaignPerformance(
                campaign_id="camp_1",
                campaign_name="Black Friday 2024 - Electronics",
                revenue=75250.00,
                conversions=1120,
                clicks=18420,
                conversion_rate=6.08,
            ),
            CampaignPerformance(
                campaign_id="camp_2",
                campaign_name="Curso de Marketing Digital",
                revenue=35180.50,
                conversions=485,
                clicks=7200,
                conversion_rate=6.74,
            ),
            CampaignPerformance(
                campaign_id="camp_3",
                campaign_name="Produtos de Beleza Premium",
                revenue=15057.00,
                conversions=251,
                clicks=2830,
                conversion_rate=8.87,
            ),
        ],
        top_affiliates=[
            AffiliatePerformance(
                affiliate_id="user_2",
                affiliate_name="João Silva",
                revenue=89420.50,
                conversions=1285,
                commissions=11226.67,
            ),
        ],
        top_countries=[
            CountryPerformance(
                country="BR", country_name="Brasil", revenue=98750.25, conversions=1456, clicks=22180
            ),
            CountryPerformance(
                country="AR", country_name="Argentina", revenue=15420.50, conversions=285, clicks=4120
            ),
            CountryPerformance(
                country="CL", country_name="Chile", revenue=8950.75, conversions=115, clicks=2150
            ),
        ],
    )
