from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from fideliza.services import dashboard_service, redemption_service
from fideliza.services.errors import StoreNotFound, TenantMismatch
from fideliza.utils.datetime import utcnow


def test_month_start() -> None:
    assert dashboard_service.month_start(datetime(2025, 11, 12, 14, 30, 5, 123)) == datetime(2025, 11, 1)


def test_store_stats_aggregates_one_store(session, make_customer, make_reward, owner, other_store) -> None:
    bianca = make_customer(200)
    rafael = make_customer(50)
    make_customer(99, store_id=other_store.store_id)
    espresso = make_reward(60)
    cookie = make_reward(10, name="Cookie")
    make_reward(5, name="Retired", is_active=False)
    make_reward(5, name="Elsewhere", store_id=other_store.store_id)

    last_month = dashboard_service.month_start(utcnow()) - timedelta(days=1)
    old = redemption_service.redeem(
        session, customer_id=bianca.customer_id, reward_id=espresso.reward_id, now=last_month
    )
    redemption_service.validate_code(session, principal=owner, store_id=owner.store_id, code=old.redemption.code)
    redemption_service.redeem(session, customer_id=bianca.customer_id, reward_id=espresso.reward_id)
    cancelled = redemption_service.redeem(session, customer_id=rafael.customer_id, reward_id=cookie.reward_id)
    redemption_service.cancel_redemption(
        session, principal=owner, store_id=owner.store_id, redemption_id=cancelled.redemption.redemption_id
    )
    session.commit()

    stats = dashboard_service.store_stats(session, principal=owner, store_id=owner.store_id)

    assert stats.store.slug == "cafe-central"
    assert stats.total_customers == 2
    assert stats.active_rewards == 2
    assert stats.monthly_redemptions == 1
    assert stats.points_in_circulation == 80 + 50


def test_store_stats_of_empty_store(session, owner) -> None:
    stats = dashboard_service.store_stats(session, principal=owner, store_id=owner.store_id)

    assert stats.total_customers == 0
    assert stats.active_rewards == 0
    assert stats.monthly_redemptions == 0
    assert stats.points_in_circulation == 0


def test_store_stats_is_tenant_scoped(session, owner, other_owner, admin) -> None:
    with pytest.raises(TenantMismatch):
        dashboard_service.store_stats(session, principal=other_owner, store_id=owner.store_id)
    with pytest.raises(StoreNotFound):
        dashboard_service.store_stats(session, principal=admin, store_id=uuid4())
