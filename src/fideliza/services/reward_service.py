"""Reward catalog: listings, availability and operator maintenance."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.security import Principal
from ..models import Reward, RewardCategory, RewardType, Store
from ..utils.datetime import to_naive_utc, utcnow
from .errors import InvalidReward, RewardNotFound, StoreNotFound
from .tenancy import ensure_store_access, get_accessible_store

logger = logging.getLogger(__name__)


def is_expired(reward: Reward, now: datetime) -> bool:
    return not reward.never_expires and reward.valid_until is not None and reward.valid_until < now


def is_exhausted(reward: Reward) -> bool:
    return reward.max_redemptions is not None and reward.current_redemptions >= reward.max_redemptions


def is_available(reward: Reward, now: Optional[datetime] = None) -> bool:
    """True when the reward can currently be redeemed by an eligible customer."""

    now = now or utcnow()
    return reward.is_active and not is_expired(reward, now) and not is_exhausted(reward)


def get_store_by_slug(session: Session, slug: str) -> Store:
    store = session.execute(select(Store).where(Store.slug == slug)).scalar_one_or_none()
    if store is None or not store.is_active:
        raise StoreNotFound(f"Store {slug} not found")
    return store


def list_redeemable_rewards(session: Session, *, store_id: UUID) -> Sequence[Reward]:
    """Active rewards of a store, cheapest first (public listing)."""

    stmt = (
        select(Reward)
        .where(Reward.store_id == store_id, Reward.is_active.is_(True))
        .order_by(Reward.points_required.asc(), Reward.name.asc())
    )
    return session.execute(stmt).scalars().all()


def list_store_rewards(session: Session, *, principal: Principal, store_id: UUID) -> Sequence[Reward]:
    ensure_store_access(principal, store_id)
    stmt = select(Reward).where(Reward.store_id == store_id).order_by(Reward.created_at.desc())
    return session.execute(stmt).scalars().all()


def create_reward(
    session: Session,
    *,
    principal: Principal,
    store_id: UUID,
    name: str,
    points_required: int,
    description: Optional[str] = None,
    category: RewardCategory = RewardCategory.OTHER,
    reward_type: RewardType = RewardType.VOUCHER,
    reward_value: Optional[str] = None,
    max_redemptions: Optional[int] = None,
    valid_until: Optional[datetime] = None,
    never_expires: bool = False,
    minimum_purchase: Optional[int] = None,
    terms_and_conditions: Optional[str] = None,
) -> Reward:
    """Add a reward to the store catalog."""

    get_accessible_store(session, principal, store_id)

    if not name or not name.strip():
        raise InvalidReward("Reward name is required.")
    if points_required <= 0:
        raise InvalidReward("Points required must be greater than zero.")
    if max_redemptions is not None and max_redemptions <= 0:
        raise InvalidReward("Redemption limit must be greater than zero.")

    now = utcnow()
    valid_until = None if never_expires else to_naive_utc(valid_until)
    if valid_until is not None and valid_until <= now:
        raise InvalidReward("Expiry date must be in the future.")

    reward = Reward(
        store_id=store_id,
        name=name.strip(),
        description=description,
        points_required=points_required,
        category=category,
        reward_type=reward_type,
        reward_value=reward_value,
        max_redemptions=max_redemptions,
        current_redemptions=0,
        valid_from=now,
        valid_until=valid_until,
        never_expires=never_expires,
        minimum_purchase=minimum_purchase,
        terms_and_conditions=terms_and_conditions,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    session.add(reward)
    session.flush()
    logger.info("reward created store=%s reward=%s points=%s", store_id, reward.reward_id, points_required)
    return reward


def set_reward_active(
    session: Session,
    *,
    principal: Principal,
    store_id: UUID,
    reward_id: UUID,
    is_active: bool,
) -> Reward:
    ensure_store_access(principal, store_id)
    stmt = select(Reward).where(Reward.reward_id == reward_id, Reward.store_id == store_id)
    reward = session.execute(stmt).scalar_one_or_none()
    if reward is None:
        raise RewardNotFound(f"Reward {reward_id} not found")
    reward.is_active = is_active
    reward.updated_at = utcnow()
    session.flush()
    return reward
