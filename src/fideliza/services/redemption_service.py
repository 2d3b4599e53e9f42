"""Reward redemption workflow and counter-side code validation.

A redemption starts ``pending`` and ends ``completed`` (code validated at the
store) or ``cancelled`` (operator cancelled, points refunded). Both end states
are terminal.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.attributes import set_committed_value

from ..core.security import Principal
from ..models import PointTransactionType, Redemption, RedemptionStatus, Reward, RewardCategory
from ..utils.datetime import to_naive_utc, utcnow
from .errors import (
    AlreadyUsed,
    Cancelled,
    CodeGenerationFailed,
    CodeNotFound,
    ConcurrentUpdate,
    CustomerNotFound,
    DuplicatePendingRedemption,
    InsufficientPoints,
    RedemptionLimitReached,
    RedemptionNotFound,
    RewardExpired,
    RewardNotFound,
)
from .ledger_service import apply_delta, lock_customer
from .reward_service import is_exhausted, is_expired
from .tenancy import ensure_store_access

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_CODE_LENGTH = 6
DEFAULT_CODE_ATTEMPTS = 5


@dataclass
class RedemptionResult:
    redemption: Redemption
    new_balance: int


def generate_code(category: RewardCategory, length: int = DEFAULT_CODE_LENGTH) -> str:
    """Return ``CATEGORY-XXXXXX`` with a random uppercase alphanumeric suffix."""

    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
    return f"{RewardCategory(category).value.upper()}-{suffix}"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _lock_reward(session: Session, reward_id: UUID) -> Reward:
    stmt = select(Reward).where(Reward.reward_id == reward_id).with_for_update()
    reward = session.execute(stmt).scalar_one_or_none()
    if reward is None or not reward.is_active:
        raise RewardNotFound(f"Reward {reward_id} not found")
    return reward


def _has_pending(session: Session, customer_id: UUID, reward_id: UUID) -> bool:
    stmt = (
        select(Redemption.redemption_id)
        .where(
            Redemption.customer_id == customer_id,
            Redemption.reward_id == reward_id,
            Redemption.status == RedemptionStatus.PENDING,
        )
        .limit(1)
    )
    return session.execute(stmt).scalar_one_or_none() is not None


def _code_taken(session: Session, store_id: UUID, code: str) -> bool:
    stmt = select(Redemption.redemption_id).where(Redemption.store_id == store_id, Redemption.code == code)
    return session.execute(stmt).scalar_one_or_none() is not None


def _issue_code(session: Session, store_id: UUID, category: RewardCategory, length: int, attempts: int) -> str:
    for _ in range(attempts):
        code = generate_code(category, length)
        if not _code_taken(session, store_id, code):
            return code
        logger.warning("redemption code collision store=%s code=%s", store_id, code)
    raise CodeGenerationFailed("Could not generate a unique redemption code.")


def _claim_slot(session: Session, reward: Reward, now: datetime) -> None:
    result = session.execute(
        update(Reward)
        .where(
            Reward.reward_id == reward.reward_id,
            or_(Reward.max_redemptions.is_(None), Reward.current_redemptions < Reward.max_redemptions),
        )
        .values(current_redemptions=Reward.current_redemptions + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise RedemptionLimitReached("Redemption limit reached for this reward.")
    session.refresh(reward, attribute_names=["current_redemptions", "updated_at"])


def _release_slot(session: Session, reward_id: UUID, now: datetime) -> None:
    session.execute(
        update(Reward)
        .where(Reward.reward_id == reward_id, Reward.current_redemptions > 0)
        .values(current_redemptions=Reward.current_redemptions - 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )


def _ensure_pending(redemption: Redemption) -> None:
    if redemption.status == RedemptionStatus.COMPLETED:
        raise AlreadyUsed(completed_at=redemption.completed_at)
    if redemption.status == RedemptionStatus.CANCELLED:
        raise Cancelled("This code has been cancelled.")


def _transition(
    session: Session,
    redemption: Redemption,
    status: RedemptionStatus,
    **values: datetime,
) -> None:
    """Move a pending redemption to a terminal state exactly once."""

    result = session.execute(
        update(Redemption)
        .where(
            Redemption.redemption_id == redemption.redemption_id,
            Redemption.status == RedemptionStatus.PENDING,
        )
        .values(status=status, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        session.refresh(redemption)
        _ensure_pending(redemption)
        raise ConcurrentUpdate("Redemption changed concurrently; retry the operation.")
    set_committed_value(redemption, "status", status)
    for key, value in values.items():
        set_committed_value(redemption, key, value)


def redeem(
    session: Session,
    *,
    customer_id: UUID,
    reward_id: UUID,
    store_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
    code_length: int = DEFAULT_CODE_LENGTH,
    code_attempts: int = DEFAULT_CODE_ATTEMPTS,
) -> RedemptionResult:
    """Redeem a reward for a customer, debiting points and issuing a code.

    Eligibility failures are raised in a fixed order: insufficient points,
    redemption cap, duplicate pending claim, expiry. The redemption insert, the
    debit and the counter increment are flushed into the caller's transaction;
    the caller commits or rolls back the whole unit.
    """

    now = to_naive_utc(now) or utcnow()

    customer = lock_customer(session, customer_id, store_id=store_id)
    if not customer.is_active:
        raise CustomerNotFound(f"Customer {customer_id} not found")
    reward = _lock_reward(session, reward_id)
    if reward.store_id != customer.store_id:
        raise RewardNotFound(f"Reward {reward_id} not found")

    if customer.total_points < reward.points_required:
        raise InsufficientPoints(required=reward.points_required, available=customer.total_points)
    if is_exhausted(reward):
        raise RedemptionLimitReached("Redemption limit reached for this reward.")
    if _has_pending(session, customer.customer_id, reward.reward_id):
        raise DuplicatePendingRedemption(
            "A pending redemption of this reward already exists. Use it before redeeming again."
        )
    if is_expired(reward, now):
        raise RewardExpired("This reward has expired.")

    code = _issue_code(session, customer.store_id, reward.category, code_length, code_attempts)

    redemption = Redemption(
        customer_id=customer.customer_id,
        store_id=customer.store_id,
        reward_id=reward.reward_id,
        points_used=reward.points_required,
        status=RedemptionStatus.PENDING,
        code=code,
        redeemed_at=now,
    )
    session.add(redemption)
    session.flush()

    new_balance = apply_delta(
        session,
        customer=customer,
        points=-redemption.points_used,
        transaction_type=PointTransactionType.REDEEMED,
        description=f"Redeemed: {reward.name}",
        reference_id=redemption.redemption_id,
    )
    _claim_slot(session, reward, now)

    logger.info(
        "redemption created store=%s customer=%s reward=%s code=%s balance=%s",
        customer.store_id,
        customer.customer_id,
        reward.reward_id,
        code,
        new_balance,
    )
    return RedemptionResult(redemption=redemption, new_balance=new_balance)


def validate_code(
    session: Session,
    *,
    principal: Principal,
    store_id: UUID,
    code: str,
    now: Optional[datetime] = None,
) -> Redemption:
    """Mark the pending redemption identified by ``code`` as completed."""

    ensure_store_access(principal, store_id)

    normalized = normalize_code(code)
    if not normalized:
        raise CodeNotFound("Redemption code not found or invalid.")

    stmt = (
        select(Redemption)
        .where(Redemption.store_id == store_id, Redemption.code == normalized)
        .with_for_update()
    )
    redemption = session.execute(stmt).scalar_one_or_none()
    if redemption is None:
        raise CodeNotFound("Redemption code not found or invalid.")

    _ensure_pending(redemption)
    _transition(session, redemption, RedemptionStatus.COMPLETED, completed_at=to_naive_utc(now) or utcnow())

    logger.info("redemption completed store=%s code=%s by=%s", store_id, normalized, principal.id)
    return redemption


def cancel_redemption(
    session: Session,
    *,
    principal: Principal,
    store_id: UUID,
    redemption_id: UUID,
    now: Optional[datetime] = None,
) -> RedemptionResult:
    """Cancel a pending redemption, refunding its points and freeing its slot."""

    ensure_store_access(principal, store_id)
    now = to_naive_utc(now) or utcnow()

    stmt = (
        select(Redemption)
        .where(Redemption.redemption_id == redemption_id, Redemption.store_id == store_id)
        .with_for_update()
    )
    redemption = session.execute(stmt).scalar_one_or_none()
    if redemption is None:
        raise RedemptionNotFound(f"Redemption {redemption_id} not found")
    _ensure_pending(redemption)

    customer = lock_customer(session, redemption.customer_id)
    _transition(session, redemption, RedemptionStatus.CANCELLED, cancelled_at=now)

    new_balance = apply_delta(
        session,
        customer=customer,
        points=redemption.points_used,
        transaction_type=PointTransactionType.ADJUSTED,
        description=f"Cancelled redemption {redemption.code}",
        created_by=principal.id,
        reference_id=redemption.redemption_id,
    )
    _release_slot(session, redemption.reward_id, now)
    session.flush()

    logger.info("redemption cancelled store=%s code=%s by=%s", store_id, redemption.code, principal.id)
    return RedemptionResult(redemption=redemption, new_balance=new_balance)


def get_redemption_view(session: Session, redemption_id: UUID) -> Redemption:
    """Load a redemption with its customer and reward for display."""

    stmt = (
        select(Redemption)
        .options(joinedload(Redemption.customer), joinedload(Redemption.reward))
        .where(Redemption.redemption_id == redemption_id)
    )
    redemption = session.execute(stmt).scalar_one_or_none()
    if redemption is None:
        raise RedemptionNotFound(f"Redemption {redemption_id} not found")
    return redemption


def list_customer_redemptions(
    session: Session,
    *,
    customer_id: UUID,
    limit: int = 50,
) -> Sequence[Redemption]:
    """Return a customer's redemptions, newest first."""

    stmt = (
        select(Redemption)
        .options(joinedload(Redemption.reward))
        .where(Redemption.customer_id == customer_id)
        .order_by(Redemption.redeemed_at.desc())
        .limit(limit)
    )
    return session.execute(stmt).scalars().all()
