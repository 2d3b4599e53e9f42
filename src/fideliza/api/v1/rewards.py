"""Operator endpoints for the store reward catalog."""

from __future__ import annotations

from typing import Iterable, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import Principal, get_principal
from ...models import Reward
from ...schemas import RewardCreate, RewardRead, RewardUpdate
from ...services import reward_service
from ...services.errors import LoyaltyRuleViolation
from ...utils.datetime import utcnow

router = APIRouter(prefix="/stores/{store_id}/rewards", tags=["rewards"])


def reward_payloads(rewards: Iterable[Reward]) -> List[RewardRead]:
    now = utcnow()
    return [
        RewardRead.model_validate(reward).model_copy(update={"available": reward_service.is_available(reward, now)})
        for reward in rewards
    ]


@router.get(
    "",
    response_model=List[RewardRead],
    summary="List store rewards",
    responses={403: {"description": "Principal belongs to another store"}},
)
def list_rewards(
    store_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[RewardRead]:
    """Every reward of the store, active or not, newest first."""

    try:
        rewards = reward_service.list_store_rewards(db, principal=principal, store_id=store_id)
    except LoyaltyRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return reward_payloads(rewards)


@router.post(
    "",
    response_model=RewardRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a reward",
    responses={
        400: {"description": "Business rule violation"},
        403: {"description": "Principal belongs to another store"},
    },
)
def create_reward(
    store_id: UUID,
    payload: RewardCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> RewardRead:
    """Add a reward to the catalog.

    Example request body::

        {
            "name": "Free espresso",
            "points_required": 60,
            "category": "product",
            "reward_type": "free_item",
            "max_redemptions": 100,
            "never_expires": true
        }
    """

    try:
        reward = reward_service.create_reward(
            db,
            principal=principal,
            store_id=store_id,
            **payload.model_dump(),
        )
        db.commit()
    except LoyaltyRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return reward_payloads([reward])[0]


@router.patch(
    "/{reward_id}",
    response_model=RewardRead,
    summary="Activate or deactivate a reward",
    responses={404: {"description": "Reward not found"}},
)
def update_reward(
    store_id: UUID,
    reward_id: UUID,
    payload: RewardUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> RewardRead:
    try:
        reward = reward_service.set_reward_active(
            db,
            principal=principal,
            store_id=store_id,
            reward_id=reward_id,
            is_active=payload.is_active,
        )
        db.commit()
    except LoyaltyRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return reward_payloads([reward])[0]
