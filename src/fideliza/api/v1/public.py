"""Customer-facing endpoints: login, catalog, redemption and history."""

from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...core.config import Settings
from ...core.database import get_db
from ...core.security import get_app_settings
from ...schemas import (
    CustomerLogin,
    CustomerRead,
    CustomerSession,
    PointTransactionRead,
    RedemptionCreate,
    RedemptionHistoryItem,
    RedemptionRead,
    RedemptionReceipt,
    RewardRead,
    StoreSummary,
)
from ...services import customer_service, ledger_service, redemption_service, reward_service
from ...services.errors import LoyaltyRuleViolation
from .rewards import reward_payloads

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["public"])


@router.get(
    "/stores/{slug}/rewards",
    response_model=List[RewardRead],
    summary="Redeemable rewards of a store",
    responses={404: {"description": "Store not found or inactive"}},
)
def list_redeemable_rewards(slug: str, db: Session = Depends(get_db)) -> List[RewardRead]:
    """Active rewards ordered from cheapest to most expensive."""

    try:
        store = reward_service.get_store_by_slug(db, slug)
    except LoyaltyRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return reward_payloads(reward_service.list_redeemable_rewards(db, store_id=store.store_id))


@router.post(
    "/customers/login",
    response_model=CustomerSession,
    summary="Customer login by email or phone",
    responses={404: {"description": "Store not found or inactive"}},
)
def login_customer(payload: CustomerLogin, db: Session = Depends(get_db)) -> CustomerSession:
    """Find the customer at the store, registering them on first login.

    Example request body::

        {"store_slug": "cafe-central", "email": "bianca.liu@example.com"}
    """

    try:
        customer, store = customer_service.login_customer(
            db,
            store_slug=payload.store_slug,
            email=payload.email,
            phone=payload.phone,
        )
        db.commit()
    except LoyaltyRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return CustomerSession(
        customer=CustomerRead.model_validate(customer),
        store=StoreSummary.model_validate(store),
    )


@router.post(
    "/customers/{customer_id}/redemptions",
    response_model=RedemptionReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Redeem a reward",
    responses={
        201: {
            "description": "Redemption created; code pending validation at the store",
            "content": {
                "application/json": {
                    "example": {
                        "redemption": {
                            "redemption_id": "88888888-8888-8888-8888-888888888888",
                            "customer_id": "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb",
                            "reward_id": "44444444-4444-4444-4444-444444444444",
                            "code": "PRODUCT-7KQ2ZD",
                            "points_used": 60,
                            "status": "pending",
                            "redeemed_at": "2025-11-12T14:30:00",
                            "completed_at": None,
                            "cancelled_at": None,
                        },
                        "code": "PRODUCT-7KQ2ZD",
                        "reward": "Free espresso",
                        "points_used": 60,
                        "new_balance": 40,
                        "instructions": "Show this code at the store to use your reward.",
                    }
                }
            },
        },
        400: {"description": "Not eligible (insufficient points, limit reached, duplicate, expired)"},
        404: {"description": "Customer or reward not found"},
    },
)
def redeem_reward(
    customer_id: UUID,
    payload: RedemptionCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> RedemptionReceipt:
    """Redeem a reward with the customer's points.

    Example request body::

        {"reward_id": "44444444-4444-4444-4444-444444444444"}
    """

    try:
        result = redemption_service.redeem(
            db,
            customer_id=customer_id,
            reward_id=payload.reward_id,
            code_length=settings.redemption_code_length,
            code_attempts=settings.redemption_code_attempts,
        )
        reward_name = result.redemption.reward.name
        db.commit()
    except LoyaltyRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    except SQLAlchemyError:
        db.rollback()
        logger.exception("redemption failed customer=%s reward=%s", customer_id, payload.reward_id)
        raise

    redemption = result.redemption
    return RedemptionReceipt(
        redemption=RedemptionRead.model_validate(redemption),
        code=redemption.code,
        reward=reward_name,
        points_used=redemption.points_used,
        new_balance=result.new_balance,
    )


@router.get(
    "/customers/{customer_id}/redemptions",
    response_model=List[RedemptionHistoryItem],
    summary="Customer redemption history",
)
def list_redemptions(
    customer_id: UUID,
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    db: Session = Depends(get_db),
) -> List[RedemptionHistoryItem]:
    redemptions = redemption_service.list_customer_redemptions(db, customer_id=customer_id, limit=limit)
    return [
        RedemptionHistoryItem(
            redemption_id=redemption.redemption_id,
            code=redemption.code,
            reward=redemption.reward.name,
            points_used=redemption.points_used,
            status=redemption.status,
            redeemed_at=redemption.redeemed_at,
            completed_at=redemption.completed_at,
        )
        for redemption in redemptions
    ]


@router.get(
    "/customers/{customer_id}/transactions",
    response_model=List[PointTransactionRead],
    summary="Customer points history",
)
def list_transactions(
    customer_id: UUID,
    limit: int = Query(50, ge=1, le=100, description="Maximum items to return"),
    db: Session = Depends(get_db),
) -> List[PointTransactionRead]:
    return list(ledger_service.list_transactions(db, customer_id=customer_id, limit=limit))
