"""Operator endpoints for redemption codes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import Principal, get_principal
from ...schemas import CancellationReceipt, CodeValidation, RedemptionRead, ValidatedRedemption
from ...services import redemption_service
from ...services.errors import LoyaltyRuleViolation

router = APIRouter(prefix="/stores/{store_id}/redemptions", tags=["redemptions"])


@router.post(
    "/validate",
    response_model=ValidatedRedemption,
    summary="Validate a redemption code",
    responses={
        200: {
            "description": "Code accepted and redemption completed",
            "content": {
                "application/json": {
                    "example": {
                        "redemption_id": "88888888-8888-8888-8888-888888888888",
                        "code": "PRODUCT-7KQ2ZD",
                        "status": "completed",
                        "customer": "Bianca Liu",
                        "reward": "Free espresso",
                        "description": "Any size",
                        "points_used": 60,
                        "redeemed_at": "2025-11-12T14:30:00",
                        "completed_at": "2025-11-12T15:02:11",
                    }
                }
            },
        },
        400: {"description": "Code already used or cancelled"},
        403: {"description": "Principal belongs to another store"},
        404: {"description": "Code not found"},
    },
)
def validate_code(
    store_id: UUID,
    payload: CodeValidation,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> ValidatedRedemption:
    """Complete the pending redemption a customer presents at the counter.

    Example request body::

        {"code": "PRODUCT-7KQ2ZD"}
    """

    try:
        redemption = redemption_service.validate_code(
            db,
            principal=principal,
            store_id=store_id,
            code=payload.code,
        )
        db.commit()
    except LoyaltyRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc

    view = redemption_service.get_redemption_view(db, redemption.redemption_id)
    return ValidatedRedemption(
        redemption_id=view.redemption_id,
        code=view.code,
        status=view.status,
        customer=view.customer.name,
        reward=view.reward.name,
        description=view.reward.description,
        points_used=view.points_used,
        redeemed_at=view.redeemed_at,
        completed_at=view.completed_at,
    )


@router.post(
    "/{redemption_id}/cancel",
    response_model=CancellationReceipt,
    summary="Cancel a pending redemption",
    responses={
        400: {"description": "Redemption already used or cancelled"},
        404: {"description": "Redemption not found"},
    },
)
def cancel_redemption(
    store_id: UUID,
    redemption_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CancellationReceipt:
    """Cancel a pending redemption and refund its points to the customer."""

    try:
        result = redemption_service.cancel_redemption(
            db,
            principal=principal,
            store_id=store_id,
            redemption_id=redemption_id,
        )
        db.commit()
    except LoyaltyRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return CancellationReceipt(
        redemption=RedemptionRead.model_validate(result.redemption),
        refunded_points=result.redemption.points_used,
        new_balance=result.new_balance,
    )
