"""Operator dashboard endpoint."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import Principal, get_principal
from ...schemas import StoreDashboard, StoreStatsRead, StoreSummary
from ...services import dashboard_service
from ...services.errors import LoyaltyRuleViolation

router = APIRouter(prefix="/stores/{store_id}", tags=["dashboard"])


@router.get(
    "/dashboard",
    response_model=StoreDashboard,
    summary="Store dashboard figures",
    responses={
        200: {
            "description": "Aggregated store figures",
            "content": {
                "application/json": {
                    "example": {
                        "store": {
                            "store_id": "11111111-1111-1111-1111-111111111111",
                            "name": "Cafe Central",
                            "slug": "cafe-central",
                        },
                        "stats": {
                            "total_customers": 128,
                            "active_rewards": 6,
                            "monthly_redemptions": 41,
                            "points_in_circulation": 9350,
                        },
                    }
                }
            },
        },
        403: {"description": "Principal belongs to another store"},
        404: {"description": "Store not found"},
    },
)
def get_dashboard(
    store_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> StoreDashboard:
    try:
        stats = dashboard_service.store_stats(db, principal=principal, store_id=store_id)
    except LoyaltyRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return StoreDashboard(
        store=StoreSummary.model_validate(stats.store),
        stats=StoreStatsRead(
            total_customers=stats.total_customers,
            active_rewards=stats.active_rewards,
            monthly_redemptions=stats.monthly_redemptions,
            points_in_circulation=stats.points_in_circulation,
        ),
    )
