"""Operator endpoints for customers and their point balances."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.security import Principal, get_principal
from ...schemas import CustomerCreate, CustomerRead, PointsAdjustment, PointsBalance
from ...services import customer_service, ledger_service
from ...services.errors import LoyaltyRuleViolation

router = APIRouter(prefix="/stores/{store_id}/customers", tags=["customers"])


@router.get("", response_model=List[CustomerRead], summary="List store customers")
def list_customers(
    store_id: UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> List[CustomerRead]:
    try:
        customers = customer_service.list_customers(db, principal=principal, store_id=store_id)
    except LoyaltyRuleViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return list(customers)


@router.post(
    "",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a customer",
    responses={400: {"description": "Business rule violation"}},
)
def create_customer(
    store_id: UUID,
    payload: CustomerCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CustomerRead:
    try:
        customer = customer_service.create_customer(
            db,
            principal=principal,
            store_id=store_id,
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
        )
        db.commit()
        return customer
    except LoyaltyRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc


@router.post(
    "/{customer_id}/points",
    response_model=PointsBalance,
    summary="Credit or debit points",
    responses={
        200: {
            "description": "Balance updated",
            "content": {
                "application/json": {
                    "example": {"customer_id": "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb", "new_balance": 40}
                }
            },
        },
        403: {"description": "Principal belongs to another store"},
        404: {"description": "Customer not found"},
    },
)
def adjust_points(
    store_id: UUID,
    customer_id: UUID,
    payload: PointsAdjustment,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> PointsBalance:
    """Apply an operator adjustment.

    ``redeemed`` and ``expired`` debit the balance (never below zero), ``earned``
    and ``adjusted`` credit it.

    Example request body::

        {
            "points": 25,
            "type": "earned",
            "description": "Purchase #1042"
        }
    """

    try:
        new_balance = ledger_service.adjust_points(
            db,
            principal=principal,
            store_id=store_id,
            customer_id=customer_id,
            points=payload.points,
            transaction_type=payload.type,
            description=payload.description,
        )
        db.commit()
    except LoyaltyRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.as_detail()) from exc
    return PointsBalance(customer_id=customer_id, new_balance=new_balance)
