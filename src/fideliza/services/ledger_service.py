"""Points ledger and the balance accumulator.

The ledger (``point_transactions``) is the source of truth; ``customers.total_points``
is a cache written in the same transaction as every ledger append.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from ..core.security import Principal
from ..models import Customer, PointTransaction, PointTransactionType
from ..utils.datetime import utcnow
from .errors import ConcurrentUpdate, CustomerNotFound, LoyaltyRuleViolation
from .tenancy import ensure_store_access

logger = logging.getLogger(__name__)

DEBIT_TYPES = frozenset({PointTransactionType.REDEEMED, PointTransactionType.EXPIRED})


def lock_customer(session: Session, customer_id: UUID, *, store_id: Optional[UUID] = None) -> Customer:
    """Load a customer row ``FOR UPDATE``, optionally scoped to a store."""

    stmt = select(Customer).where(Customer.customer_id == customer_id).with_for_update()
    if store_id is not None:
        stmt = stmt.where(Customer.store_id == store_id)
    customer = session.execute(stmt).scalar_one_or_none()
    if customer is None:
        raise CustomerNotFound(f"Customer {customer_id} not found")
    return customer


def apply_delta(
    session: Session,
    *,
    customer: Customer,
    points: int,
    transaction_type: PointTransactionType,
    description: Optional[str] = None,
    created_by: Optional[str] = None,
    reference_id: Optional[UUID] = None,
) -> int:
    """Apply a signed delta to the customer's balance and append one ledger row.

    The balance never drops below zero: a debit larger than the balance is
    clamped and the ledger row records the amount actually removed next to the
    amount requested. Returns the new balance.
    """

    if isinstance(points, bool) or not isinstance(points, int) or points == 0:
        raise ValueError("points must be a non-zero integer")

    previous = customer.total_points
    new_balance = max(0, previous + points)
    now = utcnow()

    result = session.execute(
        update(Customer)
        .where(Customer.customer_id == customer.customer_id, Customer.total_points == previous)
        .values(total_points=new_balance, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ConcurrentUpdate("Customer balance changed concurrently; retry the operation.")
    set_committed_value(customer, "total_points", new_balance)
    set_committed_value(customer, "updated_at", now)

    entry = PointTransaction(
        customer_id=customer.customer_id,
        store_id=customer.store_id,
        transaction_type=transaction_type,
        points=new_balance - previous,
        requested_points=points,
        description=description,
        reference_id=reference_id,
        created_by=created_by,
        created_at=now,
    )
    session.add(entry)
    session.flush()

    if new_balance - previous != points:
        logger.info(
            "debit clamped at zero customer=%s requested=%s applied=%s",
            customer.customer_id,
            points,
            new_balance - previous,
        )
    return new_balance


def adjust_points(
    session: Session,
    *,
    principal: Principal,
    store_id: UUID,
    customer_id: UUID,
    points: int,
    transaction_type: PointTransactionType = PointTransactionType.EARNED,
    description: Optional[str] = None,
) -> int:
    """Operator-initiated credit or debit; the sign follows the transaction type."""

    ensure_store_access(principal, store_id)

    if points <= 0:
        raise LoyaltyRuleViolation("Points must be greater than zero.")

    customer = lock_customer(session, customer_id, store_id=store_id)

    debit = transaction_type in DEBIT_TYPES
    if description is None:
        description = "Points redeemed" if debit else "Points added"

    new_balance = apply_delta(
        session,
        customer=customer,
        points=-points if debit else points,
        transaction_type=transaction_type,
        description=description,
        created_by=principal.id,
    )
    logger.info(
        "points adjusted store=%s customer=%s type=%s points=%s balance=%s",
        store_id,
        customer_id,
        transaction_type.value,
        points,
        new_balance,
    )
    return new_balance


def list_transactions(
    session: Session,
    *,
    customer_id: UUID,
    limit: int = 50,
) -> Sequence[PointTransaction]:
    """Return a customer's ledger entries, newest first."""

    stmt = (
        select(PointTransaction)
        .where(PointTransaction.customer_id == customer_id)
        .order_by(PointTransaction.created_at.desc())
        .limit(limit)
    )
    return session.execute(stmt).scalars().all()


def ledger_balance(session: Session, customer_id: UUID) -> int:
    stmt = select(func.coalesce(func.sum(PointTransaction.points), 0)).where(
        PointTransaction.customer_id == customer_id
    )
    return max(0, session.execute(stmt).scalar_one())


def reconcile_balances(
    session: Session,
    *,
    store_id: Optional[UUID] = None,
    repair: bool = True,
) -> dict[str, int]:
    """Compare cached balances with the ledger and optionally repair drift.

    Returns summary statistics useful for logging/testing.
    """

    ledger_sum = func.coalesce(func.sum(PointTransaction.points), 0).label("ledger_sum")
    stmt = (
        select(Customer.customer_id, Customer.total_points, ledger_sum)
        .outerjoin(PointTransaction, PointTransaction.customer_id == Customer.customer_id)
        .group_by(Customer.customer_id, Customer.total_points)
    )
    if store_id is not None:
        stmt = stmt.where(Customer.store_id == store_id)

    summary = {"customers_checked": 0, "drifted": 0, "repaired": 0}

    for customer_id, cached, total in session.execute(stmt).all():
        summary["customers_checked"] += 1
        expected = max(0, int(total or 0))
        if expected == cached:
            continue

        summary["drifted"] += 1
        logger.warning(
            "balance drift customer=%s cached=%s ledger=%s",
            customer_id,
            cached,
            expected,
        )
        if repair:
            session.execute(
                update(Customer)
                .where(Customer.customer_id == customer_id)
                .values(total_points=expected, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            summary["repaired"] += 1

    return summary
