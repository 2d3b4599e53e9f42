"""Customer registration and lookup."""

from __future__ import annotations

import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.security import Principal
from ..models import DEFAULT_CUSTOMER_NAME, Customer, Store
from ..utils.datetime import utcnow
from .errors import CustomerNotFound, DuplicateCustomer, LoyaltyRuleViolation
from .reward_service import get_store_by_slug
from .tenancy import ensure_store_access, get_accessible_store

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _find_by_contact(session: Session, store_id: UUID, *, email: Optional[str], phone: Optional[str]) -> Optional[Customer]:
    """Return the store's customer matching ``email``, else the one matching ``phone``."""

    for column, value in ((Customer.email, email), (Customer.phone, phone)):
        if value is None:
            continue
        stmt = select(Customer).where(Customer.store_id == store_id, column == value).limit(1)
        customer = session.execute(stmt).scalar_one_or_none()
        if customer is not None:
            return customer
    return None


def _insert_customer(session: Session, customer: Customer) -> bool:
    """Insert under a savepoint; False when a unique contact constraint fired."""

    try:
        with session.begin_nested():
            session.add(customer)
            session.flush()
    except IntegrityError:
        logger.warning(
            "customer contact already registered store=%s email=%s phone=%s",
            customer.store_id,
            customer.email,
            customer.phone,
        )
        return False
    return True


def login_customer(
    session: Session,
    *,
    store_slug: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> tuple[Customer, Store]:
    """Find a customer by email (preferred) or phone, registering on first login.

    A login whose email is new but whose phone belongs to an existing customer
    signs in as that customer.
    """

    email, phone = _clean(email), _clean(phone)
    if email is None and phone is None:
        raise LoyaltyRuleViolation("Email or phone is required.")
    if email is not None:
        email = email.lower()

    store = get_store_by_slug(session, store_slug)
    customer = _find_by_contact(session, store.store_id, email=email, phone=phone)
    if customer is None:
        now = utcnow()
        customer = Customer(
            store_id=store.store_id,
            name=DEFAULT_CUSTOMER_NAME,
            email=email,
            phone=phone,
            total_points=0,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        if _insert_customer(session, customer):
            logger.info("customer registered on login store=%s customer=%s", store.store_id, customer.customer_id)
            return customer, store
        # a concurrent login registered the same contact first
        customer = _find_by_contact(session, store.store_id, email=email, phone=phone)
        if customer is None:
            raise DuplicateCustomer("A customer with this contact is already registered.")

    if not customer.is_active:
        raise CustomerNotFound("Customer account is inactive.")
    return customer, store


def create_customer(
    session: Session,
    *,
    principal: Principal,
    store_id: UUID,
    name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> Customer:
    """Register a customer from the store side."""

    get_accessible_store(session, principal, store_id)

    name, email, phone = _clean(name), _clean(email), _clean(phone)
    if name is None:
        raise LoyaltyRuleViolation("Name is required.")
    if email is None and phone is None:
        raise LoyaltyRuleViolation("Email or phone is required.")
    if email is not None:
        email = email.lower()

    contact_matches = []
    if email is not None:
        contact_matches.append(Customer.email == email)
    if phone is not None:
        contact_matches.append(Customer.phone == phone)
    existing_stmt = select(Customer.customer_id).where(Customer.store_id == store_id, or_(*contact_matches)).limit(1)
    if session.execute(existing_stmt).scalar_one_or_none() is not None:
        raise DuplicateCustomer("A customer with this contact is already registered.")

    now = utcnow()
    customer = Customer(
        store_id=store_id,
        name=name,
        email=email,
        phone=phone,
        total_points=0,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    if not _insert_customer(session, customer):
        raise DuplicateCustomer("A customer with this contact is already registered.")
    logger.info("customer created store=%s customer=%s", store_id, customer.customer_id)
    return customer


def list_customers(session: Session, *, principal: Principal, store_id: UUID) -> Sequence[Customer]:
    """Return the store's customers, newest first."""

    ensure_store_access(principal, store_id)
    stmt = select(Customer).where(Customer.store_id == store_id).order_by(Customer.created_at.desc())
    return session.execute(stmt).scalars().all()
