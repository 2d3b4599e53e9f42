from uuid import uuid4

import pytest
from sqlalchemy import func, select

from fideliza.models import Customer
from fideliza.services import customer_service
from fideliza.services.errors import DuplicateCustomer, StoreNotFound


def _customer_count(session) -> int:
    return session.execute(select(func.count()).select_from(Customer)).scalar_one()


def test_login_with_new_email_and_known_phone_signs_in_phone_owner(session, make_customer, store) -> None:
    existing = make_customer(30, email="old@example.com", phone="11987654321")

    customer, _ = customer_service.login_customer(
        session, store_slug=store.slug, email="new@example.com", phone="11987654321"
    )
    session.commit()

    assert customer.customer_id == existing.customer_id
    assert customer.total_points == 30
    assert _customer_count(session) == 1


def test_login_prefers_email_match_over_phone(session, make_customer, store) -> None:
    by_email = make_customer(email="bianca@example.com", phone="11900000001")
    make_customer(email="rafael@example.com", phone="11900000002")

    customer, _ = customer_service.login_customer(
        session, store_slug=store.slug, email="BIANCA@example.com", phone="11900000002"
    )

    assert customer.customer_id == by_email.customer_id


def test_login_returns_row_registered_by_concurrent_login(session, make_customer, store, monkeypatch) -> None:
    winner = make_customer(email="bianca@example.com")
    real_lookup = customer_service._find_by_contact
    calls = []

    def _lookup_missing_first(*args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            return None
        return real_lookup(*args, **kwargs)

    monkeypatch.setattr(customer_service, "_find_by_contact", _lookup_missing_first)

    customer, _ = customer_service.login_customer(session, store_slug=store.slug, email="bianca@example.com")
    session.commit()

    assert customer.customer_id == winner.customer_id
    assert len(calls) == 2
    assert _customer_count(session) == 1


def test_insert_guard_reports_contact_collision(session, make_customer, store) -> None:
    make_customer(email="bianca@example.com", phone="11987654321")

    inserted = customer_service._insert_customer(
        session, Customer(store_id=store.store_id, name="Twin", phone="11987654321", total_points=0)
    )

    assert inserted is False
    assert _customer_count(session) == 1


def test_create_customer_rejects_shared_phone(session, make_customer, owner) -> None:
    make_customer(email="bianca@example.com", phone="11987654321")

    with pytest.raises(DuplicateCustomer):
        customer_service.create_customer(
            session,
            principal=owner,
            store_id=owner.store_id,
            name="Rafael",
            email="rafael@example.com",
            phone="11987654321",
        )


def test_create_customer_in_unknown_store_is_not_found(session, admin) -> None:
    with pytest.raises(StoreNotFound):
        customer_service.create_customer(
            session, principal=admin, store_id=uuid4(), name="Rafael", phone="11987654321"
        )
