"""Store scoping shared by every operator-initiated operation."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from ..core.security import Principal
from ..models import Store
from .errors import StoreNotFound, TenantMismatch


def ensure_store_access(principal: Principal, store_id: UUID) -> None:
    """Reject a principal acting on a store other than its own.

    Super admins may act on any store; store owners only on ``principal.store_id``.
    """

    if principal.is_super_admin:
        return
    if principal.store_id is None or principal.store_id != store_id:
        raise TenantMismatch("Access to this store is not allowed.")


def get_store(session: Session, store_id: UUID) -> Store:
    store = session.get(Store, store_id)
    if store is None:
        raise StoreNotFound(f"Store {store_id} not found")
    return store


def get_accessible_store(session: Session, principal: Principal, store_id: UUID) -> Store:
    """Tenancy check followed by an existence check, for writes scoped to a store."""

    ensure_store_access(principal, store_id)
    return get_store(session, store_id)
