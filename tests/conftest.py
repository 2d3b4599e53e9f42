import sys
from pathlib import Path
from uuid import uuid4

import pytest


def _configure_path() -> None:
    src_path = Path(__file__).resolve().parents[1] / "src"
    if src_path.exists():
        sys.path.insert(0, str(src_path))


_configure_path()

from fastapi.testclient import TestClient  # noqa: E402

from fideliza.core.config import Settings  # noqa: E402
from fideliza.core.database import Database  # noqa: E402
from fideliza.core.security import Principal, Role, create_access_token  # noqa: E402
from fideliza.main import create_app  # noqa: E402
from fideliza.models import Customer, PointTransactionType, Reward, RewardCategory, Store  # noqa: E402
from fideliza.services.ledger_service import apply_delta  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'fideliza.db'}",
        jwt_secret="test-secret-with-at-least-32-bytes!",
        reconciliation_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.create_all()
    try:
        yield database
    finally:
        database.dispose()


@pytest.fixture
def session(database):
    session = database.session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _seed_store(database: Database, *, name: str, slug: str) -> Store:
    with database.session() as session:
        store = Store(name=name, slug=slug, is_active=True)
        session.add(store)
    return store


@pytest.fixture
def store(database) -> Store:
    return _seed_store(database, name="Cafe Central", slug="cafe-central")


@pytest.fixture
def other_store(database) -> Store:
    return _seed_store(database, name="Padaria Norte", slug="padaria-norte")


@pytest.fixture
def make_customer(database, store):
    def _make(points: int = 0, *, store_id=None, name: str = "Bianca Liu", email=None, phone=None) -> Customer:
        with database.session() as session:
            customer = Customer(
                store_id=store_id or store.store_id,
                name=name,
                email=email if email or phone else f"{uuid4().hex[:10]}@example.com",
                phone=phone,
                total_points=0,
            )
            session.add(customer)
            session.flush()
            if points:
                apply_delta(
                    session,
                    customer=customer,
                    points=points,
                    transaction_type=PointTransactionType.EARNED,
                    description="Seed points",
                )
        return customer

    return _make


@pytest.fixture
def make_reward(database, store):
    def _make(points_required: int = 60, *, store_id=None, **overrides) -> Reward:
        values = {
            "name": "Free espresso",
            "description": "Any size",
            "category": RewardCategory.PRODUCT,
            "never_expires": True,
            "is_active": True,
            "current_redemptions": 0,
        }
        values.update(overrides)
        with database.session() as session:
            reward = Reward(store_id=store_id or store.store_id, points_required=points_required, **values)
            session.add(reward)
        return reward

    return _make


@pytest.fixture
def owner(store) -> Principal:
    return Principal(id="owner-cafe", role=Role.STORE_OWNER, store_id=store.store_id)


@pytest.fixture
def other_owner(other_store) -> Principal:
    return Principal(id="owner-padaria", role=Role.STORE_OWNER, store_id=other_store.store_id)


@pytest.fixture
def admin() -> Principal:
    return Principal(id="root", role=Role.SUPER_ADMIN)


@pytest.fixture
def app(settings, database):
    return create_app(settings=settings, database=database)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers(settings):
    def _headers(principal: Principal) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(principal, settings)}"}

    return _headers
