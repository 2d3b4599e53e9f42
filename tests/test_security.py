from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from fideliza.core.security import InvalidToken, Principal, Role, create_access_token, decode_access_token
from fideliza.services.errors import TenantMismatch
from fideliza.services.tenancy import ensure_store_access


def test_token_round_trip(settings) -> None:
    principal = Principal(id="owner-1", role=Role.STORE_OWNER, store_id=uuid4())

    decoded = decode_access_token(create_access_token(principal, settings), settings)

    assert decoded == principal


def test_expired_token_is_rejected(settings) -> None:
    principal = Principal(id="owner-1", role=Role.STORE_OWNER, store_id=uuid4())
    token = create_access_token(principal, settings, expires_in=timedelta(seconds=-5))

    with pytest.raises(InvalidToken, match="expired"):
        decode_access_token(token, settings)


def test_token_signed_with_other_secret_is_rejected(settings) -> None:
    principal = Principal(id="root", role=Role.SUPER_ADMIN)
    forged_settings = settings.model_copy(update={"jwt_secret": "another-secret-with-at-least-32-bytes"})

    with pytest.raises(InvalidToken):
        decode_access_token(create_access_token(principal, forged_settings), settings)


def test_store_owner_token_needs_store_scope(settings) -> None:
    token = jwt.encode(
        {"sub": "owner-1", "role": "store_owner", "iss": settings.jwt_issuer, "exp": 4102444800},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(InvalidToken):
        decode_access_token(token, settings)


def test_unknown_role_is_rejected(settings) -> None:
    token = jwt.encode(
        {"sub": "x", "role": "cashier", "iss": settings.jwt_issuer, "exp": 4102444800},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(InvalidToken):
        decode_access_token(token, settings)


def test_store_access_rules() -> None:
    store_id = uuid4()

    ensure_store_access(Principal(id="root", role=Role.SUPER_ADMIN), store_id)
    ensure_store_access(Principal(id="owner", role=Role.STORE_OWNER, store_id=store_id), store_id)
    with pytest.raises(TenantMismatch):
        ensure_store_access(Principal(id="owner", role=Role.STORE_OWNER, store_id=uuid4()), store_id)
