from uuid import uuid4

from fideliza.models import Customer, PointTransaction, Reward


def test_healthcheck(client) -> None:
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_login_registers_customer_on_first_visit(client, store) -> None:
    payload = {"store_slug": store.slug, "email": "  Bianca.Liu@Example.com "}

    first = client.post("/api/v1/public/customers/login", json=payload)
    second = client.post("/api/v1/public/customers/login", json=payload)

    assert first.status_code == 200
    body = first.json()
    assert body["customer"]["email"] == "bianca.liu@example.com"
    assert body["customer"]["name"] == "Cliente"
    assert body["customer"]["total_points"] == 0
    assert body["store"]["slug"] == "cafe-central"
    assert second.json()["customer"]["customer_id"] == body["customer"]["customer_id"]


def test_login_requires_contact_and_known_store(client, store) -> None:
    missing_contact = client.post("/api/v1/public/customers/login", json={"store_slug": store.slug})
    unknown_store = client.post(
        "/api/v1/public/customers/login", json={"store_slug": "nowhere", "phone": "11987654321"}
    )

    assert missing_contact.status_code == 422
    assert unknown_store.status_code == 404
    assert unknown_store.json()["detail"]["code"] == "not_found"


def test_public_rewards_are_active_and_cheapest_first(client, store, make_reward) -> None:
    make_reward(120, name="Lunch")
    make_reward(30, name="Cookie")
    make_reward(10, name="Retired", is_active=False)

    response = client.get(f"/api/v1/public/stores/{store.slug}/rewards")

    assert response.status_code == 200
    rewards = response.json()
    assert [reward["name"] for reward in rewards] == ["Cookie", "Lunch"]
    assert all(reward["available"] for reward in rewards)


def test_operator_routes_require_token(client, store) -> None:
    response = client.get(f"/api/v1/stores/{store.store_id}/customers")

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "token_required"

    response = client.get(
        f"/api/v1/stores/{store.store_id}/customers", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "invalid_token"


def test_operator_cannot_touch_other_store(client, store, other_owner, auth_headers, make_customer) -> None:
    customer = make_customer(10)

    response = client.post(
        f"/api/v1/stores/{store.store_id}/customers/{customer.customer_id}/points",
        json={"points": 5},
        headers=auth_headers(other_owner),
    )

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "tenant_mismatch"


def test_create_and_list_customers(client, owner, auth_headers) -> None:
    url = f"/api/v1/stores/{owner.store_id}/customers"
    headers = auth_headers(owner)

    created = client.post(url, json={"name": "Rafael Souza", "phone": "11987654321"}, headers=headers)
    duplicate = client.post(url, json={"name": "Other", "phone": "11987654321"}, headers=headers)
    listed = client.get(url, headers=headers)

    assert created.status_code == 201
    assert created.json()["total_points"] == 0
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"]["code"] == "duplicate_customer"
    assert [customer["name"] for customer in listed.json()] == ["Rafael Souza"]


def test_adjust_points_clamps_debit(client, database, owner, auth_headers, make_customer) -> None:
    customer = make_customer(40)
    url = f"/api/v1/stores/{owner.store_id}/customers/{customer.customer_id}/points"

    response = client.post(
        url,
        json={"points": 100, "type": "redeemed", "description": "Manual correction"},
        headers=auth_headers(owner),
    )

    assert response.status_code == 200
    assert response.json() == {"customer_id": str(customer.customer_id), "new_balance": 0}

    history = client.get(f"/api/v1/public/customers/{customer.customer_id}/transactions").json()
    assert history[0]["points"] == -40
    assert history[0]["requested_points"] == -100
    assert history[0]["transaction_type"] == "redeemed"

    with database.session() as session:
        assert session.get(Customer, customer.customer_id).total_points == 0


def test_adjust_points_rejects_non_positive_magnitude(client, owner, auth_headers, make_customer) -> None:
    customer = make_customer(40)

    response = client.post(
        f"/api/v1/stores/{owner.store_id}/customers/{customer.customer_id}/points",
        json={"points": 0},
        headers=auth_headers(owner),
    )

    assert response.status_code == 422


def test_redeem_and_validate_flow(client, database, owner, auth_headers, make_customer, make_reward) -> None:
    customer = make_customer(100)
    reward = make_reward(60)

    redeemed = client.post(
        f"/api/v1/public/customers/{customer.customer_id}/redemptions",
        json={"reward_id": str(reward.reward_id)},
    )

    assert redeemed.status_code == 201
    receipt = redeemed.json()
    assert receipt["new_balance"] == 40
    assert receipt["points_used"] == 60
    assert receipt["reward"] == "Free espresso"
    assert receipt["redemption"]["status"] == "pending"
    assert receipt["code"].startswith("PRODUCT-")
    assert receipt["instructions"]

    url = f"/api/v1/stores/{owner.store_id}/redemptions/validate"
    validated = client.post(url, json={"code": receipt["code"]}, headers=auth_headers(owner))

    assert validated.status_code == 200
    body = validated.json()
    assert body["status"] == "completed"
    assert body["customer"] == "Bianca Liu"
    assert body["reward"] == "Free espresso"
    assert body["description"] == "Any size"
    assert body["completed_at"] is not None

    again = client.post(url, json={"code": receipt["code"]}, headers=auth_headers(owner))

    assert again.status_code == 400
    detail = again.json()["detail"]
    assert detail["code"] == "already_used"
    assert detail["completed_at"] == body["completed_at"]

    history = client.get(f"/api/v1/public/customers/{customer.customer_id}/redemptions").json()
    assert [item["status"] for item in history] == ["completed"]

    with database.session() as session:
        assert session.get(Customer, customer.customer_id).total_points == 40
        assert session.get(Reward, reward.reward_id).current_redemptions == 1


def test_redeem_with_insufficient_points(client, database, make_customer, make_reward) -> None:
    customer = make_customer(50)
    reward = make_reward(60)

    response = client.post(
        f"/api/v1/public/customers/{customer.customer_id}/redemptions",
        json={"reward_id": str(reward.reward_id)},
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["code"] == "insufficient_points"
    assert detail["required"] == 60
    assert detail["available"] == 50

    with database.session() as session:
        assert session.query(PointTransaction).filter_by(customer_id=customer.customer_id).count() == 1


def test_validate_unknown_code(client, owner, auth_headers) -> None:
    response = client.post(
        f"/api/v1/stores/{owner.store_id}/redemptions/validate",
        json={"code": "PRODUCT-NOPE00"},
        headers=auth_headers(owner),
    )

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "code_not_found"


def test_cancel_redemption_refunds(client, owner, auth_headers, make_customer, make_reward) -> None:
    customer = make_customer(100)
    reward = make_reward(60)
    receipt = client.post(
        f"/api/v1/public/customers/{customer.customer_id}/redemptions",
        json={"reward_id": str(reward.reward_id)},
    ).json()
    redemption_id = receipt["redemption"]["redemption_id"]
    url = f"/api/v1/stores/{owner.store_id}/redemptions/{redemption_id}/cancel"

    cancelled = client.post(url, headers=auth_headers(owner))
    repeated = client.post(url, headers=auth_headers(owner))

    assert cancelled.status_code == 200
    body = cancelled.json()
    assert body["refunded_points"] == 60
    assert body["new_balance"] == 100
    assert body["redemption"]["status"] == "cancelled"
    assert repeated.status_code == 400
    assert repeated.json()["detail"]["code"] == "cancelled"


def test_reward_management(client, owner, auth_headers) -> None:
    url = f"/api/v1/stores/{owner.store_id}/rewards"
    headers = auth_headers(owner)

    created = client.post(
        url,
        json={"name": "Free espresso", "points_required": 60, "category": "product", "max_redemptions": 2},
        headers=headers,
    )

    assert created.status_code == 201
    reward = created.json()
    assert reward["current_redemptions"] == 0
    assert reward["reward_type"] == "voucher"
    assert reward["available"] is True

    disabled = client.patch(f"{url}/{reward['reward_id']}", json={"is_active": False}, headers=headers)
    listed = client.get(url, headers=headers)

    assert disabled.status_code == 200
    assert disabled.json()["available"] is False
    assert [item["is_active"] for item in listed.json()] == [False]


def test_super_admin_reaches_any_store(client, other_store, admin, auth_headers) -> None:
    response = client.get(f"/api/v1/stores/{other_store.store_id}/rewards", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json() == []


def test_login_with_new_email_and_known_phone(client, database, store, make_customer) -> None:
    existing = make_customer(25, email="old@example.com", phone="11987654321")

    response = client.post(
        "/api/v1/public/customers/login",
        json={"store_slug": store.slug, "email": "new@example.com", "phone": "11987654321"},
    )

    assert response.status_code == 200
    assert response.json()["customer"]["customer_id"] == str(existing.customer_id)
    with database.session() as session:
        assert session.query(Customer).count() == 1


def test_super_admin_writes_to_unknown_store_are_not_found(client, admin, auth_headers) -> None:
    store_id = uuid4()
    headers = auth_headers(admin)

    reward = client.post(
        f"/api/v1/stores/{store_id}/rewards",
        json={"name": "X", "points_required": 10, "never_expires": True},
        headers=headers,
    )
    customer = client.post(
        f"/api/v1/stores/{store_id}/customers", json={"name": "Rafael", "phone": "11987654321"}, headers=headers
    )

    for response in (reward, customer):
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "not_found"


def test_store_dashboard(client, owner, other_owner, auth_headers, make_customer, make_reward) -> None:
    customer = make_customer(100)
    reward = make_reward(60)
    make_reward(10, name="Cookie", is_active=False)
    client.post(
        f"/api/v1/public/customers/{customer.customer_id}/redemptions",
        json={"reward_id": str(reward.reward_id)},
    )
    url = f"/api/v1/stores/{owner.store_id}/dashboard"

    response = client.get(url, headers=auth_headers(owner))
    foreign = client.get(url, headers=auth_headers(other_owner))

    assert response.status_code == 200
    body = response.json()
    assert body["store"]["slug"] == "cafe-central"
    assert body["stats"] == {
        "total_customers": 1,
        "active_rewards": 1,
        "monthly_redemptions": 1,
        "points_in_circulation": 40,
    }
    assert foreign.status_code == 403
