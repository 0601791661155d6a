from decimal import Decimal

import pytest

from smm_panel.models import ApiLog, Category, Order, Service, UserRole


def _with_key(make_user, db_session, **kwargs):
    user = make_user(**kwargs)
    user.api_key = f"smm_key_{user.id}"
    db_session.commit()
    return user


def test_missing_and_invalid_key(client, db_session):
    missing = client.get("/api/v1/external/order/1")
    invalid = client.get("/api/v1/external/order/1", headers={"X-API-Key": "smm_nope"})

    assert missing.status_code == 401
    assert missing.json()["detail"] == "API key required"
    assert invalid.status_code == 401
    assert invalid.json()["detail"] == "Invalid API key"
    assert db_session.query(ApiLog).filter(ApiLog.status_code == 401).count() == 2


def test_external_order_uses_role_price(client, db_session, make_user, make_service):
    seller = _with_key(make_user, db_session, role=UserRole.SELLER, balance="100")
    service = make_service(price="0.0100", reseller_price="0.0080")

    res = client.post(
        "/api/v1/external/order",
        json={"service_id": service.id, "link": "https://youtube.com/watch?v=abc", "quantity": 1000},
        headers={"X-API-Key": seller.api_key},
    )

    assert res.status_code == 201
    assert res.json()["status"] == "pending"
    assert Decimal(res.json()["price"]) == Decimal("8")
    log = db_session.query(ApiLog).filter(ApiLog.user_id == seller.id).one()
    assert log.status_code == 201
    assert log.request_data["quantity"] == 1000
    assert log.response_data["order_id"] == res.json()["order_id"]


def test_external_order_failure_is_logged(client, db_session, make_user, make_service):
    buyer = _with_key(make_user, db_session, balance="1")
    service = make_service()

    res = client.post(
        "/api/v1/external/order",
        json={"service_id": service.id, "link": "https://youtube.com/watch?v=abc", "quantity": 1000},
        params={"api_key": buyer.api_key},
    )

    assert res.status_code == 400
    log = db_session.query(ApiLog).filter(ApiLog.user_id == buyer.id).one()
    assert log.status_code == 400
    assert db_session.query(Order).count() == 0


def test_client_reads_only_own_orders(client, db_session, make_user, make_service):
    alice = _with_key(make_user, db_session, balance="100")
    bob = _with_key(make_user, db_session, balance="100")
    service = make_service()
    order_id = client.post(
        "/api/v1/external/order",
        json={"service_id": service.id, "link": "https://youtube.com/watch?v=abc", "quantity": 1000},
        headers={"X-API-Key": alice.api_key},
    ).json()["order_id"]

    own = client.get(f"/api/v1/external/order/{order_id}", headers={"X-API-Key": alice.api_key})
    foreign = client.get(f"/api/v1/external/order/{order_id}", headers={"X-API-Key": bob.api_key})

    assert own.status_code == 200
    assert own.json()["remains"] == 1000
    assert foreign.status_code == 404


def test_status_update_requires_staff_key(client, db_session, make_user, make_service):
    buyer = _with_key(make_user, db_session, balance="100")
    seller = _with_key(make_user, db_session, role=UserRole.SELLER)
    service = make_service()
    order_id = client.post(
        "/api/v1/external/order",
        json={"service_id": service.id, "link": "https://youtube.com/watch?v=abc", "quantity": 1000},
        headers={"X-API-Key": buyer.api_key},
    ).json()["order_id"]

    denied = client.post(
        f"/api/v1/external/order/{order_id}/status",
        json={"status": "completed"},
        headers={"X-API-Key": buyer.api_key},
    )
    assert denied.status_code == 403

    ok = client.post(
        f"/api/v1/external/order/{order_id}/status",
        json={"status": "in_progress", "start_count": 10, "remains": 400},
        headers={"X-API-Key": seller.api_key},
    )
    assert ok.status_code == 200
    assert ok.json()["status"] == "in_progress"
    assert ok.json()["remains"] == 400
    assert db_session.get(Order, order_id).seller_id == seller.id


def test_services_sync_creates_updates_and_reports_errors(client, db_session, make_user):
    admin = _with_key(make_user, db_session, role=UserRole.ADMIN)
    category = Category(name="TikTok", status="active")
    db_session.add(category)
    db_session.commit()
    db_session.add(
        Service(
            category_id=category.id,
            name="Old name",
            price=Decimal("1"),
            reseller_price=Decimal("1"),
            api_service_id="TT_VIEWS",
        )
    )
    db_session.commit()

    res = client.post(
        "/api/v1/external/services/sync",
        json={
            "services": [
                {"api_service_id": "TT_VIEWS", "name": "TikTok Views", "price": "0.002"},
                {"api_service_id": "TT_LIKES", "name": "TikTok Likes", "price": "0.004", "category_id": category.id},
                {"api_service_id": "TT_BROKEN", "name": "No price"},
                {"name": "No id", "price": "1"},
            ]
        },
        headers={"X-API-Key": admin.api_key},
    )

    assert res.status_code == 200
    body = res.json()
    assert body["synced"] == 1
    assert body["updated"] == 1
    assert len(body["errors"]) == 2
    updated = db_session.query(Service).filter(Service.api_service_id == "TT_VIEWS").one()
    assert updated.name == "TikTok Views"
    assert db_session.query(Service).filter(Service.api_service_id == "TT_LIKES").count() == 1


def test_services_sync_rejects_client_key(client, db_session, make_user):
    buyer = _with_key(make_user, db_session)

    res = client.post("/api/v1/external/services/sync", json={"services": []}, headers={"X-API-Key": buyer.api_key})

    assert res.status_code == 403


def test_services_sync_reports_duplicate_ids_in_batch(client, db_session, make_user):
    admin = _with_key(make_user, db_session, role=UserRole.ADMIN)
    db_session.add(Category(name="Twitter", status="active"))
    db_session.commit()

    res = client.post(
        "/api/v1/external/services/sync",
        json={
            "services": [
                {"api_service_id": "X1", "name": "X Followers", "price": "0.01"},
                {"api_service_id": "X1", "name": "X Followers again", "price": "0.02"},
            ]
        },
        headers={"X-API-Key": admin.api_key},
    )

    assert res.status_code == 200
    body = res.json()
    assert body["synced"] == 1
    assert body["updated"] == 0
    assert body["errors"] == ["X1: duplicate api_service_id in this batch"]
    service = db_session.query(Service).filter(Service.api_service_id == "X1").one()
    assert service.name == "X Followers"
    log = db_session.query(ApiLog).filter(ApiLog.user_id == admin.id).one()
    assert log.status_code == 200


def test_unexpected_error_is_logged_and_rolled_back(client, db_session, make_user, monkeypatch):
    from smm_panel.api.v1.endpoints import external

    admin = _with_key(make_user, db_session, role=UserRole.ADMIN)
    db_session.add(Category(name="Twitch", status="active"))
    db_session.commit()

    def _boom(db, entry, default_category_id):
        raise RuntimeError("storage offline")

    monkeypatch.setattr(external, "_sync_entry", _boom)

    with pytest.raises(RuntimeError):
        client.post(
            "/api/v1/external/services/sync",
            json={"services": [{"api_service_id": "TW1", "name": "Twitch Follows", "price": "0.01"}]},
            headers={"X-API-Key": admin.api_key},
        )

    log = db_session.query(ApiLog).filter(ApiLog.user_id == admin.id).one()
    assert log.status_code == 500
    assert log.response_data == {"error": "Internal server error"}
    assert db_session.query(Service).count() == 0


def test_services_sync_rejects_unusable_prices(client, db_session, make_user):
    admin = _with_key(make_user, db_session, role=UserRole.ADMIN)
    db_session.add(Category(name="Reddit", status="active"))
    db_session.commit()

    res = client.post(
        "/api/v1/external/services/sync",
        json={
            "services": [
                {"api_service_id": "R1", "name": "Upvotes", "price": "NaN"},
                {"api_service_id": "R2", "name": "Karma", "price": "1e30"},
            ]
        },
        headers={"X-API-Key": admin.api_key},
    )

    assert res.status_code == 200
    assert res.json()["errors"] == ["R1: price must be a number", "R2: price is too large"]
    assert db_session.query(Service).count() == 0
