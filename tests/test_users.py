from smm_panel.models import UserRole, UserStatus


def test_update_profile_requires_fields(client, make_user, auth_headers):
    user = make_user()

    res = client.put("/api/v1/users/profile", json={}, headers=auth_headers(user))

    assert res.status_code == 400
    assert res.json()["detail"] == "No fields to update"


def test_update_profile_rejects_taken_email(client, make_user, auth_headers):
    make_user(email="taken@example.com")
    user = make_user()

    res = client.put("/api/v1/users/profile", json={"email": "taken@example.com"}, headers=auth_headers(user))

    assert res.status_code == 400
    assert res.json()["detail"] == "Username or email already exists"


def test_update_profile_changes_username(client, make_user, auth_headers):
    user = make_user()

    res = client.put("/api/v1/users/profile", json={"username": "renamed_user"}, headers=auth_headers(user))

    assert res.status_code == 200
    assert res.json()["username"] == "renamed_user"


def test_change_password_checks_current(client, db_session, make_user, auth_headers):
    user = make_user(password="secret123")

    wrong = client.put(
        "/api/v1/users/password",
        json={"current_password": "nope123", "new_password": "another1"},
        headers=auth_headers(user),
    )
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == "Current password is incorrect"

    ok = client.put(
        "/api/v1/users/password",
        json={"current_password": "secret123", "new_password": "another1"},
        headers=auth_headers(user),
    )
    assert ok.status_code == 200

    login = client.post("/api/v1/auth/login", json={"email": user.email, "password": "another1"})
    assert login.status_code == 200


def test_api_key_rotation(client, db_session, make_user, auth_headers):
    user = make_user()

    first = client.post("/api/v1/users/api-key", headers=auth_headers(user)).json()["api_key"]
    second = client.post("/api/v1/users/api-key", headers=auth_headers(user)).json()["api_key"]

    assert first.startswith("smm_")
    assert first != second
    db_session.refresh(user)
    assert user.api_key == second


def test_affiliate_join_is_idempotent(client, make_user, auth_headers):
    user = make_user()

    first = client.post("/api/v1/users/affiliate", headers=auth_headers(user))
    second = client.post("/api/v1/users/affiliate", headers=auth_headers(user))

    assert first.status_code == 200
    assert first.json()["referral_code"] == second.json()["referral_code"]
    assert client.get("/api/v1/users/affiliate", headers=auth_headers(user)).json()["referrals"] == 0


def test_admin_lists_users_with_filters(client, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    make_user(role=UserRole.SELLER, username="shop_one")
    make_user(username="buyer_one")
    make_user(username="buyer_two")

    res = client.get("/api/v1/users/", params={"role": "client"}, headers=auth_headers(admin))
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 2
    assert {item["username"] for item in body["items"]} == {"buyer_one", "buyer_two"}

    search = client.get("/api/v1/users/", params={"search": "shop"}, headers=auth_headers(admin)).json()
    assert [item["username"] for item in search["items"]] == ["shop_one"]

    bad = client.get("/api/v1/users/", params={"role": "wizard"}, headers=auth_headers(admin))
    assert bad.status_code == 400


def test_admin_changes_user_status(client, db_session, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)
    target = make_user()

    res = client.patch(f"/api/v1/users/{target.id}/status", json={"status": "banned"}, headers=auth_headers(admin))

    assert res.status_code == 200
    db_session.refresh(target)
    assert target.status == UserStatus.BANNED


def test_admin_cannot_change_own_status(client, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)

    res = client.patch(f"/api/v1/users/{admin.id}/status", json={"status": "suspended"}, headers=auth_headers(admin))

    assert res.status_code == 400


def test_admin_status_change_unknown_user(client, make_user, auth_headers):
    admin = make_user(role=UserRole.ADMIN)

    res = client.patch("/api/v1/users/9999/status", json={"status": "active"}, headers=auth_headers(admin))

    assert res.status_code == 404
    assert client.get("/api/v1/users/", headers=auth_headers(make_user())).status_code == 403
