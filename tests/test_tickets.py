from smm_panel.models import TicketMessage, UserRole


def _open_ticket(client, headers, subject="Order stuck", message="My order has not started", priority="high"):
    return client.post(
        "/api/v1/tickets/",
        json={"subject": subject, "message": message, "priority": priority},
        headers=headers,
    )


def test_client_opens_ticket_with_first_message(client, db_session, make_user, auth_headers):
    user = make_user()

    res = _open_ticket(client, auth_headers(user))

    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "open"
    assert body["priority"] == "high"
    messages = db_session.query(TicketMessage).filter(TicketMessage.ticket_id == body["id"]).all()
    assert len(messages) == 1
    assert messages[0].is_admin is False


def test_reply_flow_updates_status(client, make_user, auth_headers):
    user = make_user()
    staff = make_user(role=UserRole.ADMIN)
    ticket_id = _open_ticket(client, auth_headers(user)).json()["id"]

    staff_reply = client.post(
        f"/api/v1/tickets/{ticket_id}/messages",
        json={"message": "Looking into it"},
        headers=auth_headers(staff),
    )
    assert staff_reply.json()["status"] == "answered"

    client_reply = client.post(
        f"/api/v1/tickets/{ticket_id}/messages",
        json={"message": "Thanks"},
        headers=auth_headers(user),
    )
    assert client_reply.json()["status"] == "open"

    closed = client.patch(f"/api/v1/tickets/{ticket_id}/status", json={"status": "closed"}, headers=auth_headers(staff))
    assert closed.json()["status"] == "closed"

    reopened = client.post(
        f"/api/v1/tickets/{ticket_id}/messages",
        json={"message": "Actually it stopped again"},
        headers=auth_headers(staff),
    )
    assert reopened.json()["status"] == "open"

    detail = client.get(f"/api/v1/tickets/{ticket_id}", headers=auth_headers(user)).json()
    assert [m["is_admin"] for m in detail["messages"]] == [False, True, False, True]
    assert detail["messages"][1]["username"] == staff.username


def test_client_cannot_access_foreign_ticket(client, make_user, auth_headers):
    owner = make_user()
    stranger = make_user()
    ticket_id = _open_ticket(client, auth_headers(owner)).json()["id"]

    assert client.get(f"/api/v1/tickets/{ticket_id}", headers=auth_headers(stranger)).status_code == 404
    reply = client.post(
        f"/api/v1/tickets/{ticket_id}/messages",
        json={"message": "hi"},
        headers=auth_headers(stranger),
    )
    assert reply.status_code == 403


def test_ticket_listing_scope(client, make_user, auth_headers):
    alice = make_user()
    bob = make_user()
    seller = make_user(role=UserRole.SELLER)
    _open_ticket(client, auth_headers(alice))
    _open_ticket(client, auth_headers(bob), subject="Refund please", priority="low")

    mine = client.get("/api/v1/tickets/", headers=auth_headers(alice)).json()
    assert mine["total"] == 1
    assert mine["items"][0]["email"] is None

    everyone = client.get("/api/v1/tickets/", headers=auth_headers(seller)).json()
    assert everyone["total"] == 2
    assert {item["email"] for item in everyone["items"]} == {alice.email, bob.email}

    closed = client.get("/api/v1/tickets/", params={"status": "closed"}, headers=auth_headers(seller)).json()
    assert closed["total"] == 0


def test_status_update_requires_staff_and_existing_ticket(client, make_user, auth_headers):
    user = make_user()
    staff = make_user(role=UserRole.SELLER)
    ticket_id = _open_ticket(client, auth_headers(user)).json()["id"]

    forbidden = client.patch(f"/api/v1/tickets/{ticket_id}/status", json={"status": "closed"}, headers=auth_headers(user))
    missing = client.patch("/api/v1/tickets/9999/status", json={"status": "closed"}, headers=auth_headers(staff))

    assert forbidden.status_code == 403
    assert missing.status_code == 404
