# tests/api/test_orders_api.py
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.db.session import SessionLocal
from app.models.client import Client
from app.models.notification import Notification
from app.models.order import Order, OrderHistory
from app.models.product import Product

pytestmark = pytest.mark.asyncio


def _line(product: Product, lta_id: int, quantity: int, price: str) -> dict:
    return {"product_id": product.id, "sku": product.sku, "quantity": quantity, "price": price, "lta_id": lta_id}


async def _place_order(client: AsyncClient, headers: dict, catalog: dict, quantity: int = 3) -> dict:
    payload = {"items": [_line(catalog["paper"], catalog["lta"].id, quantity, "25.50")]}
    response = await client.post("/api/client/orders", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# --- Placing orders ---

async def test_create_order_prices_from_contract(
    client: AsyncClient, db_session: Session, catalog: dict, admin_user: Client, auth_headers: dict
):
    payload = {"items": [
        _line(catalog["paper"], catalog["lta"].id, 10, "25.50"),
        _line(catalog["toner"], catalog["lta"].id, 2, "310.00"),
    ]}

    response = await client.post("/api/client/orders", json=payload, headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert Decimal(data["total_amount"]) == Decimal("875.00")
    assert data["items"][0]["name_ar"] == "ورق A4"
    assert data["items"][1]["currency"] == "SAR"

    db_session.expire_all()
    assert db_session.get(Product, catalog["paper"].id).stock_quantity == 90
    assert db_session.get(Product, catalog["toner"].id).stock_quantity == 3

    history = db_session.query(OrderHistory).filter_by(order_id=data["id"]).all()
    assert [(h.status, h.previous_status) for h in history] == [("pending", None)]

    admin_notes = db_session.query(Notification).filter_by(recipient_id=admin_user.id).all()
    assert [n.type for n in admin_notes] == ["order_created"]
    assert admin_notes[0].action_url == f"/admin/orders/{data['id']}"


async def test_create_order_rejects_tampered_price(
    client: AsyncClient, db_session: Session, catalog: dict, auth_headers: dict
):
    payload = {"items": [_line(catalog["paper"], catalog["lta"].id, 1, "1.00")]}

    response = await client.post("/api/client/orders", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_PRICE"
    assert db_session.query(Order).count() == 0


async def test_create_order_rejects_unassigned_lta(
    client: AsyncClient, db_session: Session, catalog: dict, other_auth_headers: dict
):
    payload = {"items": [_line(catalog["paper"], catalog["lta"].id, 1, "25.50")]}

    response = await client.post("/api/client/orders", json=payload, headers=other_auth_headers)

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "LTA_NOT_ASSIGNED"


async def test_create_order_rejects_insufficient_stock(
    client: AsyncClient, db_session: Session, catalog: dict, auth_headers: dict
):
    payload = {"items": [_line(catalog["toner"], catalog["lta"].id, 6, "310.00")]}

    response = await client.post("/api/client/orders", json=payload, headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "INSUFFICIENT_STOCK"
    db_session.expire_all()
    assert db_session.get(Product, catalog["toner"].id).stock_quantity == 5


async def test_create_order_rejects_empty_items(client: AsyncClient, catalog: dict, auth_headers: dict):
    response = await client.post("/api/client/orders", json={"items": []}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "ORDER_EMPTY"


async def test_create_order_rejects_non_positive_quantity(client: AsyncClient, catalog: dict, auth_headers: dict):
    payload = {"items": [_line(catalog["paper"], catalog["lta"].id, 0, "25.50")]}

    response = await client.post("/api/client/orders", json=payload, headers=auth_headers)

    assert response.status_code == 422


# --- Reading orders ---

async def test_client_lists_only_own_orders(
    client: AsyncClient, db_session: Session, catalog: dict, auth_headers: dict, other_auth_headers: dict
):
    await _place_order(client, auth_headers, catalog)

    mine = await client.get("/api/client/orders", headers=auth_headers)
    theirs = await client.get("/api/client/orders", headers=other_auth_headers)

    assert mine.json()["total_items"] == 1
    assert theirs.json()["total_items"] == 0


async def test_foreign_order_is_forbidden(
    client: AsyncClient, catalog: dict, auth_headers: dict, other_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)

    response = await client.get(f"/api/client/orders/{order['id']}", headers=other_auth_headers)

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "ORDER_ACCESS_DENIED"


async def test_missing_order_is_not_found(client: AsyncClient, test_user: Client, auth_headers: dict):
    response = await client.get("/api/client/orders/999", headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "ORDER_NOT_FOUND"


# --- Cancellation ---

async def test_client_cancels_pending_order(
    client: AsyncClient, db_session: Session, catalog: dict, admin_user: Client, auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)

    response = await client.post(
        f"/api/orders/{order['id']}/cancel", json={"reason": "  changed mind  "}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled"
    assert data["cancellation_reason"] == "changed mind"
    assert data["cancelled_at"] is not None

    history = await client.get(f"/api/orders/{order['id']}/history", headers=auth_headers)
    entries = history.json()
    assert len(entries) == 2
    assert entries[-1]["status"] == "cancelled"
    assert entries[-1]["previous_status"] == "pending"
    assert entries[-1]["notes"] == "changed mind"

    types = [n.type for n in db_session.query(Notification).filter_by(recipient_id=admin_user.id)]
    assert "order_cancelled" in types


async def test_cancel_requires_reason(client: AsyncClient, catalog: dict, auth_headers: dict):
    order = await _place_order(client, auth_headers, catalog)

    response = await client.post(f"/api/orders/{order['id']}/cancel", json={"reason": "   "}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "CANCELLATION_REASON_REQUIRED"


async def test_cancel_twice_is_rejected(client: AsyncClient, catalog: dict, auth_headers: dict):
    order = await _place_order(client, auth_headers, catalog)
    await client.post(f"/api/orders/{order['id']}/cancel", json={"reason": "duplicate"}, headers=auth_headers)

    response = await client.post(f"/api/orders/{order['id']}/cancel", json={"reason": "again"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "ORDER_ALREADY_CANCELLED"


async def test_shipped_order_cannot_be_cancelled(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    shipped = await client.patch(
        f"/api/admin/orders/{order['id']}/status", json={"status": "shipped"}, headers=admin_auth_headers
    )
    assert shipped.status_code == 200

    response = await client.post(f"/api/orders/{order['id']}/cancel", json={"reason": "late"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "ORDER_NOT_CANCELLABLE"


async def test_other_client_cannot_cancel(
    client: AsyncClient, catalog: dict, auth_headers: dict, other_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)

    response = await client.post(
        f"/api/orders/{order['id']}/cancel", json={"reason": "mischief"}, headers=other_auth_headers
    )

    assert response.status_code == 403


# --- Admin status flow ---

async def test_admin_moves_order_forward_and_client_is_notified(
    client: AsyncClient, db_session: Session, catalog: dict, test_user: Client,
    auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)

    response = await client.patch(
        f"/api/admin/orders/{order['id']}/status",
        json={"status": "confirmed", "notes": "Stock reserved"},
        headers=admin_auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"
    notifications = db_session.query(Notification).filter_by(recipient_id=test_user.id).all()
    assert [n.type for n in notifications] == ["order_status_changed"]
    assert notifications[0].action_type == "view_order"


async def test_admin_cannot_move_order_backwards(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    await client.patch(f"/api/admin/orders/{order['id']}/status", json={"status": "processing"}, headers=admin_auth_headers)

    response = await client.patch(
        f"/api/admin/orders/{order['id']}/status", json={"status": "confirmed"}, headers=admin_auth_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_ORDER_TRANSITION"


async def test_admin_cancellation_needs_reason(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)

    missing = await client.patch(
        f"/api/admin/orders/{order['id']}/status", json={"status": "cancelled"}, headers=admin_auth_headers
    )
    done = await client.patch(
        f"/api/admin/orders/{order['id']}/status",
        json={"status": "cancelled", "cancellation_reason": "Out of budget"},
        headers=admin_auth_headers,
    )

    assert missing.status_code == 400
    assert done.status_code == 200
    assert done.json()["cancellation_reason"] == "Out of budget"


async def test_status_update_requires_admin(client: AsyncClient, catalog: dict, auth_headers: dict):
    order = await _place_order(client, auth_headers, catalog)

    response = await client.patch(
        f"/api/admin/orders/{order['id']}/status", json={"status": "confirmed"}, headers=auth_headers
    )

    assert response.status_code == 403


async def test_admin_notes_are_hidden_from_client_timeline(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    note = await client.post(
        f"/api/admin/orders/{order['id']}/notes",
        json={"note": "Client is slow to pay", "is_admin_note": True},
        headers=admin_auth_headers,
    )
    assert note.status_code == 201

    client_view = await client.get(f"/api/orders/{order['id']}/history", headers=auth_headers)
    admin_view = await client.get(f"/api/orders/{order['id']}/history", headers=admin_auth_headers)

    assert len(client_view.json()) == 1
    assert len(admin_view.json()) == 2
    assert admin_view.json()[-1]["is_admin_note"] is True


async def test_concurrent_update_maps_to_conflict(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict, mocker
):
    order = await _place_order(client, auth_headers, catalog)
    mocker.patch(
        "app.services.order.update_status",
        side_effect=StaleDataError("UPDATE statement on table 'orders' expected to update 1 row(s); 0 were matched."),
    )

    response = await client.patch(
        f"/api/admin/orders/{order['id']}/status", json={"status": "confirmed"}, headers=admin_auth_headers
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "CONCURRENT_UPDATE"


async def test_stale_order_write_is_detected(client: AsyncClient, catalog: dict, auth_headers: dict):
    order = await _place_order(client, auth_headers, catalog)
    first, second = SessionLocal(), SessionLocal()
    try:
        first_copy = first.get(Order, order["id"])
        second_copy = second.get(Order, order["id"])

        first_copy.status = "confirmed"
        first.commit()

        second_copy.status = "processing"
        with pytest.raises(StaleDataError):
            second.commit()
    finally:
        second.rollback()
        first.close()
        second.close()


# --- Modification requests ---

async def test_item_modification_approved_replaces_items(
    client: AsyncClient, db_session: Session, catalog: dict, test_user: Client,
    auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    request = await client.post(
        f"/api/orders/{order['id']}/modify",
        json={
            "modification_type": "items",
            "new_items": [_line(catalog["toner"], catalog["lta"].id, 1, "310.00")],
            "reason": "Need toner instead",
        },
        headers=auth_headers,
    )
    assert request.status_code == 201
    modification = request.json()
    assert modification["previous_status"] == "pending"
    assert Decimal(modification["new_total_amount"]) == Decimal("310.00")

    pending = await client.get(f"/api/client/orders/{order['id']}", headers=auth_headers)
    assert pending.json()["status"] == "modification_requested"

    review = await client.post(
        f"/api/admin/order-modifications/{modification['id']}/review",
        json={"status": "approved", "admin_response": "OK"},
        headers=admin_auth_headers,
    )

    assert review.status_code == 200
    assert review.json()["status"] == "approved"
    updated = (await client.get(f"/api/client/orders/{order['id']}", headers=auth_headers)).json()
    assert updated["status"] == "pending"
    assert [item["sku"] for item in updated["items"]] == ["TONER-BK"]
    assert Decimal(updated["total_amount"]) == Decimal("310.00")

    types = [n.type for n in db_session.query(Notification).filter_by(recipient_id=test_user.id)]
    assert "order_modification_reviewed" in types


async def test_rejected_modification_restores_previous_status(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    await client.patch(f"/api/admin/orders/{order['id']}/status", json={"status": "confirmed"}, headers=admin_auth_headers)
    request = await client.post(
        f"/api/orders/{order['id']}/modify",
        json={"modification_type": "cancel", "reason": "Budget cut"},
        headers=auth_headers,
    )

    review = await client.post(
        f"/api/admin/order-modifications/{request.json()['id']}/review",
        json={"status": "rejected", "admin_response": "Already packed"},
        headers=admin_auth_headers,
    )

    assert review.status_code == 200
    restored = (await client.get(f"/api/client/orders/{order['id']}", headers=auth_headers)).json()
    assert restored["status"] == "confirmed"
    assert Decimal(restored["total_amount"]) == Decimal("76.50")


async def test_approved_cancel_modification_cancels_order(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    request = await client.post(
        f"/api/orders/{order['id']}/modify",
        json={"modification_type": "cancel", "reason": "Project cancelled"},
        headers=auth_headers,
    )

    review = await client.post(
        f"/api/admin/order-modifications/{request.json()['id']}/review",
        json={"status": "approved"},
        headers=admin_auth_headers,
    )

    assert review.status_code == 200
    cancelled = (await client.get(f"/api/client/orders/{order['id']}", headers=auth_headers)).json()
    assert cancelled["status"] == "cancelled"
    assert cancelled["cancellation_reason"] == "Project cancelled"


async def test_second_pending_modification_is_rejected(client: AsyncClient, catalog: dict, auth_headers: dict):
    order = await _place_order(client, auth_headers, catalog)
    payload = {"modification_type": "cancel", "reason": "First"}
    first = await client.post(f"/api/orders/{order['id']}/modify", json=payload, headers=auth_headers)
    assert first.status_code == 201

    second = await client.post(f"/api/orders/{order['id']}/modify", json=payload, headers=auth_headers)

    assert second.status_code == 400
    assert second.json()["detail"]["code"] in ("MODIFICATION_PENDING", "MODIFICATION_NOT_ALLOWED")


async def test_modification_cannot_be_reviewed_twice(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    request = await client.post(
        f"/api/orders/{order['id']}/modify", json={"modification_type": "cancel", "reason": "x"}, headers=auth_headers
    )
    url = f"/api/admin/order-modifications/{request.json()['id']}/review"
    await client.post(url, json={"status": "rejected"}, headers=admin_auth_headers)

    response = await client.post(url, json={"status": "approved"}, headers=admin_auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "MODIFICATION_ALREADY_REVIEWED"


async def test_item_modification_without_items_is_rejected(client: AsyncClient, catalog: dict, auth_headers: dict):
    order = await _place_order(client, auth_headers, catalog)

    response = await client.post(
        f"/api/orders/{order['id']}/modify", json={"modification_type": "items", "reason": "more"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "MODIFICATION_ITEMS_REQUIRED"


async def test_cancelling_order_closes_pending_modification(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    request = await client.post(
        f"/api/orders/{order['id']}/modify",
        json={"modification_type": "cancel", "reason": "Budget cut"},
        headers=auth_headers,
    )
    cancel = await client.post(f"/api/orders/{order['id']}/cancel", json={"reason": "Too slow"}, headers=auth_headers)
    assert cancel.status_code == 200
    assert cancel.json()["status"] == "cancelled"

    review = await client.post(
        f"/api/admin/order-modifications/{request.json()['id']}/review",
        json={"status": "rejected"},
        headers=admin_auth_headers,
    )

    assert review.status_code == 400
    assert review.json()["detail"]["code"] == "MODIFICATION_ALREADY_REVIEWED"
    after = (await client.get(f"/api/client/orders/{order['id']}", headers=auth_headers)).json()
    assert after["status"] == "cancelled"
    modifications = (await client.get(f"/api/orders/{order['id']}/modifications", headers=auth_headers)).json()
    assert [m["status"] for m in modifications] == ["rejected"]
    history = (await client.get(f"/api/orders/{order['id']}/history", headers=auth_headers)).json()
    assert history[-1]["status"] == "cancelled"


async def test_review_refused_when_order_left_modification_requested(
    client: AsyncClient, db_session: Session, catalog: dict, auth_headers: dict, admin_auth_headers: dict
):
    order = await _place_order(client, auth_headers, catalog)
    request = await client.post(
        f"/api/orders/{order['id']}/modify",
        json={
            "modification_type": "items",
            "reason": "Need toner",
            "new_items": [_line(catalog["toner"], catalog["lta"].id, 1, "310.00")],
        },
        headers=auth_headers,
    )
    assert request.status_code == 201
    stored = db_session.get(Order, order["id"])
    stored.status = "shipped"
    db_session.commit()

    review = await client.post(
        f"/api/admin/order-modifications/{request.json()['id']}/review",
        json={"status": "approved"},
        headers=admin_auth_headers,
    )

    assert review.status_code == 400
    assert review.json()["detail"]["code"] == "MODIFICATION_ORDER_CLOSED"
    db_session.expire_all()
    unchanged = db_session.get(Order, order["id"])
    assert unchanged.status == "shipped"
    assert Decimal(unchanged.total_amount) == Decimal("76.50")


async def test_cancel_log_names_actor_role(
    client: AsyncClient, catalog: dict, auth_headers: dict, admin_user: Client, admin_auth_headers: dict, caplog
):
    order = await _place_order(client, auth_headers, catalog)

    with caplog.at_level("INFO", logger="app.services.order"):
        response = await client.post(
            f"/api/orders/{order['id']}/cancel", json={"reason": "Duplicate order"}, headers=admin_auth_headers
        )

    assert response.status_code == 200
    assert f"Order {order['id']} cancelled by admin {admin_user.id}." in caplog.messages
