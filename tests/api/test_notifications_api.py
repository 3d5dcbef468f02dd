# tests/api/test_notifications_api.py
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.orm import Session

from app.crud import notification as crud_notification
from app.models.client import Client
from app.models.notification import Notification
from app.utils.dates import utcnow

pytestmark = pytest.mark.asyncio


def _notify(db: Session, user: Client, type: str = "system", title: str = "Hello", is_read: bool = False) -> Notification:
    notification = crud_notification.create_notification(
        db, recipient_id=user.id, type=type, title=title, message=f"{title} message",
        title_ar="مرحبا", message_ar="رسالة",
    )
    if is_read:
        notification.is_read = True
        db.commit()
    return notification


async def test_list_requires_authentication(client: AsyncClient):
    response = await client.get("/api/client/notifications")
    # HTTPBearer answers 403 when the header is missing entirely
    assert response.status_code in (401, 403)


async def test_list_returns_only_own_notifications_newest_first(
    client: AsyncClient, db_session: Session, test_user: Client, other_user: Client, auth_headers: dict
):
    first = _notify(db_session, test_user, title="First")
    second = _notify(db_session, test_user, title="Second")
    _notify(db_session, other_user, title="Not yours")

    response = await client.get("/api/client/notifications", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_items"] == 2
    assert data["total_pages"] == 1
    assert [item["id"] for item in data["items"]] == [second.id, first.id]
    assert data["items"][0]["title_ar"] == "مرحبا"


async def test_list_filters_by_read_state_and_type(
    client: AsyncClient, db_session: Session, test_user: Client, auth_headers: dict
):
    _notify(db_session, test_user, type="order_created")
    _notify(db_session, test_user, type="system", is_read=True)
    _notify(db_session, test_user, type="system")

    unread = await client.get("/api/client/notifications", params={"is_read": "false"}, headers=auth_headers)
    system = await client.get("/api/client/notifications", params={"type": "system"}, headers=auth_headers)

    assert unread.json()["total_items"] == 2
    assert all(not item["is_read"] for item in unread.json()["items"])
    assert system.json()["total_items"] == 2
    assert {item["type"] for item in system.json()["items"]} == {"system"}


async def test_unknown_type_filter_is_rejected(client: AsyncClient, auth_headers: dict):
    response = await client.get("/api/client/notifications", params={"type": "birthday"}, headers=auth_headers)
    assert response.status_code == 422


async def test_pagination(client: AsyncClient, db_session: Session, test_user: Client, auth_headers: dict):
    for i in range(5):
        _notify(db_session, test_user, title=f"N{i}")

    response = await client.get("/api/client/notifications", params={"page": 2, "size": 2}, headers=auth_headers)

    data = response.json()
    assert data["total_items"] == 5
    assert data["total_pages"] == 3
    assert data["current_page"] == 2
    assert len(data["items"]) == 2


async def test_unread_count(client: AsyncClient, db_session: Session, test_user: Client, auth_headers: dict):
    _notify(db_session, test_user)
    _notify(db_session, test_user)
    _notify(db_session, test_user, is_read=True)

    response = await client.get("/api/client/notifications/unread-count", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"count": 2}


async def test_mark_as_read(client: AsyncClient, db_session: Session, test_user: Client, auth_headers: dict):
    notification = _notify(db_session, test_user)

    response = await client.patch(f"/api/client/notifications/{notification.id}/read", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["is_read"] is True
    count = await client.get("/api/client/notifications/unread-count", headers=auth_headers)
    assert count.json()["count"] == 0


async def test_mark_as_read_is_idempotent(client: AsyncClient, db_session: Session, test_user: Client, auth_headers: dict):
    notification = _notify(db_session, test_user, is_read=True)

    response = await client.patch(f"/api/client/notifications/{notification.id}/read", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["is_read"] is True


async def test_mark_as_read_of_foreign_notification_is_not_found(
    client: AsyncClient, db_session: Session, other_user: Client, auth_headers: dict
):
    foreign = _notify(db_session, other_user)

    response = await client.patch(f"/api/client/notifications/{foreign.id}/read", headers=auth_headers)

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["code"] == "NOTIFICATION_NOT_FOUND"
    assert detail["message_ar"]
    db_session.expire_all()
    assert db_session.get(Notification, foreign.id).is_read is False


async def test_mark_all_as_read(
    client: AsyncClient, db_session: Session, test_user: Client, other_user: Client, auth_headers: dict
):
    _notify(db_session, test_user)
    _notify(db_session, test_user)
    _notify(db_session, test_user, is_read=True)
    foreign = _notify(db_session, other_user)

    response = await client.patch("/api/client/notifications/mark-all-read", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"count": 2}
    db_session.expire_all()
    assert crud_notification.count_unread(db_session, test_user.id) == 0
    assert db_session.get(Notification, foreign.id).is_read is False


async def test_delete_notification(client: AsyncClient, db_session: Session, test_user: Client, auth_headers: dict):
    notification = _notify(db_session, test_user)
    notification_id = notification.id

    response = await client.delete(f"/api/client/notifications/{notification_id}", headers=auth_headers)

    assert response.status_code == 204
    db_session.expire_all()
    assert db_session.get(Notification, notification_id) is None

    again = await client.delete(f"/api/client/notifications/{notification_id}", headers=auth_headers)
    assert again.status_code == 404


async def test_delete_all_read_keeps_unread(
    client: AsyncClient, db_session: Session, test_user: Client, auth_headers: dict
):
    unread = _notify(db_session, test_user)
    _notify(db_session, test_user, is_read=True)
    _notify(db_session, test_user, is_read=True)

    response = await client.delete("/api/client/notifications/read", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"count": 2}
    remaining = crud_notification.get_notifications(db_session, test_user.id)
    assert [n.id for n in remaining] == [unread.id]


async def test_archive_removes_old_notifications(
    client: AsyncClient, db_session: Session, test_user: Client, admin_auth_headers: dict
):
    old_read = _notify(db_session, test_user, is_read=True)
    ancient_unread = _notify(db_session, test_user)
    fresh_read = _notify(db_session, test_user, is_read=True)
    old_read.created_at = utcnow() - timedelta(days=45)
    ancient_unread.created_at = utcnow() - timedelta(days=120)
    db_session.commit()

    response = await client.post("/api/admin/notifications/archive", headers=admin_auth_headers)

    assert response.status_code == 200
    assert response.json() == {"count": 2}
    db_session.expire_all()
    remaining = crud_notification.get_notifications(db_session, test_user.id)
    assert [n.id for n in remaining] == [fresh_read.id]


async def test_archive_requires_admin(client: AsyncClient, auth_headers: dict):
    response = await client.post("/api/admin/notifications/archive", headers=auth_headers)

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "ADMIN_REQUIRED"
