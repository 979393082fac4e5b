from sqlalchemy.future import select

from marketplace.models.activity_models import UserActivity

from tests.conftest import auth


async def test_rejected_write_keeps_its_status_and_message(client, db, customer, product):
    resp = await client.post(
        "/api/bargains/offer",
        json={"product_id": product.id, "offer_price": "150.00"},
        headers=auth(customer),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Offer price must be less than product price"

    result = await db.execute(select(UserActivity).where(UserActivity.user_id == customer.id))
    activities = result.scalars().all()
    assert [a.message for a in activities] == ["Rejected POST on /api/bargains/offer (400)"]
    assert activities[0].username == customer.email


async def test_rejected_seller_gate_is_not_a_server_error(client, db, seller_user, seller, product):
    seller.status = "suspended"
    await db.commit()

    resp = await client.put(f"/api/products/{product.id}", json={"stock": 1}, headers=auth(seller_user))
    assert resp.status_code == 403
    assert resp.json()["detail"]["reason"] == "suspended"


async def test_successful_writes_are_not_logged_twice(client, db, customer, product):
    resp = await client.post(
        "/api/bargains/offer",
        json={"product_id": product.id, "offer_price": "60.00"},
        headers=auth(customer),
    )
    assert resp.status_code == 201

    result = await db.execute(select(UserActivity).where(UserActivity.user_id == customer.id))
    messages = [a.message for a in result.scalars().all()]
    assert len(messages) == 1
    assert messages[0].startswith(f"Customer {customer.id} offered")
