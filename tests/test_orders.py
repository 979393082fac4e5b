from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.future import select

from marketplace.models.order_models import Order

from tests.conftest import auth, create_product, create_user, seller_of


def _order(*items, payment_method="cod"):
    lines = []
    for product, quantity, *extra in items:
        line = {"product_id": product.id, "quantity": quantity, "price": str(product.price)}
        if extra:
            line.update(extra[0])
        lines.append(line)
    return {"items": lines, "payment_method": payment_method}


async def _place(client, customer, body, key=None):
    headers = auth(customer)
    if key:
        headers["Idempotency-Key"] = key
    return await client.post("/api/orders", json=body, headers=headers)


async def _order_count(db):
    return (await db.execute(select(func.count(Order.id)))).scalar()


async def test_order_totals_stock_and_commission(client, db, customer, seller, product):
    resp = await _place(client, customer, _order((product, 2)))
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert Decimal(data["total_amount"]) == Decimal("200")
    assert data["status"] == "pending"
    assert data["seller_id"] == seller.id
    assert data["items"][0]["quantity"] == 2

    await db.refresh(product)
    await db.refresh(seller)
    assert product.stock == 3
    assert seller.commission_owed == Decimal("20.00")


async def test_commission_follows_current_rate(client, db, customer, admin, seller, product):
    await client.put("/api/admin/settings", json={"commissionRate": 7.5}, headers=auth(admin))

    resp = await _place(client, customer, _order((product, 1)))
    assert resp.status_code == 201

    await db.refresh(seller)
    assert seller.commission_owed == Decimal("7.50")


async def test_insufficient_stock_changes_nothing(client, db, customer, seller, product):
    lamp = await create_product(db, seller, name="Brass Lamp", price=Decimal("30.00"), min_bargain_price=None, stock=1)

    resp = await _place(client, customer, _order((product, 1), (lamp, 2)))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient stock for product Brass Lamp"

    await db.refresh(product)
    await db.refresh(seller)
    assert product.stock == 5
    assert seller.commission_owed == Decimal("0")
    assert await _order_count(db) == 0


async def test_unknown_product(client, customer):
    body = {"items": [{"product_id": 4242, "quantity": 1, "price": "10"}], "payment_method": "online"}
    resp = await _place(client, customer, body)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Product 4242 not found"


async def test_multi_seller_orders_rejected(client, db, customer, product):
    other = await seller_of(db, await create_user(db, "potter@market.dev", role="seller"))
    vase = await create_product(db, other, name="Vase", price=Decimal("45.00"), min_bargain_price=None)

    resp = await _place(client, customer, _order((product, 1), (vase, 1)))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Multi-seller orders not yet supported"

    await db.refresh(product)
    await db.refresh(vase)
    assert (product.stock, vase.stock) == (5, 5)
    assert await _order_count(db) == 0


async def test_pending_offer_cannot_be_used(client, customer, product):
    offer = await client.post(
        "/api/bargains/offer", json={"product_id": product.id, "offer_price": "60"}, headers=auth(customer)
    )
    offer_id = offer.json()["data"]["id"]

    resp = await _place(client, customer, _order((product, 1, {"bargain_offer_id": offer_id})))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid bargain offer"


async def test_accepted_offer_of_another_buyer_rejected(client, customer, other_customer, seller_user, product):
    offer = await client.post(
        "/api/bargains/offer", json={"product_id": product.id, "offer_price": "60"}, headers=auth(customer)
    )
    offer_id = offer.json()["data"]["id"]
    await client.post(f"/api/bargains/{offer_id}/accept", headers=auth(seller_user))

    resp = await _place(client, other_customer, _order((product, 1, {"bargain_offer_id": offer_id})))
    assert resp.status_code == 400

    resp = await _place(client, customer, _order((product, 2, {"bargain_offer_id": offer_id})))
    assert resp.status_code == 201
    assert Decimal(resp.json()["data"]["total_amount"]) == Decimal("120")


async def test_idempotency_key_replays_first_order(client, db, customer, product):
    first = await _place(client, customer, _order((product, 1)), key="cart-17")
    assert first.status_code == 201

    again = await _place(client, customer, _order((product, 1)), key="cart-17")
    assert again.status_code == 200
    assert again.json()["data"]["id"] == first.json()["data"]["id"]

    await db.refresh(product)
    assert product.stock == 4
    assert await _order_count(db) == 1


async def test_order_listings(client, db, customer, seller_user, product):
    await _place(client, customer, _order((product, 1)))

    mine = await client.get("/api/orders/my-orders", headers=auth(customer))
    assert len(mine.json()["data"]) == 1

    incoming = await client.get("/api/orders/seller/orders", headers=auth(seller_user))
    assert len(incoming.json()["data"]) == 1

    rival = await create_user(db, "rival@market.dev", role="seller")
    resp = await client.get("/api/orders/seller/orders", headers=auth(rival))
    assert resp.json()["data"] == []


async def test_status_transitions(client, customer, seller_user, product):
    order_id = (await _place(client, customer, _order((product, 1)))).json()["data"]["id"]

    async def move(status):
        return await client.put(
            f"/api/orders/{order_id}/status", json={"status": status}, headers=auth(seller_user)
        )

    resp = await move("shipped")
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Cannot change order status from pending to shipped"

    assert (await move("confirmed")).json()["data"]["status"] == "confirmed"
    # repeating the current status is a no-op
    assert (await move("confirmed")).status_code == 200
    assert (await move("shipped")).json()["data"]["status"] == "shipped"
    assert (await move("cancelled")).status_code == 409
    assert (await move("delivered")).json()["data"]["status"] == "delivered"
    assert (await move("pending")).status_code == 409


async def test_status_update_requires_owning_seller(client, db, customer, product):
    order_id = (await _place(client, customer, _order((product, 1)))).json()["data"]["id"]
    rival = await create_user(db, "rival@market.dev", role="seller")

    resp = await client.put(
        f"/api/orders/{order_id}/status", json={"status": "confirmed"}, headers=auth(rival)
    )
    assert resp.status_code == 404

    resp = await client.put(
        f"/api/orders/{order_id}/status", json={"status": "confirmed"}, headers=auth(customer)
    )
    assert resp.status_code == 403


async def test_banned_seller_cannot_update_orders(client, db, customer, seller_user, seller, product):
    order_id = (await _place(client, customer, _order((product, 1)))).json()["data"]["id"]

    seller.status = "banned"
    await db.commit()

    resp = await client.put(
        f"/api/orders/{order_id}/status", json={"status": "confirmed"}, headers=auth(seller_user)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["reason"] == "banned"


async def test_products_of_suspended_sellers_cannot_be_ordered(client, db, customer, seller, product):
    seller.status = "suspended"
    await db.commit()

    resp = await _place(client, customer, _order((product, 1)))
    assert resp.status_code == 404
    assert resp.json()["detail"] == f"Product {product.id} not found"


async def test_stock_is_checked_again_when_decrementing(client, db, customer, seller, product):
    # each line fits the stock on its own, together they do not
    resp = await _place(client, customer, _order((product, 3), (product, 3)))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient stock for product Walnut Desk"

    await db.refresh(product)
    await db.refresh(seller)
    assert product.stock == 5
    assert seller.commission_owed == Decimal("0")
    assert await _order_count(db) == 0
