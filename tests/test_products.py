from decimal import Decimal

from tests.conftest import auth, create_product, create_user

NEW_PRODUCT = {
    "name": "Oak Stool",
    "description": "Three legged oak stool",
    "price": "55.00",
    "category": "furniture",
    "stock": 3,
    "allow_bargain": True,
    "min_bargain_price": "30.00",
}


async def test_seller_creates_and_lists_product(client, seller_user, seller):
    resp = await client.post("/api/products", json=NEW_PRODUCT, headers=auth(seller_user))
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["seller_id"] == seller.id
    assert data["store_name"] == seller.store_name
    assert Decimal(data["price"]) == Decimal("55")

    mine = await client.get("/api/products/seller/my-products", headers=auth(seller_user))
    assert [p["name"] for p in mine.json()["data"]] == ["Oak Stool"]


async def test_min_bargain_price_must_be_below_price(client, seller_user):
    body = {**NEW_PRODUCT, "min_bargain_price": "55.00"}
    resp = await client.post("/api/products", json=body, headers=auth(seller_user))
    assert resp.status_code == 422


async def test_customers_cannot_create_products(client, customer):
    resp = await client.post("/api/products", json=NEW_PRODUCT, headers=auth(customer))
    assert resp.status_code == 403


async def test_public_listing_filters(client, db, seller, product):
    await create_product(
        db, seller, name="Linen Throw", description="Stonewashed linen blanket",
        category="textiles", price=Decimal("25.00"), min_bargain_price=None,
    )
    await create_product(db, seller, name="Hidden Chair", is_active=False)

    resp = await client.get("/api/products")
    assert {p["name"] for p in resp.json()["data"]} == {"Walnut Desk", "Linen Throw"}

    resp = await client.get("/api/products", params={"category": "textiles"})
    assert [p["name"] for p in resp.json()["data"]] == ["Linen Throw"]

    resp = await client.get("/api/products", params={"search": "walnut"})
    assert [p["name"] for p in resp.json()["data"]] == ["Walnut Desk"]


async def test_suspended_seller_products_are_hidden(client, db, seller, product):
    seller.status = "suspended"
    await db.commit()

    assert (await client.get("/api/products")).json()["data"] == []
    assert (await client.get(f"/api/products/{product.id}")).status_code == 404


async def test_update_product(client, seller_user, product):
    resp = await client.put(
        f"/api/products/{product.id}", json={"price": "120.00", "stock": 9}, headers=auth(seller_user)
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert Decimal(data["price"]) == Decimal("120")
    assert data["stock"] == 9

    resp = await client.put(
        f"/api/products/{product.id}", json={"min_bargain_price": "130.00"}, headers=auth(seller_user)
    )
    assert resp.status_code == 400

    resp = await client.put(f"/api/products/{product.id}", json={}, headers=auth(seller_user))
    assert resp.status_code == 400


async def test_sellers_only_touch_their_own_products(client, db, product):
    rival = await create_user(db, "rival@market.dev", role="seller")

    resp = await client.put(f"/api/products/{product.id}", json={"stock": 0}, headers=auth(rival))
    assert resp.status_code == 404

    resp = await client.delete(f"/api/products/{product.id}", headers=auth(rival))
    assert resp.status_code == 404


async def test_deactivate_is_soft(client, db, seller_user, product):
    resp = await client.delete(f"/api/products/{product.id}", headers=auth(seller_user))
    assert resp.status_code == 200

    assert (await client.get(f"/api/products/{product.id}")).status_code == 404

    mine = await client.get("/api/products/seller/my-products", headers=auth(seller_user))
    assert mine.json()["data"][0]["is_active"] is False


async def test_seller_profile_and_stats(client, customer, seller_user, product):
    resp = await client.put("/api/sellers/profile", json={"store_description": "Small batch furniture"}, headers=auth(seller_user))
    assert resp.status_code == 200
    assert resp.json()["data"]["store_description"] == "Small batch furniture"

    await client.post(
        "/api/orders",
        json={"items": [{"product_id": product.id, "quantity": 1, "price": "100.00"}], "payment_method": "online"},
        headers=auth(customer),
    )

    stats = (await client.get("/api/sellers/stats", headers=auth(seller_user))).json()["data"]
    assert stats["products"] == 1
    assert stats["orders"] == 1
    assert Decimal(stats["revenue"]) == Decimal("100")
    assert Decimal(stats["commission_owed"]) == Decimal("10")
