from decimal import Decimal

import pytest
from fastapi import HTTPException

from marketplace.models.bargain_models import BargainOffer
from marketplace.services.bargain_service import _load_offer, _transition

from tests.conftest import auth, create_product, create_user


async def _offer(client, customer, product, price):
    return await client.post(
        "/api/bargains/offer",
        json={"product_id": product.id, "offer_price": str(price)},
        headers=auth(customer),
    )


async def test_create_offer_is_pending(client, customer, product, seller):
    resp = await _offer(client, customer, product, 60)
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["status"] == "pending"
    assert Decimal(data["offer_price"]) == Decimal("60")
    assert data["seller_id"] == seller.id
    assert data["product_name"] == product.name
    assert data["counter_price"] is None


async def test_offer_must_be_below_list_price(client, customer, product):
    resp = await _offer(client, customer, product, 100)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Offer price must be less than product price"


async def test_offer_must_meet_minimum(client, customer, product):
    resp = await _offer(client, customer, product, 30)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Offer price must be at least $40.00"


async def test_non_positive_offer_fails_validation(client, customer, product):
    resp = await _offer(client, customer, product, 0)
    assert resp.status_code == 422


async def test_product_without_bargaining(client, db, customer, seller):
    fixed = await create_product(db, seller, name="Fixed Lamp", allow_bargain=False, min_bargain_price=None)
    resp = await _offer(client, customer, fixed, 50)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Bargaining not allowed for this product"


async def test_platform_toggle_disables_bargaining(client, customer, admin, product):
    resp = await client.put("/api/admin/settings", json={"allowBargain": False}, headers=auth(admin))
    assert resp.status_code == 200

    resp = await _offer(client, customer, product, 60)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Bargaining is disabled on this platform"


async def test_offer_on_unknown_or_inactive_product(client, db, customer, product):
    resp = await client.post(
        "/api/bargains/offer", json={"product_id": 9999, "offer_price": "60"}, headers=auth(customer)
    )
    assert resp.status_code == 404

    product.is_active = False
    await db.commit()
    resp = await _offer(client, customer, product, 60)
    assert resp.status_code == 404


async def test_sellers_cannot_make_offers(client, seller_user, product):
    resp = await _offer(client, seller_user, product, 60)
    assert resp.status_code == 403


async def test_negotiation_scenario(client, customer, seller_user, product):
    offer_id = (await _offer(client, customer, product, 60)).json()["data"]["id"]

    requests = await client.get("/api/bargains/seller/requests", headers=auth(seller_user))
    assert [o["id"] for o in requests.json()["data"]] == [offer_id]

    resp = await client.post(
        f"/api/bargains/{offer_id}/counter", json={"counter_price": "80"}, headers=auth(seller_user)
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "countered"
    assert Decimal(data["counter_price"]) == Decimal("80")

    # Seller cannot respond twice
    resp = await client.post(f"/api/bargains/{offer_id}/accept", headers=auth(seller_user))
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Offer already processed"

    mine = await client.get("/api/bargains/my-offers", headers=auth(customer))
    assert mine.json()["data"][0]["status"] == "countered"

    requests = await client.get("/api/bargains/seller/requests", headers=auth(seller_user))
    assert requests.json()["data"] == []


async def test_counter_bounds(client, customer, seller_user, product):
    offer_id = (await _offer(client, customer, product, 60)).json()["data"]["id"]

    for price, message in (
        ("60", "Counter price must be higher than offer price"),
        ("100", "Counter price must be less than product price"),
    ):
        resp = await client.post(
            f"/api/bargains/{offer_id}/counter", json={"counter_price": price}, headers=auth(seller_user)
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == message


async def test_seller_accept_and_reject(client, customer, seller_user, product):
    first = (await _offer(client, customer, product, 60)).json()["data"]["id"]
    second = (await _offer(client, customer, product, 70)).json()["data"]["id"]

    resp = await client.post(f"/api/bargains/{first}/accept", headers=auth(seller_user))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "accepted"

    resp = await client.post(f"/api/bargains/{second}/reject", headers=auth(seller_user))
    assert resp.json()["data"]["status"] == "rejected"

    resp = await client.post(f"/api/bargains/{second}/accept", headers=auth(seller_user))
    assert resp.status_code == 409


async def test_other_seller_cannot_respond(client, db, customer, product):
    rival = await create_user(db, "rival@market.dev", role="seller")
    offer_id = (await _offer(client, customer, product, 60)).json()["data"]["id"]

    resp = await client.post(f"/api/bargains/{offer_id}/accept", headers=auth(rival))
    assert resp.status_code == 404


async def test_buyer_accepts_counter_and_orders_at_counter_price(client, customer, seller_user, product):
    offer_id = (await _offer(client, customer, product, 60)).json()["data"]["id"]
    await client.post(f"/api/bargains/{offer_id}/counter", json={"counter_price": "80"}, headers=auth(seller_user))

    resp = await client.post(f"/api/bargains/{offer_id}/counter/accept", headers=auth(customer))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "accepted"

    resp = await client.post(f"/api/bargains/{offer_id}/counter/accept", headers=auth(customer))
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Offer has no open counter"

    order = await client.post(
        "/api/orders",
        json={
            "items": [{"product_id": product.id, "quantity": 1, "price": "100", "bargain_offer_id": offer_id}],
            "payment_method": "cod",
        },
        headers=auth(customer),
    )
    assert order.status_code == 201
    assert Decimal(order.json()["data"]["total_amount"]) == Decimal("80")


async def test_buyer_rejects_counter(client, customer, other_customer, seller_user, product):
    offer_id = (await _offer(client, customer, product, 60)).json()["data"]["id"]

    resp = await client.post(f"/api/bargains/{offer_id}/counter/reject", headers=auth(customer))
    assert resp.status_code == 409

    await client.post(f"/api/bargains/{offer_id}/counter", json={"counter_price": "90"}, headers=auth(seller_user))

    resp = await client.post(f"/api/bargains/{offer_id}/counter/reject", headers=auth(other_customer))
    assert resp.status_code == 404

    resp = await client.post(f"/api/bargains/{offer_id}/counter/reject", headers=auth(customer))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "rejected"


async def test_suspended_seller_cannot_respond(client, db, customer, admin, seller_user, seller, product):
    offer_id = (await _offer(client, customer, product, 60)).json()["data"]["id"]

    resp = await client.put(
        f"/api/admin/sellers/{seller.id}/status", json={"status": "suspended"}, headers=auth(admin)
    )
    assert resp.status_code == 200

    resp = await client.post(f"/api/bargains/{offer_id}/accept", headers=auth(seller_user))
    assert resp.status_code == 403
    assert resp.json()["detail"] == {
        "error": "Your seller account is suspended or banned",
        "reason": "suspended",
    }

    offer = await db.get(BargainOffer, offer_id, populate_existing=True)
    assert offer.status == "pending"

    # Hidden products cannot receive new offers either
    resp = await _offer(client, customer, product, 65)
    assert resp.status_code == 404


async def test_stale_transition_loses_to_earlier_response(client, db, customer, seller_user, seller, product):
    offer_id = (await _offer(client, customer, product, 60)).json()["data"]["id"]
    stale = await _load_offer(db, offer_id)
    assert stale.status == "pending"

    # another request accepts first
    resp = await client.post(f"/api/bargains/{offer_id}/accept", headers=auth(seller_user))
    assert resp.status_code == 200

    with pytest.raises(HTTPException) as exc:
        await _transition(
            db, stale, BargainOffer.seller_id == seller.id, "pending",
            {"status": "countered", "counter_price": Decimal("80")},
        )
    assert exc.value.status_code == 409
    assert exc.value.detail == "Offer already processed"
    await db.rollback()

    offer = await _load_offer(db, offer_id)
    assert offer.status == "accepted"
    assert offer.counter_price is None
