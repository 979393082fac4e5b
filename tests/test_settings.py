from marketplace.services.settings_service import DEFAULT_SETTINGS, get_commission_rate, seed_default_settings

from tests.conftest import auth


async def test_public_settings_fall_back_to_defaults(client):
    resp = await client.get("/api/settings")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["commissionRate"] == 10
    assert data["allowBargain"] is True
    assert data["siteName"] == DEFAULT_SETTINGS["siteName"]


async def test_admin_updates_settings(client, admin):
    resp = await client.put(
        "/api/admin/settings", json={"siteName": "Craft Bazaar", "commissionRate": 12}, headers=auth(admin)
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["siteName"] == "Craft Bazaar"

    public = (await client.get("/api/settings")).json()["data"]
    assert public["siteName"] == "Craft Bazaar"
    assert public["commissionRate"] == 12


async def test_invalid_settings_rejected(client, admin):
    for body in ({}, {"commissionRate": 150}, {"commissionRate": "ten"}, {"allowBargain": "yes"}):
        resp = await client.put("/api/admin/settings", json=body, headers=auth(admin))
        assert resp.status_code == 400, body


async def test_only_admins_change_settings(client, seller_user):
    resp = await client.put("/api/admin/settings", json={"siteName": "Mine"}, headers=auth(seller_user))
    assert resp.status_code == 403


async def test_seed_is_idempotent(db):
    assert await seed_default_settings(db) == len(DEFAULT_SETTINGS)
    assert await seed_default_settings(db) == 0
    assert await get_commission_rate(db) == 10
