"""Tests for product CRUD and the write-role gate."""

import pytest

from backoffice.models.catalog import Product


@pytest.mark.asyncio
async def test_create_then_read_product(async_client, admin_headers):
    resp = await async_client.post(
        "/api/products",
        json={
            "name": "  Soap  ",
            "barcode": "3760001",
            "purchasePrice": 1.25,
            "price": 3.5,
            "productType": "hygiene",
            "quantity": 12,
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201
    product_id = resp.json()["id_product"]

    resp = await async_client.get(f"/api/products/{product_id}", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Soap"
    assert body["purchasePrice"] == 1.25
    assert body["productType"] == "hygiene"
    assert body["quantity"] == 12
    assert body["reference"] == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"name": "   "}, {"price": 3}])
async def test_create_without_name_is_bad_request(async_client, admin_headers, payload):
    resp = await async_client.post("/api/products", json=payload, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Missing name"


@pytest.mark.asyncio
async def test_list_search_and_paging(async_client, cashier_headers, add_product):
    for name in ("Soap", "Shampoo", "Towel"):
        await add_product(name)

    resp = await async_client.get("/api/products", params={"q": "S"}, headers=cashier_headers)
    assert resp.json()["total"] == 2

    resp = await async_client.get("/api/products", params={"limit": "1"}, headers=cashier_headers)
    assert resp.json()["total"] == 3
    assert len(resp.json()["items"]) == 1


@pytest.mark.asyncio
async def test_patch_updates_only_sent_fields(async_client, admin_headers, add_product, db_session):
    product_id = (await add_product("Soap", purchase_price=1, price=3)).id_product

    resp = await async_client.patch(
        f"/api/products/{product_id}", json={"price": 4.5}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}

    db_session.expire_all()
    stored = await db_session.get(Product, product_id)
    assert stored.price == 4.5
    assert stored.purchase_price == 1
    assert stored.name == "Soap"
    assert stored.is_synced is False


@pytest.mark.asyncio
async def test_patch_without_fields_is_bad_request(async_client, admin_headers, add_product):
    product = await add_product("Soap")
    resp = await async_client.patch(
        f"/api/products/{product.id_product}", json={}, headers=admin_headers
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "No fields to update"


@pytest.mark.asyncio
async def test_unknown_product_is_not_found(async_client, admin_headers):
    assert (await async_client.get("/api/products/999", headers=admin_headers)).status_code == 404
    resp = await async_client.patch("/api/products/999", json={"price": 1}, headers=admin_headers)
    assert resp.status_code == 404
    assert (await async_client.delete("/api/products/999", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_delete_product(async_client, admin_headers, add_product):
    product = await add_product("Soap")
    resp = await async_client.delete(f"/api/products/{product.id_product}", headers=admin_headers)
    assert resp.status_code == 200
    resp = await async_client.get(f"/api/products/{product.id_product}", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_product_in_an_offer_is_conflict(
    async_client, admin_headers, add_product, add_offer
):
    product = await add_product("Soap")
    await add_offer("Bundle", [product.id_product])

    resp = await async_client.delete(f"/api/products/{product.id_product}", headers=admin_headers)
    assert resp.status_code == 409
    body = resp.json()
    assert body["message"] == "Cannot delete product (in use)"
    assert body["success"] is False
    assert "hint" in body

    resp = await async_client.get(f"/api/products/{product.id_product}", headers=admin_headers)
    assert resp.status_code == 200


# ── Write-role gate ─────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_cashier_cannot_write(async_client, cashier_headers, add_product):
    product = await add_product("Soap")

    resp = await async_client.post("/api/products", json={"name": "X"}, headers=cashier_headers)
    assert resp.status_code == 403
    assert resp.json() == {"message": "Forbidden", "success": False}

    resp = await async_client.patch(
        f"/api/products/{product.id_product}", json={"price": 1}, headers=cashier_headers
    )
    assert resp.status_code == 403
    resp = await async_client.delete(
        f"/api/products/{product.id_product}", headers=cashier_headers
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_manager_role_from_csv_can_write(async_client, add_user, headers_for):
    manager = await add_user("mgr", roles="cashier, Manager")
    resp = await async_client.post(
        "/api/products", json={"name": "Soap"}, headers=headers_for(manager)
    )
    assert resp.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize("settings", [{"ENFORCE_ROLES": False}], indirect=True)
async def test_unenforced_roles_let_any_user_write(async_client, cashier_headers):
    resp = await async_client.post("/api/products", json={"name": "Soap"}, headers=cashier_headers)
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_write_without_token_is_unauthorized(async_client):
    resp = await async_client.post("/api/products", json={"name": "Soap"})
    assert resp.status_code == 401
