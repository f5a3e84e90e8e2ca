import pytest


async def _create_color(client, admin_headers, options=("red", "green")) -> str:
    response = await client.post(
        "/api/attributes",
        json={"name": "Color", "options": list(options)},
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()["data"]["id"]


@pytest.mark.asyncio
async def test_create_product_and_read_back_with_attribute_join(client, admin_headers) -> None:
    color_id = await _create_color(client, admin_headers)

    response = await client.post(
        "/api/products",
        json={
            "name": "Apple",
            "title": "Fresh Apple",
            "price": 1.5,
            "phoneNumber": "+15551234567",
            "attributes": [{"attributeId": color_id, "selectedOptions": ["red"]}],
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    product_id = body["data"]["id"]

    fetched = await client.get(f"/api/products/{product_id}")
    assert fetched.status_code == 200
    data = fetched.json()["data"]
    assert data["status"] == "active"
    assert data["phoneNumber"] == "+15551234567"
    assert data["attributes"][0]["selectedOptions"] == ["red"]
    assert data["attributes"][0]["attribute"]["name"] == "Color"


@pytest.mark.asyncio
async def test_create_without_token_is_unauthorized(client) -> None:
    response = await client.post("/api/products", json={"name": "Apple", "title": "Fresh Apple", "price": 1})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Not authorized to access this route"}


@pytest.mark.asyncio
async def test_create_with_garbage_token_is_unauthorized(client) -> None:
    response = await client.post(
        "/api/products",
        json={"name": "Apple", "title": "Fresh Apple", "price": 1},
        headers={"Authorization": "Bearer garbage"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_user_role_cannot_create_products(client, user_headers) -> None:
    response = await client.post(
        "/api/products",
        json={"name": "Apple", "title": "Fresh Apple", "price": 1},
        headers=user_headers,
    )

    assert response.status_code == 401
    assert response.json()["message"] == "User role user is not authorized to access this route"


@pytest.mark.asyncio
async def test_invalid_option_is_rejected_and_nothing_is_stored(client, admin_headers) -> None:
    color_id = await _create_color(client, admin_headers)

    response = await client.post(
        "/api/products",
        json={
            "name": "Grape",
            "title": "Purple Grape",
            "price": 2,
            "attributes": [{"attributeId": color_id, "selectedOptions": ["purple"]}],
        },
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "purple" in response.json()["message"]

    listing = await client.get("/api/products")
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_unknown_attribute_reference_is_rejected(client, admin_headers) -> None:
    response = await client.post(
        "/api/products",
        json={
            "name": "Grape",
            "title": "Purple Grape",
            "price": 2,
            "attributes": [{"attributeId": "not-an-id", "selectedOptions": ["purple"]}],
        },
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Attribute with ID not-an-id not found"


@pytest.mark.asyncio
async def test_body_validation_errors_are_listed_per_field(client, admin_headers) -> None:
    response = await client.post(
        "/api/products",
        json={"name": "", "title": "Fresh Apple", "price": -1},
        headers=admin_headers,
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    fields = {error["field"] for error in body["errors"]}
    assert {"name", "price"} <= fields


@pytest.mark.asyncio
async def test_listing_sorts_and_paginates(client, admin_headers) -> None:
    for name, price in [("Apple", 3.0), ("Banana", 0.5), ("Cherry", 6.0), ("Durian", 12.0), ("Elderberry", 1.25)]:
        response = await client.post(
            "/api/products",
            json={"name": name, "title": f"Fresh {name}", "price": price},
            headers=admin_headers,
        )
        assert response.status_code == 201

    response = await client.get("/api/products", params={"sortBy": "price-low", "limit": "2"})

    assert response.status_code == 200
    body = response.json()
    assert [p["name"] for p in body["data"]] == ["Banana", "Elderberry"]
    assert body["count"] == 2
    assert body["total"] == 5
    assert body["page"] == 1
    assert body["pages"] == 3

    last = (await client.get("/api/products", params={"sortBy": "price-low", "limit": "2", "page": "3"})).json()
    assert [p["name"] for p in last["data"]] == ["Durian"]


@pytest.mark.asyncio
async def test_listing_filters_by_attribute_option(client, admin_headers) -> None:
    color_id = await _create_color(client, admin_headers)
    for name, option in [("Apple", "red"), ("Lime", "green")]:
        await client.post(
            "/api/products",
            json={
                "name": name,
                "title": f"Fresh {name}",
                "price": 1,
                "attributes": [{"attributeId": color_id, "selectedOptions": [option]}],
            },
            headers=admin_headers,
        )

    response = await client.get("/api/products", params={"attributes": '["green"]'})

    assert [p["name"] for p in response.json()["data"]] == ["Lime"]


@pytest.mark.asyncio
async def test_malformed_price_filter_is_bad_request(client) -> None:
    response = await client.get("/api/products", params={"minPrice": "cheap"})

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_unknown_and_malformed_ids_are_not_found(client) -> None:
    missing = await client.get("/api/products/7b0f3f4e-1d1c-4c59-9a55-0a6f1d1f2b3c")
    malformed = await client.get("/api/products/not-an-id")

    assert missing.status_code == 404
    assert malformed.status_code == 404
    assert malformed.json() == {"success": False, "message": "Product not found"}


@pytest.mark.asyncio
async def test_update_changes_only_sent_fields(client, admin_headers) -> None:
    created = await client.post(
        "/api/products",
        json={"name": "Apple", "title": "Fresh Apple", "price": 1.5, "address": "Orchard Lane 1"},
        headers=admin_headers,
    )
    product_id = created.json()["data"]["id"]

    response = await client.put(
        f"/api/products/{product_id}",
        json={"price": 2.25, "createdAt": "2000-01-01T00:00:00Z"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["price"] == 2.25
    assert data["name"] == "Apple"
    assert data["address"] == "Orchard Lane 1"
    assert data["createdAt"] == created.json()["data"]["createdAt"]


@pytest.mark.asyncio
async def test_update_rejects_null_for_required_field(client, admin_headers) -> None:
    created = await client.post(
        "/api/products",
        json={"name": "Apple", "title": "Fresh Apple", "price": 1.5},
        headers=admin_headers,
    )
    product_id = created.json()["data"]["id"]

    response = await client.put(f"/api/products/{product_id}", json={"name": None}, headers=admin_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_product(client, admin_headers) -> None:
    created = await client.post(
        "/api/products",
        json={"name": "Apple", "title": "Fresh Apple", "price": 1.5},
        headers=admin_headers,
    )
    product_id = created.json()["data"]["id"]

    response = await client.delete(f"/api/products/{product_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Product deleted successfully"}

    assert (await client.get(f"/api/products/{product_id}")).status_code == 404


@pytest.mark.asyncio
async def test_unsupported_method_is_405(client) -> None:
    response = await client.patch("/api/products", json={})

    assert response.status_code == 405
    assert response.json() == {"success": False, "message": "Method not allowed"}


@pytest.mark.asyncio
async def test_options_request_gets_empty_ok(client) -> None:
    response = await client.options("/api/products", headers={"Origin": "http://shop.example.com"})

    assert response.status_code == 200
    assert response.content == b""
    assert "Access-Control-Allow-Methods" in response.headers


@pytest.mark.asyncio
async def test_unknown_route_is_404(client) -> None:
    response = await client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_auth_is_checked_before_the_body(client, user_headers) -> None:
    invalid = await client.post("/api/products", json={"price": -1, "name": ""})
    malformed = await client.post(
        "/api/products",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    malformed_as_user = await client.post(
        "/api/products",
        content=b"{not json",
        headers={"Content-Type": "application/json", **user_headers},
    )

    assert invalid.status_code == 401
    assert malformed.status_code == 401
    assert malformed_as_user.status_code == 401
    assert malformed.json() == {"success": False, "message": "Not authorized to access this route"}


@pytest.mark.asyncio
async def test_malformed_json_from_admin_reports_the_body(client, admin_headers) -> None:
    response = await client.post(
        "/api/products",
        content=b"{not json",
        headers={"Content-Type": "application/json", **admin_headers},
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "body"
    assert response.json()["errors"][0]["message"] == "JSON decode error"


@pytest.mark.asyncio
async def test_update_without_token_ignores_body(client, admin_headers) -> None:
    created = await client.post(
        "/api/products",
        json={"name": "Apple", "title": "Fresh Apple", "price": 1.5},
        headers=admin_headers,
    )
    product_id = created.json()["data"]["id"]

    response = await client.put(
        f"/api/products/{product_id}",
        content=b"[",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 401
