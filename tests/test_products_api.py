"""Tests for the product catalog endpoints."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from catalog_api.config import settings
from catalog_api.services.cache.catalog_cache import ALL_PRODUCTS_KEY


@pytest.mark.asyncio
async def test_create_product_returns_profile(client, product_payload):
    response = await client.post("/products", json=product_payload())

    assert response.status_code == 201
    data = response.json()
    assert response.headers["location"] == f"/products/{data['id']}"
    assert data["name"] == "Merino Crew Sweater"
    assert data["category_display_name"] == "Clothing & Fashion"
    assert Decimal(data["price"]) == Decimal("79.90")
    assert data["formatted_price"] == "$79.90"
    assert data["brand_initials"] == "NA"
    assert data["product_age"] == "3 months old"
    assert data["availability_status"] == "In Stock"
    assert data["is_available"] is True
    assert data["image_url"] == "https://cdn.example.com/sweater.jpg"


@pytest.mark.asyncio
@pytest.mark.parametrize("price", ["0", "10000"])
@pytest.mark.parametrize("category", ["Clothing", "Books", "Home", "Electronics"])
async def test_price_out_of_range_is_rejected(client, product_payload, price, category):
    response = await client.post(
        "/products",
        json=product_payload(category=category, price=price, name="Smart Lamp Stand"),
    )

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert any(e["field"] == "price" for e in errors)


@pytest.mark.asyncio
@pytest.mark.parametrize(("price", "stock"), [("0.004", 12), ("9999.999", 5)])
async def test_sub_cent_price_is_rounded_before_range_check(
    client, product_payload, price, stock
):
    response = await client.post(
        "/products", json=product_payload(price=price, stock_quantity=stock)
    )

    assert response.status_code == 400
    assert any(e["field"] == "price" for e in response.json()["errors"])
    assert (await client.get("/products")).json() == []


@pytest.mark.asyncio
async def test_price_is_stored_to_the_cent(client, product_payload):
    response = await client.post("/products", json=product_payload(price="19.999"))

    assert response.status_code == 201
    assert Decimal(response.json()["price"]) == Decimal("20.00")
    assert response.json()["formatted_price"] == "$20.00"


@pytest.mark.asyncio
async def test_field_violations_are_all_reported(client):
    response = await client.post("/products", json={"price": "10", "stock_quantity": -1})

    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert {"name", "brand", "sku", "category", "release_date", "stock_quantity"} <= fields


@pytest.mark.asyncio
async def test_unknown_category_is_rejected(client, product_payload):
    response = await client.post("/products", json=product_payload(category="Toys"))

    assert response.status_code == 400
    assert {"field": "category", "message": "Invalid category value."} in response.json()["errors"]


@pytest.mark.asyncio
async def test_category_is_case_insensitive(client, product_payload):
    response = await client.post("/products", json=product_payload(category="clothing"))

    assert response.status_code == 201
    assert response.json()["category_display_name"] == "Clothing & Fashion"


@pytest.mark.asyncio
async def test_home_product_is_discounted_and_hides_image(client, product_payload):
    response = await client.post(
        "/products",
        json=product_payload(
            name="Oak Side Table",
            category="Home",
            price="100.00",
            stock_quantity=4,
        ),
    )

    assert response.status_code == 201
    data = response.json()
    assert Decimal(data["price"]) == Decimal("90")
    assert data["formatted_price"] == "$90.00"
    assert data["image_url"] is None
    assert data["category_display_name"] == "Home & Garden"
    assert data["availability_status"] == "Limited Stock"


@pytest.mark.asyncio
async def test_cheap_electronics_are_rejected(client, product_payload):
    response = await client.post(
        "/products",
        json=product_payload(name="Wireless Mouse", category="Electronics", price="49.99"),
    )

    assert response.status_code == 400
    messages = [e["message"] for e in response.json()["errors"]]
    assert "Electronics products must have a minimum price of $50.00." in messages


@pytest.mark.asyncio
async def test_electronics_need_technology_keywords(client, product_payload):
    response = await client.post(
        "/products",
        json=product_payload(name="Velvet Cushion", category="Electronics", price="60"),
    )

    assert response.status_code == 400
    assert any(e["field"] == "name" for e in response.json()["errors"])


@pytest.mark.asyncio
async def test_old_electronics_are_rejected(client, product_payload, now):
    response = await client.post(
        "/products",
        json=product_payload(
            name="Gaming Keyboard",
            category="Electronics",
            price="120",
            stock_quantity=5,
            release_date=(now - timedelta(days=6 * 365)).isoformat(),
        ),
    )

    assert response.status_code == 400
    messages = [e["message"] for e in response.json()["errors"]]
    assert "Electronics products must be released within the last 5 years." in messages


@pytest.mark.asyncio
async def test_expensive_product_with_large_stock_is_rejected(client, product_payload):
    response = await client.post(
        "/products", json=product_payload(price="150", stock_quantity=21)
    )

    assert response.status_code == 400
    assert response.json()["errors"] == [
        {
            "field": "general",
            "message": "Expensive products (>$100) must have limited stock (≤20 units).",
        }
    ]


@pytest.mark.asyncio
async def test_high_value_rule_failure_hides_reasons(client, product_payload):
    # passes the >100 cross-field rule (stock <= 20) but not the >500 business rule
    response = await client.post(
        "/products", json=product_payload(price="800", stock_quantity=15)
    )

    assert response.status_code == 400
    assert response.json() == {"message": "One or more business rules failed."}


@pytest.mark.asyncio
async def test_duplicate_sku_conflicts(client, product_payload):
    first = await client.post("/products", json=product_payload())
    second = await client.post(
        "/products", json=product_payload(name="Merino Crew Cardigan")
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {"message": "A product with the same SKU already exists."}


@pytest.mark.asyncio
async def test_duplicate_name_for_brand_conflicts(client, product_payload):
    await client.post("/products", json=product_payload())
    response = await client.post("/products", json=product_payload(sku="NW-SWT-002"))

    assert response.status_code == 409
    assert response.json() == {
        "message": "A product with the same name already exists for this brand."
    }


@pytest.mark.asyncio
async def test_same_name_for_other_brand_is_allowed(client, product_payload):
    await client.post("/products", json=product_payload())
    response = await client.post(
        "/products",
        json=product_payload(sku="OTHER-001", brand="Southwind Apparel"),
    )

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_list_reflects_newly_created_product(client, product_payload, redis_client):
    await client.post("/products", json=product_payload())
    first = await client.get("/products")
    assert [p["sku"] for p in first.json()] == ["NW-SWT-001"]
    assert await redis_client.exists(f"{settings.CACHE_KEY_PREFIX}{ALL_PRODUCTS_KEY}")

    await client.post(
        "/products", json=product_payload(name="Linen Shirt", sku="NW-SHT-001")
    )
    second = await client.get("/products")

    assert second.status_code == 200
    assert {p["sku"] for p in second.json()} == {"NW-SWT-001", "NW-SHT-001"}


@pytest.mark.asyncio
async def test_get_product_by_id(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()

    response = await client.get(f"/products/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


@pytest.mark.asyncio
async def test_get_missing_product_returns_404(client):
    product_id = uuid.uuid4()
    response = await client.get(f"/products/{product_id}")

    assert response.status_code == 404
    assert response.json() == {"message": f"Product with id {product_id} not found."}


@pytest.mark.asyncio
async def test_patch_updates_fields_and_revalidates(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()

    response = await client.patch(
        f"/products/{created['id']}", json={"stock_quantity": 1, "price": "85"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["availability_status"] == "Last Item"
    assert data["formatted_price"] == "$85.00"
    assert data["name"] == created["name"]


@pytest.mark.asyncio
async def test_patch_can_mark_product_unavailable(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()

    response = await client.patch(f"/products/{created['id']}", json={"is_available": False})

    assert response.status_code == 200
    assert response.json()["availability_status"] == "Out of Stock"


@pytest.mark.asyncio
async def test_patch_rejects_invalid_merge(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()

    response = await client.patch(f"/products/{created['id']}", json={"price": "0"})

    assert response.status_code == 400
    assert any(e["field"] == "price" for e in response.json()["errors"])


@pytest.mark.asyncio
async def test_patch_requires_a_field(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()

    response = await client.patch(f"/products/{created['id']}", json={})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "general"


@pytest.mark.asyncio
async def test_patch_to_taken_sku_conflicts(client, product_payload):
    await client.post("/products", json=product_payload())
    other = (
        await client.post(
            "/products", json=product_payload(name="Linen Shirt", sku="NW-SHT-001")
        )
    ).json()

    response = await client.patch(f"/products/{other['id']}", json={"sku": "NW-SWT-001"})

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_patch_keeping_own_sku_is_allowed(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()

    response = await client.patch(
        f"/products/{created['id']}", json={"sku": "NW-SWT-001", "stock_quantity": 3}
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_delete_product(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()
    await client.get("/products")

    response = await client.delete(f"/products/{created['id']}")

    assert response.status_code == 204
    assert (await client.get(f"/products/{created['id']}")).status_code == 404
    assert (await client.get("/products")).json() == []


@pytest.mark.asyncio
async def test_delete_missing_product_returns_404(client):
    response = await client.delete(f"/products/{uuid.uuid4()}")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_patch_rejects_price_that_rounds_to_zero(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()

    response = await client.patch(f"/products/{created['id']}", json={"price": "0.001"})

    assert response.status_code == 400
    assert any(e["field"] == "price" for e in response.json()["errors"])


@pytest.mark.asyncio
async def test_patch_blank_image_url_clears_it(client, product_payload):
    created = (await client.post("/products", json=product_payload())).json()

    response = await client.patch(f"/products/{created['id']}", json={"image_url": "   "})

    assert response.status_code == 200
    assert response.json()["image_url"] is None
    fetched = (await client.get(f"/products/{created['id']}")).json()
    assert fetched["image_url"] is None


@pytest.mark.asyncio
async def test_sku_surrounding_whitespace_is_trimmed(client, product_payload):
    response = await client.post("/products", json=product_payload(sku="  NW-SWT-001 "))

    assert response.status_code == 201
    assert response.json()["sku"] == "NW-SWT-001"
