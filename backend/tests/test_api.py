"""
Catalog Backend: HTTP API Tests
================================

What:  End-to-end tests through the FastAPI app: multipart parsing, the
       response envelope, error mapping and the main catalog flows.
How:   HTTPX AsyncClient over ASGITransport, in-memory SQLite, Cloudinary
       SDK patched (fake_cloudinary).
"""

from unittest.mock import patch
from uuid import uuid4

import cloudinary.exceptions
import pytest

PNG = "image/png"


async def _create_category(client, name="Shoes", files=None):
    response = await client.post("/categories", data={"name": name}, files=files)
    assert response.status_code == 200, response.text
    listing = await client.get("/categories")
    return next(item for item in listing.json()["data"] if item["name"] == name)


async def _create_sub_category(client, category_id, name="Sneakers"):
    response = await client.post("/subCategories", json={"name": name, "categoryId": category_id})
    assert response.status_code == 200, response.text
    listing = await client.get("/subCategories")
    return next(item for item in listing.json()["data"] if item["name"] == name)


async def _create_product(client, category_id, sub_category_id, files=None, **fields):
    data = {
        "name": "Runner",
        "description": "Lightweight running shoe",
        "quantity": "12",
        "price": "89.90",
        "offerPrice": "79.90",
        "proCategoryId": category_id,
        "proSubCategoryId": sub_category_id,
    }
    data.update(fields)
    response = await client.post("/products", data=data, files=files)
    assert response.status_code == 200, response.text
    listing = await client.get("/products")
    return next(item for item in listing.json()["data"] if item["name"] == data["name"])


class TestHealthAndEnvelope:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        with patch("cloudinary.api.ping", return_value={"status": "ok"}):
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["media"] == "available"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/categories", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, test_client):
        response = await test_client.get("/nothing-here")
        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_malformed_id_is_a_400(self, test_client):
        response = await test_client.get("/categories/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestCategoriesApi:

    @pytest.mark.asyncio
    async def test_create_without_file_stores_no_url(self, test_client, fake_cloudinary):
        response = await test_client.post("/categories", data={"name": "Shoes"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Category created successfully.",
            "data": None,
        }
        listing = (await test_client.get("/categories")).json()
        assert listing["success"] is True
        assert [(c["name"], c["image"]) for c in listing["data"]] == [("Shoes", "no_url")]
        fake_cloudinary.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_with_file_stores_url(self, test_client, fake_cloudinary, sample_image_bytes):
        category = await _create_category(
            test_client, "Bags", files={"img": ("bag.png", sample_image_bytes, PNG)}
        )

        assert category["image"].startswith("https://res.cloudinary.com/")
        detail = (await test_client.get(f"/categories/{category['id']}")).json()
        assert detail["message"] == "Category retrieved successfully."
        assert detail["data"]["name"] == "Bags"
        assert "createdAt" in detail["data"]

    @pytest.mark.asyncio
    async def test_missing_name_is_rejected(self, test_client, fake_cloudinary, sample_image_bytes):
        response = await test_client.post(
            "/categories", files={"img": ("bag.png", sample_image_bytes, PNG)}
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Name is required."}
        fake_cloudinary.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_file_type_is_rejected(self, test_client, fake_cloudinary):
        response = await test_client.post(
            "/categories",
            data={"name": "Gifs"},
            files={"img": ("anim.gif", b"GIF89a....", "image/gif")},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only .jpeg, .jpg and .png files are allowed."

    @pytest.mark.asyncio
    async def test_unknown_category_is_404(self, test_client):
        response = await test_client.get(f"/categories/{uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Category not found."}

    @pytest.mark.asyncio
    async def test_update_keeps_image_when_upload_fails(self, test_client, fake_cloudinary, sample_image_bytes):
        category = await _create_category(
            test_client, "Bags", files={"img": ("bag.png", sample_image_bytes, PNG)}
        )
        fake_cloudinary.upload.side_effect = cloudinary.exceptions.Error("provider down")

        response = await test_client.put(
            f"/categories/{category['id']}",
            data={"name": "Handbags"},
            files={"img": ("new.png", sample_image_bytes, PNG)},
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "File upload failed."}
        stored = (await test_client.get(f"/categories/{category['id']}")).json()["data"]
        assert stored["name"] == "Bags"
        assert stored["image"] == category["image"]

    @pytest.mark.asyncio
    async def test_update_name_only(self, test_client, fake_cloudinary):
        category = await _create_category(test_client, "Shoes")

        response = await test_client.put(f"/categories/{category['id']}", data={"name": "Footwear"})

        assert response.status_code == 200
        assert response.json()["message"] == "Category updated successfully."
        stored = (await test_client.get(f"/categories/{category['id']}")).json()["data"]
        assert stored == {**category, "name": "Footwear", "updatedAt": stored["updatedAt"]}

    @pytest.mark.asyncio
    async def test_update_unknown_category_is_404(self, test_client, fake_cloudinary, sample_image_bytes):
        response = await test_client.put(
            f"/categories/{uuid4()}",
            data={"name": "Ghost"},
            files={"img": ("ghost.png", sample_image_bytes, PNG)},
        )

        assert response.status_code == 404
        fake_cloudinary.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_guarded_delete_keeps_category(self, test_client, fake_cloudinary):
        category = await _create_category(test_client, "Shoes")
        await _create_sub_category(test_client, category["id"])

        response = await test_client.delete(f"/categories/{category['id']}")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Cannot delete category. Subcategories are referencing it.",
        }
        assert (await test_client.get(f"/categories/{category['id']}")).status_code == 200

    @pytest.mark.asyncio
    async def test_unguarded_delete_then_404(self, test_client, fake_cloudinary):
        category = await _create_category(test_client, "Shoes")

        response = await test_client.delete(f"/categories/{category['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Category deleted successfully."}
        assert (await test_client.get(f"/categories/{category['id']}")).status_code == 404


class TestProductsApi:

    async def _refs(self, client):
        category = await _create_category(client, "Footwear")
        sub_category = await _create_sub_category(client, category["id"])
        return category, sub_category

    @pytest.mark.asyncio
    async def test_create_and_read_with_resolved_references(self, test_client, fake_cloudinary, sample_image_bytes):
        category, sub_category = await self._refs(test_client)

        product = await _create_product(
            test_client,
            category["id"],
            sub_category["id"],
            files={
                "image1": ("front.png", sample_image_bytes, PNG),
                "image2": ("side.png", sample_image_bytes, PNG),
            },
        )

        assert product["proCategoryId"] == {"id": category["id"], "name": "Footwear"}
        assert product["proSubCategoryId"] == {"id": sub_category["id"], "name": "Sneakers"}
        assert product["proBrandId"] is None
        assert product["quantity"] == 12
        assert product["price"] == pytest.approx(89.9)
        assert [entry["image"] for entry in product["images"]] == ["image1", "image2"]

    @pytest.mark.asyncio
    async def test_create_message_and_empty_data(self, test_client, fake_cloudinary):
        category, sub_category = await self._refs(test_client)

        response = await test_client.post(
            "/products",
            data={
                "name": "Sandal",
                "quantity": "3",
                "price": "20",
                "proCategoryId": category["id"],
                "proSubCategoryId": sub_category["id"],
            },
        )

        assert response.json() == {"success": True, "message": "Product created successfully.", "data": None}

    @pytest.mark.asyncio
    async def test_missing_required_fields(self, test_client, fake_cloudinary):
        response = await test_client.post("/products", data={"name": "Incomplete"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Required fields are missing."}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"price": "inf"},
            {"offerPrice": "nan"},
            {"name": "x" * 300},
            {"quantity": "99999999999"},
        ],
    )
    async def test_out_of_range_values_are_400(self, test_client, fake_cloudinary, overrides):
        category, sub_category = await self._refs(test_client)
        data = {
            "name": "Runner",
            "quantity": "1",
            "price": "10",
            "proCategoryId": category["id"],
            "proSubCategoryId": sub_category["id"],
            **overrides,
        }

        response = await test_client.post("/products", data=data)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert (await test_client.get("/products")).json()["data"] == []

    @pytest.mark.asyncio
    async def test_infinite_price_update_is_400(self, test_client, fake_cloudinary):
        category, sub_category = await self._refs(test_client)
        product = await _create_product(test_client, category["id"], sub_category["id"])

        response = await test_client.put(f"/products/{product['id']}", data={"price": "inf"})

        assert response.status_code == 400
        stored = (await test_client.get(f"/products/{product['id']}")).json()["data"]
        assert stored["price"] == pytest.approx(89.9)

    @pytest.mark.asyncio
    async def test_failed_slot_upload_creates_nothing(self, test_client, fake_cloudinary, sample_image_bytes):
        category, sub_category = await self._refs(test_client)
        fake_cloudinary.upload.side_effect = cloudinary.exceptions.Error("rejected")

        response = await test_client.post(
            "/products",
            data={
                "name": "Runner",
                "quantity": "1",
                "price": "1",
                "proCategoryId": category["id"],
                "proSubCategoryId": sub_category["id"],
            },
            files={"image1": ("front.png", sample_image_bytes, PNG)},
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Error uploading image1"
        assert (await test_client.get("/products")).json()["data"] == []

    @pytest.mark.asyncio
    async def test_partial_update_retains_other_fields(self, test_client, fake_cloudinary):
        category, sub_category = await self._refs(test_client)
        product = await _create_product(test_client, category["id"], sub_category["id"])

        response = await test_client.put(f"/products/{product['id']}", data={"price": "99"})

        assert response.json() == {"success": True, "message": "Product updated successfully."}
        stored = (await test_client.get(f"/products/{product['id']}")).json()["data"]
        assert stored["price"] == 99.0
        assert stored["name"] == "Runner"
        assert stored["quantity"] == 12
        assert stored["offerPrice"] == pytest.approx(79.9)

    @pytest.mark.asyncio
    async def test_reuploading_image3_keeps_single_entry(self, test_client, fake_cloudinary, sample_image_bytes):
        category, sub_category = await self._refs(test_client)
        product = await _create_product(
            test_client,
            category["id"],
            sub_category["id"],
            files={"image1": ("front.png", sample_image_bytes, PNG)},
        )

        urls = []
        for _ in range(2):
            response = await test_client.put(
                f"/products/{product['id']}",
                files={"image3": ("back.png", sample_image_bytes, PNG)},
            )
            assert response.status_code == 200
            stored = (await test_client.get(f"/products/{product['id']}")).json()["data"]
            urls.append(stored["images"][-1]["url"])

        assert [entry["image"] for entry in stored["images"]] == ["image1", "image3"]
        assert stored["images"][0] == product["images"][0]
        assert urls[0] != urls[1]
        assert stored["images"][1]["url"] == urls[1]

    @pytest.mark.asyncio
    async def test_delete_then_404(self, test_client, fake_cloudinary):
        category, sub_category = await self._refs(test_client)
        product = await _create_product(test_client, category["id"], sub_category["id"])

        response = await test_client.delete(f"/products/{product['id']}")

        assert response.json() == {"success": True, "message": "Product deleted successfully."}
        missing = await test_client.get(f"/products/{product['id']}")
        assert missing.status_code == 404
        assert missing.json()["message"] == "Product not found."

    @pytest.mark.asyncio
    async def test_product_blocks_sub_category_delete(self, test_client, fake_cloudinary):
        category, sub_category = await self._refs(test_client)
        await _create_product(test_client, category["id"], sub_category["id"])

        response = await test_client.delete(f"/subCategories/{sub_category['id']}")

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete sub-category. Products are referencing it."


class TestReferenceApi:

    @pytest.mark.asyncio
    async def test_variant_type_blocked_by_variant(self, test_client):
        created = await test_client.post("/variantTypes", json={"name": "Size", "type": "size"})
        assert created.json()["message"] == "Variant type created successfully."
        variant_type = (await test_client.get("/variantTypes")).json()["data"][0]
        assert variant_type["type"] == "size"

        await test_client.post("/variants", json={"name": "XL", "variantTypeId": variant_type["id"]})
        variants = (await test_client.get("/variants")).json()["data"]
        assert [(v["name"], v["variantTypeId"]) for v in variants] == [("XL", variant_type["id"])]

        blocked = await test_client.delete(f"/variantTypes/{variant_type['id']}")
        assert blocked.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_body_is_a_400(self, test_client):
        response = await test_client.post("/brands", json={"name": "Acme"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_long_reference_name_is_400(self, test_client):
        response = await test_client.post("/variantTypes", json={"name": "s" * 256})

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_long_category_name_is_400(self, test_client, fake_cloudinary):
        response = await test_client.post("/categories", data={"name": "c" * 256})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Name must be at most 255 characters.",
        }

    @pytest.mark.asyncio
    async def test_brand_with_unknown_subcategory(self, test_client):
        response = await test_client.post("/brands", json={"name": "Acme", "subcategoryId": str(uuid4())})

        assert response.status_code == 400
        assert response.json()["message"] == "Sub-category not found."
