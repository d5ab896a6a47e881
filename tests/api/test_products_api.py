"""
Route tests for the product API.
The repository is mocked; token verification and the access gate run for real.
"""
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.core.errors import StorageError
from app.core.security import TokenVerifier
from app.dependencies.auth import get_token_verifier
from app.dependencies.product import get_product_service
from app.services.product import ProductService
from main import app

TEST_SECRET = "test-secret"


@pytest.fixture
def client(mock_repository, profile):
    app.dependency_overrides[get_product_service] = lambda: ProductService(mock_repository, profile)
    app.dependency_overrides[get_token_verifier] = lambda: TokenVerifier(TEST_SECRET)
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(token_factory):
    return {"Authorization": f"Bearer {token_factory(role='admin', secret=TEST_SECRET)}"}


@pytest.fixture
def user_headers(token_factory):
    return {"Authorization": f"Bearer {token_factory(role='user', subject='user123', secret=TEST_SECRET)}"}


NEW_PRODUCT = {"name": "Blue Widget", "unitPrice": 9.99, "quantity": 5, "category": "Gadgets"}


class TestAccessControl:
    def test_create_without_token_is_forbidden(self, client, mock_repository):
        response = client.post("/api/products", json=NEW_PRODUCT)

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "No token provided"}
        mock_repository.insert.assert_not_called()

    def test_create_with_user_role_is_forbidden(self, client, mock_repository, user_headers):
        response = client.post("/api/products", json=NEW_PRODUCT, headers=user_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Admin only."
        mock_repository.insert.assert_not_called()

    def test_create_with_bad_signature_is_unauthorized(self, client, token_factory):
        headers = {"Authorization": f"Bearer {token_factory(secret='wrong-secret')}"}

        response = client.post("/api/products", json=NEW_PRODUCT, headers=headers)

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid token"}

    def test_auth_is_checked_before_body_validation(self, client):
        response = client.post("/api/products", json={})
        assert response.status_code == 403

    @pytest.mark.parametrize("method, path", [
        ("post", "/api/products"),
        ("put", "/api/products/507f1f77bcf86cd799439011"),
        ("put", "/api/products/bulk-update-stock"),
    ])
    def test_auth_is_checked_before_json_decoding(self, client, mock_repository, method, path):
        response = client.request(
            method.upper(), path, content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 403
        assert response.json() == {"success": False, "message": "No token provided"}
        mock_repository.insert.assert_not_called()

    def test_malformed_json_with_admin_token_is_a_validation_error(self, client, admin_headers):
        response = client.post(
            "/api/products",
            content=b"{not json",
            headers={**admin_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"
        assert response.json()["details"]["errors"][0]["type"] == "json_invalid"

    def test_double_space_after_scheme_has_no_token(self, client, token_factory):
        headers = {"Authorization": f"Bearer  {token_factory(secret=TEST_SECRET)}"}

        response = client.post("/api/products", json=NEW_PRODUCT, headers=headers)

        assert response.status_code == 403

    def test_create_with_admin_token_then_fetch(
        self, client, mock_repository, admin_headers, product_factory, product_id
    ):
        created = product_factory(product_id, name="Blue Widget", unitPrice=9.99, quantity=5)
        mock_repository.insert.return_value = created
        mock_repository.get.return_value = created

        response = client.post("/api/products", json=NEW_PRODUCT, headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Product created!"

        fetched = client.get(f"/api/products/{body['data']['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["data"] == body["data"]

    @pytest.mark.parametrize("method, path", [
        ("put", "/api/products/507f1f77bcf86cd799439011"),
        ("put", "/api/products/bulk-update-stock"),
        ("delete", "/api/products/507f1f77bcf86cd799439011"),
    ])
    def test_other_mutations_need_a_token(self, client, method, path):
        response = client.request(method.upper(), path, json={})
        assert response.status_code == 403


class TestValidation:
    def test_missing_unit_price_is_rejected(self, client, mock_repository, admin_headers):
        response = client.post("/api/products", json={"name": "No price"}, headers=admin_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "unitPrice" in body["message"]
        mock_repository.insert.assert_not_called()

    def test_negative_quantity_is_rejected(self, client, admin_headers):
        payload = {**NEW_PRODUCT, "quantity": -1}
        response = client.post("/api/products", json=payload, headers=admin_headers)
        assert response.status_code == 400

    def test_update_requires_required_fields(self, client, admin_headers, product_id):
        response = client.put(f"/api/products/{product_id}", json={"name": "Only name"}, headers=admin_headers)
        assert response.status_code == 400


class TestRouting:
    def test_search_is_not_taken_for_an_id(self, client, mock_repository, sample_product):
        mock_repository.find.return_value = [sample_product]

        response = client.get("/api/products/search/widget")

        assert response.status_code == 200
        assert response.json()["data"][0]["name"] == "Blue Widget"
        mock_repository.get.assert_not_called()

    def test_categories_route(self, client, mock_repository):
        mock_repository.distinct_categories.return_value = ["Gadgets"]

        response = client.get("/api/products/categories")

        assert response.json() == {"success": True, "data": ["Gadgets"]}

    def test_bulk_update_route_is_not_taken_for_an_id(
        self, client, mock_repository, admin_headers, sample_product, product_id
    ):
        mock_repository.replace_fields.return_value = sample_product

        response = client.put(
            "/api/products/bulk-update-stock",
            json={"updates": [{"id": product_id, "quantity": 5}]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Stock updated for multiple products"

    def test_unknown_route(self, client):
        response = client.get("/api/products/sort/name")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestReads:
    def test_list_with_pagination(self, client, mock_repository, sample_product):
        mock_repository.find.return_value = [sample_product] * 5
        mock_repository.count.return_value = 11

        response = client.get("/api/products", params={"page": "2", "limit": "5"})

        assert response.status_code == 200
        assert response.json()["pagination"] == {"page": 2, "limit": 5, "total": 11, "pages": 3}

    def test_list_with_junk_parameters_still_succeeds(self, client, mock_repository):
        mock_repository.find.return_value = []

        response = client.get("/api/products", params={"page": "abc", "limit": "xyz"})

        assert response.json() == {"success": True, "data": []}

    def test_low_stock_reports_count(self, client, mock_repository, sample_product):
        mock_repository.find.return_value = [sample_product]

        body = client.get("/api/products/filter/lowstock/notanumber").json()

        assert body["count"] == 1
        spec = mock_repository.find.call_args.args[0]
        assert spec.filter == {"quantity": {"$gt": 0, "$lte": 10}}

    def test_price_filter(self, client, mock_repository):
        mock_repository.find.return_value = []

        client.get("/api/products/filter/price", params={"min": "5", "max": "10"})

        spec = mock_repository.find.call_args.args[0]
        assert spec.filter["unitPrice"] == {"$gte": 5.0, "$lte": 10.0}

    def test_sort_route(self, client, mock_repository):
        mock_repository.find.return_value = []

        client.get("/api/products/sort/unitPrice/desc")

        assert mock_repository.find.call_args.args[0].sort == [("unitPrice", -1)]

    def test_expired_disabled_by_default(self, client, mock_repository):
        response = client.get("/api/products/filter/expired")

        assert response.status_code == 404
        mock_repository.find.assert_not_called()

    def test_malformed_id_is_not_found(self, client, mock_repository):
        response = client.get("/api/products/not-an-id")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Product not found"}
        mock_repository.get.assert_not_called()

    def test_unknown_id_is_not_found(self, client, mock_repository):
        mock_repository.get.return_value = None

        response = client.get(f"/api/products/{ObjectId()}")

        assert response.status_code == 404


class TestWrites:
    def test_update_unknown_id(self, client, mock_repository, admin_headers):
        mock_repository.replace_fields.return_value = None

        response = client.put(
            f"/api/products/{ObjectId()}",
            json={"name": "A", "unitPrice": 1, "quantity": 1},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_delete(self, client, mock_repository, admin_headers, sample_product, product_id):
        mock_repository.delete.return_value = sample_product

        response = client.delete(f"/api/products/{product_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Product deleted!"

    def test_delete_unknown_id(self, client, mock_repository, admin_headers):
        mock_repository.delete.return_value = None

        response = client.delete(f"/api/products/{ObjectId()}", headers=admin_headers)

        assert response.status_code == 404

    def test_bulk_update_fails_as_a_whole(
        self, client, mock_repository, admin_headers, sample_product, product_id
    ):
        async def replace(query, values, remove=()):
            return sample_product if query["_id"] == ObjectId(product_id) else None

        mock_repository.replace_fields.side_effect = replace

        response = client.put(
            "/api/products/bulk-update-stock",
            json={"updates": [
                {"id": product_id, "quantity": 5},
                {"id": str(ObjectId()), "quantity": 1},
            ]},
            headers=admin_headers,
        )

        assert response.status_code == 404
        assert response.json()["success"] is False
        # The entry that matched was still written
        assert mock_repository.replace_fields.await_count == 2


class TestFailures:
    def test_storage_error_is_a_500(self, client, mock_repository):
        mock_repository.find.side_effect = StorageError("connection refused")

        response = client.get("/api/products/filter/instock")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "connection refused"}

    def test_unexpected_error_is_a_500(self, client, mock_repository):
        mock_repository.find.side_effect = RuntimeError("something broke")

        response = client.get("/api/products/filter/outofstock")

        assert response.status_code == 500
        assert response.json()["message"] == "something broke"

    def test_correlation_id_is_echoed(self, client, mock_repository):
        mock_repository.find.return_value = []

        response = client.get("/api/products", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"
