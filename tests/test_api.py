import pytest

from conftest import PASSWORD, auth_headers

LAPTOP = {"name": "Laptop", "unit": "pcs", "price": 3499.99, "category": "Electronics"}


def movement(product, warehouse, quantity, **extra):
    return {"product_id": product.id, "warehouse_id": warehouse.id, "quantity": quantity, **extra}


class TestAuth:
    def test_login_and_me(self, client, user):
        res = client.post("/login", json={"username_or_email": "employee", "password": PASSWORD})
        assert res.status_code == 200
        body = res.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["role"] == "Employee"

        res = client.get("/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert res.status_code == 200
        assert res.json()["username"] == "employee"

    def test_bad_login(self, client, user):
        res = client.post("/login", json={"username_or_email": "employee", "password": "nope-nope"})
        assert res.status_code == 401
        assert res.json()["code"] == "AUTHENTICATION_FAILED"

    def test_register(self, client):
        payload = {"username": "newhire", "email": "newhire@warehouse.com", "password": PASSWORD}
        res = client.post("/register", json=payload)
        assert res.status_code == 201
        assert res.json()["user"]["role"] == "Employee"

        res = client.post("/register", json=payload)
        assert res.status_code == 409
        assert res.json()["code"] == "CONFLICT"

    def test_missing_token(self, client):
        assert client.get("/products").status_code in (401, 403)

    def test_invalid_token(self, client):
        res = client.get("/products", headers={"Authorization": "Bearer not-a-token"})
        assert res.status_code == 401

    def test_change_password_wrong_current(self, client, user):
        res = client.post(
            "/me/password",
            json={"current_password": "wrong-one", "new_password": "another1"},
            headers=auth_headers(user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_ARGUMENT"
        assert res.json()["field"] == "current_password"


class TestProducts:
    def test_employee_cannot_edit_catalogue(self, client, user):
        res = client.post("/products", json=LAPTOP, headers=auth_headers(user))
        assert res.status_code == 403

    def test_manager_crud(self, client, manager):
        headers = auth_headers(manager)
        res = client.post("/products", json=LAPTOP, headers=headers)
        assert res.status_code == 201
        product_id = res.json()["id"]

        res = client.put(f"/products/{product_id}", json={**LAPTOP, "price": 2999.0}, headers=headers)
        assert res.status_code == 200
        assert res.json()["price"] == 2999.0

        res = client.get("/products", params={"q": "lap"}, headers=headers)
        assert res.json()["total"] == 1
        assert client.get("/products/categories", headers=headers).json() == ["Electronics"]

        assert client.delete(f"/products/{product_id}", headers=headers).status_code == 204
        res = client.get(f"/products/{product_id}", headers=headers)
        assert res.status_code == 404
        assert res.json()["code"] == "NOT_FOUND"

    def test_duplicate_name(self, client, manager, product):
        res = client.post("/products", json=LAPTOP, headers=auth_headers(manager))
        assert res.status_code == 409
        assert res.json()["field"] == "name"

    def test_threshold_validation(self, client, manager):
        res = client.post(
            "/products", json={**LAPTOP, "min_quantity": 50, "max_quantity": 10}, headers=auth_headers(manager)
        )
        assert res.status_code == 400
        assert res.json()["code"] == "INVALID_ARGUMENT"


class TestStock:
    def test_movement_scenario(self, client, user, manager, product, warehouse):
        headers = auth_headers(user)

        res = client.post("/stock/import", json=movement(product, warehouse, 50), headers=headers)
        assert res.status_code == 201
        assert res.json()["type"] == "Import"
        assert res.json()["username"] == "employee"

        res = client.post("/stock/export", json=movement(product, warehouse, 60), headers=headers)
        assert res.status_code == 422
        body = res.json()
        assert body["code"] == "INSUFFICIENT_STOCK"
        assert (body["requested"], body["available"]) == (60, 50)

        res = client.post("/stock/export", json=movement(product, warehouse, 20), headers=headers)
        assert res.status_code == 201

        res = client.post("/stock/adjust", json=movement(product, warehouse, 100), headers=headers)
        assert res.status_code == 403

        res = client.post("/stock/adjust", json=movement(product, warehouse, 100), headers=auth_headers(manager))
        assert res.status_code == 201
        assert (res.json()["type"], res.json()["quantity"]) == ("Adjustment", 70)

        res = client.get(
            "/stock/available",
            params={"product_id": product.id, "warehouse_id": warehouse.id, "required": 80},
            headers=headers,
        )
        assert res.json() == {
            "product_id": product.id, "warehouse_id": warehouse.id,
            "available": 100, "required": 80, "sufficient": True,
        }

        res = client.get("/stock/transactions", headers=headers)
        assert res.json()["total"] == 3
        assert [t["type"] for t in res.json()["items"]] == ["Adjustment", "Export", "Import"]

        res = client.get("/stock/transactions", params={"type": "Export"}, headers=headers)
        assert [t["quantity"] for t in res.json()["items"]] == [20]

    def test_zero_quantity_is_rejected_by_schema(self, client, user, product, warehouse):
        res = client.post("/stock/import", json=movement(product, warehouse, 0), headers=auth_headers(user))
        assert res.status_code == 422

    def test_unknown_product(self, client, user, warehouse):
        res = client.post(
            "/stock/import", json={"product_id": 999, "warehouse_id": warehouse.id, "quantity": 1},
            headers=auth_headers(user),
        )
        assert res.status_code == 404
        assert res.json()["entity"] == "Product"

    def test_stock_items(self, client, user, manager, product, warehouse):
        headers = auth_headers(manager)
        res = client.post("/stock/items", json={"product_id": product.id, "warehouse_id": warehouse.id}, headers=headers)
        assert res.status_code == 201
        item = res.json()
        assert (item["quantity"], item["is_low"], item["product_name"]) == (0, True, "Laptop")

        res = client.post("/stock/items", json={"product_id": product.id, "warehouse_id": warehouse.id}, headers=headers)
        assert res.status_code == 409

        res = client.post(f"/stock/items/{item['id']}/add", json={"amount": 15}, headers=auth_headers(user))
        assert res.status_code == 200
        res = client.post(f"/stock/items/{item['id']}/remove", json={"amount": 20}, headers=auth_headers(user))
        assert res.status_code == 422

        res = client.delete(f"/stock/items/{item['id']}", headers=headers)
        assert res.status_code == 412
        assert res.json()["code"] == "PRECONDITION_FAILED"

        res = client.put(f"/stock/items/{item['id']}/quantity", json={"quantity": 0}, headers=headers)
        assert res.json()["quantity"] == -15
        assert client.delete(f"/stock/items/{item['id']}", headers=headers).status_code == 204

    def test_low_over_and_summary(self, client, user, product, other_product, warehouse):
        headers = auth_headers(user)
        client.post("/stock/import", json=movement(product, warehouse, 3), headers=headers)
        client.post("/stock/import", json=movement(other_product, warehouse, 300), headers=headers)

        assert [i["product_id"] for i in client.get("/stock/low", headers=headers).json()] == [product.id]
        assert [i["product_id"] for i in client.get("/stock/over", headers=headers).json()] == [other_product.id]

        res = client.get(f"/warehouses/{warehouse.id}/summary", headers=headers)
        assert res.json()["total_quantity"] == 303
        assert res.json()["low_stock_items"] == 1

        res = client.get(f"/warehouses/{warehouse.id}/stock", headers=headers)
        assert len(res.json()) == 2

    def test_bad_date_range(self, client, user):
        res = client.get(
            "/stock/transactions",
            params={"date_from": "2026-02-01T00:00:00", "date_to": "2026-01-01T00:00:00"},
            headers=auth_headers(user),
        )
        assert res.status_code == 400

    def test_amend_is_admin_only(self, client, user, admin, product, warehouse):
        tx = client.post("/stock/import", json=movement(product, warehouse, 5), headers=auth_headers(user)).json()
        payload = {"reason": "Typo in delivery note", "quantity": 6}

        assert client.patch(f"/stock/transactions/{tx['id']}", json=payload, headers=auth_headers(user)).status_code == 403
        res = client.patch(f"/stock/transactions/{tx['id']}", json=payload, headers=auth_headers(admin))
        assert res.status_code == 200
        assert res.json()["reason"] == "Typo in delivery note"


class TestWarehouses:
    def test_delete_with_stock_is_blocked(self, client, user, manager, product, warehouse):
        client.post("/stock/import", json=movement(product, warehouse, 1), headers=auth_headers(user))
        res = client.delete(f"/warehouses/{warehouse.id}", headers=auth_headers(manager))
        assert res.status_code == 412

    def test_create_and_list(self, client, manager):
        headers = auth_headers(manager)
        res = client.post("/warehouses", json={"name": "Cold Store", "address": "ul. Mrozna 3"}, headers=headers)
        assert res.status_code == 201
        assert client.get("/warehouses", headers=headers).json()["total"] == 1


class TestUsersAndLogs:
    def test_users_admin_only(self, client, user, admin):
        assert client.get("/users", headers=auth_headers(user)).status_code == 403

        res = client.get("/users", headers=auth_headers(admin))
        assert res.status_code == 200
        assert {u["username"] for u in res.json()["items"]} == {"employee", "admin"}

    def test_admin_manages_users(self, client, admin):
        headers = auth_headers(admin)
        res = client.post(
            "/users",
            json={"username": "kasia", "email": "kasia@warehouse.com", "password": PASSWORD, "role": "Manager"},
            headers=headers,
        )
        assert res.status_code == 201
        user_id = res.json()["id"]

        res = client.post(f"/users/{user_id}/deactivate", headers=headers)
        assert res.json()["is_active"] is False
        res = client.post("/login", json={"username_or_email": "kasia", "password": PASSWORD})
        assert res.status_code == 401

        assert client.post(f"/users/{user_id}/activate", headers=headers).json()["is_active"] is True
        res = client.post(f"/users/{user_id}/reset-password", json={"new_password": "fresh-pass"}, headers=headers)
        assert res.status_code == 204
        res = client.post("/login", json={"username_or_email": "kasia", "password": "fresh-pass"})
        assert res.status_code == 200

        assert client.delete(f"/users/{user_id}", headers=headers).status_code == 204

    def test_admin_cannot_delete_self(self, client, admin):
        res = client.delete(f"/users/{admin.id}", headers=auth_headers(admin))
        assert res.status_code == 412

    def test_user_with_transactions_cannot_be_deleted(self, client, user, admin, product, warehouse):
        client.post("/stock/import", json=movement(product, warehouse, 1), headers=auth_headers(user))
        res = client.delete(f"/users/{user.id}", headers=auth_headers(admin))
        assert res.status_code == 412

    @pytest.mark.parametrize("role_fixture, status", [("user", 403), ("admin", 200)])
    def test_logs(self, request, client, product, warehouse, role_fixture, status):
        caller = request.getfixturevalue(role_fixture)
        client.post("/stock/import", json=movement(product, warehouse, 2), headers=auth_headers(caller))

        res = client.get("/logs", params={"action": "STOCK_IMPORT"}, headers=auth_headers(caller))
        assert res.status_code == status
        if status == 200:
            entry = res.json()["items"][0]
            assert (entry["resource"], entry["status"]) == ("stock", "SUCCESS")
