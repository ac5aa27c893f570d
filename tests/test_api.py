import pytest

from conftest import OWNER_PASSWORD, login


def create(client, headers, path, payload, key):
    response = client.post(path, headers=headers, json=payload)
    assert response.status_code == 200, response.text
    return response.json()[key]


@pytest.fixture()
def widget(client, owner_headers):
    product = create(client, owner_headers, "/products", {"name": "Widget A", "unit": "pcs", "selling_price": 45}, "product")
    steel = create(client, owner_headers, "/raw-materials", {"name": "Steel Sheet", "unit": "kg", "reorder_point": 500}, "material")
    create(client, owner_headers, "/bom", {"product_id": product["id"], "raw_material_id": steel["id"], "qty_per_unit": 0.5}, "bom")
    return {"product": product, "steel": steel}


def purchase(client, headers, material_id, qty, unit_cost):
    return create(client, headers, "/inventory-transactions", {
        "raw_material_id": material_id,
        "tx_type": "purchase",
        "qty": qty,
        "unit_cost": unit_cost,
    }, "transaction")


def test_health(client):
    assert client.get("/").status_code == 200


def test_signup_login_and_me(client, owner_headers):
    response = client.get("/me", headers=owner_headers)

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == "owner@acme.test"
    assert user["role"] == "Owner"
    assert user["factory_id"]


def test_duplicate_signup_is_rejected(client, owner_headers):
    response = client.post("/signup", json={"email": "owner@acme.test", "password": "x", "name": "Again"})
    assert response.status_code == 400
    assert "error" in response.json()


def test_wrong_password(client, owner_headers):
    response = client.post("/login", json={"email": "owner@acme.test", "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid login credentials"}


def test_login_email_is_case_insensitive(client, owner_headers):
    assert login(client, "Owner@Acme.test", OWNER_PASSWORD)


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Token abc"}, {"Authorization": "Bearer not-a-jwt"}])
def test_requests_without_valid_token_are_unauthorized(client, headers):
    response = client.get("/products", headers=headers)
    assert response.status_code == 401
    assert "error" in response.json()


def test_user_without_factory_is_unauthorized(client):
    client.post("/signup", json={"email": "drifter@acme.test", "password": "pw-123", "name": "Drifter", "role": "Supervisor"})
    headers = login(client, "drifter@acme.test", "pw-123")

    assert client.get("/me", headers=headers).status_code == 200
    response = client.get("/products", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_validation_errors_answer_400(client, owner_headers):
    response = client.post("/products", headers=owner_headers, json={"name": "No unit"})
    assert response.status_code == 400
    assert "unit" in response.json()["error"]

    response = client.post("/production-orders", headers=owner_headers, json={"product_id": "p", "target_qty": 0})
    assert response.status_code == 400


def test_only_owner_adds_staff(client, staff_headers):
    manager = staff_headers("Plant Manager")
    response = client.post("/users", headers=manager, json={
        "email": "someone@acme.test", "password": "pw", "name": "Someone", "role": "Supervisor",
    })
    assert response.status_code == 401


def test_staff_share_the_owner_factory(client, owner_headers, staff_headers):
    create(client, owner_headers, "/products", {"name": "Widget A", "unit": "pcs"}, "product")
    supervisor = staff_headers("Supervisor")

    products = client.get("/products", headers=supervisor).json()["products"]
    assert [p["name"] for p in products] == ["Widget A"]


@pytest.mark.parametrize("role,status", [
    ("Plant Manager", 200),
    ("Supervisor", 401),
    ("Accountant", 401),
])
def test_product_creation_by_role(client, staff_headers, role, status):
    headers = staff_headers(role)
    response = client.post("/products", headers=headers, json={"name": "Gizmo", "unit": "pcs"})
    assert response.status_code == status


@pytest.mark.parametrize("role,status", [
    ("Accountant", 200),
    ("Plant Manager", 200),
    ("Supervisor", 401),
])
def test_cost_report_access_by_role(client, staff_headers, role, status):
    response = client.get("/cost-reports", headers=staff_headers(role))
    assert response.status_code == status


def test_accountant_cannot_post_inventory(client, staff_headers, widget):
    response = client.post("/inventory-transactions", headers=staff_headers("Accountant"), json={
        "raw_material_id": widget["steel"]["id"], "tx_type": "purchase", "qty": 10, "unit_cost": 1,
    })
    assert response.status_code == 401


def test_factories_do_not_see_each_other(client, owner_headers, widget):
    client.post("/signup", json={
        "email": "rival@other.test", "password": "pw-123", "name": "Rival", "factory_name": "Other Works",
    })
    rival = login(client, "rival@other.test", "pw-123")

    assert client.get("/products", headers=rival).json()["products"] == []
    assert client.get("/raw-materials", headers=rival).json()["materials"] == []


def test_inventory_view_uses_weighted_average(client, owner_headers, widget):
    purchase(client, owner_headers, widget["steel"]["id"], 1000, 5)

    inventory = client.get("/inventory", headers=owner_headers).json()["inventory"]

    steel = next(row for row in inventory if row["material_id"] == widget["steel"]["id"])
    assert steel["total_qty"] == 1000
    assert steel["avg_unit_cost"] == pytest.approx(5)
    assert steel["needs_reorder"] is False


def test_start_unknown_order_is_404(client, owner_headers):
    response = client.put("/production-orders/missing/start", headers=owner_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Order not found"}


def test_insufficient_stock_is_400_and_changes_nothing(client, owner_headers, widget):
    purchase(client, owner_headers, widget["steel"]["id"], 40, 4)
    order = create(client, owner_headers, "/production-orders", {"product_id": widget["product"]["id"], "target_qty": 100}, "order")

    response = client.put(f"/production-orders/{order['id']}/complete", headers=owner_headers, json={"actual_produced_qty": 100})

    assert response.status_code == 400
    assert response.json()["error"].startswith(f"Insufficient stock for material {widget['steel']['id']}")
    inventory = client.get("/inventory", headers=owner_headers).json()["inventory"]
    assert inventory[0]["total_qty"] == 40
    orders = client.get("/production-orders", headers=owner_headers).json()["orders"]
    assert orders[0]["status"] == "scheduled"


def test_full_production_flow(client, owner_headers, staff_headers, widget):
    supervisor = staff_headers("Supervisor")
    purchase(client, owner_headers, widget["steel"]["id"], 1000, 4)
    order = create(client, supervisor, "/production-orders", {"product_id": widget["product"]["id"], "target_qty": 100}, "order")

    started = client.put(f"/production-orders/{order['id']}/start", headers=supervisor)
    assert started.status_code == 200
    assert started.json()["order"]["status"] == "in_progress"

    again = client.put(f"/production-orders/{order['id']}/start", headers=supervisor)
    assert again.status_code == 400

    completed = client.put(f"/production-orders/{order['id']}/complete", headers=supervisor, json={"actual_produced_qty": 1000})
    assert completed.status_code == 200
    assert completed.json()["order"]["status"] == "completed"

    twice = client.put(f"/production-orders/{order['id']}/complete", headers=supervisor, json={"actual_produced_qty": 1000})
    assert twice.status_code == 400
    assert twice.json() == {"error": "Order already completed"}

    usage = client.get(f"/production-orders/{order['id']}/material-usage", headers=supervisor).json()["usage"]
    assert len(usage) == 1
    assert usage[0]["qty_used"] == 500
    assert usage[0]["unit_cost"] == pytest.approx(4)

    alerts = client.get("/alerts", headers=supervisor).json()["alerts"]
    assert [a["message"] for a in alerts] == ["Low stock alert: Steel Sheet is at 500.00 kg (reorder point: 500)"]

    for _ in range(2):
        dismissed = client.delete(f"/alerts/{alerts[0]['id']}", headers=supervisor)
        assert dismissed.status_code == 200
    assert client.get("/alerts", headers=supervisor).json()["alerts"] == []

    dashboard = client.get("/dashboard", headers=supervisor).json()
    assert dashboard["summary"]["completed_orders_count"] == 1
    assert dashboard["summary"]["low_stock_items"] == 1
    assert dashboard["summary"]["total_production_cost"] == pytest.approx(2000)

    report = client.get("/cost-reports", headers=owner_headers).json()
    assert report["cost_reports"][0]["revenue"] == pytest.approx(45000)
    assert report["cost_reports"][0]["profit"] == pytest.approx(43000)


def test_downtime_events_carry_cost(client, owner_headers):
    create(client, owner_headers, "/downtime-events", {
        "reason": "Conveyor jam",
        "start_time": "2024-03-01T08:00:00Z",
        "end_time": "2024-03-01T10:30:00Z",
    }, "event")

    events = client.get("/downtime-events", headers=owner_headers).json()["events"]

    assert events[0]["duration_hours"] == pytest.approx(2.5)
    assert events[0]["cost"] == pytest.approx(250)


def test_update_and_delete_are_audited(client, owner_headers, widget, staff_headers):
    product_id = widget["product"]["id"]
    response = client.put(f"/products/{product_id}", headers=owner_headers, json={"selling_price": 50})
    assert response.json()["product"]["selling_price"] == 50
    assert response.json()["product"]["name"] == "Widget A"

    assert client.delete(f"/products/{product_id}", headers=owner_headers).status_code == 200
    assert client.delete(f"/products/{product_id}", headers=owner_headers).status_code == 200

    entries = client.get("/audit-log", headers=owner_headers, params={"table_name": "products"}).json()["entries"]
    assert [e["action"] for e in entries] == ["UPDATE", "DELETE"]

    assert client.get("/audit-log", headers=staff_headers("Plant Manager")).status_code == 401


def test_update_unknown_product_is_404(client, owner_headers):
    response = client.put("/products/missing", headers=owner_headers, json={"name": "Ghost"})
    assert response.status_code == 404


def test_cost_report_export(client, owner_headers):
    response = client.get("/cost-reports/export", headers=owner_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "attachment" in response.headers["content-disposition"]
