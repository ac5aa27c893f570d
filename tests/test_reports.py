import pytest
from openpyxl import load_workbook

from crud import bom as crud_bom
from crud import cost_reports as crud_cost_reports
from crud import dashboard as crud_dashboard
from crud import downtime as crud_downtime
from crud import inventory as crud_inventory
from crud import production_orders as crud_orders
from crud import products as crud_products
from crud import raw_materials as crud_raw_materials
from schemas.bom import BOMEntryCreate
from schemas.downtime import DowntimeEventCreate
from schemas.inventory import InventoryTransactionCreate, TransactionType
from schemas.production_orders import ProductionOrderCreate
from schemas.products import ProductCreate
from schemas.raw_materials import RawMaterialCreate

FACTORY_ID = "factory-1"
USER_ID = "user-1"


@pytest.fixture()
def widget(db):
    product = crud_products.create_product(db, ProductCreate(name="Widget A", unit="pcs", selling_price=45), FACTORY_ID)
    for name, unit, qty_per_unit, stock, unit_cost in (
        ("Steel Sheet", "kg", 0.5, 1000, 4),
        ("Paint (Red)", "liter", 0.05, 100, 2),
    ):
        material = crud_raw_materials.create_raw_material(
            db, RawMaterialCreate(name=name, unit=unit, reorder_point=0), FACTORY_ID
        )
        crud_inventory.create_transaction(
            db,
            InventoryTransactionCreate(
                raw_material_id=material["id"], tx_type=TransactionType.PURCHASE, qty=stock, unit_cost=unit_cost
            ),
            FACTORY_ID,
            user_id=USER_ID,
        )
        crud_bom.create_bom_entry(
            db,
            BOMEntryCreate(product_id=product["id"], raw_material_id=material["id"], qty_per_unit=qty_per_unit),
            FACTORY_ID,
        )
    return product


def produce(db, product_id, qty):
    order = crud_orders.create_order(db, ProductionOrderCreate(product_id=product_id, target_qty=qty), FACTORY_ID, USER_ID)
    return crud_orders.complete_order(db, order["id"], qty, FACTORY_ID, USER_ID)


def test_cost_report_row_for_completed_order(db, widget):
    order = produce(db, widget["id"], 100)

    report = crud_cost_reports.get_cost_report(db, FACTORY_ID)

    assert len(report.cost_reports) == 1
    row = report.cost_reports[0]
    assert row.order_id == order["id"]
    assert row.product_name == "Widget A"
    assert row.revenue == pytest.approx(4500)
    assert row.material_cost == pytest.approx(210)
    assert row.cost_per_unit == pytest.approx(2.1)
    assert row.profit == pytest.approx(4290)
    assert row.margin_percent == pytest.approx(95.33, abs=0.01)
    assert report.totals.total_profit == pytest.approx(4290)
    assert report.totals.average_margin_percent == pytest.approx(95.33, abs=0.01)


def test_cost_report_skips_open_orders(db, widget):
    crud_orders.create_order(db, ProductionOrderCreate(product_id=widget["id"], target_qty=10), FACTORY_ID, USER_ID)
    report = crud_cost_reports.get_cost_report(db, FACTORY_ID)
    assert report.cost_reports == []
    assert report.totals.average_margin_percent == 0


def test_zero_output_order_has_zero_ratios(db, widget):
    order = crud_orders.create_order(db, ProductionOrderCreate(product_id=widget["id"], target_qty=10), FACTORY_ID, USER_ID)
    crud_orders.complete_order(db, order["id"], 0, FACTORY_ID, USER_ID)

    row = crud_cost_reports.get_cost_report(db, FACTORY_ID).cost_reports[0]

    assert row.material_cost == 0
    assert row.cost_per_unit == 0
    assert row.revenue == 0
    assert row.margin_percent == 0


def test_dashboard_summary(db, widget):
    first = produce(db, widget["id"], 100)
    crud_orders.create_order(db, ProductionOrderCreate(product_id=widget["id"], target_qty=5), FACTORY_ID, USER_ID)
    crud_downtime.create_downtime_event(
        db,
        DowntimeEventCreate(
            reason="Maintenance", start_time="2024-03-01T08:00:00Z", end_time="2024-03-01T10:30:00Z"
        ),
        FACTORY_ID,
        user_id=USER_ID,
    )

    dashboard = crud_dashboard.get_dashboard(db, FACTORY_ID)
    summary = dashboard["summary"]

    assert summary["total_produced_today"] == pytest.approx(100)
    assert summary["orders_today"] == 1
    assert summary["completed_orders_count"] == 1
    assert summary["total_production_cost"] == pytest.approx(210)
    assert summary["total_downtime_cost"] == pytest.approx(250)
    assert summary["low_stock_items"] == 0
    assert dashboard["recent_orders"][-1]["id"] == first["id"]


def test_recent_orders_newest_first_and_capped(db, widget):
    created = [
        crud_orders.create_order(db, ProductionOrderCreate(product_id=widget["id"], target_qty=1), FACTORY_ID, USER_ID)
        for _ in range(7)
    ]

    recent = crud_dashboard.get_dashboard(db, FACTORY_ID)["recent_orders"]

    assert [o["id"] for o in recent] == [o["id"] for o in reversed(created[-5:])]


def test_dashboard_stock_alerts_include_current_stock(db):
    material = crud_raw_materials.create_raw_material(
        db, RawMaterialCreate(name="Bolts", unit="pcs", reorder_point=20), FACTORY_ID
    )
    crud_inventory.create_transaction(
        db,
        InventoryTransactionCreate(raw_material_id=material["id"], tx_type=TransactionType.PURCHASE, qty=15, unit_cost=1),
        FACTORY_ID,
        user_id=USER_ID,
    )

    dashboard = crud_dashboard.get_dashboard(db, FACTORY_ID)

    assert dashboard["summary"]["low_stock_items"] == 1
    assert dashboard["stock_alerts"][0]["name"] == "Bolts"
    assert dashboard["stock_alerts"][0]["current_stock"] == pytest.approx(15)


def test_export_writes_one_sheet_row_per_completed_order(db, widget):
    produce(db, widget["id"], 100)

    workbook = load_workbook(crud_cost_reports.export_cost_report(db, FACTORY_ID))
    sheet = workbook["Cost Report"]
    rows = list(sheet.iter_rows(values_only=True))

    assert rows[0] == tuple(crud_cost_reports.EXPORT_COLUMNS.values())
    assert len(rows) == 2
    assert rows[1][1] == "Widget A"
