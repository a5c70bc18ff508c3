from datetime import date, datetime
from io import BytesIO

from openpyxl import load_workbook

from logistik.services.dashboard_service import DashboardService
from logistik.services.finance_service import ExpenseService, InvoiceService, InvoiceDPService
from logistik.services.master_service import CustomerService, TruckService
from logistik.services.operations_service import JobOrderService, TrackingService, WarehouseService
from logistik.services.reports_service import ReportsService, aging_bucket, months_back, shipment_group

TODAY = date(2026, 10, 19)


def seed_finance(db):
    invoices = InvoiceService(db)
    invoices.create({"invoice_number": "INV-A", "invoice_date": date(2026, 10, 5), "total_amount": 1000000,
                     "remaining_amount": 1000000, "status": "Belum Lunas", "customer_name": "PT A"})
    invoices.create({"invoice_number": "INV-B", "invoice_date": date(2026, 7, 1), "total_amount": 400000,
                     "remaining_amount": 150000, "status": "Belum Lunas", "customer_name": "PT B"})
    invoices.create({"invoice_number": "INV-C", "invoice_date": date(2026, 9, 10), "total_amount": 250000,
                     "remaining_amount": 0, "status": "Lunas"})
    InvoiceDPService(db).create({"invoice_dp_number": "DP-1", "invoice_date": date(2026, 10, 2),
                                 "total_amount": 300000, "status": "Lunas"})
    InvoiceDPService(db).create({"invoice_dp_number": "DP-2", "invoice_date": date(2026, 10, 3),
                                 "total_amount": 999999, "status": "draft"})
    ExpenseService(db).create({"category": "Solar", "amount": 300000, "expense_date": date(2026, 10, 7)})
    db.commit()


def test_aging_bucket_edges():
    assert aging_bucket(0) == "current"
    assert aging_bucket(30) == "current"
    assert aging_bucket(31) == "30days"
    assert aging_bucket(90) == "60days"
    assert aging_bucket(120) == "90days"
    assert aging_bucket(121) == "over90"


def test_months_back_crosses_the_year():
    assert months_back(date(2026, 2, 14), 3) == [date(2025, 12, 1), date(2026, 1, 1), date(2026, 2, 1)]


def test_outstanding_aging(db):
    seed_finance(db)
    report = ReportsService(db, today=TODAY).outstanding_aging()

    assert report["count"] == 2
    assert [row["invoice_number"] for row in report["invoices"]] == ["INV-B", "INV-A"]
    assert report["invoices"][0]["days_overdue"] == 110
    assert report["buckets"]["90days"] == 150000
    assert report["buckets"]["current"] == 1000000
    assert report["total"] == 1150000


def test_profit_and_loss(db):
    seed_finance(db)
    report = ReportsService(db, today=TODAY).profit_and_loss("3months")

    assert report["period"] == "3months"
    assert [m["month"] for m in report["months"]] == ["Agu 2026", "Sep 2026", "Okt 2026"]
    october = report["months"][-1]
    # Paid DP invoices count as revenue, drafts do not
    assert october["revenue"] == 1300000
    assert october["expenses"] == 300000
    assert october["profit"] == 1000000
    assert october["margin"] == 76.9
    assert report["totals"]["revenue"] == 1550000


def test_unknown_period_defaults_to_six_months(db):
    report = ReportsService(db, today=TODAY).profit_and_loss("forever")
    assert report["period"] == "6months"
    assert len(report["months"]) == 6
    assert report["totals"]["margin"] == 0


def test_merged_invoice_workbook(db):
    seed_finance(db)
    workbook = load_workbook(BytesIO(ReportsService(db, today=TODAY).merged_invoices_workbook().getvalue()))
    sheet = workbook["Laporan Invoice"]

    assert [cell.value for cell in sheet[4]] == [
        "No. Invoice", "Tanggal", "Customer", "Reimbursement", "Invoice", "Total", "DP", "Sisa"
    ]
    totals_row = sheet.max_row
    assert sheet.cell(row=totals_row, column=1).value == "TOTAL"
    assert sheet.cell(row=totals_row, column=6).value == 1650000


def test_dashboard_stats_ignore_deleted_rows(db):
    customers = CustomerService(db)
    customers.create({"company_name": "PT Tetap"})
    customers.delete(customers.create({"company_name": "PT Hilang"}).id)
    TruckService(db).create({"plate_number": "B 1 A", "status": "Tersedia"})
    JobOrderService(db).create({"job_order_number": "JO-1", "status": "Proses"})
    JobOrderService(db).create({"job_order_number": "JO-2", "status": "Selesai"})
    seed_finance(db)

    stats = DashboardService(db, today=TODAY).stats()
    assert stats["totalCustomers"] == 1
    assert stats["activeOrders"] == 1
    assert stats["inProgressOrders"] == 1
    assert stats["completedOrders"] == 1
    assert stats["outstandingCount"] == 2
    assert stats["outstandingAmount"] == 1150000
    assert stats["paidInvoiceDPAmount"] == 300000
    assert stats["availableTrucks"] == 1


def test_dashboard_finance_chart(db):
    seed_finance(db)
    chart = DashboardService(db, today=TODAY).finance_chart()
    assert len(chart) == 12
    assert chart[9] == {"month": "Okt", "pendapatan": 1000000.0, "pengeluaran": 300000.0, "laba": 700000.0}


def test_dashboard_endpoints(client, staff_headers, db):
    seed_finance(db)
    charts = client.get("/api/v1/dashboard/charts", headers=staff_headers).json()
    assert set(charts) == {"shipments", "finance", "trucks"}

    outstanding = client.get("/api/v1/dashboard/outstanding-invoices", headers=staff_headers).json()
    assert [row["invoice_number"] for row in outstanding] == ["INV-B", "INV-A"]

    report = client.get("/api/v1/reports/profit-loss", params={"period": "12months"}, headers=staff_headers)
    assert len(report.json()["months"]) == 12


def test_payments_report(db):
    invoices = InvoiceService(db)
    invoices.create({"invoice_number": "INV-P1", "invoice_date": date(2026, 10, 5),
                     "down_payment": 200000, "customer_name": "PT Alpha"})
    invoices.create({"invoice_number": "INV-P2", "invoice_date": date(2026, 9, 1), "down_payment": 0})
    dps = InvoiceDPService(db)
    dps.create({"invoice_dp_number": "DP-9", "invoice_date": date(2026, 9, 20), "total_amount": 300000,
                "status": "Lunas", "customer_name": "PT Beta"})
    dps.create({"invoice_dp_number": "DP-10", "invoice_date": date(2026, 9, 21), "total_amount": 50000})
    db.commit()
    service = ReportsService(db, today=TODAY)

    report = service.payments()
    assert [p["reference"] for p in report["payments"]] == ["INV-P1", "DP-9"]
    assert report["payments"][0]["date"] == "2026-10-05"
    assert report["total_amount"] == 500000
    assert report["count_by_type"] == {"Invoice DP": 1, "Invoice DP Khusus": 1}
    assert report["months"] == ["2026-10", "2026-09"]

    assert [p["reference"] for p in service.payments(month="2026-09")["payments"]] == ["DP-9"]
    assert [p["reference"] for p in service.payments(payment_type="Invoice DP")["payments"]] == ["INV-P1"]
    assert [p["reference"] for p in service.payments(search="beta")["payments"]] == ["DP-9"]


def test_expenses_report(db):
    expenses = ExpenseService(db)
    expenses.create({"category": "Biaya Gudang", "amount": 100000, "expense_date": date(2026, 10, 1),
                     "description": "Sewa rak"})
    expenses.create({"category": "Solar", "amount": 50000, "expense_date": date(2026, 10, 2)})
    expenses.create({"category": "Biaya Truk", "amount": 70000, "expense_date": date(2026, 9, 2)})
    db.commit()
    service = ReportsService(db, today=TODAY)

    report = service.expenses()
    assert report["count"] == 3
    assert report["total_amount"] == 220000
    # Standard categories first, then the rest alphabetically
    assert report["by_category"] == [
        {"category": "Biaya Truk", "amount": 70000},
        {"category": "Biaya Gudang", "amount": 100000},
        {"category": "Solar", "amount": 50000},
    ]
    assert report["months"] == ["2026-10", "2026-09"]

    october = service.expenses(month="2026-10")
    assert october["total_amount"] == 150000
    assert service.expenses(category="Solar")["count"] == 1
    assert [e["description"] for e in service.expenses(search="rak")["expenses"]] == ["Sewa rak"]


def test_shipment_groups():
    assert shipment_group("Selesai") == "Selesai"
    assert shipment_group("Proses") == "Dalam Proses"
    assert shipment_group("Cancelled") == "Dibatalkan"
    assert shipment_group("Baru") == "Pending"
    assert shipment_group(None) == "Pending"


def test_shipments_report(db):
    orders = JobOrderService(db)
    orders.create({"job_order_number": "JO-S1", "status": "Selesai", "customer_name": "PT Alpha",
                   "created_at": datetime(2026, 9, 3, 8, 0)})
    orders.create({"job_order_number": "JO-S2", "status": "Proses", "bl_number": "BL-77",
                   "created_at": datetime(2026, 10, 4, 8, 0)})
    orders.create({"job_order_number": "JO-S3", "status": "Baru", "created_at": datetime(2026, 10, 5, 8, 0)})
    db.commit()
    service = ReportsService(db, today=TODAY)

    report = service.shipments()
    assert [o["job_order_number"] for o in report["orders"]] == ["JO-S3", "JO-S2", "JO-S1"]
    assert report["by_status"] == {"Selesai": 1, "Dalam Proses": 1, "Dibatalkan": 0, "Pending": 1}
    assert report["completion_rate"] == 33.3
    assert report["monthly"] == [
        {"month": "Sep 2026", "total": 1, "selesai": 1},
        {"month": "Okt 2026", "total": 2, "selesai": 0},
    ]

    assert service.shipments(month="2026-10")["count"] == 2
    assert service.shipments(status="Dalam Proses")["orders"][0]["job_order_number"] == "JO-S2"
    assert service.shipments(status="Baru")["count"] == 1
    assert service.shipments(search="bl-77")["count"] == 1


def test_truck_utilization_report(db):
    trucks = TruckService(db)
    trucks.create({"plate_number": "B 1 A", "truck_type": "Trailer", "status": "Dalam Perjalanan"})
    trucks.create({"plate_number": "B 2 A", "truck_type": "Trailer", "status": "Tersedia"})
    trucks.create({"plate_number": "B 3 A", "truck_type": "Engkel", "status": "Maintenance"})
    trucks.create({"plate_number": "B 4 A", "status": "Rusak"})
    db.commit()

    report = ReportsService(db, today=TODAY).truck_utilization()
    assert report["total"] == 4
    assert report["by_status"] == {"Tersedia": 1, "Dalam Perjalanan": 1, "Maintenance": 1, "Tidak Aktif": 1}
    assert report["utilization_rate"] == 25.0
    assert report["availability_rate"] == 50.0
    assert report["by_type"][0] == {"truck_type": "Trailer", "count": 2}
    assert {"truck_type": "Lainnya", "count": 1} in report["by_type"]


def test_warehouse_occupancy_report(db):
    stock = WarehouseService(db)
    stock.create({"customer_name": "PT Alpha", "description": "Kardus", "quantity": 10, "cbm": 100,
                  "unit_price": 5000, "handling_in_out": "IN"})
    stock.create({"customer_name": "PT Beta", "quantity": 4, "cbm": 150, "unit_price": 1000,
                  "handling_in_out": "OUT"})
    stock.create({"customer_name": "PT Alpha", "quantity": 1, "cbm": 250})
    db.commit()
    service = ReportsService(db, today=TODAY)

    report = service.warehouse_occupancy()
    assert report["total_cbm"] == 500
    assert report["total_items"] == 15
    assert report["total_value"] == 54000
    assert report["handling"] == {"IN": 1, "OUT": 1, "STORAGE": 1}
    assert report["usage_percentage"] == 10.0
    assert report["top_customers"][0] == {"customer_name": "PT Alpha", "cbm": 350}

    narrowed = service.warehouse_occupancy(handling="IN")
    assert narrowed["count"] == 1
    assert narrowed["items"][0]["value"] == 50000
    # Figures still cover all stock
    assert narrowed["total_cbm"] == 500
    assert service.warehouse_occupancy(search="kardus")["count"] == 1


def test_service_performance_report(db):
    orders = JobOrderService(db)
    orders.create({"job_order_number": "JO-K1", "status": "Selesai", "customer_id": None,
                   "customer_name": "PT Alpha", "created_at": datetime(2026, 10, 1)})
    orders.create({"job_order_number": "JO-K2", "status": "Proses", "customer_name": "PT Alpha",
                   "created_at": datetime(2026, 10, 2)})
    orders.create({"job_order_number": "JO-K3", "status": "Selesai", "customer_name": "PT Beta",
                   "created_at": datetime(2026, 8, 2)})
    trackings = TrackingService(db)
    trackings.create({"container_number": "TCKU1", "status": "Selesai"})
    trackings.create({"container_number": "TCKU2", "status": "Proses"})
    db.commit()

    report = ReportsService(db, today=TODAY).service_performance()
    assert report["total_orders"] == 3
    assert report["completion_rate"] == 66.7
    assert report["tracking_completion_rate"] == 50.0
    assert report["active_customers"] == 2
    assert [m["month"] for m in report["monthly"]] == ["Mei 2026", "Jun 2026", "Jul 2026",
                                                      "Agu 2026", "Sep 2026", "Okt 2026"]
    assert report["monthly"][-1] == {"month": "Okt 2026", "total": 2, "selesai": 1, "rate": 50.0}


def test_report_endpoints(client, staff_headers, db):
    seed_finance(db)
    for path in ("payments", "expenses", "shipments", "truck-utilization",
                 "warehouse-occupancy", "service-performance"):
        assert client.get(f"/api/v1/reports/{path}", headers=staff_headers).status_code == 200

    payments = client.get("/api/v1/reports/payments", params={"type": "Invoice DP Khusus"},
                          headers=staff_headers).json()
    assert [p["reference"] for p in payments["payments"]] == ["DP-1"]

    shipments = client.get("/api/v1/reports/shipments", params={"status": "Selesai"}, headers=staff_headers)
    assert shipments.json()["count"] == 0
