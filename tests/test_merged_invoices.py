from datetime import date

from logistik.services.finance_service import InvoiceService, ReimbursementInvoiceService
from logistik.services.merged_invoice_service import (
    MergedInvoiceService, ItemizedDP, LegacyScalarDP, resolve_down_payment
)


def test_invoice_only_entry_uses_legacy_down_payment(db):
    InvoiceService(db).create({
        "invoice_number": "INV-001",
        "customer_name": "PT Maju",
        "invoice_date": date(2026, 10, 1),
        "total_amount": 1000000,
        "down_payment": 200000,
    })
    db.commit()

    entry = MergedInvoiceService(db).get("INV-001")
    assert entry["invoice_total"] == 1000000
    assert entry["reimbursement_total"] == 0
    assert entry["combined_total"] == 1000000
    assert entry["down_payment"] == 200000
    assert entry["remaining_amount"] == 800000
    assert entry["dp_items"] == [{"label": "DP 1", "amount": 200000.0, "date": "2026-10-01"}]
    assert entry["reimbursement_id"] is None


def test_reimbursement_only_entry_has_zero_invoice_side(db):
    ReimbursementInvoiceService(db).create({
        "invoice_number": "INV-002", "customer_name": "PT Laut", "total_amount": 350000,
    })
    db.commit()

    entries = MergedInvoiceService(db).list()
    assert len(entries) == 1
    entry = entries[0]
    assert entry["invoice_total"] == 0
    assert entry["combined_total"] == 350000
    assert entry["down_payment"] == 0
    assert entry["remaining_amount"] == 350000


def test_both_sides_merge_and_reimbursement_wins_descriptive_fields(db):
    InvoiceService(db).create({
        "invoice_number": "INV-003",
        "customer_name": "Nama Invoice",
        "bl_number": "BL-INV",
        "total_amount": 1000000,
        "dp_items": [
            {"amount": 100000, "date": date(2026, 9, 1)},
            {"label": "Pelunasan awal", "amount": 50000},
        ],
    })
    ReimbursementInvoiceService(db).create({
        "invoice_number": "  INV-003 ",
        "customer_name": "Nama Reimbursement",
        "total_amount": 500000,
    })
    db.commit()

    entries = MergedInvoiceService(db).list()
    assert len(entries) == 1
    entry = entries[0]
    assert entry["invoice_number"] == "INV-003"
    assert entry["customer_name"] == "Nama Reimbursement"
    # Missing on the reimbursement row, so None rather than the invoice's value
    assert entry["bl_number"] is None
    assert entry["combined_total"] == 1500000
    assert entry["down_payment"] == 150000
    assert entry["remaining_amount"] == 1350000
    assert [dp["label"] for dp in entry["dp_items"]] == ["DP 1", "Pelunasan awal"]


def test_soft_deleted_rows_leave_the_view(db):
    service = InvoiceService(db)
    invoice = service.create({"invoice_number": "INV-004", "total_amount": 10})
    db.commit()
    assert MergedInvoiceService(db).get("INV-004") is not None

    service.delete(invoice.id)
    db.commit()
    assert MergedInvoiceService(db).get("INV-004") is None


def test_detailed_items_prefix_and_placeholder(db):
    InvoiceService(db).create({
        "invoice_number": "INV-005",
        "total_amount": 300000,
        "items": [
            {"description": "Trucking", "amount": 200000},
            {"description": "Handling", "amount": 100000},
        ],
    })
    ReimbursementInvoiceService(db).create({"invoice_number": "INV-005", "total_amount": 75000})
    db.commit()

    service = MergedInvoiceService(db)
    detailed = service.get_detailed_items(service.get("INV-005"))
    assert detailed["items"] == [
        {"description": "Invoice Reimbursement", "amount": 75000},
        {"description": "Invoice - Trucking", "amount": 200000.0},
        {"description": "Invoice - Handling", "amount": 100000.0},
    ]


def test_no_placeholder_for_zero_total(db):
    ReimbursementInvoiceService(db).create({"invoice_number": "INV-006", "total_amount": 0})
    db.commit()

    service = MergedInvoiceService(db)
    assert service.get_detailed_items(service.get("INV-006"))["items"] == []


def test_resolve_down_payment_shapes():
    assert resolve_down_payment(None) is None
    assert resolve_down_payment({"down_payment": 0, "dp_items": []}) is None
    assert isinstance(resolve_down_payment({"down_payment": 5}), LegacyScalarDP)
    assert isinstance(resolve_down_payment({"dp_items": [{"amount": 1}], "down_payment": 5}), ItemizedDP)


def test_merged_endpoints(client, staff_headers, db):
    InvoiceService(db).create({"invoice_number": "INV/2026/001", "total_amount": 1000, "down_payment": 400})
    db.commit()

    listing = client.get("/api/v1/invoices-merged", headers=staff_headers)
    assert listing.status_code == 200
    assert listing.json()[0]["invoice_number"] == "INV/2026/001"

    entry = client.get("/api/v1/invoices-merged/entry", params={"invoice_number": "INV/2026/001"},
                       headers=staff_headers)
    assert entry.status_code == 200
    assert entry.json()["remaining_amount"] == 600

    summary = client.get("/api/v1/invoices-merged/summary", headers=staff_headers).json()
    assert summary["count"] == 1
    assert summary["remaining_amount"] == 600

    missing = client.get("/api/v1/invoices-merged/entry", params={"invoice_number": "NOPE"},
                         headers=staff_headers)
    assert missing.status_code == 404


def test_invoice_final_pdf_and_excel(client, staff_headers, db):
    InvoiceService(db).create({"invoice_number": "INV-PDF", "customer_name": "PT Cetak", "total_amount": 2500000})
    db.commit()

    pdf = client.get("/api/v1/invoices-merged/pdf", params={"invoice_number": "INV-PDF"}, headers=staff_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert "Invoice_Final_INV-PDF.pdf" in pdf.headers["content-disposition"]
    assert pdf.content.startswith(b"%PDF")

    excel = client.get("/api/v1/invoices-merged/export/excel", headers=staff_headers)
    assert excel.status_code == 200
    assert excel.content[:2] == b"PK"
