from datetime import date

import pytest

from logistik.services.document_service import (
    DocumentRenderer, job_order_invoice_filename, quotation_filename, invoice_final_filename
)
from logistik.services.operations_service import JobOrderService
from logistik.services.quotation_service import QuotationService


def test_filenames():
    assert job_order_invoice_filename("penumpukan", "JO-1") == "INVOICE_PENUMPUKAN_JO-1.pdf"
    assert job_order_invoice_filename("behandle", None) == "INVOICE_BEHANDLE.pdf"
    assert quotation_filename("Q202610-0001", "PT Maju Jaya") == "Penawaran_Q202610-0001_PT_Maju_Jaya.pdf"
    assert quotation_filename(None, "  ") == "Penawaran.pdf"
    assert invoice_final_filename("INV-9") == "Invoice_Final_INV-9.pdf"


@pytest.mark.parametrize("invoice_type", ["penumpukan", "do", "behandle"])
def test_job_order_invoice_renders(invoice_type):
    job_order = {
        "job_order_number": "JO202610-0001",
        "customer_name": "PT <Kirim> & Co",
        "eta_kapal": "2026-10-01",
        "notes": "Container 2x40",
    }
    pdf = DocumentRenderer(today=date(2026, 10, 19)).job_order_invoice(job_order, invoice_type)
    assert pdf.startswith(b"%PDF")


def test_unknown_job_order_invoice_type():
    with pytest.raises(ValueError):
        DocumentRenderer().job_order_invoice({}, "gudang")


def test_quotation_renders_with_empty_sections():
    pdf = DocumentRenderer().quotation(
        {"quotation_number": "Q202610-0001", "customer_name": "PT Rate"},
        {"rates": [{"item_no": 1, "description": "Ocean freight", "lcl_rate": 100000}],
         "green_line": [], "red_line": []},
    )
    assert pdf.startswith(b"%PDF")


def test_job_order_pdf_endpoint(client, staff_headers, db):
    job_order = JobOrderService(db).create({"job_order_number": "JO-PDF"})
    db.commit()

    response = client.get(f"/api/v1/job-orders/{job_order.id}/pdf/do", headers=staff_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "INVOICE_DO_JO-PDF.pdf" in response.headers["content-disposition"]

    bad_type = client.get(f"/api/v1/job-orders/{job_order.id}/pdf/gudang", headers=staff_headers)
    assert bad_type.status_code == 422
    assert client.get("/api/v1/job-orders/999/pdf/do", headers=staff_headers).status_code == 404


def test_quotation_pdf_endpoint(client, staff_headers, db):
    quotation = QuotationService(db).create({
        "quotation_number": "Q202610-0009",
        "customer_name": "PT Kutip",
        "items": [{"section": "red_line", "description": "Behandle"}],
    })
    db.commit()

    response = client.get(f"/api/v1/quotations/{quotation.id}/pdf", headers=staff_headers)
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert "Penawaran_Q202610-0009_PT_Kutip.pdf" in response.headers["content-disposition"]
