import random
import re
from datetime import date

from logistik.services.finance_service import InvoiceDPService, generate_invoice_dp_number
from logistik.services.operations_service import JobOrderService, generate_job_order_number
from logistik.services.quotation_service import QuotationService


def test_generated_numbers_have_the_expected_shape():
    today = date(2026, 10, 19)
    assert re.fullmatch(r"JO202610-\d{4}", generate_job_order_number(today))
    assert re.fullmatch(r"DP202610-\d{4}", generate_invoice_dp_number(today))
    assert generate_job_order_number(today, random.Random(7)) == generate_job_order_number(today, random.Random(7))


def test_job_order_number_is_generated_when_omitted(db):
    job_order = JobOrderService(db).create({"customer_name": "PT Kapal"})
    db.commit()
    assert job_order.job_order_number.startswith("JO")

    explicit = JobOrderService(db).create({"job_order_number": "JO-MANUAL"})
    assert explicit.job_order_number == "JO-MANUAL"


def test_quotation_number_counts_deleted_rows(db):
    service = QuotationService(db)
    today = date(2026, 10, 19)
    assert service.generate_number(today) == "Q202610-0001"

    first = service.create({"quotation_number": service.generate_number(today), "customer_name": "PT A"})
    db.commit()
    service.delete(first.id)
    db.commit()
    assert service.generate_number(today) == "Q202610-0002"


def test_quotation_items_are_numbered_per_section(db):
    quotation = QuotationService(db).create({
        "customer_name": "PT Rate",
        "items": [
            {"section": "rates", "description": "Ocean freight", "lcl_rate": 100000},
            {"section": "green_line", "description": "Handling"},
            {"section": "rates", "description": "THC"},
        ],
    })
    db.commit()

    data = QuotationService(db).to_dict(quotation)
    assert data["quotation_number"].startswith("Q")
    grouped = QuotationService.items_by_section(data)
    assert [(i["description"], i["item_no"]) for i in grouped["rates"]] == [("Ocean freight", 1), ("THC", 2)]
    assert [(i["description"], i["item_no"]) for i in grouped["green_line"]] == [("Handling", 1)]
    assert grouped["red_line"] == []


def test_invoice_dp_parts(db):
    service = InvoiceDPService(db)
    source = service.create({
        "invoice_dp_number": "DP202610-0042",
        "customer_id": None,
        "customer_name": "PT Bagian",
        "total_amount": 750000,
        "status": "Lunas",
        "items": [{"description": "DP Trucking", "amount": 750000}],
    })
    db.commit()
    assert service.get_next_part_number("DP202610-0042") == 2

    copy = service.duplicate_as_next_part(source.id)
    db.commit()
    assert copy.part_number == 2
    assert copy.status == "draft"
    assert copy.invoice_date == date.today()
    assert [item.description for item in copy.items] == ["DP Trucking"]

    # Deleted parts still reserve their number
    service.delete(copy.id)
    db.commit()
    assert service.get_next_part_number("DP202610-0042") == 3
    assert service.duplicate_as_next_part(9999) is None


def test_next_number_endpoints(client, staff_headers):
    response = client.get("/api/v1/quotations/next-number", headers=staff_headers)
    assert response.status_code == 200
    assert re.fullmatch(r"Q\d{6}-0001", response.json()["quotation_number"])

    part = client.get("/api/v1/invoice-dp/next-part", params={"number": "DP202610-0001"}, headers=staff_headers)
    assert part.json() == {"invoice_dp_number": "DP202610-0001", "part_number": 1}
