"""
Finance Service - Expenses, the three invoice variants and down-payment invoices
"""
from datetime import date
from typing import Any, Dict, List, Optional
import random
import logging

from sqlalchemy import func

from logistik.models import (
    Expense, Invoice, InvoiceItem, ReimbursementInvoice, ReimbursementInvoiceItem,
    FinalInvoice, FinalInvoiceItem, InvoiceDP, InvoiceDPItem
)
from logistik.services.base import SoftDeleteService, payload_of, to_json_value

logger = logging.getLogger(__name__)

# Cache key of the derived invoice + reimbursement view
MERGED_INVOICES = "invoices-merged"


def generate_invoice_dp_number(today: Optional[date] = None, rng: Optional[random.Random] = None) -> str:
    """DP{yyyy}{MM}-{4 random digits}"""
    today = today or date.today()
    rng = rng or random
    return f"DP{today:%Y%m}-{rng.randint(0, 9999):04d}"


# ==================== EXPENSES ====================

class ExpenseService(SoftDeleteService):
    model = Expense
    entity = "expenses"
    order_by = ("expense_date", "created_at")

    def get_categories(self) -> List[str]:
        """Distinct categories already in use"""
        rows = self.db.query(Expense.category).filter(
            Expense.deleted_at.is_(None)
        ).distinct().order_by(Expense.category).all()
        return [row[0] for row in rows if row[0]]


# ==================== INVOICES ====================

class BaseInvoiceService(SoftDeleteService):
    item_fk = "invoice_id"
    related_entities = (MERGED_INVOICES,)

    def get_items(self, invoice_id: int) -> List[Dict[str, Any]]:
        """Line items of one invoice in entry order"""
        rows = self.db.query(self.item_model).filter(
            self.item_model.invoice_id == invoice_id
        ).order_by(self.item_model.created_at, self.item_model.id).all()
        return [{"description": r.description, "amount": to_json_value(r.amount)} for r in rows]


class InvoiceService(BaseInvoiceService):
    """Primary invoice; stores itemized down payments as JSON"""
    model = Invoice
    entity = "invoices"
    item_model = InvoiceItem

    @staticmethod
    def _normalize_dp_items(values: Dict[str, Any]) -> Dict[str, Any]:
        entries = values.get("dp_items")
        if entries is None:
            return values
        values["dp_items"] = [
            {
                "label": entry.get("label"),
                "amount": to_json_value(entry.get("amount") or 0),
                "date": to_json_value(entry.get("date")),
            }
            for entry in (payload_of(e) for e in entries)
        ]
        return values

    def create(self, data, **extra):
        values = self._normalize_dp_items(payload_of(data, exclude_none=True))
        return super().create(values, **extra)

    def update(self, record_id: int, data):
        values = self._normalize_dp_items(payload_of(data, exclude_unset=True))
        return super().update(record_id, values)


class ReimbursementInvoiceService(BaseInvoiceService):
    model = ReimbursementInvoice
    entity = "invoices_reimbursement"
    item_model = ReimbursementInvoiceItem

    def create(self, data, **extra):
        values = payload_of(data, exclude_none=True)
        values.pop("dp_items", None)
        return super().create(values, **extra)

    def update(self, record_id: int, data):
        values = payload_of(data, exclude_unset=True)
        values.pop("dp_items", None)
        return super().update(record_id, values)


class FinalInvoiceService(ReimbursementInvoiceService):
    model = FinalInvoice
    entity = "invoices_final"
    item_model = FinalInvoiceItem
    related_entities = ()


INVOICE_SERVICES = {
    "invoices": InvoiceService,
    "invoices-reimbursement": ReimbursementInvoiceService,
    "invoices-final": FinalInvoiceService,
}


# ==================== INVOICE DP ====================

class InvoiceDPService(SoftDeleteService):
    model = InvoiceDP
    entity = "invoices_dp"
    item_model = InvoiceDPItem
    item_fk = "invoice_dp_id"

    def prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        if not values.get("invoice_dp_number"):
            values["invoice_dp_number"] = generate_invoice_dp_number()
        return values

    def get_next_part_number(self, invoice_dp_number: str) -> int:
        """Highest part number used by this DP number (deleted parts included) plus one"""
        highest = self.db.query(func.max(InvoiceDP.part_number)).filter(
            InvoiceDP.invoice_dp_number == invoice_dp_number
        ).scalar()
        return (highest or 0) + 1

    def list_by_customer(self, customer_id: int) -> List[Dict[str, Any]]:
        rows = self.live_query().filter(
            InvoiceDP.customer_id == customer_id
        ).order_by(InvoiceDP.part_number).all()
        return [self.to_dict(row) for row in rows]

    def duplicate_as_next_part(self, source_id: int) -> Optional[InvoiceDP]:
        """Copy an invoice DP as a new draft part dated today, items included"""
        source = self.get(source_id)
        if not source:
            return None

        copy = InvoiceDP(
            invoice_dp_number=source.invoice_dp_number,
            invoice_pib_number=source.invoice_pib_number,
            part_number=self.get_next_part_number(source.invoice_dp_number),
            invoice_date=date.today(),
            customer_id=source.customer_id,
            customer_name=source.customer_name,
            customer_address=source.customer_address,
            customer_city=source.customer_city,
            bl_number=source.bl_number,
            description=source.description,
            total_amount=source.total_amount,
            status="draft",
            notes=source.notes,
        )
        self.db.add(copy)
        self.db.flush()
        self._insert_items(copy, [
            {"description": item.description, "amount": item.amount} for item in source.items
        ])

        self.invalidate()
        logger.info(f"Invoice DP {copy.invoice_dp_number} part {copy.part_number} created from #{source_id}")
        return copy
