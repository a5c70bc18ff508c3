"""
Merged Invoice Service - One reporting row per invoice number

Joins the primary invoice table and the reimbursement invoice table on the
trimmed invoice number. Either side may be missing; the missing side counts
as zero. Down payments come from the primary invoice only.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Union
from sqlalchemy.orm import Session

from logistik.core.cache import query_cache
from logistik.models import Invoice, InvoiceItem, ReimbursementInvoice, ReimbursementInvoiceItem
from logistik.services.base import serialize, to_json_value
from logistik.services.finance_service import MERGED_INVOICES

DESCRIPTIVE_FIELDS = (
    "customer_address", "customer_city", "customer_id", "no_aju", "bl_number",
    "party", "flight_vessel", "origin", "no_pen", "no_invoice", "description",
    "delivery_date",
)


# ==================== DOWN PAYMENTS ====================

@dataclass
class LegacyScalarDP:
    """Single down payment stored in the invoice's down_payment column"""
    amount: float
    date: Optional[str] = None

    def entries(self) -> List[Dict[str, Any]]:
        return [{"label": "DP 1", "amount": self.amount, "date": self.date}]


@dataclass
class ItemizedDP:
    """Down payments stored as the invoice's dp_items JSON array"""
    items: List[Dict[str, Any]] = field(default_factory=list)
    default_date: Optional[str] = None

    def entries(self) -> List[Dict[str, Any]]:
        return [
            {
                "label": item.get("label") or f"DP {index}",
                "amount": _number(item.get("amount")),
                "date": item.get("date") or self.default_date,
            }
            for index, item in enumerate(self.items, start=1)
        ]


DownPayment = Union[LegacyScalarDP, ItemizedDP]


def _number(value) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def resolve_down_payment(invoice: Optional[Dict[str, Any]]) -> Optional[DownPayment]:
    """Pick the down-payment shape of a primary invoice row, or None if it has none"""
    if not invoice:
        return None
    invoice_date = invoice.get("invoice_date")
    dp_items = invoice.get("dp_items")
    if isinstance(dp_items, list) and dp_items:
        return ItemizedDP(items=dp_items, default_date=invoice_date)
    down_payment = _number(invoice.get("down_payment"))
    if down_payment > 0:
        return LegacyScalarDP(amount=down_payment, date=invoice_date)
    return None


def merge_invoice_rows(invoice_number: str, reimbursement: Optional[Dict[str, Any]],
                       invoice: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Build one merged entry; the reimbursement row wins for descriptive fields"""
    source = reimbursement or invoice
    reimbursement_total = _number(reimbursement.get("total_amount")) if reimbursement else 0.0
    invoice_total = _number(invoice.get("total_amount")) if invoice else 0.0
    combined_total = reimbursement_total + invoice_total

    down_payment = resolve_down_payment(invoice)
    dp_items = down_payment.entries() if down_payment else []
    dp_total = sum(entry["amount"] for entry in dp_items)

    entry = {
        "invoice_number": invoice_number,
        "customer_name": source.get("customer_name") or "-",
        "invoice_date": source.get("invoice_date") or source.get("created_at"),
    }
    for name in DESCRIPTIVE_FIELDS:
        entry[name] = source.get(name) or None
    entry.update({
        "reimbursement_id": reimbursement["id"] if reimbursement else None,
        "reimbursement_total": reimbursement_total,
        "invoice_id": invoice["id"] if invoice else None,
        "invoice_total": invoice_total,
        "combined_total": combined_total,
        "down_payment": dp_total,
        "remaining_amount": combined_total - dp_total,
        "dp_items": dp_items,
    })
    return entry


def _index_by_number(rows: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    indexed = {}
    for row in rows:
        key = (row.get("invoice_number") or "").strip()
        if key:
            indexed[key] = row
    return indexed


# ==================== SERVICE ====================

class MergedInvoiceService:
    def __init__(self, db: Session):
        self.db = db

    def _live_rows(self, model) -> List[Dict[str, Any]]:
        rows = self.db.query(model).filter(
            model.deleted_at.is_(None)
        ).order_by(model.created_at.desc(), model.id.desc()).all()
        return [serialize(row) for row in rows]

    def list(self) -> List[Dict[str, Any]]:
        """All merged entries, reimbursement numbers first"""
        cached = query_cache.get(MERGED_INVOICES)
        if cached is not None:
            return cached

        reimbursements = _index_by_number(self._live_rows(ReimbursementInvoice))
        invoices = _index_by_number(self._live_rows(Invoice))

        numbers = list(reimbursements)
        numbers += [number for number in invoices if number not in reimbursements]

        result = [
            merge_invoice_rows(number, reimbursements.get(number), invoices.get(number))
            for number in numbers
        ]
        query_cache.set(MERGED_INVOICES, result)
        return result

    def get(self, invoice_number: str) -> Optional[Dict[str, Any]]:
        invoice_number = invoice_number.strip()
        return next((e for e in self.list() if e["invoice_number"] == invoice_number), None)

    def _items(self, item_model, invoice_id: int) -> List[Dict[str, Any]]:
        rows = self.db.query(item_model).filter(
            item_model.invoice_id == invoice_id
        ).order_by(item_model.created_at, item_model.id).all()
        return [{"description": r.description, "amount": _number(r.amount)} for r in rows]

    def get_detailed_items(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        """
        Line items of both sides, prefixed by their origin.

        A side without persisted items but with a non-zero total contributes
        one placeholder line carrying that total.
        """
        items = []
        sides = (
            ("reimbursement_id", "reimbursement_total", ReimbursementInvoiceItem,
             "Reimbursement - ", "Invoice Reimbursement"),
            ("invoice_id", "invoice_total", InvoiceItem, "Invoice - ", "Invoice"),
        )
        for id_key, total_key, item_model, prefix, placeholder in sides:
            if not entry.get(id_key):
                continue
            side_items = self._items(item_model, entry[id_key])
            if side_items:
                items.extend(
                    {"description": f"{prefix}{item['description']}", "amount": item["amount"]}
                    for item in side_items
                )
            elif entry.get(total_key):
                items.append({"description": placeholder, "amount": entry[total_key]})

        return {"items": items, "dp_items": entry.get("dp_items", [])}

    def summary(self) -> Dict[str, Any]:
        entries = self.list()
        return {
            "count": len(entries),
            "combined_total": sum(e["combined_total"] for e in entries),
            "down_payment": sum(e["down_payment"] for e in entries),
            "remaining_amount": sum(e["remaining_amount"] for e in entries),
            "as_of": to_json_value(date.today()),
        }
