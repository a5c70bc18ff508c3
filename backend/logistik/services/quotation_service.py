"""
Quotation Service - Price quotations with rate sections
"""
from datetime import date
from typing import Any, Dict, List, Optional

from logistik.models import Quotation, QuotationItem
from logistik.services.base import SoftDeleteService, payload_of

SECTIONS = ("rates", "green_line", "red_line")


class QuotationService(SoftDeleteService):
    model = Quotation
    entity = "quotations"
    item_model = QuotationItem
    item_fk = "quotation_id"

    def generate_number(self, today: Optional[date] = None) -> str:
        """
        Q{yyyy}{MM}-{NNNN} where NNNN is the total row count plus one.

        Soft-deleted rows are counted too. The sequence is not safe under
        concurrent creation or permanent deletion.
        """
        today = today or date.today()
        count = self.db.query(Quotation).count()
        return f"Q{today:%Y%m}-{count + 1:04d}"

    def prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        if not values.get("quotation_number"):
            values["quotation_number"] = self.generate_number()
        return values

    @staticmethod
    def _number_items(items: List[Any]) -> List[Dict[str, Any]]:
        # item_no restarts at 1 within each section when not supplied
        counters = {section: 0 for section in SECTIONS}
        numbered = []
        for item in items:
            values = payload_of(item)
            section = getattr(values.get("section"), "value", values.get("section")) or "rates"
            counters[section] = counters.get(section, 0) + 1
            values["section"] = section
            if not values.get("item_no"):
                values["item_no"] = counters[section]
            numbered.append(values)
        return numbered

    def create(self, data, **extra):
        values = payload_of(data, exclude_none=True)
        values["items"] = self._number_items(values.get("items") or [])
        return super().create(values, **extra)

    def update(self, record_id: int, data):
        values = payload_of(data, exclude_unset=True)
        if values.get("items") is not None:
            values["items"] = self._number_items(values["items"])
        return super().update(record_id, values)

    @staticmethod
    def items_by_section(quotation: Dict[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
        grouped = {section: [] for section in SECTIONS}
        for item in quotation.get("items", []):
            grouped.setdefault(item["section"], []).append(item)
        for section_items in grouped.values():
            section_items.sort(key=lambda i: i.get("item_no") or 0)
        return grouped
