"""
Recycle Bin Service - Soft-deleted rows across every soft-deletable table

Each table is described once by a TableDescriptor that binds its label, the
display-name and description extractors and the cache keys to invalidate on
restore. Adding a table means adding one descriptor.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from logistik.core.cache import query_cache, RECYCLE_BIN
from logistik.models import (
    Customer, Vendor, Truck, JobOrder, Invoice, InvoiceDP, Expense,
    Quotation, Tracking, Warehouse, ReimbursementInvoice, FinalInvoice
)
from logistik.services.audit_service import AuditService, AuditAction
from logistik.services.finance_service import MERGED_INVOICES
from logistik.services.formatting import format_number_id

logger = logging.getLogger(__name__)


def _text(*values) -> str:
    """First non-empty value, or '-'"""
    return next((v for v in values if v), "-")


def _amount_line(prefix: Optional[str], amount) -> str:
    return f"{prefix or ''} - Rp {format_number_id(amount or 0)}"


@dataclass(frozen=True)
class TableDescriptor:
    table_name: str
    label: str
    model: Any
    display_name: Callable[[Any], str]
    description: Callable[[Any], str]
    cache_keys: Tuple[str, ...] = ()


TABLE_DESCRIPTORS: Tuple[TableDescriptor, ...] = (
    TableDescriptor(
        "customers", "Pelanggan", Customer,
        display_name=lambda r: _text(r.company_name),
        description=lambda r: _text(r.city, r.email),
        cache_keys=("customers",),
    ),
    TableDescriptor(
        "vendors", "Vendor", Vendor,
        display_name=lambda r: _text(r.company_name),
        description=lambda r: _text(r.city, r.services),
        cache_keys=("vendors",),
    ),
    TableDescriptor(
        "trucks", "Truk", Truck,
        display_name=lambda r: f"{r.plate_number or ''} - {r.truck_type or ''}",
        description=lambda r: _text(r.driver_name),
        cache_keys=("trucks",),
    ),
    TableDescriptor(
        "job_orders", "Job Order", JobOrder,
        display_name=lambda r: _text(r.job_order_number),
        description=lambda r: _text(r.customer_name),
        cache_keys=("job_orders",),
    ),
    TableDescriptor(
        "invoices", "Invoice", Invoice,
        display_name=lambda r: _text(r.invoice_number),
        description=lambda r: _amount_line(r.customer_name, r.total_amount),
        cache_keys=("invoices", MERGED_INVOICES),
    ),
    TableDescriptor(
        "invoices_reimbursement", "Invoice Reimbursement", ReimbursementInvoice,
        display_name=lambda r: _text(r.invoice_number),
        description=lambda r: _amount_line(r.customer_name, r.total_amount),
        cache_keys=("invoices_reimbursement", MERGED_INVOICES),
    ),
    TableDescriptor(
        "invoices_final", "Invoice Final", FinalInvoice,
        display_name=lambda r: _text(r.invoice_number),
        description=lambda r: _amount_line(r.customer_name, r.total_amount),
        cache_keys=("invoices_final",),
    ),
    TableDescriptor(
        "invoice_dp", "Invoice DP", InvoiceDP,
        display_name=lambda r: _text(r.invoice_dp_number),
        description=lambda r: _amount_line(r.customer_name, r.total_amount),
        cache_keys=("invoice_dp", "invoices_dp"),
    ),
    TableDescriptor(
        "expenses", "Pengeluaran", Expense,
        display_name=lambda r: _text(r.description),
        description=lambda r: _amount_line(r.category, r.amount),
        cache_keys=("expenses",),
    ),
    TableDescriptor(
        "quotations", "Penawaran", Quotation,
        display_name=lambda r: _text(r.quotation_number),
        description=lambda r: _text(r.customer_name),
        cache_keys=("quotations",),
    ),
    TableDescriptor(
        "trackings", "Tracking", Tracking,
        display_name=lambda r: _text(r.company_name),
        description=lambda r: _text(r.container_number, r.destination),
        cache_keys=("trackings",),
    ),
    TableDescriptor(
        "warehouses", "Gudang", Warehouse,
        display_name=lambda r: _text(r.customer_name),
        description=lambda r: _text(r.description),
        cache_keys=("warehouses",),
    ),
)

DESCRIPTORS_BY_TABLE: Dict[str, TableDescriptor] = {d.table_name: d for d in TABLE_DESCRIPTORS}


def table_label(table_name: str) -> str:
    descriptor = DESCRIPTORS_BY_TABLE.get(table_name)
    return descriptor.label if descriptor else table_name


class RecycleBinService:
    def __init__(self, db: Session):
        self.db = db

    def _descriptor(self, table_name: str) -> TableDescriptor:
        descriptor = DESCRIPTORS_BY_TABLE.get(table_name)
        if descriptor is None:
            raise ValueError(f"Tabel tidak dikenal: {table_name}")
        return descriptor

    def _to_entry(self, descriptor: TableDescriptor, row) -> Dict[str, Any]:
        return {
            "id": row.id,
            "table_name": descriptor.table_name,
            "table_label": descriptor.label,
            "display_name": descriptor.display_name(row),
            "description": descriptor.description(row),
            "deleted_at": row.deleted_at.isoformat() if row.deleted_at else None,
        }

    def list(self) -> List[Dict[str, Any]]:
        """
        Every soft-deleted row, newest deletion first.

        A table whose query fails is logged and skipped; the rest still load.
        """
        cached = query_cache.get(RECYCLE_BIN)
        if cached is not None:
            return cached

        entries = []
        for descriptor in TABLE_DESCRIPTORS:
            model = descriptor.model
            try:
                rows = self.db.query(model).filter(
                    model.deleted_at.isnot(None)
                ).order_by(model.deleted_at.desc()).all()
            except SQLAlchemyError as e:
                logger.error(f"Error fetching deleted rows from {descriptor.table_name}: {e}")
                self.db.rollback()
                continue
            entries.extend(self._to_entry(descriptor, row) for row in rows)

        entries.sort(key=lambda e: e["deleted_at"] or "", reverse=True)
        query_cache.set(RECYCLE_BIN, entries)
        return entries

    def restore(self, record_id: int, table_name: str, user=None) -> Optional[str]:
        """
        Clear deleted_at on one row. Restoring a live row is a no-op.

        Returns the success message, or None if the row does not exist.
        """
        descriptor = self._descriptor(table_name)
        row = self.db.query(descriptor.model).filter(descriptor.model.id == record_id).first()
        if row is None:
            return None

        row.deleted_at = None
        self.db.flush()
        query_cache.invalidate(RECYCLE_BIN, table_name, *descriptor.cache_keys)
        AuditService(self.db).log(AuditAction.RESTORE, table_name, record_id, user=user)
        return f"{descriptor.label} berhasil dipulihkan"

    def permanent_delete(self, record_id: int, table_name: str, user=None) -> Optional[str]:
        """
        Physically delete a row that sits in the recycle bin, line items included.

        Returns the success message, or None if no such deleted row exists.
        """
        descriptor = self._descriptor(table_name)
        model = descriptor.model
        row = self.db.query(model).filter(
            model.id == record_id,
            model.deleted_at.isnot(None)
        ).first()
        if row is None:
            return None

        self.db.delete(row)
        self.db.flush()
        query_cache.invalidate(RECYCLE_BIN)
        AuditService(self.db).log(
            AuditAction.PERMANENT_DELETE, table_name, record_id,
            description=descriptor.display_name(row), user=user
        )
        return f"{descriptor.label} dihapus permanen"

    def empty_all(self, items: Optional[Iterable[Dict[str, Any]]] = None, user=None) -> int:
        """
        Permanently delete the given entries (default: the whole bin) one by one.

        Each deletion is committed on its own. The first failure is raised and
        stops the sweep; rows deleted before it stay deleted.
        """
        targets = list(items) if items is not None else self.list()
        deleted = 0
        for item in targets:
            try:
                if self.permanent_delete(item["id"], item["table_name"], user=user):
                    deleted += 1
                self.db.commit()
            except Exception:
                self.db.rollback()
                query_cache.invalidate(RECYCLE_BIN)
                logger.error(f"Recycle bin sweep stopped after {deleted} deletions", exc_info=True)
                raise

        AuditService(self.db).log(
            AuditAction.EMPTY_RECYCLE_BIN, "recycle-bin",
            details={"deleted": deleted}, user=user
        )
        self.db.commit()
        return deleted
