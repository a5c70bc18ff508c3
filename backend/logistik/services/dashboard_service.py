"""
Dashboard Service - Headline stats and monthly chart buckets
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from logistik.models import (
    Customer, Vendor, Truck, JobOrder, Invoice, InvoiceDP, Expense,
    Quotation, Tracking, Warehouse
)
from logistik.services.base import to_json_value

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"]

IN_PROGRESS_STATUSES = ("Proses", "In Progress")
CLOSED_ORDER_STATUSES = ("Selesai", "Cancelled", "Dibatalkan")
CLOSED_TRACKING_STATUSES = ("Selesai", "Completed")
CLOSED_QUOTATION_STATUSES = ("Ditolak", "Rejected", "Expired")
AVAILABLE_TRUCK_STATUSES = ("Tersedia", "Available")
ACTIVE_WAREHOUSE_STATUSES = ("Aktif", "Active")
PAID_STATUS = "Lunas"


def _f(value) -> float:
    return float(value) if value is not None else 0.0


def is_outstanding(invoice) -> bool:
    return invoice.status != PAID_STATUS and _f(invoice.remaining_amount) > 0


class DashboardService:
    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self.today = today or date.today()

    def _live(self, model):
        return self.db.query(model).filter(model.deleted_at.is_(None))

    # ==================== CHARTS ====================

    def shipment_chart(self) -> List[Dict[str, Any]]:
        """Job orders created this year, per month, split by status"""
        months = [
            {"month": label, "totalOrders": 0, "selesai": 0, "proses": 0, "baru": 0}
            for label in MONTH_LABELS
        ]
        start = datetime(self.today.year, 1, 1)
        for job_order in self._live(JobOrder).filter(JobOrder.created_at >= start).all():
            bucket = months[job_order.created_at.month - 1]
            bucket["totalOrders"] += 1
            if job_order.status == "Selesai":
                bucket["selesai"] += 1
            elif job_order.status in IN_PROGRESS_STATUSES:
                bucket["proses"] += 1
            else:
                bucket["baru"] += 1
        return months

    def finance_chart(self) -> List[Dict[str, Any]]:
        """Invoice revenue against expenses for each month of this year"""
        months = [
            {"month": label, "pendapatan": 0.0, "pengeluaran": 0.0, "laba": 0.0}
            for label in MONTH_LABELS
        ]
        start = date(self.today.year, 1, 1)

        invoices = self._live(Invoice).filter(Invoice.invoice_date >= start).all()
        for invoice in invoices:
            months[invoice.invoice_date.month - 1]["pendapatan"] += _f(invoice.total_amount)

        expenses = self._live(Expense).filter(Expense.expense_date >= start).all()
        for expense in expenses:
            months[expense.expense_date.month - 1]["pengeluaran"] += _f(expense.amount)

        for bucket in months:
            bucket["laba"] = bucket["pendapatan"] - bucket["pengeluaran"]
        return months

    def truck_utilization(self) -> List[Dict[str, Any]]:
        trucks = self._live(Truck).order_by(Truck.plate_number).all()
        return [
            {
                "id": t.id,
                "plate": t.plate_number,
                "driver": t.driver_name or "-",
                "type": t.truck_type,
                "status": t.status or "active",
                "activeJobCount": 0,
            }
            for t in trucks
        ]

    # ==================== STATS ====================

    def stats(self) -> Dict[str, Any]:
        start_of_month = date(self.today.year, self.today.month, 1)

        job_orders = self._live(JobOrder).all()
        invoices = self._live(Invoice).all()
        invoice_dps = self._live(InvoiceDP).all()
        warehouses = self._live(Warehouse).all()
        trackings = self._live(Tracking).all()
        quotations = self._live(Quotation).all()
        expenses = self._live(Expense).all()
        trucks = self._live(Truck).all()

        outstanding = [inv for inv in invoices if is_outstanding(inv)]
        completed_this_month = [
            jo for jo in job_orders
            if jo.status == "Selesai" and jo.updated_at and jo.updated_at.date() >= start_of_month
        ]

        return {
            "totalCustomers": self._live(Customer).count(),
            "activeOrders": sum(1 for jo in job_orders if jo.status and jo.status not in CLOSED_ORDER_STATUSES),
            "inProgressOrders": sum(1 for jo in job_orders if jo.status in IN_PROGRESS_STATUSES),
            "completedOrders": sum(1 for jo in job_orders if jo.status == "Selesai"),
            "completedThisMonth": len(completed_this_month),
            "outstandingAmount": sum(_f(inv.remaining_amount) for inv in outstanding),
            "outstandingCount": len(outstanding),
            "monthlyRevenue": sum(_f(inv.total_amount) for inv in invoices),
            "totalInvoiceDPAmount": sum(_f(dp.total_amount) for dp in invoice_dps),
            "paidInvoiceDPAmount": sum(_f(dp.total_amount) for dp in invoice_dps if dp.status == PAID_STATUS),
            "totalWarehouseItems": len(warehouses),
            "activeWarehouseItems": sum(1 for w in warehouses if w.status in ACTIVE_WAREHOUSE_STATUSES),
            "totalCBM": sum(_f(w.cbm) for w in warehouses),
            "totalVendors": self._live(Vendor).count(),
            "activeTrackings": sum(1 for t in trackings if t.status and t.status not in CLOSED_TRACKING_STATUSES),
            "totalTrackings": len(trackings),
            "totalQuotations": len(quotations),
            "activeQuotations": sum(1 for q in quotations if q.status and q.status not in CLOSED_QUOTATION_STATUSES),
            "totalExpenses": sum(_f(e.amount) for e in expenses),
            "monthlyExpenses": sum(_f(e.amount) for e in expenses if e.expense_date >= start_of_month),
            "totalTrucks": len(trucks),
            "availableTrucks": sum(1 for t in trucks if t.status in AVAILABLE_TRUCK_STATUSES),
        }

    def recent_orders(self, limit: int = 5) -> List[Dict[str, Any]]:
        rows = self._live(JobOrder).order_by(JobOrder.created_at.desc(), JobOrder.id.desc()).limit(limit).all()
        return [
            {
                "id": jo.id,
                "job_order_number": jo.job_order_number,
                "customer_name": jo.customer_name,
                "lokasi": jo.lokasi,
                "tujuan": jo.tujuan,
                "status": jo.status,
                "created_at": to_json_value(jo.created_at),
            }
            for jo in rows
        ]

    def outstanding_invoices(self, limit: int = 5) -> List[Dict[str, Any]]:
        rows = self._live(Invoice).filter(
            Invoice.status != PAID_STATUS,
            Invoice.remaining_amount > 0
        ).order_by(Invoice.invoice_date.asc()).limit(limit).all()
        return [
            {
                "id": inv.id,
                "invoice_number": inv.invoice_number,
                "customer_name": inv.customer_name,
                "remaining_amount": _f(inv.remaining_amount),
                "invoice_date": to_json_value(inv.invoice_date),
                "status": inv.status,
            }
            for inv in rows
        ]
