"""
Reports Service - Outstanding aging, profit & loss, operational reports and the invoice workbook

The list reports (payments, expenses, shipments, warehouse occupancy) take the
same optional filters: ``month`` as "YYYY-MM", a case-insensitive ``search``
and one report-specific field. Each returns its rows plus summary figures
computed over the filtered rows.
"""
from datetime import date
from io import BytesIO
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, Border, Side, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy.orm import Session

from logistik.models import Invoice, InvoiceDP, Expense, JobOrder, Tracking, Truck, Warehouse
from logistik.services.base import to_json_value
from logistik.services.dashboard_service import (
    MONTH_LABELS, PAID_STATUS, IN_PROGRESS_STATUSES, CLOSED_TRACKING_STATUSES, AVAILABLE_TRUCK_STATUSES,
    is_outstanding,
)
from logistik.services.merged_invoice_service import MergedInvoiceService

AGING_BUCKETS = ("current", "30days", "60days", "90days", "over90")
PERIODS = {"3months": 3, "6months": 6, "12months": 12}

PAYMENT_TYPES = ("Invoice DP", "Invoice DP Khusus")
EXPENSE_CATEGORIES = [
    "Biaya Truk", "Biaya Pelabuhan", "Biaya Shipping Line", "Biaya Gudang", "Biaya Operasional",
]
SHIPMENT_GROUPS = ("Selesai", "Dalam Proses", "Dibatalkan", "Pending")
TRUCK_STATUSES = ("Tersedia", "Dalam Perjalanan", "Maintenance", "Tidak Aktif")
WAREHOUSE_CAPACITY_CBM = 5000


def aging_bucket(days_overdue: int) -> str:
    if days_overdue <= 30:
        return "current"
    if days_overdue <= 60:
        return "30days"
    if days_overdue <= 90:
        return "60days"
    if days_overdue <= 120:
        return "90days"
    return "over90"


def months_back(today: date, count: int) -> List[date]:
    """First day of each of the last ``count`` months, oldest first"""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append(date(year, month, 1))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def _f(value) -> float:
    return float(value) if value is not None else 0.0


def month_key(value) -> Optional[str]:
    """'YYYY-MM' of a date or datetime"""
    return f"{value:%Y-%m}" if value is not None else None


def _matches(search: Optional[str], *fields) -> bool:
    if not search:
        return True
    needle = search.strip().lower()
    return any(needle in str(field).lower() for field in fields if field)


def _in_month(value, month: Optional[str]) -> bool:
    return not month or month_key(value) == month


def _rate(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0


def shipment_group(status: Optional[str]) -> str:
    """Report group of a job-order status; unknown and empty statuses count as pending"""
    if status == "Selesai":
        return "Selesai"
    if status in IN_PROGRESS_STATUSES or status == "Dalam Proses":
        return "Dalam Proses"
    if status in ("Dibatalkan", "Cancelled"):
        return "Dibatalkan"
    return "Pending"


class ReportsService:
    def __init__(self, db: Session, today: Optional[date] = None):
        self.db = db
        self.today = today or date.today()

    def _live(self, model):
        return self.db.query(model).filter(model.deleted_at.is_(None))

    # ==================== OUTSTANDING ====================

    def outstanding_aging(self) -> Dict[str, Any]:
        """Unpaid primary invoices grouped by days since the invoice date"""
        totals = {bucket: 0.0 for bucket in AGING_BUCKETS}
        rows = []
        for invoice in self._live(Invoice).all():
            if not is_outstanding(invoice):
                continue
            invoice_date = invoice.invoice_date or invoice.created_at.date()
            days_overdue = (self.today - invoice_date).days
            bucket = aging_bucket(days_overdue)
            remaining = _f(invoice.remaining_amount)
            totals[bucket] += remaining
            rows.append({
                "id": invoice.id,
                "invoice_number": invoice.invoice_number,
                "customer_name": invoice.customer_name,
                "invoice_date": to_json_value(invoice_date),
                "remaining_amount": remaining,
                "days_overdue": days_overdue,
                "age_category": bucket,
            })

        rows.sort(key=lambda r: r["days_overdue"], reverse=True)
        return {
            "invoices": rows,
            "buckets": totals,
            "total": sum(totals.values()),
            "count": len(rows),
        }

    # ==================== PROFIT & LOSS ====================

    def profit_and_loss(self, period: str = "6months") -> Dict[str, Any]:
        """
        Monthly revenue (invoices plus paid DP invoices) against expenses.

        Unknown periods fall back to six months.
        """
        months = months_back(self.today, PERIODS.get(period, 6))
        buckets = {
            (m.year, m.month): {
                "month": f"{MONTH_LABELS[m.month - 1]} {m.year}",
                "revenue": 0.0,
                "expenses": 0.0,
            }
            for m in months
        }

        start = months[0]
        for invoice in self._live(Invoice).filter(Invoice.invoice_date >= start).all():
            bucket = buckets.get((invoice.invoice_date.year, invoice.invoice_date.month))
            if bucket:
                bucket["revenue"] += _f(invoice.total_amount)

        paid_dps = self._live(InvoiceDP).filter(
            InvoiceDP.invoice_date >= start,
            InvoiceDP.status == PAID_STATUS
        ).all()
        for dp in paid_dps:
            bucket = buckets.get((dp.invoice_date.year, dp.invoice_date.month))
            if bucket:
                bucket["revenue"] += _f(dp.total_amount)

        for expense in self._live(Expense).filter(Expense.expense_date >= start).all():
            bucket = buckets.get((expense.expense_date.year, expense.expense_date.month))
            if bucket:
                bucket["expenses"] += _f(expense.amount)

        result = []
        for m in months:
            bucket = buckets[(m.year, m.month)]
            profit = bucket["revenue"] - bucket["expenses"]
            bucket["profit"] = profit
            bucket["margin"] = round(profit / bucket["revenue"] * 100, 1) if bucket["revenue"] > 0 else 0
            result.append(bucket)

        total_revenue = sum(b["revenue"] for b in result)
        total_expenses = sum(b["expenses"] for b in result)
        total_profit = total_revenue - total_expenses
        return {
            "period": period if period in PERIODS else "6months",
            "months": result,
            "totals": {
                "revenue": total_revenue,
                "expenses": total_expenses,
                "profit": total_profit,
                "margin": round(total_profit / total_revenue * 100, 1) if total_revenue > 0 else 0,
            },
        }

    # ==================== PAYMENTS ====================

    def payments(self, month: Optional[str] = None, payment_type: Optional[str] = None,
                 search: Optional[str] = None) -> Dict[str, Any]:
        """
        Incoming payments, newest first: down payments recorded on invoices
        ("Invoice DP") and paid DP invoices ("Invoice DP Khusus").
        """
        rows = [
            {
                "id": invoice.id,
                "date": invoice.invoice_date,
                "reference": invoice.invoice_number,
                "customer_name": invoice.customer_name,
                "type": "Invoice DP",
                "amount": _f(invoice.down_payment),
                "status": "Diterima",
            }
            for invoice in self._live(Invoice).filter(Invoice.down_payment > 0).all()
        ]
        rows += [
            {
                "id": dp.id,
                "date": dp.invoice_date,
                "reference": dp.invoice_dp_number,
                "customer_name": dp.customer_name,
                "type": "Invoice DP Khusus",
                "amount": _f(dp.total_amount),
                "status": PAID_STATUS,
            }
            for dp in self._live(InvoiceDP).filter(InvoiceDP.status == PAID_STATUS).all()
        ]
        rows.sort(key=lambda r: r["date"] or date.min, reverse=True)
        months = sorted({month_key(r["date"]) for r in rows if r["date"]}, reverse=True)

        filtered = [
            r for r in rows
            if _in_month(r["date"], month)
            and (not payment_type or r["type"] == payment_type)
            and _matches(search, r["reference"], r["customer_name"])
        ]
        for r in filtered:
            r["date"] = to_json_value(r["date"])
        return {
            "payments": filtered,
            "count": len(filtered),
            "total_amount": sum(r["amount"] for r in filtered),
            "count_by_type": {t: sum(1 for r in filtered if r["type"] == t) for t in PAYMENT_TYPES},
            "months": months,
        }

    # ==================== EXPENSES ====================

    def expenses(self, month: Optional[str] = None, category: Optional[str] = None,
                 search: Optional[str] = None) -> Dict[str, Any]:
        """Expenses with a per-category breakdown; the standard categories come first"""
        everything = self._live(Expense).order_by(Expense.expense_date.desc(), Expense.id.desc()).all()
        filtered = [
            e for e in everything
            if _in_month(e.expense_date, month)
            and (not category or e.category == category)
            and _matches(search, e.description, e.category)
        ]

        by_category: Dict[str, float] = {}
        for expense in filtered:
            by_category[expense.category] = by_category.get(expense.category, 0.0) + _f(expense.amount)
        order = [c for c in EXPENSE_CATEGORIES if c in by_category]
        order += sorted(c for c in by_category if c not in EXPENSE_CATEGORIES)

        return {
            "expenses": [
                {
                    "id": e.id,
                    "expense_date": to_json_value(e.expense_date),
                    "category": e.category,
                    "description": e.description,
                    "amount": _f(e.amount),
                    "job_order_id": e.job_order_id,
                    "vendor_id": e.vendor_id,
                }
                for e in filtered
            ],
            "count": len(filtered),
            "total_amount": sum(by_category.values()),
            "by_category": [{"category": c, "amount": by_category[c]} for c in order],
            "months": sorted({month_key(e.expense_date) for e in everything}, reverse=True),
        }

    # ==================== SHIPMENTS ====================

    def shipments(self, month: Optional[str] = None, status: Optional[str] = None,
                  search: Optional[str] = None) -> Dict[str, Any]:
        """
        Job orders grouped as Selesai, Dalam Proses, Dibatalkan or Pending.

        ``status`` matches either the stored status or its group. The monthly
        trend always covers every live job order.
        """
        orders = self._live(JobOrder).order_by(JobOrder.created_at.desc(), JobOrder.id.desc()).all()
        filtered = [
            o for o in orders
            if _in_month(o.created_at, month)
            and (not status or status in (o.status, shipment_group(o.status)))
            and _matches(search, o.job_order_number, o.customer_name, o.bl_number)
        ]

        by_status = {group: 0 for group in SHIPMENT_GROUPS}
        for order in filtered:
            by_status[shipment_group(order.status)] += 1

        trend: Dict[str, Dict[str, Any]] = {}
        for order in orders:
            key = month_key(order.created_at)
            bucket = trend.setdefault(key, {
                "month": f"{MONTH_LABELS[order.created_at.month - 1]} {order.created_at.year}",
                "total": 0,
                "selesai": 0,
            })
            bucket["total"] += 1
            if order.status == "Selesai":
                bucket["selesai"] += 1

        return {
            "orders": [
                {
                    "id": o.id,
                    "job_order_number": o.job_order_number,
                    "customer_name": o.customer_name,
                    "bl_number": o.bl_number,
                    "status": o.status,
                    "status_group": shipment_group(o.status),
                    "created_at": to_json_value(o.created_at),
                }
                for o in filtered
            ],
            "count": len(filtered),
            "by_status": by_status,
            "completion_rate": _rate(by_status["Selesai"], len(filtered)),
            "monthly": [trend[key] for key in sorted(trend)],
            "months": sorted(trend, reverse=True),
        }

    # ==================== TRUCKS ====================

    def truck_utilization(self) -> Dict[str, Any]:
        """
        Fleet status counts. Utilization is the share on the road; availability
        counts trucks on the road or ready. Unknown statuses count as inactive.
        """
        trucks = self._live(Truck).order_by(Truck.plate_number).all()
        by_status = {s: 0 for s in TRUCK_STATUSES}
        by_type: Dict[str, int] = {}
        for truck in trucks:
            state = "Tersedia" if truck.status in AVAILABLE_TRUCK_STATUSES else truck.status
            by_status[state if state in by_status else "Tidak Aktif"] += 1
            truck_type = truck.truck_type or "Lainnya"
            by_type[truck_type] = by_type.get(truck_type, 0) + 1

        total = len(trucks)
        on_road = by_status["Dalam Perjalanan"]
        return {
            "total": total,
            "by_status": by_status,
            "utilization_rate": _rate(on_road, total),
            "availability_rate": _rate(by_status["Tersedia"] + on_road, total),
            "by_type": [
                {"truck_type": name, "count": count}
                for name, count in sorted(by_type.items(), key=lambda item: (-item[1], item[0]))
            ],
            "trucks": [
                {
                    "id": t.id,
                    "plate_number": t.plate_number,
                    "truck_type": t.truck_type,
                    "driver_name": t.driver_name,
                    "status": t.status,
                }
                for t in trucks
            ],
        }

    # ==================== WAREHOUSE ====================

    def warehouse_occupancy(self, handling: Optional[str] = None,
                            search: Optional[str] = None) -> Dict[str, Any]:
        """
        Stored volume against WAREHOUSE_CAPACITY_CBM.

        The figures cover all live stock; ``handling`` and ``search`` only
        narrow the returned rows.
        """
        stock = self._live(Warehouse).order_by(Warehouse.created_at.desc(), Warehouse.id.desc()).all()

        total_cbm = sum(_f(w.cbm) for w in stock)
        handling_counts = {h: sum(1 for w in stock if w.handling_in_out == h) for h in ("IN", "OUT")}
        handling_counts["STORAGE"] = len(stock) - handling_counts["IN"] - handling_counts["OUT"]

        per_customer: Dict[str, float] = {}
        for w in stock:
            name = w.customer_name or "-"
            per_customer[name] = per_customer.get(name, 0.0) + _f(w.cbm)
        top_customers = sorted(per_customer.items(), key=lambda item: (-item[1], item[0]))[:8]

        rows = [
            w for w in stock
            if (not handling or w.handling_in_out == handling)
            and _matches(search, w.customer_name, w.description, w.party)
        ]
        return {
            "items": [
                {
                    "id": w.id,
                    "customer_name": w.customer_name,
                    "description": w.description,
                    "party": w.party,
                    "quantity": w.quantity or 0,
                    "cbm": _f(w.cbm),
                    "unit_price": _f(w.unit_price),
                    "value": (w.quantity or 0) * _f(w.unit_price),
                    "handling_in_out": w.handling_in_out,
                    "status": w.status,
                }
                for w in rows
            ],
            "count": len(rows),
            "total_cbm": total_cbm,
            "total_items": sum(w.quantity or 0 for w in stock),
            "total_value": sum((w.quantity or 0) * _f(w.unit_price) for w in stock),
            "handling": handling_counts,
            "capacity_cbm": WAREHOUSE_CAPACITY_CBM,
            "usage_percentage": _rate(total_cbm, WAREHOUSE_CAPACITY_CBM),
            "top_customers": [{"customer_name": name, "cbm": cbm} for name, cbm in top_customers],
        }

    # ==================== SERVICE PERFORMANCE ====================

    def service_performance(self) -> Dict[str, Any]:
        """Job-order completion, tracking completion and active customers, with a six-month trend"""
        orders = self._live(JobOrder).all()
        trackings = self._live(Tracking).all()
        completed = sum(1 for o in orders if o.status == "Selesai")
        closed_trackings = sum(1 for t in trackings if t.status in CLOSED_TRACKING_STATUSES)
        customers = {o.customer_id or o.customer_name for o in orders if o.customer_id or o.customer_name}

        trend = []
        for start in months_back(self.today, 6):
            in_month = [o for o in orders if (o.created_at.year, o.created_at.month) == (start.year, start.month)]
            done = sum(1 for o in in_month if o.status == "Selesai")
            trend.append({
                "month": f"{MONTH_LABELS[start.month - 1]} {start.year}",
                "total": len(in_month),
                "selesai": done,
                "rate": _rate(done, len(in_month)),
            })

        return {
            "total_orders": len(orders),
            "completed_orders": completed,
            "completion_rate": _rate(completed, len(orders)),
            "tracking_total": len(trackings),
            "tracking_completion_rate": _rate(closed_trackings, len(trackings)),
            "active_customers": len(customers),
            "monthly": trend,
        }

    # ==================== EXCEL EXPORT ====================

    def merged_invoices_workbook(self) -> BytesIO:
        """Merged invoice list as an .xlsx workbook"""
        entries = MergedInvoiceService(self.db).list()

        wb = Workbook()
        ws = wb.active
        ws.title = "Laporan Invoice"

        title_font = Font(bold=True, size=14)
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="1E3A8A", end_color="1E3A8A", fill_type="solid")
        total_fill = PatternFill(start_color="E2EFDA", end_color="E2EFDA", fill_type="solid")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        ws['A1'] = "Laporan Invoice"
        ws['A1'].font = title_font
        ws.merge_cells('A1:H1')
        ws['A2'] = f"Per tanggal {self.today.isoformat()}"
        ws.merge_cells('A2:H2')

        headers = ['No. Invoice', 'Tanggal', 'Customer', 'Reimbursement', 'Invoice',
                   'Total', 'DP', 'Sisa']
        row = 4
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.border = thin_border
            cell.alignment = Alignment(horizontal='center')
        row += 1

        money_keys = ("reimbursement_total", "invoice_total", "combined_total",
                      "down_payment", "remaining_amount")
        for entry in entries:
            values = [entry["invoice_number"], entry["invoice_date"], entry["customer_name"]]
            values += [entry[key] for key in money_keys]
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = thin_border
                if col > 3:
                    cell.number_format = '#,##0'
                    cell.alignment = Alignment(horizontal='right')
            row += 1

        # Totals row
        for col in range(1, len(headers) + 1):
            ws.cell(row=row, column=col).fill = total_fill
            ws.cell(row=row, column=col).font = Font(bold=True)
            ws.cell(row=row, column=col).border = thin_border
        ws.cell(row=row, column=1, value="TOTAL")
        for offset, key in enumerate(money_keys):
            cell = ws.cell(row=row, column=4 + offset, value=sum(e[key] for e in entries))
            cell.number_format = '#,##0'

        column_widths = [22, 14, 35, 16, 16, 16, 16, 16]
        for col, width in enumerate(column_widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

        buffer = BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer
