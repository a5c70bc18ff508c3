"""
Reports API Routes - Merged invoice view and the laporan reports
"""
from io import BytesIO
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from logistik.core.database import get_db
from logistik.core.security import MenuAccessChecker
from logistik.services.merged_invoice_service import MergedInvoiceService
from logistik.services.reports_service import ReportsService
from logistik.services.document_service import DocumentRenderer, invoice_final_filename

router = APIRouter(tags=["Reports"], dependencies=[Depends(MenuAccessChecker("laporan"))])

# Invoice numbers may contain slashes, so they travel as a query parameter


def _require_entry(service: MergedInvoiceService, invoice_number: str):
    entry = service.get(invoice_number)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice tidak ditemukan")
    return entry


@router.get("/invoices-merged")
async def list_merged_invoices(db: Session = Depends(get_db)):
    """One row per invoice number across primary and reimbursement invoices"""
    return MergedInvoiceService(db).list()


@router.get("/invoices-merged/summary")
async def merged_invoice_summary(db: Session = Depends(get_db)):
    return MergedInvoiceService(db).summary()


@router.get("/invoices-merged/entry")
async def get_merged_invoice(invoice_number: str, db: Session = Depends(get_db)):
    return _require_entry(MergedInvoiceService(db), invoice_number)


@router.get("/invoices-merged/items")
async def get_merged_invoice_items(invoice_number: str, db: Session = Depends(get_db)):
    service = MergedInvoiceService(db)
    return service.get_detailed_items(_require_entry(service, invoice_number))


@router.get("/invoices-merged/pdf")
async def merged_invoice_pdf(invoice_number: str, db: Session = Depends(get_db)):
    """Invoice Final PDF for one merged entry"""
    service = MergedInvoiceService(db)
    entry = _require_entry(service, invoice_number)
    pdf = DocumentRenderer().invoice_final(entry, service.get_detailed_items(entry))
    filename = invoice_final_filename(entry["invoice_number"])
    return StreamingResponse(
        BytesIO(pdf),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/invoices-merged/export/excel")
async def export_merged_invoices_excel(db: Session = Depends(get_db)):
    buffer = ReportsService(db).merged_invoices_workbook()
    filename = f"laporan_invoice_{date.today().strftime('%Y%m%d')}.xlsx"
    return StreamingResponse(
        buffer,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/reports/outstanding")
async def outstanding_report(db: Session = Depends(get_db)):
    return ReportsService(db).outstanding_aging()


@router.get("/reports/profit-loss")
async def profit_loss_report(period: str = "6months", db: Session = Depends(get_db)):
    return ReportsService(db).profit_and_loss(period)


@router.get("/reports/payments")
async def payments_report(month: Optional[str] = None, payment_type: Optional[str] = Query(None, alias="type"),
                          search: Optional[str] = None, db: Session = Depends(get_db)):
    return ReportsService(db).payments(month=month, payment_type=payment_type, search=search)


@router.get("/reports/expenses")
async def expenses_report(month: Optional[str] = None, category: Optional[str] = None,
                          search: Optional[str] = None, db: Session = Depends(get_db)):
    return ReportsService(db).expenses(month=month, category=category, search=search)


@router.get("/reports/shipments")
async def shipments_report(month: Optional[str] = None, status_filter: Optional[str] = Query(None, alias="status"),
                           search: Optional[str] = None, db: Session = Depends(get_db)):
    return ReportsService(db).shipments(month=month, status=status_filter, search=search)


@router.get("/reports/truck-utilization")
async def truck_utilization_report(db: Session = Depends(get_db)):
    return ReportsService(db).truck_utilization()


@router.get("/reports/warehouse-occupancy")
async def warehouse_occupancy_report(handling: Optional[str] = None, search: Optional[str] = None,
                                     db: Session = Depends(get_db)):
    return ReportsService(db).warehouse_occupancy(handling=handling, search=search)


@router.get("/reports/service-performance")
async def service_performance_report(db: Session = Depends(get_db)):
    return ReportsService(db).service_performance()
