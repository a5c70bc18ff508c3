"""
Finance API Routes - Expenses, invoices and down-payment invoices
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from logistik.core.database import get_db
from logistik.core.security import MenuAccessChecker
from logistik.schemas import (
    ExpenseCreate, ExpenseUpdate, InvoiceCreate, InvoiceUpdate, InvoiceDPCreate, InvoiceDPUpdate
)
from logistik.services.finance_service import ExpenseService, InvoiceDPService, INVOICE_SERVICES
from logistik.api.v1.crud import register_crud_routes

router = APIRouter(tags=["Finance"], dependencies=[Depends(MenuAccessChecker("keuangan"))])

INVOICE_LABELS = {
    "invoices": "Invoice",
    "invoices-reimbursement": "Invoice Reimbursement",
    "invoices-final": "Invoice Final",
}


# ==================== EXPENSES ====================

@router.get("/expenses/categories")
async def list_expense_categories(db: Session = Depends(get_db)):
    """Categories already used by live expenses"""
    return {"categories": ExpenseService(db).get_categories()}


register_crud_routes(router, "/expenses", ExpenseService, ExpenseCreate, ExpenseUpdate,
                     "Pengeluaran", creator_field="created_by")


# ==================== INVOICE DP ====================

@router.get("/invoice-dp/next-part")
async def get_next_part_number(number: str, db: Session = Depends(get_db)):
    return {"invoice_dp_number": number, "part_number": InvoiceDPService(db).get_next_part_number(number)}


@router.get("/invoice-dp/by-customer/{customer_id}")
async def list_invoice_dp_by_customer(customer_id: int, db: Session = Depends(get_db)):
    return InvoiceDPService(db).list_by_customer(customer_id)


@router.post("/invoice-dp/{invoice_dp_id}/duplicate")
async def duplicate_invoice_dp(invoice_dp_id: int, db: Session = Depends(get_db)):
    """Copy an invoice DP as the next part of the same DP number"""
    service = InvoiceDPService(db)
    copy = service.duplicate_as_next_part(invoice_dp_id)
    if not copy:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice DP tidak ditemukan")
    db.commit()
    return service.to_dict(copy)


register_crud_routes(router, "/invoice-dp", InvoiceDPService, InvoiceDPCreate, InvoiceDPUpdate, "Invoice DP")


# ==================== INVOICES ====================

def _register_invoice_routes(kind: str):
    service_class = INVOICE_SERVICES[kind]
    label = INVOICE_LABELS[kind]

    @router.get(f"/{kind}/{{invoice_id}}/items", name=f"items_{service_class.entity}")
    async def list_invoice_items(invoice_id: int, db: Session = Depends(get_db)):
        service = service_class(db)
        if not service.get(invoice_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} tidak ditemukan")
        return service.get_items(invoice_id)

    register_crud_routes(router, f"/{kind}", service_class, InvoiceCreate, InvoiceUpdate, label)


for _kind in INVOICE_SERVICES:
    _register_invoice_routes(_kind)
