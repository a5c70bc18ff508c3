"""
Quotation API Routes
"""
from io import BytesIO
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from logistik.core.database import get_db
from logistik.core.security import MenuAccessChecker
from logistik.schemas import QuotationCreate, QuotationUpdate
from logistik.services.quotation_service import QuotationService
from logistik.services.document_service import DocumentRenderer, quotation_filename
from logistik.api.v1.crud import register_crud_routes

router = APIRouter(tags=["Sales & CRM"], dependencies=[Depends(MenuAccessChecker("sales-crm"))])


@router.get("/quotations/next-number")
async def get_next_quotation_number(db: Session = Depends(get_db)):
    return {"quotation_number": QuotationService(db).generate_number()}


@router.get("/quotations/{quotation_id}/pdf")
async def quotation_pdf(quotation_id: int, db: Session = Depends(get_db)):
    service = QuotationService(db)
    obj = service.get(quotation_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Penawaran tidak ditemukan")

    quotation = service.to_dict(obj)
    pdf = DocumentRenderer().quotation(quotation, service.items_by_section(quotation))
    filename = quotation_filename(quotation.get("quotation_number"), quotation.get("customer_name"))
    return StreamingResponse(
        BytesIO(pdf),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


register_crud_routes(router, "/quotations", QuotationService, QuotationCreate, QuotationUpdate, "Penawaran")
