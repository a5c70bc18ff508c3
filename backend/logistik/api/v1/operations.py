"""
Operations API Routes - Job orders, attachments, trackings and warehouses
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from fastapi.responses import FileResponse, StreamingResponse
from sqlalchemy.orm import Session
from io import BytesIO

from logistik.core.database import get_db
from logistik.core.security import MenuAccessChecker
from logistik.schemas import (
    JobOrderCreate, JobOrderUpdate, JobOrderInvoiceTypeEnum,
    TrackingCreate, TrackingUpdate, WarehouseCreate, WarehouseUpdate
)
from logistik.services.operations_service import JobOrderService, TrackingService, WarehouseService
from logistik.services.document_service import DocumentRenderer, job_order_invoice_filename
from logistik.services.storage_service import StorageService, INVOICE_CATEGORIES, display_name
from logistik.api.v1.crud import register_crud_routes

router = APIRouter(tags=["Operations"], dependencies=[Depends(MenuAccessChecker("operasional"))])

# Signed downloads carry their own token and need no session
files_router = APIRouter(prefix="/files", tags=["Files"])


def _require_job_order(db: Session, job_order_id: int):
    job_order = JobOrderService(db).get(job_order_id)
    if not job_order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job Order tidak ditemukan")
    return job_order


# ==================== JOB ORDER DOCUMENTS ====================

@router.get("/job-orders/{job_order_id}/pdf/{invoice_type}")
async def job_order_invoice_pdf(
    job_order_id: int,
    invoice_type: JobOrderInvoiceTypeEnum,
    db: Session = Depends(get_db)
):
    """Printable penumpukan / DO / behandle invoice for one job order"""
    service = JobOrderService(db)
    job_order = service.to_dict(_require_job_order(db, job_order_id))
    pdf = DocumentRenderer().job_order_invoice(job_order, invoice_type.value)
    filename = job_order_invoice_filename(invoice_type.value, job_order.get("job_order_number"))
    return StreamingResponse(
        BytesIO(pdf),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


# ==================== JOB ORDER FILES ====================

@router.get("/job-orders/files/categories")
async def list_file_categories():
    return INVOICE_CATEGORIES


@router.get("/job-orders/{job_order_id}/files")
async def list_job_order_files(
    job_order_id: int,
    category: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Files of one category, or the legacy uncategorised folder when no category is given"""
    _require_job_order(db, job_order_id)
    try:
        return StorageService().list_files(job_order_id, category)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/job-orders/{job_order_id}/files")
async def upload_job_order_file(
    job_order_id: int,
    file: UploadFile = File(...),
    category: Optional[str] = Form(None),
    db: Session = Depends(get_db)
):
    _require_job_order(db, job_order_id)
    content = await file.read()
    try:
        key = StorageService().upload(job_order_id, file.filename or "", content, category)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"path": key, "display_name": display_name(key.rsplit("/", 1)[-1]),
            "message": "File berhasil diupload"}


@router.get("/job-orders/{job_order_id}/files/signed-url")
async def create_signed_url(job_order_id: int, path: str, db: Session = Depends(get_db)):
    """Time-limited download link for one stored file"""
    _require_job_order(db, job_order_id)
    storage = StorageService()
    try:
        exists = storage.open(path, job_order_id) is not None
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not exists:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File tidak ditemukan")
    token = storage.create_download_token(path)
    return {"signed_url": f"/api/v1/files/download?token={token}", "token": token}


@router.delete("/job-orders/{job_order_id}/files")
async def delete_job_order_file(job_order_id: int, path: str, db: Session = Depends(get_db)):
    _require_job_order(db, job_order_id)
    try:
        deleted = StorageService().delete(path, job_order_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File tidak ditemukan")
    return {"message": "File berhasil dihapus"}


@files_router.get("/download")
async def download_file(token: str):
    storage = StorageService()
    key = storage.verify_download_token(token)
    if key is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Link download tidak valid atau kedaluwarsa")
    try:
        path = storage.open(key)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File tidak ditemukan")
    return FileResponse(path, filename=display_name(path.name))


register_crud_routes(router, "/job-orders", JobOrderService, JobOrderCreate, JobOrderUpdate, "Job Order")
register_crud_routes(router, "/trackings", TrackingService, TrackingCreate, TrackingUpdate, "Tracking")
register_crud_routes(router, "/warehouses", WarehouseService, WarehouseCreate, WarehouseUpdate, "Gudang")
