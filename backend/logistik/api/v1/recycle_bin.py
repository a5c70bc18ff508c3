"""
Recycle Bin API Routes
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session
import logging

from logistik.core.database import get_db
from logistik.core.errors import map_error
from logistik.core.security import get_approved_user
from logistik.schemas import RecycleBinRef, EmptyRecycleBinRequest
from logistik.services.recycle_bin_service import RecycleBinService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recycle-bin", tags=["Recycle Bin"])


def _failure(prefix: str, exc: Exception) -> HTTPException:
    """Turn a service failure into an HTTP error with an Indonesian message"""
    if isinstance(exc, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{prefix}{exc}")
    _, message = map_error(exc)
    status_code = status.HTTP_409_CONFLICT if isinstance(exc, IntegrityError) else status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=status_code, detail=f"{prefix}{message}")


@router.get("")
async def list_deleted(
    db: Session = Depends(get_db),
    current_user = Depends(get_approved_user)
):
    """Every soft-deleted row, newest deletion first"""
    return RecycleBinService(db).list()


@router.post("/restore")
async def restore_item(
    item: RecycleBinRef,
    db: Session = Depends(get_db),
    current_user = Depends(get_approved_user)
):
    prefix = "Gagal memulihkan: "
    try:
        message = RecycleBinService(db).restore(item.id, item.table_name, user=current_user)
        if message is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{prefix}Data tidak ditemukan")
        db.commit()
    except (ValueError, DBAPIError) as e:
        db.rollback()
        logger.error(f"Restore of {item.table_name}#{item.id} failed: {e}")
        raise _failure(prefix, e)
    return {"message": message}


@router.delete("/{table_name}/{record_id}")
async def permanent_delete_item(
    table_name: str,
    record_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_approved_user)
):
    """Irreversibly delete a row that is in the recycle bin"""
    prefix = "Gagal menghapus: "
    try:
        message = RecycleBinService(db).permanent_delete(record_id, table_name, user=current_user)
        if message is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{prefix}Data tidak ditemukan")
        db.commit()
    except (ValueError, DBAPIError) as e:
        db.rollback()
        logger.error(f"Permanent delete of {table_name}#{record_id} failed: {e}")
        raise _failure(prefix, e)
    return {"message": message}


@router.post("/empty")
async def empty_recycle_bin(
    request: Optional[EmptyRecycleBinRequest] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_approved_user)
):
    """Permanently delete the given entries, or everything in the bin"""
    items = None
    if request is not None and request.items is not None:
        items = [item.model_dump() for item in request.items]
    try:
        deleted = RecycleBinService(db).empty_all(items, user=current_user)
    except (ValueError, DBAPIError) as e:
        raise _failure("Gagal mengosongkan: ", e)
    return {"message": "Recycle Bin berhasil dikosongkan", "deleted": deleted}
