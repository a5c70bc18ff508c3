"""
Shared list/get/create/update/soft-delete routes for soft-deletable tables
"""
from typing import Optional, Type
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from logistik.core.database import get_db
from logistik.core.security import get_current_user
from logistik.services.base import SoftDeleteService


def register_crud_routes(
    router: APIRouter,
    path: str,
    service_class: Type[SoftDeleteService],
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    label: str,
    creator_field: Optional[str] = None,
):
    """
    Add the five standard routes under ``path``.

    Deleting only sets deleted_at; the row can be restored from the recycle bin.
    ``creator_field`` names a column stamped with the caller's user id on create.
    """
    not_found = f"{label} tidak ditemukan"

    @router.get(path, name=f"list_{service_class.entity}")
    async def list_rows(db: Session = Depends(get_db)):
        return service_class(db).list()

    @router.get(path + "/{record_id}", name=f"get_{service_class.entity}")
    async def get_row(record_id: int, db: Session = Depends(get_db)):
        service = service_class(db)
        obj = service.get(record_id)
        if not obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        return service.to_dict(obj)

    @router.post(path, name=f"create_{service_class.entity}")
    async def create_row(data: create_schema, db: Session = Depends(get_db),
                         current_user = Depends(get_current_user)):
        service = service_class(db)
        try:
            extra = {creator_field: current_user.id} if creator_field else {}
            obj = service.create(data, **extra)
            db.commit()
        except ValueError as e:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        return service.to_dict(obj)

    @router.put(path + "/{record_id}", name=f"update_{service_class.entity}")
    async def update_row(record_id: int, data: update_schema, db: Session = Depends(get_db)):
        service = service_class(db)
        try:
            obj = service.update(record_id, data)
        except ValueError as e:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        if not obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        db.commit()
        return service.to_dict(obj)

    @router.delete(path + "/{record_id}", name=f"delete_{service_class.entity}")
    async def delete_row(record_id: int, db: Session = Depends(get_db)):
        if not service_class(db).delete(record_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found)
        db.commit()
        return {"message": f"{label} dipindahkan ke Recycle Bin"}
