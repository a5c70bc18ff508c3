"""
Master Data API Routes - Customers, vendors and trucks
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from logistik.core.database import get_db
from logistik.core.security import MenuAccessChecker
from logistik.schemas import (
    CustomerCreate, CustomerUpdate, VendorCreate, VendorUpdate, TruckCreate, TruckUpdate
)
from logistik.services.master_service import CustomerService, VendorService, TruckService
from logistik.api.v1.crud import register_crud_routes

router = APIRouter(tags=["Master Data"], dependencies=[Depends(MenuAccessChecker("master-data"))])


@router.get("/customers/search")
async def search_customers(q: str = "", db: Session = Depends(get_db)):
    """Customer picker lookup by company name or city"""
    service = CustomerService(db)
    return service.search(q) if q.strip() else service.list()


register_crud_routes(router, "/customers", CustomerService, CustomerCreate, CustomerUpdate, "Pelanggan")
register_crud_routes(router, "/vendors", VendorService, VendorCreate, VendorUpdate, "Vendor")
register_crud_routes(router, "/trucks", TruckService, TruckCreate, TruckUpdate, "Truk")
