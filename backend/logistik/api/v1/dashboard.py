"""
Dashboard API Routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from logistik.core.database import get_db
from logistik.core.security import MenuAccessChecker
from logistik.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"],
                   dependencies=[Depends(MenuAccessChecker("dashboard"))])


@router.get("/stats")
async def get_dashboard_stats(db: Session = Depends(get_db)):
    return DashboardService(db).stats()


@router.get("/charts")
async def get_dashboard_charts(db: Session = Depends(get_db)):
    service = DashboardService(db)
    return {
        "shipments": service.shipment_chart(),
        "finance": service.finance_chart(),
        "trucks": service.truck_utilization(),
    }


@router.get("/recent-orders")
async def get_recent_orders(limit: int = 5, db: Session = Depends(get_db)):
    return DashboardService(db).recent_orders(limit)


@router.get("/outstanding-invoices")
async def get_outstanding_invoices(limit: int = 5, db: Session = Depends(get_db)):
    return DashboardService(db).outstanding_invoices(limit)
