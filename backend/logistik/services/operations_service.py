"""
Operations Service - Job orders, container trackings and warehouse stock
"""
from datetime import date
from typing import Any, Dict, Optional
import random

from logistik.models import JobOrder, Tracking, Warehouse
from logistik.services.base import SoftDeleteService


def generate_job_order_number(today: Optional[date] = None, rng: Optional[random.Random] = None) -> str:
    """JO{yyyy}{MM}-{4 random digits}; uniqueness rests on the random suffix"""
    today = today or date.today()
    rng = rng or random
    return f"JO{today:%Y%m}-{rng.randint(0, 9999):04d}"


class JobOrderService(SoftDeleteService):
    model = JobOrder
    entity = "job_orders"

    def prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        if not values.get("job_order_number"):
            values["job_order_number"] = generate_job_order_number()
        return values


class TrackingService(SoftDeleteService):
    model = Tracking
    entity = "trackings"


class WarehouseService(SoftDeleteService):
    model = Warehouse
    entity = "warehouses"
