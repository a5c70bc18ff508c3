"""
Master Data Service - Customers, vendors and the truck fleet
"""
from typing import Dict, List, Any

from logistik.models import Customer, Vendor, Truck
from logistik.services.base import SoftDeleteService


class CustomerService(SoftDeleteService):
    model = Customer
    entity = "customers"

    def search(self, term: str) -> List[Dict[str, Any]]:
        """Case-insensitive match on company name or city"""
        term = term.strip().lower()
        return [
            c for c in self.list()
            if term in (c["company_name"] or "").lower() or term in (c["city"] or "").lower()
        ]


class VendorService(SoftDeleteService):
    model = Vendor
    entity = "vendors"


class TruckService(SoftDeleteService):
    model = Truck
    entity = "trucks"
