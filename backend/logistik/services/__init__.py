# Services Package
from logistik.services.user_service import UserService
from logistik.services.user_admin_service import UserAdminService
from logistik.services.master_service import CustomerService, VendorService, TruckService
from logistik.services.operations_service import JobOrderService, TrackingService, WarehouseService
from logistik.services.finance_service import (
    ExpenseService, InvoiceService, ReimbursementInvoiceService, FinalInvoiceService, InvoiceDPService
)
from logistik.services.quotation_service import QuotationService
from logistik.services.merged_invoice_service import MergedInvoiceService
from logistik.services.recycle_bin_service import RecycleBinService
from logistik.services.dashboard_service import DashboardService
from logistik.services.reports_service import ReportsService
from logistik.services.audit_service import AuditService, AuditAction
