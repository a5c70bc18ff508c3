"""
SQLAlchemy Models for Logistik ERP
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Date, Numeric, JSON,
    ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship, declared_attr

from logistik.core.database import Base


# ==================== MIXINS ====================

class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SoftDeleteMixin(TimestampMixin):
    """A row is live while deleted_at is NULL"""
    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


# ==================== USERS & ACCESS ====================

class User(TimestampMixin, Base):
    """Authenticated identity"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)
    last_sign_in_at = Column(DateTime, nullable=True)

    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan",
                         foreign_keys="UserRole.user_id")
    menu_access = relationship("UserMenuAccess", back_populates="user", cascade="all, delete-orphan")
    approval = relationship("UserApproval", back_populates="user", uselist=False,
                            cascade="all, delete-orphan", foreign_keys="UserApproval.user_id")

    @property
    def role_names(self):
        return sorted(r.role for r in self.roles)

    @property
    def is_admin(self) -> bool:
        return any(r.role == "admin" for r in self.roles)


class UserRole(Base):
    """Many-to-many user/role assignment"""
    __tablename__ = 'user_roles'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    role = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="roles", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint('user_id', 'role', name='uq_user_role'),
    )


class UserMenuAccess(Base):
    """Top-level navigation section a non-admin user may open"""
    __tablename__ = 'user_menu_access'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    menu_key = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="menu_access")

    __table_args__ = (
        UniqueConstraint('user_id', 'menu_key', name='uq_user_menu_key'),
    )


class UserApproval(Base):
    """Approval status of a signed-up user"""
    __tablename__ = 'user_approvals'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected
    reviewed_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="approval", foreign_keys=[user_id])


# ==================== MASTER DATA ====================

class Customer(SoftDeleteMixin, Base):
    __tablename__ = 'customers'

    id = Column(Integer, primary_key=True)
    company_name = Column(String(255), nullable=False)
    pic_name = Column(JSON, default=list)
    phone = Column(JSON, default=list)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    npwp = Column(String(50), nullable=True)
    customer_type = Column(String(50), nullable=True)
    status = Column(String(30), default="Aktif")


class Vendor(SoftDeleteMixin, Base):
    __tablename__ = 'vendors'

    id = Column(Integer, primary_key=True)
    company_name = Column(String(255), nullable=False)
    pic_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    vendor_type = Column(String(50), nullable=True)
    services = Column(Text, nullable=True)
    npwp = Column(String(50), nullable=True)
    bank_name = Column(String(100), nullable=True)
    bank_account_number = Column(String(50), nullable=True)
    bank_account_name = Column(String(255), nullable=True)
    party = Column(String(100), nullable=True)
    status = Column(String(30), default="Aktif")


class Truck(SoftDeleteMixin, Base):
    __tablename__ = 'trucks'

    id = Column(Integer, primary_key=True)
    truck_id = Column(String(50), nullable=True)
    plate_number = Column(String(20), nullable=False)
    truck_type = Column(String(50), nullable=True)
    capacity = Column(String(50), nullable=True)
    driver_name = Column(String(255), nullable=True)
    driver_phone = Column(String(50), nullable=True)
    status = Column(String(30), default="Tersedia")


# ==================== OPERATIONS ====================

class JobOrder(SoftDeleteMixin, Base):
    """Central operational record; invoices and expenses reference it loosely"""
    __tablename__ = 'job_orders'

    id = Column(Integer, primary_key=True)
    job_order_number = Column(String(50), nullable=False, unique=True)
    eta_kapal = Column(Date, nullable=True)
    bl_number = Column(String(100), nullable=True)
    no_invoice = Column(String(100), nullable=True)
    aju = Column(String(100), nullable=True)
    party = Column(String(100), nullable=True)
    exp_do = Column(Date, nullable=True)
    status_do = Column(String(50), nullable=True)
    pembayaran_do = Column(String(50), nullable=True)
    lokasi = Column(String(255), nullable=True)
    tujuan = Column(String(255), nullable=True)
    respond_bc = Column(String(100), nullable=True)
    status_bl = Column(String(50), nullable=True)
    customer_id = Column(Integer, ForeignKey('customers.id', ondelete='SET NULL'), nullable=True)
    customer_name = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(30), default="Baru")
    total_invoice_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_paid_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    payment_status = Column(String(30), nullable=True)


class Tracking(SoftDeleteMixin, Base):
    __tablename__ = 'trackings'

    id = Column(Integer, primary_key=True)
    company_name = Column(String(255), nullable=True)
    container_number = Column(String(50), nullable=True)
    aju = Column(String(100), nullable=True)
    depo_kosongan = Column(String(255), nullable=True)
    destination = Column(String(255), nullable=True)
    driver_name = Column(String(255), nullable=True)
    driver_phone = Column(String(50), nullable=True)
    plate_number = Column(String(20), nullable=True)
    status = Column(String(30), default="Proses")
    notes = Column(Text, nullable=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='SET NULL'), nullable=True)


class Warehouse(SoftDeleteMixin, Base):
    __tablename__ = 'warehouses'

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey('customers.id', ondelete='SET NULL'), nullable=True)
    customer_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    party = Column(String(100), nullable=True)
    quantity = Column(Integer, default=0)
    cbm = Column(Numeric(12, 3), default=Decimal("0"))
    unit_price = Column(Numeric(15, 2), default=Decimal("0.00"))
    handling_in_out = Column(String(20), nullable=True)  # IN, OUT, STORAGE
    administration = Column(String(255), nullable=True)
    daily_notes = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(30), default="Aktif")


# ==================== FINANCE ====================

class Expense(SoftDeleteMixin, Base):
    __tablename__ = 'expenses'

    id = Column(Integer, primary_key=True)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    expense_date = Column(Date, nullable=False)
    job_order_id = Column(Integer, ForeignKey('job_orders.id', ondelete='SET NULL'), nullable=True)
    vendor_id = Column(Integer, ForeignKey('vendors.id', ondelete='SET NULL'), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)


class InvoiceColumnsMixin(SoftDeleteMixin):
    """Columns shared by the primary, reimbursement and final invoice tables"""
    id = Column(Integer, primary_key=True)
    invoice_number = Column(String(100), nullable=False)
    invoice_date = Column(Date, nullable=True)
    no_aju = Column(String(100), nullable=True)
    bl_number = Column(String(100), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_address = Column(Text, nullable=True)
    customer_city = Column(String(100), nullable=True)
    party = Column(String(100), nullable=True)
    flight_vessel = Column(String(255), nullable=True)
    origin = Column(String(255), nullable=True)
    no_pen = Column(String(100), nullable=True)
    no_invoice = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    delivery_date = Column(Date, nullable=True)
    subtotal = Column(Numeric(15, 2), default=Decimal("0.00"))
    down_payment = Column(Numeric(15, 2), default=Decimal("0.00"))
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    remaining_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    status = Column(String(30), default="Belum Lunas")
    notes = Column(Text, nullable=True)

    @declared_attr
    def customer_id(cls):
        return Column(Integer, ForeignKey('customers.id', ondelete='SET NULL'), nullable=True)

    @declared_attr
    def job_order_id(cls):
        return Column(Integer, ForeignKey('job_orders.id', ondelete='SET NULL'), nullable=True)


class InvoiceItemColumnsMixin:
    id = Column(Integer, primary_key=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    created_at = Column(DateTime, default=datetime.utcnow)


class Invoice(InvoiceColumnsMixin, Base):
    """Primary invoice; the only variant carrying itemized down payments"""
    __tablename__ = 'invoices'

    dp_items = Column(JSON, nullable=True)

    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
                         order_by="InvoiceItem.id")


class InvoiceItem(InvoiceItemColumnsMixin, Base):
    __tablename__ = 'invoice_items'

    invoice_id = Column(Integer, ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False)

    invoice = relationship("Invoice", back_populates="items")


class ReimbursementInvoice(InvoiceColumnsMixin, Base):
    __tablename__ = 'invoices_reimbursement'

    items = relationship("ReimbursementInvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
                         order_by="ReimbursementInvoiceItem.id")


class ReimbursementInvoiceItem(InvoiceItemColumnsMixin, Base):
    __tablename__ = 'invoice_reimbursement_items'

    invoice_id = Column(Integer, ForeignKey('invoices_reimbursement.id', ondelete='CASCADE'), nullable=False)

    invoice = relationship("ReimbursementInvoice", back_populates="items")


class FinalInvoice(InvoiceColumnsMixin, Base):
    __tablename__ = 'invoices_final'

    items = relationship("FinalInvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
                         order_by="FinalInvoiceItem.id")


class FinalInvoiceItem(InvoiceItemColumnsMixin, Base):
    __tablename__ = 'invoice_final_items'

    invoice_id = Column(Integer, ForeignKey('invoices_final.id', ondelete='CASCADE'), nullable=False)

    invoice = relationship("FinalInvoice", back_populates="items")


class InvoiceDP(SoftDeleteMixin, Base):
    """Down-payment invoice; parts of one down payment share invoice_dp_number"""
    __tablename__ = 'invoice_dp'

    id = Column(Integer, primary_key=True)
    invoice_dp_number = Column(String(50), nullable=False)
    invoice_pib_number = Column(String(100), nullable=True)
    part_number = Column(Integer, default=1, nullable=False)
    invoice_date = Column(Date, nullable=True)
    customer_id = Column(Integer, ForeignKey('customers.id', ondelete='SET NULL'), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_address = Column(Text, nullable=True)
    customer_city = Column(String(100), nullable=True)
    bl_number = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    total_amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    status = Column(String(30), default="draft")
    notes = Column(Text, nullable=True)

    items = relationship("InvoiceDPItem", back_populates="invoice_dp", cascade="all, delete-orphan",
                         order_by="InvoiceDPItem.id")

    __table_args__ = (
        UniqueConstraint('invoice_dp_number', 'part_number', name='uq_invoice_dp_part'),
    )


class InvoiceDPItem(Base):
    __tablename__ = 'invoice_dp_items'

    id = Column(Integer, primary_key=True)
    invoice_dp_id = Column(Integer, ForeignKey('invoice_dp.id', ondelete='CASCADE'), nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(15, 2), default=Decimal("0.00"))
    created_at = Column(DateTime, default=datetime.utcnow)

    invoice_dp = relationship("InvoiceDP", back_populates="items")


# ==================== SALES ====================

class Quotation(SoftDeleteMixin, Base):
    __tablename__ = 'quotations'

    id = Column(Integer, primary_key=True)
    quotation_number = Column(String(50), nullable=False)
    quotation_date = Column(Date, nullable=True)
    customer_id = Column(Integer, ForeignKey('customers.id', ondelete='SET NULL'), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_address = Column(Text, nullable=True)
    route = Column(String(255), nullable=True)
    title = Column(String(255), nullable=True)
    status = Column(String(30), default="Draft")
    notes = Column(JSON, default=list)

    items = relationship("QuotationItem", back_populates="quotation", cascade="all, delete-orphan",
                         order_by="QuotationItem.item_no")


class QuotationItem(Base):
    __tablename__ = 'quotation_items'

    id = Column(Integer, primary_key=True)
    quotation_id = Column(Integer, ForeignKey('quotations.id', ondelete='CASCADE'), nullable=False)
    section = Column(String(20), nullable=False, default="rates")  # rates, green_line, red_line
    item_no = Column(Integer, default=1)
    description = Column(Text, nullable=False)
    lcl_rate = Column(Numeric(15, 2), nullable=True)
    fcl_20_rate = Column(Numeric(15, 2), nullable=True)
    fcl_40_rate = Column(Numeric(15, 2), nullable=True)

    quotation = relationship("Quotation", back_populates="items")


# ==================== AUDIT LOG ====================

class AuditLog(Base):
    """Audit trail for administrative and destructive operations"""
    __tablename__ = 'audit_logs'

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    email = Column(String(255), nullable=True)  # kept in case the user is deleted
    action = Column(String(50), nullable=False)
    resource_type = Column(String(100), nullable=False)
    resource_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    details = Column(Text, nullable=True)  # JSON string
    status = Column(String(20), default="success")
