"""
Pydantic Schemas for API Validation
"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import List, Optional
from datetime import date
from decimal import Decimal
from enum import Enum

DateType = date


# ==================== ENUMS ====================

class RoleEnum(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


class QuotationSectionEnum(str, Enum):
    RATES = "rates"
    GREEN_LINE = "green_line"
    RED_LINE = "red_line"


class JobOrderInvoiceTypeEnum(str, Enum):
    PENUMPUKAN = "penumpukan"
    DO = "do"
    BEHANDLE = "behandle"


# ==================== AUTH SCHEMAS ====================

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = Field(None, max_length=255)


# ==================== MASTER DATA SCHEMAS ====================

class CustomerBase(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    pic_name: List[str] = Field(default_factory=list)
    phone: List[str] = Field(default_factory=list)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    npwp: Optional[str] = Field(None, max_length=50)
    customer_type: Optional[str] = None
    status: str = "Aktif"


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    pic_name: Optional[List[str]] = None
    phone: Optional[List[str]] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    npwp: Optional[str] = Field(None, max_length=50)
    customer_type: Optional[str] = None
    status: Optional[str] = None


class VendorBase(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    pic_name: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    vendor_type: Optional[str] = None
    services: Optional[str] = None
    npwp: Optional[str] = Field(None, max_length=50)
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = Field(None, max_length=50)
    bank_account_name: Optional[str] = None
    party: Optional[str] = None
    status: str = "Aktif"


class VendorCreate(VendorBase):
    pass


class VendorUpdate(BaseModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    pic_name: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    vendor_type: Optional[str] = None
    services: Optional[str] = None
    npwp: Optional[str] = Field(None, max_length=50)
    bank_name: Optional[str] = None
    bank_account_number: Optional[str] = Field(None, max_length=50)
    bank_account_name: Optional[str] = None
    party: Optional[str] = None
    status: Optional[str] = None


class TruckBase(BaseModel):
    truck_id: Optional[str] = None
    plate_number: str = Field(..., min_length=1, max_length=20)
    truck_type: Optional[str] = None
    capacity: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = Field(None, max_length=50)
    status: str = "Tersedia"


class TruckCreate(TruckBase):
    pass


class TruckUpdate(BaseModel):
    truck_id: Optional[str] = None
    plate_number: Optional[str] = Field(None, min_length=1, max_length=20)
    truck_type: Optional[str] = None
    capacity: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = None


# ==================== OPERATIONS SCHEMAS ====================

class JobOrderBase(BaseModel):
    eta_kapal: Optional[date] = None
    bl_number: Optional[str] = None
    no_invoice: Optional[str] = None
    aju: Optional[str] = None
    party: Optional[str] = None
    exp_do: Optional[date] = None
    status_do: Optional[str] = None
    pembayaran_do: Optional[str] = None
    lokasi: Optional[str] = None
    tujuan: Optional[str] = None
    respond_bc: Optional[str] = None
    status_bl: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    total_invoice_amount: Optional[Decimal] = Field(None, ge=0)
    total_paid_amount: Optional[Decimal] = Field(None, ge=0)
    payment_status: Optional[str] = None


class JobOrderCreate(JobOrderBase):
    job_order_number: Optional[str] = Field(None, max_length=50)  # generated when omitted
    status: str = "Baru"


class JobOrderUpdate(JobOrderBase):
    job_order_number: Optional[str] = Field(None, min_length=1, max_length=50)


class TrackingBase(BaseModel):
    company_name: Optional[str] = None
    container_number: Optional[str] = None
    aju: Optional[str] = None
    depo_kosongan: Optional[str] = None
    destination: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    plate_number: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    vendor_id: Optional[int] = None


class TrackingCreate(TrackingBase):
    status: str = "Proses"


class TrackingUpdate(TrackingBase):
    pass


class WarehouseBase(BaseModel):
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    description: Optional[str] = None
    party: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    cbm: Optional[Decimal] = Field(None, ge=0)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    handling_in_out: Optional[str] = Field(None, max_length=20)
    administration: Optional[str] = None
    daily_notes: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class WarehouseCreate(WarehouseBase):
    status: str = "Aktif"


class WarehouseUpdate(WarehouseBase):
    pass


# ==================== FINANCE SCHEMAS ====================

class ExpenseBase(BaseModel):
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Decimal = Field(..., ge=0)
    expense_date: date
    job_order_id: Optional[int] = None
    vendor_id: Optional[int] = None
    notes: Optional[str] = None


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(BaseModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    expense_date: Optional[date] = None
    job_order_id: Optional[int] = None
    vendor_id: Optional[int] = None
    notes: Optional[str] = None


class LineItem(BaseModel):
    description: str = Field(..., min_length=1)
    amount: Decimal = Decimal("0.00")


class DownPaymentEntry(BaseModel):
    label: Optional[str] = None
    amount: Decimal = Field(..., ge=0)
    date: Optional[DateType] = None


class InvoiceBase(BaseModel):
    invoice_date: Optional[date] = None
    no_aju: Optional[str] = None
    bl_number: Optional[str] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_address: Optional[str] = None
    customer_city: Optional[str] = None
    party: Optional[str] = None
    flight_vessel: Optional[str] = None
    origin: Optional[str] = None
    no_pen: Optional[str] = None
    no_invoice: Optional[str] = None
    description: Optional[str] = None
    delivery_date: Optional[date] = None
    subtotal: Optional[Decimal] = None
    down_payment: Optional[Decimal] = Field(None, ge=0)
    total_amount: Optional[Decimal] = None
    remaining_amount: Optional[Decimal] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    job_order_id: Optional[int] = None
    dp_items: Optional[List[DownPaymentEntry]] = None  # primary invoices only
    items: Optional[List[LineItem]] = None


class InvoiceCreate(InvoiceBase):
    invoice_number: str = Field(..., min_length=1, max_length=100)
    items: List[LineItem] = Field(default_factory=list)


class InvoiceUpdate(InvoiceBase):
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=100)


class InvoiceDPBase(BaseModel):
    invoice_pib_number: Optional[str] = None
    invoice_date: Optional[date] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_address: Optional[str] = None
    customer_city: Optional[str] = None
    bl_number: Optional[str] = None
    description: Optional[str] = None
    total_amount: Optional[Decimal] = Field(None, ge=0)
    status: Optional[str] = None
    notes: Optional[str] = None
    items: Optional[List[LineItem]] = None


class InvoiceDPCreate(InvoiceDPBase):
    invoice_dp_number: Optional[str] = Field(None, max_length=50)  # generated when omitted
    part_number: int = Field(1, ge=1)
    status: str = "draft"
    items: List[LineItem] = Field(default_factory=list)


class InvoiceDPUpdate(InvoiceDPBase):
    invoice_dp_number: Optional[str] = Field(None, min_length=1, max_length=50)
    part_number: Optional[int] = Field(None, ge=1)


# ==================== QUOTATION SCHEMAS ====================

class QuotationItemIn(BaseModel):
    section: QuotationSectionEnum = QuotationSectionEnum.RATES
    item_no: Optional[int] = None
    description: str = Field(..., min_length=1)
    lcl_rate: Optional[Decimal] = None
    fcl_20_rate: Optional[Decimal] = None
    fcl_40_rate: Optional[Decimal] = None


class QuotationBase(BaseModel):
    quotation_date: Optional[date] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_address: Optional[str] = None
    route: Optional[str] = None
    title: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[List[str]] = None
    items: Optional[List[QuotationItemIn]] = None


class QuotationCreate(QuotationBase):
    quotation_number: Optional[str] = Field(None, max_length=50)  # generated when omitted
    status: str = "Draft"
    items: List[QuotationItemIn] = Field(default_factory=list)


class QuotationUpdate(QuotationBase):
    quotation_number: Optional[str] = Field(None, min_length=1, max_length=50)


# ==================== RECYCLE BIN SCHEMAS ====================

class RecycleBinRef(BaseModel):
    id: int
    table_name: str


class EmptyRecycleBinRequest(BaseModel):
    items: Optional[List[RecycleBinRef]] = None  # defaults to the whole bin


class RecycleBinEntry(BaseModel):
    id: int
    table_name: str
    table_label: str
    display_name: str
    description: str
    deleted_at: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
