"""
Master Data Views - customers, vendors and trucks
"""
from flask import Blueprint
from logistik_web.forms import Field
from logistik_web.views.crud import register_section

bp = Blueprint('master', __name__, url_prefix='/master')

RECORD_STATUSES = ['Aktif', 'Tidak Aktif']
TRUCK_STATUSES = ['Tersedia', 'Dalam Perjalanan', 'Maintenance', 'Tidak Aktif']

CUSTOMER_FIELDS = [
    Field('company_name', 'Nama Perusahaan', required=True),
    Field('customer_type', 'Jenis', options=['Eksportir', 'Importir', 'Eksportir & Importir']),
    Field('pic_name', 'Nama PIC', 'lines'),
    Field('phone', 'Telepon', 'lines'),
    Field('email', 'Email', 'email'),
    Field('city', 'Kota'),
    Field('npwp', 'NPWP'),
    Field('status', 'Status', 'select', required=True, options=RECORD_STATUSES),
    Field('address', 'Alamat', 'textarea'),
]

VENDOR_FIELDS = [
    Field('company_name', 'Nama Perusahaan', required=True),
    Field('vendor_type', 'Jenis Vendor', options=['Trucking', 'Shipping Line', 'Depo', 'Gudang', 'Lainnya']),
    Field('pic_name', 'Nama PIC'),
    Field('phone', 'Telepon'),
    Field('email', 'Email', 'email'),
    Field('city', 'Kota'),
    Field('services', 'Layanan'),
    Field('party', 'Party'),
    Field('npwp', 'NPWP'),
    Field('bank_name', 'Bank'),
    Field('bank_account_number', 'No. Rekening'),
    Field('bank_account_name', 'Atas Nama'),
    Field('status', 'Status', 'select', required=True, options=RECORD_STATUSES),
    Field('address', 'Alamat', 'textarea'),
]

TRUCK_FIELDS = [
    Field('plate_number', 'Plat Nomor', required=True),
    Field('truck_id', 'ID Truk'),
    Field('truck_type', 'Jenis Truk', options=['Trailer 20ft', 'Trailer 40ft', 'Wingbox', 'Engkel', 'Tronton']),
    Field('capacity', 'Kapasitas'),
    Field('driver_name', 'Nama Sopir'),
    Field('driver_phone', 'Telepon Sopir'),
    Field('status', 'Status', 'select', required=True, options=TRUCK_STATUSES),
]

register_section(bp, 'customers', 'Pelanggan', 'master-data', CUSTOMER_FIELDS, [
    ('company_name', 'Perusahaan', None),
    ('pic_name', 'PIC', 'list'),
    ('phone', 'Telepon', 'list'),
    ('city', 'Kota', None),
    ('customer_type', 'Jenis', None),
    ('status', 'Status', None),
])

register_section(bp, 'vendors', 'Vendor', 'master-data', VENDOR_FIELDS, [
    ('company_name', 'Perusahaan', None),
    ('vendor_type', 'Jenis', None),
    ('pic_name', 'PIC', None),
    ('phone', 'Telepon', None),
    ('city', 'Kota', None),
    ('status', 'Status', None),
])

register_section(bp, 'trucks', 'Truk', 'master-data', TRUCK_FIELDS, [
    ('plate_number', 'Plat Nomor', None),
    ('truck_type', 'Jenis', None),
    ('capacity', 'Kapasitas', None),
    ('driver_name', 'Sopir', None),
    ('status', 'Status', None),
])
