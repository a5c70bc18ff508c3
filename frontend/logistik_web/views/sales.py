"""
Sales & CRM Views - quotations and their PDF
"""
from flask import Blueprint, redirect, url_for, flash
from logistik_web import api_download, passthrough, menu_required
from logistik_web.forms import Field
from logistik_web.views.crud import register_section

bp = Blueprint('sales', __name__, url_prefix='/sales')

QUOTATION_STATUSES = ['Draft', 'Terkirim', 'Diterima', 'Ditolak', 'Expired']

QUOTATION_FIELDS = [
    Field('quotation_number', 'No. Penawaran'),
    Field('quotation_date', 'Tanggal', 'date'),
    Field('customer_name', 'Pelanggan', required=True),
    Field('route', 'Rute'),
    Field('title', 'Judul'),
    Field('status', 'Status', 'select', required=True, options=QUOTATION_STATUSES),
    Field('customer_address', 'Alamat Pelanggan', 'textarea'),
    Field('notes', 'Catatan', 'lines'),
]

QUOTATION_ITEMS = [
    Field('section', 'Bagian', 'select', required=True, options=['rates', 'green_line', 'red_line']),
    Field('description', 'Deskripsi', required=True),
    Field('lcl_rate', 'LCL', 'number', minimum=0),
    Field('fcl_20_rate', "FCL 20'", 'number', minimum=0),
    Field('fcl_40_rate', "FCL 40'", 'number', minimum=0),
]

register_section(bp, 'quotations', 'Penawaran', 'sales-crm', QUOTATION_FIELDS, [
    ('quotation_number', 'No. Penawaran', None),
    ('quotation_date', 'Tanggal', 'date'),
    ('customer_name', 'Pelanggan', None),
    ('route', 'Rute', None),
    ('status', 'Status', None),
], items=QUOTATION_ITEMS, actions=[{'label': 'PDF', 'endpoint': 'sales.quotation_pdf', 'method': 'get'}])


@bp.route('/quotations/<int:record_id>/pdf')
@menu_required('sales-crm')
def quotation_pdf(record_id):
    content, status, headers = api_download(f'/quotations/{record_id}/pdf')
    if status != 200:
        flash('Gagal membuat PDF penawaran', 'error')
        return redirect(url_for('sales.quotations_index'))
    return passthrough(content, headers, 'application/pdf', 'penawaran.pdf')
