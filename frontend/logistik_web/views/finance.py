"""
Finance Views - invoices, DP invoices and expenses
"""
from flask import Blueprint, redirect, url_for, flash
from logistik_web import api_request, menu_required, error_message
from logistik_web.forms import Field
from logistik_web.views.crud import register_section

bp = Blueprint('finance', __name__, url_prefix='/finance')

STANDARD_EXPENSE_CATEGORIES = ['Biaya Truk', 'Biaya Pelabuhan', 'Biaya Shipping Line', 'Biaya Gudang',
                               'Biaya Operasional']


def expense_categories():
    """Standard categories followed by the ones already in use"""
    categories_data, status = api_request('GET', '/expenses/categories')
    used = categories_data.get('categories', []) if status == 200 and categories_data else []
    return STANDARD_EXPENSE_CATEGORIES + [c for c in used if c not in STANDARD_EXPENSE_CATEGORIES]


def invoice_totals(data):
    """Subtotal from the line items; the remainder is what the down payment leaves"""
    subtotal = sum(item.get('amount', 0) for item in data['items'])
    data['subtotal'] = subtotal
    data['total_amount'] = subtotal
    data['remaining_amount'] = subtotal - data.get('down_payment', 0)
    return data


def invoice_dp_total(data):
    data['total_amount'] = sum(item.get('amount', 0) for item in data['items'])
    return data


INVOICE_FIELDS = [
    Field('invoice_number', 'No. Invoice', required=True),
    Field('invoice_date', 'Tanggal', 'date'),
    Field('customer_name', 'Pelanggan', required=True),
    Field('customer_city', 'Kota'),
    Field('no_aju', 'No. AJU'),
    Field('bl_number', 'No. BL'),
    Field('party', 'Party'),
    Field('flight_vessel', 'Kapal / Penerbangan'),
    Field('origin', 'Asal'),
    Field('no_pen', 'No. PEN'),
    Field('delivery_date', 'Tanggal Kirim', 'date'),
    Field('down_payment', 'Uang Muka', 'number', minimum=0),
    Field('status', 'Status', 'select', required=True, options=['Belum Lunas', 'Lunas']),
    Field('customer_address', 'Alamat Pelanggan', 'textarea'),
    Field('description', 'Keterangan', 'textarea'),
    Field('notes', 'Catatan', 'textarea'),
]

INVOICE_DP_FIELDS = [
    Field('invoice_dp_number', 'No. Invoice DP'),
    Field('part_number', 'Bagian Ke', 'integer', minimum=1),
    Field('invoice_pib_number', 'No. Invoice PIB'),
    Field('invoice_date', 'Tanggal', 'date'),
    Field('customer_name', 'Pelanggan', required=True),
    Field('customer_city', 'Kota'),
    Field('bl_number', 'No. BL'),
    Field('status', 'Status', 'select', required=True, options=['draft', 'Lunas']),
    Field('customer_address', 'Alamat Pelanggan', 'textarea'),
    Field('description', 'Keterangan', 'textarea'),
    Field('notes', 'Catatan', 'textarea'),
]

LINE_ITEMS = [
    Field('description', 'Deskripsi', required=True),
    Field('amount', 'Jumlah', 'number'),
]

EXPENSE_FIELDS = [
    Field('category', 'Kategori', required=True, options=expense_categories),
    Field('expense_date', 'Tanggal', 'date', required=True),
    Field('amount', 'Jumlah', 'number', required=True, minimum=0),
    Field('description', 'Deskripsi'),
    Field('notes', 'Catatan', 'textarea'),
]

INVOICE_COLUMNS = [
    ('invoice_number', 'No. Invoice', None),
    ('invoice_date', 'Tanggal', 'date'),
    ('customer_name', 'Pelanggan', None),
    ('no_aju', 'AJU', None),
    ('total_amount', 'Total', 'rupiah'),
    ('status', 'Status', None),
]

for _slug, _label in (('invoices', 'Invoice'),
                      ('invoices-reimbursement', 'Invoice Reimbursement'),
                      ('invoices-final', 'Invoice Final')):
    register_section(bp, _slug, _label, 'keuangan', INVOICE_FIELDS, INVOICE_COLUMNS, items=LINE_ITEMS,
                     prepare=invoice_totals)

register_section(bp, 'invoice-dp', 'Invoice DP', 'keuangan', INVOICE_DP_FIELDS, [
    ('invoice_dp_number', 'No. Invoice DP', None),
    ('part_number', 'Bagian', None),
    ('invoice_date', 'Tanggal', 'date'),
    ('customer_name', 'Pelanggan', None),
    ('total_amount', 'Total', 'rupiah'),
    ('status', 'Status', None),
], items=LINE_ITEMS, prepare=invoice_dp_total,
   actions=[{'label': 'Duplikat', 'endpoint': 'finance.duplicate_invoice_dp', 'method': 'post'}])

register_section(bp, 'expenses', 'Pengeluaran', 'keuangan', EXPENSE_FIELDS, [
    ('expense_date', 'Tanggal', 'date'),
    ('category', 'Kategori', None),
    ('description', 'Deskripsi', None),
    ('amount', 'Jumlah', 'rupiah'),
])


@bp.route('/invoice-dp/<int:record_id>/duplicate', methods=['POST'])
@menu_required('keuangan')
def duplicate_invoice_dp(record_id):
    """Copy an invoice DP as the next part of the same number"""
    response, status = api_request('POST', f'/invoice-dp/{record_id}/duplicate')
    if status == 200:
        flash(f"Invoice DP {response.get('invoice_dp_number')} bagian {response.get('part_number')} dibuat",
              'success')
    else:
        flash(error_message(response, status), 'error')
    return redirect(url_for('finance.invoice_dp_index'))
