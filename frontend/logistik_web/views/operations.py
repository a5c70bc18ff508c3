"""
Operations Views - job orders with their documents, trackings and warehouse stock
"""
from flask import Blueprint, render_template, request, redirect, url_for, flash
from logistik_web import api_request, api_download, api_upload, passthrough, menu_required, error_message
from logistik_web.forms import Field
from logistik_web.views.crud import register_section

bp = Blueprint('operations', __name__, url_prefix='/operations')

JOB_ORDER_STATUSES = ['Baru', 'Proses', 'Selesai', 'Dibatalkan']
JOB_ORDER_INVOICE_TYPES = {'penumpukan': 'Penumpukan', 'do': 'DO', 'behandle': 'Behandle'}

JOB_ORDER_FIELDS = [
    Field('job_order_number', 'No. Job Order'),
    Field('customer_name', 'Pelanggan', required=True),
    Field('eta_kapal', 'ETA Kapal', 'date'),
    Field('bl_number', 'No. BL'),
    Field('no_invoice', 'No. Invoice'),
    Field('aju', 'AJU'),
    Field('party', 'Party'),
    Field('exp_do', 'Exp. DO', 'date'),
    Field('status_do', 'Status DO'),
    Field('pembayaran_do', 'Pembayaran DO'),
    Field('lokasi', 'Lokasi'),
    Field('tujuan', 'Tujuan'),
    Field('respond_bc', 'Respon BC'),
    Field('status_bl', 'Status BL'),
    Field('total_invoice_amount', 'Total Invoice', 'number', minimum=0),
    Field('total_paid_amount', 'Total Dibayar', 'number', minimum=0),
    Field('payment_status', 'Status Pembayaran'),
    Field('status', 'Status', 'select', required=True, options=JOB_ORDER_STATUSES),
    Field('notes', 'Catatan', 'textarea'),
]

TRACKING_FIELDS = [
    Field('company_name', 'Perusahaan', required=True),
    Field('container_number', 'No. Kontainer'),
    Field('aju', 'AJU'),
    Field('depo_kosongan', 'Depo Kosongan'),
    Field('destination', 'Tujuan'),
    Field('driver_name', 'Sopir'),
    Field('driver_phone', 'Telepon Sopir'),
    Field('plate_number', 'Plat Nomor'),
    Field('status', 'Status', 'select', required=True, options=['Proses', 'Dalam Perjalanan', 'Selesai']),
    Field('notes', 'Catatan', 'textarea'),
]

WAREHOUSE_FIELDS = [
    Field('customer_name', 'Pelanggan', required=True),
    Field('description', 'Deskripsi Barang'),
    Field('party', 'Party'),
    Field('quantity', 'Jumlah', 'integer', minimum=0),
    Field('cbm', 'CBM', 'number', minimum=0),
    Field('unit_price', 'Harga Satuan', 'number', minimum=0),
    Field('handling_in_out', 'Handling', 'select', options=['IN', 'OUT', 'STORAGE']),
    Field('administration', 'Administrasi'),
    Field('status', 'Status', 'select', required=True, options=['Aktif', 'Keluar']),
    Field('daily_notes', 'Catatan Harian', 'textarea'),
    Field('notes', 'Catatan', 'textarea'),
]

JOB_ORDER_ACTIONS = [{'label': 'File', 'endpoint': 'operations.job_order_files', 'method': 'get'}] + [
    {'label': f'PDF {label}', 'endpoint': 'operations.job_order_pdf', 'method': 'get',
     'args': {'invoice_type': key}}
    for key, label in JOB_ORDER_INVOICE_TYPES.items()
]

register_section(bp, 'job-orders', 'Job Order', 'operasional', JOB_ORDER_FIELDS, [
    ('job_order_number', 'No. Job Order', None),
    ('customer_name', 'Pelanggan', None),
    ('bl_number', 'No. BL', None),
    ('eta_kapal', 'ETA Kapal', 'date'),
    ('tujuan', 'Tujuan', None),
    ('status', 'Status', None),
], actions=JOB_ORDER_ACTIONS)

register_section(bp, 'trackings', 'Tracking', 'operasional', TRACKING_FIELDS, [
    ('company_name', 'Perusahaan', None),
    ('container_number', 'No. Kontainer', None),
    ('destination', 'Tujuan', None),
    ('driver_name', 'Sopir', None),
    ('plate_number', 'Plat Nomor', None),
    ('status', 'Status', None),
])

register_section(bp, 'warehouses', 'Gudang', 'operasional', WAREHOUSE_FIELDS, [
    ('customer_name', 'Pelanggan', None),
    ('description', 'Barang', None),
    ('quantity', 'Jumlah', None),
    ('cbm', 'CBM', None),
    ('handling_in_out', 'Handling', None),
    ('status', 'Status', None),
])


# ==================== JOB ORDER DOCUMENTS ====================

@bp.route('/job-orders/<int:record_id>/pdf/<invoice_type>')
@menu_required('operasional')
def job_order_pdf(record_id, invoice_type):
    content, status, headers = api_download(f'/job-orders/{record_id}/pdf/{invoice_type}')
    if status != 200:
        flash('Gagal membuat PDF invoice', 'error')
        return redirect(url_for('operations.job_orders_index'))
    return passthrough(content, headers, 'application/pdf', f'invoice_{invoice_type}.pdf')


@bp.route('/job-orders/<int:record_id>/files')
@menu_required('operasional')
def job_order_files(record_id):
    """Uploaded invoices of one job order, one category at a time"""
    job_order, status = api_request('GET', f'/job-orders/{record_id}')
    if status != 200:
        flash(error_message(job_order, status), 'error')
        return redirect(url_for('operations.job_orders_index'))

    categories, status = api_request('GET', '/job-orders/files/categories')
    if status != 200:
        categories = []
    keys = [c['key'] for c in categories]
    category = request.args.get('category', '')
    if category not in keys:
        category = keys[0] if keys else ''

    files, status = api_request('GET', f'/job-orders/{record_id}/files',
                                params={'category': category} if category else None)
    if status != 200:
        flash(error_message(files, status), 'error')
        files = []

    return render_template('operations/files.html', title=f"File {job_order.get('job_order_number') or ''}",
                           job_order=job_order, categories=categories, category=category, files=files)


@bp.route('/job-orders/<int:record_id>/files', methods=['POST'])
@menu_required('operasional')
def upload_job_order_file(record_id):
    category = request.form.get('category', '')
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        flash('Pilih file yang akan diupload', 'error')
        return redirect(url_for('operations.job_order_files', record_id=record_id, category=category))

    response, status = api_upload(f'/job-orders/{record_id}/files', upload,
                                  data={'category': category} if category else None)
    if status == 200:
        flash(response.get('message', 'File berhasil diupload'), 'success')
    else:
        flash(error_message(response, status), 'error')
    return redirect(url_for('operations.job_order_files', record_id=record_id, category=category))


@bp.route('/job-orders/<int:record_id>/files/delete', methods=['POST'])
@menu_required('operasional')
def delete_job_order_file(record_id):
    category = request.form.get('category', '')
    response, status = api_request('DELETE', f'/job-orders/{record_id}/files',
                                   params={'path': request.form.get('path', '')})
    if status == 200:
        flash(response.get('message', 'File berhasil dihapus'), 'success')
    else:
        flash(error_message(response, status), 'error')
    return redirect(url_for('operations.job_order_files', record_id=record_id, category=category))


@bp.route('/job-orders/<int:record_id>/files/download')
@menu_required('operasional')
def download_job_order_file(record_id):
    """Fetch a signed link from the backend and relay the file"""
    path = request.args.get('path', '')
    signed, status = api_request('GET', f'/job-orders/{record_id}/files/signed-url', params={'path': path})
    if status != 200:
        flash(error_message(signed, status), 'error')
        return redirect(url_for('operations.job_order_files', record_id=record_id))

    content, status, headers = api_download('/files/download', params={'token': signed['token']})
    if status != 200:
        flash('Gagal mengunduh file', 'error')
        return redirect(url_for('operations.job_order_files', record_id=record_id))
    return passthrough(content, headers, headers.get('Content-Type', 'application/octet-stream'),
                       path.rsplit('/', 1)[-1])
