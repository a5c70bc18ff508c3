"""
Invoice Report Views - Merged invoice list, detail and exports
"""
from datetime import datetime
from flask import Blueprint, render_template, request, redirect, url_for, flash, make_response
from logistik_web import api_request, api_download, passthrough, menu_required, error_message

bp = Blueprint('invoices', __name__, url_prefix='/invoices')


def _matches(entry, search):
    haystack = ' '.join(str(entry.get(field) or '') for field in (
        'invoice_number', 'customer_name', 'bl_number', 'no_aju', 'party'
    ))
    return search.lower() in haystack.lower()


def _load_entries(search=''):
    entries, status = api_request('GET', '/invoices-merged')
    if status != 200:
        flash(error_message(entries, status), 'error')
        return []
    if search:
        entries = [e for e in entries if _matches(e, search)]
    return entries


def _totals(entries):
    return {
        'combined_total': sum(e.get('combined_total') or 0 for e in entries),
        'down_payment': sum(e.get('down_payment') or 0 for e in entries),
        'remaining_amount': sum(e.get('remaining_amount') or 0 for e in entries),
    }


@bp.route('')
@menu_required('laporan')
def index():
    """Merged invoice list"""
    search = request.args.get('q', '').strip()
    entries = _load_entries(search)

    summary, status = api_request('GET', '/invoices-merged/summary')
    if status != 200:
        summary = {}

    return render_template('invoices/index.html', title='Laporan Invoice', entries=entries,
                           totals=_totals(entries), summary=summary, search=search)


@bp.route('/detail')
@menu_required('laporan')
def detail():
    """One merged invoice with its line items"""
    invoice_number = request.args.get('number', '')
    params = {'invoice_number': invoice_number}

    entry, status = api_request('GET', '/invoices-merged/entry', params=params)
    if status != 200:
        flash(error_message(entry, status), 'error')
        return redirect(url_for('invoices.index'))

    detailed, status = api_request('GET', '/invoices-merged/items', params=params)
    if status != 200:
        detailed = {'items': [], 'dp_items': entry.get('dp_items', [])}

    return render_template('invoices/detail.html', title=f"Invoice {entry['invoice_number']}",
                           entry=entry, items=detailed.get('items', []),
                           dp_items=detailed.get('dp_items', []))


@bp.route('/pdf')
@menu_required('laporan')
def pdf():
    """Invoice Final PDF rendered by the backend"""
    invoice_number = request.args.get('number', '')
    content, status, headers = api_download('/invoices-merged/pdf', params={'invoice_number': invoice_number})
    if status != 200:
        flash('Gagal membuat PDF invoice', 'error')
        return redirect(url_for('invoices.index'))
    return passthrough(content, headers, 'application/pdf', 'invoice_final.pdf')


@bp.route('/export/excel')
@menu_required('laporan')
def export_excel():
    content, status, headers = api_download('/invoices-merged/export/excel')
    if status != 200:
        flash('Gagal mengekspor Excel', 'error')
        return redirect(url_for('invoices.index'))
    return passthrough(
        content, headers,
        'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        'laporan_invoice.xlsx'
    )


@bp.route('/export/pdf')
@menu_required('laporan')
def export_pdf():
    """Printable invoice list"""
    search = request.args.get('q', '').strip()
    entries = _load_entries(search)

    html = render_template('invoices/list_pdf.html', entries=entries, totals=_totals(entries),
                           search=search, now=datetime.now())

    # Needs the Pango system libraries, so only loaded when exporting
    from weasyprint import HTML

    pdf = HTML(string=html).write_pdf()

    response = make_response(pdf)
    response.headers['Content-Type'] = 'application/pdf'
    response.headers['Content-Disposition'] = f'attachment; filename=laporan_invoice_{datetime.now().strftime("%Y%m%d")}.pdf'
    return response


@bp.route('/outstanding')
@menu_required('laporan')
def outstanding():
    """Outstanding invoices grouped by age"""
    report, status = api_request('GET', '/reports/outstanding')
    if status != 200:
        flash(error_message(report, status), 'error')
        report = {'invoices': [], 'buckets': {}, 'total': 0, 'count': 0}
    return render_template('invoices/outstanding.html', title='Piutang Outstanding', report=report)


@bp.route('/profit-loss')
@menu_required('laporan')
def profit_loss():
    period = request.args.get('period', '6months')
    report, status = api_request('GET', '/reports/profit-loss', params={'period': period})
    if status != 200:
        flash(error_message(report, status), 'error')
        report = {'period': period, 'months': [], 'totals': {}}
    return render_template('invoices/profit_loss.html', title='Laba Rugi', report=report, period=period)
