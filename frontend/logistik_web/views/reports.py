"""
Report Views - payments, expenses, shipments, fleet, warehouse and service performance
"""
from flask import Blueprint, render_template, request, flash
from logistik_web import api_request, menu_required, error_message

bp = Blueprint('reports', __name__, url_prefix='/reports')


def _load(endpoint, empty, **filters):
    """Backend report with the non-empty filters applied; ``empty`` on failure"""
    params = {key: value for key, value in filters.items() if value}
    report, status = api_request('GET', endpoint, params=params or None)
    if status != 200:
        flash(error_message(report, status), 'error')
        return empty
    return report


def _filters(*names):
    return {name: request.args.get(name, '').strip() for name in names}


@bp.route('/payments')
@menu_required('laporan')
def payments():
    filters = _filters('month', 'type', 'search')
    report = _load('/reports/payments', {'payments': [], 'count': 0, 'total_amount': 0,
                                         'count_by_type': {}, 'months': []}, **filters)
    return render_template('reports/payments.html', title='Laporan Pembayaran', report=report, filters=filters)


@bp.route('/expenses')
@menu_required('laporan')
def expenses():
    filters = _filters('month', 'category', 'search')
    report = _load('/reports/expenses', {'expenses': [], 'count': 0, 'total_amount': 0,
                                         'by_category': {}, 'months': []}, **filters)
    return render_template('reports/expenses.html', title='Laporan Pengeluaran', report=report, filters=filters)


@bp.route('/shipments')
@menu_required('laporan')
def shipments():
    filters = _filters('month', 'status', 'search')
    report = _load('/reports/shipments', {'orders': [], 'count': 0, 'by_status': {}, 'completion_rate': 0,
                                          'monthly': [], 'months': []}, **filters)
    return render_template('reports/shipments.html', title='Laporan Pengiriman', report=report, filters=filters)


@bp.route('/truck-utilization')
@menu_required('laporan')
def truck_utilization():
    report = _load('/reports/truck-utilization', {'total': 0, 'by_status': {}, 'utilization_rate': 0,
                                                  'availability_rate': 0, 'by_type': [], 'trucks': []})
    return render_template('reports/truck_utilization.html', title='Utilisasi Truk', report=report)


@bp.route('/warehouse-occupancy')
@menu_required('laporan')
def warehouse_occupancy():
    filters = _filters('handling', 'search')
    report = _load('/reports/warehouse-occupancy', {
        'items': [], 'count': 0, 'total_cbm': 0, 'total_items': 0, 'total_value': 0, 'handling': {},
        'capacity_cbm': 0, 'usage_percentage': 0, 'top_customers': [],
    }, **filters)
    return render_template('reports/warehouse_occupancy.html', title='Okupansi Gudang', report=report,
                           filters=filters)


@bp.route('/service-performance')
@menu_required('laporan')
def service_performance():
    report = _load('/reports/service-performance', {
        'total_orders': 0, 'completed_orders': 0, 'completion_rate': 0, 'tracking_total': 0,
        'tracking_completion_rate': 0, 'active_customers': 0, 'monthly': [],
    })
    return render_template('reports/service_performance.html', title='Kinerja Layanan', report=report)
