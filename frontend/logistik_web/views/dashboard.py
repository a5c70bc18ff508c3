"""
Dashboard Views
"""
from flask import Blueprint, render_template
from logistik_web import api_request, menu_required

bp = Blueprint('dashboard', __name__, url_prefix='/dashboard')


@bp.route('')
@menu_required('dashboard')
def index():
    """Main dashboard"""
    stats, status = api_request('GET', '/dashboard/stats')
    if status != 200:
        stats = {}

    charts, status = api_request('GET', '/dashboard/charts')
    if status != 200:
        charts = {}

    recent_orders, status = api_request('GET', '/dashboard/recent-orders')
    if status != 200:
        recent_orders = []

    outstanding, status = api_request('GET', '/dashboard/outstanding-invoices')
    if status != 200:
        outstanding = []

    return render_template('dashboard/index.html', title='Dashboard', stats=stats,
                           charts=charts, recent_orders=recent_orders, outstanding=outstanding)
