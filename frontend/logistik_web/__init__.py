"""
Logistik ERP web frontend

Server-rendered pages on top of the backend API. The session keeps the
bearer token and the last /auth/me payload (roles, menu access, approval).
"""
import os
import requests
from datetime import datetime
from flask import Flask, render_template, redirect, url_for, session, abort, make_response
from flask_wtf.csrf import CSRFProtect
from functools import wraps
from dotenv import load_dotenv

load_dotenv()

app = Flask(__name__)
app.secret_key = os.getenv('SECRET_KEY', 'logistik-web-dev-secret')
app.config.update(
    BACKEND_URL=os.getenv('BACKEND_URL', 'http://localhost:8000').rstrip('/'),
    API_KEY=os.getenv('API_KEY', ''),
    REQUEST_TIMEOUT=int(os.getenv('REQUEST_TIMEOUT', '30')),
    SESSION_COOKIE_HTTPONLY=True,
    SESSION_COOKIE_SAMESITE='Lax',
    WTF_CSRF_TIME_LIMIT=None,
)
csrf = CSRFProtect(app)

# Navigation sections; the keys match the backend menu keys
MENU_ITEMS = [
    {'key': 'dashboard', 'label': 'Dashboard', 'endpoint': 'dashboard.index'},
    {'key': 'master-data', 'label': 'Master Data', 'endpoint': 'master.customers_index'},
    {'key': 'sales-crm', 'label': 'Sales & CRM', 'endpoint': 'sales.quotations_index'},
    {'key': 'operasional', 'label': 'Operasional', 'endpoint': 'operations.job_orders_index'},
    {'key': 'keuangan', 'label': 'Keuangan', 'endpoint': 'finance.invoices_index'},
    {'key': 'laporan', 'label': 'Laporan', 'endpoint': 'invoices.index'},
]

CONNECTION_ERROR = "Backend connection error"


# ==================== ERROR MAPPER ====================

ERROR_MESSAGES = {
    '23505': 'Data ini sudah ada dalam sistem.',
    '23503': 'Tidak dapat menghapus data yang masih digunakan.',
    '23502': 'Data yang diperlukan belum lengkap.',
    '42501': 'Anda tidak memiliki akses untuk melakukan operasi ini.',
    '42P01': 'Terjadi kesalahan konfigurasi. Silakan hubungi administrator.',
}
NETWORK_ERROR_MESSAGE = 'Koneksi gagal. Periksa koneksi internet Anda.'
GENERIC_ERROR_MESSAGE = 'Terjadi kesalahan. Silakan coba lagi atau hubungi administrator.'


def error_message(result, status):
    """User-facing Indonesian message for a failed api_request() result"""
    # api_request reports transport failures as a string status
    if isinstance(status, str):
        return NETWORK_ERROR_MESSAGE

    result = result if isinstance(result, dict) else {}
    code = result.get('code')
    if code in ERROR_MESSAGES:
        return ERROR_MESSAGES[code]

    text = result.get('detail') or result.get('error')
    if isinstance(text, str):
        if 'RLS' in text or '42501' in text:
            return ERROR_MESSAGES['42501']
        for known_code, message in ERROR_MESSAGES.items():
            if known_code in text:
                return message
        if status < 500:
            return text
    return GENERIC_ERROR_MESSAGE


# ==================== BACKEND CALLS ====================

def _headers(include_auth=True):
    headers = {'Content-Type': 'application/json'}
    if include_auth and 'access_token' in session:
        headers['Authorization'] = f"Bearer {session['access_token']}"
    return headers


def _send(method, url, headers, data=None, params=None):
    """Issue one request; returns (json or None, status code or error text)"""
    try:
        response = requests.request(method, url, json=data, params=params, headers=headers,
                                    timeout=app.config['REQUEST_TIMEOUT'])
    except requests.exceptions.ConnectionError:
        return None, CONNECTION_ERROR
    except requests.exceptions.RequestException as e:
        return None, str(e)
    try:
        body = response.json() if response.content else {}
    except ValueError:
        body = {}
    return body, response.status_code


def api_request(method, endpoint, data=None, params=None, include_auth=True):
    """Call /api/v1{endpoint}; returns (json, status)"""
    if method not in ('GET', 'POST', 'PUT', 'DELETE'):
        return None, "Invalid method"
    url = f"{app.config['BACKEND_URL']}/api/v1{endpoint}"
    return _send(method, url, _headers(include_auth), data=data, params=params)


def api_download(endpoint, params=None):
    """Binary GET for PDF and Excel passthrough; returns (content, status, headers)"""
    url = f"{app.config['BACKEND_URL']}/api/v1{endpoint}"
    try:
        response = requests.get(url, headers=_headers(), params=params,
                                timeout=app.config['REQUEST_TIMEOUT'])
    except requests.exceptions.RequestException:
        return None, CONNECTION_ERROR, {}
    return response.content, response.status_code, response.headers


def api_upload(endpoint, upload, data=None):
    """Multipart POST of one werkzeug FileStorage; returns (json, status)"""
    url = f"{app.config['BACKEND_URL']}/api/v1{endpoint}"
    headers = _headers()
    # requests sets the multipart boundary itself
    del headers['Content-Type']
    try:
        response = requests.post(url, headers=headers, data=data,
                                 files={'file': (upload.filename, upload.stream, upload.mimetype)},
                                 timeout=app.config['REQUEST_TIMEOUT'])
    except requests.exceptions.RequestException:
        return None, CONNECTION_ERROR
    try:
        body = response.json() if response.content else {}
    except ValueError:
        body = {}
    return body, response.status_code


def passthrough(content, headers, content_type, fallback_name):
    """Flask response relaying a backend download"""
    response = make_response(content)
    response.headers['Content-Type'] = content_type
    response.headers['Content-Disposition'] = headers.get(
        'Content-Disposition', f'attachment; filename={fallback_name}'
    )
    return response


def manage_users_request(action, data=None):
    """Action-dispatched user administration; GET without a body, POST with one"""
    headers = _headers()
    if app.config['API_KEY']:
        headers['apikey'] = app.config['API_KEY']
    url = f"{app.config['BACKEND_URL']}/manage-users"
    method = 'GET' if data is None else 'POST'
    return _send(method, url, headers, data=data, params={'action': action})


# ==================== SESSION & ACCESS ====================

def get_current_user(refresh=False):
    """Cached /auth/me payload, refetched when asked or missing"""
    if 'access_token' not in session:
        return None
    if not refresh and 'user_data' in session:
        return session['user_data']

    user_data, status = api_request('GET', '/auth/me')
    if status != 200:
        return None
    session['user_data'] = user_data
    return user_data


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if 'access_token' not in session:
            return redirect(url_for('auth.login'))
        return f(*args, **kwargs)
    return wrapper


def approval_required(f):
    """Signed in and approved; pending or rejected accounts land on the waiting page"""
    @wraps(f)
    @login_required
    def wrapper(*args, **kwargs):
        user = get_current_user()
        if user is None:
            session.clear()
            return redirect(url_for('auth.login'))
        if user.get('effective_approval_status') != 'approved':
            return redirect(url_for('auth.pending'))
        return f(*args, **kwargs)
    return wrapper


def menu_required(menu_key):
    """Approved and granted ``menu_key``; admins hold every key"""
    def decorator(f):
        @wraps(f)
        @approval_required
        def wrapper(*args, **kwargs):
            if menu_key not in (get_current_user() or {}).get('effective_menu_access', []):
                abort(403)
            return f(*args, **kwargs)
        return wrapper
    return decorator


def admin_required(f):
    @wraps(f)
    @approval_required
    def wrapper(*args, **kwargs):
        if not (get_current_user() or {}).get('isAdmin'):
            abort(403)
        return f(*args, **kwargs)
    return wrapper


@app.context_processor
def inject_globals():
    user = get_current_user()
    allowed = set((user or {}).get('effective_menu_access', []))
    return {
        'current_user': user,
        'app_name': 'Logistik ERP',
        'current_year': datetime.now().year,
        'menu_items': [item for item in MENU_ITEMS if item['key'] in allowed],
        'has_menu': lambda key: key in allowed,
    }


@app.template_filter('rupiah')
def rupiah_filter(value):
    """Format a number as IDR without decimals: Rp 1.500.000"""
    try:
        amount = round(float(value))
    except (ValueError, TypeError):
        amount = 0
    text = f"Rp {abs(amount):,}".replace(',', '.')
    return f"-{text}" if amount < 0 else text


@app.template_filter('date')
def date_filter(value, format='%d/%m/%Y'):
    """Format an ISO date or datetime string"""
    try:
        if value:
            return datetime.fromisoformat(str(value)).strftime(format)
    except ValueError:
        pass
    return value or '-'


# ==================== ERROR PAGES ====================

def _error_page(code):
    def handler(error):
        return render_template(f'shared/{code}.html'), code
    return handler


for _code in (403, 404, 500):
    app.register_error_handler(_code, _error_page(_code))


# ==================== BLUEPRINTS ====================

from logistik_web.views import (  # noqa: E402
    auth, dashboard, recycle_bin, settings, invoices, reports, master, sales, operations, finance
)

for _view in (auth, dashboard, recycle_bin, settings, invoices, reports, master, sales, operations, finance):
    app.register_blueprint(_view.bp)


@app.route('/')
def index():
    if 'access_token' in session:
        return redirect(url_for('dashboard.index'))
    return redirect(url_for('auth.login'))
