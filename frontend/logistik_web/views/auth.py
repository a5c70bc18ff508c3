"""
Sign-in, sign-up and the approval waiting page
"""
from flask import Blueprint, render_template, request, redirect, url_for, session, flash
from logistik_web import api_request, manage_users_request, error_message, get_current_user, login_required

bp = Blueprint('auth', __name__, url_prefix='/auth')

FORM_FIELDS = {
    'login': ('email', 'password'),
    'signup': ('email', 'password', 'full_name'),
}


def _start_session(access_token):
    session['access_token'] = access_token
    session.pop('user_data', None)
    return get_current_user(refresh=True)


def _landing(user):
    if user and user.get('effective_approval_status') == 'approved':
        return redirect(url_for('dashboard.index'))
    return redirect(url_for('auth.pending'))


def _credentials(form_name):
    data = {field: request.form.get(field, '') for field in FORM_FIELDS[form_name]}
    data['email'] = data['email'].strip()
    if 'full_name' in data:
        data['full_name'] = data['full_name'].strip() or None
    return data


def _auth_form(form_name, title, failure_status, success_message=None):
    """GET renders the form; POST sends it to /auth/{form_name} and opens a session on success"""
    template = f'auth/{form_name}.html'
    if request.method == 'GET':
        if 'access_token' in session:
            return redirect(url_for('dashboard.index'))
        return render_template(template, title=title)

    result, status = api_request('POST', f'/auth/{form_name}', data=_credentials(form_name), include_auth=False)
    if status == 200 and result and 'access_token' in result:
        if success_message:
            flash(success_message, 'success')
        return _landing(_start_session(result['access_token']))

    message = error_message(result, status)
    flash(message, 'error')
    return render_template(template, title=title, error=message), failure_status


@bp.route('/login', methods=['GET', 'POST'])
def login():
    return _auth_form('login', 'Login', 401)


@bp.route('/signup', methods=['GET', 'POST'])
def signup():
    return _auth_form('signup', 'Daftar', 400,
                      success_message='Pendaftaran berhasil. Akun Anda menunggu persetujuan admin.')


@bp.route('/logout')
def logout():
    session.clear()
    return redirect(url_for('auth.login'))


@bp.route('/pending')
@login_required
def pending():
    """Waiting page for accounts that are not approved yet"""
    user = get_current_user(refresh=True)
    if user is None:
        session.clear()
        return redirect(url_for('auth.login'))
    if user.get('effective_approval_status') == 'approved':
        return redirect(url_for('dashboard.index'))
    return render_template('auth/pending.html', title='Menunggu Persetujuan',
                           status=user.get('effective_approval_status', 'pending'))


@bp.route('/setup-first-admin', methods=['POST'])
@login_required
def setup_first_admin():
    """Make the current user the first admin when no admin exists yet"""
    response, status = manage_users_request('setup-first-admin', data={})
    if status == 200:
        flash('Anda sekarang adalah admin', 'success')
        return _landing(get_current_user(refresh=True))

    message = response.get('error') if isinstance(response, dict) and status == 400 else None
    flash(message or error_message(response, status), 'error')
    return redirect(url_for('auth.pending'))
