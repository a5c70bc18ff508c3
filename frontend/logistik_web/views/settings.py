"""
Settings Views - User management for administrators
"""
from flask import Blueprint, render_template, request, redirect, url_for, flash
from logistik_web import manage_users_request, admin_required, error_message, get_current_user, MENU_ITEMS

bp = Blueprint('settings', __name__, url_prefix='/settings')

ROLES = ['admin', 'moderator', 'user']


def _flash_result(response, status, success_message):
    if status == 200:
        flash(success_message, 'success')
    elif isinstance(response, dict) and response.get('error') and isinstance(status, int) and status < 500:
        flash(response['error'], 'error')
    else:
        flash(error_message(response, status), 'error')


def _form_user_id():
    return request.form.get('user_id', type=int)


@bp.route('/users')
@admin_required
def users():
    """User management page"""
    response, status = manage_users_request('list-users')
    if status == 200:
        users = response.get('users', [])
    else:
        _flash_result(response, status, '')
        users = []

    status_filter = request.args.get('status', '')
    if status_filter:
        users = [u for u in users if u.get('approval_status') == status_filter]

    return render_template('settings/users.html', title='Manajemen User', users=users,
                           roles=ROLES, all_menus=MENU_ITEMS, status_filter=status_filter)


@bp.route('/users/<int:user_id>/approve', methods=['POST'])
@admin_required
def approve_user(user_id):
    response, status = manage_users_request('approve-user', {'user_id': user_id})
    _flash_result(response, status, 'User berhasil disetujui')
    return redirect(url_for('settings.users'))


@bp.route('/users/<int:user_id>/reject', methods=['POST'])
@admin_required
def reject_user(user_id):
    response, status = manage_users_request('reject-user', {'user_id': user_id})
    _flash_result(response, status, 'User ditolak')
    return redirect(url_for('settings.users'))


@bp.route('/users/role', methods=['POST'])
@admin_required
def change_role():
    """Assign or remove a role depending on the submitted operation"""
    data = {'user_id': _form_user_id(), 'role': request.form.get('role')}
    if request.form.get('operation') == 'remove':
        response, status = manage_users_request('remove-role', data)
        _flash_result(response, status, 'Role berhasil dihapus')
    else:
        response, status = manage_users_request('assign-role', data)
        _flash_result(response, status, 'Role berhasil ditambahkan')

    # Own role changes alter the sidebar
    if status == 200:
        get_current_user(refresh=True)
    return redirect(url_for('settings.users'))


@bp.route('/users/<int:user_id>/menu-access', methods=['POST'])
@admin_required
def menu_access(user_id):
    menu_keys = request.form.getlist('menu_keys')
    response, status = manage_users_request('update-menu-access', {'user_id': user_id, 'menu_keys': menu_keys})
    _flash_result(response, status, 'Akses menu berhasil diperbarui')
    return redirect(url_for('settings.users'))


@bp.route('/users/<int:user_id>/delete', methods=['POST'])
@admin_required
def delete_user(user_id):
    response, status = manage_users_request('delete-user', {'user_id': user_id})
    _flash_result(response, status, 'User berhasil dihapus')
    return redirect(url_for('settings.users'))


@bp.route('/users/<int:user_id>/reset-password', methods=['POST'])
@admin_required
def reset_password(user_id):
    new_password = request.form.get('new_password', '')
    if len(new_password) < 6:
        flash('Password minimal 6 karakter', 'error')
        return redirect(url_for('settings.users'))

    response, status = manage_users_request('reset-password', {'user_id': user_id, 'new_password': new_password})
    _flash_result(response, status, 'Password berhasil direset')
    return redirect(url_for('settings.users'))
