"""
Recycle Bin Views
"""
from flask import Blueprint, render_template, request, redirect, url_for, flash
from logistik_web import api_request, approval_required, error_message

bp = Blueprint('recycle_bin', __name__, url_prefix='/recycle-bin')


@bp.route('')
@approval_required
def index():
    """Soft-deleted rows from every table"""
    items, status = api_request('GET', '/recycle-bin')
    if status != 200:
        flash(error_message(items, status), 'error')
        items = []

    table_filter = request.args.get('table', '')
    if table_filter:
        items = [item for item in items if item.get('table_name') == table_filter]

    return render_template('recycle_bin/index.html', title='Recycle Bin', items=items,
                           table_filter=table_filter)


@bp.route('/restore', methods=['POST'])
@approval_required
def restore():
    data = {
        'id': request.form.get('id', type=int),
        'table_name': request.form.get('table_name')
    }
    response, status = api_request('POST', '/recycle-bin/restore', data=data)

    if status == 200:
        flash(response.get('message', 'Data berhasil dipulihkan'), 'success')
    else:
        flash(error_message(response, status), 'error')
    return redirect(url_for('recycle_bin.index'))


@bp.route('/delete', methods=['POST'])
@approval_required
def permanent_delete():
    table_name = request.form.get('table_name')
    record_id = request.form.get('id', type=int)
    response, status = api_request('DELETE', f'/recycle-bin/{table_name}/{record_id}')

    if status == 200:
        flash(response.get('message', 'Data dihapus permanen'), 'success')
    else:
        flash(error_message(response, status), 'error')
    return redirect(url_for('recycle_bin.index'))


@bp.route('/empty', methods=['POST'])
@approval_required
def empty():
    """Permanently delete everything in the bin"""
    response, status = api_request('POST', '/recycle-bin/empty', data={})

    if status == 200:
        flash(response.get('message', 'Recycle Bin berhasil dikosongkan'), 'success')
    else:
        flash(error_message(response, status), 'error')
    return redirect(url_for('recycle_bin.index'))
