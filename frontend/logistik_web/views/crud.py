"""
List, create, edit and delete screens for one backend resource

register_section adds the four routes to a blueprint; the menu key guards
them the same way the backend router guards the API.
"""
from flask import render_template, request, redirect, url_for, flash
from logistik_web import api_request, menu_required, error_message
from logistik_web.forms import parse_form, parse_items, item_rows, display_values, choices

# Blueprint name -> [(label, list endpoint)], drawn as tabs above each list
SECTIONS = {}

BLANK_ITEM_ROWS = 3


def _matches(record, columns, search):
    haystack = ' '.join(str(record.get(key) or '') for key, _, _ in columns)
    return search.lower() in haystack.lower()


def register_section(bp, slug, label, menu_key, fields, columns, items=None, actions=(), prepare=None):
    """
    Register /<slug>, /<slug>/new, /<slug>/<id>/edit and /<slug>/<id>/delete.

    ``columns`` are (record key, heading, format) triples for the list,
    ``items`` the line-item columns when records carry items, and
    ``actions`` extra per-row links or buttons. ``prepare`` fills derived
    values (totals) into a valid body before it is sent.
    """
    api_path = f'/{slug}'
    name = slug.replace('-', '_')
    section = {
        'label': label,
        'columns': columns,
        'actions': actions,
        'index': f'{bp.name}.{name}_index',
        'new': f'{bp.name}.{name}_new',
        'edit': f'{bp.name}.{name}_edit',
        'delete': f'{bp.name}.{name}_delete',
    }
    SECTIONS.setdefault(bp.name, []).append((label, section['index']))

    def render_form(title, values, rows, errors, record_id=None, status=200):
        blank = [dict.fromkeys((c.name for c in items or []), '') for _ in range(BLANK_ITEM_ROWS)]
        return render_template(
            'shared/resource_form.html', title=title, section=section, fields=fields,
            choices={field.name: choices(field) for field in fields + (items or []) if field.options},
            item_columns=items, rows=rows + blank, values=values, errors=errors, record_id=record_id,
        ), status

    def submitted():
        data, errors = parse_form(fields, request.form)
        if items:
            data['items'], item_errors = parse_items(items, request.form)
            errors += item_errors
        if prepare and not errors:
            data = prepare(data)
        return data, errors

    def index():
        search = request.args.get('q', '').strip()
        records, status = api_request('GET', api_path)
        if status != 200:
            flash(error_message(records, status), 'error')
            records = []
        if search:
            records = [r for r in records if _matches(r, columns, search)]
        return render_template('shared/resource_list.html', title=label, section=section,
                               records=records, search=search, tabs=SECTIONS[bp.name])

    def new():
        title = f'Tambah {label}'
        if request.method == 'GET':
            return render_form(title, {}, [], [])

        data, errors = submitted()
        if errors:
            return render_form(title, request.form, item_rows(items or [], request.form), errors, status=400)

        response, status = api_request('POST', api_path, data=data)
        if status == 200:
            flash(f'{label} berhasil ditambahkan', 'success')
            return redirect(url_for(section['index']))
        return render_form(title, request.form, item_rows(items or [], request.form),
                           [error_message(response, status)], status=400)

    def edit(record_id):
        record, status = api_request('GET', f'{api_path}/{record_id}')
        if status != 200:
            flash(error_message(record, status), 'error')
            return redirect(url_for(section['index']))

        title = f'Edit {label}'
        if request.method == 'GET':
            rows = [display_values(items, item) for item in record.get('items') or []] if items else []
            return render_form(title, display_values(fields, record), rows, [], record_id)

        data, errors = submitted()
        if errors:
            return render_form(title, request.form, item_rows(items or [], request.form), errors,
                               record_id, status=400)

        response, status = api_request('PUT', f'{api_path}/{record_id}', data=data)
        if status == 200:
            flash(f'{label} berhasil diperbarui', 'success')
            return redirect(url_for(section['index']))
        return render_form(title, request.form, item_rows(items or [], request.form),
                           [error_message(response, status)], record_id, status=400)

    def delete(record_id):
        response, status = api_request('DELETE', f'{api_path}/{record_id}')
        if status == 200:
            flash(response.get('message') or f'{label} dipindahkan ke Recycle Bin', 'success')
        else:
            flash(error_message(response, status), 'error')
        return redirect(url_for(section['index']))

    guard = menu_required(menu_key)
    bp.add_url_rule(f'/{slug}', f'{name}_index', guard(index))
    bp.add_url_rule(f'/{slug}/new', f'{name}_new', guard(new), methods=['GET', 'POST'])
    bp.add_url_rule(f'/{slug}/<int:record_id>/edit', f'{name}_edit', guard(edit), methods=['GET', 'POST'])
    bp.add_url_rule(f'/{slug}/<int:record_id>/delete', f'{name}_delete', guard(delete), methods=['POST'])
    return section
