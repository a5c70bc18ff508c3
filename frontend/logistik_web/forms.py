"""
Form parsing for the CRUD screens

Each screen declares its fields; parse_form turns request.form into the JSON
body the backend expects and collects the messages shown above the form, so
an invalid form never reaches the API.
"""
import re
from collections import namedtuple
from datetime import datetime

# kind: text, textarea, email, number, integer, date, select or lines
# (one entry per line, sent as a JSON list). options lists the choices of a
# select, or the suggestions of a text field (a callable is loaded per request).
Field = namedtuple('Field', 'name label kind required options minimum',
                   defaults=('text', False, None, None))

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def choices(field):
    if callable(field.options):
        return field.options()
    return field.options or []


def _convert(field, raw):
    """Typed value of one non-empty input; raises ValueError with the user message"""
    if field.kind in ('number', 'integer'):
        try:
            value = int(raw) if field.kind == 'integer' else float(raw.replace(',', '.'))
        except ValueError:
            raise ValueError(f"{field.label} harus berupa angka")
        if field.minimum is not None and value < field.minimum:
            raise ValueError(f"{field.label} minimal {field.minimum}")
        return value
    if field.kind == 'date':
        try:
            datetime.strptime(raw, '%Y-%m-%d')
        except ValueError:
            raise ValueError(f"{field.label} harus berupa tanggal (YYYY-MM-DD)")
        return raw
    if field.kind == 'email' and not EMAIL_PATTERN.match(raw):
        raise ValueError(f"{field.label} tidak valid")
    if field.kind == 'select' and raw not in choices(field):
        raise ValueError(f"{field.label} tidak dikenal")
    return raw


def parse_form(fields, raw):
    """
    (data, errors) for a submitted form.

    Empty optional inputs are left out of ``data``; ``lines`` fields are
    always sent so clearing them empties the list.
    """
    data, errors = {}, []
    for field in fields:
        text = (raw.get(field.name) or '').strip()
        if field.kind == 'lines':
            entries = [line.strip() for line in text.splitlines() if line.strip()]
            if field.required and not entries:
                errors.append(f"{field.label} wajib diisi")
            data[field.name] = entries
            continue
        if not text:
            if field.required:
                errors.append(f"{field.label} wajib diisi")
            continue
        try:
            data[field.name] = _convert(field, text)
        except ValueError as e:
            errors.append(str(e))
    return data, errors


def item_rows(columns, form):
    """Raw line-item rows posted as parallel ``items-<column>`` lists"""
    lists = {column.name: form.getlist(f'items-{column.name}') for column in columns}
    count = max((len(values) for values in lists.values()), default=0)
    rows = []
    for index in range(count):
        rows.append({name: (values[index] if index < len(values) else '').strip()
                     for name, values in lists.items()})
    return rows


def parse_items(columns, form):
    """(items, errors); rows with nothing typed in are skipped"""
    items, errors = [], []
    for number, row in enumerate(item_rows(columns, form), start=1):
        # a select always carries a value, so it alone does not make a row
        if not any(row[c.name] for c in columns if c.kind != 'select'):
            continue
        item, row_errors = parse_form(columns, row)
        errors.extend(f"Baris {number}: {message}" for message in row_errors)
        items.append(item)
    return items, errors


def display_values(fields, record):
    """Backend record as the strings the form inputs show"""
    values = {}
    for field in fields:
        value = record.get(field.name)
        if value is None:
            values[field.name] = ''
        elif field.kind == 'lines':
            values[field.name] = '\n'.join(value)
        elif field.kind == 'date':
            values[field.name] = str(value)[:10]
        else:
            values[field.name] = str(value)
    return values
