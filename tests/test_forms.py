import pytest
from werkzeug.datastructures import MultiDict

from logistik_web.forms import Field, parse_form, parse_items, display_values

FIELDS = [
    Field('company_name', 'Nama Perusahaan', required=True),
    Field('pic_name', 'Nama PIC', 'lines'),
    Field('email', 'Email', 'email'),
    Field('amount', 'Jumlah', 'number', minimum=0),
    Field('quantity', 'Jumlah Barang', 'integer'),
    Field('expense_date', 'Tanggal', 'date'),
    Field('status', 'Status', 'select', options=['Aktif', 'Tidak Aktif']),
]


def test_valid_form_becomes_the_request_body():
    data, errors = parse_form(FIELDS, MultiDict({
        'company_name': '  PT Alpha ',
        'pic_name': 'Budi\n\n Sari \n',
        'email': 'ops@mkl.co.id',
        'amount': '1500,5',
        'quantity': '3',
        'expense_date': '2026-10-01',
        'status': 'Aktif',
    }))
    assert errors == []
    assert data == {
        'company_name': 'PT Alpha',
        'pic_name': ['Budi', 'Sari'],
        'email': 'ops@mkl.co.id',
        'amount': 1500.5,
        'quantity': 3,
        'expense_date': '2026-10-01',
        'status': 'Aktif',
    }


def test_empty_optional_inputs_are_left_out():
    data, errors = parse_form(FIELDS, MultiDict({'company_name': 'PT Alpha', 'email': ''}))
    assert errors == []
    assert data == {'company_name': 'PT Alpha', 'pic_name': []}


@pytest.mark.parametrize("name,value,message", [
    ('company_name', '   ', 'Nama Perusahaan wajib diisi'),
    ('email', 'bukan-email', 'Email tidak valid'),
    ('amount', 'seratus', 'Jumlah harus berupa angka'),
    ('amount', '-5', 'Jumlah minimal 0'),
    ('quantity', '2.5', 'Jumlah Barang harus berupa angka'),
    ('expense_date', '01/10/2026', 'Tanggal harus berupa tanggal (YYYY-MM-DD)'),
    ('status', 'Hilang', 'Status tidak dikenal'),
])
def test_invalid_inputs_are_reported(name, value, message):
    form = MultiDict({'company_name': 'PT Alpha'})
    form[name] = value
    data, errors = parse_form(FIELDS, form)
    assert errors == [message]
    assert name not in data


def test_item_rows_skip_blank_lines_and_number_errors():
    columns = [
        Field('section', 'Bagian', 'select', required=True, options=['rates', 'green_line']),
        Field('description', 'Deskripsi', required=True),
        Field('lcl_rate', 'LCL', 'number'),
    ]
    form = MultiDict([
        ('items-section', 'rates'), ('items-section', 'green_line'), ('items-section', 'rates'),
        ('items-description', 'Trucking'), ('items-description', ''), ('items-description', ''),
        ('items-lcl_rate', '250000'), ('items-lcl_rate', ''), ('items-lcl_rate', 'abc'),
    ])
    items, errors = parse_items(columns, form)
    assert items[0] == {'section': 'rates', 'description': 'Trucking', 'lcl_rate': 250000.0}
    assert len(items) == 2
    assert errors == ['Baris 3: Deskripsi wajib diisi', 'Baris 3: LCL harus berupa angka']


def test_display_values_for_the_edit_form():
    values = display_values(FIELDS, {
        'company_name': 'PT Alpha',
        'pic_name': ['Budi', 'Sari'],
        'email': None,
        'amount': '1500.00',
        'expense_date': '2026-10-01T00:00:00',
    })
    assert values['pic_name'] == 'Budi\nSari'
    assert values['email'] == ''
    assert values['amount'] == '1500.00'
    assert values['expense_date'] == '2026-10-01'
    assert values['status'] == ''
