"""
Database Migration Script
Brings an existing SQLite database up to the current schema without losing rows:
soft-delete columns, invoice DP parts, itemized down payments and approval rows.
"""
import os
import sqlite3

# Tables whose rows move to the recycle bin instead of being deleted
SOFT_DELETE_TABLES = [
    'customers', 'vendors', 'trucks', 'job_orders', 'trackings', 'warehouses',
    'expenses', 'invoices', 'invoices_reimbursement', 'invoices_final',
    'invoice_dp', 'quotations',
]

INVOICE_TABLES = ('invoices', 'invoices_reimbursement', 'invoices_final')

# (table, column, DDL type)
ADDED_COLUMNS = (
    [(table, 'deleted_at', 'DATETIME') for table in SOFT_DELETE_TABLES]
    + [('invoices', 'dp_items', 'JSON')]
    + [(table, 'job_order_id', 'INTEGER REFERENCES job_orders(id) ON DELETE SET NULL') for table in INVOICE_TABLES]
    + [(table, 'delivery_date', 'DATE') for table in INVOICE_TABLES]
    + [
        ('invoice_dp', 'part_number', 'INTEGER NOT NULL DEFAULT 1'),
        ('invoice_dp', 'invoice_pib_number', 'VARCHAR(100)'),
        ('expenses', 'created_by', 'INTEGER REFERENCES users(id) ON DELETE SET NULL'),
        ('users', 'last_sign_in_at', 'DATETIME'),
    ]
)


def sqlite_path(db_url, base_dir):
    """File path behind a sqlite:// or file: URL; relative paths resolve against base_dir"""
    for prefix in ('sqlite:///', 'sqlite://', 'file:'):
        if db_url.startswith(prefix):
            db_url = db_url[len(prefix):]
            break
    if not db_url:
        return None
    return db_url if os.path.isabs(db_url) else os.path.join(base_dir, db_url)


def _tables(cursor):
    cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
    return {row[0] for row in cursor.fetchall()}


def _columns(cursor, table):
    cursor.execute(f"PRAGMA table_info({table})")
    return {row[1] for row in cursor.fetchall()}


def migrate(conn):
    """Apply every pending change on an open connection; returns a list of what was done"""
    cursor = conn.cursor()
    tables = _tables(cursor)
    done = []

    for table, column, ddl in ADDED_COLUMNS:
        if table not in tables or column in _columns(cursor, table):
            continue
        cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}")
        if column == 'deleted_at':
            cursor.execute(f"CREATE INDEX IF NOT EXISTS ix_{table}_deleted_at ON {table} (deleted_at)")
        done.append(f"{table}.{column}")

    if {'users', 'user_approvals'} <= tables:
        # Accounts created before approvals existed were already in use
        cursor.execute("""
            INSERT INTO user_approvals (user_id, status, created_at)
            SELECT u.id, 'approved', CURRENT_TIMESTAMP
            FROM users u
            WHERE NOT EXISTS (SELECT 1 FROM user_approvals a WHERE a.user_id = u.id)
        """)
        if cursor.rowcount:
            done.append(f"user_approvals: {cursor.rowcount} approved")

    conn.commit()
    return done


def migrate_database():
    """Run the migration against DATABASE_URL"""
    db_url = os.environ.get("DATABASE_URL", "sqlite:///./logistik.db")
    db_path = sqlite_path(db_url, os.path.dirname(os.path.abspath(__file__)))

    if db_path is None or not os.path.exists(db_path):
        print("Database file not found. It will be created when the app starts.")
        return

    conn = sqlite3.connect(db_path)
    try:
        changes = migrate(conn)
    finally:
        conn.close()

    for change in changes:
        print(f"  + {change}")
    print(f"Migration finished, {len(changes)} change(s) applied to {db_path}")


if __name__ == "__main__":
    migrate_database()
