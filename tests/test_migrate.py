import os
import sqlite3

from migrate_db import migrate, sqlite_path


def old_database():
    conn = sqlite3.connect(":memory:")
    conn.executescript("""
        CREATE TABLE users (id INTEGER PRIMARY KEY, email VARCHAR(255));
        CREATE TABLE user_approvals (
            id INTEGER PRIMARY KEY, user_id INTEGER, status VARCHAR(20), created_at DATETIME
        );
        CREATE TABLE vendors (id INTEGER PRIMARY KEY, company_name VARCHAR(255));
        CREATE TABLE invoices (id INTEGER PRIMARY KEY, invoice_number VARCHAR(100));
        INSERT INTO users (id, email) VALUES (1, 'lama@mkl.co.id'), (2, 'baru@mkl.co.id');
        INSERT INTO user_approvals (user_id, status) VALUES (2, 'pending');
    """)
    return conn


def test_migrate_adds_columns_and_backfills_approvals():
    conn = old_database()
    done = migrate(conn)

    assert "vendors.deleted_at" in done
    assert "invoices.dp_items" in done
    columns = {row[1] for row in conn.execute("PRAGMA table_info(invoices)")}
    assert {"deleted_at", "dp_items", "job_order_id", "delivery_date"} <= columns

    approvals = dict(conn.execute("SELECT user_id, status FROM user_approvals").fetchall())
    # Existing accounts become approved, pending ones keep waiting
    assert approvals == {1: "approved", 2: "pending"}


def test_migrate_is_idempotent():
    conn = old_database()
    migrate(conn)
    assert migrate(conn) == []


def test_sqlite_path():
    assert sqlite_path("sqlite:///./app.db", "/srv") == os.path.join("/srv", "./app.db")
    assert sqlite_path("file:/data/app.db", "/srv") == "/data/app.db"
    assert sqlite_path("sqlite://", "/srv") is None
