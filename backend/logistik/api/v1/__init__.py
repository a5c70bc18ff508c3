# API v1 Package
from logistik.api.v1 import (
    auth, dashboard, master, operations, finance, quotations, reports, recycle_bin, manage_users
)

__all__ = [
    'auth',
    'dashboard',
    'master',
    'operations',
    'finance',
    'quotations',
    'reports',
    'recycle_bin',
    'manage_users',
]
