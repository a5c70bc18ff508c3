"""
Error Mapping
Classifies database failures into stable codes and user-facing messages
"""
from typing import Optional, Tuple
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, ProgrammingError
import logging

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
INSUFFICIENT_PRIVILEGE = "42501"
UNDEFINED_TABLE = "42P01"

ERROR_MESSAGES = {
    UNIQUE_VIOLATION: "Data ini sudah ada dalam sistem.",
    FOREIGN_KEY_VIOLATION: "Tidak dapat menghapus data yang masih digunakan.",
    NOT_NULL_VIOLATION: "Data yang diperlukan belum lengkap.",
    INSUFFICIENT_PRIVILEGE: "Anda tidak memiliki akses untuk melakukan operasi ini.",
    UNDEFINED_TABLE: "Terjadi kesalahan konfigurasi. Silakan hubungi administrator.",
}
NETWORK_ERROR_MESSAGE = "Koneksi gagal. Periksa koneksi internet Anda."
GENERIC_ERROR_MESSAGE = "Terjadi kesalahan. Silakan coba lagi atau hubungi administrator."

# Driver message fragments for backends that do not expose SQLSTATE (sqlite)
_MESSAGE_PATTERNS = [
    ("unique constraint", UNIQUE_VIOLATION),
    ("duplicate key", UNIQUE_VIOLATION),
    ("foreign key constraint", FOREIGN_KEY_VIOLATION),
    ("not null constraint", NOT_NULL_VIOLATION),
    ("violates not-null", NOT_NULL_VIOLATION),
    ("permission denied", INSUFFICIENT_PRIVILEGE),
    ("row-level security", INSUFFICIENT_PRIVILEGE),
    ("no such table", UNDEFINED_TABLE),
    ("does not exist", UNDEFINED_TABLE),
]


def classify_db_error(exc: Exception) -> Optional[str]:
    """Return the SQLSTATE-style code for a database error, or None if unrecognized"""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in ERROR_MESSAGES:
        return code

    raw = str(orig if orig is not None else exc)
    if "RLS" in raw:
        return INSUFFICIENT_PRIVILEGE
    text = raw.lower()
    for fragment, mapped in _MESSAGE_PATTERNS:
        if fragment in text:
            return mapped
    return None


def map_error(exc: Exception) -> Tuple[Optional[str], str]:
    """Map an exception to (code, user message)"""
    code = classify_db_error(exc) if isinstance(exc, DBAPIError) else None
    return code, ERROR_MESSAGES.get(code, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI):
    """Attach database and catch-all exception handlers to the app"""

    @app.exception_handler(DBAPIError)
    async def database_exception_handler(request: Request, exc: DBAPIError):
        code, message = map_error(exc)
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=True)
        if isinstance(exc, IntegrityError):
            status_code = status.HTTP_409_CONFLICT
        elif code == INSUFFICIENT_PRIVILEGE:
            status_code = status.HTTP_403_FORBIDDEN
        elif isinstance(exc, (OperationalError, ProgrammingError)) or code is None:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        else:
            status_code = status.HTTP_400_BAD_REQUEST
        return JSONResponse(status_code=status_code, content={"detail": message, "code": code})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": GENERIC_ERROR_MESSAGE, "code": None}
        )
