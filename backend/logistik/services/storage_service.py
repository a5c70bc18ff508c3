"""
Storage Service - Job-order attachments on the local file store

Objects live under STORAGE_ROOT/STORAGE_BUCKET as
``{job_order_id}/{category}/{epoch_millis}_{filename}``. Older uploads sit
directly under ``{job_order_id}/`` without a category.
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
import re
import time
import logging

from jose import JWTError, jwt

from logistik.core.config import settings

logger = logging.getLogger(__name__)

INVOICE_CATEGORIES = [
    {"key": "penumpukan", "label": "Invoice Penumpukan"},
    {"key": "do", "label": "Invoice DO"},
    {"key": "penumpukan-spjm", "label": "Invoice Penumpukan SPJM"},
    {"key": "repair", "label": "Invoice Repair"},
    {"key": "perpanjangan-do", "label": "Invoice Perpanjangan DO"},
    {"key": "perpanjangan-tila", "label": "Invoice Perpanjangan Tila"},
    {"key": "gerakan", "label": "Invoice Gerakan"},
    {"key": "lain-lain", "label": "Invoice Lain-lain"},
]
CATEGORY_KEYS = [c["key"] for c in INVOICE_CATEGORIES]

PLACEHOLDER_NAME = ".emptyFolderPlaceholder"
DOWNLOAD_SCOPE = "file-download"

_TIMESTAMP_PREFIX = re.compile(r"^\d+_")


def display_name(stored_name: str) -> str:
    """Strip the upload timestamp: '1700000000000_bl.pdf' -> 'bl.pdf'"""
    return _TIMESTAMP_PREFIX.sub("", stored_name)


def object_path(job_order_id: int, filename: str, category: Optional[str] = None,
                now_ms: Optional[int] = None) -> str:
    """Relative object key for a new upload"""
    if category is not None and category not in CATEGORY_KEYS:
        raise ValueError(f"Kategori tidak dikenal: {category}")
    safe_name = Path(filename).name.strip()
    if not safe_name:
        raise ValueError("Nama file tidak valid")
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    stored = f"{now_ms}_{safe_name}"
    if category:
        return f"{job_order_id}/{category}/{stored}"
    return f"{job_order_id}/{stored}"


class StorageService:
    def __init__(self, root: Optional[str] = None, bucket: Optional[str] = None):
        self.base = Path(root or settings.STORAGE_ROOT) / (bucket or settings.STORAGE_BUCKET)

    def _resolve(self, key: str, job_order_id: Optional[int] = None) -> Path:
        """
        Absolute path of an object key. Keys may not escape the bucket, and
        with ``job_order_id`` they must stay inside that job order's folder.
        """
        root = self.base.resolve()
        if job_order_id is not None:
            root = root / str(job_order_id)
        path = (self.base / key).resolve()
        if root not in path.parents:
            raise ValueError("Path tidak valid")
        return path

    def upload(self, job_order_id: int, filename: str, content: bytes,
               category: Optional[str] = None) -> str:
        key = object_path(job_order_id, filename, category)
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.info(f"Stored {key} ({len(content)} bytes)")
        return key

    def list_files(self, job_order_id: int, category: Optional[str] = None) -> List[Dict[str, Any]]:
        """Files of one folder, newest first; sub-folders and placeholders are skipped"""
        if category is not None and category not in CATEGORY_KEYS:
            raise ValueError(f"Kategori tidak dikenal: {category}")
        folder = f"{job_order_id}/{category}" if category else str(job_order_id)
        directory = self._resolve(folder)
        if not directory.is_dir():
            return []

        files = []
        for entry in directory.iterdir():
            if not entry.is_file() or entry.name == PLACEHOLDER_NAME:
                continue
            stat = entry.stat()
            files.append({
                "name": entry.name,
                "display_name": display_name(entry.name),
                "path": f"{folder}/{entry.name}",
                "size": stat.st_size,
                "created_at": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat(),
            })
        files.sort(key=lambda f: f["created_at"], reverse=True)
        return files

    def open(self, key: str, job_order_id: Optional[int] = None) -> Optional[Path]:
        path = self._resolve(key, job_order_id)
        return path if path.is_file() else None

    def delete(self, key: str, job_order_id: Optional[int] = None) -> bool:
        path = self._resolve(key, job_order_id)
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"Removed {key}")
        return True

    # ==================== SIGNED URLS ====================

    @staticmethod
    def create_download_token(key: str, expires_in: Optional[int] = None) -> str:
        seconds = expires_in if expires_in is not None else settings.SIGNED_URL_EXPIRE_SECONDS
        payload = {
            "path": key,
            "scope": DOWNLOAD_SCOPE,
            "exp": datetime.now(timezone.utc) + timedelta(seconds=seconds),
        }
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def verify_download_token(token: str) -> Optional[str]:
        """Object key carried by a valid download token, or None"""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            return None
        if payload.get("scope") != DOWNLOAD_SCOPE:
            return None
        return payload.get("path")
