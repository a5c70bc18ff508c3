"""
Soft-Delete Service - Shared list/create/update/delete for soft-deletable tables
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel
from sqlalchemy.orm import Session
import logging

from logistik.core.cache import query_cache, RECYCLE_BIN

logger = logging.getLogger(__name__)


def to_json_value(value: Any) -> Any:
    """Convert column values to JSON-ready primitives"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def serialize(obj, exclude: Tuple[str, ...] = ()) -> Dict[str, Any]:
    """Serialize a model row column-by-column"""
    return {
        column.name: to_json_value(getattr(obj, column.name))
        for column in obj.__table__.columns
        if column.name not in exclude
    }


def payload_of(data, **kwargs) -> Dict[str, Any]:
    """Accept either a pydantic model or a plain dict"""
    if isinstance(data, BaseModel):
        return data.model_dump(**kwargs)
    if kwargs.get("exclude_none"):
        return {k: v for k, v in data.items() if v is not None}
    return dict(data)


class SoftDeleteService:
    """
    Base accessor for a table whose rows are hidden by setting deleted_at.

    Subclasses set ``model`` and ``entity`` (the cache key). Tables that own
    line items also set ``item_model`` and ``item_fk``; items are replaced
    wholesale on every update.
    """

    model = None
    entity: str = ""
    item_model = None
    item_fk: Optional[str] = None
    # Other cached views derived from this table
    related_entities: Tuple[str, ...] = ()
    order_by: Tuple[str, ...] = ("created_at",)

    def __init__(self, db: Session):
        self.db = db

    # ==================== QUERIES ====================

    def live_query(self):
        return self.db.query(self.model).filter(self.model.deleted_at.is_(None))

    def get(self, record_id: int):
        """Get a live row by ID"""
        return self.live_query().filter(self.model.id == record_id).first()

    def list(self) -> List[Dict[str, Any]]:
        """List live rows newest first, served from the query cache when fresh"""
        cached = query_cache.get(self.entity)
        if cached is not None:
            return cached

        ordering = [getattr(self.model, name).desc() for name in self.order_by]
        rows = self.live_query().order_by(*ordering, self.model.id.desc()).all()
        result = [self.to_dict(row) for row in rows]
        query_cache.set(self.entity, result)
        return result

    def to_dict(self, obj) -> Dict[str, Any]:
        data = serialize(obj)
        if self.item_model is not None:
            data["items"] = [serialize(item) for item in obj.items]
        return data

    # ==================== MUTATIONS ====================

    def prepare_create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for defaults such as generated numbers"""
        return values

    def create(self, data, **extra):
        """Create a row (and its line items)"""
        values = payload_of(data, exclude_none=True)
        items = values.pop("items", None)
        values.update(extra)
        values = self.prepare_create(values)

        obj = self.model(**values)
        self.db.add(obj)
        self.db.flush()

        if self.item_model is not None and items:
            self._insert_items(obj, items)

        self.invalidate()
        return obj

    def update(self, record_id: int, data):
        """Update a live row; a supplied item list replaces the stored one"""
        obj = self.get(record_id)
        if not obj:
            return None

        values = payload_of(data, exclude_unset=True)
        items = values.pop("items", None)
        for field, value in values.items():
            setattr(obj, field, value)

        if self.item_model is not None and items is not None:
            self.db.query(self.item_model).filter(
                getattr(self.item_model, self.item_fk) == obj.id
            ).delete(synchronize_session=False)
            self.db.flush()
            self.db.expire(obj, ["items"])
            self._insert_items(obj, items)

        self.db.flush()
        self.invalidate()
        return obj

    def delete(self, record_id: int) -> bool:
        """Soft delete: the row moves to the recycle bin"""
        obj = self.get(record_id)
        if not obj:
            return False
        obj.deleted_at = datetime.utcnow()
        self.db.flush()
        self.invalidate()
        logger.info(f"Soft-deleted {self.entity} #{record_id}")
        return True

    def invalidate(self):
        query_cache.invalidate(self.entity, RECYCLE_BIN, *self.related_entities)

    def _insert_items(self, obj, items: List[Dict[str, Any]]):
        for item in items:
            values = payload_of(item, exclude_none=True)
            values[self.item_fk] = obj.id
            self.db.add(self.item_model(**values))
        self.db.flush()
        self.db.refresh(obj)
