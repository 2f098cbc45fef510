# hangar/services/entity_saver.py
"""
Generic create-or-update for flat per-business tables.

A payload carrying a well-formed id (UUID-like, ≥32 chars, not a
"new"/"temp" placeholder) updates that row; anything else inserts.
"""

import logging
from datetime import date
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import NotFound, PersistenceFailure

logger = logging.getLogger(__name__)

# Derived or stored elsewhere, never written through this path
VIRTUAL_KEYS = frozenset({"created_at", "updated_at", "vehicles", "operating_days", "blocked_dates"})


def has_real_id(value) -> bool:
    return (
        isinstance(value, str)
        and len(value) >= 32
        and "new" not in value
        and "temp" not in value
    )


def _column_value(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


def save_entity(db: Session, model, payload: dict, **scope):
    """
    Insert or update one row of `model`.

    Args:
        scope: fixed column values (e.g. business_id) applied on insert and
               checked on update

    Raises:
        NotFound, PersistenceFailure
    """
    clean = {
        k: _column_value(v)
        for k, v in payload.items()
        if k not in VIRTUAL_KEYS
    }
    entity_id = clean.pop("id", None)
    table = model.__tablename__

    try:
        if has_real_id(entity_id):
            obj = db.get(model, entity_id)
            if not obj or any(getattr(obj, k) != v for k, v in scope.items()):
                raise NotFound(f"{table} {entity_id} not found")
            for field, value in clean.items():
                setattr(obj, field, value)
        else:
            obj = model(**clean, **scope)
            db.add(obj)

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[EntitySaver] Failed to save {table}: {e}")
        raise PersistenceFailure(f"Could not save {table}")

    db.refresh(obj)
    return obj
