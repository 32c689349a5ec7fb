# teryt_registry/db/models/base.py
from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

from teryt_registry.app.config import get_settings

settings = get_settings()

metadata = MetaData(schema=settings.db_schema)


class Base(DeclarativeBase):
    metadata = metadata


def fk_target(table: str, column: str = "id") -> str:
    """Pełna nazwa kolumny do ForeignKey (ze schematem, jeśli jest)."""
    schema = Base.metadata.schema
    return f"{schema}.{table}.{column}" if schema else f"{table}.{column}"
