# teryt_registry/db/models/providers.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from teryt_registry.db.models.base import Base


class Provider(Base):
    __tablename__ = "providers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    technology: Mapped[str] = mapped_column(String(100), nullable=False)
    # Mbps
    bandwidth: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# nazwa unikalna bez względu na wielkość liter (jak staff email)
Index("uq_providers_name_ci", func.lower(Provider.name), unique=True)
