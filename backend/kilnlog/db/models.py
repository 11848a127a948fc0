from datetime import datetime, timezone
from typing import Any
from sqlalchemy import String, JSON, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base

class StateEntry(Base):
    """One top-level persisted value: firings, zone_offsets, hardware or programs."""
    __tablename__ = "kiln_state"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[Any] = mapped_column(JSON)
    updated: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))
