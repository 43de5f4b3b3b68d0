from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from webcalc.db.base import Base

TYPE_MAX_LENGTH = 100
EXPRESSION_MAX_LENGTH = 100


class Calculation(Base):
    __tablename__ = "calculations"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(TYPE_MAX_LENGTH), nullable=False)
    expression: Mapped[str] = mapped_column(String(EXPRESSION_MAX_LENGTH), nullable=False)
    create_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    # SQLite stores NaN as NULL.
    result: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"Calculation(id={self.id!r}, type={self.type!r}, expression={self.expression!r})"
