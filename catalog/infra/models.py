from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, DateTime, Index, String, Text, func
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# base
class Base(DeclarativeBase):
    pass


class ProductORM(Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    material: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    reviews: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    # URL publica completa do objeto no bucket
    image: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    badge: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


def create_schema(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
