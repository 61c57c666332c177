from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductFields(BaseModel):
    """Text fields of a product as received from the form. None = not sent."""

    title: Optional[str] = Field(default=None, max_length=200)
    material: Optional[str] = Field(default=None, max_length=120)
    reviews: Optional[str] = Field(default=None, max_length=120)
    badge: Optional[str] = Field(default=None, max_length=60)
    description: Optional[str] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    material: Optional[str] = None
    reviews: Optional[str] = None
    image: Optional[str] = None
    badge: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime


class DeleteOut(BaseModel):
    ok: bool
    message: str
