"""Pydantic schemas for the product catalogue."""

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """New catalogue product. ``image`` is a base64-encoded picture."""

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    rating: float = Field(0, ge=0, le=5)
    stock: int = Field(..., ge=0)
    image: str | None = Field(None, description="Base64-encoded product image")


class ProductUpdate(BaseModel):
    """Partial product update; omitted fields keep their stored value."""

    name: str | None = Field(None, min_length=1)
    description: str | None = None
    price: float | None = Field(None, gt=0)
    category: str | None = None
    rating: float | None = Field(None, ge=0, le=5)
    stock: int | None = Field(None, ge=0)
    image: str | None = None
