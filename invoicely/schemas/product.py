import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    sku: str | None = Field(default=None, max_length=100)
    barcode: str | None = Field(default=None, max_length=100)
    category: str | None = Field(default=None, max_length=100)
    unit_price: Decimal = Field(ge=0)
    cost_price: Decimal | None = Field(default=None, ge=0)
    unit: str = "piece"
    current_stock: int = Field(default=0, ge=0)
    min_stock_level: int = Field(default=0, ge=0)
    max_stock_level: int | None = Field(default=None, ge=0)
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    sku: str | None = None
    barcode: str | None = None
    category: str | None = None
    unit_price: Decimal | None = Field(default=None, ge=0)
    cost_price: Decimal | None = Field(default=None, ge=0)
    unit: str | None = None
    current_stock: int | None = Field(default=None, ge=0)
    min_stock_level: int | None = Field(default=None, ge=0)
    max_stock_level: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class ProductResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    sku: str | None
    barcode: str | None
    category: str | None
    unit_price: Decimal
    cost_price: Decimal | None
    unit: str
    current_stock: int
    min_stock_level: int
    max_stock_level: int | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
