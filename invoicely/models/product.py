import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Text, DateTime, ForeignKey, Numeric, Integer, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from invoicely.database import Base


class Product(Base):
    """
    Envanter urunu modeli.
    Fatura hazirlanirken katalogdan secilen urunler.
    Secilen miktar current_stock'u gecemez.
    """

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True
    )
    description: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    # Stok kodu: faturada "Order ID" kolonuna yazilir
    sku: Mapped[str | None] = mapped_column(
        String(100), nullable=True, index=True
    )
    barcode: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    category: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    # Numeric(10, 2) = toplam 10 basamak, 2'si ondalik
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False
    )
    cost_price: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )
    # Birim (piece, hour, kg, metre vs.)
    unit: Mapped[str] = mapped_column(
        String(20), default="piece"
    )

    current_stock: Mapped[int] = mapped_column(
        Integer, default=0
    )
    # Bu seviyenin altina dusen urunler "dusuk stok" sayilir
    min_stock_level: Mapped[int] = mapped_column(
        Integer, default=0
    )
    max_stock_level: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    # Pasif urunler katalogdan secilemez
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    owner: Mapped["User"] = relationship()
