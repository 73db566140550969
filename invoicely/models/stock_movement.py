import uuid
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from invoicely.database import Base


class StockMovement(Base):
    """
    Stok hareketi modeli.
    Envanterdeki giris, cikis ve duzeltme hareketlerini tutar.
    Her hareket onceki ve yeni stok degerlerini kaydeder (audit trail).
    """

    __tablename__ = "stock_movements"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )

    # "in" (giris), "out" (cikis), "adjustment" (duzeltme)
    movement_type: Mapped[str] = mapped_column(
        String(20), nullable=False
    )
    # Her zaman pozitif; yonu movement_type belirler
    quantity: Mapped[int] = mapped_column(
        Integer, nullable=False
    )

    # "manual" (elle giris), "invoice" (fatura kaynakli)
    reference_type: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    # Fatura kaynakli hareketlerde fatura numarasi
    reference_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    previous_stock: Mapped[int] = mapped_column(
        Integer, nullable=False
    )
    new_stock: Mapped[int] = mapped_column(
        Integer, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    owner: Mapped["User"] = relationship()
    product: Mapped["Product"] = relationship()

    __table_args__ = (
        Index("ix_stock_movements_product_id", "product_id"),
        Index("ix_stock_movements_created_at", "created_at"),
    )
