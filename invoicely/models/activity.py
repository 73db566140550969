import uuid
from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from invoicely.database import Base


class Activity(Base):
    """
    Aktivite logu modeli.
    Kullanicilarin islemlerini kaydeder.
    Ornek: musteri olusturma, fatura kaydetme, PDF export vb.
    """

    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Islem turu: create, update, delete, save, export, import
    action: Mapped[str] = mapped_column(
        String(50), nullable=False
    )
    # Varlik tipi: customer, product, invoice, business_settings
    entity_type: Mapped[str] = mapped_column(
        String(50), nullable=False
    )
    # Silinmis olabilir, nullable
    entity_id: Mapped[uuid.UUID | None] = mapped_column(
        nullable=True
    )
    description: Mapped[str] = mapped_column(
        Text, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    owner: Mapped["User"] = relationship()
