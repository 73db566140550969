import uuid
from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from invoicely.database import Base


class BusinessSettings(Base):
    """
    Isletme profili (faturayi kesen taraf).
    Her kullanicinin en fazla bir profili vardir.
    Yeni faturaya varsayilan alt bilgi metinlerini, PDF'e muhur/imza gorsellerini saglar.
    """

    __tablename__ = "business_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    business_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    business_address: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    business_phone: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    business_email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Alt bilgi metinleri
    payment_instructions: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    thank_you_note: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )

    # Gizli alt bilgi bolumleri: misafir modunda hic gosterilmez
    bank_details: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    upi_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )

    # Gorsel referanslari (URL, dosya yolu veya data: URI)
    logo_url: Mapped[str | None] = mapped_column(
        String(1024), nullable=True
    )
    seal_url: Mapped[str | None] = mapped_column(
        String(1024), nullable=True
    )
    signature_url: Mapped[str | None] = mapped_column(
        String(1024), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    owner: Mapped["User"] = relationship(back_populates="business_settings")
