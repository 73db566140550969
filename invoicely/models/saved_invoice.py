import uuid
from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import String, Text, DateTime, Date, ForeignKey, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from invoicely.database import Base


class SavedInvoice(Base):
    """
    Kaydedilmis fatura.
    Taslagin kaydetme anindaki degismez kopyasi: her kayit yeni bir satir olur,
    taslakta sonradan yapilan degisiklikler bu kaydi etkilemez.
    Musteri ve isletme bilgileri de o anki halleriyle kopyalanir (canli iliski yok).
    """

    __tablename__ = "saved_invoices"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Sadece bilgi amacli; musteri silinse bile fatura kalir
    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("customers.id", ondelete="SET NULL"), nullable=True
    )

    # Fatura numarasi serbest metin, benzersiz olmak zorunda degil
    invoice_number: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True
    )
    invoice_date: Mapped[date] = mapped_column(
        Date, nullable=False
    )

    # Musteri kopyasi
    customer_name: Mapped[str] = mapped_column(
        String(255), default=""
    )
    customer_email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    customer_address: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    customer_phone: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    # Kalemler JSON listesi olarak saklanir
    items: Mapped[list] = mapped_column(
        JSON, default=list
    )

    # Tutarlar
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(20, 2), default=Decimal("0.00")
    )
    tax_rate: Mapped[Decimal] = mapped_column(
        Numeric(7, 3), default=Decimal("0")
    )
    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(20, 2), default=Decimal("0.00")
    )
    # "percentage" veya "fixed"
    discount_mode: Mapped[str] = mapped_column(
        String(20), default="percentage"
    )
    discount_value: Mapped[Decimal] = mapped_column(
        Numeric(16, 3), default=Decimal("0")
    )
    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(20, 2), default=Decimal("0.00")
    )
    total: Mapped[Decimal] = mapped_column(
        Numeric(20, 2), default=Decimal("0.00")
    )

    # Alt bilgi
    payment_instructions: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    thank_you_note: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )

    # Isletme kopyasi
    business_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    business_address: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    business_phone: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    owner: Mapped["User"] = relationship()
