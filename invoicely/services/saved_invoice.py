"""
Kaydedilmis faturalar.

Her kaydetme yeni bir satir olusturur. Kalemler JSON, tutarlar Numeric olarak
saklanir; musteri ve isletme bilgisi o anki halleriyle kopyalanir.
"""
import uuid
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from invoicely.dependencies import SessionContext
from invoicely.models.customer import Customer
from invoicely.models.saved_invoice import SavedInvoice
from invoicely.schemas.business import BusinessProfile
from invoicely.schemas.invoice import DiscountMode, InvoiceCustomer, InvoiceDocument, LineItem
from invoicely.services.activity import log_activity
from invoicely.services.invoice import recalculate, snapshot

logger = logging.getLogger(__name__)


def _existing_customer_id(db: Session, owner_id: uuid.UUID, customer_id: uuid.UUID | None):
    """Musteri bu arada silinmis olabilir; o durumda baglanti kurulmaz."""
    if customer_id is None:
        return None
    exists = db.query(Customer.id).filter(
        Customer.id == customer_id, Customer.owner_id == owner_id,
    ).first()
    return customer_id if exists else None


def save_invoice(
    db: Session, ctx: SessionContext, doc: InvoiceDocument, profile: BusinessProfile
) -> SavedInvoice:
    """
    Taslagi yeni bir kayit olarak sakla.
    Misafir oturumu kaydedemez (403).
    """
    if ctx.is_guest:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Guest sessions cannot save invoices. Please sign in.",
        )

    document = snapshot(doc)
    totals = recalculate(document)
    customer = document.customer or InvoiceCustomer()

    record = SavedInvoice(
        owner_id=ctx.owner_id,
        customer_id=_existing_customer_id(db, ctx.owner_id, customer.id),
        invoice_number=document.invoice_number,
        invoice_date=document.date,
        customer_name=customer.name,
        customer_email=customer.email,
        customer_address=customer.address,
        customer_phone=customer.phone,
        items=[item.model_dump(mode="json") for item in document.items],
        subtotal=totals.subtotal,
        tax_rate=document.tax_rate,
        tax_amount=totals.tax_amount,
        discount_mode=document.discount_mode.value,
        discount_value=document.discount_value,
        discount_amount=totals.discount_amount,
        total=totals.total,
        payment_instructions=document.payment_instructions,
        thank_you_note=document.thank_you_note,
        business_name=profile.business_name,
        business_address=profile.business_address,
        business_phone=profile.business_phone,
    )
    db.add(record)
    db.flush()
    log_activity(
        db, ctx.owner_id, "save", "invoice", record.id,
        f"Fatura '{record.invoice_number}' kaydedildi ({len(document.items)} kalem)",
    )
    db.commit()
    db.refresh(record)
    logger.info("Fatura kaydedildi: %s (%s)", record.invoice_number, record.id)
    return record


def get_saved_invoices(
    db: Session,
    owner_id: uuid.UUID,
    page: int = 1,
    size: int = 20,
    search: str | None = None,
) -> tuple[list[SavedInvoice], int]:
    """
    Kaydedilmis faturalar, en yeni once.
    Arama: fatura numarasi veya musteri adi.
    """
    query = db.query(SavedInvoice).filter(SavedInvoice.owner_id == owner_id)
    if search:
        search_filter = f"%{search}%"
        query = query.filter(
            or_(
                SavedInvoice.invoice_number.ilike(search_filter),
                SavedInvoice.customer_name.ilike(search_filter),
            )
        )

    total = query.count()
    offset = (page - 1) * size
    invoices = (
        query.order_by(SavedInvoice.created_at.desc())
        .offset(offset)
        .limit(size)
        .all()
    )
    return invoices, total


def get_saved_invoice(db: Session, invoice_id: uuid.UUID, owner_id: uuid.UUID) -> SavedInvoice:
    record = db.query(SavedInvoice).filter(
        SavedInvoice.id == invoice_id, SavedInvoice.owner_id == owner_id,
    ).first()
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return record


def delete_saved_invoice(db: Session, invoice_id: uuid.UUID, owner_id: uuid.UUID) -> None:
    record = get_saved_invoice(db, invoice_id, owner_id)
    number = record.invoice_number
    db.delete(record)
    log_activity(
        db, owner_id, "delete", "invoice", invoice_id,
        f"Fatura '{number}' silindi",
    )
    db.commit()


def to_document(record: SavedInvoice) -> InvoiceDocument:
    """
    Kaydi tekrar InvoiceDocument'a cevir (onizleme, PDF, duzenlemeye acma).
    Tutarlar kalemlerden yeniden hesaplanir.
    """
    customer = None
    if record.customer_name or record.customer_id:
        customer = InvoiceCustomer(
            id=record.customer_id,
            name=record.customer_name or "",
            email=record.customer_email,
            address=record.customer_address,
            phone=record.customer_phone,
        )

    doc = InvoiceDocument(
        invoice_number=record.invoice_number,
        date=record.invoice_date,
        customer=customer,
        items=[LineItem.model_validate(item) for item in record.items or []],
        tax_rate=record.tax_rate,
        discount_mode=DiscountMode(record.discount_mode),
        discount_value=record.discount_value,
        payment_instructions=record.payment_instructions or "",
        thank_you_note=record.thank_you_note or "",
    )
    recalculate(doc)
    return doc


def business_snapshot(record: SavedInvoice, profile: BusinessProfile) -> BusinessProfile:
    """Guncel profil uzerine kayit anindaki isletme adi/adresi/telefonu."""
    return profile.model_copy(update={
        "business_name": record.business_name,
        "business_address": record.business_address,
        "business_phone": record.business_phone,
    })
