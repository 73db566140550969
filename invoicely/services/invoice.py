"""
Fatura taslagi (InvoiceDocument) islemleri.

Tum degisiklikler bu modul uzerinden yapilir. Her fonksiyon belgeyi yerinde
gunceller ve donmeden once toplamlari ayni adimda yeniden hesaplar; boylece
degisiklikten hemen sonra okunan totals hicbir zaman eski kalmaz.
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Iterable

from pydantic import ValidationError

from invoicely.config import settings
from invoicely.exceptions import InvoiceValidationError, LineItemNotFoundError
from invoicely.models.customer import Customer
from invoicely.schemas.business import BusinessProfile
from invoicely.schemas.invoice import (
    DiscountMode,
    InvoiceCustomer,
    InvoiceDocument,
    InvoiceTotals,
    LineItem,
    MAX_DISCOUNT_VALUE,
    MAX_TAX_RATE,
    RATE_PLACES,
)
from invoicely.services.totals import recompute

logger = logging.getLogger(__name__)

# Kalemde kullanicinin degistirebilecegi alanlar (id ve amount haric)
ITEM_FIELDS = ("date", "order_id", "description", "quantity", "unit_price")

HEADER_FIELDS = (
    "invoice_number", "date", "customer", "tax_rate", "discount_mode",
    "discount_value", "payment_instructions", "thank_you_note",
)


def _validation_message(exc: ValidationError) -> tuple[str, str | None]:
    """Pydantic hatasinin ilk mesajini ve alan adini dondur."""
    first = exc.errors()[0]
    column = str(first["loc"][0]) if first.get("loc") else None
    return first.get("msg", str(exc)), column


def build_line_item(data: dict, row: int | None = None) -> LineItem:
    """
    Sozlukten dogrulanmis LineItem olustur.
    Gecersiz deger (negatif miktar gibi) InvoiceValidationError firlatir.
    """
    try:
        return LineItem.model_validate(data)
    except ValidationError as e:
        message, column = _validation_message(e)
        prefix = f"Row {row}: " if row is not None else ""
        raise InvoiceValidationError(
            f"{prefix}invalid {column or 'value'} ({message})", row=row, column=column,
        )
    except InvalidOperation:
        prefix = f"Row {row}: " if row is not None else ""
        raise InvoiceValidationError(f"{prefix}amount is too large", row=row, column="amount")


def update_line_item(item: LineItem, **changes) -> LineItem:
    """
    Kalemin bir kopyasini degisikliklerle dondur.
    Sadece quantity veya sadece unit_price degisse bile amount,
    diger alanin mevcut degeriyle birlikte yeniden hesaplanir.
    """
    unknown = set(changes) - set(ITEM_FIELDS)
    if unknown:
        raise InvoiceValidationError(
            f"Field(s) cannot be updated: {', '.join(sorted(unknown))}"
        )
    data = item.model_dump()
    data.update(changes)
    return build_line_item(data)


def recalculate(doc: InvoiceDocument) -> InvoiceTotals:
    """Belgenin toplamlarini kalemlerden yeniden hesapla."""
    try:
        doc.totals = recompute(doc.items, doc.tax_rate, doc.discount_mode, doc.discount_value)
    except InvalidOperation:
        raise InvoiceValidationError("Invoice amounts are too large to calculate", column="total")
    return doc.totals


def new_invoice(profile: BusinessProfile | None = None) -> InvoiceDocument:
    """
    Varsayilan degerlerle yeni taslak olustur.
    Alt bilgi metinleri isletme profilinden, yoksa ayarlardan gelir.
    """
    profile = profile or BusinessProfile()
    doc = InvoiceDocument(
        payment_instructions=profile.payment_instructions or settings.DEFAULT_PAYMENT_INSTRUCTIONS,
        thank_you_note=profile.thank_you_note or settings.DEFAULT_THANK_YOU_NOTE,
    )
    recalculate(doc)
    return doc


def _find_index(doc: InvoiceDocument, item_id: str) -> int:
    for index, item in enumerate(doc.items):
        if item.id == item_id:
            return index
    raise LineItemNotFoundError(f"Line item not found: {item_id}", column="id")


def add_blank_item(doc: InvoiceDocument, **fields) -> LineItem:
    """
    Elle giris: bos satir ekle (bugunun tarihi, miktar 1, fiyat 0).
    Alan verilirse satir o degerlerle olusturulur.
    """
    unknown = set(fields) - set(ITEM_FIELDS)
    if unknown:
        raise InvoiceValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")
    item = build_line_item({k: v for k, v in fields.items() if v is not None})
    doc.items.append(item)
    recalculate(doc)
    return item


def update_item(doc: InvoiceDocument, item_id: str, **changes) -> LineItem:
    index = _find_index(doc, item_id)
    updated = update_line_item(doc.items[index], **changes)
    doc.items[index] = updated
    recalculate(doc)
    return updated


def remove_item(doc: InvoiceDocument, item_id: str) -> None:
    index = _find_index(doc, item_id)
    del doc.items[index]
    recalculate(doc)


def add_items(doc: InvoiceDocument, items: Iterable[LineItem]) -> list[LineItem]:
    """
    Adaptorden gelen, tamami dogrulanmis kalem grubunu belgeye ekle.
    Grup once listeye alinir; ekleme tek adimda yapilir.
    """
    batch = list(items)
    doc.items.extend(batch)
    recalculate(doc)
    logger.info("Taslak %s: %d kalem eklendi", doc.id, len(batch))
    return batch


def customer_snapshot(customer: Customer) -> InvoiceCustomer:
    """Kayitli musteriyi faturaya kopyala."""
    return InvoiceCustomer(
        id=customer.id,
        name=customer.name,
        email=customer.email,
        address=customer.address,
        phone=customer.phone,
    )


def _rate_value(field: str, raw, limit: Decimal) -> Decimal:
    """Vergi orani / indirim degeri: 0..limit arasi, en fazla 3 ondalik hane."""
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        raise InvoiceValidationError(f"{field} must be a number", column=field)
    if not value.is_finite():
        raise InvoiceValidationError(f"{field} must be a number", column=field)
    if value < 0:
        raise InvoiceValidationError(f"{field} cannot be negative", column=field)
    if value > limit:
        raise InvoiceValidationError(f"{field} cannot be greater than {limit}", column=field)
    if value != value.quantize(Decimal(1).scaleb(-RATE_PLACES), rounding=ROUND_DOWN):
        raise InvoiceValidationError(
            f"{field} can have at most {RATE_PLACES} decimal places", column=field,
        )
    return value


def update_header(doc: InvoiceDocument, **changes) -> InvoiceDocument:
    """
    Fatura basligi, musteri, vergi/indirim ve alt bilgi alanlarini guncelle.
    Tum degerler once dogrulanir, sonra birlikte uygulanir.
    """
    unknown = set(changes) - set(HEADER_FIELDS)
    if unknown:
        raise InvoiceValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

    for field, limit in (("tax_rate", MAX_TAX_RATE), ("discount_value", MAX_DISCOUNT_VALUE)):
        if field in changes:
            changes[field] = _rate_value(field, changes[field], limit)
    if "discount_mode" in changes:
        try:
            changes["discount_mode"] = DiscountMode(changes["discount_mode"])
        except ValueError:
            raise InvoiceValidationError(
                "discount_mode must be 'percentage' or 'fixed'", column="discount_mode",
            )
    if "invoice_number" in changes and not str(changes["invoice_number"]).strip():
        raise InvoiceValidationError("Invoice number cannot be empty", column="invoice_number")

    for field, value in changes.items():
        setattr(doc, field, value)
    recalculate(doc)
    return doc


def snapshot(doc: InvoiceDocument) -> InvoiceDocument:
    """Belgenin derin kopyasi. Export ve kaydetme bu kopya uzerinde calisir."""
    return doc.model_copy(deep=True)
