import datetime as dt
import enum
import time
import uuid
from decimal import Decimal, ROUND_HALF_UP

from pydantic import BaseModel, Field, ConfigDict, model_validator

from invoicely.config import settings

# Para birimi alt birimi (kurus/paise): tum tutarlar 2 haneye yuvarlanir
MONEY_STEP = Decimal("0.01")
ZERO = Decimal("0.00")

# Giris ust sinirlari (saved_invoices Numeric kolonlarina sigar)
MAX_QUANTITY = Decimal("1000000")
MAX_UNIT_PRICE = Decimal("1000000000")
MAX_TAX_RATE = Decimal("1000")
MAX_DISCOUNT_VALUE = Decimal("1000000000000")
# Vergi orani ve indirim degeri en fazla 3 ondalik hane
RATE_PLACES = 3


def to_money(value: Decimal) -> Decimal:
    """Tutari 2 ondalik haneye yuvarla (ROUND_HALF_UP)."""
    return Decimal(value).quantize(MONEY_STEP, rounding=ROUND_HALF_UP)


def _new_token() -> str:
    return uuid.uuid4().hex


def _default_invoice_number() -> str:
    """Zaman damgasindan fatura numarasi: INV-1718000000000 gibi."""
    return f"{settings.INVOICE_NUMBER_PREFIX}{int(time.time() * 1000)}"


class DiscountMode(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class LineItem(BaseModel):
    """
    Fatura kalemi (tek satir).

    amount hicbir zaman disaridan set edilemez: her olusturma ve dogrulamada
    quantity x unit_price'tan yeniden hesaplanir. Model frozen oldugu icin
    alan alan degistirmek yerine services.invoice.update_line_item kullanilir.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_token)
    date: dt.date = Field(default_factory=dt.date.today)
    # Siparis / referans numarasi (katalogdan secilen urunlerde SKU)
    order_id: str = ""
    description: str = ""
    quantity: Decimal = Field(default=Decimal("1"), ge=0, le=MAX_QUANTITY)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_UNIT_PRICE)
    amount: Decimal = ZERO

    @model_validator(mode="after")
    def _derive_amount(self) -> "LineItem":
        # frozen model: normal atama yasak, turetilmis alani dogrudan yaz
        object.__setattr__(self, "amount", to_money(self.quantity * self.unit_price))
        return self


class InvoiceTotals(BaseModel):
    """Kalemlerden ve vergi/indirim ayarlarindan turetilen toplamlar."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal = ZERO
    tax_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO
    total: Decimal = ZERO


class InvoiceCustomer(BaseModel):
    """
    Faturadaki musteri bilgisi.
    id varsa kayitli musteriden kopyalanmistir, yoksa misafir (inline) musteridir.
    """

    id: uuid.UUID | None = None
    name: str = Field(default="", max_length=255)
    email: str | None = None
    address: str | None = None
    phone: str | None = None


class InvoiceDocument(BaseModel):
    """
    Duzenlenebilir fatura (taslak).
    Kalemler ve toplamlar sadece services.invoice fonksiyonlari ile degistirilir;
    her degisiklikten sonra totals ayni adimda yeniden hesaplanir.
    """

    id: str = Field(default_factory=_new_token)
    invoice_number: str = Field(default_factory=_default_invoice_number)
    date: dt.date = Field(default_factory=dt.date.today)
    customer: InvoiceCustomer | None = None
    items: list[LineItem] = []
    tax_rate: Decimal = Field(default_factory=lambda: settings.DEFAULT_TAX_RATE)
    discount_mode: DiscountMode = DiscountMode.PERCENTAGE
    discount_value: Decimal = Decimal("0")
    totals: InvoiceTotals = InvoiceTotals()
    payment_instructions: str = ""
    thank_you_note: str = ""


# ============================================================
# API istek modelleri
# ============================================================


class LineItemInput(BaseModel):
    """Kalem ekleme / guncelleme. Gonderilmeyen alanlar degismez."""

    date: dt.date | None = None
    order_id: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    quantity: Decimal | None = Field(default=None, ge=0, le=MAX_QUANTITY)
    unit_price: Decimal | None = Field(default=None, ge=0, le=MAX_UNIT_PRICE)


class InvoiceHeaderUpdate(BaseModel):
    """
    Fatura basligi, musteri, vergi/indirim ve alt bilgi guncellemesi.
    customer_id kayitli musteriyi, customer misafir musteriyi secer.
    """

    invoice_number: str | None = Field(default=None, min_length=1, max_length=100)
    date: dt.date | None = None
    customer_id: uuid.UUID | None = None
    customer: InvoiceCustomer | None = None
    clear_customer: bool = False
    tax_rate: Decimal | None = Field(
        default=None, ge=0, le=MAX_TAX_RATE, decimal_places=RATE_PLACES,
    )
    discount_mode: DiscountMode | None = None
    discount_value: Decimal | None = Field(
        default=None, ge=0, le=MAX_DISCOUNT_VALUE, decimal_places=RATE_PLACES,
    )
    payment_instructions: str | None = None
    thank_you_note: str | None = None


class CatalogPickRequest(BaseModel):
    product_id: uuid.UUID
    quantity: Decimal = Field(default=Decimal("1"), gt=0, le=MAX_QUANTITY)


class ItemImportResponse(BaseModel):
    """Toplu aktarim sonucu: eklenen kalemler ve guncel taslak."""

    added: int
    items: list[LineItem]
    document: InvoiceDocument


# ============================================================
# Kaydedilmis faturalar
# ============================================================


class SavedInvoiceListItem(BaseModel):
    id: uuid.UUID
    invoice_number: str
    invoice_date: dt.date
    customer_name: str
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class SavedInvoiceResponse(SavedInvoiceListItem):
    customer_id: uuid.UUID | None
    customer_email: str | None
    customer_address: str | None
    customer_phone: str | None
    items: list[LineItem]
    tax_rate: Decimal
    discount_mode: DiscountMode
    discount_value: Decimal
    payment_instructions: str | None
    thank_you_note: str | None
    business_name: str
    business_address: str | None
    business_phone: str | None


class SavedInvoiceListResponse(BaseModel):
    items: list[SavedInvoiceListItem]
    total: int
    page: int
    size: int
