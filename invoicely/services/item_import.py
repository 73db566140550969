"""
Kalem kaynak adaptorleri - CSV, Excel ve envanter katalogundan fatura kalemi uretimi.

Her adaptor toplu calisir: once tum satirlari LineItem'a cevirir, sonra listeyi
dondurur. Tek bir gecersiz satir ItemImportError firlatir ve hicbir kalem
donmez; boylece taslak fatura yarim kalmis bir aktarimla degismez.

Satir numaralari hata mesajlarinda 1'den baslar ve baslik satirindan sonraki
ilk veri satirindan sayilir (bos satirlar atlanir ama sayilir).
"""
import csv
import datetime as dt
import enum
import logging
import zipfile
from decimal import Decimal, InvalidOperation
from io import StringIO, BytesIO

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import BaseModel

from invoicely.config import settings
from invoicely.exceptions import InsufficientStockError, InvoiceValidationError, ItemImportError
from invoicely.models.product import Product
from invoicely.schemas.invoice import LineItem
from invoicely.services.invoice import build_line_item

logger = logging.getLogger(__name__)


class ImportMode(str, enum.Enum):
    # Baslik adlarina gore (varsayilan, buyuk/kucuk harf duyarsiz)
    HEADER = "header"
    # Sabit kolon sirasina gore (eski format uyumlulugu)
    POSITIONAL = "positional"


# Baslik esanlamlilari -> kanonik alan adi
HEADER_ALIASES = {
    "description": "description",
    "quantity": "quantity",
    "qty": "quantity",
    "unit_price": "unit_price",
    "unit price": "unit_price",
    "order_id": "order_id",
    "orderid": "order_id",
    "date": "date",
}
REQUIRED_COLUMNS = ("description", "quantity", "unit_price")

# Pozisyonel mod kolon sirasi; sl_no okunur ama kullanilmaz
POSITIONAL_COLUMNS = ("sl_no", "date", "order_id", "description", "quantity", "unit_price")

DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y")

SPREADSHEET_EXTENSIONS = ("xlsx", "xlsm")
TEXT_EXTENSIONS = ("csv", "txt", "")


class ImportedRow(BaseModel):
    """
    Ham satirdan okunan ara kayit. Tum alanlar opsiyonel;
    varsayilanlar ve zorunlu alan kontrolu to_line_item'da uygulanir.
    """

    row: int
    date: dt.date | None = None
    order_id: str | None = None
    description: str | None = None
    quantity: Decimal | None = None
    unit_price: Decimal | None = None

    def to_line_item(self) -> LineItem:
        description = (self.description or "").strip()
        if not description:
            raise ItemImportError(
                f"Row {self.row}: description is required", row=self.row, column="description",
            )
        # Eksik veya okunamayan miktar 1, fiyat 0 kabul edilir (sessiz varsayilan)
        return build_line_item(
            {
                "date": self.date or dt.date.today(),
                "order_id": (self.order_id or "").strip(),
                "description": description,
                "quantity": Decimal("1") if self.quantity is None else self.quantity,
                "unit_price": Decimal("0") if self.unit_price is None else self.unit_price,
            },
            row=self.row,
        )


# ============================================================
# Hucre donusturuculer
# ============================================================


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _parse_number(value) -> Decimal | None:
    """Sayiya cevir; bos veya okunamayan deger icin None (varsayilan uygulanacak)."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def _parse_date(value, row: int) -> dt.date | None:
    """Tarih hucresini oku. Bos ise None; okunamiyorsa satir hatasi."""
    if _is_blank(value):
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value

    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ItemImportError(
        f"Row {row}: invalid date '{text}' (expected YYYY-MM-DD)", row=row, column="date",
    )


def _text(value) -> str | None:
    if value is None:
        return None
    return str(value)


def _normalize_header(value) -> str:
    text = "" if value is None else str(value)
    return " ".join(text.replace("\ufeff", "").strip().lower().split())


def _cell(record, index: int | None):
    if index is None or index >= len(record):
        return None
    return record[index]


def _is_blank_record(record) -> bool:
    return not record or all(_is_blank(cell) for cell in record)


# ============================================================
# Satir listesi -> LineItem listesi
# ============================================================


def _header_index(headers) -> dict[str, int]:
    """Baslik satirini kanonik alan -> kolon indeksine cevir."""
    mapping: dict[str, int] = {}
    for index, header in enumerate(headers):
        field = HEADER_ALIASES.get(_normalize_header(header))
        if field and field not in mapping:
            mapping[field] = index

    missing = [name for name in REQUIRED_COLUMNS if name not in mapping]
    if missing:
        raise ItemImportError(
            f"Missing required columns: {', '.join(missing)}", column=missing[0],
        )
    return mapping


def _row_from_record(record, mapping: dict[str, int], row: int) -> ImportedRow:
    return ImportedRow(
        row=row,
        date=_parse_date(_cell(record, mapping.get("date")), row),
        order_id=_text(_cell(record, mapping.get("order_id"))),
        description=_text(_cell(record, mapping.get("description"))),
        quantity=_parse_number(_cell(record, mapping.get("quantity"))),
        unit_price=_parse_number(_cell(record, mapping.get("unit_price"))),
    )


def rows_to_items(records: list, mode: ImportMode = ImportMode.HEADER) -> list[LineItem]:
    """
    Kayit listesini (ilk kayit baslik) LineItem listesine cevir.
    Herhangi bir satir gecersizse hicbir kalem donmez.
    """
    if not records:
        raise ItemImportError("The file is empty")

    if mode is ImportMode.POSITIONAL:
        mapping = {name: index for index, name in enumerate(POSITIONAL_COLUMNS)}
    else:
        mapping = _header_index(records[0])

    items = []
    for row, record in enumerate(records[1:], start=1):
        if _is_blank_record(record):
            continue
        items.append(_row_from_record(record, mapping, row).to_line_item())
    return items


def decode_text(raw_bytes: bytes) -> str:
    """UTF-8 (BOM'lu veya BOM'suz), olmazsa latin-1."""
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        raw_bytes = raw_bytes[3:]
    try:
        return raw_bytes.decode("utf-8")
    except UnicodeDecodeError:
        return raw_bytes.decode("latin-1")


def _split_records(text: str) -> list[list[str]]:
    return [[cell.strip() for cell in record] for record in csv.reader(StringIO(text))]


def parse_delimited(text: str) -> list[LineItem]:
    """Baslik adlarina gore CSV okuma (kanonik format)."""
    return rows_to_items(_split_records(text), ImportMode.HEADER)


def parse_delimited_positional(text: str) -> list[LineItem]:
    """
    Sabit kolon sirasina gore CSV okuma.
    Ilk satir baslik kabul edilir ve adlarina bakilmaz:
    sl_no, date, order_id, description, quantity, unit_price
    """
    return rows_to_items(_split_records(text), ImportMode.POSITIONAL)


def parse_spreadsheet(raw_bytes: bytes) -> list[LineItem]:
    """
    Excel (xlsx) dosyasinin ilk sayfasini baslik adlarina gore oku.
    Sayisal ve tarih hucreleri oldugu gibi kullanilir.
    """
    try:
        wb = load_workbook(filename=BytesIO(raw_bytes), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ItemImportError(f"Could not read spreadsheet: {e}")

    try:
        ws = wb.worksheets[0]
        records = [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()
    return rows_to_items(records, ImportMode.HEADER)


def import_items(
    filename: str, raw_bytes: bytes, mode: ImportMode = ImportMode.HEADER,
) -> list[LineItem]:
    """
    Yuklenen dosyayi uzantisina gore ilgili adaptore yonlendir.
    Pozisyonel mod sadece CSV icin gecerlidir.
    """
    mode = ImportMode(mode)
    if len(raw_bytes) > settings.MAX_IMPORT_BYTES:
        raise ItemImportError(
            f"File is too large (max {settings.MAX_IMPORT_BYTES // (1024 * 1024)} MB)"
        )

    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext in SPREADSHEET_EXTENSIONS:
        if mode is ImportMode.POSITIONAL:
            raise ItemImportError("Positional mode is only available for CSV files")
        items = parse_spreadsheet(raw_bytes)
    elif ext in TEXT_EXTENSIONS:
        text = decode_text(raw_bytes)
        if mode is ImportMode.POSITIONAL:
            items = parse_delimited_positional(text)
        else:
            items = parse_delimited(text)
    else:
        raise ItemImportError(f"Unsupported file type: .{ext} (use .csv or .xlsx)")

    logger.info("'%s' dosyasindan %d kalem okundu (mod: %s)", filename, len(items), mode.value)
    return items


# ============================================================
# Envanter katalogu
# ============================================================


def pick_from_catalog(product: Product, quantity: Decimal | int) -> LineItem:
    """
    Katalogdan secilen urunden tek kalem uret.
    Istenen miktar mevcut stogu gecemez (kirpilmaz, hata verilir).
    """
    quantity = Decimal(quantity)
    if not product.is_active:
        raise InvoiceValidationError(f"Product '{product.name}' is not active", column="product_id")
    if quantity <= 0:
        raise InvoiceValidationError("Quantity must be greater than zero", column="quantity")
    if quantity > product.current_stock:
        raise InsufficientStockError(
            f"Requested quantity {quantity} exceeds available stock "
            f"{product.current_stock} for '{product.name}'",
            column="quantity",
        )

    description = product.name
    if product.description:
        description = f"{product.name} - {product.description}"

    return build_line_item({
        "order_id": product.sku or "",
        "description": description,
        "quantity": quantity,
        "unit_price": product.unit_price,
    })


# ============================================================
# Indirilebilir ornek dosyalar
# ============================================================

TEMPLATE_COLUMNS = ("description", "quantity", "unit_price", "order_id", "date")

TEMPLATE_ROWS = (
    ("Website Development", 1, Decimal("75000.00"), "ORD-001", dt.date(2024, 1, 1)),
    ("Logo Design", 2, Decimal("12500.00"), "ORD-002", dt.date(2024, 1, 2)),
    ("Consulting Services", 4, Decimal("7500.00"), "ORD-003", dt.date(2024, 1, 3)),
)


def _write_csv(header, rows) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def csv_template() -> str:
    """Baslik adli CSV ornegi."""
    rows = [
        (desc, qty, f"{price:.2f}", order_id, day.isoformat())
        for desc, qty, price, order_id, day in TEMPLATE_ROWS
    ]
    return _write_csv(TEMPLATE_COLUMNS, rows)


def positional_csv_template() -> str:
    """Pozisyonel CSV ornegi (kolon sirasi POSITIONAL_COLUMNS)."""
    rows = [
        (index, day.isoformat(), order_id, desc, qty, f"{price:.2f}")
        for index, (desc, qty, price, order_id, day) in enumerate(TEMPLATE_ROWS, start=1)
    ]
    return _write_csv(POSITIONAL_COLUMNS, rows)


def xlsx_template() -> bytes:
    """Excel ornegi: ayni kolonlar, sayisal ve tarih hucreleri tipli."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Items"
    ws.append(list(TEMPLATE_COLUMNS))
    for desc, qty, price, order_id, day in TEMPLATE_ROWS:
        ws.append([desc, qty, float(price), order_id, day])

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
