"""
Fatura goruntuleme: HTML onizleme ve PDF export.

Iki yuz de ayni build_render_context ciktisini kullanir; satir numaralari,
para formatlari ve gizli bolumler tek yerde hesaplanir.
"""
import base64
import logging
import mimetypes
import re
from dataclasses import dataclass, field
from decimal import Decimal
from io import BytesIO, StringIO
from pathlib import Path
from typing import Callable

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape
from xhtml2pdf import pisa

from invoicely.config import settings
from invoicely.dependencies import SessionContext
from invoicely.exceptions import ExportError
from invoicely.schemas.business import BusinessProfile
from invoicely.schemas.invoice import DiscountMode, InvoiceDocument, to_money
from invoicely.services.invoice import snapshot

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

# PDF'e gomulecek gorseller (profil alani -> sablon anahtari)
IMAGE_FIELDS = {"logo": "logo_url", "seal": "seal_url", "signature": "signature_url"}


def nl2br(value) -> Markup:
    """Cok satirli metni <br/> ile bol (once escape edilir)."""
    if not value:
        return Markup("")
    return Markup("<br/>").join(escape(line) for line in str(value).splitlines())


_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)
_env.filters["nl2br"] = nl2br


def format_money(value: Decimal) -> str:
    """Rs.75000.00 gibi; negatif tutar -Rs.5.00 olarak yazilir."""
    amount = to_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{settings.CURRENCY_SYMBOL}{abs(amount):.2f}"


def format_quantity(value: Decimal) -> str:
    quantity = Decimal(value)
    if quantity == quantity.to_integral_value():
        return str(int(quantity))
    return format(quantity.normalize(), "f")


def format_rate(value: Decimal) -> str:
    return format_quantity(value)


def pdf_filename(doc: InvoiceDocument) -> str:
    safe_number = re.sub(r"[^A-Za-z0-9._-]+", "_", doc.invoice_number).strip("_") or "draft"
    return f"Invoice-{safe_number}.pdf"


def build_render_context(
    doc: InvoiceDocument,
    profile: BusinessProfile,
    ctx: SessionContext,
    images: dict[str, str | None] | None = None,
) -> dict:
    """
    Onizleme ve PDF icin ortak goruntuleme verisi.

    - satirlar belge sirasinda 1..N numaralanir
    - tum tutarlar iki haneli ve para birimi isaretli metindir
    - indirim satiri sadece indirim tutari sifirdan farkliysa gosterilir
    - misafir oturumunda banka bilgisi ve UPI hic gosterilmez

    images verilmezse gorsel kaynaklari profildeki adreslerdir (onizleme).
    """
    if images is None:
        images = {key: getattr(profile, attr) or None for key, attr in IMAGE_FIELDS.items()}

    totals = doc.totals
    rows = [
        {
            "sl_no": index,
            "date": item.date.isoformat(),
            "order_id": item.order_id,
            "description": item.description,
            "quantity": format_quantity(item.quantity),
            "unit_price": format_money(item.unit_price),
            "amount": format_money(item.amount),
        }
        for index, item in enumerate(doc.items, start=1)
    ]

    discount_label = "Discount"
    if doc.discount_mode is DiscountMode.PERCENTAGE:
        discount_label = f"Discount ({format_rate(doc.discount_value)}%)"

    show_private = not ctx.is_guest
    customer = doc.customer

    return {
        "invoice_number": doc.invoice_number,
        "date": doc.date.isoformat(),
        "business": {
            "name": profile.business_name,
            "address": profile.business_address,
            "phone": profile.business_phone,
            "email": profile.business_email,
        },
        "customer": customer.model_dump() if customer is not None else None,
        "rows": rows,
        "subtotal": format_money(totals.subtotal),
        "tax_rate": format_rate(doc.tax_rate),
        "tax_amount": format_money(totals.tax_amount),
        "show_discount": totals.discount_amount != 0,
        "discount_label": discount_label,
        "discount_amount": format_money(totals.discount_amount),
        "total": format_money(totals.total),
        "payment_instructions": doc.payment_instructions,
        "thank_you_note": doc.thank_you_note,
        "upi_id": profile.upi_id if show_private else None,
        "bank_details": profile.bank_details if show_private else None,
        "images": images,
    }


def render_preview_html(doc: InvoiceDocument, profile: BusinessProfile, ctx: SessionContext) -> str:
    context = build_render_context(doc, profile, ctx)
    return _env.get_template("invoices/preview.html").render(**context)


# ============================================================
# Gorsel yukleme
# ============================================================


class ImageLoadError(Exception):
    pass


class ImageLoader:
    """
    Gorseli PDF'e gomulebilir data: URI'ye cevirir.
    Kaynak: http(s) adresi, ASSET_DIR altindaki dosya veya hazir data: URI.
    """

    def __init__(
        self,
        timeout: float | None = None,
        asset_dir: str | Path | None = None,
        client: httpx.Client | None = None,
    ):
        self.timeout = settings.IMAGE_LOAD_TIMEOUT if timeout is None else timeout
        self.asset_dir = Path(asset_dir or settings.ASSET_DIR).resolve()
        self._client = client

    def _fetch(self, url: str) -> tuple[bytes, str | None]:
        try:
            if self._client is not None:
                response = self._client.get(url)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    response = client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException:
            raise ImageLoadError(f"timed out after {self.timeout:g}s")
        except httpx.HTTPError as e:
            raise ImageLoadError(str(e) or e.__class__.__name__)

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        return response.content, content_type or None

    def _read_file(self, source: str) -> tuple[bytes, str | None]:
        path = Path(source)
        if not path.is_absolute():
            path = self.asset_dir / path
        path = path.resolve()
        if not path.is_relative_to(self.asset_dir):
            raise ImageLoadError("path is outside the asset directory")
        try:
            return path.read_bytes(), mimetypes.guess_type(path.name)[0]
        except OSError as e:
            raise ImageLoadError(e.strerror or str(e))

    def load(self, source: str) -> str:
        if source.startswith("data:"):
            return source
        if source.startswith(("http://", "https://")):
            content, mime = self._fetch(source)
        else:
            content, mime = self._read_file(source)

        if not content:
            raise ImageLoadError("empty image")
        if not mime or not mime.startswith("image/"):
            mime = mimetypes.guess_type(source)[0] or "image/png"
        encoded = base64.b64encode(content).decode("ascii")
        return f"data:{mime};base64,{encoded}"

    def load_all(self, profile: BusinessProfile) -> tuple[dict[str, str | None], list[str]]:
        """
        Profildeki tum gorselleri yukle.
        Yuklenemeyen gorsel atlanir (None) ve uyari listesine eklenir.
        """
        images: dict[str, str | None] = {}
        warnings: list[str] = []
        for key, attr in IMAGE_FIELDS.items():
            source = getattr(profile, attr)
            if not source:
                images[key] = None
                continue
            try:
                images[key] = self.load(source)
            except ImageLoadError as e:
                images[key] = None
                warnings.append(f"{key.capitalize()} image could not be loaded: {e}")
                logger.warning("Gorsel yuklenemedi (%s: %s): %s", key, source[:100], e)
        return images, warnings


# ============================================================
# PDF export
# ============================================================


@dataclass
class PdfExport:
    filename: str
    content: bytes
    warnings: list[str] = field(default_factory=list)


def _render_pdf(
    document: InvoiceDocument, profile: BusinessProfile, ctx: SessionContext, loader: ImageLoader,
) -> PdfExport:
    # Once tum gorseller yuklenir, sonra tek seferde render edilir
    images, warnings = loader.load_all(profile)
    context = build_render_context(document, profile, ctx, images=images)
    html = _env.get_template("invoices/pdf.html").render(**context)

    buffer = BytesIO()
    pisa_status = pisa.CreatePDF(StringIO(html), dest=buffer, encoding="utf-8")
    if pisa_status.err:
        raise ExportError(f"PDF rendering failed with {pisa_status.err} error(s)")

    return PdfExport(filename=pdf_filename(document), content=buffer.getvalue(), warnings=warnings)


def export_pdf(
    doc: InvoiceDocument,
    profile: BusinessProfile,
    ctx: SessionContext,
    on_complete: Callable[[PdfExport | None, Exception | None], None] | None = None,
    loader: ImageLoader | None = None,
) -> PdfExport:
    """
    Belgeyi A4 PDF olarak uret.

    Belge cagri aninda kopyalanir; sonradan yapilan degisiklikler bu PDF'e girmez.
    on_complete basarida ve hatada tam bir kez cagrilir: (sonuc, None) veya (None, hata).
    Render hatasi ExportError olarak firlatilir.
    """
    document = snapshot(doc)
    loader = loader or ImageLoader()
    result: PdfExport | None = None
    error: ExportError | None = None

    try:
        result = _render_pdf(document, profile, ctx, loader)
    except ExportError as e:
        error = e
    except Exception as e:
        error = ExportError(f"PDF export failed: {e}")
        error.__cause__ = e

    if error is not None:
        logger.error("PDF export basarisiz (%s): %s", document.invoice_number, error, exc_info=error)
    else:
        logger.info(
            "PDF olusturuldu: %s (%d byte, %d uyari)",
            result.filename, len(result.content), len(result.warnings),
        )

    if on_complete is not None:
        on_complete(result, error)

    if error is not None:
        raise error
    return result
