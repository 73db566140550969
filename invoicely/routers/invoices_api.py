"""
Fatura REST API Router'i.

Taslaklar misafir veya uye oturumuna aittir (bellek ici, DraftStore).
Misafirler taslaklarina X-Guest-Token header'i ile erisir; token taslak
olusturulurken yanit header'inda doner. Kaydedilmis faturalar sadece uyeler icindir.

Endpoint'ler:
    POST   /drafts                              -> Yeni taslak
    GET    /drafts/{draft_id}                   -> Taslak
    PATCH  /drafts/{draft_id}                   -> Baslik, musteri, vergi/indirim, alt bilgi
    DELETE /drafts/{draft_id}                   -> Taslagi at
    POST   /drafts/{draft_id}/items             -> Elle kalem ekle
    PATCH  /drafts/{draft_id}/items/{item_id}   -> Kalem guncelle
    DELETE /drafts/{draft_id}/items/{item_id}   -> Kalem sil
    POST   /drafts/{draft_id}/items/import      -> CSV / Excel'den toplu kalem (mode=header|positional)
    POST   /drafts/{draft_id}/items/catalog     -> Envanterden urun sec (uye)
    GET    /drafts/{draft_id}/preview           -> HTML onizleme
    GET    /drafts/{draft_id}/pdf               -> PDF indir
    POST   /drafts/{draft_id}/save              -> Yeni kayit olarak sakla (uye)
    GET    /saved                               -> Kayitli faturalar (sayfalama + arama)
    GET    /saved/{invoice_id}                  -> Kayitli fatura detay
    DELETE /saved/{invoice_id}                  -> Kayitli faturayi sil
    GET    /saved/{invoice_id}/preview          -> HTML onizleme
    GET    /saved/{invoice_id}/pdf              -> PDF indir
    POST   /saved/{invoice_id}/open             -> Kayitli faturadan yeni taslak ac
    GET    /templates/{name}                    -> Ornek import dosyasi
"""
import uuid
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, Response, UploadFile, status
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from invoicely.database import get_db
from invoicely.dependencies import SessionContext, get_current_user, get_session_context, require_member
from invoicely.models.user import User
from invoicely.rate_limit import limiter
from invoicely.schemas.invoice import (
    CatalogPickRequest,
    InvoiceDocument,
    InvoiceHeaderUpdate,
    ItemImportResponse,
    LineItem,
    LineItemInput,
    SavedInvoiceListResponse,
    SavedInvoiceResponse,
)
from invoicely.services import business as business_service
from invoicely.services import customer as customer_service
from invoicely.services import invoice as invoice_service
from invoicely.services import item_import
from invoicely.services import product as product_service
from invoicely.services import render as render_service
from invoicely.services import saved_invoice as saved_invoice_service
from invoicely.services.activity import log_activity
from invoicely.services.drafts import DraftStore, get_draft_store

logger = logging.getLogger(__name__)

router = APIRouter()


class ItemMutationResponse(BaseModel):
    """Tek kalem islemi sonucu: kalem ve guncel taslak (toplamlar dahil)."""
    item: LineItem
    document: InvoiceDocument


Context = Annotated[SessionContext, Depends(get_session_context)]
Store = Annotated[DraftStore, Depends(get_draft_store)]
DB = Annotated[Session, Depends(get_db)]


def _pdf_response(db: Session, ctx: SessionContext, document: InvoiceDocument, profile) -> Response:
    """PDF uret ve indirme yaniti olarak dondur. Uyeler icin export aktivitesi yazilir."""

    def record_export(result, error):
        if error is None and not ctx.is_guest:
            log_activity(
                db, ctx.owner_id, "export", "invoice", None,
                f"Fatura '{document.invoice_number}' PDF olarak indirildi",
            )
            db.commit()

    export = render_service.export_pdf(document, profile, ctx, on_complete=record_export)
    headers = {"Content-Disposition": f'attachment; filename="{export.filename}"'}
    if export.warnings:
        # Header degerleri latin-1 olmali
        headers["X-Export-Warnings"] = " | ".join(export.warnings).encode("ascii", "replace").decode("ascii")
    return Response(content=export.content, media_type="application/pdf", headers=headers)


# ============================================================
# Taslaklar
# ============================================================


@router.post("/drafts", response_model=InvoiceDocument, status_code=status.HTTP_201_CREATED)
def create_draft(response: Response, ctx: Context, store: Store, db: DB):
    """
    Varsayilanlarla yeni taslak: bugunun tarihi, INV-<zaman> numarasi,
    varsayilan vergi orani, alt bilgi metinleri isletme profilinden.
    """
    profile = business_service.get_profile(db, ctx.owner_id)
    document = store.create(ctx, profile)
    if ctx.is_guest:
        response.headers["X-Guest-Token"] = ctx.guest_token
    return document


@router.get("/drafts/{draft_id}", response_model=InvoiceDocument)
def get_draft(draft_id: str, ctx: Context, store: Store):
    return store.get(draft_id, ctx)


@router.patch("/drafts/{draft_id}", response_model=InvoiceDocument)
def update_draft(draft_id: str, data: InvoiceHeaderUpdate, ctx: Context, store: Store, db: DB):
    """
    customer_id: kayitli musteriyi kopyala (uye)
    customer: elle girilen musteri
    clear_customer: musteriyi kaldir
    """
    changes = {
        field: value
        for field, value in data.model_dump(
            exclude_unset=True, exclude={"customer_id", "customer", "clear_customer"},
        ).items()
        if value is not None
    }

    if data.customer_id is not None:
        if ctx.is_guest:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Saved customers are not available in guest mode",
            )
        customer = customer_service.get_customer(db, data.customer_id, ctx.owner_id)
        changes["customer"] = invoice_service.customer_snapshot(customer)
    elif data.customer is not None:
        changes["customer"] = data.customer.model_copy(update={"id": None})
    elif data.clear_customer:
        changes["customer"] = None

    _, document = store.mutate(
        draft_id, ctx, lambda doc: invoice_service.update_header(doc, **changes),
    )
    return document


@router.delete("/drafts/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_draft(draft_id: str, ctx: Context, store: Store):
    store.discard(draft_id, ctx)


@router.post(
    "/drafts/{draft_id}/items",
    response_model=ItemMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_item(draft_id: str, ctx: Context, store: Store, data: LineItemInput | None = None):
    """Bos satir ekle (bugun, miktar 1, fiyat 0). Gonderilen alanlar satira yazilir."""
    fields = data.model_dump(exclude_none=True) if data is not None else {}
    item, document = store.mutate(
        draft_id, ctx, lambda doc: invoice_service.add_blank_item(doc, **fields),
    )
    return ItemMutationResponse(item=item, document=document)


@router.patch("/drafts/{draft_id}/items/{item_id}", response_model=ItemMutationResponse)
def update_item(draft_id: str, item_id: str, data: LineItemInput, ctx: Context, store: Store):
    """Sadece gonderilen alanlar degisir; amount her zaman yeniden hesaplanir."""
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    item, document = store.mutate(
        draft_id, ctx, lambda doc: invoice_service.update_item(doc, item_id, **changes),
    )
    return ItemMutationResponse(item=item, document=document)


@router.delete("/drafts/{draft_id}/items/{item_id}", response_model=InvoiceDocument)
def remove_item(draft_id: str, item_id: str, ctx: Context, store: Store):
    _, document = store.mutate(
        draft_id, ctx, lambda doc: invoice_service.remove_item(doc, item_id),
    )
    return document


@router.post("/drafts/{draft_id}/items/import", response_model=ItemImportResponse)
@limiter.limit("20/minute")
def import_items(
    request: Request,
    draft_id: str,
    ctx: Context,
    store: Store,
    file: Annotated[UploadFile, File(description="CSV veya Excel (.xlsx) dosyasi")],
    mode: item_import.ImportMode = Query(default=item_import.ImportMode.HEADER),
):
    """
    Dosyadaki tum satirlar dogrulanir; tek bir hatali satir varsa hicbir kalem
    eklenmez ve 400 doner (satir numarasi ve kolon ile).
    """
    # Taslak var mi (dosyayi okumadan once)
    store.get(draft_id, ctx)

    raw_bytes = file.file.read()
    filename = file.filename or ""
    items = item_import.import_items(filename, raw_bytes, mode)

    added, document = store.mutate(
        draft_id, ctx, lambda doc: invoice_service.add_items(doc, items),
    )
    logger.info("Taslak %s: '%s' dosyasindan %d kalem aktarildi", draft_id, filename, len(added))
    return ItemImportResponse(added=len(added), items=added, document=document)


@router.post(
    "/drafts/{draft_id}/items/catalog",
    response_model=ItemMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def pick_catalog_item(
    draft_id: str,
    data: CatalogPickRequest,
    ctx: Annotated[SessionContext, Depends(require_member)],
    store: Store,
    db: DB,
):
    """Envanterden urun sec: SKU Order ID'ye yazilir, miktar stogu gecemez."""
    product = product_service.get_product(db, data.product_id, ctx.owner_id)
    item = item_import.pick_from_catalog(product, data.quantity)
    added, document = store.mutate(
        draft_id, ctx, lambda doc: invoice_service.add_items(doc, [item]),
    )
    return ItemMutationResponse(item=added[0], document=document)


@router.get("/drafts/{draft_id}/preview", response_class=HTMLResponse)
def preview_draft(draft_id: str, ctx: Context, store: Store, db: DB):
    document = store.get(draft_id, ctx)
    profile = business_service.get_profile(db, ctx.owner_id)
    return HTMLResponse(render_service.render_preview_html(document, profile, ctx))


@router.get("/drafts/{draft_id}/pdf")
@limiter.limit("10/minute")
def export_draft_pdf(request: Request, draft_id: str, ctx: Context, store: Store, db: DB):
    """
    Taslagin istek anindaki kopyasindan PDF.
    Yuklenemeyen gorseller atlanir ve X-Export-Warnings header'inda bildirilir.
    """
    document = store.get(draft_id, ctx)
    profile = business_service.get_profile(db, ctx.owner_id)
    return _pdf_response(db, ctx, document, profile)


@router.post(
    "/drafts/{draft_id}/save",
    response_model=SavedInvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
def save_draft(
    draft_id: str,
    ctx: Annotated[SessionContext, Depends(require_member)],
    store: Store,
    db: DB,
):
    """Her kaydetme yeni bir kayit olusturur; taslak acik kalir."""
    document = store.get(draft_id, ctx)
    profile = business_service.get_profile(db, ctx.owner_id)
    return saved_invoice_service.save_invoice(db, ctx, document, profile)


# ============================================================
# Kayitli faturalar
# ============================================================


@router.get("/saved", response_model=SavedInvoiceListResponse)
def list_saved_invoices(
    db: DB,
    current_user: Annotated[User, Depends(get_current_user)],
    page: int = Query(default=1, ge=1, description="Sayfa numarasi"),
    size: int = Query(default=20, ge=1, le=100, description="Sayfa basi kayit"),
    search: str | None = Query(default=None, description="Fatura numarasi veya musteri adi"),
):
    invoices, total = saved_invoice_service.get_saved_invoices(
        db, current_user.id, page=page, size=size, search=search,
    )
    return SavedInvoiceListResponse(items=invoices, total=total, page=page, size=size)


@router.get("/saved/{invoice_id}", response_model=SavedInvoiceResponse)
def get_saved_invoice(
    invoice_id: uuid.UUID,
    db: DB,
    current_user: Annotated[User, Depends(get_current_user)],
):
    return saved_invoice_service.get_saved_invoice(db, invoice_id, current_user.id)


@router.delete("/saved/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_saved_invoice(
    invoice_id: uuid.UUID,
    db: DB,
    current_user: Annotated[User, Depends(get_current_user)],
):
    saved_invoice_service.delete_saved_invoice(db, invoice_id, current_user.id)


def _saved_for_render(db: Session, invoice_id: uuid.UUID, user: User):
    record = saved_invoice_service.get_saved_invoice(db, invoice_id, user.id)
    profile = saved_invoice_service.business_snapshot(
        record, business_service.get_profile(db, user.id),
    )
    return saved_invoice_service.to_document(record), profile


@router.get("/saved/{invoice_id}/preview", response_class=HTMLResponse)
def preview_saved_invoice(
    invoice_id: uuid.UUID,
    db: DB,
    current_user: Annotated[User, Depends(get_current_user)],
):
    document, profile = _saved_for_render(db, invoice_id, current_user)
    ctx = SessionContext(user=current_user)
    return HTMLResponse(render_service.render_preview_html(document, profile, ctx))


@router.get("/saved/{invoice_id}/pdf")
@limiter.limit("10/minute")
def export_saved_invoice_pdf(
    request: Request,
    invoice_id: uuid.UUID,
    db: DB,
    current_user: Annotated[User, Depends(get_current_user)],
):
    document, profile = _saved_for_render(db, invoice_id, current_user)
    return _pdf_response(db, SessionContext(user=current_user), document, profile)


@router.post(
    "/saved/{invoice_id}/open",
    response_model=InvoiceDocument,
    status_code=status.HTTP_201_CREATED,
)
def open_saved_invoice(
    invoice_id: uuid.UUID,
    db: DB,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Store,
):
    """Kayitli faturanin kopyasini yeni taslak olarak ac. Kayit degismez."""
    record = saved_invoice_service.get_saved_invoice(db, invoice_id, current_user.id)
    document = saved_invoice_service.to_document(record)
    return store.create(SessionContext(user=current_user), document=document)


# ============================================================
# Ornek import dosyalari
# ============================================================

TEMPLATES = {
    "items.csv": (item_import.csv_template, "text/csv"),
    "items-positional.csv": (item_import.positional_csv_template, "text/csv"),
    "items.xlsx": (
        item_import.xlsx_template,
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ),
}


@router.get("/templates/{name}")
def download_template(name: str):
    if name not in TEMPLATES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    build, media_type = TEMPLATES[name]
    return Response(
        content=build(),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )
