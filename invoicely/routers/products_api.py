"""
Envanter (urun) REST API Router'i.

Katalogdan faturaya kalem secmek icin kullanilan urunler ve stok hareketleri.
Tum endpoint'ler giris gerektirir; herkes sadece kendi urunlerini gorur.

Endpoint'ler:
    GET    /                          -> Urun listesi (sayfalama, arama, kategori, dusuk stok)
    GET    /categories                -> Kullanilan kategoriler
    GET    /stock-summary             -> Stok ozeti
    GET    /low-stock                 -> Dusuk stoklu urunler
    GET    /{product_id}              -> Urun detay
    POST   /                          -> Yeni urun
    PUT    /{product_id}              -> Urun guncelle
    DELETE /{product_id}              -> Urun sil
    GET    /{product_id}/movements    -> Urunun stok hareketleri
    POST   /{product_id}/movements    -> Stok hareketi ekle (in / out / adjustment)
"""
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from invoicely.database import get_db
from invoicely.dependencies import get_current_user
from invoicely.models.user import User
from invoicely.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from invoicely.schemas.stock_movement import StockMovementCreate, StockMovementResponse
from invoicely.services import product as product_service
from invoicely.services import stock as stock_service

router = APIRouter()


class ProductListResponse(BaseModel):
    items: list[ProductResponse]
    total: int
    page: int
    size: int


class StockSummaryResponse(BaseModel):
    total_products: int
    in_stock: int
    low_stock: int
    out_of_stock: int


@router.get("", response_model=ProductListResponse)
def list_products(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    page: int = Query(default=1, ge=1, description="Sayfa numarasi"),
    size: int = Query(default=20, ge=1, le=100, description="Sayfa basi kayit sayisi"),
    search: str | None = Query(default=None, description="Ad, SKU veya barkod"),
    category: str | None = Query(default=None),
    low_stock: bool = Query(default=False, description="Sadece dusuk stoklu urunler"),
    active_only: bool = Query(default=False, description="Sadece aktif urunler"),
):
    """
    Ornek:
        GET /api/v1/products?search=logo&active_only=true
    """
    products, total = product_service.get_products(
        db=db,
        owner_id=current_user.id,
        search=search,
        category=category,
        low_stock=low_stock,
        active_only=active_only,
        page=page,
        size=size,
    )
    return ProductListResponse(items=products, total=total, page=page, size=size)


@router.get("/categories", response_model=list[str])
def list_categories(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return product_service.get_categories(db, current_user.id)


@router.get("/stock-summary", response_model=StockSummaryResponse)
def stock_summary(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return stock_service.get_stock_summary(db, current_user.id)


@router.get("/low-stock", response_model=list[ProductResponse])
def low_stock_products(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return stock_service.get_low_stock_products(db, current_user.id)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: uuid.UUID,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return product_service.get_product(db, product_id, current_user.id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    data: ProductCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return product_service.create_product(db, current_user.id, data)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: uuid.UUID,
    data: ProductUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return product_service.update_product(db, product_id, current_user.id, data)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: uuid.UUID,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    product_service.delete_product(db, product_id, current_user.id)


@router.get("/{product_id}/movements", response_model=list[StockMovementResponse])
def list_stock_movements(
    product_id: uuid.UUID,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    # Sahiplik kontrolu
    product_service.get_product(db, product_id, current_user.id)
    return stock_service.get_stock_movements(
        db, current_user.id, product_id=product_id, skip=skip, limit=limit,
    )


@router.post(
    "/{product_id}/movements",
    response_model=StockMovementResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_stock_movement(
    product_id: uuid.UUID,
    data: StockMovementCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return stock_service.add_stock_movement(
        db,
        current_user.id,
        product_id,
        movement_type=data.movement_type,
        quantity=data.quantity,
        notes=data.notes,
    )
