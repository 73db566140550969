import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from invoicely.models.product import Product
from invoicely.schemas.product import ProductCreate, ProductUpdate
from invoicely.services.activity import log_activity


def get_products(
    db: Session,
    owner_id: uuid.UUID,
    search: str | None = None,
    category: str | None = None,
    low_stock: bool = False,
    active_only: bool = False,
    page: int = 1,
    size: int = 20,
) -> tuple[list[Product], int]:
    """
    Envanter listesi (isme gore sirali, sayfalama ile).

    - search: ad, SKU veya barkod icinde arama
    - category: kategori esitligi
    - low_stock: stogu min_stock_level veya altinda olanlar
    - active_only: sadece katalogdan secilebilir urunler

    Dondurur: (urun_listesi, toplam_sayi)
    """
    query = db.query(Product).filter(Product.owner_id == owner_id)
    if search:
        search_filter = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(search_filter),
                Product.sku.ilike(search_filter),
                Product.barcode.ilike(search_filter),
            )
        )
    if category:
        query = query.filter(Product.category == category)
    if low_stock:
        query = query.filter(Product.current_stock <= Product.min_stock_level)
    if active_only:
        query = query.filter(Product.is_active.is_(True))

    total = query.count()

    offset = (page - 1) * size
    products = query.order_by(Product.name.asc()).offset(offset).limit(size).all()

    return products, total


def get_categories(db: Session, owner_id: uuid.UUID) -> list[str]:
    """Kullanilan kategori adlari (alfabetik)."""
    rows = (
        db.query(Product.category)
        .filter(Product.owner_id == owner_id, Product.category.isnot(None))
        .distinct()
        .order_by(Product.category.asc())
        .all()
    )
    return [row[0] for row in rows]


def get_product(db: Session, product_id: uuid.UUID, owner_id: uuid.UUID) -> Product:
    product = db.query(Product).filter(
        Product.id == product_id, Product.owner_id == owner_id
    ).first()
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


def create_product(db: Session, owner_id: uuid.UUID, data: ProductCreate) -> Product:
    product = Product(owner_id=owner_id, **data.model_dump())
    db.add(product)
    db.flush()
    log_activity(
        db, owner_id, "create", "product", product.id,
        f"Urun '{data.name}' olusturuldu",
    )
    db.commit()
    db.refresh(product)
    return product


def update_product(
    db: Session, product_id: uuid.UUID, owner_id: uuid.UUID, data: ProductUpdate
) -> Product:
    product = get_product(db, product_id, owner_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    log_activity(
        db, owner_id, "update", "product", product_id,
        f"Urun '{product.name}' guncellendi",
    )
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: uuid.UUID, owner_id: uuid.UUID) -> None:
    product = get_product(db, product_id, owner_id)
    product_name = product.name
    db.delete(product)
    log_activity(
        db, owner_id, "delete", "product", product_id,
        f"Urun '{product_name}' silindi",
    )
    db.commit()
