import uuid
import logging

from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from invoicely.models.product import Product
from invoicely.models.stock_movement import StockMovement
from invoicely.services.activity import log_activity
from invoicely.services.product import get_product

logger = logging.getLogger(__name__)

MOVEMENT_LABELS = {"in": "Giris", "out": "Cikis", "adjustment": "Duzeltme"}


def get_stock_movements(
    db: Session,
    owner_id: uuid.UUID,
    product_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[StockMovement]:
    """Stok hareketleri, en yeniden en eskiye. Opsiyonel urun filtresi."""
    query = db.query(StockMovement).filter(StockMovement.owner_id == owner_id)

    if product_id:
        query = query.filter(StockMovement.product_id == product_id)

    return (
        query.order_by(StockMovement.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def add_stock_movement(
    db: Session,
    owner_id: uuid.UUID,
    product_id: uuid.UUID,
    movement_type: str,
    quantity: int,
    reference_type: str | None = None,
    reference_id: str | None = None,
    notes: str | None = None,
) -> StockMovement:
    """
    Stok hareketi ekle ve urunun current_stock degerini guncelle.

    - "in": stoga eklenir
    - "out": stoktan dusulur; stok eksiye inemez
    - "adjustment": stok dogrudan quantity'ye esitlenir

    Onceki ve yeni stok degerleri harekette saklanir.
    """
    product = get_product(db, product_id, owner_id)
    previous_stock = product.current_stock or 0

    if movement_type == "in":
        new_stock = previous_stock + quantity
    elif movement_type == "out":
        new_stock = previous_stock - quantity
        if new_stock < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Insufficient stock. Available: {previous_stock}, requested: {quantity}",
            )
    elif movement_type == "adjustment":
        new_stock = quantity
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid movement type. Valid types: in, out, adjustment",
        )

    product.current_stock = new_stock

    movement = StockMovement(
        owner_id=owner_id,
        product_id=product_id,
        movement_type=movement_type,
        quantity=quantity,
        reference_type=reference_type or "manual",
        reference_id=reference_id,
        notes=notes,
        previous_stock=previous_stock,
        new_stock=new_stock,
    )
    db.add(movement)
    db.flush()

    label = MOVEMENT_LABELS.get(movement_type, movement_type)
    log_activity(
        db, owner_id, "create", "stock_movement", movement.id,
        f"Stok hareketi: {product.name} - {label} ({quantity}, {previous_stock} -> {new_stock})",
    )

    db.commit()
    db.refresh(movement)
    logger.info("Stok hareketi: %s %s %d -> %d", product.name, movement_type, previous_stock, new_stock)
    return movement


def get_low_stock_products(db: Session, owner_id: uuid.UUID) -> list[Product]:
    """Aktif olup stogu min_stock_level veya altinda olan urunler, stoga gore artan."""
    return (
        db.query(Product)
        .filter(
            Product.owner_id == owner_id,
            Product.is_active.is_(True),
            Product.current_stock <= Product.min_stock_level,
        )
        .order_by(Product.current_stock.asc())
        .all()
    )


def get_stock_summary(db: Session, owner_id: uuid.UUID) -> dict:
    """
    Envanter ozeti:
    - total_products: toplam urun
    - in_stock: stogu 0'dan buyuk
    - low_stock: stokta ama min_stock_level veya altinda
    - out_of_stock: stogu 0
    """
    base_query = db.query(Product).filter(Product.owner_id == owner_id)

    return {
        "total_products": base_query.count(),
        "in_stock": base_query.filter(Product.current_stock > 0).count(),
        "low_stock": base_query.filter(
            Product.current_stock > 0,
            Product.current_stock <= Product.min_stock_level,
        ).count(),
        "out_of_stock": base_query.filter(Product.current_stock <= 0).count(),
    }
