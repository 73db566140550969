import uuid

from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from invoicely.models.customer import Customer
from invoicely.schemas.customer import CustomerCreate, CustomerUpdate
from invoicely.services.activity import log_activity


def get_customers(
    db: Session,
    owner_id: uuid.UUID,
    page: int = 1,
    size: int = 20,
    search: str | None = None,
) -> tuple[list[Customer], int]:
    """
    Kullanicinin musterilerini isme gore sirali listele.
    Arama: ad, email veya telefon icinde.
    Dondurur: (musteri_listesi, toplam_sayi)
    """
    query = db.query(Customer).filter(Customer.owner_id == owner_id)

    if search:
        search_filter = f"%{search}%"
        query = query.filter(
            or_(
                Customer.name.ilike(search_filter),
                Customer.email.ilike(search_filter),
                Customer.phone.ilike(search_filter),
            )
        )

    total = query.count()

    offset = (page - 1) * size
    customers = query.order_by(Customer.name.asc()).offset(offset).limit(size).all()

    return customers, total


def get_customer(
    db: Session, customer_id: uuid.UUID, owner_id: uuid.UUID
) -> Customer:
    """Tek bir musteriyi getir. Sahiplik kontrolu yapar."""
    customer = db.query(Customer).filter(
        Customer.id == customer_id,
        Customer.owner_id == owner_id,
    ).first()

    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )
    return customer


def create_customer(
    db: Session, owner_id: uuid.UUID, data: CustomerCreate
) -> Customer:
    customer = Customer(owner_id=owner_id, **data.model_dump())
    db.add(customer)
    db.flush()
    log_activity(
        db, owner_id, "create", "customer", customer.id,
        f"Musteri '{data.name}' olusturuldu",
    )
    db.commit()
    db.refresh(customer)
    return customer


def update_customer(
    db: Session, customer_id: uuid.UUID, owner_id: uuid.UUID, data: CustomerUpdate
) -> Customer:
    """
    Musteriyi guncelle (sadece gonderilen alanlar).
    Daha once kaydedilmis faturalardaki musteri kopyasi degismez.
    """
    customer = get_customer(db, customer_id, owner_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(customer, field, value)

    log_activity(
        db, owner_id, "update", "customer", customer_id,
        f"Musteri '{customer.name}' guncellendi",
    )
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(
    db: Session, customer_id: uuid.UUID, owner_id: uuid.UUID
) -> None:
    customer = get_customer(db, customer_id, owner_id)
    name = customer.name
    db.delete(customer)
    log_activity(
        db, owner_id, "delete", "customer", customer_id,
        f"Musteri '{name}' silindi",
    )
    db.commit()
