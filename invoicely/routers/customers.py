"""
Musteri REST API Router'i.

Faturanin "Bill To" kismina secilen kayitli musteriler.
Tum endpoint'ler giris gerektirir; herkes sadece kendi musterilerini gorur.

Endpoint'ler:
    GET    /               -> Musteri listesi (sayfalama + arama)
    GET    /{customer_id}  -> Musteri detay
    POST   /               -> Yeni musteri
    PUT    /{customer_id}  -> Musteri guncelle
    DELETE /{customer_id}  -> Musteri sil
"""
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from invoicely.database import get_db
from invoicely.dependencies import get_current_user
from invoicely.models.user import User
from invoicely.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerListResponse,
)
from invoicely.services import customer as customer_service

router = APIRouter()


@router.get("", response_model=CustomerListResponse)
def list_customers(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    page: int = Query(default=1, ge=1, description="Sayfa numarasi"),
    size: int = Query(default=20, ge=1, le=100, description="Sayfa basi kayit"),
    search: str | None = Query(default=None, description="Arama (ad, email, telefon)"),
):
    customers, total = customer_service.get_customers(
        db=db, owner_id=current_user.id, page=page, size=size, search=search,
    )
    return CustomerListResponse(items=customers, total=total, page=page, size=size)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: uuid.UUID,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return customer_service.get_customer(db=db, customer_id=customer_id, owner_id=current_user.id)


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    data: CustomerCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return customer_service.create_customer(db=db, owner_id=current_user.id, data=data)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: uuid.UUID,
    data: CustomerUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return customer_service.update_customer(
        db=db, customer_id=customer_id, owner_id=current_user.id, data=data,
    )


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: uuid.UUID,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    customer_service.delete_customer(db=db, customer_id=customer_id, owner_id=current_user.id)
