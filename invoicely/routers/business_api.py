"""
Isletme profili router'i.

Endpoint'ler:
    GET /  -> Profil (yoksa varsayilan degerler, id olmadan)
    PUT /  -> Profili olustur veya guncelle
"""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from invoicely.database import get_db
from invoicely.dependencies import get_current_user
from invoicely.models.user import User
from invoicely.schemas.business import (
    BusinessProfile,
    BusinessSettingsResponse,
    BusinessSettingsUpdate,
)
from invoicely.services import business as business_service

router = APIRouter()


@router.get("", response_model=BusinessSettingsResponse | BusinessProfile)
def get_business_settings(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    record = business_service.get_business_settings(db, current_user.id)
    if record is None:
        return BusinessProfile()
    return BusinessSettingsResponse.model_validate(record)


@router.put("", response_model=BusinessSettingsResponse)
def save_business_settings(
    data: BusinessSettingsUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    return business_service.upsert_business_settings(db, current_user.id, data)
