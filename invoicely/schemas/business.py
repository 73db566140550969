import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from invoicely.config import settings


class BusinessProfile(BaseModel):
    """
    Faturayi kesen isletmenin goruntuleme bilgileri.
    Render katmani sadece bu modeli okur; veritabani modelini gormez.
    """

    business_name: str = Field(default_factory=lambda: settings.DEFAULT_BUSINESS_NAME)
    business_address: str | None = None
    business_phone: str | None = None
    business_email: str | None = None
    payment_instructions: str | None = None
    thank_you_note: str | None = None
    bank_details: str | None = None
    upi_id: str | None = None
    logo_url: str | None = None
    seal_url: str | None = None
    signature_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BusinessSettingsUpdate(BaseModel):
    """Profil kaydetme (upsert). Gonderilmeyen alanlar degismez."""
    business_name: str | None = Field(default=None, min_length=1, max_length=255)
    business_address: str | None = None
    business_phone: str | None = Field(default=None, max_length=50)
    business_email: EmailStr | None = None
    payment_instructions: str | None = None
    thank_you_note: str | None = None
    bank_details: str | None = None
    upi_id: str | None = Field(default=None, max_length=100)
    logo_url: str | None = Field(default=None, max_length=1024)
    seal_url: str | None = Field(default=None, max_length=1024)
    signature_url: str | None = Field(default=None, max_length=1024)


class BusinessSettingsResponse(BusinessProfile):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
