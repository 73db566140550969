import uuid

from sqlalchemy.orm import Session

from invoicely.config import settings
from invoicely.models.business import BusinessSettings
from invoicely.schemas.business import BusinessProfile, BusinessSettingsUpdate
from invoicely.services.activity import log_activity


def get_business_settings(db: Session, owner_id: uuid.UUID) -> BusinessSettings | None:
    return db.query(BusinessSettings).filter(BusinessSettings.owner_id == owner_id).first()


def get_profile(db: Session, owner_id: uuid.UUID | None) -> BusinessProfile:
    """
    Faturada gosterilecek isletme profili.
    Misafir veya profili olmayan kullanici icin varsayilan profil doner.
    """
    if owner_id is None:
        return BusinessProfile()
    record = get_business_settings(db, owner_id)
    if record is None:
        return BusinessProfile()
    return BusinessProfile.model_validate(record)


def upsert_business_settings(
    db: Session, owner_id: uuid.UUID, data: BusinessSettingsUpdate
) -> BusinessSettings:
    """Profil yoksa olustur, varsa sadece gonderilen alanlari guncelle."""
    record = get_business_settings(db, owner_id)
    changes = data.model_dump(exclude_unset=True)

    if record is None:
        record = BusinessSettings(
            owner_id=owner_id,
            business_name=changes.pop("business_name", None) or settings.DEFAULT_BUSINESS_NAME,
        )
        db.add(record)
        action = "create"
    else:
        action = "update"

    for field, value in changes.items():
        if field == "business_name" and not value:
            continue
        setattr(record, field, value)

    db.flush()
    log_activity(
        db, owner_id, action, "business_settings", record.id,
        f"Isletme profili '{record.business_name}' kaydedildi",
    )
    db.commit()
    db.refresh(record)
    return record
