import uuid
import logging

from sqlalchemy.orm import Session

from invoicely.models.activity import Activity

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    owner_id: uuid.UUID,
    action: str,
    entity_type: str,
    entity_id: uuid.UUID | None,
    description: str,
) -> Activity | None:
    """
    Aktivite logu kaydet.
    Kayit basarisiz olursa hatayi logla, ana islemi engelleme.

    Args:
        db: Veritabani oturumu
        owner_id: Islemi yapan kullanicinin ID'si
        action: Islem turu (create, update, delete, save, export)
        entity_type: Varlik tipi (customer, product, invoice, business_settings)
        entity_id: Isleme konu olan varligin ID'si
        description: Insan tarafindan okunabilir aciklama
    """
    try:
        activity = Activity(
            owner_id=owner_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
        )
        db.add(activity)
        db.flush()  # Commit cagiran service'te yapilir
        return activity
    except Exception as e:
        logger.error("Aktivite logu kaydedilemedi: %s", e)
        return None


def get_recent_activities(
    db: Session, owner_id: uuid.UUID, limit: int = 20
) -> list[Activity]:
    """Kullanicinin son aktiviteleri, en yeniden en eskiye."""
    return (
        db.query(Activity)
        .filter(Activity.owner_id == owner_id)
        .order_by(Activity.created_at.desc())
        .limit(limit)
        .all()
    )
