"""
Bellek ici taslak fatura deposu.

Her taslak onu olusturan oturuma aittir (kullanici ID'si veya misafir token'i).
Tum degisiklikler depo kilidi altinda, taslagin bir kopyasi uzerinde yapilir;
islem basarili olursa kopya taslagin yerine gecer. Hata firlatan bir islem
taslagi degistirmez.
"""
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from fastapi import HTTPException, status

from invoicely.config import settings
from invoicely.dependencies import SessionContext
from invoicely.schemas.business import BusinessProfile
from invoicely.schemas.invoice import InvoiceDocument
from invoicely.services.invoice import new_invoice, snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DraftEntry:
    document: InvoiceDocument
    owner_key: str
    touched_at: float = field(default_factory=time.monotonic)


class DraftStore:
    def __init__(self, ttl_minutes: int | None = None, clock: Callable[[], float] = time.monotonic):
        minutes = settings.DRAFT_TTL_MINUTES if ttl_minutes is None else ttl_minutes
        self.ttl_seconds = minutes * 60
        self._clock = clock
        self._lock = threading.RLock()
        self._drafts: dict[str, DraftEntry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._drafts)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [
            draft_id for draft_id, entry in self._drafts.items()
            if now - entry.touched_at > self.ttl_seconds
        ]
        for draft_id in expired:
            del self._drafts[draft_id]
        if expired:
            logger.info("%d suresi dolmus taslak silindi", len(expired))

    def _entry(self, draft_id: str, ctx: SessionContext) -> DraftEntry:
        self._purge_expired()
        entry = self._drafts.get(draft_id)
        # Baskasinin taslagi da "bulunamadi" olarak doner
        if entry is None or entry.owner_key != ctx.session_key:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Draft invoice not found",
            )
        entry.touched_at = self._clock()
        return entry

    def create(
        self,
        ctx: SessionContext,
        profile: BusinessProfile | None = None,
        document: InvoiceDocument | None = None,
    ) -> InvoiceDocument:
        """
        Yeni taslak ac ve kopyasini dondur.
        document verilirse (kayitli faturadan acma) onun kopyasi taslak olur.
        """
        document = snapshot(document) if document is not None else new_invoice(profile)
        with self._lock:
            self._purge_expired()
            self._drafts[document.id] = DraftEntry(
                document=document, owner_key=ctx.session_key, touched_at=self._clock(),
            )
        logger.info("Taslak olusturuldu: %s (%s)", document.id, "misafir" if ctx.is_guest else "uye")
        return snapshot(document)

    def get(self, draft_id: str, ctx: SessionContext) -> InvoiceDocument:
        """Taslagin o anki kopyasi. Export ve kaydetme bu kopyayi kullanir."""
        with self._lock:
            return snapshot(self._entry(draft_id, ctx).document)

    def mutate(
        self,
        draft_id: str,
        ctx: SessionContext,
        operation: Callable[[InvoiceDocument], T],
    ) -> tuple[T, InvoiceDocument]:
        """
        operation'i taslagin kopyasi uzerinde calistir.
        Basarili olursa kopya kaydedilir; (operation sonucu, guncel kopya) doner.
        Hata firlatirsa taslak oldugu gibi kalir.
        """
        with self._lock:
            entry = self._entry(draft_id, ctx)
            working = snapshot(entry.document)
            result = operation(working)
            entry.document = working
            return result, snapshot(working)

    def discard(self, draft_id: str, ctx: SessionContext) -> None:
        with self._lock:
            self._entry(draft_id, ctx)
            del self._drafts[draft_id]


draft_store = DraftStore()


def get_draft_store() -> DraftStore:
    return draft_store
