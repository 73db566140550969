"""
Invoicely - Taslak Deposu Testleri

Test edilen sinif: invoicely.services.drafts.DraftStore
"""

import threading
from decimal import Decimal

import pytest
from fastapi import HTTPException

from invoicely.dependencies import SessionContext
from invoicely.exceptions import InvoiceValidationError
from invoicely.services import invoice as invoice_service
from invoicely.services.drafts import DraftStore


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestDraftStore:

    def test_create_and_get(self, guest_ctx):
        store = DraftStore()
        doc = store.create(guest_ctx)
        assert store.get(doc.id, guest_ctx).invoice_number == doc.invoice_number
        assert len(store) == 1

    def test_other_session_cannot_see_draft(self, guest_ctx, member_ctx):
        store = DraftStore()
        doc = store.create(guest_ctx)
        with pytest.raises(HTTPException) as exc_info:
            store.get(doc.id, member_ctx)
        assert exc_info.value.status_code == 404
        with pytest.raises(HTTPException):
            store.get(doc.id, SessionContext.guest("someone-else"))

    def test_mutate_persists(self, guest_ctx):
        store = DraftStore()
        doc = store.create(guest_ctx)
        item, updated = store.mutate(
            doc.id, guest_ctx,
            lambda d: invoice_service.add_blank_item(d, unit_price=Decimal("10")),
        )
        assert updated.items[0].id == item.id
        assert store.get(doc.id, guest_ctx).totals.subtotal == Decimal("10.00")

    def test_failed_mutation_leaves_draft_unchanged(self, guest_ctx):
        store = DraftStore()
        doc = store.create(guest_ctx)
        store.mutate(doc.id, guest_ctx, lambda d: invoice_service.add_blank_item(d, unit_price=Decimal("10")))

        def add_then_fail(d):
            invoice_service.add_blank_item(d, unit_price=Decimal("99"))
            invoice_service.update_header(d, tax_rate=Decimal("-1"))

        with pytest.raises(InvoiceValidationError):
            store.mutate(doc.id, guest_ctx, add_then_fail)
        current = store.get(doc.id, guest_ctx)
        assert len(current.items) == 1
        assert current.totals.subtotal == Decimal("10.00")

    def test_returned_documents_are_copies(self, guest_ctx):
        store = DraftStore()
        doc = store.create(guest_ctx)
        snapshot = store.get(doc.id, guest_ctx)
        store.mutate(doc.id, guest_ctx, lambda d: invoice_service.add_blank_item(d))
        assert snapshot.items == []

    def test_expiry(self, guest_ctx):
        clock = FakeClock()
        store = DraftStore(ttl_minutes=1, clock=clock)
        doc = store.create(guest_ctx)
        clock.now = 30
        store.get(doc.id, guest_ctx)
        clock.now = 85
        # Son erisimden beri 55 saniye: hala gecerli
        store.get(doc.id, guest_ctx)
        clock.now = 200
        with pytest.raises(HTTPException):
            store.get(doc.id, guest_ctx)
        assert len(store) == 0

    def test_discard(self, guest_ctx):
        store = DraftStore()
        doc = store.create(guest_ctx)
        store.discard(doc.id, guest_ctx)
        with pytest.raises(HTTPException):
            store.get(doc.id, guest_ctx)

    def test_create_from_document(self, member_ctx):
        store = DraftStore()
        source = invoice_service.new_invoice()
        invoice_service.add_blank_item(source, description="Copied")
        doc = store.create(member_ctx, document=source)
        assert store.get(doc.id, member_ctx).items[0].description == "Copied"

    def test_concurrent_mutations_are_serialized(self, guest_ctx):
        store = DraftStore()
        doc = store.create(guest_ctx)

        def worker():
            for _ in range(25):
                store.mutate(
                    doc.id, guest_ctx,
                    lambda d: invoice_service.add_blank_item(d, unit_price=Decimal("1")),
                )

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        current = store.get(doc.id, guest_ctx)
        assert len(current.items) == 100
        assert current.totals.subtotal == Decimal("100.00")
