"""
Invoicely - Onizleme ve PDF Export Testleri

Test edilen modul: invoicely.services.render
"""

import base64
import datetime as dt
from decimal import Decimal

import httpx
import pytest

from invoicely.exceptions import ExportError
from invoicely.schemas.business import BusinessProfile
from invoicely.schemas.invoice import InvoiceCustomer
from invoicely.services import invoice as invoice_service
from invoicely.services import render as render_service

# 1x1 seffaf PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def document():
    doc = invoice_service.new_invoice()
    invoice_service.update_header(
        doc,
        invoice_number="INV-42",
        date=dt.date(2024, 3, 1),
        customer=InvoiceCustomer(name="Acme Traders", email="billing@acme.example", address="12 MG Road\nBengaluru"),
    )
    invoice_service.add_blank_item(
        doc, description="Website Development", order_id="ORD-1",
        quantity=Decimal("1"), unit_price=Decimal("75000"), date=dt.date(2024, 3, 1),
    )
    invoice_service.add_blank_item(
        doc, description="Logo Design", quantity=Decimal("2"), unit_price=Decimal("12500"),
    )
    return doc


@pytest.fixture
def profile():
    return BusinessProfile(
        business_name="Doeasy Services",
        business_address="Pune",
        bank_details="A/C No: 000111222",
        upi_id="doeasy@upi",
    )


def _image_client(status_code=200):
    def handler(request):
        return httpx.Response(status_code, content=PNG_BYTES, headers={"content-type": "image/png"})
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestFormatting:

    def test_format_money(self):
        assert render_service.format_money(Decimal("75000")) == "Rs.75000.00"
        assert render_service.format_money(Decimal("0.5")) == "Rs.0.50"
        assert render_service.format_money(Decimal("-30")) == "-Rs.30.00"

    def test_format_quantity(self):
        assert render_service.format_quantity(Decimal("2")) == "2"
        assert render_service.format_quantity(Decimal("2.000")) == "2"
        assert render_service.format_quantity(Decimal("10")) == "10"
        assert render_service.format_quantity(Decimal("1.50")) == "1.5"

    def test_pdf_filename(self, document):
        assert render_service.pdf_filename(document) == "Invoice-INV-42.pdf"
        document.invoice_number = "INV 7/2024"
        assert render_service.pdf_filename(document) == "Invoice-INV_7_2024.pdf"


class TestRenderContext:

    def test_rows_are_numbered_in_order(self, document, profile, member_ctx):
        context = render_service.build_render_context(document, profile, member_ctx)
        assert [row["sl_no"] for row in context["rows"]] == [1, 2]
        assert context["rows"][0]["description"] == "Website Development"
        assert context["rows"][1]["amount"] == "Rs.25000.00"
        assert context["subtotal"] == "Rs.100000.00"
        assert context["tax_amount"] == "Rs.10000.00"
        assert context["total"] == "Rs.110000.00"

    def test_discount_hidden_when_zero(self, document, profile, member_ctx):
        context = render_service.build_render_context(document, profile, member_ctx)
        assert context["show_discount"] is False

    def test_discount_shown_when_non_zero(self, document, profile, member_ctx):
        invoice_service.update_header(document, discount_value=Decimal("5"))
        context = render_service.build_render_context(document, profile, member_ctx)
        assert context["show_discount"] is True
        assert context["discount_label"] == "Discount (5%)"
        assert context["discount_amount"] == "Rs.5000.00"

    def test_member_sees_bank_details(self, document, profile, member_ctx):
        context = render_service.build_render_context(document, profile, member_ctx)
        assert context["bank_details"] == "A/C No: 000111222"
        assert context["upi_id"] == "doeasy@upi"

    def test_guest_never_sees_bank_details(self, document, profile, guest_ctx):
        context = render_service.build_render_context(document, profile, guest_ctx)
        assert context["bank_details"] is None
        assert context["upi_id"] is None


class TestPreview:

    def test_preview_contains_invoice(self, document, profile, member_ctx):
        html = render_service.render_preview_html(document, profile, member_ctx)
        assert "INV-42" in html
        assert "Bill To:" in html
        assert "Acme Traders" in html
        assert "Rs.110000.00" in html
        assert "Bank Details:" in html
        assert "Discount" not in html

    def test_guest_preview_hides_bank_details(self, document, profile, guest_ctx):
        html = render_service.render_preview_html(document, profile, guest_ctx)
        assert "Bank Details:" not in html
        assert "doeasy@upi" not in html
        assert "000111222" not in html

    def test_values_are_escaped(self, document, profile, member_ctx):
        invoice_service.add_blank_item(document, description="<script>alert(1)</script>")
        html = render_service.render_preview_html(document, profile, member_ctx)
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_multiline_address(self, document, profile, member_ctx):
        html = render_service.render_preview_html(document, profile, member_ctx)
        assert "12 MG Road<br/>Bengaluru" in html


class TestImageLoader:

    def test_data_uri_passthrough(self, tmp_path):
        loader = render_service.ImageLoader(asset_dir=tmp_path)
        assert loader.load(PNG_DATA_URI) == PNG_DATA_URI

    def test_url(self, tmp_path):
        loader = render_service.ImageLoader(asset_dir=tmp_path, client=_image_client())
        assert loader.load("https://cdn.example/seal.png").startswith("data:image/png;base64,")

    def test_url_error(self, tmp_path):
        loader = render_service.ImageLoader(asset_dir=tmp_path, client=_image_client(404))
        with pytest.raises(render_service.ImageLoadError):
            loader.load("https://cdn.example/missing.png")

    def test_local_file(self, tmp_path):
        (tmp_path / "sign.png").write_bytes(PNG_BYTES)
        loader = render_service.ImageLoader(asset_dir=tmp_path)
        assert loader.load("sign.png").startswith("data:image/png;base64,")

    def test_path_outside_asset_dir(self, tmp_path):
        loader = render_service.ImageLoader(asset_dir=tmp_path / "assets")
        with pytest.raises(render_service.ImageLoadError):
            loader.load("../secret.png")

    def test_load_all_collects_warnings(self, tmp_path):
        profile = BusinessProfile(seal_url=PNG_DATA_URI, signature_url="missing.png")
        images, warnings = render_service.ImageLoader(asset_dir=tmp_path).load_all(profile)
        assert images["seal"] == PNG_DATA_URI
        assert images["signature"] is None
        assert images["logo"] is None
        assert len(warnings) == 1
        assert "Signature" in warnings[0]


class TestExportPdf:

    def test_export(self, document, profile, member_ctx, tmp_path):
        export = render_service.export_pdf(
            document, profile, member_ctx, loader=render_service.ImageLoader(asset_dir=tmp_path),
        )
        assert export.filename == "Invoice-INV-42.pdf"
        assert export.content.startswith(b"%PDF")
        assert export.warnings == []

    def test_export_with_images(self, document, member_ctx, tmp_path):
        profile = BusinessProfile(seal_url=PNG_DATA_URI, signature_url="https://cdn.example/sig.png")
        loader = render_service.ImageLoader(asset_dir=tmp_path, client=_image_client())
        export = render_service.export_pdf(document, profile, member_ctx, loader=loader)
        assert export.content.startswith(b"%PDF")
        assert export.warnings == []

    def test_failed_image_is_omitted(self, document, member_ctx, tmp_path):
        profile = BusinessProfile(seal_url="https://cdn.example/seal.png")
        loader = render_service.ImageLoader(asset_dir=tmp_path, client=_image_client(500))
        export = render_service.export_pdf(document, profile, member_ctx, loader=loader)
        assert export.content.startswith(b"%PDF")
        assert len(export.warnings) == 1

    def test_on_complete_called_once_on_success(self, document, profile, member_ctx, tmp_path):
        calls = []
        render_service.export_pdf(
            document, profile, member_ctx,
            on_complete=lambda result, error: calls.append((result, error)),
            loader=render_service.ImageLoader(asset_dir=tmp_path),
        )
        assert len(calls) == 1
        assert calls[0][0] is not None
        assert calls[0][1] is None

    def test_on_complete_called_once_on_failure(self, document, profile, member_ctx, monkeypatch, tmp_path):
        def broken_render(*args, **kwargs):
            raise RuntimeError("renderer crashed")

        monkeypatch.setattr(render_service.pisa, "CreatePDF", broken_render)
        calls = []
        with pytest.raises(ExportError):
            render_service.export_pdf(
                document, profile, member_ctx,
                on_complete=lambda result, error: calls.append((result, error)),
                loader=render_service.ImageLoader(asset_dir=tmp_path),
            )
        assert len(calls) == 1
        assert calls[0][0] is None
        assert isinstance(calls[0][1], ExportError)

    def test_export_uses_snapshot(self, document, profile, member_ctx, monkeypatch, tmp_path):
        """Render sirasinda orijinal belgede yapilan degisiklik PDF'e girmez."""
        seen = {}
        original_context = render_service.build_render_context

        def capture(doc, *args, **kwargs):
            invoice_service.add_blank_item(document, description="Late edit")
            context = original_context(doc, *args, **kwargs)
            seen["rows"] = len(context["rows"])
            return context

        monkeypatch.setattr(render_service, "build_render_context", capture)
        render_service.export_pdf(
            document, profile, member_ctx, loader=render_service.ImageLoader(asset_dir=tmp_path),
        )
        assert seen["rows"] == 2
