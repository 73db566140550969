"""
Invoicely - Toplam Hesaplama Testleri

Test edilen fonksiyon: invoicely.services.totals.recompute
"""

from decimal import Decimal

from invoicely.schemas.invoice import DiscountMode, LineItem
from invoicely.services.totals import recompute


def _item(quantity, unit_price):
    return LineItem(quantity=Decimal(quantity), unit_price=Decimal(unit_price))


class TestRecompute:
    """Ara toplam, vergi, indirim ve genel toplam."""

    def test_empty_invoice(self):
        totals = recompute([], Decimal("10"), DiscountMode.PERCENTAGE, Decimal("0"))
        assert totals.subtotal == Decimal("0.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.discount_amount == Decimal("0.00")
        assert totals.total == Decimal("0.00")

    def test_empty_invoice_with_fixed_discount(self):
        """Kalem yoksa toplam, sabit indirimin eksi degeridir."""
        totals = recompute([], Decimal("10"), DiscountMode.FIXED, Decimal("25"))
        assert totals.subtotal == Decimal("0.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total == Decimal("-25.00")

    def test_website_and_logo_invoice(self):
        """75000 x 1 + 12500 x 2, %10 vergi, %5 indirim."""
        items = [_item("1", "75000"), _item("2", "12500")]
        totals = recompute(items, Decimal("10"), DiscountMode.PERCENTAGE, Decimal("5"))
        assert totals.subtotal == Decimal("100000.00")
        assert totals.tax_amount == Decimal("10000.00")
        assert totals.discount_amount == Decimal("5000.00")
        assert totals.total == Decimal("105000.00")

    def test_percentage_discount(self):
        """2 x 100 + 1 x 50, %10 vergi, %5 indirim."""
        items = [_item("2", "100"), _item("1", "50")]
        totals = recompute(items, Decimal("10"), DiscountMode.PERCENTAGE, Decimal("5"))
        assert totals.subtotal == Decimal("250.00")
        assert totals.tax_amount == Decimal("25.00")
        assert totals.discount_amount == Decimal("12.50")
        assert totals.total == Decimal("262.50")

    def test_fixed_discount(self):
        items = [_item("2", "100"), _item("1", "50")]
        totals = recompute(items, Decimal("10"), DiscountMode.FIXED, Decimal("30"))
        assert totals.discount_amount == Decimal("30.00")
        assert totals.total == Decimal("245.00")

    def test_mode_accepts_plain_string(self):
        totals = recompute([_item("1", "100")], Decimal("0"), "fixed", Decimal("10"))
        assert totals.total == Decimal("90.00")

    def test_fixed_discount_larger_than_subtotal_goes_negative(self):
        """Negatif toplam kirpilmaz."""
        totals = recompute([_item("1", "20")], Decimal("0"), DiscountMode.FIXED, Decimal("50"))
        assert totals.total == Decimal("-30.00")

    def test_zero_tax_rate(self):
        totals = recompute([_item("3", "10")], Decimal("0"), DiscountMode.PERCENTAGE, Decimal("0"))
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total == Decimal("30.00")

    def test_tax_is_rounded_to_two_places(self):
        """33.33 x %18 = 5.9994 -> 6.00"""
        totals = recompute([_item("1", "33.33")], Decimal("18"), DiscountMode.PERCENTAGE, Decimal("0"))
        assert totals.tax_amount == Decimal("6.00")
        assert totals.total == Decimal("39.33")

    def test_half_up_rounding(self):
        """0.125 -> 0.13 (ROUND_HALF_UP)."""
        totals = recompute([_item("1", "1.25")], Decimal("10"), DiscountMode.PERCENTAGE, Decimal("0"))
        assert totals.tax_amount == Decimal("0.13")

    def test_same_input_same_output(self):
        items = [_item("2", "19.99"), _item("0.5", "7.30")]
        first = recompute(items, Decimal("12"), DiscountMode.PERCENTAGE, Decimal("2.5"))
        second = recompute(items, Decimal("12"), DiscountMode.PERCENTAGE, Decimal("2.5"))
        assert first == second

    def test_items_are_not_modified(self):
        items = [_item("2", "100")]
        before = [item.model_dump() for item in items]
        recompute(items, Decimal("10"), DiscountMode.FIXED, Decimal("5"))
        assert [item.model_dump() for item in items] == before
