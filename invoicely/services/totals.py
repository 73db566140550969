"""
Fatura toplam hesaplama motoru.

Saf fonksiyon: ayni girdi her zaman ayni ciktiyi verir, hicbir kalemi degistirmez.
Taslak uzerindeki her degisiklikten sonra services.invoice tarafindan cagrilir.
"""
from decimal import Decimal
from typing import Iterable

from invoicely.schemas.invoice import (
    DiscountMode,
    InvoiceTotals,
    LineItem,
    ZERO,
    to_money,
)

HUNDRED = Decimal(100)


def recompute(
    items: Iterable[LineItem],
    tax_rate: Decimal,
    discount_mode: DiscountMode | str,
    discount_value: Decimal,
) -> InvoiceTotals:
    """
    Ara toplam, vergi, indirim ve genel toplami hesapla.

    - subtotal = kalem tutarlarinin toplami (belge sirasiyla)
    - tax_amount = subtotal * tax_rate / 100
    - discount_amount = yuzde modunda subtotal * discount_value / 100,
      sabit modda discount_value
    - total = subtotal + tax_amount - discount_amount

    Sabit indirim ara toplami asarsa total negatif olabilir; burada kirpilmaz.
    Isaret kontrolu yapilmaz, girdiler cagiran tarafta dogrulanir.
    """
    subtotal = sum((item.amount for item in items), ZERO)
    tax_rate = Decimal(tax_rate)
    discount_value = Decimal(discount_value)

    tax_amount = to_money(subtotal * tax_rate / HUNDRED)

    if DiscountMode(discount_mode) is DiscountMode.PERCENTAGE:
        discount_amount = to_money(subtotal * discount_value / HUNDRED)
    else:
        discount_amount = to_money(discount_value)

    return InvoiceTotals(
        subtotal=to_money(subtotal),
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total=to_money(subtotal + tax_amount - discount_amount),
    )
