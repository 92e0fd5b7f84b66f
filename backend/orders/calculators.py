"""
Order financial calculator.

Pure arithmetic over an order's items and a tax rate; it never touches the
database. OrderCalculationService feeds it the current item set and writes
the result back onto the Order.

Usage:
    calculator = OrderCalculator(order.items.all(), tax_rate=Decimal("10"))
    totals = calculator.calculate_totals()
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from payments.money import quantize, ZERO

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


class OrderCalculator:
    """
    Calculates subtotal, tax and total for a set of order items.

    Cancelled items are excluded. Tax and total are rounded to two places
    once, at the end, so repeated recalculation always yields the same values.
    """

    def __init__(self, items: Iterable, tax_rate: Decimal):
        self.items = list(items)
        self.tax_rate = Decimal(str(tax_rate))

    def active_items(self):
        return [item for item in self.items if item.status != "cancelled"]

    def calculate_subtotal(self) -> Decimal:
        # Start with Decimal('0.00') to ensure return type is always Decimal
        return sum((item.subtotal for item in self.active_items()), ZERO)

    def calculate_tax(self, subtotal: Decimal) -> Decimal:
        return subtotal * self.tax_rate / HUNDRED

    def calculate_totals(self) -> OrderTotals:
        subtotal = self.calculate_subtotal()
        tax = self.calculate_tax(subtotal)
        return OrderTotals(
            subtotal=quantize(subtotal),
            tax_amount=quantize(tax),
            total=quantize(subtotal + tax),
        )
