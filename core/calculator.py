"""Invoice money arithmetic.

total = subtotal + subtotal * tax_rate / 100 - discount

Negative totals (discount larger than subtotal plus tax) are returned as-is.
Missing or NaN inputs must already be zeroed; the models do that on load.
"""

from dataclasses import dataclass
from typing import Iterable

from core.models import Invoice, LineItem


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax_amount: float
    discount: float
    total: float

    def as_dict(self) -> dict[str, float]:
        return {
            "subtotal": self.subtotal,
            "taxAmount": self.tax_amount,
            "discount": self.discount,
            "total": self.total,
        }


def calculate_totals(items: Iterable[LineItem], tax_rate: float, discount: float) -> InvoiceTotals:
    subtotal = sum((item.price * item.quantity for item in items), 0.0)
    tax_amount = subtotal * (tax_rate / 100)
    return InvoiceTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        discount=discount,
        total=subtotal + tax_amount - discount,
    )


def invoice_totals(invoice: Invoice) -> InvoiceTotals:
    return calculate_totals(invoice.items, invoice.tax_rate, invoice.discount)


def invoice_total(invoice: Invoice) -> float:
    """Grand total of one invoice."""
    return invoice_totals(invoice).total
