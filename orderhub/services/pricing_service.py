"""
Pricing engine - pure order total computation.

All amounts are Decimal and kept at full precision; rounding happens only
through OrderTotals.rounded() when values are displayed or persisted.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

TAX_RATE = Decimal('0.10')
CENT = Decimal('0.01')
ZERO = Decimal('0')
HUNDRED = Decimal('100')


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents (half up) for display or persistence."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def clamp_discount_percent(value: Any) -> Decimal:
    """Clamp a discount percentage to [0, 100]."""
    percent = to_decimal(value if value not in (None, '') else 0)
    if percent < ZERO:
        return ZERO
    if percent > HUNDRED:
        return HUNDRED
    return percent


def compute_subtotal(lines: Iterable[Any], catalog: Mapping[Any, Any]) -> Decimal:
    """
    Sum unit price x quantity over the lines.

    Lines whose product is not in the catalog, or whose quantity is below 1,
    contribute nothing.
    """
    subtotal = ZERO
    for line in lines:
        if line.quantity < 1:
            continue
        product = catalog.get(line.product_id)
        if product is None:
            continue
        subtotal += to_decimal(product.price) * line.quantity
    return subtotal


def compute_discount(subtotal: Decimal, discount_percent: Any) -> Decimal:
    """Discount amount; the percentage must already be clamped by the caller."""
    return to_decimal(subtotal) * to_decimal(discount_percent) / HUNDRED


def compute_tax(subtotal: Decimal, discount: Decimal, tax_rate: Decimal = TAX_RATE) -> Decimal:
    """Tax on the discounted subtotal."""
    return (to_decimal(subtotal) - to_decimal(discount)) * to_decimal(tax_rate)


def compute_total(subtotal: Decimal, discount: Decimal, tax: Decimal) -> Decimal:
    return to_decimal(subtotal) - to_decimal(discount) + to_decimal(tax)


@dataclass(frozen=True)
class OrderTotals:
    """Full-precision totals for a draft."""
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal

    def rounded(self) -> 'OrderTotals':
        return OrderTotals(
            subtotal=quantize_money(self.subtotal),
            discount=quantize_money(self.discount),
            tax=quantize_money(self.tax),
            total=quantize_money(self.total),
        )

    def to_dict(self) -> dict:
        shown = self.rounded()
        return {
            'subtotal': str(shown.subtotal),
            'discount': str(shown.discount),
            'tax': str(shown.tax),
            'total': str(shown.total),
        }


def price_lines(lines: Iterable[Any], catalog: Mapping[Any, Any], discount_percent: Any,
                tax_rate: Decimal = TAX_RATE) -> OrderTotals:
    """Chain subtotal -> discount -> tax -> total."""
    subtotal = compute_subtotal(lines, catalog)
    discount = compute_discount(subtotal, discount_percent)
    tax = compute_tax(subtotal, discount, tax_rate)
    return OrderTotals(
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        total=compute_total(subtotal, discount, tax),
    )


def price_draft(draft, catalog: Mapping[Any, Any], tax_rate: Decimal = TAX_RATE) -> OrderTotals:
    """Price an OrderDraft against a catalog snapshot."""
    return price_lines(draft.lines, catalog, draft.discount_percent, tax_rate)
