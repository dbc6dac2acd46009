"""Quote pricing: line subtotals, discount, GST split and grand total.

Every screen that shows money for a quote or invoice (live preview, the persisted
record, the PDF) gets its numbers from ``PricingService.calculate`` so the figures
cannot drift apart.

Order of operations::

    subtotal = sum(quantity * unit_price)
    discount = subtotal * discount% / 100
    taxable  = subtotal - discount
    cgst     = taxable * cgst% / 100      (sgst, igst likewise, never compounded)
    total    = taxable + cgst + sgst + igst + shipping
"""
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal('0')
HUNDRED = Decimal('100')
CENT = Decimal('0.01')
# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal('9999999999.99')


def to_decimal(value):
    """Coerce form/JSON input to Decimal without passing through float."""
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value):
    """Round to currency precision."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class PriceBreakdown(namedtuple(
        'PriceBreakdown',
        'subtotal discount taxable cgst sgst igst shipping_charges total')):
    __slots__ = ()

    def rounded(self):
        """Components rounded to cents, with taxable and total re-derived from them.

        Re-deriving keeps the stored invariant exact:
        total == subtotal - discount + cgst + sgst + igst + shipping.
        """
        subtotal = money(self.subtotal)
        discount = money(self.discount)
        cgst = money(self.cgst)
        sgst = money(self.sgst)
        igst = money(self.igst)
        shipping = money(self.shipping_charges)
        taxable = subtotal - discount
        return PriceBreakdown(
            subtotal=subtotal,
            discount=discount,
            taxable=taxable,
            cgst=cgst,
            sgst=sgst,
            igst=igst,
            shipping_charges=shipping,
            total=taxable + cgst + sgst + igst + shipping,
        )

    def as_strings(self):
        return {k: str(money(v)) for k, v in self._asdict().items()}


class PricingService:
    @staticmethod
    def line_subtotal(quantity, unit_price):
        return int(quantity) * to_decimal(unit_price)

    @staticmethod
    def calculate(items_data, discount_percent=0, cgst_percent=0, sgst_percent=0,
                  igst_percent=0, shipping_charges=0):
        """Full-precision breakdown for a list of ``{'quantity', 'unit_price'}`` dicts.

        Inputs are assumed valid (non-negative, integer quantities); forms reject the
        rest before this is called.
        """
        subtotal = sum(
            (PricingService.line_subtotal(item.get('quantity', 0), item.get('unit_price', 0))
             for item in items_data),
            ZERO,
        )
        discount = subtotal * to_decimal(discount_percent) / HUNDRED
        taxable = subtotal - discount
        cgst = taxable * to_decimal(cgst_percent) / HUNDRED
        sgst = taxable * to_decimal(sgst_percent) / HUNDRED
        igst = taxable * to_decimal(igst_percent) / HUNDRED
        shipping = to_decimal(shipping_charges)
        return PriceBreakdown(
            subtotal=subtotal,
            discount=discount,
            taxable=taxable,
            cgst=cgst,
            sgst=sgst,
            igst=igst,
            shipping_charges=shipping,
            total=taxable + cgst + sgst + igst + shipping,
        )

    @staticmethod
    def rates_from_amounts(subtotal, discount, cgst, sgst, igst):
        """Recover percentage inputs from stored amounts (edit-mode reload).

        Discount is relative to the subtotal, taxes to the taxable amount. A zero base
        yields 0%.
        """
        subtotal = to_decimal(subtotal)
        discount = to_decimal(discount)
        taxable = subtotal - discount

        def pct(amount, base):
            if base == ZERO:
                return ZERO
            return to_decimal(amount) / base * HUNDRED

        return {
            'discount_percent': pct(discount, subtotal),
            'cgst_percent': pct(cgst, taxable),
            'sgst_percent': pct(sgst, taxable),
            'igst_percent': pct(igst, taxable),
        }
