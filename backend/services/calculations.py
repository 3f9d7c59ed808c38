# backend/services/calculations.py
"""
Line item and job total arithmetic.

Values stay unrounded through aggregation. Rounding to 2 decimals happens
only when a figure is formatted for display (``format_money``).
"""
import math
import logging
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP

from services.amount_words import amount_in_words

logger = logging.getLogger(__name__)

LineItemTotals = namedtuple('LineItemTotals', ['subtotal', 'discount_amount', 'vat_amount', 'total'])

JobTotals = namedtuple(
    'JobTotals',
    ['subtotal', 'discount_percent', 'discount_amount', 'total_vat', 'grand_total', 'amount_in_words']
)


def finite(value):
    """Coerce to float, replacing missing or non-finite values with 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def calculate_line_item(quantity=0, unit_price=0, discount_percent=0, vat_rate=0):
    """
    Totals for one priced line.

    Negative quantity or price pass through unclamped so credit-note style
    corrections keep working.
    """
    quantity = finite(quantity)
    unit_price = finite(unit_price)
    discount_percent = finite(discount_percent)
    vat_rate = finite(vat_rate)

    subtotal = finite(quantity * unit_price)
    discount_amount = finite(subtotal * discount_percent / 100)
    vat_amount = finite((subtotal - discount_amount) * vat_rate / 100)
    total = finite(subtotal - discount_amount + vat_amount)

    return LineItemTotals(subtotal, discount_amount, vat_amount, total)


def calculate_item(item):
    """Totals for any object exposing quantity/unit_price/discount_percent/vat_rate"""
    return calculate_line_item(
        quantity=getattr(item, 'quantity', 0),
        unit_price=getattr(item, 'unit_price', 0),
        discount_percent=getattr(item, 'discount_percent', 0),
        vat_rate=getattr(item, 'vat_rate', 0),
    )


def aggregate_job(items, job_discount_percent=0):
    """
    Job totals from raw line items.

    The job discount is applied once to the summed pre-discount subtotal.
    VAT is the sum of the per-item VAT already computed on each line.
    """
    line_totals = [calculate_item(item) for item in items or []]
    job_discount_percent = finite(job_discount_percent)

    subtotal = finite(sum(line.subtotal for line in line_totals))
    discount_amount = finite(subtotal * job_discount_percent / 100)
    total_vat = finite(sum(line.vat_amount for line in line_totals))
    grand_total = finite(subtotal - discount_amount + total_vat)

    logger.debug(f"Aggregated {len(line_totals)} items: subtotal={subtotal}, grand_total={grand_total}")

    return JobTotals(
        subtotal=subtotal,
        discount_percent=job_discount_percent,
        discount_amount=discount_amount,
        total_vat=total_vat,
        grand_total=grand_total,
        amount_in_words=amount_in_words(grand_total),
    )


def round_money(value):
    return float(Decimal(str(finite(value))).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def format_money(value):
    """Display form of a money value, e.g. 1,234.50"""
    rounded = Decimal(str(finite(value))).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    return f"{rounded:,.2f}"


def format_currency(value, symbol='Tk'):
    return f"{symbol} {format_money(value)}" if symbol else format_money(value)


def format_percent(value):
    """Trim trailing zeros: 5.0 -> 5, 7.5 -> 7.5"""
    number = finite(value)
    if number == int(number):
        return str(int(number))
    return f"{number:.2f}".rstrip('0').rstrip('.')
