# backend/services/amount_words.py
"""Spell out Taka amounts using the Bangladeshi numbering system (Lakh, Crore)."""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

ONES = [
    '', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine', 'Ten',
    'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen', 'Seventeen',
    'Eighteen', 'Nineteen',
]
TENS = ['', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy', 'Eighty', 'Ninety']

# Largest first; anything at or above a Crore recurses on the crore count
SCALES = [
    (10000000, 'Crore'),
    (100000, 'Lakh'),
    (1000, 'Thousand'),
    (100, 'Hundred'),
]


def integer_to_words(number):
    """Words for a non-negative integer, empty string for zero"""
    if number == 0:
        return ''
    if number < 20:
        return ONES[number]
    if number < 100:
        tens, ones = divmod(number, 10)
        return TENS[tens] + (f" {ONES[ones]}" if ones else '')

    for scale, name in SCALES:
        if number >= scale:
            head, rest = divmod(number, scale)
            words = f"{integer_to_words(head)} {name}"
            if rest:
                words += f" {integer_to_words(rest)}"
            return words
    return ''


def split_amount(amount):
    """Round to paisa and return (taka, paisa, is_negative)"""
    try:
        value = Decimal(str(amount)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        value = Decimal('0.00')
    if not value.is_finite():
        value = Decimal('0.00')

    negative = value < 0
    value = abs(value)
    taka = int(value)
    paisa = int((value - taka) * 100)
    return taka, paisa, negative


def amount_in_words(amount):
    """
    Convert an amount to a currency phrase.

    >>> amount_in_words(950)
    'Nine Hundred Fifty Taka Only'
    >>> amount_in_words(1200.5)
    'One Thousand Two Hundred Taka and Fifty Paisa Only'
    """
    taka, paisa, negative = split_amount(amount)

    words = integer_to_words(taka) or 'Zero'
    words += ' Taka'
    if paisa:
        words += f" and {integer_to_words(paisa)} Paisa"
    if negative and (taka or paisa):
        words = f"Minus {words}"
    return f"{words} Only"
