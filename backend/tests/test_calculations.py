import math

import pytest

from services.calculations import (
    calculate_line_item, aggregate_job, format_money, format_currency, format_percent, round_money,
)
from services.job_data import JobItemData


@pytest.mark.parametrize('quantity,unit_price,discount_percent,vat_rate', [
    (0, 0, 0, 0),
    (10, 100, 0, 0),
    (3, 33.33, 10, 15),
    (19, 100, 0, 5),
    (2.75, 1234.56, 12.5, 100),
    (1, 0.01, 50, 7.5),
    (1000, 999.99, 12.5, 15),
])
def test_line_item_total_identity_and_non_negative(quantity, unit_price, discount_percent, vat_rate):
    line = calculate_line_item(quantity, unit_price, discount_percent, vat_rate)
    assert line.total == line.subtotal - line.discount_amount + line.vat_amount
    assert all(value >= 0 for value in line)


def test_line_item_formulas():
    line = calculate_line_item(quantity=4, unit_price=250, discount_percent=10, vat_rate=15)
    assert line.subtotal == 1000
    assert line.discount_amount == 100
    assert line.vat_amount == pytest.approx(135)
    assert line.total == pytest.approx(1035)


def test_missing_inputs_default_to_zero():
    assert tuple(calculate_line_item()) == (0, 0, 0, 0)
    assert tuple(calculate_line_item(None, None, None, None)) == (0, 0, 0, 0)
    assert calculate_line_item(quantity=5).total == 0


def test_negative_values_pass_through_for_credit_notes():
    line = calculate_line_item(quantity=-2, unit_price=100, vat_rate=10)
    assert line.subtotal == -200
    assert line.vat_amount == -20
    assert line.total == -220


@pytest.mark.parametrize('bad', [float('nan'), float('inf'), float('-inf')])
def test_non_finite_inputs_become_zero(bad):
    line = calculate_line_item(quantity=bad, unit_price=100)
    assert tuple(line) == (0, 0, 0, 0)
    line = calculate_line_item(quantity=2, unit_price=100, vat_rate=bad)
    assert line.vat_amount == 0
    assert all(math.isfinite(value) for value in line)


def test_job_discount_example():
    items = [JobItemData(work_description='Tiles', unit='sft', quantity=10, unit_price=100)]
    totals = aggregate_job(items, job_discount_percent=5)
    assert totals.subtotal == 1000
    assert totals.discount_amount == 50
    assert totals.total_vat == 0
    assert totals.grand_total == 950
    assert totals.amount_in_words == 'Nine Hundred Fifty Taka Only'


def test_job_with_no_items():
    totals = aggregate_job([], job_discount_percent=10)
    assert totals.grand_total == 0
    assert totals.amount_in_words == 'Zero Taka Only'


def test_grand_total_matches_from_scratch_recomputation(job):
    totals = aggregate_job(job.items, job.discount_percent)

    subtotal = sum(item.quantity * item.unit_price for item in job.items)
    vat = sum(
        (item.quantity * item.unit_price * (1 - item.discount_percent / 100)) * item.vat_rate / 100
        for item in job.items
    )
    expected = subtotal - subtotal * job.discount_percent / 100 + vat

    assert totals.subtotal == pytest.approx(2800)
    assert totals.total_vat == pytest.approx(95)
    assert totals.grand_total == pytest.approx(expected)
    assert round_money(totals.grand_total) == 2755.0


def test_job_discount_applied_once_to_summed_subtotal():
    items = [
        JobItemData(work_description='A', quantity=1, unit_price=333.33),
        JobItemData(work_description='B', quantity=1, unit_price=333.33),
        JobItemData(work_description='C', quantity=1, unit_price=333.34),
    ]
    totals = aggregate_job(items, job_discount_percent=10)
    assert totals.discount_amount == pytest.approx(100)
    assert totals.grand_total == pytest.approx(900)


def test_aggregation_is_unrounded_until_display():
    items = [JobItemData(work_description='Bolt', quantity=1, unit_price=0.004) for _ in range(3)]
    totals = aggregate_job(items)
    assert totals.grand_total == pytest.approx(0.012)
    assert format_money(totals.grand_total) == '0.01'


def test_money_formatting():
    assert format_money(1234.5) == '1,234.50'
    assert format_money(0.005) == '0.01'
    assert format_money(-0.001) == '0.00'
    assert format_money(float('nan')) == '0.00'
    assert format_currency(950, 'Tk') == 'Tk 950.00'
    assert format_currency(950, '') == '950.00'
    assert format_percent(5.0) == '5'
    assert format_percent(7.5) == '7.5'
