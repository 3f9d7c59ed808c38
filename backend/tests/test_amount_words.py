import pytest

from services.amount_words import amount_in_words, integer_to_words


@pytest.mark.parametrize('amount,words', [
    (0, 'Zero Taka Only'),
    (950, 'Nine Hundred Fifty Taka Only'),
    (1200.50, 'One Thousand Two Hundred Taka and Fifty Paisa Only'),
    (0.5, 'Zero Taka and Fifty Paisa Only'),
    (15, 'Fifteen Taka Only'),
    (100000, 'One Lakh Taka Only'),
    (2755, 'Two Thousand Seven Hundred Fifty Five Taka Only'),
    (12345678, 'One Crore Twenty Three Lakh Forty Five Thousand Six Hundred Seventy Eight Taka Only'),
    (-50, 'Minus Fifty Taka Only'),
])
def test_amount_in_words(amount, words):
    assert amount_in_words(amount) == words


def test_rounds_to_paisa_before_splitting():
    assert amount_in_words(1.999) == 'Two Taka Only'
    assert amount_in_words(10.005) == 'Ten Taka and One Paisa Only'


@pytest.mark.parametrize('bad', [float('nan'), float('inf'), None, 'abc'])
def test_unusable_amounts_read_as_zero(bad):
    assert amount_in_words(bad) == 'Zero Taka Only'


def test_integer_words_use_lakh_and_crore():
    assert integer_to_words(0) == ''
    assert integer_to_words(101) == 'One Hundred One'
    assert integer_to_words(250000) == 'Two Lakh Fifty Thousand'
    assert integer_to_words(30000000) == 'Three Crore'
