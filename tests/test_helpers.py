from datetime import date

import pytest

from helpers import parse_amount, parse_count, parse_date, round_money


class TestRoundMoney:
    @pytest.mark.parametrize('value,expected', [
        (2.675, 2.68),
        (0.125, 0.13),
        (1.005, 1.01),
        (12.0, 12.0),
        (333.3333333333333, 333.33),
        (0.004, 0.0),
    ])
    def test_half_up(self, value, expected):
        assert round_money(value) == expected


class TestParseDate:
    def test_iso_date(self):
        assert parse_date('2024-03-01') == date(2024, 3, 1)

    def test_surrounding_whitespace(self):
        assert parse_date(' 2024-03-01 ') == date(2024, 3, 1)

    @pytest.mark.parametrize('value', ['2024-02-30', '01.03.2024', 'not-a-date', '', None])
    def test_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_date(value)


class TestParseAmount:
    def test_numbers_pass_through(self):
        assert parse_amount(1200) == 1200.0
        assert parse_amount(0.12) == 0.12

    def test_comma_decimal(self):
        assert parse_amount('12,5') == 12.5

    def test_missing(self):
        assert parse_amount(None) is None
        assert parse_amount('') is None

    @pytest.mark.parametrize('value', ['abc', 'inf', 'nan', True, [1]])
    def test_rejects_non_numbers(self, value):
        with pytest.raises((ValueError, TypeError)):
            parse_amount(value)


class TestParseCount:
    def test_whole_numbers(self):
        assert parse_count('12') == 12
        assert parse_count(36.0) == 36

    def test_missing(self):
        assert parse_count(None) is None

    def test_rejects_fractions(self):
        with pytest.raises(ValueError):
            parse_count(12.5)
