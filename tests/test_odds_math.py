"""
Tests for racecard odds normalisation.

Run with: pytest tests/test_odds_math.py -v
"""

import pytest
from backend.core.odds_math import (
    UNPRICED_STRENGTH,
    implied_win_pct,
    is_each_way_price,
    is_priced,
    odds_strength,
)


class TestOddsStrength:
    """Fractional, decimal and named prices collapse to one scale"""

    def test_fractional(self):
        assert odds_strength("2/1") == pytest.approx(2.0)
        assert odds_strength("11/4") == pytest.approx(2.75)
        assert odds_strength("4/6") == pytest.approx(0.6667, abs=1e-4)

    def test_fraction_with_spaces(self):
        assert odds_strength(" 5 / 2 ") == pytest.approx(2.5)

    def test_decimal_taken_directly(self):
        assert odds_strength("4.5") == pytest.approx(4.5)

    def test_evens_aliases(self):
        for text in ("Evs", "EVENS", "evens"):
            assert odds_strength(text) == pytest.approx(1.0)

    def test_starting_price_is_unpriced(self):
        assert odds_strength("SP") == UNPRICED_STRENGTH

    @pytest.mark.parametrize("bad", [None, "", "  ", "abc", "5/0", "5/x", "nan", "-3", "inf"])
    def test_unreadable_degrades_to_sentinel(self, bad):
        """Never raises; garbage sorts last."""
        assert odds_strength(bad) == UNPRICED_STRENGTH

    def test_shorter_price_is_stronger(self):
        assert odds_strength("6/4") < odds_strength("2/1") < odds_strength("SP")


class TestImpliedWinPct:

    def test_two_to_one(self):
        assert implied_win_pct("2/1") == pytest.approx(33.333, abs=0.01)

    def test_evens_is_fifty(self):
        assert implied_win_pct("Evs") == pytest.approx(50.0)

    def test_unpriced_returns_none(self):
        assert implied_win_pct("SP") is None
        assert implied_win_pct(None) is None


class TestPricePredicates:

    def test_is_priced(self):
        assert is_priced("9/2")
        assert not is_priced("SP")
        assert not is_priced(None)

    def test_each_way_threshold_is_strictly_above_six(self):
        assert not is_each_way_price("6/1")
        assert is_each_way_price("13/2")
        assert is_each_way_price("10/1")

    def test_unpriced_never_each_way(self):
        """The sentinel is long but must not count as an each-way price."""
        assert not is_each_way_price("SP")
        assert not is_each_way_price(None)
