"""Racecard odds normalisation: the single source of truth for price parsing.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never re-parse odds strings locally in services.

Bookmaker feeds deliver prices in several notations:

* fractional (UK/IRE):  ``"5/2"``, ``"100/30"``
* bare numbers:         ``"3.5"``
* named prices:         ``"Evs"`` / ``"Evens"`` (1/1), ``"SP"`` (starting
  price, i.e. no price yet)

All of them collapse into one comparable **strength** value: the odds-against
ratio ``N/D``.  Lower strength = shorter price = stronger favourite.

Design decisions
----------------
* Parsing never raises.  A price we cannot read is treated as the longest
  price on the card (:data:`UNPRICED_STRENGTH`) so unpriced runners sort last
  instead of failing the request.
* A bare number is taken as the strength directly.  Feeds that send true
  decimal odds (stake included) are therefore over-rated by one point
  relative to fractional prices on the same card.

Run tests with::

    pytest tests/test_odds_math.py -v
"""

from __future__ import annotations

from typing import Final, Optional

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: Strength assigned to absent or unreadable prices.  Equivalent to 100/1,
#: longer than any realistic racecard price, so such runners rank last.
UNPRICED_STRENGTH: Final[float] = 100.0

#: Named prices meaning even money (1/1).
_EVENS_ALIASES: Final[frozenset] = frozenset({"evs", "evens", "even", "evn"})

#: Fractional price above which a runner counts as an each-way price (6/1).
EACH_WAY_MIN_STRENGTH: Final[float] = 6.0


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_strength(odds: Optional[str]) -> Optional[float]:
    """Return the odds-against ratio for ``odds`` or ``None`` if unreadable."""
    if odds is None:
        return None
    text = str(odds).strip().lower()
    if not text:
        return None
    if text in _EVENS_ALIASES:
        return 1.0

    try:
        if "/" in text:
            num, _, den = text.partition("/")
            numerator = float(num)
            denominator = float(den)
            if denominator <= 0:
                return None
            value = numerator / denominator
        else:
            value = float(text)
    except ValueError:
        return None

    # float() accepts "nan" and "inf"; neither is a price
    if value != value or value < 0 or value == float("inf"):
        return None
    return value


def odds_strength(odds: Optional[str]) -> float:
    """Normalise a racecard price into a comparable strength value.

    Examples::

        odds_strength("2/1")   → 2.0
        odds_strength("11/4")  → 2.75
        odds_strength("Evs")   → 1.0
        odds_strength("4.5")   → 4.5
        odds_strength("SP")    → 100.0   (unpriced)
        odds_strength(None)    → 100.0   (unpriced)

    Args:
        odds: Raw price string from the feed, or ``None``.

    Returns:
        Non-negative strength.  Lower = stronger favourite.
    """
    value = _parse_strength(odds)
    return UNPRICED_STRENGTH if value is None else value


def is_priced(odds: Optional[str]) -> bool:
    """True when ``odds`` is a readable price (not absent, not ``SP``)."""
    return _parse_strength(odds) is not None


def implied_win_pct(odds: Optional[str]) -> Optional[float]:
    """Implied win percentage from a racecard price.

    Inverts the odds-against ratio: a price of ``N/D`` implies
    ``100 / (N/D + 1)`` percent.  No overround is removed; a full book of
    these will sum to more than 100.

    Examples::

        implied_win_pct("2/1")  → 33.33
        implied_win_pct("Evs")  → 50.0
        implied_win_pct("SP")   → None

    Returns:
        Percentage in ``(0, 100]`` or ``None`` when the price is unreadable.
    """
    value = _parse_strength(odds)
    if value is None:
        return None
    return 100.0 / (value + 1.0)


def is_each_way_price(odds: Optional[str]) -> bool:
    """True for a readable price longer than 6/1."""
    value = _parse_strength(odds)
    return value is not None and value > EACH_WAY_MIN_STRENGTH
