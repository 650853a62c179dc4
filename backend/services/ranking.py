"""
Runner ranking and bet-candidate selection.

Orders a field by price and picks four candidates that the recommendation
templates talk about.  These are selection *policies* for illustrative tips,
not claims about which runner is most likely to win or pay:

  favorite  shortest price (rank 0)
  value     first runner in rank order with A/E above VALUE_AE_THRESHOLD;
            otherwise rank 2, then rank 1
  place     second favourite (rank 1); a one-runner field falls back to
            the favourite
  each_way  first priced runner longer than 6/1; otherwise rank 3, then
            rank 2

Ties on price keep declared card order (Python's sort is stable).  The input
sequence is never mutated.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from backend.core.odds_math import is_each_way_price, odds_strength
from backend.core.race_card import Runner

# A/E above this marks a runner as outperforming its price
VALUE_AE_THRESHOLD = 1.05


@dataclass(frozen=True)
class Selections:
    ordered: Tuple[Runner, ...] = ()
    favorite: Optional[Runner] = None
    value: Optional[Runner] = None
    place: Optional[Runner] = None
    each_way: Optional[Runner] = None

    @property
    def is_empty(self) -> bool:
        return not self.ordered

    def to_dict(self) -> dict:
        def _name(r: Optional[Runner]) -> Optional[str]:
            return r.name if r is not None else None

        return {
            "ordered": [r.name for r in self.ordered],
            "favorite": _name(self.favorite),
            "value": _name(self.value),
            "place": _name(self.place),
            "each_way": _name(self.each_way),
        }


def _at(ordered: Sequence[Runner], *ranks: int) -> Optional[Runner]:
    """First runner present at any of ``ranks``."""
    for rank in ranks:
        if rank < len(ordered):
            return ordered[rank]
    return None


def _is_value(runner: Runner) -> bool:
    stats = runner.analysis_stats
    return stats is not None and stats.ae_index is not None and stats.ae_index > VALUE_AE_THRESHOLD


def order_by_price(runners: Sequence[Runner]) -> Tuple[Runner, ...]:
    """Favourite first; equal prices keep card order."""
    return tuple(sorted(runners, key=lambda r: odds_strength(r.odds)))


def rank(runners: Sequence[Runner]) -> Selections:
    """
    Rank a field and select favourite / value / place / each-way candidates.

    Args:
        runners: Runners in declared order, normally already enriched so
            that A/E is available for the value pick.

    Returns:
        :class:`Selections`.  An empty field yields all-``None`` selections.
    """
    ordered = order_by_price(runners)
    if not ordered:
        return Selections()

    value = next((r for r in ordered if _is_value(r)), None) or _at(ordered, 2, 1)
    each_way = next((r for r in ordered if is_each_way_price(r.odds)), None) or _at(ordered, 3, 2)

    return Selections(
        ordered=ordered,
        favorite=ordered[0],
        value=value,
        place=_at(ordered, 1, 0),
        each_way=each_way,
    )
