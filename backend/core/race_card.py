"""Racecard data-transfer objects.

:class:`Runner` and :class:`Race` are the canonical shapes that flow from the
provider client (or the synthetic generator) through enrichment, ranking and
text generation.  They are frozen: every stage that "fills in" data returns a
new object via :func:`dataclasses.replace`, so a card can be shared across
concurrent requests without copying.

Absence is first-class: every optional member defaults to ``None`` and no
stage invents placeholder strings such as ``"N/A"``.

Wire format
-----------
Providers and the frontend disagree on key spelling.  :meth:`Runner.from_dict`
and :meth:`Race.from_dict` accept:

* snake_case (``analysis_stats``, ``win_percentage``, ``track_stat`` …)
* camelCase (``analysisStats``, ``winPercentage``, ``trackStat`` …)
* provider aliases (``horse`` → ``name``, ``race_id`` → ``id``,
  ``off_time`` → ``time``, ``runner_details`` → ``runners``)

Unknown keys are kept in ``extra`` and written back by ``to_dict`` so that
pass-through fields (trainer, saddle number, finishing position) survive a
round trip.  ``to_dict`` always emits snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Key aliases
# ---------------------------------------------------------------------------

_RUNNER_KEYS: Dict[str, Tuple[str, ...]] = {
    "name": ("name", "horse", "horse_name"),
    "jockey": ("jockey",),
    "odds": ("odds", "price", "sp"),
    "form": ("form",),
    "track_stat": ("track_stat", "trackStat"),
    "conditions_pref": ("conditions_pref", "conditionsPref"),
    "jockey_stat": ("jockey_stat", "jockeyStat"),
    "weather_pref": ("weather_pref", "weatherPref"),
    "last_runs": ("last_runs", "lastRuns"),
}

_STATS_KEYS: Tuple[str, ...] = ("analysis_stats", "analysisStats")

_RACE_KEYS: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "race_id", "raceId"),
    "course": ("course", "venue"),
    "time": ("time", "off_time", "offTime"),
    "going": ("going",),
    "surface": ("surface",),
    "weather": ("weather",),
}

_RUNNER_LIST_KEYS: Tuple[str, ...] = ("runners", "runner_details")
_RACE_LIST_KEYS: Tuple[str, ...] = ("races", "racecards", "race_cards")


def _first(data: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_float(value: Any) -> Optional[float]:
    """Lenient float parse: accepts ``"+10.00"``, ``"33%"``, ``1.2``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().rstrip("%")
    try:
        return float(text)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# DTOs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisStats:
    """Per-runner headline analytics.

    Attributes:
        win_percentage: Display string such as ``"33.3%"``.
        ae_index: Actual/Expected ratio; > 1 means the runner beats its price.
        profit_loss: Level-stakes profit/loss in points (signed).
    """

    win_percentage: Optional[str] = None
    ae_index: Optional[float] = None
    profit_loss: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisStats":
        win = _first(data, ("win_percentage", "winPercentage"))
        if isinstance(win, (int, float)) and not isinstance(win, bool):
            win = f"{float(win):.1f}%"
        return cls(
            win_percentage=_as_text(win),
            ae_index=_as_float(_first(data, ("ae_index", "aeIndex"))),
            profit_loss=_as_float(_first(data, ("profit_loss", "profitLoss"))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "win_percentage": self.win_percentage,
            "ae_index": None if self.ae_index is None else round(self.ae_index, 2),
            "profit_loss": None if self.profit_loss is None else round(self.profit_loss, 2),
        }


@dataclass(frozen=True)
class Runner:
    """One declared runner.  ``name`` is the identity key."""

    name: str
    jockey: Optional[str] = None
    odds: Optional[str] = None
    form: Optional[str] = None
    analysis_stats: Optional[AnalysisStats] = None
    track_stat: Optional[str] = None
    conditions_pref: Optional[str] = None
    jockey_stat: Optional[str] = None
    weather_pref: Optional[str] = None
    last_runs: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Runner":
        values = {attr: _as_text(_first(data, keys)) for attr, keys in _RUNNER_KEYS.items()}
        stats_raw = _first(data, _STATS_KEYS)
        stats = AnalysisStats.from_dict(stats_raw) if isinstance(stats_raw, dict) else None

        known = {k for keys in _RUNNER_KEYS.values() for k in keys} | set(_STATS_KEYS)
        extra = {k: v for k, v in data.items() if k not in known}

        return cls(
            name=values.pop("name") or "",
            analysis_stats=stats,
            extra=extra,
            **values,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update({
            "name": self.name,
            "jockey": self.jockey,
            "odds": self.odds,
            "form": self.form,
            "analysis_stats": self.analysis_stats.to_dict() if self.analysis_stats else None,
            "track_stat": self.track_stat,
            "conditions_pref": self.conditions_pref,
            "jockey_stat": self.jockey_stat,
            "weather_pref": self.weather_pref,
            "last_runs": self.last_runs,
        })
        return out


@dataclass(frozen=True)
class Race:
    """A race with its runners in declared (card) order.

    ``synthetic`` marks cards produced by :mod:`backend.services.synthetic`
    rather than a provider feed.  It is carried through to API responses so
    simulated data is never presented as real.
    """

    id: str
    course: Optional[str] = None
    time: Optional[str] = None
    going: Optional[str] = None
    surface: Optional[str] = None
    weather: Optional[str] = None
    runners: Tuple[Runner, ...] = ()
    synthetic: bool = False
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Race":
        values = {attr: _as_text(_first(data, keys)) for attr, keys in _RACE_KEYS.items()}
        raw_runners = _first(data, _RUNNER_LIST_KEYS)
        if not isinstance(raw_runners, (list, tuple)):
            raw_runners = []
        runners = tuple(
            Runner.from_dict(r) for r in raw_runners if isinstance(r, dict)
        )

        known = (
            {k for keys in _RACE_KEYS.values() for k in keys}
            | set(_RUNNER_LIST_KEYS)
            | {"synthetic"}
        )
        extra = {k: v for k, v in data.items() if k not in known}

        return cls(
            id=values.pop("id") or "",
            runners=runners,
            synthetic=bool(data.get("synthetic", False)),
            extra=extra,
            **values,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update({
            "id": self.id,
            "course": self.course,
            "time": self.time,
            "going": self.going,
            "surface": self.surface,
            "weather": self.weather,
            "synthetic": self.synthetic,
            "runners": [r.to_dict() for r in self.runners],
        })
        return out


def parse_races(payload: Any) -> List[Race]:
    """Extract races from a provider payload or a client-supplied context.

    Accepts a bare list of race dicts, or a dict carrying the list under
    ``races`` / ``racecards`` / ``race_cards``.  A single race dict (one
    with a runner list) is wrapped.  Anything else yields an empty list.
    """
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        items = _first(payload, _RACE_LIST_KEYS)
        if items is None and _first(payload, _RUNNER_LIST_KEYS) is not None:
            items = [payload]
    else:
        items = None

    if not isinstance(items, list):
        return []
    return [Race.from_dict(item) for item in items if isinstance(item, dict)]
