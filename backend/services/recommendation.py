"""
Natural-language racing recommendations from ranked selections.

Public API:
  generate(intent, selections, race, races=..., race_time=...)  → str
  answer_query(query, races)                                    → str
  find_race(races, race_time)                                   → Optional[Race]

``generate`` is a pure template renderer; ``answer_query`` runs the whole
heuristic pipeline (classify → match race → enrich → rank → generate).

When a question names a race time that is not on the supplied card, the
answer uses stock illustrative names and says so in its first line.  Those
names never appear in answers built from a real card.
"""

import logging
from typing import Optional, Sequence

from backend.core.race_card import Race, Runner
from backend.services.enrichment import enrich
from backend.services.intent import Classification, Intent, classify
from backend.services.ranking import Selections, rank

logger = logging.getLogger(__name__)

SCHEDULE_LIMIT = 5

# ---------------------------------------------------------------------------
# Fixed remarks
# ---------------------------------------------------------------------------

SCHEDULE_LOADING = (
    "I'm checking the live feed... The schedule is loading now. "
    "We usually see action starting around 1:30 PM."
)
WIN_CONFIDENCE = "*Confidence: High. Track conditions suit the favorite.*"
PLACE_STRATEGY = (
    "*Strategy: The favorite ({favorite}) is strong, but short odds. "
    "Look to the place markets for value.*"
)
JOCKEY_REMARK = (
    "Top jockeys are booking strong rides today. I'm tracking significant money "
    "for mounts ridden by R. Moore and L. Dettori in the feature races."
)
GREETING_REMARK = (
    "I'm fully online and processing real-time data from the course. "
    "Ask me for a race schedule, a prediction, or specific horse form."
)
GENERIC_REMARK = (
    "I'm monitoring the live feed. I can give you the race schedule, "
    "analyze the next winner, or check jockey form. What do you need?"
)
NO_CARD_TIP = (
    "I'm analyzing the form now. The favorite in the next race looks solid, "
    "but watch the market for late drifts."
)
EMPTY_FIELD_TIP = (
    "My models are processing the live odds now. "
    "Look for market movers in the next 5 minutes."
)
ILLUSTRATIVE_LABEL = (
    "_Illustrative only: no race at {time} is on the loaded card, "
    "so the names and prices below are simulated._"
)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def _price(runner: Runner) -> str:
    return runner.odds or "SP"


def _ae_text(runner: Optional[Runner]) -> Optional[str]:
    if runner is None or runner.analysis_stats is None or runner.analysis_stats.ae_index is None:
        return None
    return f"{runner.analysis_stats.ae_index:.2f}"


def _header(race: Race) -> str:
    return f"🏁 **Analysis for the {race.time or 'next race'} at {race.course or 'the track'}**\n\n"


def _same_time(a: Optional[str], b: Optional[str]) -> bool:
    """Compare H:MM strings, treating 3:30 and 15:30 as the same off time."""
    if not a or not b:
        return False
    try:
        ha, ma = (int(p) for p in a.strip().split(":", 1))
        hb, mb = (int(p) for p in b.strip().split(":", 1))
    except ValueError:
        return a.strip() == b.strip()
    return ma == mb and ha % 12 == hb % 12


def find_race(races: Sequence[Race], race_time: Optional[str]) -> Optional[Race]:
    """First race whose off time matches ``race_time``."""
    if not race_time:
        return None
    return next((r for r in races if _same_time(r.time, race_time)), None)


# ---------------------------------------------------------------------------
# Per-intent renderers
# ---------------------------------------------------------------------------

def _schedule(races: Sequence[Race]) -> str:
    if not races:
        return SCHEDULE_LOADING
    venue = races[0].course or "the track"
    times = ", ".join(r.time for r in races[:SCHEDULE_LIMIT] if r.time)
    going = races[0].going
    going_text = f"The going is {going}." if going else "The going reports are good."
    if not times:
        return f"I've pulled the official card for {venue} today. Post times are not published yet. {going_text}"
    return f"I've pulled the official card for {venue} today. We have post times at: {times}. {going_text}"


def _win_tip(race: Race, sel: Selections) -> str:
    fav = sel.favorite
    parts = [_header(race), f"**Top Pick:** 🐎 **{fav.name}** ({_price(fav)})\n", "The statistical favorite. "]

    stats = fav.analysis_stats
    if stats is not None and stats.win_percentage and stats.ae_index is not None:
        parts.append(
            f"Shows a strong {stats.win_percentage} Win Rate and an A/E of "
            f"{_ae_text(fav)}, indicating solid form. "
        )

    value = sel.value
    if value is not None and value.name != fav.name:
        parts.append(f"\n\n**Value Play:** ⚠ **{value.name}** ({_price(value)})\n")
        ae = _ae_text(value)
        if ae is not None:
            parts.append(f"Overpriced based on my model (A/E {ae}). ")
        else:
            parts.append("Dangerous outsider with hidden form. ")

    parts.append(f"\n\n{WIN_CONFIDENCE}")
    return "".join(parts)


def _place_tip(race: Race, sel: Selections) -> str:
    place = sel.place or sel.favorite
    ew = sel.each_way
    parts = [
        _header(race),
        f"**Safe Place Bet:** 🛡️ **{place.name}**\n",
        f"Solid consistency. Currently trading at {_price(place)}.\n\n",
    ]

    if ew is not None:
        parts.append(f"**Each-Way Value:** 💎 **{ew.name}** ({_price(ew)}) \n")
    else:
        parts.append("**Each-Way Value:** 💎 **No strong EW** (-) \n")
    parts.append("Looks overpriced for a podium finish. ")
    ae = _ae_text(ew)
    if ae is not None:
        parts.append(f"A/E Index of {ae} suggests hidden value.")

    parts.append("\n\n" + PLACE_STRATEGY.format(favorite=sel.favorite.name))
    return "".join(parts)


def illustrative_answer(intent: Intent, race_time: str) -> str:
    """Stock answer for a requested time that is not on the card."""
    label = ILLUSTRATIVE_LABEL.format(time=race_time)
    if intent == Intent.PLACE_TIP:
        body = (
            f"🏁 **Place Prediction for {race_time}**\n\n"
            "**Safe Place:** 🛡️ **Royal Decree** (Evens to place)\n"
            "**Each-Way Shout:** 💎 **Diamond Dust** (12/1)\n\n"
            "Diamond Dust has hit the frame in 3 of last 4 starts."
        )
    else:
        body = (
            f"🏁 **Prediction for {race_time}**\n\n"
            "I've analyzed the field. \n"
            "**Winner:** 🐎 **Mystic River** (3/1)\n"
            "**Danger:** ⚠ **Royal Decree** (7/1)\n\n"
            "Data suggests Mystic River has the best speed rating for this ground."
        )
    return f"{label}\n\n{body}"


def generate(
    intent: Intent,
    selections: Optional[Selections] = None,
    race: Optional[Race] = None,
    *,
    races: Sequence[Race] = (),
    race_time: Optional[str] = None,
) -> str:
    """
    Render a recommendation for ``intent``.

    Args:
        intent: Classified query intent.
        selections: Output of :func:`~backend.services.ranking.rank` for
            ``race``.  Only used by the tip intents.
        race: The race the tip is about.  ``None`` with ``race_time`` set
            means the requested race is not on the card.
        races: Full card in context, used by the schedule intent.
        race_time: Time token extracted from the query, if any.

    Returns:
        A single formatted answer string.  Never raises on missing data.
    """
    if intent == Intent.SCHEDULE:
        return _schedule(races)

    if intent in (Intent.WIN_TIP, Intent.PLACE_TIP):
        if race is None:
            if race_time:
                return illustrative_answer(intent, race_time)
            return NO_CARD_TIP
        if selections is None or selections.favorite is None:
            return EMPTY_FIELD_TIP
        if intent == Intent.PLACE_TIP:
            return _place_tip(race, selections)
        return _win_tip(race, selections)

    if intent == Intent.JOCKEY_INFO:
        return JOCKEY_REMARK
    if intent == Intent.GREETING:
        return GREETING_REMARK
    return GENERIC_REMARK


def answer_query(query: Optional[str], races: Sequence[Race]) -> str:
    """Run the full heuristic pipeline for one racing question."""
    classification: Classification = classify(query)
    races = list(races)

    race = None
    selections = None
    if classification.is_tip:
        if classification.race_time:
            race = find_race(races, classification.race_time)
            if race is None:
                logger.info(
                    "No race at %s on a card of %d; answering with illustrative runners",
                    classification.race_time, len(races),
                )
        elif races:
            race = races[0]

        if race is not None:
            race = enrich([race])[0]
            selections = rank(race.runners)

    return generate(
        classification.intent,
        selections,
        race,
        races=races,
        race_time=classification.race_time,
    )
