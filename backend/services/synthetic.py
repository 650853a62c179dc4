"""
Synthetic racing data for when no provider feed is configured.

Everything produced here is marked as simulated (``Race.synthetic = True``,
``"sim-"`` / ``"res-"`` ids) and is seeded from its inputs only, so the same
date or query always yields the same card.  Each call builds its own
``np.random.default_rng`` seeded from a SHA-256 digest of its inputs;
nothing reads the clock or a global RNG.

Public API:
  placeholder_card(card_date, course=None)  → List[Race]
  past_results(card_date)                   → List[Race]
  fallback_race(race_id)                    → Race
  search_entities(query, entity_type)       → List[Dict]
  entity_analysis(entity_type, entity_id)   → Dict
"""

import hashlib
from typing import Dict, List, Optional, Sequence

import numpy as np

from backend.core.race_card import Race, Runner
from backend.services.enrichment import identity_hash

COURSES = ("Cheltenham", "Ascot", "Kempton", "Newbury", "Sandown", "Doncaster")
RESULT_COURSES = ("Kempton", "Ludlow", "Southwell")

HORSE_NAMES = (
    "Morning Glory", "Royal Oak", "Desert Rose", "Silver Comet", "Night Raider",
    "Golden Spur", "Storm Chaser", "Quiet Harbour", "Red Mirage", "Iron Duke",
    "Lucky Clover", "Northern Star", "Copper Kettle", "Wild Atlantic", "Brave Heart",
    "Midnight Oil", "Sea Breeze", "Highland Fling", "Paper Moon", "Velvet Rope",
)
JOCKEYS = ("R. Moore", "L. Dettori", "O. Murphy", "W. Buick", "H. Doyle", "T. Marquand")
PRICE_LADDER = ("Evs", "6/4", "2/1", "5/2", "3/1", "9/2", "6/1", "8/1", "12/1", "20/1", "33/1")
GOINGS = ("Good", "Good to Soft", "Soft", "Good to Firm", "Heavy")
WEATHER = ("Fine", "Overcast", "Showers", "Sunny")

CARD_RACES = 6
RESULT_RACES = 5
FIRST_OFF_HOUR = 13


def seed_for(*parts: str) -> int:
    """Stable 64-bit seed from a SHA-256 digest of ``parts`` (same in every process)."""
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def _rng(*parts: str) -> np.random.Generator:
    return np.random.default_rng(seed_for(*parts))


def _pick(rng: np.random.Generator, options: Sequence[str]) -> str:
    return options[int(rng.integers(len(options)))]


def _off_time(slot: int, minute_offset: int = 30) -> str:
    total = FIRST_OFF_HOUR * 60 + minute_offset + slot * 35
    return f"{total // 60}:{total % 60:02d}"


def placeholder_card(card_date: str, course: Optional[str] = None) -> List[Race]:
    """A simulated racecard for ``card_date`` (YYYY-MM-DD)."""
    rng = _rng("card", card_date, course or "")
    venue = course or _pick(rng, COURSES)
    going = _pick(rng, GOINGS)
    weather = _pick(rng, WEATHER)

    races = []
    for slot in range(CARD_RACES):
        field_size = int(rng.integers(6, 11))
        names = [HORSE_NAMES[int(i)] for i in rng.choice(len(HORSE_NAMES), size=field_size, replace=False)]
        n_prices = min(field_size, len(PRICE_LADDER))
        prices = sorted(int(i) for i in rng.choice(len(PRICE_LADDER), size=n_prices, replace=False))
        runners = tuple(
            Runner(
                name=name,
                jockey=_pick(rng, JOCKEYS),
                odds=PRICE_LADDER[prices[i % len(prices)]],
                form="-".join(str(int(d)) for d in rng.integers(1, 10, size=4)),
            )
            for i, name in enumerate(names)
        )
        # card order is not price order
        runners = tuple(runners[int(i)] for i in rng.permutation(len(runners)))
        races.append(Race(
            id=f"sim-{card_date}-{slot + 1}",
            course=venue,
            time=_off_time(slot),
            going=going,
            surface="Turf",
            weather=weather,
            runners=runners,
            synthetic=True,
        ))
    return races


def past_results(card_date: str) -> List[Race]:
    """Simulated finished races; runners listed in finishing order."""
    rng = _rng("results", card_date)
    races = []
    for i in range(RESULT_RACES):
        field_size = 6 + int(rng.integers(0, 4))
        runners = tuple(
            Runner(
                name=f"Runner {chr(65 + j)}",
                jockey="J. Doe",
                odds=f"{j + 2}/1",
                extra={"position": j + 1},
            )
            for j in range(field_size)
        )
        races.append(Race(
            id=f"res-{i}",
            course=RESULT_COURSES[i % len(RESULT_COURSES)],
            time=f"{FIRST_OFF_HOUR + i}:00",
            runners=runners,
            synthetic=True,
            extra={"status": "Finished"},
        ))
    return races


def fallback_race(race_id: str) -> Race:
    """Stand-in card served when the provider fails on a race detail request."""
    return Race(
        id=race_id,
        course="Fallback Course",
        runners=(
            Runner(name="System Restore", jockey="J. Smith", form="111-1", odds="Evs"),
            Runner(name="Backup Plan", jockey="A. Jones", form="22-2", odds="5/1"),
        ),
        synthetic=True,
    )


def search_entities(query: Optional[str], entity_type: str = "all") -> List[Dict]:
    """Name suggestions for horses, jockeys and trainers matching ``query``."""
    q = (query or "").strip().lower()
    if len(q) < 2:
        return []
    stem = q[0].upper() + q[1:]

    results = []
    if entity_type in ("all", "horse"):
        results.append({"type": "horse", "name": f"{stem} Star", "id": "h1",
                        "description": "Active - 5yo Bay Gelding"})
        results.append({"type": "horse", "name": f"Royal {stem}", "id": "h2",
                        "description": "Active - 3yo Chestnut Colt"})
    if entity_type in ("all", "jockey"):
        results.append({"type": "jockey", "name": f"T. {stem}son", "id": "j1",
                        "description": "Professional Jockey"})
    if entity_type in ("all", "trainer"):
        results.append({"type": "trainer", "name": f"P. {stem}er", "id": "t1",
                        "description": "Licensed Trainer"})
    return results


def entity_analysis(entity_type: str, entity_id: str) -> Dict:
    """Headline stats for a horse, jockey or trainer, seeded by identity."""
    h = identity_hash(f"{entity_type}:{entity_id}", 0)
    runs = 5 + h % 50
    wins = min(runs, 1 + h % 10)
    recent_form = [(h >> shift) % 5 for shift in range(0, 12, 2)]  # 0 = unplaced

    return {
        "id": entity_id,
        "type": entity_type,
        "synthetic": True,
        "stats": {
            "win_percentage": f"{10 + (h % 200) / 10:.1f}%",
            "ae_index": round(0.75 + (h % 50) / 100, 2),
            "profit_loss": round((h % 400) / 10 - 15, 2),
            "runs": runs,
            "wins": wins,
        },
        "recent_form": recent_form,
    }
