"""
Keyword intent classifier for free-text racing questions.

Queries are lower-cased and tested against INTENT_RULES in order; the first
rule with a matching keyword wins.  Rule order encodes precedence:

  1. schedule     schedule, time, race card, races
  2. place-tip    place, podium, each way, ew
  3. win-tip      tip, predict, bet, win, best, or an explicit H:MM time
  4. jockey-info  jockey, trainer, rider
  5. greeting     hello, hi, hey, stupid, smart
  6. generic      (nothing matched)

Place keywords are checked before win keywords so that "each way tip" is a
place question.  Keywords match at the start of a word ("tips" hits "tip",
"new" does not hit "ew"); keywords of two letters or fewer must match a
whole word.

Any H:MM / HH:MM token is also returned as ``race_time`` so the caller can
pick the race the question is about.  Suffixes such as "pm" or "h" do not
stop the match ("3:30pm" gives "3:30").
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Pattern, Tuple


class Intent(str, Enum):
    SCHEDULE = "schedule"
    WIN_TIP = "win-tip"
    PLACE_TIP = "place-tip"
    JOCKEY_INFO = "jockey-info"
    GREETING = "greeting"
    GENERIC = "generic"


TIME_TOKEN = re.compile(r"(?<!\d)(\d{1,2}:\d{2})(?!\d)")

SCHEDULE_KEYWORDS = ("schedule", "time", "race card", "races")
PLACE_KEYWORDS = ("place", "podium", "each way", "ew")
WIN_KEYWORDS = ("tip", "predict", "bet", "win", "best")
JOCKEY_KEYWORDS = ("jockey", "trainer", "rider")
GREETING_KEYWORDS = ("hello", "hi", "hey", "stupid", "smart")


def _keyword_pattern(keywords: Tuple[str, ...]) -> Pattern:
    parts = []
    for kw in keywords:
        body = re.escape(kw)
        parts.append(rf"\b{body}\b" if len(kw) <= 2 else rf"\b{body}")
    return re.compile("|".join(parts))


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    pattern: Pattern
    matches_time: bool = False

    def matches(self, text: str) -> bool:
        if self.pattern.search(text):
            return True
        return self.matches_time and TIME_TOKEN.search(text) is not None


INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule(Intent.SCHEDULE, _keyword_pattern(SCHEDULE_KEYWORDS)),
    IntentRule(Intent.PLACE_TIP, _keyword_pattern(PLACE_KEYWORDS)),
    IntentRule(Intent.WIN_TIP, _keyword_pattern(WIN_KEYWORDS), matches_time=True),
    IntentRule(Intent.JOCKEY_INFO, _keyword_pattern(JOCKEY_KEYWORDS)),
    IntentRule(Intent.GREETING, _keyword_pattern(GREETING_KEYWORDS)),
)


@dataclass(frozen=True)
class Classification:
    intent: Intent
    race_time: Optional[str] = None

    @property
    def is_tip(self) -> bool:
        return self.intent in (Intent.WIN_TIP, Intent.PLACE_TIP)


def extract_time(query: Optional[str]) -> Optional[str]:
    """First H:MM or HH:MM token in the query, as written."""
    match = TIME_TOKEN.search(query or "")
    return match.group(1) if match else None


def classify(query: Optional[str]) -> Classification:
    """Map a free-text query to an :class:`Intent` plus any requested race time."""
    text = (query or "").lower()
    race_time = extract_time(text)
    for rule in INTENT_RULES:
        if rule.matches(text):
            return Classification(rule.intent, race_time)
    return Classification(Intent.GENERIC, race_time)
