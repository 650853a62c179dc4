"""
Question answering for POST /api/brain/analyse.

Two paths:

  * OPENAI_API_KEY set   → chat-completion call with the analytics system
                           prompt and the caller's context/data (truncated).
  * no key               → heuristic engine: racing questions go through
                           recommendation.answer_query; football and other
                           sports get fixed remarks.

Heuristic answers end with the " 🤖" marker so the frontend can tell them
apart from model output.
"""

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import requests

from backend.core.race_card import parse_races
from backend.services.recommendation import answer_query

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_MS = 30000
CONTEXT_CHAR_LIMIT = 6000
HEURISTIC_MARKER = " 🤖"

RACING_SPORTS = frozenset({"horse-racing", "racing", "horse_racing"})


class BrainError(Exception):
    """Language-model call failed."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


@dataclass(frozen=True)
class BrainAnswer:
    answer: str
    source: str  # "heuristic" | "openai"


# ---------------------------------------------------------------------------
# Heuristic engine
# ---------------------------------------------------------------------------

def _football_answer(query: str) -> str:
    q = query.lower()
    if "score" in q or "winning" in q:
        return (
            "The matches are tight today. Home teams are dominating possession across "
            "the board. Check the live scores above for real-time updates."
        )
    if "predict" in q or "bet" in q:
        return (
            "My xG (Expected Goals) model suggests a high-scoring second half. "
            "Over 2.5 goals looks like the value play here."
        )
    return (
        "I'm tracking player movements and tactical shifts. "
        "Ask me about match predictions or live scores."
    )


def heuristic_answer(sport: Optional[str], query: Optional[str], data: Any = None,
                     context: Any = None) -> str:
    """Answer without a language model.  Always returns text."""
    sport_key = (sport or "").lower()
    if sport_key in RACING_SPORTS:
        races = parse_races(data) or parse_races(context)
        answer = answer_query(query, races)
    elif sport_key == "football":
        answer = _football_answer(query or "")
    else:
        answer = (
            f"I'm analyzing the live data for {sport or 'this sport'}. "
            "Ask me for a schedule or a performance prediction."
        )
    return answer + HEURISTIC_MARKER


# ---------------------------------------------------------------------------
# Language-model path
# ---------------------------------------------------------------------------

def _system_prompt(now: datetime) -> str:
    return " ".join([
        "You are GRACE-X Sport™ Analytics Engine.",
        "No personality. No jokes. No fluff.",
        "Use the provided context and current request to reason. "
        "Do not mention training data cutoffs or limitations.",
        "If context is insufficient, state clearly what additional data is needed instead of refusing.",
        f"Current date/time: {now.isoformat()}.",
        "Output must be concise and actionable.",
        "Always include a short risk note and remind that outcomes are uncertain.",
        "If asked for gambling advice, provide analytics only and include a responsible gambling reminder.",
    ])


def _compact(value: Any) -> str:
    return json.dumps(value if value is not None else {}, separators=(",", ":"), default=str)[:CONTEXT_CHAR_LIMIT]


def build_messages(sport: Optional[str], query: Optional[str], context: Any, data: Any,
                   now: Optional[datetime] = None) -> list:
    now = now or datetime.now(timezone.utc)
    user = "\n".join([
        f"Sport: {sport or 'unknown'}",
        f"Query: {query or ''}",
        f"Context: {_compact(context)}",
        f"Data: {_compact(data)}",
    ])
    return [
        {"role": "system", "content": _system_prompt(now)},
        {"role": "user", "content": user},
    ]


def openai_answer(api_key: str, sport: Optional[str], query: Optional[str],
                  context: Any, data: Any) -> str:
    model = os.getenv("OPENAI_MODEL", DEFAULT_MODEL)
    timeout_s = int(os.getenv("OPENAI_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS))) / 1000.0

    body = {
        "model": model,
        "messages": build_messages(sport, query, context, data),
        "temperature": 0.2,
    }
    try:
        response = requests.post(
            OPENAI_URL,
            json=body,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout_s,
        )
    except requests.exceptions.RequestException as e:
        raise BrainError(f"OpenAI request failed: {e}") from e

    try:
        payload = response.json()
    except ValueError:
        payload = {"raw": response.text[:500]}

    if not response.ok:
        raise BrainError("OpenAI API error", details=payload)

    choices = payload.get("choices") or [{}]
    return (choices[0].get("message") or {}).get("content") or ""


def analyse(sport: Optional[str], query: Optional[str], context: Any = None,
            data: Any = None) -> BrainAnswer:
    """Answer a sports question with the model when configured, else heuristically."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        logger.warning("OPENAI_API_KEY missing. Using heuristic engine.")
        return BrainAnswer(heuristic_answer(sport, query, data, context), "heuristic")

    return BrainAnswer(openai_answer(api_key, sport, query, context, data), "openai")
