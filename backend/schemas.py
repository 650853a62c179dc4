"""
Pydantic request/response schemas for the GRACE-X Sport API.

Racecards themselves are returned as plain dicts from ``Race.to_dict`` so
that provider pass-through fields survive; only the request bodies and the
small fixed-shape responses are modelled here.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Brain
# ---------------------------------------------------------------------------

class BrainRequest(BaseModel):
    """
    Payload for POST /api/brain/analyse.

    ``data`` normally carries the racecard the user is looking at, either as
    ``{"races": [...]}`` or a bare list of races.  ``context`` is free-form
    and only forwarded to the language model (and used as a fallback card
    source by the heuristic engine).
    """

    sport: Optional[str] = Field(None, max_length=40, description='e.g. "horse-racing", "football"')
    query: str = Field("", max_length=2000)
    context: Optional[Any] = None
    data: Optional[Any] = None

    @field_validator("query")
    @classmethod
    def strip_query(cls, v: str) -> str:
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "sport": "horse-racing",
                "query": "best bet for the 3:30",
                "data": {
                    "races": [
                        {
                            "id": "r1",
                            "course": "Ascot",
                            "time": "3:30",
                            "runners": [
                                {"name": "Star", "odds": "2/1"},
                                {"name": "Nova", "odds": "5/1"},
                            ],
                        }
                    ]
                },
            }
        }
    }


class BrainResponse(BaseModel):
    ok: bool = True
    answer: str
    result: str
    source: Literal["heuristic", "openai"]


# ---------------------------------------------------------------------------
# Racing
# ---------------------------------------------------------------------------

class SearchHit(BaseModel):
    type: Literal["horse", "jockey", "trainer"]
    name: str
    id: str
    description: str


class SearchResponse(BaseModel):
    results: List[SearchHit]
    synthetic: bool = True


class EntityStats(BaseModel):
    win_percentage: str
    ae_index: float
    profit_loss: float
    runs: int
    wins: int


class EntityAnalysisResponse(BaseModel):
    id: str
    type: str
    synthetic: bool = True
    stats: EntityStats
    recent_form: List[int] = Field(..., description="Last six finishes, 0 = unplaced")


class RacecardsResponse(BaseModel):
    races: List[Dict[str, Any]]
    synthetic: bool = False
    source: Literal["provider", "synthetic", "none"]


class ResultsResponse(BaseModel):
    date: str
    races: List[Dict[str, Any]]
    synthetic: bool = True


class HealthResponse(BaseModel):
    ok: bool
    time: str
    auth_enabled: bool
    racing_configured: bool
    synthetic_racing: bool
    openai_configured: bool
