"""
Tests for recommendation text generation and the full heuristic pipeline.

Run with: pytest tests/test_recommendation.py -v
"""

import pytest
from backend.core.race_card import Race, Runner
from backend.services.intent import Intent
from backend.services.ranking import Selections
from backend.services.recommendation import (
    EMPTY_FIELD_TIP,
    GENERIC_REMARK,
    GREETING_REMARK,
    JOCKEY_REMARK,
    NO_CARD_TIP,
    SCHEDULE_LOADING,
    WIN_CONFIDENCE,
    answer_query,
    find_race,
    generate,
)

ILLUSTRATIVE_NAMES = ("Mystic River", "Royal Decree", "Diamond Dust")


@pytest.fixture
def ascot():
    return Race(
        id="r1",
        course="Ascot",
        time="3:30",
        going="Soft",
        runners=(
            Runner(name="Star", odds="2/1"),
            Runner(name="Nova", odds="5/1"),
            Runner(name="Comet", odds="10/1"),
        ),
    )


@pytest.fixture
def card(ascot):
    return [
        ascot,
        Race(id="r2", course="Ascot", time="4:05", runners=(Runner(name="Late", odds="3/1"),)),
    ]


class TestWinTip:

    def test_names_favorite_and_value(self, card):
        answer = answer_query("best bet for the 3:30", card)
        assert answer.startswith("🏁 **Analysis for the 3:30 at Ascot**")
        assert "**Top Pick:** 🐎 **Star** (2/1)" in answer
        assert "Shows a strong 33.3% Win Rate and an A/E of 0.90" in answer
        assert "**Value Play:** ⚠ **Comet** (10/1)" in answer
        assert "A/E 0.86" in answer
        assert answer.endswith(WIN_CONFIDENCE)

    def test_no_time_uses_first_race(self, card):
        assert "**Star**" in answer_query("any tips?", card)

    def test_time_with_pm_suffix_picks_matching_race(self):
        card = [
            Race(id="a", course="Ascot", time="2:00", runners=(Runner(name="Early", odds="2/1"),)),
            Race(id="b", course="Ascot", time="3:30", runners=(Runner(name="Late", odds="3/1"),)),
        ]
        answer = answer_query("best bet for the 3:30pm", card)
        assert answer.startswith("🏁 **Analysis for the 3:30 at Ascot**")
        assert "**Late**" in answer
        assert "Early" not in answer

    def test_value_same_as_favorite_not_repeated(self):
        race = Race(id="r", course="Ludlow", time="2:00", runners=(Runner(name="Solo", odds="Evs"),))
        answer = answer_query("best bet", [race])
        assert "Value Play" not in answer
        assert "**Solo** (Evs)" in answer


class TestPlaceTip:

    def test_safe_place_and_each_way(self, card):
        answer = answer_query("each way tip for the 3:30", card)
        assert "**Safe Place Bet:** 🛡️ **Nova**" in answer
        assert "Currently trading at 5/1" in answer
        assert "**Each-Way Value:** 💎 **Comet** (10/1)" in answer
        assert "A/E Index of 0.86 suggests hidden value." in answer
        assert "The favorite (Star) is strong" in answer

    def test_afternoon_time_matches_twelve_hour_card(self, card):
        answer = answer_query("each way tip for 15:30", card)
        assert "**Nova**" in answer
        assert "Illustrative" not in answer


class TestUnmatchedTime:

    def test_win_tip_is_labelled_illustrative(self, card):
        answer = answer_query("best bet for the 5:15", card)
        assert answer.startswith("_Illustrative only: no race at 5:15")
        assert "Mystic River" in answer

    def test_place_tip_is_labelled_illustrative(self, card):
        answer = answer_query("place bet 5:15", card)
        assert answer.startswith("_Illustrative only")
        assert "Diamond Dust" in answer

    def test_empty_card_with_time(self):
        assert answer_query("best bet for 3:30", []).startswith("_Illustrative only")

    def test_real_card_answers_never_use_stock_names(self, card):
        for query in ("best bet for the 3:30", "each way for 4:05", "tips", "place"):
            answer = answer_query(query, card)
            assert not any(name in answer for name in ILLUSTRATIVE_NAMES)


class TestOtherIntents:

    def test_schedule_lists_times_and_course(self, card):
        answer = answer_query("what's the schedule today?", card)
        assert "official card for Ascot" in answer
        assert "3:30, 4:05" in answer
        assert "The going is Soft." in answer

    def test_schedule_caps_at_five(self):
        races = [Race(id=str(i), course="Kempton", time=f"{i + 1}:00") for i in range(7)]
        answer = answer_query("races", races)
        assert "5:00" in answer
        assert "6:00" not in answer

    def test_schedule_without_post_times(self):
        races = [Race(id="a", course="Ludlow"), Race(id="b", course="Ludlow")]
        answer = answer_query("schedule", races)
        assert "Post times are not published yet." in answer
        assert "post times at:" not in answer

    def test_schedule_without_card(self):
        assert answer_query("schedule", []) == SCHEDULE_LOADING

    def test_jockey(self, card):
        answer = answer_query("which jockey?", card)
        assert answer == JOCKEY_REMARK
        assert "R. Moore" in answer

    def test_greeting(self):
        assert answer_query("hello", []) == GREETING_REMARK

    def test_generic(self):
        assert answer_query("what about the weather", []) == GENERIC_REMARK


class TestGenerate:

    def test_tip_without_card(self):
        assert generate(Intent.WIN_TIP) == NO_CARD_TIP

    def test_empty_field(self):
        race = Race(id="r", course="Ascot", time="3:30")
        assert generate(Intent.WIN_TIP, Selections(), race) == EMPTY_FIELD_TIP
        assert answer_query("best bet for 3:30", [race]) == EMPTY_FIELD_TIP

    def test_unenriched_runners_skip_stats_commentary(self):
        fav, other = Runner(name="A", odds="Evs"), Runner(name="B")
        sel = Selections(ordered=(fav, other), favorite=fav, value=other, place=other)
        answer = generate(Intent.WIN_TIP, sel, Race(id="r"))
        assert "Win Rate" not in answer
        assert "**Value Play:** ⚠ **B** (SP)" in answer
        assert "Dangerous outsider" in answer

    def test_place_without_each_way(self):
        fav = Runner(name="A", odds="Evs")
        sel = Selections(ordered=(fav,), favorite=fav, place=fav)
        answer = generate(Intent.PLACE_TIP, sel, Race(id="r"))
        assert "No strong EW" in answer


class TestFindRace:

    def test_twelve_hour_equivalence(self, card):
        assert find_race(card, "16:05").id == "r2"

    def test_minutes_must_match(self, card):
        assert find_race(card, "3:35") is None

    def test_no_time(self, card):
        assert find_race(card, None) is None
