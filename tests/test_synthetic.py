"""
Tests for the synthetic racing data generator.

Run with: pytest tests/test_synthetic.py -v
"""

from backend.core.odds_math import is_priced
from backend.services.synthetic import (
    entity_analysis,
    fallback_race,
    past_results,
    placeholder_card,
    search_entities,
    seed_for,
)


class TestSeed:

    def test_stable_value(self):
        """Same parts, same seed; independent of PYTHONHASHSEED."""
        assert seed_for("card", "2026-03-10", "") == seed_for("card", "2026-03-10", "")
        assert 0 <= seed_for("x") < 2 ** 64

    def test_parts_change_seed(self):
        assert seed_for("card", "2026-03-10") != seed_for("results", "2026-03-10")


class TestPlaceholderCard:

    def test_values_are_plain_python_types(self):
        """numpy scalars must not leak into the JSON-bound records."""
        for race in placeholder_card("2026-03-10"):
            for runner in race.runners:
                assert type(runner.name) is str
                assert type(runner.odds) is str
                assert type(runner.jockey) is str

    def test_same_date_same_card(self):
        assert placeholder_card("2026-03-10") == placeholder_card("2026-03-10")

    def test_different_dates_differ(self):
        assert placeholder_card("2026-03-10") != placeholder_card("2026-03-11")

    def test_everything_marked_synthetic(self):
        races = placeholder_card("2026-03-10")
        assert len(races) == 6
        assert all(r.synthetic for r in races)
        assert all(r.id.startswith("sim-2026-03-10-") for r in races)

    def test_fields_are_priced(self):
        for race in placeholder_card("2026-03-10"):
            assert 6 <= len(race.runners) <= 10
            assert all(is_priced(r.odds) for r in race.runners)
            assert len({r.name for r in race.runners}) == len(race.runners)

    def test_off_times(self):
        times = [r.time for r in placeholder_card("2026-03-10")]
        assert times[:3] == ["13:30", "14:05", "14:40"]

    def test_course_override(self):
        assert {r.course for r in placeholder_card("2026-03-10", course="Ludlow")} == {"Ludlow"}

    def test_stock_answer_names_never_generated(self):
        names = {r.name for race in placeholder_card("2026-03-10") for r in race.runners}
        assert not names & {"Mystic River", "Royal Decree", "Diamond Dust"}


class TestPastResults:

    def test_shape(self):
        races = past_results("2026-03-09")
        assert [r.id for r in races] == ["res-0", "res-1", "res-2", "res-3", "res-4"]
        assert races[0].course == "Kempton"
        assert races[0].time == "13:00"
        assert races[0].extra["status"] == "Finished"
        assert all(r.synthetic for r in races)

    def test_runners_in_finishing_order(self):
        runners = past_results("2026-03-09")[0].runners
        assert [r.extra["position"] for r in runners] == list(range(1, len(runners) + 1))
        assert runners[0].odds == "2/1"


class TestFallbackRace:

    def test_keeps_requested_id(self):
        race = fallback_race("rac_999")
        assert race.id == "rac_999"
        assert race.synthetic
        assert [r.name for r in race.runners] == ["System Restore", "Backup Plan"]


class TestSearch:

    def test_all_types(self):
        results = search_entities("frank")
        assert [r["type"] for r in results] == ["horse", "horse", "jockey", "trainer"]
        assert results[0]["name"] == "Frank Star"
        assert results[2]["name"] == "T. Frankson"

    def test_filtered_by_type(self):
        results = search_entities("moore", "trainer")
        assert results == [{"type": "trainer", "name": "P. Mooreer", "id": "t1",
                            "description": "Licensed Trainer"}]

    def test_short_query_empty(self):
        assert search_entities("a") == []
        assert search_entities(None) == []


class TestEntityAnalysis:

    def test_deterministic(self):
        assert entity_analysis("horse", "h1") == entity_analysis("horse", "h1")

    def test_shape(self):
        result = entity_analysis("jockey", "j1")
        assert result["synthetic"] is True
        stats = result["stats"]
        assert 0.75 <= stats["ae_index"] < 1.25
        assert stats["wins"] <= stats["runs"]
        assert len(result["recent_form"]) == 6
        assert all(0 <= f <= 4 for f in result["recent_form"])
