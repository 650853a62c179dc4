"""
Tests for the racing provider client (HTTP mocked).

Run with: pytest tests/test_racing_provider.py -v
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from backend.services.racing_provider import (
    ProviderError,
    RacingAPIClient,
    get_racing_client,
)


def _response(status=200, json_body=None, text="", reason="OK"):
    r = MagicMock()
    r.status_code = status
    r.ok = status < 400
    r.reason = reason
    r.text = text
    if json_body is None:
        r.json.side_effect = ValueError("no json")
    else:
        r.json.return_value = json_body
    return r


@pytest.fixture
def client():
    return RacingAPIClient(base_url="https://racing.example/", bearer_token="tok", regions="gb")


class TestConstruction:

    def test_missing_base_url(self, monkeypatch):
        monkeypatch.delenv("RACING_BASE_URL", raising=False)
        with pytest.raises(ValueError):
            RacingAPIClient()

    def test_get_racing_client_none_without_env(self, monkeypatch):
        monkeypatch.delenv("RACING_BASE_URL", raising=False)
        assert get_racing_client() is None

    def test_get_racing_client_from_env(self, monkeypatch):
        monkeypatch.setenv("RACING_BASE_URL", "https://racing.example")
        assert get_racing_client().base_url == "https://racing.example"


class TestAuth:

    def test_bearer_header(self, client):
        assert client._headers()["Authorization"] == "Bearer tok"
        assert client._auth() is None

    def test_basic_auth_takes_precedence(self):
        c = RacingAPIClient(base_url="https://x", bearer_token="tok", username="u", password="p")
        assert c._auth() == ("u", "p")
        assert "Authorization" not in c._headers()


class TestGetUpcoming:

    @patch("backend.services.racing_provider.requests.get")
    def test_default_path_and_params(self, mock_get, client):
        mock_get.return_value = _response(json_body={"racecards": []})
        assert client.get_upcoming("2026-03-10") == {"racecards": []}

        url = mock_get.call_args[0][0]
        kwargs = mock_get.call_args[1]
        assert url == "https://racing.example/v1/racecards/basic"
        assert kwargs["params"] == {"region_codes": "gb", "date": "2026-03-10"}
        assert kwargs["timeout"] == 15

    @patch("backend.services.racing_provider.requests.get")
    def test_path_override(self, mock_get):
        c = RacingAPIClient(base_url="https://x", upcoming_path="/custom/cards?day=today")
        mock_get.return_value = _response(json_body=[])
        c.get_upcoming()
        assert mock_get.call_args[0][0] == "https://x/custom/cards?day=today"
        assert mock_get.call_args[1]["params"] is None

    @patch("backend.services.racing_provider.requests.get")
    def test_retries_without_rejected_limit(self, mock_get):
        c = RacingAPIClient(base_url="https://x", regions="gb", limit="50")
        mock_get.side_effect = [
            _response(422, text="Unrecognised query parameter, limit", reason="Unprocessable"),
            _response(json_body={"racecards": [{"race_id": "a"}]}),
        ]
        assert c.get_upcoming() == {"racecards": [{"race_id": "a"}]}
        assert mock_get.call_count == 2
        assert "limit" in mock_get.call_args_list[0][1]["params"]
        assert "limit" not in mock_get.call_args_list[1][1]["params"]

    @patch("backend.services.racing_provider.requests.get")
    def test_other_errors_not_retried(self, mock_get):
        c = RacingAPIClient(base_url="https://x", limit="50")
        mock_get.return_value = _response(500, text="boom", reason="Server Error")
        with pytest.raises(ProviderError, match="500 Server Error: boom"):
            c.get_upcoming()
        assert mock_get.call_count == 1

    @patch("backend.services.racing_provider.requests.get")
    def test_network_failure(self, mock_get, client):
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(ProviderError, match="unreachable"):
            client.get_upcoming()

    @patch("backend.services.racing_provider.requests.get")
    def test_non_json_body_kept_raw(self, mock_get, client):
        mock_get.return_value = _response(text="plain text")
        assert client.get_upcoming() == {"raw": "plain text"}


class TestRaceStandard:

    @patch("backend.services.racing_provider.requests.get")
    def test_race_id_is_escaped(self, mock_get, client):
        mock_get.return_value = _response(json_body={"course": "Ascot"})
        client.get_race_standard("rac/1 2")
        assert mock_get.call_args[0][0] == "https://racing.example/v1/racecards/rac%2F1%202/standard"
