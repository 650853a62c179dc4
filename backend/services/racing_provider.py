"""
Racing provider integration (TheRacingAPI-compatible racecards).

Configuration (environment):
  RACING_BASE_URL        provider root, e.g. https://api.theracingapi.com
  RACING_UPCOMING_PATH   full path override for the upcoming-cards request
  RACING_REGION_CODES    default "gb,ire"
  RACING_LIMIT           optional "limit" query parameter
  RACING_BEARER_TOKEN    bearer auth, or
  RACING_USERNAME / RACING_PASSWORD  basic auth (takes precedence)

Some provider plans reject the ``limit`` parameter.  When the error body says
so, the request is retried once without it.

The client returns raw provider JSON.  Normalisation into Race objects and
enrichment happen in the HTTP layer so the same path serves provider and
synthetic cards.
"""

import logging
import os
import re
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

import requests

logger = logging.getLogger(__name__)

DEFAULT_REGIONS = "gb,ire"
REQUEST_TIMEOUT = 15

_LIMIT_REJECTED = re.compile(r"unrecognised\s+query\s+parameter,\s*limit", re.IGNORECASE)


class ProviderError(Exception):
    """Upstream racing provider failed or returned unreadable data."""


class RacingAPIClient:
    """Client for a racecards provider"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        bearer_token: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        upcoming_path: Optional[str] = None,
        regions: Optional[str] = None,
        limit: Optional[str] = None,
    ):
        base = base_url or os.getenv("RACING_BASE_URL", "")
        if not base:
            raise ValueError("RACING_BASE_URL not set in environment")
        self.base_url = base.rstrip("/")
        self.bearer_token = bearer_token or os.getenv("RACING_BEARER_TOKEN")
        self.username = username or os.getenv("RACING_USERNAME")
        self.password = password or os.getenv("RACING_PASSWORD")
        self.upcoming_path = (upcoming_path or os.getenv("RACING_UPCOMING_PATH", "")).strip()
        self.regions = (regions or os.getenv("RACING_REGION_CODES", DEFAULT_REGIONS)).strip()
        self.limit = (limit or os.getenv("RACING_LIMIT", "")).strip()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _auth(self) -> Optional[Any]:
        if self.username and self.password:
            return (self.username, self.password)
        return None

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.bearer_token and not (self.username and self.password):
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        return headers

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        url = self.base_url + "/" + path.lstrip("/")
        try:
            response = requests.get(
                url,
                params=params or None,
                headers=self._headers(),
                auth=self._auth(),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"Racing provider unreachable: {e}") from e

        if not response.ok:
            raise ProviderError(
                f"{response.status_code} {response.reason}: {response.text[:500]}"
            )
        try:
            return response.json()
        except ValueError:
            # Some plans answer with text; keep it visible instead of failing
            return {"raw": response.text}

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def upcoming_params(self, date: Optional[str] = None, with_limit: bool = True) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.regions:
            params["region_codes"] = self.regions
        if date:
            params["date"] = date
        if with_limit and self.limit:
            params["limit"] = self.limit
        return params

    def get_upcoming(self, date: Optional[str] = None) -> Any:
        """
        Fetch upcoming racecards.

        Uses RACING_UPCOMING_PATH verbatim when set, otherwise
        ``/v1/racecards/basic`` with region, date and limit filters.
        """
        if self.upcoming_path:
            return self._get(self.upcoming_path)

        path = "/v1/racecards/basic"
        params = self.upcoming_params(date)
        try:
            data = self._get(path, params)
        except ProviderError as e:
            if not (self.limit and _LIMIT_REJECTED.search(str(e))):
                raise
            logger.warning("Provider rejected 'limit'; retrying without it")
            params = self.upcoming_params(date, with_limit=False)
            data = self._get(path, params)

        logger.info("Racing provider: upcoming cards fetched (%s)", urlencode(params))
        return data

    def get_race_standard(self, race_id: str) -> Any:
        """Standard racecard detail for one race."""
        return self._get(f"/v1/racecards/{quote(race_id, safe='')}/standard")


def get_racing_client() -> Optional[RacingAPIClient]:
    """Client built from the environment, or None when no provider is configured."""
    if not os.getenv("RACING_BASE_URL"):
        return None
    return RacingAPIClient()
