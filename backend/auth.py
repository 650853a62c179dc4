"""
Tiered client-key authentication for the GRACE-X Sport API.

Keys come from the environment (comma-separated):
  TIER_TOP_KEYS, TIER_MID_KEYS, TIER_LOW_KEYS, CLIENT_KEYS (legacy → low)

With no keys configured at all the API runs in open mode and every caller is
top tier.  That state is logged as a warning at startup.
"""

import logging
import os
from typing import Callable

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from backend.core.tiers import (
    Denied,
    Feature,
    Tier,
    TierConfig,
    authorize,
    check_feature,
)

# Load .env file
load_dotenv()

logger = logging.getLogger(__name__)

CLIENT_KEY_HEADER = APIKeyHeader(name="x-client-key", auto_error=False)

# Built once per process, read-only afterwards
TIER_CONFIG = TierConfig.from_env(os.environ)


def get_tier_config() -> TierConfig:
    """Dependency hook so tests can inject their own tables."""
    return TIER_CONFIG


def log_auth_mode(config: TierConfig) -> None:
    if config.open_mode:
        logger.warning("Auth: DISABLED (open mode) - no client keys configured, every caller is top tier")
        return
    counts = config.key_counts()
    logger.info(
        "Auth: ENABLED. Keys loaded: Top=%d, Mid=%d, Low=%d, Legacy=%d",
        counts["top"], counts["mid"], counts["low"], counts["legacy"],
    )


def _raise_denied(denied: Denied) -> None:
    if denied.required is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": denied.reason, "message": denied.message},
            headers={"WWW-Authenticate": "ApiKey"},
        )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error": denied.reason,
            "message": denied.message,
            "required_tier": denied.required.label,
        },
    )


async def verify_client_key(
    client_key: str = Security(CLIENT_KEY_HEADER),
    config: TierConfig = Depends(get_tier_config),
) -> Tier:
    """
    Resolve the caller's tier from the ``x-client-key`` header.

    Usage in FastAPI routes:
        @app.get("/api/racing/upcoming")
        async def upcoming(tier: Tier = Depends(verify_client_key)):
            ...
    """
    tier = authorize(client_key, config)
    if isinstance(tier, Denied):
        _raise_denied(tier)
    return tier


def require_feature(feature: Feature) -> Callable:
    """
    Dependency factory gating a route on the feature matrix.

    Usage:
        @app.get("/api/racing/search")
        async def search(tier: Tier = Depends(require_feature(Feature.SEARCH))):
            ...
    """

    async def _dependency(tier: Tier = Depends(verify_client_key)) -> Tier:
        allowed = check_feature(tier, feature)
        if isinstance(allowed, Denied):
            _raise_denied(allowed)
        return allowed

    return _dependency
