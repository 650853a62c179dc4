"""Subscription tiers and feature gating: pure core of the access layer.

This module has no FastAPI, environment or logging dependencies.  The HTTP
layer (:mod:`backend.auth`) builds one :class:`TierConfig` at startup and
passes it into :func:`authorize` on every request.

Tier resolution order for a credential::

    no allow-lists configured      → TOP (open mode)
    starts with "pro-user-"        → TOP
    in top list                    → TOP
    in mid list                    → MID
    in low list or legacy list     → LOW
    otherwise                      → Denied(PAYWALL_LOCKED)

Feature matrix::

    search, ai_analysis            → TOP
    past_results                   → MID or TOP
    anything else                  → any recognised tier

Typical usage::

    from backend.core.tiers import TierConfig, authorize, check_feature, Denied

    cfg = TierConfig.from_env(os.environ)
    tier = authorize(key, cfg)
    if isinstance(tier, Denied):
        ...
    allowed = check_feature(tier, Feature.SEARCH)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Final, FrozenSet, Iterable, Mapping, Union

#: Credentials with this prefix are always top tier.
PRO_PREFIX: Final[str] = "pro-user-"

#: Denial reasons.  Callers switch on these to choose between a login prompt
#: and an upgrade prompt.
PAYWALL_LOCKED: Final[str] = "PAYWALL_LOCKED"
UPGRADE_REQUIRED: Final[str] = "UPGRADE_REQUIRED"


class Tier(IntEnum):
    """Access tier.  Integer values give the total order top > mid > low."""

    LOW = 1
    MID = 2
    TOP = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class Feature(str, Enum):
    SEARCH = "search"
    AI_ANALYSIS = "ai_analysis"
    PAST_RESULTS = "past_results"
    DATA = "data"


#: Minimum tier per feature.  Features not listed accept any tier.
FEATURE_MIN_TIER: Final[Mapping[Feature, Tier]] = {
    Feature.SEARCH: Tier.TOP,
    Feature.AI_ANALYSIS: Tier.TOP,
    Feature.PAST_RESULTS: Tier.MID,
}

#: Marketing names shown in upgrade prompts.
_PLAN_NAMES: Final[Mapping[Tier, str]] = {
    Tier.TOP: "Platinum",
    Tier.MID: "Gold/Platinum",
    Tier.LOW: "any plan",
}

_FEATURE_LABELS: Final[Mapping[Feature, str]] = {
    Feature.SEARCH: "Search features",
    Feature.AI_ANALYSIS: "AI Analysis",
    Feature.PAST_RESULTS: "Past Results",
    Feature.DATA: "this feed",
}


@dataclass(frozen=True)
class Denied:
    """Distinguishable refusal.  Never confused with an empty result."""

    reason: str
    message: str
    required: Union[Tier, None] = None


def _split_keys(raw: Union[str, None]) -> FrozenSet[str]:
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class TierConfig:
    """Immutable credential → tier tables, built once per process."""

    top_keys: FrozenSet[str] = frozenset()
    mid_keys: FrozenSet[str] = frozenset()
    low_keys: FrozenSet[str] = frozenset()
    legacy_keys: FrozenSet[str] = frozenset()
    pro_prefix: str = PRO_PREFIX

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "TierConfig":
        """Read ``TIER_TOP_KEYS``, ``TIER_MID_KEYS``, ``TIER_LOW_KEYS`` and
        the legacy ``CLIENT_KEYS`` (comma-separated)."""
        return cls(
            top_keys=_split_keys(environ.get("TIER_TOP_KEYS")),
            mid_keys=_split_keys(environ.get("TIER_MID_KEYS")),
            low_keys=_split_keys(environ.get("TIER_LOW_KEYS")),
            legacy_keys=_split_keys(environ.get("CLIENT_KEYS")),
        )

    @classmethod
    def from_lists(
        cls,
        top: Iterable[str] = (),
        mid: Iterable[str] = (),
        low: Iterable[str] = (),
        legacy: Iterable[str] = (),
    ) -> "TierConfig":
        return cls(frozenset(top), frozenset(mid), frozenset(low), frozenset(legacy))

    @property
    def open_mode(self) -> bool:
        """True when no allow-list is configured: every caller is top tier."""
        return not (self.top_keys or self.mid_keys or self.low_keys or self.legacy_keys)

    def key_counts(self) -> dict:
        return {
            "top": len(self.top_keys),
            "mid": len(self.mid_keys),
            "low": len(self.low_keys),
            "legacy": len(self.legacy_keys),
        }


def authorize(credential: Union[str, None], config: TierConfig) -> Union[Tier, Denied]:
    """Resolve a caller credential to a :class:`Tier`.

    Args:
        credential: Opaque client key from the request, may be ``None``.
        config: Process-wide tier tables.

    Returns:
        The caller's tier, or :class:`Denied` with reason
        :data:`PAYWALL_LOCKED` for an unknown credential.
    """
    if config.open_mode:
        return Tier.TOP

    key = (credential or "").strip()
    if key and (key.startswith(config.pro_prefix) or key in config.top_keys):
        return Tier.TOP
    if key in config.mid_keys:
        return Tier.MID
    if key in config.low_keys or key in config.legacy_keys:
        return Tier.LOW
    return Denied(reason=PAYWALL_LOCKED, message="A valid client key is required.")


def check_feature(tier: Union[Tier, Denied], feature: Feature) -> Union[Tier, Denied]:
    """Gate ``feature`` for a resolved tier.

    A :class:`Denied` input passes through unchanged so callers can chain
    ``check_feature(authorize(key, cfg), feature)``.
    """
    if isinstance(tier, Denied):
        return tier
    required = FEATURE_MIN_TIER.get(feature, Tier.LOW)
    if tier >= required:
        return tier
    return Denied(
        reason=UPGRADE_REQUIRED,
        message=f"Upgrade to {_PLAN_NAMES[required]} for {_FEATURE_LABELS[feature]}",
        required=required,
    )
