"""
Search Settings - Tunable thresholds for the aggregation engine.

The numeric defaults (50 m dedup proximity, 300 m / 600 m urgency buckets)
have no documented derivation and are pending product validation. They are
kept configurable rather than tuned here.

Environment Variables:
    RESTROOM_DEDUP_RADIUS_M: Proximity threshold for near-duplicate entries
    RESTROOM_BUCKET_HIGH_M: Upper bound (exclusive) of the High urgency bucket
    RESTROOM_BUCKET_MEDIUM_M: Upper bound (exclusive) of the Medium urgency bucket
    RESTROOM_WALKING_SPEED_KMH: Walking speed used for "~N min walk" estimates
    RESTROOM_HTTP_TIMEOUT: Per-request adapter timeout in seconds
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from restroom_search.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEDUP_PROXIMITY_METERS = 50.0
BUCKET_HIGH_METERS = 300.0
BUCKET_MEDIUM_METERS = 600.0
WALKING_SPEED_KMH = 4.5
DISTANCE_SCORE_CEILING_METERS = 1000.0
DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class SearchSettings:
    """Thresholds shared by the normalizer, deduplicator and ranker."""

    dedup_proximity_meters: float = DEDUP_PROXIMITY_METERS
    bucket_high_meters: float = BUCKET_HIGH_METERS
    bucket_medium_meters: float = BUCKET_MEDIUM_METERS
    walking_speed_kmh: float = WALKING_SPEED_KMH
    distance_score_ceiling: float = DISTANCE_SCORE_CEILING_METERS
    fallback_sample_size: int = 6

    def __post_init__(self) -> None:
        if self.dedup_proximity_meters < 0:
            raise ConfigurationError(f"dedup_proximity_meters must be >= 0, got {self.dedup_proximity_meters}")
        if not 0 < self.bucket_high_meters <= self.bucket_medium_meters:
            raise ConfigurationError(
                "urgency bucket thresholds must satisfy 0 < high <= medium, "
                f"got high={self.bucket_high_meters} medium={self.bucket_medium_meters}"
            )
        if self.walking_speed_kmh <= 0:
            raise ConfigurationError(f"walking_speed_kmh must be > 0, got {self.walking_speed_kmh}")
        if self.fallback_sample_size < 1:
            raise ConfigurationError(f"fallback_sample_size must be >= 1, got {self.fallback_sample_size}")

    @classmethod
    def from_env(cls) -> SearchSettings:
        """Build settings from environment variables, keeping defaults for unset ones."""
        return cls(
            dedup_proximity_meters=_env_float("RESTROOM_DEDUP_RADIUS_M", DEDUP_PROXIMITY_METERS),
            bucket_high_meters=_env_float("RESTROOM_BUCKET_HIGH_M", BUCKET_HIGH_METERS),
            bucket_medium_meters=_env_float("RESTROOM_BUCKET_MEDIUM_M", BUCKET_MEDIUM_METERS),
            walking_speed_kmh=_env_float("RESTROOM_WALKING_SPEED_KMH", WALKING_SPEED_KMH),
        )


def http_timeout_from_env() -> float:
    """Adapter request timeout (seconds) from RESTROOM_HTTP_TIMEOUT."""
    return _env_float("RESTROOM_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


DEFAULT_SETTINGS = SearchSettings()
