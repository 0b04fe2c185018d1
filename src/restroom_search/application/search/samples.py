"""
Built-in sample list returned alongside a TotalFailure.

Records are expressed as offsets (degrees) from the query coordinate so the
fallback is always renderable near the user. They are flagged with
``DataSource.SAMPLE`` and go through the regular normalizer.
"""

from __future__ import annotations

from typing import Any

from restroom_search.domain.entities import Coordinates

SAMPLE_RECORDS: tuple[dict[str, Any], ...] = (
    {
        "id": "sample-1",
        "name": "Starbucks (sample)",
        "category": "starbucks",
        "d_lat": 0.001,
        "d_lng": 0.001,
        "hours": "07:00-22:00",
        "disabled_access": True,
        "baby_changing": True,
    },
    {
        "id": "sample-2",
        "name": "Public Restroom (sample)",
        "category": "public",
        "d_lat": -0.001,
        "d_lng": -0.001,
        "hours": "24시간 (24h)",
        "disabled_access": True,
    },
    {
        "id": "sample-3",
        "name": "A Twosome Place (sample)",
        "category": "twosome",
        "d_lat": 0.002,
        "d_lng": -0.001,
        "hours": "08:00-23:00",
        "disabled_access": True,
        "baby_changing": True,
    },
    {
        "id": "sample-4",
        "name": "EDIYA Coffee (sample)",
        "category": "ediya",
        "d_lat": -0.002,
        "d_lng": 0.002,
        "hours": "07:00-23:00",
    },
    {
        "id": "sample-5",
        "name": "Private-operated Restroom (sample)",
        "category": "public_private",
        "d_lat": 0.003,
        "d_lng": 0.0,
        "hours": "24시간 (24h)",
        "disabled_access": True,
        "baby_changing": True,
    },
    {
        "id": "sample-6",
        "name": "Starbucks Reserve (sample)",
        "category": "starbucks",
        "d_lat": 0.0,
        "d_lng": -0.003,
        "hours": "07:00-22:00",
        "disabled_access": True,
    },
)


def sample_records(origin: Coordinates, limit: int | None = None) -> list[dict[str, Any]]:
    """Raw sample records placed around ``origin``."""
    records = []
    for template in SAMPLE_RECORDS[:limit]:
        record = {k: v for k, v in template.items() if k not in ("d_lat", "d_lng")}
        record["lat"] = origin.latitude + template["d_lat"]
        record["lng"] = origin.longitude + template["d_lng"]
        records.append(record)
    return records
