"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from typing import Any

import pytest
from helpers import ORIGIN, FakeAdapter, north_of, place_result, seoul_row

from restroom_search.domain.entities import Coordinates, DataSource, EntryKind

# ============================================================
# Fixtures
# ============================================================


@pytest.fixture
def origin() -> Coordinates:
    return ORIGIN


@pytest.fixture
def seoul_rows() -> list[dict[str, Any]]:
    """Three usable registry rows near the origin."""
    return [
        seoul_row("POI-1", "시청역 공중화장실", north_of(ORIGIN, 120)),
        seoul_row("POI-2", "덕수궁 개방화장실", north_of(ORIGIN, 350), aname="민간개방"),
        seoul_row("POI-3", "광화문 공중화장실", north_of(ORIGIN, 700)),
    ]


@pytest.fixture
def place_results() -> list[dict[str, Any]]:
    """Three usable Places results near the origin."""
    return [
        place_result("P-1", "Starbucks City Hall", north_of(ORIGIN, 80), category="starbucks", rating=4.6, price_level=2),
        place_result("P-2", "Twosome Place Euljiro", north_of(ORIGIN, 260), category="twosome", rating=4.1),
        place_result("P-3", "Cafe Namu", north_of(ORIGIN, 450), category="cafe", rating=2.5),
    ]


@pytest.fixture
def public_adapter(seoul_rows) -> FakeAdapter:
    return FakeAdapter(DataSource.SEOUL_PUBLIC, EntryKind.PUBLIC_FACILITY, records=seoul_rows)


@pytest.fixture
def commercial_adapter(place_results) -> FakeAdapter:
    return FakeAdapter(DataSource.GOOGLE_PLACES, EntryKind.COMMERCIAL_VENUE, records=place_results)
