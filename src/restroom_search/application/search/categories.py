"""
Venue Category Catalog

Per-category configuration consumed by the normalizer (free/paid flag,
display metadata) and the quality scorer (base score). Commercial keys are
also the values accepted as ``enabled categories`` in a search.

Base quality reflects how reliably a category offers a usable restroom:
well-known café chains score higher than a generic café, and a
private-operated public facility (민간개방화장실) is better maintained
than a plain public one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from restroom_search.domain.entities import EntryKind

PUBLIC_CATEGORY = "public"
PUBLIC_PRIVATE_CATEGORY = "public_private"


@dataclass(frozen=True)
class CategoryConfig:
    """Static configuration of one venue category."""

    key: str
    label: str
    kind: EntryKind
    base_quality: float
    is_free: bool
    keyword: str | None = None
    brand_keywords: tuple[str, ...] = ()
    icon: str = "🚽"
    color: str = "#28a745"

    @property
    def is_brand(self) -> bool:
        """Brand categories only accept results whose name matches a brand keyword."""
        return bool(self.brand_keywords)

    def matches_brand(self, name: str) -> bool:
        if not self.is_brand:
            return True
        lowered = name.lower()
        return any(keyword.lower() in lowered for keyword in self.brand_keywords)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "kind": self.kind.value,
            "base_quality": self.base_quality,
            "is_free": self.is_free,
            "icon": self.icon,
            "color": self.color,
        }


CATEGORY_CATALOG: dict[str, CategoryConfig] = {
    PUBLIC_CATEGORY: CategoryConfig(
        key=PUBLIC_CATEGORY,
        label="Public restroom",
        kind=EntryKind.PUBLIC_FACILITY,
        base_quality=1,
        is_free=True,
    ),
    PUBLIC_PRIVATE_CATEGORY: CategoryConfig(
        key=PUBLIC_PRIVATE_CATEGORY,
        label="Private-operated public restroom",
        kind=EntryKind.PUBLIC_FACILITY,
        base_quality=2,
        is_free=True,
    ),
    "starbucks": CategoryConfig(
        key="starbucks",
        label="Starbucks",
        kind=EntryKind.COMMERCIAL_VENUE,
        base_quality=3,
        is_free=False,
        keyword="Starbucks",
        brand_keywords=("starbucks", "스타벅스"),
        icon="☕",
        color="#00704A",
    ),
    "twosome": CategoryConfig(
        key="twosome",
        label="A Twosome Place",
        kind=EntryKind.COMMERCIAL_VENUE,
        base_quality=3,
        is_free=False,
        keyword="A Twosome Place",
        brand_keywords=("twosome", "투썸"),
        icon="☕",
        color="#8B4513",
    ),
    "ediya": CategoryConfig(
        key="ediya",
        label="EDIYA Coffee",
        kind=EntryKind.COMMERCIAL_VENUE,
        base_quality=2,
        is_free=False,
        keyword="EDIYA Coffee",
        brand_keywords=("ediya", "이디야"),
        icon="☕",
        color="#FF6B35",
    ),
    "pascucci": CategoryConfig(
        key="pascucci",
        label="Pascucci",
        kind=EntryKind.COMMERCIAL_VENUE,
        base_quality=3,
        is_free=False,
        keyword="Pascucci",
        brand_keywords=("pascucci", "파스쿠찌"),
        icon="☕",
        color="#8B0000",
    ),
    "coffeebean": CategoryConfig(
        key="coffeebean",
        label="The Coffee Bean",
        kind=EntryKind.COMMERCIAL_VENUE,
        base_quality=3,
        is_free=False,
        keyword="Coffee Bean",
        brand_keywords=("coffee bean", "커피빈"),
        icon="☕",
        color="#4B0082",
    ),
    "cafe": CategoryConfig(
        key="cafe",
        label="Café",
        kind=EntryKind.COMMERCIAL_VENUE,
        base_quality=2,
        is_free=False,
        keyword="cafe coffee",
        icon="☕",
        color="#8B4513",
    ),
    "department_store": CategoryConfig(
        key="department_store",
        label="Department store",
        kind=EntryKind.COMMERCIAL_VENUE,
        base_quality=3,
        # Department store restrooms are open to everyone
        is_free=True,
        keyword="department store",
        icon="🏬",
        color="#6B46C1",
    ),
}


def get_category(key: str) -> CategoryConfig | None:
    return CATEGORY_CATALOG.get(key)


def commercial_categories() -> list[CategoryConfig]:
    """Commercial categories in catalog order."""
    return [c for c in CATEGORY_CATALOG.values() if c.kind is EntryKind.COMMERCIAL_VENUE]


def quality_description(score: int) -> str:
    """Human label for a public quality score."""
    if score >= 3:
        return "premium"
    if score >= 2:
        return "standard"
    return "basic"
