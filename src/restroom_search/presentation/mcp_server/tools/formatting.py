"""
Formatting helpers for restroom search tool output.

Markdown for agents by default, JSON on request. EmptyResult and
TotalFailure render differently so an agent never mistakes a failed
search for an empty neighbourhood.
"""

from __future__ import annotations

import json
from typing import Any

from restroom_search.application.search import get_category, quality_description, walk_minutes
from restroom_search.application.search.ranking import UrgencyProfile
from restroom_search.config import WALKING_SPEED_KMH
from restroom_search.domain.entities import Entry, ResultEnvelope
from restroom_search.shared.exceptions import RestroomSearchError

KIND_ICONS = {
    "public": "🏛️",
    "commercial": "☕",
}


class ResponseFormatter:
    """Consistent error / empty-result messages across tools."""

    @staticmethod
    def error(
        error: Exception | str,
        suggestion: str | None = None,
        example: str | None = None,
        tool_name: str | None = None,
    ) -> str:
        if isinstance(error, RestroomSearchError):
            return error.to_agent_message()

        parts = [f"❌ **Error**{f' in {tool_name}' if tool_name else ''}: {error}"]
        if suggestion:
            parts.append(f"💡 **Suggestion**: {suggestion}")
        if example:
            parts.append(f"📝 **Example**: `{example}`")
        return "\n".join(parts)

    @staticmethod
    def no_results(message: str, suggestions: list[str] | None = None) -> str:
        parts = [f"🔍 {message}"]
        for suggestion in suggestions or []:
            parts.append(f"- {suggestion}")
        return "\n".join(parts)


def entry_to_dict(entry: Entry, walking_speed_kmh: float = WALKING_SPEED_KMH) -> dict[str, Any]:
    """Entry dict enriched with walk time and quality label."""
    data = entry.to_dict()
    data["walk_minutes"] = walk_minutes(entry.distance_meters, walking_speed_kmh)
    data["quality_label"] = quality_description(entry.quality_score)
    return data


def envelope_to_json(
    envelope: ResultEnvelope, profile: UrgencyProfile, walking_speed_kmh: float = WALKING_SPEED_KMH
) -> str:
    data = envelope.to_dict()
    data["profile"] = profile.key
    data["entries"] = [entry_to_dict(e, walking_speed_kmh) for e in envelope.entries]
    return json.dumps(data, ensure_ascii=False, indent=2)


def format_entry(index: int, entry: Entry, walking_speed_kmh: float = WALKING_SPEED_KMH) -> str:
    config = get_category(entry.category)
    icon = config.icon if config else KIND_ICONS.get(entry.kind.value, "🚽")
    price = "free" if entry.is_free else "purchase may be required"
    lines = [
        f"{index}. {icon} **{entry.name}** ({config.label if config else entry.category})",
        f"   📏 {entry.distance_meters:.0f}m · ~{walk_minutes(entry.distance_meters, walking_speed_kmh)} min walk"
        f" · {entry.urgency_bucket.value} urgency match",
        f"   ⭐ quality {entry.quality_score}/5 ({quality_description(entry.quality_score)}) · {price}",
    ]

    details = [f"📍 {entry.address}"]
    if entry.hours:
        details.append(f"🕐 {entry.hours}")
    if entry.phone:
        details.append(f"📞 {entry.phone}")
    lines.append("   " + " | ".join(details))

    if entry.facilities and entry.facilities.disabled_access:
        lines.append("   ♿ accessible")
    return "\n".join(lines)


def format_envelope(
    envelope: ResultEnvelope,
    profile: UrgencyProfile,
    radius_meters: float,
    walking_speed_kmh: float = WALKING_SPEED_KMH,
) -> str:
    """Markdown summary of a search result."""
    header = f"🚽 **Restroom Search** (profile: {profile.label}, radius {radius_meters:.0f}m)"

    if not envelope.success:
        parts = [
            header,
            f"⚠️ {envelope.message}",
            "",
            "**Sample locations (not live data):**",
        ]
        parts.extend(format_entry(i, e, walking_speed_kmh) for i, e in enumerate(envelope.entries, 1))
        return "\n".join(parts)

    if envelope.is_empty:
        hint = ResponseFormatter.no_results(
            envelope.message,
            [
                "Increase radius_meters or max_distance",
                "Lower min_quality or disable only_free",
                "Use urgency='relaxed' to search further away",
            ],
        )
        parts = [header, hint]
        if envelope.failed_sources:
            parts.append(f"⚠️ Unavailable sources: {', '.join(envelope.failed_sources)}")
        return "\n".join(parts)

    parts = [header, envelope.message]
    if envelope.failed_sources:
        parts.append(f"⚠️ Unavailable sources: {', '.join(envelope.failed_sources)}")
    parts.append("")
    parts.extend(format_entry(i, e, walking_speed_kmh) for i, e in enumerate(envelope.entries, 1))

    stats = envelope.stats
    parts.append("")
    parts.append(
        f"📊 average distance {stats.average_distance}m · "
        f"urgency high {stats.by_urgency['high']} / medium {stats.by_urgency['medium']} / low {stats.by_urgency['low']}"
    )
    return "\n".join(parts)
