"""
MCP Server Instructions - usage guide for AI agents.
"""

from __future__ import annotations

SERVER_INSTRUCTIONS = """
Restroom Search MCP Server - finds the nearest usable restroom.

Results merge two sources: the Seoul public toilet registry and nearby
commercial venues (café chains, generic cafés, department stores). Duplicates
across sources are removed and every result carries a 1-5 quality score.

## Picking an urgency profile
- "emergency": the user needs a restroom NOW. Nearest first, 300m radius.
- "moderate" (default): balance distance and quality, 500m radius.
- "relaxed": willing to walk up to 1km for a cleaner restroom.

## Typical calls
```
search_restrooms(latitude=37.4979, longitude=127.0276, urgency="emergency")
search_restrooms(latitude=37.5665, longitude=126.9780, only_free=True)
search_restrooms(latitude=37.5665, longitude=126.9780, categories=["starbucks", "department_store"])
```

## Reading the result
- "Found N restrooms": normal result, best match first.
- "Nothing nearby, try widening your search.": the search worked but
  nothing passed the filters. Suggest a larger radius or a looser filter.
- "Search failed: ...": every source was unreachable. The listed places are
  SAMPLE locations, not live data. Tell the user so.

Use list_urgency_profiles() and list_venue_categories() to see the catalogs.
"""
