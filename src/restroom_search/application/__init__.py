"""
Application Layer - Search Use Case

Contains:
- search: aggregation engine (normalize, dedup, score, rank, filter)
"""

from .search import SearchOrchestrator, SourceAdapter

__all__ = ["SearchOrchestrator", "SourceAdapter"]
