"""
Search Module for Tagfolio

Free-text and conjunctive tag search over an owner's records.
"""

from tagfolio.search.query_engine import (
    QueryEngine,
    parse_tag_filter,
    matches_text,
    matches_tags,
)

__all__ = [
    "QueryEngine",
    "parse_tag_filter",
    "matches_text",
    "matches_tags",
]
