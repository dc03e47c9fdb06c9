"""Domain services."""

from .query_translator import (
    MATCH_ALL_QUERY,
    build_query,
    parse_clause_list,
    parse_clause_string,
    translate,
)

__all__ = [
    "MATCH_ALL_QUERY",
    "build_query",
    "parse_clause_list",
    "parse_clause_string",
    "translate",
]
