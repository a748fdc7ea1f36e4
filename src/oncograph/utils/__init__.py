"""Utility modules for OncoGraph.

Provides:
- Input validation for API keys and queries
- Data formatters for display
- Subgraph JSON export/import
"""

from .validators import validate_api_key, validate_query, ValidationError
from .formatters import format_edge_label, format_property_value, truncate_string

__all__ = [
    "validate_api_key",
    "validate_query",
    "ValidationError",
    "format_edge_label",
    "format_property_value",
    "truncate_string",
]
