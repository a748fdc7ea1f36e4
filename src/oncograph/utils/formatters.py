"""Data formatting utilities for display.

Handles:
- Relation labels (snake_case -> human-readable)
- Property values for tooltips and detail panels
- String truncation for node captions
"""

from typing import Any, Optional


def format_edge_label(relation: str) -> str:
    """Format a relation for human readability.

    Args:
        relation: Relation label (e.g., "targeted_by")

    Returns:
        Human-readable label (e.g., "targeted by")
    """
    return relation.replace("_", " ")


def format_property_value(value: Any) -> Optional[str]:
    """Format a node/edge property value for display.

    Args:
        value: Property value from the knowledge graph

    Returns:
        Display string, or None if the value cannot be shown compactly
    """
    if value is None:
        return None

    if isinstance(value, (str, int, bool)):
        return str(value)

    if isinstance(value, float):
        return f"{value:.4g}"

    if isinstance(value, list):
        if all(isinstance(v, (str, int, float, bool)) for v in value):
            return ", ".join(str(v) for v in value)
        return f"{len(value)} items"

    # Nested dicts are too complex for a tooltip
    return None


def truncate_string(s: str, max_length: int = 50) -> str:
    """Truncate string with ellipsis if too long.

    Args:
        s: String to truncate
        max_length: Maximum length

    Returns:
        Truncated string
    """
    if len(s) <= max_length:
        return s
    return s[: max_length - 3] + "..."
