"""Subgraph export and import.

Handles:
- JSON snapshot of the displayed subgraph (download)
- Parsing a snapshot back into a Subgraph
- PNG rendering is in ui.graph_image
"""

import json
from typing import Any, Dict

from pydantic import ValidationError

from ..core.subgraph_extractor import Subgraph


class PersistenceError(Exception):
    """Raised when a snapshot cannot be read."""

    pass


JSON_EXPORT_FILENAME = "knowledge-graph.json"


def export_subgraph_json(subgraph: Subgraph, indent: int = 2) -> str:
    """Serialize a subgraph to a JSON document ({nodes, edges, anchor_ids, path}).

    Args:
        subgraph: Subgraph to export
        indent: JSON indentation

    Returns:
        JSON string
    """
    return json.dumps(subgraph.to_dict(), indent=indent)


def load_subgraph_json(text: str) -> Subgraph:
    """Parse a JSON snapshot produced by export_subgraph_json.

    Args:
        text: JSON document

    Returns:
        Subgraph

    Raises:
        PersistenceError: If the document is not valid JSON or has the wrong shape
    """
    try:
        data: Dict[str, Any] = json.loads(text)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Snapshot is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("nodes"), list) or not isinstance(data.get("edges"), list):
        raise PersistenceError("Snapshot must be an object with 'nodes' and 'edges' lists")

    try:
        return Subgraph(
            nodes=data["nodes"],
            edges=data["edges"],
            anchor_ids=data.get("anchor_ids", []),
            path=data.get("path", "empty"),
        )
    except ValidationError as e:
        raise PersistenceError(f"Snapshot has malformed nodes or edges: {e.error_count()} errors") from e
