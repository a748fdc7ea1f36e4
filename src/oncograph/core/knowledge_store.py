"""In-memory oncology knowledge store.

Handles:
- Loading the bundled knowledge graph JSON ({meta, nodes, edges})
- Graceful degradation for missing/malformed data (empty collections, logged)
- Adjacency index (node id -> incident edges in data-file order)

The store is read-only after construction.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

ENTITY_TYPES = ("disease", "gene", "pathway", "biomarker", "drug")


class KnowledgeNode(BaseModel):
    """Typed entity in the knowledge graph."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique node identifier (e.g., gene:EGFR)")
    label: str = Field(default="", description="Display name; not guaranteed unique")
    type: str = Field(default="", description="disease, gene, pathway, biomarker or drug")
    color: Optional[str] = Field(default=None, description="Optional display color")
    properties: Dict[str, Any] = Field(default_factory=dict, description="Free-form metadata")

    @property
    def description(self) -> Optional[str]:
        return self.properties.get("description")

    @property
    def aliases(self) -> List[str]:
        aliases = self.properties.get("aliases") or []
        if not isinstance(aliases, list):
            return []
        return [str(a) for a in aliases if a]


class KnowledgeEdge(BaseModel):
    """Directed, labeled relationship between two nodes."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(description="Source node ID")
    target: str = Field(description="Target node ID")
    relation: str = Field(default="", description="Relationship label (e.g., targeted_by)")
    properties: Dict[str, Any] = Field(default_factory=dict, description="Free-form metadata")

    def other_end(self, node_id: str) -> str:
        return self.target if self.source == node_id else self.source


class KnowledgeStore:
    """Read-only collection of nodes and edges with an adjacency index.

    Example:
        >>> store = KnowledgeStore.from_json_file(Path("knowledge_graph.json"))
        >>> egfr = store.find_nodes_by_label("EGFR", node_type="gene")[0]
        >>> [e.relation for e in store.incident_edges(egfr.id)]
    """

    def __init__(
        self,
        nodes: Iterable[KnowledgeNode],
        edges: Iterable[KnowledgeEdge],
        meta: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the store.

        Duplicate node IDs keep the first occurrence. Edges referencing
        unknown nodes are dropped.

        Args:
            nodes: Nodes in data-file order
            edges: Edges in data-file order
            meta: Graph metadata (description, version, ...)
        """
        self.meta: Dict[str, Any] = dict(meta or {})

        self._nodes: List[KnowledgeNode] = []
        self._node_index: Dict[str, KnowledgeNode] = {}
        for node in nodes:
            if node.id in self._node_index:
                logger.warning(f"Duplicate node id {node.id} ignored")
                continue
            self._nodes.append(node)
            self._node_index[node.id] = node

        self._edges: List[KnowledgeEdge] = []
        self._incident: Dict[str, List[int]] = {node_id: [] for node_id in self._node_index}
        dropped = 0
        for edge in edges:
            if edge.source not in self._node_index or edge.target not in self._node_index:
                dropped += 1
                continue
            position = len(self._edges)
            self._edges.append(edge)
            self._incident[edge.source].append(position)
            if edge.target != edge.source:
                self._incident[edge.target].append(position)

        if dropped:
            logger.warning(f"Dropped {dropped} edges with unknown endpoints")

    @classmethod
    def from_dict(cls, data: Any) -> "KnowledgeStore":
        """Build a store from parsed JSON, tolerating malformed structure.

        Args:
            data: Parsed document, expected shape {meta, nodes, edges}

        Returns:
            KnowledgeStore (empty collections substituted for malformed parts)
        """
        if not isinstance(data, dict):
            logger.error(f"Knowledge graph document is not an object: {type(data).__name__}")
            data = {}

        raw_nodes = data.get("nodes")
        if not isinstance(raw_nodes, list):
            logger.error(f"Knowledge graph nodes is not a list: {type(raw_nodes).__name__}")
            raw_nodes = []

        raw_edges = data.get("edges")
        if not isinstance(raw_edges, list):
            logger.error(f"Knowledge graph edges is not a list: {type(raw_edges).__name__}")
            raw_edges = []

        meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}

        nodes = _parse_records(raw_nodes, KnowledgeNode, "node")
        edges = _parse_records(raw_edges, KnowledgeEdge, "edge")

        store = cls(nodes, edges, meta=meta)
        logger.info(f"Knowledge graph loaded: {store.num_nodes} nodes, {store.num_edges} edges")
        return store

    @classmethod
    def from_json_file(cls, path: Path) -> "KnowledgeStore":
        """Load the knowledge graph from a JSON file.

        A missing or unparsable file yields an empty store.

        Args:
            path: Path to the knowledge graph JSON

        Returns:
            KnowledgeStore instance
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.error(f"Knowledge graph file not found: {path}")
            data = {"meta": {"description": "Fallback empty knowledge graph"}}
        except json.JSONDecodeError as e:
            logger.error(f"Knowledge graph file is not valid JSON ({path}): {e}")
            data = {"meta": {"description": "Fallback empty knowledge graph"}}

        return cls.from_dict(data)

    @property
    def nodes(self) -> Tuple[KnowledgeNode, ...]:
        return tuple(self._nodes)

    @property
    def edges(self) -> Tuple[KnowledgeEdge, ...]:
        return tuple(self._edges)

    @property
    def num_nodes(self) -> int:
        return len(self._nodes)

    @property
    def num_edges(self) -> int:
        return len(self._edges)

    def get_node(self, node_id: str) -> Optional[KnowledgeNode]:
        return self._node_index.get(node_id)

    def incident_edges(self, node_id: str) -> List[KnowledgeEdge]:
        """Edges with node_id as source or target, in data-file order."""
        return [self._edges[i] for i in self._incident.get(node_id, [])]

    def find_nodes_by_label(self, label: str, node_type: Optional[str] = None) -> List[KnowledgeNode]:
        """Exact case-insensitive label lookup, optionally restricted to a type."""
        wanted = label.lower()
        return [
            node for node in self._nodes
            if node.label.lower() == wanted and (node_type is None or node.type == node_type)
        ]

    def find_nodes_by_alias(self, alias: str, node_type: Optional[str] = None) -> List[KnowledgeNode]:
        """Exact case-insensitive alias lookup, optionally restricted to a type."""
        wanted = alias.lower()
        return [
            node for node in self._nodes
            if (node_type is None or node.type == node_type)
            and any(a.lower() == wanted for a in node.aliases)
        ]

    def type_counts(self) -> Dict[str, int]:
        """Number of nodes per entity type."""
        counts: Dict[str, int] = {}
        for node in self._nodes:
            counts[node.type] = counts.get(node.type, 0) + 1
        return counts


def _parse_records(raw: List[Any], model: type, kind: str) -> List[Any]:
    parsed = []
    for i, record in enumerate(raw):
        if not isinstance(record, dict):
            logger.warning(f"Skipping {kind} #{i}: not an object")
            continue
        try:
            parsed.append(model.model_validate(_normalize_record(record)))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {kind} #{i}: {e.error_count()} validation errors")
    return parsed


def _normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    normalized = dict(record)
    if normalized.get("properties") is None:
        normalized["properties"] = {}
    for text_field in ("label", "relation"):
        if text_field in normalized and normalized[text_field] is None:
            normalized[text_field] = ""
    if isinstance(normalized.get("type"), str):
        normalized["type"] = normalized["type"].lower()
    return normalized
