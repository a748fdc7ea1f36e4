"""Intent-aware subgraph extraction from the knowledge store.

Two extraction paths:
- Explicit genes: named genes (or one gene picked from the disease->gene
  table) plus a capped set of directly connected entities
- Anchored: one disease/entity anchor found by label/alias containment plus
  capped neighbors, falling back to direct label matches

Every returned edge has both endpoints in the returned node set. There is no
ranking: data-file order decides which entities fill the caps.
"""

import logging
from typing import Any, Dict, List, Literal, Optional, Set

import networkx as nx
from pydantic import BaseModel, Field

from .intent_classifier import IntentClassifier, QueryIntent
from .knowledge_store import KnowledgeEdge, KnowledgeNode, KnowledgeStore

logger = logging.getLogger(__name__)

# Per-type caps for the explicit gene path
EXPLICIT_GENE_TYPE_CAP = 3
SINGLE_GENE_TYPE_CAP = 2

# Caps for the anchored path
ANCHORED_TYPE_CAP = 4
ANCHORED_TOTAL_CAP = 10

# Total cap for the direct label match fallback
DIRECT_MATCH_TOTAL_CAP = 8

ExtractionPath = Literal["explicit_genes", "disease_gene_table", "anchored", "direct_match", "empty"]


class Subgraph(BaseModel):
    """Bounded, referentially closed node/edge set for one query."""

    nodes: List[KnowledgeNode] = Field(default_factory=list, description="Selected nodes")
    edges: List[KnowledgeEdge] = Field(default_factory=list, description="Edges between selected nodes")
    anchor_ids: List[str] = Field(default_factory=list, description="Hop-origin node IDs")
    path: ExtractionPath = Field(default="empty", description="Extraction path that produced the result")

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    @property
    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def type_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for node in self.nodes:
            counts[node.type] = counts.get(node.type, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        """Serializable {nodes, edges} snapshot (export format)."""
        return {
            "nodes": [node.model_dump(exclude_none=True) for node in self.nodes],
            "edges": [edge.model_dump() for edge in self.edges],
            "anchor_ids": list(self.anchor_ids),
            "path": self.path,
        }

    def to_networkx(self) -> nx.MultiDiGraph:
        """Build a MultiDiGraph for visualization."""
        graph = nx.MultiDiGraph()
        anchors = set(self.anchor_ids)
        for node in self.nodes:
            graph.add_node(
                node.id,
                label=node.label,
                type=node.type,
                color=node.color,
                properties=node.properties,
                is_anchor=node.id in anchors,
            )
        for i, edge in enumerate(self.edges):
            graph.add_edge(
                edge.source,
                edge.target,
                key=f"{edge.relation or 'edge'}_{i}",
                relation=edge.relation,
                properties=edge.properties,
            )
        return graph


class _Collector:
    """Ordered node/edge accumulator."""

    def __init__(self):
        self.nodes: List[KnowledgeNode] = []
        self.node_ids: Set[str] = set()
        self.edges: List[KnowledgeEdge] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.node_ids

    def add_node(self, node: KnowledgeNode) -> None:
        if node.id not in self.node_ids:
            self.nodes.append(node)
            self.node_ids.add(node.id)

    def add_edge(self, edge: KnowledgeEdge) -> None:
        self.edges.append(edge)

    def build(self, anchor_ids: List[str], path: ExtractionPath) -> Subgraph:
        closed_edges = [
            edge for edge in self.edges
            if edge.source in self.node_ids and edge.target in self.node_ids
        ]
        return Subgraph(nodes=self.nodes, edges=closed_edges, anchor_ids=anchor_ids, path=path)


class SubgraphExtractor:
    """Find the subgraph relevant to a query.

    Example:
        >>> extractor = SubgraphExtractor(store, IntentClassifier(load_lexicon()))
        >>> subgraph = extractor.query_knowledge_graph("Drugs for lung cancer")
        >>> [n.label for n in subgraph.nodes]
    """

    def __init__(
        self,
        store: KnowledgeStore,
        classifier: IntentClassifier,
        quota_policy: Literal["shared", "per_anchor"] = "shared",
    ):
        """Initialize extractor.

        Args:
            store: Knowledge store to read from
            classifier: Intent classifier (its lexicon supplies the disease->gene table)
            quota_policy: "shared" keeps one per-type counter for all anchor genes
                (a first gene can use up the quota); "per_anchor" resets the
                counters for every anchor gene
        """
        self.store = store
        self.classifier = classifier
        self.quota_policy = quota_policy

    def query_knowledge_graph(self, query: str) -> Subgraph:
        """Classify a query and extract its subgraph.

        Args:
            query: Raw user text

        Returns:
            Subgraph (possibly empty)
        """
        intent = self.classifier.classify(query)
        return self.extract(query, intent)

    def extract(self, query: str, intent: QueryIntent) -> Subgraph:
        """Extract the subgraph for an already classified query.

        Args:
            query: Raw user text
            intent: Classification of the query

        Returns:
            Subgraph (possibly empty)
        """
        query_lower = (query or "").lower()
        subgraph: Optional[Subgraph] = None

        if intent.explicit_gene_names:
            subgraph = self._extract_gene_subgraph(query_lower, intent) or Subgraph()
        elif intent.wants_single_gene:
            subgraph = self._extract_gene_subgraph(query_lower, intent)

        if subgraph is None:
            subgraph = self._extract_anchored_subgraph(query_lower, intent)

        logger.info(
            f"Query: \"{query}\" -> path={subgraph.path}, {len(subgraph.nodes)} nodes "
            f"({', '.join(n.type for n in subgraph.nodes)}), {len(subgraph.edges)} edges"
        )
        return subgraph

    # Explicit gene path

    def _extract_gene_subgraph(self, query_lower: str, intent: QueryIntent) -> Optional[Subgraph]:
        """Subgraph around named genes, or one gene from the disease->gene table.

        Returns None when no anchor gene could be found.
        """
        path: ExtractionPath = "explicit_genes"
        anchors = self._resolve_genes(intent.explicit_gene_names)
        if intent.single_result_only:
            anchors = anchors[:1]

        if not anchors and intent.wants_single_gene:
            gene = self._lookup_disease_gene(query_lower)
            if gene is not None:
                anchors = [gene]
                path = "disease_gene_table"

        if not anchors:
            logger.info(f"No gene nodes found for {intent.explicit_gene_names}")
            return None

        collector = _Collector()
        for gene in anchors:
            collector.add_node(gene)

        # Biomarkers sharing a requested gene name (e.g., HER2)
        if "biomarker" in intent.wanted_types and intent.explicit_gene_names:
            requested = {name.upper() for name in intent.explicit_gene_names}
            for node in self.store.nodes:
                if node.type == "biomarker" and node.label.upper() in requested:
                    collector.add_node(node)

        cap = SINGLE_GENE_TYPE_CAP if intent.single_result_only else EXPLICIT_GENE_TYPE_CAP
        # One gene was asked for: do not add gene neighbors
        skipped_types = {"gene"} if intent.single_result_only else set()

        type_count: Dict[str, int] = {}
        for gene in anchors:
            if self.quota_policy == "per_anchor":
                type_count = {}
            for edge in self.store.incident_edges(gene.id):
                connected = self.store.get_node(edge.other_end(gene.id))
                if (
                    connected is None
                    or connected.type not in intent.wanted_types
                    or connected.type in skipped_types
                    or connected.id in collector
                ):
                    continue
                if type_count.get(connected.type, 0) < cap:
                    collector.add_node(connected)
                    collector.add_edge(edge)
                    type_count[connected.type] = type_count.get(connected.type, 0) + 1
                else:
                    logger.debug(f"Skipped {connected.type}: {connected.label} (limit {cap} reached)")

        return collector.build([gene.id for gene in anchors], path)

    def _resolve_genes(self, names: List[str]) -> List[KnowledgeNode]:
        """Gene nodes for each name: exact label match, else exact alias match."""
        resolved: List[KnowledgeNode] = []
        seen: Set[str] = set()
        for name in names:
            matches = self.store.find_nodes_by_label(name, node_type="gene")
            if not matches:
                matches = self.store.find_nodes_by_alias(name, node_type="gene")
            for node in matches:
                if node.id not in seen:
                    resolved.append(node)
                    seen.add(node.id)
        return resolved

    def _lookup_disease_gene(self, query_lower: str) -> Optional[KnowledgeNode]:
        """First available gene for the first disease phrase found in the query."""
        for disease, genes in self.classifier.lexicon.disease_genes.items():
            if disease.lower() not in query_lower:
                continue
            for gene_name in genes:
                matches = self.store.find_nodes_by_label(gene_name, node_type="gene")
                if matches:
                    logger.info(f"Selected {matches[0].label} for '{disease}' from disease gene table")
                    return matches[0]
            # Only the first matching disease is consulted
            return None
        return None

    # Anchored path

    def _extract_anchored_subgraph(self, query_lower: str, intent: QueryIntent) -> Subgraph:
        collector = _Collector()
        anchor = self._find_anchor(query_lower, intent.context_kind)
        anchor_ids: List[str] = []

        if anchor is not None and intent.wanted_types:
            logger.info(f"Anchor entity found: {anchor.label} ({anchor.type})")
            if intent.include_anchor:
                collector.add_node(anchor)
                anchor_ids.append(anchor.id)

            type_count: Dict[str, int] = {}
            for edge in self.store.incident_edges(anchor.id):
                connected = self.store.get_node(edge.other_end(anchor.id))
                if (
                    connected is None
                    or connected.type not in intent.wanted_types
                    or connected.id in collector
                ):
                    continue
                if type_count.get(connected.type, 0) < ANCHORED_TYPE_CAP and len(collector) < ANCHORED_TOTAL_CAP:
                    collector.add_node(connected)
                    collector.add_edge(edge)
                    type_count[connected.type] = type_count.get(connected.type, 0) + 1
                else:
                    logger.debug(f"Skipped {connected.type}: {connected.label} (limit reached)")

        if len(collector) == 0:
            return self._extract_direct_matches(query_lower)

        return collector.build(anchor_ids, "anchored")

    def _find_anchor(self, query_lower: str, context_kind: str) -> Optional[KnowledgeNode]:
        """First node mentioned in the query that fits the context kind."""
        if context_kind == "general":
            return None

        for node in self.store.nodes:
            label = node.label.lower()
            label_hit = bool(label) and label in query_lower
            alias_hit = any(alias.lower() in query_lower for alias in node.aliases)
            if not (label_hit or alias_hit):
                continue
            if context_kind == "disease" and node.type == "disease":
                return node
            if context_kind == "specific" and len(label) > 2 and label_hit:
                return node
        return None

    def _extract_direct_matches(self, query_lower: str) -> Subgraph:
        """Nodes whose label occurs in the query plus a few neighbors."""
        collector = _Collector()
        for node in self.store.nodes:
            if len(collector) >= DIRECT_MATCH_TOTAL_CAP:
                break
            label = node.label.lower()
            if len(label) > 2 and label in query_lower:
                collector.add_node(node)

        if len(collector) == 0:
            return Subgraph()

        matched_ids = [node.id for node in collector.nodes]

        for edge in self.store.edges:
            source_in = edge.source in collector
            target_in = edge.target in collector
            if source_in and target_in:
                collector.add_edge(edge)
            elif (source_in or target_in) and len(collector) < DIRECT_MATCH_TOTAL_CAP:
                other_id = edge.target if source_in else edge.source
                collector.add_node(self.store.get_node(other_id))
                collector.add_edge(edge)

        return collector.build(matched_ids, "direct_match")
