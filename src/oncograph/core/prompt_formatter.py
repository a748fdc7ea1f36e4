"""Serialize a subgraph into the plain-text context block sent to Claude."""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..config.settings import DEFAULT_PROMPTS_DIR
from ..utils.formatters import format_edge_label
from .knowledge_store import KnowledgeEdge, KnowledgeNode

NO_INFORMATION_FOUND = "No relevant information found in the knowledge graph."


def load_context_header(prompts_dir: Optional[Path] = None) -> str:
    """Read the static knowledge graph description."""
    path = (prompts_dir or DEFAULT_PROMPTS_DIR) / "context_header.txt"
    with open(path, "r", encoding="utf-8") as f:
        return f.read().strip()


def format_knowledge_context(
    nodes: Sequence[KnowledgeNode],
    edges: Sequence[KnowledgeEdge],
    header: str,
) -> str:
    """Format selected nodes and edges for the system prompt.

    Args:
        nodes: Nodes to describe
        edges: Relationships between the nodes
        header: Static description of the knowledge graph

    Returns:
        Text block, or NO_INFORMATION_FOUND when both inputs are empty
    """
    if not nodes and not edges:
        return NO_INFORMATION_FOUND

    lines: List[str] = [header, "", "RELEVANT KNOWLEDGE FROM GRAPH:", ""]

    if nodes:
        lines.append("ENTITIES:")
        for node in nodes:
            lines.append(format_node_line(node))
        lines.append("")

    if edges:
        labels: Dict[str, str] = {node.id: node.label for node in nodes if node.label}
        lines.append("RELATIONSHIPS:")
        for edge in edges:
            source = labels.get(edge.source, edge.source)
            target = labels.get(edge.target, edge.target)
            relation = format_edge_label(edge.relation) if edge.relation else "related to"
            lines.append(f"- {source} {relation} {target}")

    return "\n".join(lines).rstrip() + "\n"


def format_node_line(node: KnowledgeNode) -> str:
    """One entity line: `- TYPE: label (ID: id) - description - Also known as: ...`."""
    line = f"- {(node.type or 'unknown').upper()}: {node.label or 'Unknown'} (ID: {node.id})"
    if node.description:
        line += f" - {node.description}"
    if node.aliases:
        line += f" - Also known as: {', '.join(node.aliases)}"
    return line
