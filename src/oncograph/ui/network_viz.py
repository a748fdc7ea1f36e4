"""Subgraph visualization using the streamlit-cytoscape component.

Features:
- Interactive Cytoscape.js rendering (drag, pan, zoom, click to select)
- Force-directed layouts (cose, fcose)
- Node coloring by entity type, larger nodes for anchors
- Directed edges captioned with their relation
- Node detail extraction for the side panel
"""

from typing import Any, Dict, List, Optional

import networkx as nx
from networkx.readwrite import json_graph
from streamlit_cytoscape import EdgeStyle, NodeStyle
import logging

from ..utils.formatters import format_edge_label, format_property_value, truncate_string

logger = logging.getLogger(__name__)

# Color scheme for entity types
TYPE_COLORS = {
    "disease": "#9b5de5",
    "gene": "#e63946",
    "pathway": "#2a9d8f",
    "biomarker": "#4361ee",
    "drug": "#f4a261",
    "other": "#6c757d",
}


def get_type_color(node_type: str) -> str:
    """Palette color for an entity type (gray for unknown types)."""
    return TYPE_COLORS.get((node_type or "").lower(), TYPE_COLORS["other"])


def prepare_cytoscape_elements(graph: nx.MultiDiGraph) -> Dict[str, List[Dict]]:
    """Convert a subgraph to Cytoscape.js elements format.

    Uses nx.cytoscape_data() as base, then enriches with display attributes.

    Args:
        graph: Subgraph from Subgraph.to_networkx()

    Returns:
        Dictionary with "nodes" and "edges" lists in Cytoscape.js format
    """
    cyto_data = json_graph.cytoscape_data(graph)
    elements = cyto_data["elements"]

    for node_element in elements["nodes"]:
        node_id = node_element["data"]["id"]
        node_attrs = graph.nodes[node_id]
        node_type = (node_attrs.get("type") or "other").lower()
        properties = node_attrs.get("properties") or {}

        # Type is the NodeStyle matching key, name is the caption
        node_element["data"]["label"] = node_type
        node_element["data"]["name"] = truncate_string(node_attrs.get("label") or node_id, 30)
        node_element["data"]["type"] = node_type
        node_element["data"]["_color"] = node_attrs.get("color") or get_type_color(node_type)

        is_anchor = node_attrs.get("is_anchor", False)
        node_element["data"]["is_anchor"] = is_anchor
        node_element["data"]["size"] = 45 if is_anchor else 30

        # Tooltip/inspection fields
        for key, value in properties.items():
            formatted = format_property_value(value)
            if formatted:
                node_element["data"][key] = formatted

        # Drop nested structures copied over by cytoscape_data()
        node_element["data"].pop("properties", None)
        node_element["data"].pop("color", None)

    for idx, edge_element in enumerate(elements["edges"]):
        # Unique ID required by streamlit-cytoscape
        edge_element["data"]["id"] = f"e{idx}"
        relation = edge_element["data"].get("relation") or ""
        edge_element["data"]["label"] = format_edge_label(relation) if relation else "related to"
        edge_element["data"].pop("properties", None)

    return {"nodes": elements["nodes"], "edges": elements["edges"]}


def create_node_styles(graph: nx.MultiDiGraph) -> List[NodeStyle]:
    """Create a NodeStyle for each entity type present in the graph.

    Args:
        graph: Subgraph containing nodes with a "type" attribute

    Returns:
        List of NodeStyle objects, one per type
    """
    types = {(graph.nodes[node].get("type") or "other").lower() for node in graph.nodes()}

    node_styles = []
    for node_type in sorted(types):
        node_styles.append(
            NodeStyle(
                label=node_type,
                color=get_type_color(node_type),
                caption="name",
                custom_styles={
                    "width": "data(size)",
                    "height": "data(size)",
                    "background-color": "data(_color)",
                },
            )
        )
    return node_styles


def create_edge_styles(graph: nx.MultiDiGraph) -> List[EdgeStyle]:
    """Create an EdgeStyle for each relation in the graph.

    Args:
        graph: Subgraph containing edges with a "relation" attribute

    Returns:
        List of EdgeStyle objects, one per relation label
    """
    labels = set()
    for _, _, edge_attrs in graph.edges(data=True):
        relation = edge_attrs.get("relation") or ""
        labels.add(format_edge_label(relation) if relation else "related to")

    edge_styles = [EdgeStyle(label=label, caption="label", directed=True) for label in sorted(labels)]

    if not edge_styles:
        edge_styles.append(EdgeStyle(label="default", caption="label", directed=True))

    return edge_styles


def get_layout_config(layout_name: str = "cose") -> Dict[str, Any]:
    """Get layout configuration for Cytoscape.js.

    Args:
        layout_name: Layout algorithm (cose, fcose, circle, grid, concentric)

    Returns:
        Layout configuration dictionary
    """
    layout = {
        "name": layout_name,
        "animate": "end",
        "nodeDimensionsIncludeLabels": False,
    }

    # Force-directed: link attraction, node repulsion, gravity toward center
    if layout_name == "cose":
        layout.update({
            "nodeRepulsion": 400000,
            "idealEdgeLength": 100,
            "edgeElasticity": 100,
            "nestingFactor": 5,
            "gravity": 80,
            "numIter": 1000,
            "initialTemp": 200,
            "coolingFactor": 0.95,
            "minTemp": 1.0,
            "fit": True,
            "padding": 30,
        })
    elif layout_name == "fcose":
        layout.update({
            "quality": "default",
            "randomize": True,
            "fit": True,
            "padding": 30,
            "nodeSeparation": 75,
            "idealEdgeLength": 80,
            "edgeElasticity": 0.45,
            "gravity": 0.25,
            "numIter": 2500,
        })

    return layout


def render_network_visualization(
    graph: nx.MultiDiGraph,
    layout: str = "cose",
) -> Optional[Dict[str, Any]]:
    """Prepare visualization data for the streamlit-cytoscape component.

    Args:
        graph: Subgraph to visualize
        layout: Layout algorithm name

    Returns:
        Dictionary with elements, node_styles, edge_styles and layout config,
        or None for an empty graph

    Example:
        >>> viz_data = render_network_visualization(subgraph.to_networkx())
        >>> streamlit_cytoscape(viz_data["elements"], layout=viz_data["layout"],
        ...                     node_styles=viz_data["node_styles"], edge_styles=viz_data["edge_styles"])
    """
    if graph.number_of_nodes() == 0:
        logger.warning("Empty graph - nothing to visualize")
        return None

    return {
        "elements": prepare_cytoscape_elements(graph),
        "node_styles": create_node_styles(graph),
        "edge_styles": create_edge_styles(graph),
        "layout": get_layout_config(layout),
    }


def get_node_details(node_id: str, graph: nx.MultiDiGraph) -> Dict[str, Any]:
    """Extract detailed information about a node.

    Args:
        node_id: Node identifier
        graph: Subgraph containing the node

    Returns:
        Dictionary with node metadata and its edges grouped by relation
    """
    if node_id not in graph.nodes():
        return {"error": f"Node {node_id} not found in graph"}

    attrs = graph.nodes[node_id]
    properties = attrs.get("properties") or {}

    edges_by_relation: Dict[str, List[Dict[str, str]]] = {}
    in_edges = list(graph.in_edges(node_id, data=True))
    out_edges = list(graph.out_edges(node_id, data=True))

    for src, tgt, data in in_edges + out_edges:
        relation = format_edge_label(data.get("relation") or "related_to")
        incoming = tgt == node_id
        other = src if incoming else tgt
        edges_by_relation.setdefault(relation, []).append({
            "direction": "incoming" if incoming else "outgoing",
            "node_id": other,
            "label": graph.nodes[other].get("label", other),
        })

    display_properties = {}
    for key, value in properties.items():
        if key in ("description", "aliases"):
            continue
        formatted = format_property_value(value)
        if formatted:
            display_properties[key] = formatted

    return {
        "node_id": node_id,
        "label": attrs.get("label", node_id),
        "type": attrs.get("type", "unknown"),
        "is_anchor": attrs.get("is_anchor", False),
        "description": properties.get("description"),
        "aliases": properties.get("aliases") or [],
        "properties": display_properties,
        "edges_by_relation": edges_by_relation,
        "total_edges": len(in_edges) + len(out_edges),
    }
