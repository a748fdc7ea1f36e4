"""Render a subgraph to PNG bytes for download."""

import io
import logging

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import networkx as nx  # noqa: E402
from matplotlib.patches import Patch  # noqa: E402

from ..core.subgraph_extractor import Subgraph  # noqa: E402
from ..utils.formatters import truncate_string  # noqa: E402
from .network_viz import TYPE_COLORS, get_type_color  # noqa: E402

logger = logging.getLogger(__name__)

PNG_EXPORT_FILENAME = "knowledge-graph.png"


def render_subgraph_image(
    subgraph: Subgraph,
    dpi: int = 100,
    figsize: tuple = (10, 7),
) -> bytes:
    """Render the subgraph to PNG bytes using NetworkX + Matplotlib.

    Args:
        subgraph: Subgraph to draw
        dpi: Dots per inch for the image
        figsize: Figure size (width, height) in inches

    Returns:
        PNG image bytes
    """
    if not subgraph.nodes:
        return _empty_image_bytes(dpi)

    graph = nx.DiGraph()
    for node in subgraph.nodes:
        graph.add_node(node.id)
    for edge in subgraph.edges:
        graph.add_edge(edge.source, edge.target, relation=edge.relation)

    pos = nx.spring_layout(graph, k=1.5, iterations=50, seed=42)

    anchors = set(subgraph.anchor_ids)
    node_list = [node.id for node in subgraph.nodes]
    node_colors = [node.color or get_type_color(node.type) for node in subgraph.nodes]
    node_sizes = [1400 if node.id in anchors else 800 for node in subgraph.nodes]
    labels = {node.id: truncate_string(node.label or node.id, 20) for node in subgraph.nodes}
    edge_labels = {
        (edge.source, edge.target): (edge.relation or "related to").replace("_", " ")
        for edge in subgraph.edges
    }

    fig, ax = plt.subplots(figsize=figsize, dpi=dpi)
    try:
        fig.patch.set_facecolor("white")
        ax.set_facecolor("white")

        nx.draw_networkx_nodes(
            graph,
            pos,
            nodelist=node_list,
            node_color=node_colors,
            node_size=node_sizes,
            alpha=0.9,
            ax=ax,
        )
        nx.draw_networkx_edges(
            graph,
            pos,
            edge_color="#666666",
            arrows=True,
            arrowsize=12,
            ax=ax,
        )
        nx.draw_networkx_labels(graph, pos, labels=labels, font_size=8, font_color="black", ax=ax)
        nx.draw_networkx_edge_labels(graph, pos, edge_labels=edge_labels, font_size=6, ax=ax)

        present_types = sorted({node.type for node in subgraph.nodes if node.type in TYPE_COLORS})
        if present_types:
            handles = [Patch(color=TYPE_COLORS[t], label=t.capitalize()) for t in present_types]
            ax.legend(handles=handles, loc="lower left", fontsize=8, frameon=False)

        ax.axis("off")
        fig.tight_layout(pad=0.5)
        image = _figure_png_bytes(fig, dpi)
    finally:
        plt.close(fig)

    logger.debug(f"Rendered subgraph image: {len(subgraph.nodes)} nodes, {len(subgraph.edges)} edges")
    return image


def _figure_png_bytes(fig, dpi: int) -> bytes:
    buf = io.BytesIO()
    fig.savefig(buf, format="png", bbox_inches="tight", facecolor="white", dpi=dpi)
    return buf.getvalue()


def _empty_image_bytes(dpi: int) -> bytes:
    """Small placeholder image when the subgraph has no nodes."""
    fig, ax = plt.subplots(figsize=(4, 2), dpi=dpi)
    try:
        fig.patch.set_facecolor("white")
        ax.set_facecolor("white")
        ax.text(0.5, 0.5, "No nodes in graph", ha="center", va="center", fontsize=12)
        ax.axis("off")
        return _figure_png_bytes(fig, dpi)
    finally:
        plt.close(fig)
