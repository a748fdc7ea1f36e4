"""Streamlit UI modules for OncoGraph.

Provides:
- Chat interface with per-answer subgraph panels
- Cytoscape.js network visualization via streamlit-cytoscape
- PNG rendering of subgraphs for download
"""

from .network_viz import (
    TYPE_COLORS,
    render_network_visualization,
    get_node_details,
)
from .graph_image import render_subgraph_image
from .rag_chat import (
    ChatMessage,
    EXAMPLE_QUESTIONS,
    make_user_message,
    make_bot_message,
    render_chat_history,
    render_example_questions,
)

__all__ = [
    "TYPE_COLORS",
    "render_network_visualization",
    "get_node_details",
    "render_subgraph_image",
    "ChatMessage",
    "EXAMPLE_QUESTIONS",
    "make_user_message",
    "make_bot_message",
    "render_chat_history",
    "render_example_questions",
]
