"""Chat interface for Streamlit UI.

Features:
- Chat-style Q&A with Claude, grounded in the knowledge graph
- Append-only conversation history
- Per-answer interactive subgraph (Cytoscape) with legend and node details
- JSON and PNG export of each answer's subgraph
- Example questions
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pandas as pd
import streamlit as st
from pydantic import BaseModel, Field
from streamlit_cytoscape import streamlit_cytoscape

from ..core.chat_orchestrator import ChatResponse
from ..core.subgraph_extractor import Subgraph
from ..utils.persistence import JSON_EXPORT_FILENAME, export_subgraph_json, load_subgraph_json
from .graph_image import PNG_EXPORT_FILENAME, render_subgraph_image
from .network_viz import TYPE_COLORS, get_node_details, render_network_visualization

logger = logging.getLogger(__name__)

EXAMPLE_QUESTIONS = [
    "What is EGFR?",
    "Tell me about PI3K pathway",
    "Drugs for lung cancer",
    "One gene related to breast cancer",
]

WELCOME_TEXT = (
    "Hi! Ask me about cancer genes, pathways, drugs or biomarkers. "
    "Each answer comes with the part of the knowledge graph it was based on."
)


class ChatMessage(BaseModel):
    """One entry in the conversation."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Unique message ID")
    text: str = Field(description="Message body")
    is_user: bool = Field(description="True for user messages")
    timestamp: datetime = Field(default_factory=datetime.now, description="Creation time")
    graph_data: Optional[Subgraph] = Field(default=None, description="Subgraph behind a bot answer")
    is_error: bool = Field(default=False, description="Bot message reports a failure")


def make_user_message(text: str) -> ChatMessage:
    return ChatMessage(text=text, is_user=True)


def make_bot_message(response: ChatResponse) -> ChatMessage:
    """Bot message for a chat turn; the subgraph is attached only on success."""
    return ChatMessage(
        text=response.text,
        is_user=False,
        graph_data=None if response.is_error else response.subgraph,
        is_error=response.is_error,
    )


def make_welcome_message() -> ChatMessage:
    return ChatMessage(text=WELCOME_TEXT, is_user=False)


def render_chat_history(messages: List[ChatMessage], layout: str = "cose") -> None:
    """Render chat message history in order.

    Args:
        messages: Conversation messages (oldest first)
        layout: Cytoscape layout for subgraph panels
    """
    for message in messages:
        render_chat_message(message, layout=layout)


def render_chat_message(message: ChatMessage, layout: str = "cose") -> None:
    role = "user" if message.is_user else "assistant"
    with st.chat_message(role):
        if message.is_error:
            st.error(message.text)
        else:
            st.markdown(message.text)
        st.caption(message.timestamp.strftime("%H:%M"))

        if message.graph_data is not None:
            render_subgraph_panel(message.graph_data, key_prefix=message.id, layout=layout)


def render_subgraph_panel(subgraph: Subgraph, key_prefix: str, layout: str = "cose") -> None:
    """Render the knowledge subgraph behind an answer.

    Args:
        subgraph: Subgraph attached to a bot message
        key_prefix: Unique widget key prefix (message ID)
        layout: Cytoscape layout name
    """
    if subgraph.is_empty:
        st.info(":material/info: No matching entities were found in the knowledge graph for this question.")
        return

    with st.container(border=True):
        st.markdown(
            f"**:material/hub: Knowledge graph** ({len(subgraph.nodes)} nodes, {len(subgraph.edges)} edges)"
        )
        graph = subgraph.to_networkx()
        viz_data = render_network_visualization(graph, layout=layout)
        if not viz_data:
            st.warning("Failed to prepare graph visualization")
            return

        try:
            streamlit_cytoscape(
                viz_data["elements"],
                layout=viz_data["layout"],
                node_styles=viz_data["node_styles"],
                edge_styles=viz_data["edge_styles"],
                key=f"subgraph_{key_prefix}",
            )
        except Exception as e:
            logger.error(f"Failed to render subgraph: {e}")
            st.error(f"Failed to render graph: {e}")
            return

        render_legend(subgraph)

        st.caption("""
        **:material/lightbulb: How to explore:**
        - **Drag** to pan • **Scroll** to zoom • **Click** node or edge to view information
        - **Fullscreen** in top-right • **Download** JSON or PNG below
        """)

        with st.expander(":material/table: Entities", expanded=False):
            render_node_table(subgraph)
        render_node_details(subgraph, graph, key_prefix)
        render_export_buttons(subgraph, key_prefix)


def render_legend(subgraph: Subgraph) -> None:
    """Color legend for the entity types present in the subgraph."""
    counts = subgraph.type_counts()
    items = []
    for node_type, color in TYPE_COLORS.items():
        if node_type in counts:
            items.append(
                f'<span style="color:{color}">&#9679;</span> {node_type.capitalize()} ({counts[node_type]})'
            )
    if items:
        st.markdown(" &nbsp; ".join(items), unsafe_allow_html=True)


def render_node_table(subgraph: Subgraph) -> None:
    """Tabular view of the subgraph entities."""
    anchors = set(subgraph.anchor_ids)
    df = pd.DataFrame([
        {
            "Name": node.label or node.id,
            "Type": node.type.capitalize(),
            "ID": node.id,
            "Anchor": node.id in anchors,
            "Description": node.description or "",
        }
        for node in subgraph.nodes
    ])
    st.dataframe(df, width="stretch", hide_index=True)


def render_node_details(subgraph: Subgraph, graph, key_prefix: str) -> None:
    options = {f"{node.label or node.id} ({node.type})": node.id for node in subgraph.nodes}
    choice = st.selectbox(
        "Node details",
        options=["-"] + list(options.keys()),
        index=0,
        key=f"node_details_{key_prefix}",
    )
    if choice == "-":
        return

    details = get_node_details(options[choice], graph)
    if "error" in details:
        st.warning(details["error"])
        return

    st.markdown(f"**{details['label']}** · `{details['node_id']}` · {details['type']}")
    if details["description"]:
        st.write(details["description"])
    if details["aliases"]:
        st.caption(f"Also known as: {', '.join(details['aliases'])}")
    for key, value in details["properties"].items():
        st.caption(f"{key}: {value}")
    for relation, neighbors in details["edges_by_relation"].items():
        names = ", ".join(n["label"] for n in neighbors)
        st.markdown(f"- *{relation}*: {names}")


@st.cache_data(show_spinner=False, max_entries=64)
def subgraph_png_from_snapshot(snapshot_json: str) -> bytes:
    """PNG bytes for an exported snapshot, cached across reruns."""
    return render_subgraph_image(load_subgraph_json(snapshot_json))


def render_export_buttons(subgraph: Subgraph, key_prefix: str) -> None:
    snapshot_json = export_subgraph_json(subgraph)
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label=":material/download: Export JSON",
            data=snapshot_json,
            file_name=JSON_EXPORT_FILENAME,
            mime="application/json",
            key=f"export_json_{key_prefix}",
        )
    with col2:
        try:
            png_bytes = subgraph_png_from_snapshot(snapshot_json)
        except Exception as e:
            logger.error(f"Failed to render PNG export: {e}")
            st.caption("PNG export unavailable")
            return
        st.download_button(
            label=":material/image: Export PNG",
            data=png_bytes,
            file_name=PNG_EXPORT_FILENAME,
            mime="image/png",
            key=f"export_png_{key_prefix}",
        )


def render_example_questions(disabled: bool = False) -> Optional[str]:
    """Render example question buttons.

    Args:
        disabled: Disable the buttons (while a turn is in flight)

    Returns:
        Selected example question or None
    """
    selected = None
    for i, question in enumerate(EXAMPLE_QUESTIONS):
        if st.button(question, key=f"example_question_{i}", disabled=disabled, width="stretch"):
            selected = question
    return selected


def render_token_usage(input_tokens: int, output_tokens: int) -> None:
    """Render token usage for the last answer."""
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Input tokens", f"{input_tokens:,}", border=True)
    with col2:
        st.metric("Output tokens", f"{output_tokens:,}", border=True)
