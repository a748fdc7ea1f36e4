"""OncoGraph - Streamlit Application

Chat assistant for cancer biology questions, grounded in a curated oncology
knowledge graph. Every answer shows the subgraph it was based on.
"""

import streamlit as st
import logging

from oncograph import __version__
from oncograph.config import Settings, get_settings, setup_logging
from oncograph.core import (
    ChatOrchestrator,
    IntentClassifier,
    KnowledgeStore,
    SubgraphExtractor,
    load_lexicon,
)
from oncograph.ui import (
    make_bot_message,
    make_user_message,
    render_chat_history,
    render_example_questions,
)
from oncograph.ui.rag_chat import make_welcome_message, render_token_usage
from oncograph.utils import ValidationError, validate_api_key, validate_query

settings = get_settings()
setup_logging(level=settings.log_level, log_file=settings.log_file)
logger = logging.getLogger(__name__)

# Page config
st.set_page_config(
    page_title="OncoGraph",
    page_icon=":material/biotech:",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def build_services(_settings: Settings):
    """Load the knowledge graph and wire the chat pipeline (once per process)."""
    store = KnowledgeStore.from_json_file(_settings.knowledge_graph_path)
    classifier = IntentClassifier(load_lexicon(_settings.lexicon_path))
    extractor = SubgraphExtractor(store, classifier, quota_policy=_settings.quota_policy)
    orchestrator = ChatOrchestrator.from_settings(_settings, extractor)
    return store, orchestrator


store, orchestrator = build_services(settings)

# Initialize session state
if 'messages' not in st.session_state:
    st.session_state.messages = [make_welcome_message()]
if 'is_processing' not in st.session_state:
    st.session_state.is_processing = False
if 'pending_query' not in st.session_state:
    st.session_state.pending_query = None
if 'last_usage' not in st.session_state:
    st.session_state.last_usage = None


def submit_query(text: str) -> None:
    """Append the user's message and schedule the answer for the next run."""
    try:
        query = validate_query(text)
    except ValidationError:
        return
    if st.session_state.is_processing:
        return
    st.session_state.messages.append(make_user_message(query))
    st.session_state.pending_query = query
    st.session_state.is_processing = True
    # Re-run so the input renders disabled while the answer is computed
    st.rerun()


# Sidebar
st.sidebar.header(":material/biotech: OncoGraph")
st.sidebar.caption(f"v{__version__} · {settings.claude_model}")

try:
    validate_api_key(settings.anthropic_api_key, settings.api_key_prefix)
except ValidationError as e:
    st.sidebar.warning(f":material/key: {e}")

st.sidebar.subheader(":material/hub: Knowledge Graph")
col1, col2 = st.sidebar.columns(2)
with col1:
    st.metric("Nodes", store.num_nodes, border=True)
with col2:
    st.metric("Edges", store.num_edges, border=True)

if store.num_nodes == 0:
    st.sidebar.error("Knowledge graph could not be loaded. Answers will have no graph context.")
else:
    with st.sidebar.expander("Entity types"):
        for node_type, count in sorted(store.type_counts().items()):
            st.write(f"**{node_type.capitalize()}**: {count}")

st.sidebar.markdown("---")
st.sidebar.subheader(":material/lightbulb: Try asking")
example = render_example_questions(disabled=st.session_state.is_processing)
if example:
    submit_query(example)

st.sidebar.markdown("---")
if st.sidebar.button(":material/delete: Clear chat", disabled=st.session_state.is_processing):
    st.session_state.messages = [make_welcome_message()]
    st.session_state.last_usage = None
    st.rerun()

if settings.show_debug_info and st.session_state.last_usage:
    with st.sidebar.expander(":material/bug_report: Debug"):
        render_token_usage(*st.session_state.last_usage)

# Main area
st.title(":material/biotech: OncoGraph")
st.caption("Ask about cancer genes, pathways, drugs and biomarkers. Answers are grounded in a curated knowledge graph.")

typed = st.chat_input(
    "Ask about genes, pathways, drugs...",
    disabled=st.session_state.is_processing,
)
if typed:
    submit_query(typed)

render_chat_history(st.session_state.messages, layout=settings.graph_layout)

if st.session_state.is_processing and st.session_state.pending_query:
    with st.chat_message("assistant"):
        with st.spinner("Searching the knowledge graph and asking Claude..."):
            response = orchestrator.answer(st.session_state.pending_query)

    st.session_state.messages.append(make_bot_message(response))
    if not response.is_error:
        st.session_state.last_usage = (response.input_tokens, response.output_tokens)
    st.session_state.pending_query = None
    st.session_state.is_processing = False
    st.rerun()

# Footer
st.markdown("---")
st.caption("OncoGraph | Streamlit + NetworkX + Claude | For research and education, not medical advice")
