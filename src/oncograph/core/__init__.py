"""Core modules for OncoGraph.

Contains the main business logic:
- Knowledge store (bundled graph, adjacency index)
- Intent classifier and subgraph extractor
- Prompt formatter and Claude chat orchestrator
"""

from .knowledge_store import KnowledgeStore, KnowledgeNode, KnowledgeEdge, ENTITY_TYPES
from .intent_classifier import IntentClassifier, QueryIntent, Lexicon, load_lexicon
from .subgraph_extractor import SubgraphExtractor, Subgraph
from .prompt_formatter import format_knowledge_context, NO_INFORMATION_FOUND
from .chat_orchestrator import ChatOrchestrator, ChatResponse, classify_error

__all__ = [
    "KnowledgeStore",
    "KnowledgeNode",
    "KnowledgeEdge",
    "ENTITY_TYPES",
    "IntentClassifier",
    "QueryIntent",
    "Lexicon",
    "load_lexicon",
    "SubgraphExtractor",
    "Subgraph",
    "format_knowledge_context",
    "NO_INFORMATION_FOUND",
    "ChatOrchestrator",
    "ChatResponse",
    "classify_error",
]
