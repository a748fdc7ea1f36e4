"""Query intent analysis for knowledge graph retrieval.

Infers from free text:
- Which entity types the user wants (keyword families)
- Which known gene symbols were named explicitly
- Whether a single result was asked for ("one gene", "which gene", ...)
- Whether the question is about a disease, a specific entity, or general

All vocabulary comes from the lexicon YAML so gene lists and disease tables
can be edited without code changes.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field

from ..config.settings import DEFAULT_LEXICON_PATH

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


class Lexicon(BaseModel):
    """Vocabulary for intent classification and fallback gene lookup."""

    singular_phrases: List[str] = Field(default_factory=list, description="Phrases asking for one result")
    known_genes: List[str] = Field(default_factory=list, description="Gene symbol allow-list (ordered)")
    type_keywords: Dict[str, List[str]] = Field(
        default_factory=dict, description="Entity type -> trigger keywords (ordered)"
    )
    default_types: List[str] = Field(
        default_factory=lambda: ["gene", "pathway", "drug", "biomarker"],
        description="Types shown when nothing more specific was asked",
    )
    disease_phrases: List[str] = Field(default_factory=list, description="Cancer-type phrases")
    specific_terms: List[str] = Field(default_factory=list, description="Biological vocabulary")
    disease_genes: Dict[str, List[str]] = Field(
        default_factory=dict, description="Disease phrase -> candidate genes (ordered)"
    )


def load_lexicon(path: Optional[Path] = None) -> Lexicon:
    """Load the lexicon YAML.

    Args:
        path: Lexicon file; defaults to the bundled config/lexicon.yaml

    Returns:
        Lexicon instance
    """
    path = path or DEFAULT_LEXICON_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    lexicon = Lexicon.model_validate(data)
    logger.info(
        f"Lexicon loaded from {path}: {len(lexicon.known_genes)} genes, "
        f"{len(lexicon.disease_genes)} disease gene lists"
    )
    return lexicon


class QueryIntent(BaseModel):
    """Structured guess at what a query asks for."""

    wanted_types: List[str] = Field(default_factory=list, description="Requested entity types (ordered)")
    context_kind: Literal["disease", "specific", "general"] = Field(
        default="general", description="What kind of anchor to look for"
    )
    include_anchor: bool = Field(default=False, description="Include the anchor node in the result")
    explicit_gene_names: List[str] = Field(default_factory=list, description="Known genes named in the query")
    single_result_only: bool = Field(default=False, description="User asked for exactly one result")

    @property
    def wants_single_gene(self) -> bool:
        return self.single_result_only and "gene" in self.wanted_types


class IntentClassifier:
    """Keyword-based intent classifier.

    Example:
        >>> classifier = IntentClassifier(load_lexicon())
        >>> intent = classifier.classify("What is EGFR?")
        >>> intent.explicit_gene_names
        ['EGFR']
    """

    def __init__(self, lexicon: Lexicon):
        self.lexicon = lexicon

    def classify(self, query: str) -> QueryIntent:
        """Classify a free-text query. Never raises.

        Args:
            query: Raw user text

        Returns:
            QueryIntent
        """
        query_lower = (query or "").lower()
        tokens = set(_TOKEN_PATTERN.findall(query_lower))

        single_result_only = any(_contains_phrase(query_lower, p) for p in self.lexicon.singular_phrases)

        # Allow-list order, not query order
        explicit_genes = [gene for gene in self.lexicon.known_genes if gene.lower() in tokens]
        if single_result_only and len(explicit_genes) > 1:
            logger.debug(f"Single result requested, keeping {explicit_genes[0]} of {explicit_genes}")
            explicit_genes = explicit_genes[:1]

        wanted_types: List[str] = []
        include_anchor = False
        for entity_type, keywords in self.lexicon.type_keywords.items():
            if any(_contains_keyword(query_lower, keyword) for keyword in keywords):
                wanted_types.append(entity_type)
                include_anchor = True

        if any(_contains_phrase(query_lower, p) for p in self.lexicon.disease_phrases):
            context_kind = "disease"
        elif explicit_genes or self._has_specific_terms(query_lower):
            context_kind = "specific"
        else:
            context_kind = "general"

        if explicit_genes:
            if not wanted_types:
                wanted_types = list(self.lexicon.default_types)
            include_anchor = True

        if not wanted_types:
            wanted_types = list(self.lexicon.default_types)
            include_anchor = True

        intent = QueryIntent(
            wanted_types=wanted_types,
            context_kind=context_kind,
            include_anchor=include_anchor,
            explicit_gene_names=explicit_genes,
            single_result_only=single_result_only,
        )
        logger.debug(f"Query intent: {intent.model_dump()}")
        return intent

    def _has_specific_terms(self, query_lower: str) -> bool:
        return any(_contains_phrase(query_lower, term) for term in self.lexicon.specific_terms)


def _contains_phrase(text: str, phrase: str) -> bool:
    """Whole-word containment ("gene" matches "a gene" but not "general")."""
    return re.search(rf"\b{re.escape(phrase.lower())}\b", text) is not None


def _contains_keyword(text: str, keyword: str) -> bool:
    """Whole-word containment allowing a plural suffix ("treatments", "markers")."""
    return re.search(rf"\b{re.escape(keyword.lower())}(?:s|es)?\b", text) is not None
