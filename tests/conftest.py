"""Shared pytest fixtures."""

import pytest

from fixtures import sample_graph_data
from oncograph.config.settings import DEFAULT_KNOWLEDGE_GRAPH_PATH
from oncograph.core import IntentClassifier, KnowledgeStore, SubgraphExtractor, load_lexicon


@pytest.fixture(scope="session")
def lexicon():
    return load_lexicon()


@pytest.fixture
def classifier(lexicon):
    return IntentClassifier(lexicon)


@pytest.fixture
def sample_store():
    return KnowledgeStore.from_dict(sample_graph_data())


@pytest.fixture
def extractor(sample_store, classifier):
    return SubgraphExtractor(sample_store, classifier)


@pytest.fixture(scope="session")
def bundled_store():
    return KnowledgeStore.from_json_file(DEFAULT_KNOWLEDGE_GRAPH_PATH)


@pytest.fixture
def bundled_extractor(bundled_store, classifier):
    return SubgraphExtractor(bundled_store, classifier)
