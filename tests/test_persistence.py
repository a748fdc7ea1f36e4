"""Tests for subgraph JSON export and import."""

import json

import pytest

from oncograph.core import Subgraph
from oncograph.utils.persistence import (
    JSON_EXPORT_FILENAME,
    PersistenceError,
    export_subgraph_json,
    load_subgraph_json,
)


class TestExportSubgraph:
    """Test suite for JSON export."""

    def test_export_document_shape(self, extractor):
        subgraph = extractor.query_knowledge_graph("Drugs for lung cancer")
        data = json.loads(export_subgraph_json(subgraph))

        assert [node["id"] for node in data["nodes"]][0] == "disease:lung_cancer"
        assert len(data["edges"]) == 4
        assert data["anchor_ids"] == ["disease:lung_cancer"]
        assert data["path"] == "anchored"

    def test_export_is_indented(self, extractor):
        text = export_subgraph_json(extractor.query_knowledge_graph("What is EGFR?"))
        assert text.startswith("{\n  ")

    def test_export_empty(self):
        data = json.loads(export_subgraph_json(Subgraph()))
        assert data["nodes"] == [] and data["edges"] == []

    def test_export_filename(self):
        assert JSON_EXPORT_FILENAME == "knowledge-graph.json"

    def test_reload_exported_snapshot(self, extractor):
        subgraph = extractor.query_knowledge_graph("What is HER2?")
        restored = load_subgraph_json(export_subgraph_json(subgraph))

        assert [node.id for node in restored.nodes] == [node.id for node in subgraph.nodes]
        assert restored.edges == subgraph.edges
        assert restored.path == subgraph.path


class TestLoadSubgraph:
    """Test suite for snapshot parsing errors."""

    def test_invalid_json(self):
        with pytest.raises(PersistenceError, match="not valid JSON"):
            load_subgraph_json("{nodes:")

    def test_wrong_shape(self):
        with pytest.raises(PersistenceError):
            load_subgraph_json(json.dumps({"nodes": {}}))

    def test_malformed_records(self):
        with pytest.raises(PersistenceError, match="malformed"):
            load_subgraph_json(json.dumps({"nodes": [{"label": "no id"}], "edges": []}))

    def test_missing_optional_fields(self):
        restored = load_subgraph_json(json.dumps({
            "nodes": [{"id": "gene:TP53", "label": "TP53", "type": "gene"}],
            "edges": [],
        }))
        assert restored.anchor_ids == []
        assert restored.path == "empty"
