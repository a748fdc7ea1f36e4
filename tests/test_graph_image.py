"""Tests for PNG rendering of subgraphs."""

from unittest.mock import patch

import matplotlib.pyplot as plt
import pytest

from oncograph.core import Subgraph
from oncograph.ui.graph_image import PNG_EXPORT_FILENAME, render_subgraph_image

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


class TestRenderSubgraphImage:
    """Test suite for render_subgraph_image."""

    def test_renders_png(self, extractor):
        image = render_subgraph_image(extractor.query_knowledge_graph("What is EGFR?"))
        assert image.startswith(PNG_MAGIC)
        assert len(image) > 1000

    def test_single_node(self, extractor):
        image = render_subgraph_image(extractor.query_knowledge_graph("One gene related to breast cancer"))
        assert image.startswith(PNG_MAGIC)

    def test_empty_placeholder(self):
        assert render_subgraph_image(Subgraph()).startswith(PNG_MAGIC)

    def test_figures_released(self, extractor):
        before = set(plt.get_fignums())
        render_subgraph_image(extractor.query_knowledge_graph("What is EGFR?"))
        render_subgraph_image(Subgraph())
        assert set(plt.get_fignums()) == before

    def test_figure_closed_when_drawing_fails(self, extractor):
        """Test that a drawing error does not leave the figure open."""
        subgraph = extractor.query_knowledge_graph("What is EGFR?")
        before = set(plt.get_fignums())

        with patch("oncograph.ui.graph_image.nx.draw_networkx_edge_labels", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                render_subgraph_image(subgraph)

        assert set(plt.get_fignums()) == before

    def test_export_filename(self):
        assert PNG_EXPORT_FILENAME == "knowledge-graph.png"
