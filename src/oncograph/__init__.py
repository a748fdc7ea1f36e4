"""OncoGraph Knowledge Assistant.

Chat over a curated oncology knowledge graph: retrieves a bounded subgraph for
each question, passes it to Claude as context, and renders it as an
interactive network.
"""

__version__ = "0.1.0"
