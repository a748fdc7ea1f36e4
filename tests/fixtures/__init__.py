"""Test fixtures for OncoGraph tests.

Contains:
- sample_graph_data(): small hand-built knowledge graph with known edge order
- hub_graph_data(): one disease connected to many entities of every type
- FAKE_API_KEY: well-formed key that never reaches the network
"""

FAKE_API_KEY = "sk-ant-test-0000000000"


def _node(node_id, label, node_type, **properties):
    return {"id": node_id, "label": label, "type": node_type, "properties": properties}


def _edge(source, target, relation):
    return {"source": source, "target": target, "relation": relation}


def sample_graph_data():
    """Knowledge graph document used across extraction tests.

    Edge order matters: extraction fills caps in data-file order.
    """
    nodes = [
        _node("disease:lung_cancer", "Lung Cancer", "disease", aliases=["NSCLC"],
              description="Malignant neoplasm of the lung"),
        _node("disease:breast_cancer", "Breast Cancer", "disease"),
        _node("gene:EGFR", "EGFR", "gene", aliases=["ERBB1", "HER1"],
              description="Epidermal growth factor receptor"),
        _node("gene:KRAS", "KRAS", "gene"),
        _node("gene:BRCA1", "BRCA1", "gene"),
        _node("gene:ERBB2", "ERBB2", "gene", aliases=["HER2"]),
        _node("pathway:mapk", "MAPK Pathway", "pathway"),
        _node("pathway:pi3k", "PI3K Pathway", "pathway"),
        _node("drug:osimertinib", "Osimertinib", "drug"),
        _node("drug:gefitinib", "Gefitinib", "drug"),
        _node("drug:erlotinib", "Erlotinib", "drug"),
        _node("drug:afatinib", "Afatinib", "drug"),
        _node("drug:dacomitinib", "Dacomitinib", "drug"),
        _node("drug:trastuzumab", "Trastuzumab", "drug"),
        _node("drug:sotorasib", "Sotorasib", "drug"),
        _node("biomarker:her2", "HER2", "biomarker"),
        _node("biomarker:egfr_mutation", "EGFR Mutation", "biomarker"),
    ]
    edges = [
        _edge("gene:EGFR", "disease:lung_cancer", "associated_with"),
        _edge("gene:KRAS", "disease:lung_cancer", "associated_with"),
        _edge("drug:osimertinib", "gene:EGFR", "targets"),
        _edge("drug:gefitinib", "gene:EGFR", "targets"),
        _edge("drug:erlotinib", "gene:EGFR", "targets"),
        _edge("drug:afatinib", "gene:EGFR", "targets"),
        _edge("gene:EGFR", "pathway:mapk", "participates_in"),
        _edge("gene:EGFR", "pathway:pi3k", "participates_in"),
        _edge("gene:KRAS", "pathway:mapk", "participates_in"),
        _edge("drug:osimertinib", "disease:lung_cancer", "treats"),
        _edge("drug:gefitinib", "disease:lung_cancer", "treats"),
        _edge("drug:erlotinib", "disease:lung_cancer", "treats"),
        _edge("drug:afatinib", "disease:lung_cancer", "treats"),
        _edge("drug:dacomitinib", "disease:lung_cancer", "treats"),
        _edge("biomarker:egfr_mutation", "gene:EGFR", "measures"),
        _edge("biomarker:egfr_mutation", "disease:lung_cancer", "biomarker_for"),
        _edge("gene:BRCA1", "disease:breast_cancer", "associated_with"),
        _edge("gene:ERBB2", "disease:breast_cancer", "associated_with"),
        _edge("drug:trastuzumab", "gene:ERBB2", "targets"),
        _edge("biomarker:her2", "gene:ERBB2", "measures"),
        _edge("gene:EGFR", "gene:ERBB2", "interacts_with"),
        _edge("drug:dacomitinib", "gene:EGFR", "targets"),
        _edge("drug:sotorasib", "gene:KRAS", "targets"),
    ]
    return {"meta": {"description": "Sample oncology graph"}, "nodes": nodes, "edges": edges}


def hub_graph_data(per_type=5):
    """Melanoma connected to `per_type` genes, drugs, pathways and biomarkers."""
    nodes = [_node("disease:melanoma", "Melanoma", "disease")]
    edges = []
    for node_type in ("gene", "drug", "pathway", "biomarker"):
        for i in range(per_type):
            node_id = f"{node_type}:{node_type}{i}"
            nodes.append(_node(node_id, f"{node_type.upper()}{i}", node_type))
            edges.append(_edge(node_id, "disease:melanoma", "associated_with"))
    return {"meta": {}, "nodes": nodes, "edges": edges}
