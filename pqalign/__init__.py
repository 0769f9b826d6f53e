"""Alignment of PQ-trees of gene labels against gene sequences."""

__all__ = [
    "GeneGroup",
    "Strand",
    "Node",
    "NodeKind",
    "Mapping",
    "NodeMappingAlgorithm",
    "build_mapping_algorithm",
    "parse_paren",
]


def __getattr__(name):
    if name in {"GeneGroup", "Strand"}:
        from .elements.gene_group import GeneGroup, Strand

        return locals()[name]
    if name in {"Node", "NodeKind"}:
        from .tree import Node, NodeKind

        return locals()[name]
    if name == "Mapping":
        from .mapping import Mapping

        return Mapping
    if name in {"NodeMappingAlgorithm", "build_mapping_algorithm"}:
        from .node_mapping import NodeMappingAlgorithm, build_mapping_algorithm

        return locals()[name]
    if name == "parse_paren":
        from .parser import parse_paren

        return parse_paren
    raise AttributeError(name)
