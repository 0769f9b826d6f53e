"""Dynamic-programming alignment of PQ-trees against gene sequences."""

from pqalign.node_mapping.algorithm import NodeMappingAlgorithm
from pqalign.node_mapping.builder import build_mapping_algorithm
from pqalign.node_mapping.table import MappingTable

__all__ = [
    "NodeMappingAlgorithm",
    "build_mapping_algorithm",
    "MappingTable",
]
