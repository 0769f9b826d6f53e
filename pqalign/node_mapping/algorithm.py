"""
Alignment of a PQ-tree against a gene sequence.

``NodeMappingAlgorithm`` computes, bottom-up over the tree, every way of
matching each subtree to a substring of the sequence within the tree- and
string-deletion budgets, and keeps the root's mappings indexed by the end point
of their substring.
"""

from __future__ import annotations
import logging
import math
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from pqalign.elements.gene_group import GeneGroup
from pqalign.exceptions import TreeStructureError
from pqalign.logger import mapping_logger, mapping_rows
from pqalign.mapping import Mapping
from pqalign.node_mapping.ordered_combination import combine_ordered
from pqalign.node_mapping.partial_cover import CoverExtender
from pqalign.node_mapping.table import MappingTable
from pqalign.node_mapping.unordered_combination import combine_unordered
from pqalign.tree import Node, NodeKind

logger = logging.getLogger(__name__)


class NodeMappingAlgorithm:
    """
    Maps a PQ-tree to every substring of a gene sequence it can derive.

    Args:
        string: The gene sequence. Positions in results are 1-based.
        node: Root of the PQ-tree to map.
        tree_deletion_limit: Maximum number of deleted leaves per mapping.
        string_deletion_limit: Maximum number of deleted genes per mapping.
        substitution_function: ``substitution_function(A, B)`` scores matching
            the leaf label A with the gene B; ``-inf`` forbids the pair.
        deletion_cost: Non-negative cost of deleting a leaf label or a gene.

    Raises:
        ValueError: On negative deletion limits.
        TypeError: If a scoring function is not callable.
        TreeStructureError: If ``node`` is not a valid PQ-tree.
    """

    def __init__(
        self,
        string: Sequence[GeneGroup],
        node: Node,
        tree_deletion_limit: int,
        string_deletion_limit: int,
        substitution_function: Callable[[GeneGroup, GeneGroup], float],
        deletion_cost: Callable[[GeneGroup], float],
    ):
        if tree_deletion_limit < 0:
            raise ValueError(f"tree_deletion_limit must be non-negative, got {tree_deletion_limit}")
        if string_deletion_limit < 0:
            raise ValueError(
                f"string_deletion_limit must be non-negative, got {string_deletion_limit}"
            )
        if not callable(substitution_function) or not callable(deletion_cost):
            raise TypeError("substitution_function and deletion_cost must be callable")
        node.validate()

        self.string: List[GeneGroup] = list(string)
        self.node = node
        self.tree_deletion_limit = tree_deletion_limit
        self.string_deletion_limit = string_deletion_limit
        self.substitution_function = substitution_function
        self.deletion_cost = deletion_cost
        # end point -> mappings of ``node`` to substrings ending there
        self.result_mappings_by_end_points: Dict[int, List[Mapping]] = {}

    # ------------------------------------------------------------------------
    # Dynamic program
    # ------------------------------------------------------------------------

    @mapping_logger.log_execution
    def run_algorithm(self) -> None:
        """
        Fill ``result_mappings_by_end_points`` with all mappings of the root.

        Node tables live only for the duration of the run; the root's mappings
        keep references to the child mappings they are built from.
        """
        node_count = self.node.index_nodes()
        logger.info(
            f"Mapping tree with {self.node.leaf_count} leaves onto {len(self.string)} genes "
            f"(tree deletions <= {self.tree_deletion_limit}, "
            f"string deletions <= {self.string_deletion_limit})"
        )

        extender = CoverExtender(
            len(self.string),
            self.tree_deletion_limit,
            self.string_deletion_limit,
            self._deletion_prefix(),
        )
        substitution_cache: Dict[GeneGroup, np.ndarray] = {}
        tables: List[Optional[MappingTable]] = [None] * node_count

        for node in self.node.traverse():
            if node.kind is NodeKind.LEAF:
                table = self._map_leaf(node, substitution_cache)
            else:
                child_tables = [tables[child.index] for child in node.children]
                if node.kind is NodeKind.ORDER_FIXED:
                    table = combine_ordered(node, child_tables, extender)
                elif node.kind is NodeKind.ORDER_FREE:
                    table = combine_unordered(node, child_tables, extender)
                else:
                    raise TreeStructureError(f"Unsupported node kind: {node.kind!r}")
                for child in node.children:
                    tables[child.index] = None
            tables[node.index] = table
            self._trace_table(node, table)

        root_table = tables[self.node.index]
        self.result_mappings_by_end_points = root_table.by_end_points()
        logger.info(f"Found {len(root_table)} mappings over {len(self.result_mappings_by_end_points)} end points")

    def _deletion_prefix(self) -> np.ndarray:
        costs = np.fromiter(
            (self.deletion_cost(gene) for gene in self.string),
            dtype=float,
            count=len(self.string),
        )
        if costs.size and (not np.all(np.isfinite(costs)) or np.any(costs < 0)):
            raise ValueError("Deletion costs must be finite and non-negative")
        return np.concatenate(([0.0], np.cumsum(costs)))

    def _substitution_scores(
        self, label: GeneGroup, cache: Dict[GeneGroup, np.ndarray]
    ) -> np.ndarray:
        scores = cache.get(label)
        if scores is None:
            scores = np.fromiter(
                (self.substitution_function(label, gene) for gene in self.string),
                dtype=float,
                count=len(self.string),
            )
            cache[label] = scores
        return scores

    def _map_leaf(self, leaf: Node, cache: Dict[GeneGroup, np.ndarray]) -> MappingTable:
        table = MappingTable(leaf)
        scores = self._substitution_scores(leaf.label, cache)
        for position in np.flatnonzero(np.isfinite(scores)):
            table.add(Mapping.leaf_substitution(leaf, int(position) + 1, float(scores[position])))

        if self.tree_deletion_limit >= 1:
            cost = float(self.deletion_cost(leaf.label))
            if not math.isfinite(cost) or cost < 0:
                raise ValueError(f"Deletion cost of {leaf.label} must be finite and non-negative")
            table.add(Mapping.leaf_deletion(leaf, cost))
        return table

    def _trace_table(self, node: Node, table: MappingTable) -> None:
        if mapping_logger.disabled:
            return
        best = sorted(table, key=lambda m: m.sort_key, reverse=True)[:10]
        mapping_logger.table(
            mapping_rows(best),
            headers=["span", "score", "tree del.", "string del.", "deleted genes"],
            title=f"{node!r} (#{node.index}): {len(table)} mappings, best {len(best)}",
        )

    # ------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------

    def _all_results(self) -> List[Mapping]:
        return [
            mapping
            for mappings in self.result_mappings_by_end_points.values()
            for mapping in mappings
            if mapping is not None and math.isfinite(mapping.score)
        ]

    def best_mapping(self) -> Optional[Mapping]:
        """
        The best mapping by ``Mapping.sort_key``.

        Returns:
            None if ``run_algorithm`` was not called or no mapping fits the budgets.
        """
        return max(self._all_results(), key=lambda m: m.sort_key, default=None)

    def all_mappings(self, threshold: float = -math.inf) -> List[Mapping]:
        """Every mapping scoring strictly above ``threshold``, best first."""
        mappings = [m for m in self._all_results() if m.score > threshold]
        return sorted(mappings, key=lambda m: m.sort_key, reverse=True)

    def best_distinct_mappings(self, threshold: float = -math.inf) -> List[Mapping]:
        """
        The best mapping per end point, then the best of those per start index.

        Reports separate occurrences of the tree along a long sequence instead
        of many overlapping variants of the same hit. The mapping that deletes
        the whole tree matches no substring and is never an occurrence.
        """
        non_empty = {
            end_point: [m for m in mappings if not m.is_empty]
            for end_point, mappings in self.result_mappings_by_end_points.items()
        }
        best_per_end = _best_of_each_group(non_empty, threshold)
        by_start: Dict[int, List[Mapping]] = defaultdict(list)
        for mapping in best_per_end:
            by_start[mapping.start_index].append(mapping)
        best_per_start = _best_of_each_group(by_start, threshold)
        return sorted(best_per_start, key=lambda m: m.sort_key, reverse=True)

    def best_string_index_to_leaf_mapping(self) -> Optional[Dict[int, Node]]:
        """String position -> leaf for the best mapping, None when there is none."""
        best = self.best_mapping()
        if best is None:
            return None
        return best.one_to_one_mapping_by_string_indices()

    @staticmethod
    def one_to_one_leaf_mapping(mapping: Mapping) -> Dict[Node, int]:
        return mapping.one_to_one_mapping_by_leafs()

    def log_result_mappings(self) -> None:
        """Write the result table to the trace logger, one section per end point."""
        for end_point, mappings in self.result_mappings_by_end_points.items():
            mapping_logger.subsection(f"End point {end_point}")
            mapping_logger.table(
                mapping_rows(mappings),
                headers=["span", "score", "tree del.", "string del.", "deleted genes"],
            )


def _best_of_each_group(
    groups: Dict[int, List[Mapping]], threshold: float
) -> List[Mapping]:
    best: List[Mapping] = []
    for mappings in groups.values():
        candidate = max(
            (m for m in mappings if m is not None and math.isfinite(m.score)),
            key=lambda m: m.sort_key,
            default=None,
        )
        if candidate is not None and candidate.score > threshold:
            best.append(candidate)
    return best
