"""Alignment results of a subtree against a substring of the gene sequence."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Tuple

from pqalign.tree import Node


@dataclass(frozen=True, eq=False, repr=False)
class Mapping:
    """
    One way of aligning the subtree rooted at ``node`` to ``S[start_index:end_index]``.

    Positions are 1-based and inclusive. ``start_index > end_index`` denotes the
    empty match, in which every leaf of the subtree is deleted.

    ``children_mappings[k]`` is the mapping chosen for ``node.children[k]``,
    whatever the order in which the children appear along the string.
    ``gap_indices`` holds the string positions this node deleted between the
    runs of its children; deletions made deeper in the subtree live in the
    children's mappings.

    Mappings are created by the alignment engine and never mutated.
    """

    node: Node
    score: float
    start_index: int
    end_index: int
    children_mappings: Tuple[Mapping, ...] = ()
    gap_indices: FrozenSet[int] = frozenset()
    tree_deletions: int = 0
    string_deletions: int = 0
    is_reversed: bool = False

    # ------------------------------------------------------------------------
    # Leaf constructors
    # ------------------------------------------------------------------------

    @classmethod
    def leaf_substitution(cls, leaf: Node, position: int, score: float) -> Mapping:
        return cls(leaf, score, position, position)

    @classmethod
    def leaf_deletion(cls, leaf: Node, cost: float) -> Mapping:
        return cls(leaf, -cost, 1, 0, tree_deletions=1)

    # ------------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return self.start_index > self.end_index

    @property
    def length(self) -> int:
        return max(0, self.end_index - self.start_index + 1)

    @property
    def sort_key(self) -> Tuple[float, bool, int, int, int, int]:
        """
        Ordering key, larger is better.

        Higher score first; ties prefer a real match over deleting the whole
        subtree, then the narrower substring, then the smaller start index,
        then fewer tree and string deletions.
        """
        return (
            self.score,
            not self.is_empty,
            -self.length,
            -self.start_index,
            -self.tree_deletions,
            -self.string_deletions,
        )

    @property
    def deleted_descendants(self) -> List[Node]:
        """Leaves of the subtree that are deleted in this mapping, left to right."""
        if self.node.is_leaf:
            return [self.node] if self.is_empty else []
        deleted: List[Node] = []
        for child_mapping in self.children_mappings:
            deleted.extend(child_mapping.deleted_descendants)
        return deleted

    @property
    def deleted_string_indices(self) -> List[int]:
        """All string positions deleted anywhere in this mapping, ascending."""
        indices = set(self.gap_indices)
        for child_mapping in self.children_mappings:
            indices.update(child_mapping.deleted_string_indices)
        return sorted(indices)

    def one_to_one_mapping_by_leafs(self) -> Dict[Node, int]:
        """Matched leaf -> string position; deleted leaves are left out."""
        result: Dict[Node, int] = {}
        self._collect_matches(result)
        return result

    def one_to_one_mapping_by_string_indices(self) -> Dict[int, Node]:
        """String position -> matched leaf, ordered by position."""
        by_leaf = self.one_to_one_mapping_by_leafs()
        return {index: leaf for leaf, index in sorted(by_leaf.items(), key=lambda kv: kv[1])}

    def _collect_matches(self, result: Dict[Node, int]) -> None:
        if self.node.is_leaf:
            if not self.is_empty:
                result[self.node] = self.start_index
            return
        for child_mapping in self.children_mappings:
            child_mapping._collect_matches(result)

    def __repr__(self) -> str:
        return (
            f"Mapping(score={self.score}, S[{self.start_index}:{self.end_index}], "
            f"tree_deletions={self.tree_deletions}, "
            f"string_deletions={self.string_deletions})"
        )


def one_to_one_leaf_mapping(mapping: Mapping) -> Dict[Node, int]:
    """Correspondence between each matched leaf and the position it was matched to."""
    return mapping.one_to_one_mapping_by_leafs()
