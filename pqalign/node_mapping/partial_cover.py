"""
Partial covers: the dynamic-programming state used while combining children.

A partial cover records how a subset of a node's children has been laid onto a
contiguous span of the string so far: the accumulated score, the span, and the
tree and string deletions spent. Covers are extended one child at a time, the
child's run being placed right after the span (append), right before it
(prepend), or nowhere when the child is deleted entirely (skip). String
positions left between two runs are deleted and charged to the cover.

The children chosen so far are kept as a linked chain of ``(previous, child
index, mapping, gap)`` tuples, so extending a cover never copies earlier
choices; the chain is unrolled only for covers that end up in a node's table.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from pqalign.mapping import Mapping
from pqalign.node_mapping.table import MappingTable
from pqalign.tree import Node

# (previous link, child index, child mapping, first deleted gap position, last deleted gap position)
ChainLink = Tuple[Optional["ChainLink"], int, Mapping, int, int]
CoverKey = Tuple[int, int, int]


@dataclass(frozen=True)
class PartialCover:
    score: float
    start_index: int
    end_index: int
    tree_deletions: int
    string_deletions: int
    chain: Optional[ChainLink] = None

    @property
    def is_empty(self) -> bool:
        return self.start_index > self.end_index

    @property
    def key(self) -> CoverKey:
        # The start follows from the end, the deletions and the children covered.
        return (self.end_index, self.tree_deletions, self.string_deletions)

    def to_mapping(self, node: Node, is_reversed: bool = False) -> Mapping:
        children: List[Optional[Mapping]] = [None] * len(node.children)
        gap_indices: List[int] = []
        link = self.chain
        while link is not None:
            previous, child_index, child_mapping, gap_first, gap_last = link
            children[child_index] = child_mapping
            gap_indices.extend(range(gap_first, gap_last + 1))
            link = previous
        if any(child is None for child in children):
            raise RuntimeError(
                f"Partial cover of {node!r} is missing children; only complete covers become mappings"
            )
        return Mapping(
            node=node,
            score=self.score,
            start_index=self.start_index,
            end_index=self.end_index,
            children_mappings=tuple(children),  # type: ignore[arg-type]
            gap_indices=frozenset(gap_indices),
            tree_deletions=self.tree_deletions,
            string_deletions=self.string_deletions,
            is_reversed=is_reversed,
        )


EMPTY_COVER = PartialCover(score=0.0, start_index=1, end_index=0, tree_deletions=0, string_deletions=0)


def keep_best(covers: Dict[CoverKey, PartialCover], cover: PartialCover) -> None:
    """Store ``cover`` unless a cover with the same key scores at least as well."""
    current = covers.get(cover.key)
    if current is None or cover.score > current.score:
        covers[cover.key] = cover


class CoverExtender:
    """
    Extension steps for partial covers, bound to one string and one pair of budgets.

    Args:
        string_length: Number of genes in the string.
        tree_deletion_limit: Maximum number of deleted leaves.
        string_deletion_limit: Maximum number of deleted genes.
        deletion_prefix: ``deletion_prefix[i]`` is the summed deletion cost of
            genes ``1..i``; entry 0 is 0.
    """

    def __init__(
        self,
        string_length: int,
        tree_deletion_limit: int,
        string_deletion_limit: int,
        deletion_prefix: np.ndarray,
    ):
        self.string_length = string_length
        self.tree_deletion_limit = tree_deletion_limit
        self.string_deletion_limit = string_deletion_limit
        self.deletion_prefix = deletion_prefix

    def gap_cost(self, first: int, last: int) -> float:
        """Summed deletion cost of the genes at positions ``first..last``."""
        if last < first:
            return 0.0
        return float(self.deletion_prefix[last] - self.deletion_prefix[first - 1])

    def extend(
        self,
        cover: PartialCover,
        child_index: int,
        child_table: MappingTable,
        allow_prepend: bool = False,
    ) -> Iterator[PartialCover]:
        """Every cover obtained by adding one child's mapping to ``cover``."""
        yield from self.skip(cover, child_index, child_table)
        if cover.is_empty:
            yield from self.place_first(cover, child_index, child_table)
            return
        yield from self.append(cover, child_index, child_table)
        if allow_prepend:
            yield from self.prepend(cover, child_index, child_table)

    def skip(
        self, cover: PartialCover, child_index: int, child_table: MappingTable
    ) -> Iterator[PartialCover]:
        deleted = child_table.empty
        if deleted is None:
            return
        tree_deletions = cover.tree_deletions + deleted.tree_deletions
        if tree_deletions > self.tree_deletion_limit:
            return
        yield PartialCover(
            score=cover.score + deleted.score,
            start_index=cover.start_index,
            end_index=cover.end_index,
            tree_deletions=tree_deletions,
            string_deletions=cover.string_deletions,
            chain=(cover.chain, child_index, deleted, 1, 0),
        )

    def place_first(
        self, cover: PartialCover, child_index: int, child_table: MappingTable
    ) -> Iterator[PartialCover]:
        """Extend a cover whose span is still empty: the child's run becomes the span."""
        for mapping in child_table.non_empty():
            tree_deletions = cover.tree_deletions + mapping.tree_deletions
            if tree_deletions > self.tree_deletion_limit:
                continue
            yield PartialCover(
                score=cover.score + mapping.score,
                start_index=mapping.start_index,
                end_index=mapping.end_index,
                tree_deletions=tree_deletions,
                string_deletions=mapping.string_deletions,
                chain=(cover.chain, child_index, mapping, 1, 0),
            )

    def append(
        self, cover: PartialCover, child_index: int, child_table: MappingTable
    ) -> Iterator[PartialCover]:
        spare = self.string_deletion_limit - cover.string_deletions
        for gap in range(spare + 1):
            start = cover.end_index + 1 + gap
            if start > self.string_length:
                break
            gap_score = self.gap_cost(cover.end_index + 1, start - 1)
            for mapping in child_table.starting_at(start):
                tree_deletions = cover.tree_deletions + mapping.tree_deletions
                string_deletions = cover.string_deletions + mapping.string_deletions + gap
                if (
                    tree_deletions > self.tree_deletion_limit
                    or string_deletions > self.string_deletion_limit
                ):
                    continue
                yield PartialCover(
                    score=cover.score + mapping.score - gap_score,
                    start_index=cover.start_index,
                    end_index=mapping.end_index,
                    tree_deletions=tree_deletions,
                    string_deletions=string_deletions,
                    chain=(cover.chain, child_index, mapping, cover.end_index + 1, start - 1),
                )

    def prepend(
        self, cover: PartialCover, child_index: int, child_table: MappingTable
    ) -> Iterator[PartialCover]:
        spare = self.string_deletion_limit - cover.string_deletions
        for gap in range(spare + 1):
            end = cover.start_index - 1 - gap
            if end < 1:
                break
            gap_score = self.gap_cost(end + 1, cover.start_index - 1)
            for mapping in child_table.ending_at(end):
                tree_deletions = cover.tree_deletions + mapping.tree_deletions
                string_deletions = cover.string_deletions + mapping.string_deletions + gap
                if (
                    tree_deletions > self.tree_deletion_limit
                    or string_deletions > self.string_deletion_limit
                ):
                    continue
                yield PartialCover(
                    score=cover.score + mapping.score - gap_score,
                    start_index=mapping.start_index,
                    end_index=cover.end_index,
                    tree_deletions=tree_deletions,
                    string_deletions=string_deletions,
                    chain=(cover.chain, child_index, mapping, end + 1, cover.start_index - 1),
                )
