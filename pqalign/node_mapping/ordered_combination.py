"""Combination of children under an order-fixed (Q) node."""

from __future__ import annotations
import logging
from typing import Dict, List, Sequence

from pqalign.node_mapping.partial_cover import (
    EMPTY_COVER,
    CoverExtender,
    CoverKey,
    PartialCover,
    keep_best,
)
from pqalign.node_mapping.table import MappingTable
from pqalign.tree import Node

logger = logging.getLogger(__name__)


def _sequential_covers(
    child_order: Sequence[int],
    child_tables: Sequence[MappingTable],
    extender: CoverExtender,
) -> List[PartialCover]:
    """
    Lay the children onto the string one after another, in ``child_order``.

    Each child's run starts right after the previous run, possibly after a gap
    of deleted genes; a deleted child takes no room.
    """
    covers: Dict[CoverKey, PartialCover] = {EMPTY_COVER.key: EMPTY_COVER}
    for child_index in child_order:
        next_covers: Dict[CoverKey, PartialCover] = {}
        for cover in covers.values():
            for extended in extender.extend(cover, child_index, child_tables[child_index]):
                keep_best(next_covers, extended)
        covers = next_covers
        if not covers:
            break
    return list(covers.values())


def combine_ordered(
    node: Node, child_tables: Sequence[MappingTable], extender: CoverExtender
) -> MappingTable:
    """
    Mappings of an order-fixed node from the mappings of its children.

    The children are matched left to right and, separately, right to left
    (the reversed run); per key the better of the two is kept, the left-to-right
    orientation winning ties.
    """
    table = MappingTable(node)
    forward = list(range(len(node.children)))
    for cover in _sequential_covers(forward, child_tables, extender):
        table.add(cover.to_mapping(node, is_reversed=False))

    if len(forward) > 1:
        for cover in _sequential_covers(forward[::-1], child_tables, extender):
            table.add(cover.to_mapping(node, is_reversed=True))

    logger.debug(f"Order-fixed node {node!r}: {len(table)} mappings")
    return table
