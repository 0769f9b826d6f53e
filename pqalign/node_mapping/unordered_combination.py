"""Combination of children under an order-free (P) node."""

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

# Above this many children the subset enumeration gets slow enough to mention.
LARGE_DEGREE_WARNING = 12


def combine_unordered(
    node: Node, child_tables: Sequence[MappingTable], extender: CoverExtender
) -> MappingTable:
    """
    Mappings of an order-free node from the mappings of its children.

    Dynamic program over subsets of children: the covers of a subset are keyed
    by (end, tree deletions, string deletions), and a transition incorporates
    one child that is not yet in the subset, placing its run on either side of
    the covered span or deleting it entirely. Subsets are visited in increasing
    bitmask order, so every transition goes to a subset that is visited later.
    The covers of the full subset become the node's mappings.
    """
    degree = len(node.children)
    if degree > LARGE_DEGREE_WARNING:
        logger.warning(
            f"Order-free node with {degree} children: enumerating {2 ** degree} child subsets"
        )

    full = (1 << degree) - 1
    covers_by_subset: List[Dict[CoverKey, PartialCover]] = [{} for _ in range(full + 1)]
    covers_by_subset[0][EMPTY_COVER.key] = EMPTY_COVER

    for subset in range(full):
        covers = covers_by_subset[subset]
        if not covers:
            continue
        for child_index in range(degree):
            bit = 1 << child_index
            if subset & bit:
                continue
            target = covers_by_subset[subset | bit]
            child_table = child_tables[child_index]
            for cover in covers.values():
                for extended in extender.extend(
                    cover, child_index, child_table, allow_prepend=True
                ):
                    keep_best(target, extended)
        # Covers of a finished subset are never read again.
        covers_by_subset[subset] = {}

    table = MappingTable(node)
    for cover in covers_by_subset[full].values():
        table.add(cover.to_mapping(node))

    logger.debug(f"Order-free node {node!r}: {len(table)} mappings")
    return table
