"""Per-node table of mappings, pruned to the best mapping per key."""

from __future__ import annotations
from collections import defaultdict
from typing import Dict, Iterator, List, Optional, Tuple

from pqalign.mapping import Mapping
from pqalign.tree import Node

TableKey = Tuple[int, int, int]


class MappingTable:
    """
    The mappings of one node, at most one per ``(end, tree deletions, string deletions)``.

    For a fixed node the start of a non-empty mapping follows from its key
    (its length is the number of matched leaves plus the string deletions), so
    keeping the best mapping per key is the dominance rule: a kept mapping
    beats every other mapping of the same span and cost.

    The empty mapping (every leaf deleted) is kept apart since it occupies no
    position of the string.
    """

    __slots__ = ("node", "_by_key", "empty", "_by_start", "_by_end")

    def __init__(self, node: Node):
        self.node = node
        self._by_key: Dict[TableKey, Mapping] = {}
        self.empty: Optional[Mapping] = None
        self._by_start: Optional[Dict[int, List[Mapping]]] = None
        self._by_end: Optional[Dict[int, List[Mapping]]] = None

    def add(self, mapping: Mapping) -> bool:
        """
        Offer a mapping; it is kept only if it beats the current holder of its key.

        Returns:
            True if the mapping was stored.
        """
        if mapping.is_empty:
            if self.empty is None or mapping.score > self.empty.score:
                self.empty = mapping
                return True
            return False

        key = (mapping.end_index, mapping.tree_deletions, mapping.string_deletions)
        current = self._by_key.get(key)
        if current is not None and mapping.score <= current.score:
            return False
        self._by_key[key] = mapping
        self._by_start = None
        self._by_end = None
        return True

    def non_empty(self) -> Iterator[Mapping]:
        return iter(self._by_key.values())

    def starting_at(self, start_index: int) -> List[Mapping]:
        if self._by_start is None:
            self._by_start = self._group(lambda m: m.start_index)
        return self._by_start.get(start_index, [])

    def ending_at(self, end_index: int) -> List[Mapping]:
        if self._by_end is None:
            self._by_end = self._group(lambda m: m.end_index)
        return self._by_end.get(end_index, [])

    def _group(self, key_fn) -> Dict[int, List[Mapping]]:
        groups: Dict[int, List[Mapping]] = defaultdict(list)
        for mapping in self._by_key.values():
            groups[key_fn(mapping)].append(mapping)
        return dict(groups)

    def by_end_points(self) -> Dict[int, List[Mapping]]:
        """
        End point -> mappings ending there, ordered by (tree, string) deletions.

        The empty mapping, if any, is filed under end point 0.
        """
        result: Dict[int, List[Mapping]] = defaultdict(list)
        for key in sorted(self._by_key):
            result[key[0]].append(self._by_key[key])
        if self.empty is not None:
            result[0].append(self.empty)
        return dict(sorted(result.items()))

    def __len__(self) -> int:
        return len(self._by_key) + (1 if self.empty is not None else 0)

    def __iter__(self) -> Iterator[Mapping]:
        yield from self._by_key.values()
        if self.empty is not None:
            yield self.empty
