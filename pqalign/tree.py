from __future__ import annotations
from enum import Enum
from typing import Iterator, List, Optional, Set

from pqalign.elements.gene_group import GeneGroup
from pqalign.exceptions import TreeStructureError


class NodeKind(Enum):
    LEAF = "leaf"
    ORDER_FIXED = "Q"
    ORDER_FREE = "P"


class Node:
    """
    PQ-tree node.

    A leaf carries a gene label. An internal node carries an ordered list of
    children and a kind: order-fixed nodes (Q) must match their children in the
    given left-to-right order or its reversal, order-free nodes (P) may match
    them in any order.

    Nodes are compared by identity: two leaves with the same label are still
    different tree positions. After construction the tree is treated as
    read-only; ``index_nodes`` assigns each node a post-order index used to key
    the alignment tables.
    """

    __slots__ = (
        "kind",
        "children",
        "parent",
        "label",
        "index",
        "_leaves_cache",
    )

    kind: NodeKind
    children: List[Node]
    parent: Optional[Node]
    label: Optional[GeneGroup]
    index: Optional[int]
    _leaves_cache: Optional[List[Node]]

    def __init__(
        self,
        kind: NodeKind,
        children: Optional[List[Node]] = None,
        label: Optional[GeneGroup] = None,
    ):
        self.kind = kind
        self.children = list(children) if children is not None else []
        for child in self.children:
            child.parent = self
        self.parent = None
        self.label = label
        self.index = None
        self._leaves_cache = None

    # ------------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------------

    @classmethod
    def leaf(cls, label: GeneGroup | str) -> Node:
        if isinstance(label, str):
            label = GeneGroup.from_label(label)
        return cls(NodeKind.LEAF, label=label)

    @classmethod
    def q_node(cls, children: List[Node]) -> Node:
        return cls(NodeKind.ORDER_FIXED, children=children)

    @classmethod
    def p_node(cls, children: List[Node]) -> Node:
        return cls(NodeKind.ORDER_FREE, children=children)

    # ------------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------------

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.LEAF

    @property
    def is_order_fixed(self) -> bool:
        return self.kind is NodeKind.ORDER_FIXED

    @property
    def is_order_free(self) -> bool:
        return self.kind is NodeKind.ORDER_FREE

    @property
    def leaves(self) -> List[Node]:
        """
        Leaves of the subtree rooted at this node, left to right.

        Cached on first access; the tree must not be modified afterwards.
        """
        if self._leaves_cache is None:
            if self.is_leaf:
                self._leaves_cache = [self]
            else:
                result: List[Node] = []
                for child in self.children:
                    result.extend(child.leaves)
                self._leaves_cache = result
        return self._leaves_cache

    @property
    def leaf_count(self) -> int:
        return len(self.leaves)

    def traverse(self) -> Iterator[Node]:
        """Yield the nodes of this subtree in post-order (children before parents)."""
        for child in self.children:
            yield from child.traverse()
        yield self

    def index_nodes(self) -> int:
        """
        Number the nodes of this subtree in post-order, starting at 0.

        Returns:
            The number of nodes in the subtree.
        """
        count = 0
        for node in self.traverse():
            node.index = count
            count += 1
        return count

    def validate(self) -> None:
        """
        Check the PQ-tree structure rules for the subtree rooted here.

        Raises:
            TreeStructureError: If a leaf lacks a label or has children, an
                internal node has no children, a kind is unknown, or a node is
                reachable along more than one path.
        """
        seen: Set[int] = set()
        stack: List[Node] = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                raise TreeStructureError(
                    f"Node {node!r} is reachable more than once; subtrees cannot be shared"
                )
            seen.add(id(node))
            if not isinstance(node.kind, NodeKind):
                raise TreeStructureError(f"Node without a valid kind: {node.kind!r}")
            if node.is_leaf:
                if node.label is None:
                    raise TreeStructureError("Leaf node without a gene label")
                if node.children:
                    raise TreeStructureError(f"Leaf {node.label} has children")
            elif not node.children:
                raise TreeStructureError(
                    f"Internal {node.kind.name} node without children"
                )
            stack.extend(node.children)

    # ------------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------------

    def to_paren(self) -> str:
        """Serialise to the bracket notation read by ``parse_paren``."""
        if self.is_leaf:
            return str(self.label)
        inner = " ".join(child.to_paren() for child in self.children)
        if self.is_order_fixed:
            return f"[{inner}]"
        return f"({inner})"

    def __repr__(self) -> str:
        if self.is_leaf:
            return f"Node('{self.label}')"
        return f"Node({self.kind.value}, {len(self.children)} children)"

    def __str__(self) -> str:
        return self.to_paren()
