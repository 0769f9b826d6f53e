"""
Parser for the bracket notation of PQ-trees.

``[ ... ]`` encloses an order-fixed (Q) node and ``( ... )`` an order-free (P)
node. Leaves are gene labels separated by whitespace and/or commas::

    [COG0001+ (COG0002 COG0003-) COG0004]
"""

from typing import List, Tuple

from pqalign.elements.gene_group import GeneGroup
from pqalign.exceptions import TreeParseError
from pqalign.tree import Node, NodeKind

_OPENING = {"[": NodeKind.ORDER_FIXED, "(": NodeKind.ORDER_FREE}
_CLOSING = {"]": NodeKind.ORDER_FIXED, ")": NodeKind.ORDER_FREE}
_SEPARATORS = {" ", "\t", "\n", "\r", ","}


# ===================================================================
# 1. BUFFER PROCESSING FUNCTIONS
# ===================================================================


def flush_label_buffer(buffer: List[str], stack: List[Node], roots: List[Node]) -> None:
    """
    Turn the accumulated label characters into a leaf of the innermost open node.

    Outside of any bracket the leaf becomes a top-level tree.
    """
    if not buffer:
        return
    label = "".join(buffer)
    buffer.clear()
    try:
        leaf = Node.leaf(GeneGroup.from_label(label))
    except ValueError as e:
        raise TreeParseError(f"Invalid leaf label {label!r}: {e}") from e
    if stack:
        stack[-1].children.append(leaf)
        leaf.parent = stack[-1]
    else:
        roots.append(leaf)


# ===================================================================
# 2. NODE STACK MANAGEMENT FUNCTIONS
# ===================================================================


def open_node(stack: List[Node], kind: NodeKind) -> None:
    node = Node(kind)
    if stack:
        stack[-1].children.append(node)
        node.parent = stack[-1]
    stack.append(node)


def close_node(
    stack: List[Node], roots: List[Node], kind: NodeKind, position: int
) -> None:
    if not stack:
        raise TreeParseError(f"Unmatched closing bracket at position {position}")
    node = stack.pop()
    if node.kind is not kind:
        raise TreeParseError(
            f"Mismatched closing bracket at position {position}: "
            f"expected the end of a {node.kind.value}-node"
        )
    if not node.children:
        raise TreeParseError(f"Empty {node.kind.value}-node closed at position {position}")
    if not stack:
        roots.append(node)


# ===================================================================
# 3. CORE PARSING FUNCTIONS
# ===================================================================


def _parse_paren(text: str) -> Tuple[List[Node], List[Node]]:
    """
    Scan the text character by character.

    Returns:
        The completed top-level trees and the stack of still-open nodes.
    """
    roots: List[Node] = []
    stack: List[Node] = []
    buffer: List[str] = []

    for position, char in enumerate(text):
        if char in _OPENING:
            flush_label_buffer(buffer, stack, roots)
            open_node(stack, _OPENING[char])
        elif char in _CLOSING:
            flush_label_buffer(buffer, stack, roots)
            close_node(stack, roots, _CLOSING[char], position)
        elif char in _SEPARATORS:
            flush_label_buffer(buffer, stack, roots)
        else:
            buffer.append(char)

    flush_label_buffer(buffer, stack, roots)
    return roots, stack


# ===================================================================
# 4. PUBLIC API FUNCTIONS
# ===================================================================


def parse_paren(text: str) -> Node:
    """
    Parse a PQ-tree from its bracket notation.

    Args:
        text: The tree, e.g. ``"[A+ (B C-) D]"``. A single label is a one-leaf tree.

    Returns:
        The root node, with post-order indices assigned.

    Raises:
        TreeParseError: On unbalanced or mismatched brackets, empty nodes,
            empty input, or more than one top-level tree.
    """
    roots, open_nodes = _parse_paren(text)
    if open_nodes:
        raise TreeParseError(f"{len(open_nodes)} unclosed bracket(s) in {text!r}")
    if not roots:
        raise TreeParseError("Empty tree representation")
    if len(roots) > 1:
        raise TreeParseError(
            f"Expected a single tree but found {len(roots)} top-level elements; "
            "wrap them in [ ] or ( )"
        )
    root = roots[0]
    root.index_nodes()
    return root


def get_leaf_labels(tree: Node) -> List[str]:
    """Leaf labels of a tree, left to right."""
    return [str(leaf.label) for leaf in tree.leaves]
