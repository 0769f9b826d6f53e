"""
Parsers for PQ-tree representations.

This module provides the bracket-notation parser; JSON trees are read by
``pqalign.io``.
"""

from .paren_parser import (
    parse_paren,
    flush_label_buffer,
    open_node,
    close_node,
    get_leaf_labels,
)

__all__ = [
    "parse_paren",
    "flush_label_buffer",
    "open_node",
    "close_node",
    "get_leaf_labels",
]
