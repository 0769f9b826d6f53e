"""Text formatting utilities for logging and reports."""

import math
from typing import Iterable, List, Sequence

from pqalign.elements.gene_group import GeneGroup
from pqalign.mapping import Mapping
from pqalign.tree import Node


def format_score(score: float) -> str:
    """Format a score, keeping integral values short."""
    if math.isfinite(score) and score == int(score):
        return f"{int(score)}"
    return f"{score:.4g}"


def format_positions(positions: Iterable[int]) -> str:
    """Format string positions as '{1, 4, 5}', or '∅' when there are none."""
    values = sorted(positions)
    if not values:
        return "∅"
    return "{" + ", ".join(str(p) for p in values) + "}"


def format_leaf_labels(leaves: Sequence[Node]) -> str:
    """Join leaf labels with commas."""
    return ", ".join(str(leaf.label) for leaf in leaves)


def format_genes(genes: Sequence[GeneGroup]) -> str:
    """Join genes with commas, the way substrings are printed in reports."""
    return ",".join(str(gene) for gene in genes)


def format_span(start_index: int, end_index: int) -> str:
    if start_index > end_index:
        return "∅"
    return f"S[{start_index}:{end_index}]"


def mapping_rows(mappings: Iterable[Mapping]) -> List[List[str]]:
    """Rows of (span, score, tree deletions, string deletions, deleted genes) for table logs."""
    return [
        [
            format_span(m.start_index, m.end_index),
            format_score(m.score),
            str(m.tree_deletions),
            str(m.string_deletions),
            format_positions(m.deleted_string_indices),
        ]
        for m in mappings
    ]
