"""
Scoring policies for tree-to-sequence alignment.

A substitution function scores a tree leaf label against a gene of the sequence
(``-inf`` forbids the pair); a deletion cost function returns the non-negative
penalty for deleting a leaf or a gene.
"""

from __future__ import annotations
import math
from typing import Callable

import pandas as pd

from pqalign.elements.gene_group import GeneGroup

SubstitutionFunction = Callable[[GeneGroup, GeneGroup], float]
DeletionCostFunction = Callable[[GeneGroup], float]

DEFAULT_DELETION_COST = 1.0


def no_substitutions_function(leaf_label: GeneGroup, gene: GeneGroup) -> float:
    """Score 1 for identical catalog ids, forbid every other pairing."""
    if leaf_label.cog == gene.cog:
        return 1.0
    return -math.inf


def constant_deletion_cost(cost: float = DEFAULT_DELETION_COST) -> DeletionCostFunction:
    """Deletion cost function charging the same ``cost`` for every gene."""
    if cost < 0 or math.isnan(cost):
        raise ValueError(f"Deletion cost must be non-negative, got {cost}")

    def deletion_cost(gene: GeneGroup) -> float:
        return cost

    return deletion_cost


class SubstitutionMatrix:
    """
    Substitution scores between catalog ids, backed by a DataFrame.

    Rows are indexed by the leaf's catalog id and columns by the gene's. A
    missing id or an empty (NaN) cell forbids the substitution. Strands are not
    compared.
    """

    def __init__(self, scores: pd.DataFrame):
        frame = scores.copy()
        frame.index = frame.index.map(str).str.strip()
        frame.columns = frame.columns.map(str).str.strip()
        self.scores = frame.astype(float)

    def __call__(self, leaf_label: GeneGroup, gene: GeneGroup) -> float:
        try:
            value = self.scores.at[leaf_label.cog, gene.cog]
        except KeyError:
            return -math.inf
        if pd.isna(value):
            return -math.inf
        return float(value)

    def __contains__(self, cog: str) -> bool:
        return cog in self.scores.index

    def __len__(self) -> int:
        return len(self.scores.index)
