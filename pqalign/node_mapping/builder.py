from typing import Optional, Sequence

from pqalign.elements.gene_group import GeneGroup
from pqalign.exceptions import ConfigurationError
from pqalign.node_mapping.algorithm import NodeMappingAlgorithm
from pqalign.scoring import (
    DEFAULT_DELETION_COST,
    DeletionCostFunction,
    SubstitutionFunction,
    constant_deletion_cost,
    no_substitutions_function,
)
from pqalign.tree import Node


def build_mapping_algorithm(
    string: Sequence[GeneGroup],
    node: Node,
    tree_deletion_limit: int = 0,
    string_deletion_limit: int = 0,
    substitution_function: SubstitutionFunction = no_substitutions_function,
    deletion_cost: Optional[DeletionCostFunction] = None,
) -> NodeMappingAlgorithm:
    """
    Validate the run parameters and create an engine ready for ``run_algorithm``.

    Args:
        string: The gene sequence; must not be empty.
        node: Root of the PQ-tree.
        tree_deletion_limit: Maximum number of deleted leaves (>= 0).
        string_deletion_limit: Maximum number of deleted genes (>= 0).
        substitution_function: Leaf/gene scoring; defaults to exact catalog id matches.
        deletion_cost: Deletion cost function; defaults to a constant
            ``DEFAULT_DELETION_COST`` per leaf or gene.

    Raises:
        ConfigurationError: If a limit is negative or not an integer, or the
            sequence is empty.
        TreeStructureError: If ``node`` is not a valid PQ-tree.
    """
    for name, limit in (
        ("tree deletion limit", tree_deletion_limit),
        ("string deletion limit", string_deletion_limit),
    ):
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ConfigurationError(f"The {name} must be an integer, got {limit!r}")
        if limit < 0:
            raise ConfigurationError(f"The {name} must be non-negative, got {limit}")
    if not string:
        raise ConfigurationError("The gene sequence is empty")

    if deletion_cost is None:
        deletion_cost = constant_deletion_cost(DEFAULT_DELETION_COST)

    return NodeMappingAlgorithm(
        string,
        node,
        tree_deletion_limit,
        string_deletion_limit,
        substitution_function,
        deletion_cost,
    )
