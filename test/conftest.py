import logging
from typing import Callable, Optional

import pytest

from pqalign.io import parse_gene_sequence
from pqalign.logger import mapping_logger
from pqalign.node_mapping import NodeMappingAlgorithm, build_mapping_algorithm
from pqalign.parser import parse_paren
from pqalign.scoring import no_substitutions_function


def pytest_configure(config):
    """Set up test environment before tests run."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@pytest.fixture(autouse=True)
def quiet_mapping_logger():
    """Keep the tracing logger disabled and empty between tests."""
    mapping_logger.disabled = True
    mapping_logger.clear()
    yield
    mapping_logger.disabled = True
    mapping_logger.clear()


def run_alignment(
    tree: str,
    genes: str,
    tree_deletions: int = 0,
    string_deletions: int = 0,
    substitution_function: Callable = no_substitutions_function,
    deletion_cost: Optional[Callable] = None,
) -> NodeMappingAlgorithm:
    algorithm = build_mapping_algorithm(
        parse_gene_sequence(genes),
        parse_paren(tree),
        tree_deletions,
        string_deletions,
        substitution_function,
        deletion_cost,
    )
    algorithm.run_algorithm()
    return algorithm


@pytest.fixture
def align():
    return run_alignment
