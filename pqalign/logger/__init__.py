"""Logging package for pqalign."""

import logging

from pqalign.logger.base_logger import AlgorithmLogger
from pqalign.logger.table_logger import TableLogger
from pqalign.logger.formatting import (
    format_score,
    format_positions,
    format_leaf_labels,
    format_genes,
    format_span,
    mapping_rows,
)

# Tracing singleton for the mapping engine; enabled on demand (CLI --trace).
mapping_logger = TableLogger("pqalign.trace")
mapping_logger.disabled = True


def configure_logging(level: int = logging.INFO) -> None:
    """Configure the root logger with the package's standard format."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("pqalign").setLevel(level)


__all__ = [
    "AlgorithmLogger",
    "TableLogger",
    "mapping_logger",
    "configure_logging",
    "format_score",
    "format_positions",
    "format_leaf_labels",
    "format_genes",
    "format_span",
    "mapping_rows",
]
