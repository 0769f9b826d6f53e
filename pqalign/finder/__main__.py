#!/usr/bin/env python3
"""
Find the best derivations of a PQ-tree in a gene sequence.

Aligns the tree against every substring of the sequence within the given tree-
and string-deletion limits and prints the best mapping, all mappings, or the
best mapping per distinct region.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from pqalign.elements.gene_group import GeneGroup
from pqalign.exceptions import PQAlignError
from pqalign.finder.config import FinderConfig, OutputMode
from pqalign.finder.report import format_report
from pqalign.finder.validators import NonNegativeFloatAction, NonNegativeIntegerAction
from pqalign.io import (
    parse_gene_sequence,
    read_gene_sequence,
    read_substitution_matrix,
    read_tree_json,
    write_mappings_json,
)
from pqalign.logger import configure_logging, mapping_logger
from pqalign.mapping import Mapping
from pqalign.node_mapping import NodeMappingAlgorithm, build_mapping_algorithm
from pqalign.parser import parse_paren
from pqalign.scoring import constant_deletion_cost, no_substitutions_function
from pqalign.tree import Node

logger = logging.getLogger(__name__)


def setup_argument_parser() -> argparse.ArgumentParser:
    """
    Configure and return the argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="pqalign-find",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    tree_group = parser.add_argument_group("PQ-tree input (exactly one)")
    tree_group.add_argument(
        "-p",
        "--paren",
        help="PQ-tree in bracket notation, e.g. '[A+ (B C-) D]'",
    )
    tree_group.add_argument(
        "-j",
        "--json-tree",
        help="Path to a JSON file holding the PQ-tree",
        type=Path,
    )

    genes_group = parser.add_argument_group("gene sequence input (exactly one)")
    genes_group.add_argument(
        "-g",
        "--genes",
        help="Gene labels separated by spaces or commas, e.g. 'A+ B- C'",
    )
    genes_group.add_argument(
        "-gf",
        "--gene-file",
        help="Path to a JSON file holding a list of gene labels",
        type=Path,
    )

    scoring_group = parser.add_argument_group("scoring options")
    scoring_group.add_argument(
        "-m",
        "--matrix",
        help="Tab-separated substitution matrix (default: exact catalog id matches score 1)",
        type=Path,
    )
    scoring_group.add_argument(
        "-dt",
        "--tree-deletions",
        help="Maximum number of deleted leaves (default: 0)",
        default=0,
        type=int,
        action=NonNegativeIntegerAction,
    )
    scoring_group.add_argument(
        "-ds",
        "--string-deletions",
        help="Maximum number of deleted genes (default: 0)",
        default=0,
        type=int,
        action=NonNegativeIntegerAction,
    )
    scoring_group.add_argument(
        "--deletion-cost",
        help="Cost of deleting one leaf or gene (default: 1.0)",
        default=1.0,
        type=float,
        action=NonNegativeFloatAction,
    )

    output_group = parser.add_argument_group("output options")
    output_group.add_argument(
        "-o",
        "--output",
        help="'best', 'all' or 'distinct' (default: best)",
        default="best",
    )
    output_group.add_argument(
        "-t",
        "--threshold",
        help="Only report mappings scoring above this value",
        default=float("-inf"),
        type=float,
    )
    output_group.add_argument(
        "--json-out",
        help="Also write the reported mappings to this JSON file",
        type=Path,
    )
    output_group.add_argument(
        "--trace",
        help="Print the per-node mapping tables while the algorithm runs",
        action="store_true",
    )
    output_group.add_argument(
        "--trace-html",
        help="Write the per-node mapping tables to this HTML file (implies --trace)",
        type=Path,
    )
    output_group.add_argument(
        "-v",
        "--verbose",
        help="Log progress at DEBUG level",
        action="store_true",
    )

    return parser


def load_tree(config: FinderConfig) -> Node:
    if config.paren_tree is not None:
        return parse_paren(config.paren_tree)
    return read_tree_json(config.json_tree)


def load_genes(config: FinderConfig) -> List[GeneGroup]:
    if config.genes is not None:
        return parse_gene_sequence(config.genes)
    return read_gene_sequence(config.gene_file)


def build_algorithm(config: FinderConfig, tree: Node, genes: List[GeneGroup]) -> NodeMappingAlgorithm:
    substitution_function = no_substitutions_function
    if config.matrix is not None:
        matrix = read_substitution_matrix(config.matrix)
        logger.info(f"Read substitution matrix with {len(matrix)} catalog ids")
        missing = sorted({leaf.label.cog for leaf in tree.leaves if leaf.label.cog not in matrix})
        if missing:
            logger.warning(
                f"Catalog ids missing from the substitution matrix, their leaves can only be deleted: "
                f"{', '.join(missing)}"
            )
        substitution_function = matrix
    return build_mapping_algorithm(
        genes,
        tree,
        config.tree_deletion_limit,
        config.string_deletion_limit,
        substitution_function,
        constant_deletion_cost(config.deletion_cost),
    )


def select_mappings(algorithm: NodeMappingAlgorithm, config: FinderConfig) -> List[Mapping]:
    if config.output_mode is OutputMode.ALL:
        return algorithm.all_mappings(config.threshold)
    if config.output_mode is OutputMode.DISTINCT:
        return algorithm.best_distinct_mappings(config.threshold)
    best = algorithm.best_mapping()
    if best is None or best.score <= config.threshold:
        return []
    return [best]


def run(config: FinderConfig) -> List[Mapping]:
    """Load the inputs, run the alignment and print the report."""
    tree = load_tree(config)
    genes = load_genes(config)
    logger.info(f"Loaded tree with {tree.leaf_count} leaves and {len(genes)} genes")

    if config.trace:
        mapping_logger.disabled = False
        mapping_logger.clear()

    algorithm = build_algorithm(config, tree, genes)
    algorithm.run_algorithm()
    mappings = select_mappings(algorithm, config)

    print(format_report(mappings, genes), end="")

    if config.json_out is not None:
        write_mappings_json(mappings, config.json_out)
        logger.info(f"Wrote {len(mappings)} mappings to {config.json_out}")
    if config.trace_html is not None:
        algorithm.log_result_mappings()
        mapping_logger.write_html(config.trace_html)
        logger.info(f"Wrote mapping trace to {config.trace_html}")
    return mappings


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = setup_argument_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = FinderConfig.from_namespace(args)
        run(config)
    except PQAlignError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        mapping_logger.disabled = True
    return 0


if __name__ == "__main__":
    sys.exit(main())
