from __future__ import annotations
import argparse
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from pqalign.exceptions import ConfigurationError
from pqalign.scoring import DEFAULT_DELETION_COST


class OutputMode(Enum):
    BEST = "best"
    ALL = "all"
    DISTINCT = "distinct"

    @classmethod
    def from_argument(cls, argument: str) -> OutputMode:
        for mode in cls:
            if mode.value == argument:
                return mode
        raise ConfigurationError(
            f"{argument!r} is not a valid output option. Try 'best', 'all' or 'distinct'."
        )


@dataclass
class FinderConfig:
    """Configuration for a single tree-to-sequence search."""

    paren_tree: Optional[str] = None
    json_tree: Optional[Path] = None
    genes: Optional[str] = None
    gene_file: Optional[Path] = None
    matrix: Optional[Path] = None
    tree_deletion_limit: int = 0
    string_deletion_limit: int = 0
    deletion_cost: float = DEFAULT_DELETION_COST
    output_mode: OutputMode = OutputMode.BEST
    threshold: float = -math.inf
    json_out: Optional[Path] = None
    trace: bool = False
    trace_html: Optional[Path] = None
    verbose: bool = False

    def __post_init__(self) -> None:
        if (self.paren_tree is None) == (self.json_tree is None):
            raise ConfigurationError(
                "Exactly one PQ-tree input is required (--paren or --json-tree)"
            )
        if (self.genes is None) == (self.gene_file is None):
            raise ConfigurationError(
                "Exactly one gene sequence input is required (--genes or --gene-file)"
            )
        if self.tree_deletion_limit < 0 or self.string_deletion_limit < 0:
            raise ConfigurationError("Deletion limits must be non-negative")
        if self.deletion_cost < 0:
            raise ConfigurationError("The deletion cost must be non-negative")

    @classmethod
    def from_namespace(cls, args: argparse.Namespace) -> FinderConfig:
        return cls(
            paren_tree=args.paren,
            json_tree=args.json_tree,
            genes=args.genes,
            gene_file=args.gene_file,
            matrix=args.matrix,
            tree_deletion_limit=args.tree_deletions,
            string_deletion_limit=args.string_deletions,
            deletion_cost=args.deletion_cost,
            output_mode=OutputMode.from_argument(args.output),
            threshold=args.threshold,
            json_out=args.json_out,
            trace=args.trace or args.trace_html is not None,
            trace_html=args.trace_html,
            verbose=args.verbose,
        )
