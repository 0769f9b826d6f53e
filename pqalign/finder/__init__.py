"""
Command-line search for PQ-tree derivations in gene sequences.

Run ``python -m pqalign.finder --help`` for the options.
"""

from .config import FinderConfig, OutputMode
from .report import format_mapping, format_report

__all__ = [
    "FinderConfig",
    "OutputMode",
    "format_mapping",
    "format_report",
]
