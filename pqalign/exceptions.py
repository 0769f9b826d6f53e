"""
Custom exceptions for PQ-tree alignment.
"""


class PQAlignError(Exception):
    """Base exception for pqalign errors."""

    pass


class ConfigurationError(PQAlignError):
    """Raised when run parameters are missing or invalid (limits, output mode, ...)."""

    pass


class InputError(PQAlignError):
    """Raised when an input file or gene sequence cannot be read."""

    pass


class TreeParseError(PQAlignError, ValueError):
    """Raised when a tree representation cannot be parsed."""

    pass


class TreeStructureError(PQAlignError):
    """Raised when a tree violates the PQ-tree structure rules."""

    pass
