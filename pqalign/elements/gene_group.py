"""Gene labels used on both sides of a tree-to-sequence alignment."""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class Strand(Enum):
    PLUS = "+"
    MINUS = "-"

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_symbol(cls, symbol: str) -> Strand:
        for strand in cls:
            if strand.value == symbol:
                return strand
        raise ValueError(f"Unknown strand symbol: {symbol!r}")


@dataclass(frozen=True)
class GeneGroup:
    """
    A gene identified by its catalog id (e.g. a COG) and its strand.

    Equality and hashing are by ``(cog, strand)``. Instances are created once
    while reading the input and never mutated.

    Example:
        >>> GeneGroup.from_label("COG0001-")
        GeneGroup(cog='COG0001', strand=<Strand.MINUS: '-'>)
        >>> str(GeneGroup.from_label("COG0002"))
        'COG0002+'
    """

    cog: str
    strand: Strand = Strand.PLUS

    def __post_init__(self) -> None:
        if not self.cog:
            raise ValueError("GeneGroup requires a non-empty catalog id")

    @classmethod
    def from_label(cls, label: str) -> GeneGroup:
        """
        Parse a label with an optional trailing strand symbol.

        A label without a valid ``+``/``-`` suffix keeps its whole text as the
        catalog id and defaults to the plus strand.
        """
        label = label.strip()
        if len(label) > 1 and label[-1] in ("+", "-"):
            return cls(label[:-1], Strand.from_symbol(label[-1]))
        return cls(label, Strand.PLUS)

    def __str__(self) -> str:
        return f"{self.cog}{self.strand.symbol}"
