from pqalign.elements.gene_group import GeneGroup, Strand

__all__ = ["GeneGroup", "Strand"]
