"""Human-readable reports of mappings."""

from typing import List, Sequence

from tabulate import tabulate

from pqalign.elements.gene_group import GeneGroup
from pqalign.logger.formatting import format_genes, format_leaf_labels, format_score
from pqalign.mapping import Mapping


def derived_substring_line(mapping: Mapping, genes: Sequence[GeneGroup]) -> str:
    start, end = mapping.start_index, mapping.end_index
    if mapping.is_empty:
        return "The derived substring is empty (all leaves deleted)."
    substring = format_genes(genes[start - 1 : end])
    return f"The derived substring is S[{start}:{end}] = {substring}"


def one_to_one_table(mapping: Mapping, genes: Sequence[GeneGroup]) -> str:
    rows = [
        [index, genes[index - 1], leaf.label]
        for index, leaf in mapping.one_to_one_mapping_by_string_indices().items()
    ]
    return tabulate(rows, headers=["index", "gene", "leaf"], tablefmt="simple")


def deleted_genes_lines(mapping: Mapping, genes: Sequence[GeneGroup]) -> List[str]:
    deleted = mapping.deleted_string_indices
    if not deleted:
        return ["No genes deleted in the derivation."]
    lines = [f"{len(deleted)} gene(s) deleted in the derivation:"]
    lines.extend(f"{genes[i - 1]} at index {i}" for i in deleted)
    return lines


def deleted_leaves_lines(mapping: Mapping) -> List[str]:
    deleted = mapping.deleted_descendants
    if not deleted:
        return ["No leafs deleted in the derivation."]
    return [
        f"{len(deleted)} leaf(s) deleted in the derivation:",
        format_leaf_labels(deleted),
    ]


def format_mapping(mapping: Mapping, genes: Sequence[GeneGroup]) -> str:
    """Full textual report of one mapping."""
    lines = [f"Derivation score: {format_score(mapping.score)}"]
    lines.append(derived_substring_line(mapping, genes))
    lines.append("The one-to-one mapping:")
    lines.append(one_to_one_table(mapping, genes))
    lines.extend(deleted_genes_lines(mapping, genes))
    lines.extend(deleted_leaves_lines(mapping))
    return "\n".join(lines) + "\n"


def format_report(mappings: Sequence[Mapping], genes: Sequence[GeneGroup]) -> str:
    if not mappings:
        return "No mapping found.\n"
    return "\n".join(format_mapping(mapping, genes) for mapping in mappings)
