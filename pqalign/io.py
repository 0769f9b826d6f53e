import json
import re
from pathlib import Path
from typing import IO, Any, Dict, List, Sequence, Union

import pandas as pd

from pqalign.elements.gene_group import GeneGroup
from pqalign.exceptions import InputError, TreeParseError
from pqalign.mapping import Mapping
from pqalign.scoring import SubstitutionMatrix
from pqalign.tree import Node, NodeKind

PathLike = Union[str, Path]

_INTERNAL_TYPES = {
    "Q": NodeKind.ORDER_FIXED,
    "P": NodeKind.ORDER_FREE,
}


class MappingEncoder(json.JSONEncoder):
    def default(self, o: Any):
        if isinstance(o, GeneGroup):
            return str(o)

        if isinstance(o, Node):
            if o.is_leaf:
                return {"label": o.label}
            return {"type": o.kind.value, "children": o.children}

        if isinstance(o, Mapping):
            mapping_dict: Dict[str, Any] = {
                "score": o.score,
                "start_index": o.start_index,
                "end_index": o.end_index,
                "tree_deletions": o.tree_deletions,
                "string_deletions": o.string_deletions,
                "one_to_one": [
                    {"index": index, "leaf": leaf.label}
                    for index, leaf in o.one_to_one_mapping_by_string_indices().items()
                ],
                "deleted_leaves": [leaf.label for leaf in o.deleted_descendants],
                "deleted_string_indices": o.deleted_string_indices,
            }
            return mapping_dict

        return super().default(o)


# ------------------------------------------------------------------------
# Trees
# ------------------------------------------------------------------------


def tree_from_dict(data: Any) -> Node:
    """
    Build a tree from its JSON form.

    Leaves are ``{"label": "COG1+"}`` (``"type": "leaf"`` is optional);
    internal nodes are ``{"type": "Q" | "P", "children": [...]}``.
    """
    root = _node_from_dict(data, path="root")
    root.index_nodes()
    return root


def _node_from_dict(data: Any, path: str) -> Node:
    if not isinstance(data, dict):
        raise TreeParseError(f"Expected an object at {path}, got {type(data).__name__}")

    node_type = data.get("type", "leaf" if "label" in data else None)
    if node_type == "leaf":
        label = data.get("label")
        if not isinstance(label, str) or not label.strip():
            raise TreeParseError(f"Leaf at {path} needs a non-empty string label")
        return Node.leaf(GeneGroup.from_label(label))

    if node_type not in _INTERNAL_TYPES:
        raise TreeParseError(f"Unknown node type {node_type!r} at {path}")
    children_data = data.get("children")
    if not isinstance(children_data, list) or not children_data:
        raise TreeParseError(f"Internal node at {path} needs a non-empty children list")
    children = [
        _node_from_dict(child, f"{path}.children[{i}]")
        for i, child in enumerate(children_data)
    ]
    return Node(_INTERNAL_TYPES[node_type], children=children)


def read_tree_json(path: PathLike) -> Node:
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise InputError(f"Could not read PQ-tree JSON file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise TreeParseError(f"Could not retrieve PQ-tree from JSON file {path}: {e}") from e
    return tree_from_dict(data)


# ------------------------------------------------------------------------
# Gene sequences
# ------------------------------------------------------------------------


def parse_gene_sequence(text: str) -> List[GeneGroup]:
    """Split a string of gene labels on whitespace and commas."""
    labels = [token for token in re.split(r"[\s,]+", text.strip()) if token]
    if not labels:
        raise InputError("The gene sequence is empty")
    return [GeneGroup.from_label(label) for label in labels]


def read_gene_sequence(path: PathLike) -> List[GeneGroup]:
    """Read a gene sequence from a JSON file holding a list of labels."""
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise InputError(f"Could not read gene sequence file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputError(f"Could not retrieve gene sequence from JSON file {path}: {e}") from e

    if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
        raise InputError(f"Gene sequence file {path} must hold a JSON list of labels")
    if not data:
        raise InputError(f"Gene sequence file {path} is empty")
    try:
        return [GeneGroup.from_label(label) for label in data]
    except ValueError as e:
        raise InputError(f"Invalid gene label in {path}: {e}") from e


# ------------------------------------------------------------------------
# Substitution matrices
# ------------------------------------------------------------------------


def read_substitution_matrix(path: PathLike) -> SubstitutionMatrix:
    """
    Read a tab-separated square score table.

    The header row and the first column hold catalog ids; empty cells forbid
    the corresponding substitution.
    """
    try:
        frame = pd.read_csv(path, sep="\t", index_col=0)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise InputError(f"Could not retrieve substitution matrix from file {path}: {e}") from e
    try:
        return SubstitutionMatrix(frame)
    except ValueError as e:
        raise InputError(f"Substitution matrix {path} holds non-numeric scores: {e}") from e


# ------------------------------------------------------------------------
# Output
# ------------------------------------------------------------------------


def dump_json(mappings: Sequence[Mapping], f: IO[str]):
    json.dump(list(mappings), f, cls=MappingEncoder, indent=2)


def write_mappings_json(mappings: Sequence[Mapping], path: PathLike):
    with open(path, mode="w") as f:
        dump_json(mappings, f)


def write_tree_json(tree: Node, path: PathLike):
    with open(path, mode="w") as f:
        json.dump(tree, f, cls=MappingEncoder)
