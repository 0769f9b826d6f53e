import math

import pandas as pd
import pytest

from pqalign.exceptions import ConfigurationError, TreeStructureError
from pqalign.io import parse_gene_sequence
from pqalign.node_mapping import NodeMappingAlgorithm, build_mapping_algorithm
from pqalign.parser import parse_paren
from pqalign.scoring import SubstitutionMatrix, constant_deletion_cost, no_substitutions_function
from pqalign.tree import Node, NodeKind


def leaf_labels(leaves):
    return [str(leaf.label) for leaf in leaves]


def span(mapping):
    return (mapping.start_index, mapping.end_index)


def assert_complete(mapping, tree_deletion_limit, string_deletion_limit):
    """Structural properties every reported mapping must have."""
    matched = mapping.one_to_one_mapping_by_string_indices()
    assert len(matched) + mapping.tree_deletions == mapping.node.leaf_count
    assert mapping.tree_deletions == len(mapping.deleted_descendants)
    assert mapping.string_deletions == len(mapping.deleted_string_indices)
    assert mapping.tree_deletions <= tree_deletion_limit
    assert mapping.string_deletions <= string_deletion_limit
    if mapping.is_empty:
        assert not matched
        return
    covered = set(matched) | set(mapping.deleted_string_indices)
    assert covered == set(range(mapping.start_index, mapping.end_index + 1))
    assert not set(matched) & set(mapping.deleted_string_indices)
    assert mapping.start_index in matched and mapping.end_index in matched


# ----------------------------------------------------------------------------
# Leaves
# ----------------------------------------------------------------------------


def test_single_leaf_match(align):
    algorithm = align("A", "A")
    best = algorithm.best_mapping()
    assert best.score == 1.0
    assert span(best) == (1, 1)
    assert list(algorithm.result_mappings_by_end_points) == [1]


def test_single_leaf_custom_substitution(align):
    def scorer(label, gene):
        return 0.75 if label.cog == gene.cog else -math.inf

    assert align("A", "A", substitution_function=scorer).best_mapping().score == 0.75


def test_single_leaf_deleted_entirely(align):
    algorithm = align("A", "B", tree_deletions=1)
    assert list(algorithm.result_mappings_by_end_points) == [0]
    best = algorithm.best_mapping()
    assert best.is_empty
    assert best.score == -1.0
    assert (best.start_index, best.end_index) == (1, 0)
    assert leaf_labels(best.deleted_descendants) == ["A+"]


def test_single_leaf_match_and_deletion(align):
    algorithm = align("A", "A", tree_deletions=1)
    assert [m.score for m in algorithm.all_mappings()] == [1.0, -1.0]


def test_match_beats_deletion_on_equal_score(align):
    def zero(label, gene):
        return 0.0 if label.cog == gene.cog else -math.inf

    algorithm = align(
        "A", "A", tree_deletions=1, substitution_function=zero, deletion_cost=constant_deletion_cost(0.0)
    )
    best = algorithm.best_mapping()
    assert not best.is_empty
    assert span(best) == (1, 1)


# ----------------------------------------------------------------------------
# Order-fixed nodes
# ----------------------------------------------------------------------------


def test_order_fixed_exact(align):
    best = align("[A B]", "A B").best_mapping()
    assert best.score == 2.0
    assert span(best) == (1, 2)
    assert not best.is_reversed


def test_order_fixed_reversed(align):
    best = align("[A B C]", "C B A").best_mapping()
    assert best.score == 3.0
    assert best.is_reversed
    assert leaf_labels(best.one_to_one_mapping_by_string_indices().values()) == ["C+", "B+", "A+"]


def test_order_fixed_rejects_permutation(align):
    algorithm = align("[A B C]", "B A C")
    assert algorithm.best_mapping() is None
    assert algorithm.all_mappings() == []


def test_order_fixed_forward_wins_tie(align):
    # A palindromic run matches in both orientations with the same score.
    best = align("[A B A]", "A B A").best_mapping()
    assert best.score == 3.0
    assert not best.is_reversed


# ----------------------------------------------------------------------------
# Order-free nodes
# ----------------------------------------------------------------------------


def test_order_free_any_order(align):
    assert align("(A B)", "B A").best_mapping().score == 2.0
    assert align("(A B C)", "C A B").best_mapping().score == 3.0
    assert align("(A B C)", "B C A").best_mapping().score == 3.0


def test_order_free_string_index_to_leaf(align):
    algorithm = align("(A B)", "B A")
    assert {
        index: str(leaf.label)
        for index, leaf in algorithm.best_string_index_to_leaf_mapping().items()
    } == {1: "B+", 2: "A+"}


def test_order_free_needs_contiguous_run(align):
    assert align("(A B)", "A X B").best_mapping() is None


def test_order_free_leaf_mapping(align):
    algorithm = align("(A B C)", "C A B")
    best = algorithm.best_mapping()
    by_leaf = NodeMappingAlgorithm.one_to_one_leaf_mapping(best)
    assert {str(leaf.label): index for leaf, index in by_leaf.items()} == {
        "C+": 1,
        "A+": 2,
        "B+": 3,
    }


# ----------------------------------------------------------------------------
# Nested trees
# ----------------------------------------------------------------------------


@pytest.mark.parametrize("genes", ["A B C D", "A C B D", "D B C A", "D C B A"])
def test_nested_tree_frontier_orders(align, genes):
    best = align("[A (B C) D]", genes).best_mapping()
    assert best.score == 4.0
    assert span(best) == (1, 4)


@pytest.mark.parametrize("genes", ["B A C D", "A B D C", "C A B D"])
def test_nested_tree_rejects_other_orders(align, genes):
    assert align("[A (B C) D]", genes).best_mapping() is None


def test_nested_tree_inside_longer_sequence(align):
    best = align("[A (B C) D]", "X Y A C B D Z").best_mapping()
    assert best.score == 4.0
    assert span(best) == (3, 6)


# ----------------------------------------------------------------------------
# Deletions
# ----------------------------------------------------------------------------


def test_string_deletion(align):
    best = align("[A B]", "A X B", string_deletions=1).best_mapping()
    assert best.score == 1.0
    assert span(best) == (1, 3)
    assert best.deleted_string_indices == [2]
    assert best.string_deletions == 1


def test_string_deletion_custom_cost(align):
    best = align(
        "[A B]", "A X B", string_deletions=1, deletion_cost=constant_deletion_cost(0.25)
    ).best_mapping()
    assert best.score == 1.75


def test_string_deletion_needs_budget(align):
    assert align("[A B]", "A X B").best_mapping() is None


def test_string_deletion_budget_is_a_limit(align):
    assert align("[A B]", "A X Y B", string_deletions=1).best_mapping() is None
    assert align("[A B]", "A X Y B", string_deletions=2).best_mapping().score == 0.0


def test_tree_deletion(align):
    best = align("[A B C]", "A C", tree_deletions=1).best_mapping()
    assert best.score == 1.0
    assert span(best) == (1, 2)
    assert leaf_labels(best.deleted_descendants) == ["B+"]


def test_tree_deletion_needs_budget(align):
    assert align("[A B C]", "A C").best_mapping() is None


def test_string_deletion_inside_order_free_child(align):
    best = align("[A (B C) D]", "A C X B D", string_deletions=1).best_mapping()
    assert best.score == 3.0
    assert span(best) == (1, 5)
    assert best.deleted_string_indices == [3]


def test_deleted_subtree(align):
    best = align("[A (B C) D]", "A D", tree_deletions=2).best_mapping()
    assert best.score == 0.0
    assert leaf_labels(best.deleted_descendants) == ["B+", "C+"]


def test_gaps_are_never_at_the_ends(align):
    algorithm = align("[A B]", "X A B X", string_deletions=2)
    for mapping in algorithm.all_mappings():
        assert mapping.start_index not in mapping.deleted_string_indices
        assert mapping.end_index not in mapping.deleted_string_indices
    assert span(algorithm.best_mapping()) == (2, 3)


def test_mappings_are_complete(align):
    algorithm = align("[A (B C) D]", "A C X B D A B", tree_deletions=2, string_deletions=2)
    mappings = algorithm.all_mappings()
    assert mappings
    for mapping in mappings:
        assert_complete(mapping, 2, 2)


@pytest.mark.parametrize(
    "tree, genes",
    [
        ("[A (B C) D]", "A C X B Y D"),
        ("(A [B C] D)", "D C X A"),
        ("[A B C D]", "A X C D B"),
    ],
)
def test_best_score_grows_with_budgets(align, tree, genes):
    def best_score(dt, ds):
        best = align(tree, genes, tree_deletions=dt, string_deletions=ds).best_mapping()
        return -math.inf if best is None else best.score

    for dt in range(3):
        for ds in range(3):
            assert best_score(dt, ds) <= best_score(dt + 1, ds)
            assert best_score(dt, ds) <= best_score(dt, ds + 1)


def test_deterministic_results(align):
    def run():
        algorithm = align("(A [B C] D)", "D C B A B C D", tree_deletions=1, string_deletions=1)
        return [(m.score, span(m), m.tree_deletions, m.string_deletions) for m in algorithm.all_mappings()]

    assert run() == run()


# ----------------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------------


def test_best_distinct_mappings(align):
    algorithm = align("[A B]", "A B X A B")
    assert [span(m) for m in algorithm.best_distinct_mappings()] == [(1, 2), (4, 5)]


def test_best_distinct_mappings_keeps_one_per_start(align):
    algorithm = align("[A B]", "A B B", tree_deletions=1)
    distinct = algorithm.best_distinct_mappings()
    starts = [m.start_index for m in distinct]
    assert len(starts) == len(set(starts))
    assert span(distinct[0]) == (1, 2)


def test_best_distinct_mappings_skip_whole_tree_deletion(align):
    algorithm = align("[A B]", "X A B", tree_deletions=2)
    assert any(m.is_empty for m in algorithm.all_mappings())
    assert [span(m) for m in algorithm.best_distinct_mappings()] == [(2, 3)]

    assert align("A", "B", tree_deletions=1).best_distinct_mappings() == []


def test_threshold_is_strict(align):
    algorithm = align("[A B]", "A B X A", tree_deletions=1)
    assert algorithm.all_mappings(2.0) == []
    assert [span(m) for m in algorithm.all_mappings(1.5)] == [(1, 2)]
    assert algorithm.best_distinct_mappings(2.0) == []


def test_all_mappings_sorted_best_first(align):
    algorithm = align("[A B]", "A B X A", tree_deletions=1)
    keys = [m.sort_key for m in algorithm.all_mappings()]
    assert keys == sorted(keys, reverse=True)


def test_queries_before_run():
    algorithm = build_mapping_algorithm(parse_gene_sequence("A"), parse_paren("A"))
    assert algorithm.best_mapping() is None
    assert algorithm.all_mappings() == []
    assert algorithm.best_distinct_mappings() == []
    assert algorithm.best_string_index_to_leaf_mapping() is None


def test_substitution_matrix_scoring(align):
    matrix = SubstitutionMatrix(
        pd.DataFrame({"A": [2.0, None], "C": [None, 0.5]}, index=["A", "B"])
    )
    best = align("[A B]", "A C", substitution_function=matrix).best_mapping()
    assert best.score == 2.5


def test_non_finite_substitution_scores_are_dropped(align):
    def scorer(label, gene):
        return math.nan if gene.cog == "X" else no_substitutions_function(label, gene)

    assert align("A", "X").best_mapping() is None
    assert align("A", "X A", substitution_function=scorer).best_mapping().start_index == 2


# ----------------------------------------------------------------------------
# Validation
# ----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "kwargs",
    [
        {"tree_deletion_limit": -1},
        {"string_deletion_limit": -2},
        {"tree_deletion_limit": 1.5},
        {"string_deletion_limit": True},
    ],
)
def test_builder_rejects_bad_limits(kwargs):
    with pytest.raises(ConfigurationError):
        build_mapping_algorithm(parse_gene_sequence("A"), parse_paren("A"), **kwargs)


def test_builder_rejects_empty_sequence():
    with pytest.raises(ConfigurationError):
        build_mapping_algorithm([], parse_paren("A"))


def test_builder_rejects_invalid_tree():
    tree = Node.q_node([Node.leaf("A"), Node(NodeKind.ORDER_FREE)])
    with pytest.raises(TreeStructureError):
        build_mapping_algorithm(parse_gene_sequence("A"), tree)


def test_engine_rejects_negative_limits():
    with pytest.raises(ValueError):
        NodeMappingAlgorithm(
            parse_gene_sequence("A"),
            parse_paren("A"),
            -1,
            0,
            no_substitutions_function,
            constant_deletion_cost(),
        )


def test_engine_rejects_non_callable_scoring():
    with pytest.raises(TypeError):
        NodeMappingAlgorithm(
            parse_gene_sequence("A"), parse_paren("A"), 0, 0, None, constant_deletion_cost()
        )


def test_engine_rejects_negative_deletion_cost(align):
    with pytest.raises(ValueError):
        align("A", "A", tree_deletions=1, deletion_cost=lambda gene: -1.0)
