import pytest

from pqalign.exceptions import TreeStructureError
from pqalign.tree import Node, NodeKind


def build_test_tree():
    """
    Q-node with a P-node in the middle:

          [ ]
        /  |  \\
       A  ( )  D
          / \\
         B   C
    """
    a, b, c, d = (Node.leaf(x) for x in ("A+", "B+", "C-", "D+"))
    p = Node.p_node([b, c])
    root = Node.q_node([a, p, d])
    return root, (a, b, c, d, p)


def test_parent_pointers_are_set():
    root, (a, b, c, d, p) = build_test_tree()
    assert a.parent is root
    assert b.parent is p
    assert p.parent is root
    assert root.parent is None


def test_leaves_left_to_right():
    root, (a, b, c, d, p) = build_test_tree()
    assert root.leaves == [a, b, c, d]
    assert root.leaf_count == 4
    assert p.leaf_count == 2
    assert a.leaves == [a]


def test_traverse_is_post_order():
    root, (a, b, c, d, p) = build_test_tree()
    assert list(root.traverse()) == [a, b, c, p, d, root]


def test_index_nodes():
    root, (a, b, c, d, p) = build_test_tree()
    assert root.index_nodes() == 6
    assert [n.index for n in root.traverse()] == [0, 1, 2, 3, 4, 5]
    assert root.index == 5


def test_kind_predicates():
    root, (a, b, c, d, p) = build_test_tree()
    assert root.is_order_fixed and not root.is_order_free
    assert p.is_order_free
    assert a.is_leaf and a.kind is NodeKind.LEAF


def test_nodes_compare_by_identity():
    first, second = Node.leaf("A"), Node.leaf("A")
    assert first != second
    assert first.label == second.label
    assert len({first, second}) == 2


def test_to_paren():
    root, _ = build_test_tree()
    assert root.to_paren() == "[A+ (B+ C-) D+]"


def test_validate_accepts_valid_tree():
    root, _ = build_test_tree()
    root.validate()


def test_validate_rejects_internal_node_without_children():
    with pytest.raises(TreeStructureError):
        Node.q_node([Node.leaf("A"), Node(NodeKind.ORDER_FREE)]).validate()


def test_validate_rejects_leaf_without_label():
    with pytest.raises(TreeStructureError):
        Node(NodeKind.LEAF).validate()


def test_validate_rejects_missing_kind():
    with pytest.raises(TreeStructureError):
        Node.p_node([Node(None, children=[Node.leaf("A")])]).validate()


def test_validate_rejects_shared_subtree():
    leaf = Node.leaf("A")
    with pytest.raises(TreeStructureError):
        Node.q_node([leaf, leaf]).validate()
