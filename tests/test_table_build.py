import random

import pytest
from bitarray import bitarray

from huffkit.core.alphabet import Alphabet
from huffkit.core.builder import build
from huffkit.core.errors import (
    DuplicateSymbol,
    EmptyAlphabet,
    EmptyTable,
    InvalidSymbol,
    InvalidWeight,
    MalformedTable,
    NotALeaf,
    NotInternalNode,
    UnknownSymbol,
)
from huffkit.core.table import NO_CHILD, CodeTable, Node


EIGHT = [("A", 8), ("B", 3), ("C", 1), ("D", 1), ("E", 1), ("F", 1), ("G", 1), ("H", 1)]


def _codes(table):
    return {s: c.to01() for s, c in table.codebook().items()}


def test_build_empty_alphabet_fails():
    with pytest.raises(EmptyAlphabet):
        build([])


def test_alphabet_rejects_duplicates_and_bad_weights():
    with pytest.raises(DuplicateSymbol):
        Alphabet([("a", 1), ("b", 2), ("a", 3)])
    for bad in (0, -1, 1.5, True, "3"):
        with pytest.raises(InvalidWeight):
            build([("a", 1), ("b", bad)])


def test_alphabet_rejects_none_and_unhashable_symbols():
    with pytest.raises(InvalidSymbol):
        Alphabet([(None, 1)])
    with pytest.raises(InvalidSymbol):
        Alphabet([(["a"], 1)])


def test_alphabet_from_sample_keeps_first_seen_order():
    a = Alphabet.from_sample("banana")
    assert list(a) == [("b", 1), ("a", 3), ("n", 2)]
    assert a.total_weight == 6
    assert a.weight_of("n") == 2
    assert "b" in a and "z" not in a


def test_eight_symbol_tree_shape_and_codes():
    table = build(EIGHT)

    assert len(table) == 2 * 8 - 1
    assert table.root().index == len(table) - 1
    assert table.weight == 17
    assert table.depth == 4

    assert _codes(table) == {
        "A": "0",
        "C": "1000",
        "D": "1001",
        "E": "1010",
        "F": "1011",
        "G": "1100",
        "H": "1101",
        "B": "111",
    }


def test_ties_pop_first_inserted_first():
    assert _codes(build([("a", 1), ("b", 1)])) == {"a": "0", "b": "1"}
    assert _codes(build([("a", 1), ("b", 1), ("c", 1)])) == {"c": "0", "a": "10", "b": "11"}


def test_repeated_builds_are_identical():
    pairs = [(chr(97 + i), random.Random(i).randint(1, 5)) for i in range(20)]
    t1 = build(pairs)
    t2 = build(Alphabet(pairs))
    assert list(t1) == list(t2)
    assert t1.codebook() == t2.codebook()


def test_structural_invariants_on_random_alphabets():
    rng = random.Random(1234)
    for n in (2, 3, 7, 50, 256):
        pairs = [(i, rng.randint(1, 1000)) for i in range(n)]
        table = build(pairs)

        assert len(table) == 2 * n - 1
        assert table.weight == sum(w for _, w in pairs)
        assert table.leaf_count == n

        for node in table:
            if node.is_leaf:
                assert node.left == NO_CHILD and node.right == NO_CHILD
                assert node.symbol is not None
            else:
                assert node.left < node.index and node.right < node.index
                left, right = table.left(node), table.right(node)
                assert node.weight == left.weight + right.weight


def test_codes_are_prefix_free():
    rng = random.Random(7)
    pairs = [(i, rng.randint(1, 50)) for i in range(64)]
    codes = [c.to01() for c in build(pairs).codebook().values()]
    for i, a in enumerate(codes):
        for j, b in enumerate(codes):
            if i != j:
                assert not b.startswith(a)


def test_navigation_misuse_raises():
    table = build(EIGHT)
    root = table.root()
    leaf_a = table.left(root)

    assert table.is_leaf(leaf_a)
    assert table.symbol(leaf_a) == "A"

    with pytest.raises(NotALeaf):
        table.symbol(root)
    with pytest.raises(NotInternalNode):
        table.left(leaf_a)
    with pytest.raises(NotInternalNode):
        table.right(leaf_a)
    with pytest.raises(EmptyTable):
        CodeTable([]).root()


def test_covers_matches_subtrees():
    table = build(EIGHT)
    root = table.root()
    rest = table.right(root)

    for sym, _ in EIGHT:
        assert table.covers(root, sym)
    assert table.covers(table.left(root), "A")
    assert not table.covers(table.left(root), "B")
    assert table.covers(rest, "B") and table.covers(rest, "H")
    assert not table.covers(rest, "A")
    assert not table.covers(root, "Z")
    assert not table.covers(root, ["unhashable"])


def test_code_for_unknown_symbol():
    table = build(EIGHT)
    assert table.code_for("B") == bitarray("111")
    with pytest.raises(UnknownSymbol):
        table.code_for("Z")


def test_single_symbol_table_is_one_leaf_with_code_zero():
    table = build([("x", 5)])
    assert len(table) == 1
    assert table.is_leaf(table.root())
    assert table.symbol(table.root()) == "x"
    assert table.code_for("x") == bitarray("0")


def test_walk_is_preorder_left_first():
    table = build([("a", 1), ("b", 1), ("c", 1)])
    order = [(n.symbol, depth) for n, depth in table.walk()]
    assert order == [(None, 0), ("c", 1), (None, 1), ("a", 2), ("b", 2)]


def test_average_code_length():
    table = build(EIGHT)
    # A:1*8 + B:3*3 + six 4-bit codes
    assert table.average_code_length() == pytest.approx((8 + 9 + 6 * 4) / 17)


def test_deep_skewed_tree_builds_without_recursion():
    n = 1500
    table = build([(i, 2 ** i) for i in range(n)])
    assert table.depth == n - 1
    # the lighter chain always pops first, so it goes left
    assert table.code_for(0) == bitarray("0" * (n - 1))
    assert table.code_for(n - 1) == bitarray("1")


def test_malformed_node_arrays_are_rejected():
    with pytest.raises(MalformedTable):
        CodeTable([Node(index=0, weight=1, left=0, right=NO_CHILD)])
    with pytest.raises(MalformedTable):
        CodeTable([
            Node(index=0, weight=1, symbol="a"),
            Node(index=1, weight=1, symbol="b"),
            Node(index=2, weight=3, left=0, right=1),
        ])


def test_leaf_weights_must_be_positive():
    for bad in (0, -2):
        with pytest.raises(MalformedTable):
            CodeTable([Node(index=0, weight=bad, symbol="a")])
    with pytest.raises(MalformedTable):
        CodeTable([
            Node(index=0, weight=0, symbol="a"),
            Node(index=1, weight=2, symbol="b"),
            Node(index=2, weight=2, left=0, right=1),
        ])
    assert issubclass(MalformedTable, ValueError)


def test_hand_built_table_codes_match_builder():
    nodes = [
        Node(index=0, weight=2, symbol="a"),
        Node(index=1, weight=1, symbol="b"),
        Node(index=2, weight=1, symbol="c"),
        Node(index=3, weight=2, left=1, right=2),
        Node(index=4, weight=4, left=0, right=3),
    ]
    table = CodeTable(nodes)
    assert _codes(table) == {"a": "0", "b": "10", "c": "11"}
    assert table.depth == 2
    assert list(table) == list(build([("a", 2), ("b", 1), ("c", 1)]))
