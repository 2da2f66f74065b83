import itertools
from fractions import Fraction

import pytest

from huffman import (
    CodeTable,
    FrequencyEntry,
    HuffmanTree,
    count_frequencies,
)


def _optimal_cost(counts):
    """Smallest sum(count * length) over all Kraft-feasible code lengths."""
    n = len(counts)
    best = None
    for lengths in itertools.product(range(1, n), repeat=n):
        if sum(Fraction(1, 2 ** length) for length in lengths) > 1:
            continue
        cost = sum(c * length for c, length in zip(counts, lengths))
        if best is None or cost < best:
            best = cost
    return best


def _assert_prefix_free(codes):
    values = list(codes.values())
    for a, b in itertools.permutations(values, 2):
        assert not b.startswith(a), (a, b)


def test_count_frequencies_keeps_first_occurrence_order():
    assert count_frequencies("abracadabra") == {
        "a": 5, "b": 2, "r": 2, "c": 1, "d": 1,
    }
    assert list(count_frequencies("cab")) == ["c", "a", "b"]


def test_count_frequencies_empty():
    assert count_frequencies("") == {}


def test_build_rejects_empty_duplicate_and_negative():
    with pytest.raises(ValueError):
        HuffmanTree.build({})
    with pytest.raises(ValueError):
        HuffmanTree.build([("a", 1), ("a", 2)])
    with pytest.raises(ValueError):
        HuffmanTree.build({"a": -1})


def test_build_accepts_frequency_entries():
    tree = HuffmanTree.build([FrequencyEntry("x", 1), FrequencyEntry("y", 3)])
    assert tree.code_table().codes == {"x": "0", "y": "1"}


def test_tree_shape_has_n_minus_one_internal_nodes():
    freqs = count_frequencies("the quick brown fox jumps over the lazy dog")
    tree = HuffmanTree.build(freqs)
    leaves = [n for n in tree.nodes if n.is_leaf]
    internal = [n for n in tree.nodes if not n.is_leaf]
    assert len(leaves) == len(freqs) == len(tree)
    assert len(internal) == len(freqs) - 1
    assert tree.nodes[tree.root].count == sum(freqs.values())
    for node in internal:
        assert node.symbol is None
        assert node.count == (
            tree.nodes[node.left].count + tree.nodes[node.right].count
        )


def test_single_symbol_gets_one_bit_code():
    tree = HuffmanTree.build(count_frequencies("zzzz"))
    assert tree.nodes[tree.root].is_leaf
    table = tree.code_table()
    assert table.codes == {"z": "0"}
    assert table.encoded_length({"z": 4}) == 4


def test_equal_counts_break_ties_by_insertion_order():
    assert HuffmanTree.build({"a": 2, "b": 2}).code_table().codes == {
        "a": "0", "b": "1",
    }
    assert HuffmanTree.build({"b": 2, "a": 2}).code_table().codes == {
        "b": "0", "a": "1",
    }
    codes = HuffmanTree.build(count_frequencies("abcd")).code_table().codes
    assert codes == {"a": "00", "b": "01", "c": "10", "d": "11"}


def test_multi_symbol_scenario():
    freqs = count_frequencies("aaabbc")
    table = HuffmanTree.build(freqs).code_table()
    assert table.codes == {"a": "0", "b": "11", "c": "10"}
    assert table.encoded_length(freqs) == 9


def test_build_is_reproducible():
    freqs = count_frequencies("mississippi river banks")
    first = HuffmanTree.build(freqs).code_table()
    second = HuffmanTree.build(dict(freqs)).code_table()
    assert first == second


@pytest.mark.parametrize(
    "counts",
    [
        [1, 1],
        [5, 1, 1],
        [3, 2, 1, 1],
        [1, 1, 1, 1, 1],
        [10, 6, 2, 1, 1],
        [7, 7, 7, 3, 1],
        [1, 2, 4, 8, 16],
        [0, 0, 5, 2],
    ],
)
def test_codes_are_prefix_free_and_optimal(counts):
    freqs = {chr(ord("a") + i): c for i, c in enumerate(counts)}
    table = HuffmanTree.build(freqs).code_table()
    codes = table.codes
    assert set(codes) == set(freqs)
    assert all(codes.values())
    _assert_prefix_free(codes)
    assert table.encoded_length(freqs) == _optimal_cost(counts)


def test_large_counts_do_not_overflow():
    big = 2 ** 62
    table = HuffmanTree.build({"a": big, "b": big, "c": 1}).code_table()
    _assert_prefix_free(table.codes)
    assert len(table.code_for("c")) == 2


def test_code_table_lookups():
    table = CodeTable({"a": "0", "b": "10", "c": "11"})
    assert table.code_for("b") == "10"
    assert table.symbol_for("11") == "c"
    assert table.symbol_for("1") is None
    assert "a" in table and "z" not in table
    assert len(table) == 3
    assert table.symbols == {"0": "a", "10": "b", "11": "c"}
    with pytest.raises(KeyError):
        table.code_for("z")


def test_code_table_copies_are_detached():
    table = CodeTable({"a": "0", "b": "1"})
    table.codes["a"] = "1"
    assert table.code_for("a") == "0"


def test_code_table_rejects_shared_code():
    with pytest.raises(ValueError):
        CodeTable({"a": "0", "b": "0"})
