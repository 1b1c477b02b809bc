import itertools
import random

import pytest

from huff_errors import EmptyAlphabetMismatch, MalformedTree, TruncatedInput
from huff_tree import (
    HuffmanTree, Node, build_freq_map, encoded_bit_length, leaves, merge_freq_maps, tree_to_dot,
)


def _random_bytes(n, seed=1234):
    rng = random.Random(seed)
    return bytes(rng.getrandbits(8) for _ in range(n))


# ---------------------------
# frequency model
# ---------------------------
def test_freq_map_empty():
    assert build_freq_map(b"") == {}


def test_freq_map_counts_sum_to_length():
    data = _random_bytes(5000)
    freq = build_freq_map(data)
    assert sum(freq.values()) == len(data)
    assert len(freq) <= 256
    assert all(count >= 1 for count in freq.values())


def test_freq_map_absent_symbols_are_not_keys():
    freq = build_freq_map(b"\x00\x00\x00\x01")
    assert freq == {0: 3, 1: 1}
    assert 2 not in freq


def test_merge_freq_maps_matches_whole_count():
    data = _random_bytes(3000)
    parts = [build_freq_map(data[i:i + 700]) for i in range(0, len(data), 700)]
    assert merge_freq_maps(*parts) == build_freq_map(data)


# ---------------------------
# construction
# ---------------------------
def test_build_empty_has_no_root():
    tree = HuffmanTree.build(b"")
    assert tree.root is None
    assert tree.is_empty()
    assert tree.generate_codes() == {}
    assert tree.serialize() == b""
    assert tree.encode(b"") == b""


def test_build_single_symbol_is_leaf_root():
    tree = HuffmanTree.build(b"A" * 1000)
    assert tree.root.is_leaf()
    assert tree.root.sym == 0x41
    assert tree.root.freq == 1000
    assert tree.generate_codes() == {0x41: "0"}


def test_internal_nodes_have_two_children_and_summed_freq():
    tree = HuffmanTree.build(_random_bytes(2000))

    def check(node):
        if node.is_leaf():
            assert node.left is None and node.right is None
            return
        assert node.left is not None and node.right is not None
        assert node.freq == node.left.freq + node.right.freq
        check(node.left)
        check(node.right)

    check(tree.root)
    assert tree.root.freq == 2000


def test_first_popped_goes_left():
    tree = HuffmanTree.build(bytes([0, 0, 0, 1]))
    root = tree.root
    assert not root.is_leaf()
    assert root.left.sym == 1
    assert root.right.sym == 0
    assert tree.generate_codes() == {1: "0", 0: "1"}


def test_build_is_deterministic():
    data = b"abracadabra" * 7 + bytes(range(40))
    assert HuffmanTree.build(data).serialize() == HuffmanTree.build(data).serialize()


def test_equal_frequencies_tie_break_on_symbol_order():
    tree = HuffmanTree.from_frequencies({7: 1, 3: 1})
    assert tree.root.left.sym == 3
    assert tree.root.right.sym == 7


# ---------------------------
# code table
# ---------------------------
def test_codes_are_prefix_free():
    codes = HuffmanTree.build(_random_bytes(4000, seed=7)).generate_codes()
    assert len(codes) > 1
    for a, b in itertools.permutations(codes.values(), 2):
        assert not b.startswith(a)


def test_codes_cover_all_symbols():
    data = bytes(range(256))
    codes = HuffmanTree.build(data).generate_codes()
    assert set(codes) == set(range(256))
    # uniform frequencies over 256 symbols give a perfect tree
    assert {len(c) for c in codes.values()} == {8}


def test_frequent_symbols_get_shorter_codes():
    data = b"a" * 100 + b"b" * 10 + b"c" * 5 + b"d"
    codes = HuffmanTree.build(data).generate_codes()
    assert len(codes[ord("a")]) < len(codes[ord("d")])


def test_encoded_bit_length():
    freq = {0: 3, 1: 1}
    codes = {0: "1", 1: "0"}
    assert encoded_bit_length(freq, codes) == 4


# ---------------------------
# encode / decode
# ---------------------------
def test_concrete_scenario_with_given_tree():
    # 0x00 on the left, 0x01 on the right
    tree = HuffmanTree(Node(None, 4, left=Node(0, 3), right=Node(1, 1)))
    codes = tree.generate_codes()
    assert codes == {0: "0", 1: "1"}
    packed = tree.encode(bytes([0, 0, 0, 1]), codes)
    assert packed == bytes([0b00010000])
    assert tree.decode(packed, 4) == bytes([0, 0, 0, 1])


def test_concrete_scenario_with_built_tree():
    data = bytes([0, 0, 0, 1])
    tree = HuffmanTree.build(data)
    packed = tree.encode(data)
    assert packed == bytes([0b11100000])
    assert tree.decode(packed, 4) == data


def test_encode_flushes_full_bytes_msb_first():
    tree = HuffmanTree(Node(None, 2, left=Node(0, 1), right=Node(1, 1)))
    data = bytes([1, 0, 1, 0, 1, 0, 1, 0, 1])
    assert tree.encode(data) == bytes([0b10101010, 0b10000000])


@pytest.mark.parametrize("data", [
    b"",
    b"\x00",
    b"A" * 1000,
    bytes(range(256)),
    bytes(range(256)) * 3 + b"\xff" * 500,
    b"This is a test" * 100,
])
def test_roundtrip(data):
    tree = HuffmanTree.build(data)
    assert tree.decode(tree.encode(data), len(data)) == data


def test_roundtrip_random():
    data = _random_bytes(10 * 1024)
    tree = HuffmanTree.build(data)
    assert tree.decode(tree.encode(data), len(data)) == data


def test_decode_ignores_trailing_pad_bits():
    tree = HuffmanTree(Node(None, 4, left=Node(0, 3), right=Node(1, 1)))
    # pad bits are all ones here; they must not become extra symbols
    assert tree.decode(bytes([0b00011111]), 4) == bytes([0, 0, 0, 1])


def test_single_symbol_roundtrip_uses_one_bit_each():
    data = b"A" * 1000
    tree = HuffmanTree.build(data)
    packed = tree.encode(data)
    assert len(packed) == 125
    assert tree.decode(packed, 1000) == data


def test_single_symbol_decode_short_packed_raises():
    tree = HuffmanTree.build(b"A" * 1000)
    with pytest.raises(TruncatedInput):
        tree.decode(bytes(124), 1000)


def test_decode_short_packed_raises():
    data = b"This is a test" * 100
    tree = HuffmanTree.build(data)
    packed = tree.encode(data)
    with pytest.raises(TruncatedInput):
        tree.decode(packed[:-3], len(data))


def test_decode_zero_length_reads_nothing():
    tree = HuffmanTree.build(b"xyz")
    assert tree.decode(b"", 0) == b""
    assert HuffmanTree(None).decode(b"", 0) == b""


def test_decode_empty_tree_with_length_raises():
    with pytest.raises(EmptyAlphabetMismatch):
        HuffmanTree(None).decode(b"\x00", 3)


# ---------------------------
# serialization
# ---------------------------
def test_serialize_layout():
    tree = HuffmanTree.build(bytes([0, 0, 0, 1]))
    assert tree.serialize() == bytes([1, 0, 1, 0, 0])


def test_serialize_single_leaf():
    assert HuffmanTree.build(b"AAAA").serialize() == bytes([0, 0x41])


def test_deserialize_reproduces_shape():
    tree = HuffmanTree.build(_random_bytes(3000, seed=99))
    rebuilt = HuffmanTree.deserialize(tree.serialize())
    assert rebuilt.root.same_shape(tree.root)
    assert [n.sym for n in leaves(rebuilt.root)] == [n.sym for n in leaves(tree.root)]
    assert all(n.freq == 0 for n in leaves(rebuilt.root))


def test_deserialized_tree_decodes_original_encoding():
    data = _random_bytes(8000, seed=5) + b"\x00" * 4000
    tree = HuffmanTree.build(data)
    packed = tree.encode(data, tree.generate_codes())
    rebuilt = HuffmanTree.deserialize(tree.serialize())
    assert rebuilt.decode(packed, len(data)) == data


def test_deserialize_empty_blob_is_empty_tree():
    assert HuffmanTree.deserialize(b"").root is None


@pytest.mark.parametrize("blob", [
    b"\x01",              # internal node with no children
    b"\x01\x00\x41",      # right child missing
    b"\x00",              # leaf missing its symbol
    b"\x01\x00\x41\x00",  # right leaf missing its symbol
    b"\x02\x41",          # unknown flag
    b"\x00\x41\x00",      # trailing bytes
])
def test_deserialize_malformed(blob):
    with pytest.raises(MalformedTree):
        HuffmanTree.deserialize(blob)


def test_deserialize_rejects_deep_chain():
    blob = b"\x01\x00\x41" * 300 + b"\x00\x42"
    with pytest.raises(MalformedTree):
        HuffmanTree.deserialize(blob)


def test_same_shape_ignores_frequencies():
    a = Node(None, 9, left=Node(1, 4), right=Node(2, 5))
    b = Node(None, 0, left=Node(1, 0), right=Node(2, 0))
    c = Node(None, 0, left=Node(2, 0), right=Node(1, 0))
    assert a.same_shape(b)
    assert not a.same_shape(c)
    assert not a.same_shape(None)


def test_tree_to_dot():
    tree = HuffmanTree.build(bytes([0, 0, 0, 1]))
    dot = tree_to_dot(tree.root)
    assert dot.startswith("digraph G {")
    assert dot.count("->") == 2
    assert tree_to_dot(None) == "digraph G {\nnode [shape=circle, style=filled, color=lightblue];\n}"
