import heapq
import itertools
from collections import Counter
from typing import Dict, Iterable, Optional, Tuple

from huff_errors import EmptyAlphabetMismatch, MalformedTree, TruncatedInput

# deepest possible tree over 256 symbols
MAX_TREE_DEPTH = 255

LEAF = 0
INTERNAL = 1


# ---------------------------------
# Tree node
# ---------------------------------
class Node:
    def __init__(self, sym: Optional[int], freq: int, seq: int = 0,
                 left: Optional['Node'] = None, right: Optional['Node'] = None):
        # sym: None for internal nodes, 0..255 for leaf nodes
        self.sym = sym
        self.freq = freq
        self.seq = seq
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.sym is not None

    def __lt__(self, other: 'Node'):
        # equal freqs fall back to creation order so builds are repeatable
        return (self.freq, self.seq) < (other.freq, other.seq)

    def __repr__(self):
        if self.is_leaf():
            return f"Node(sym={self.sym}, freq={self.freq})"
        return f"Node(freq={self.freq}, left={self.left!r}, right={self.right!r})"

    def same_shape(self, other: Optional['Node']) -> bool:
        """Compare shape and leaf symbols, ignoring frequencies."""
        if other is None or self.sym != other.sym:
            return False
        if self.is_leaf():
            return True
        return self.left.same_shape(other.left) and self.right.same_shape(other.right)


# ------------------------------------
# 1) Count bytes (freq)
# ------------------------------------
def build_freq_map(data: bytes) -> Dict[int, int]:
    return dict(Counter(data))


def merge_freq_maps(*maps: Dict[int, int]) -> Dict[int, int]:
    total: Counter = Counter()
    for m in maps:
        total.update(m)
    return dict(total)


# --------------------------------
# Convert Tree to Graphviz format
# --------------------------------
def tree_to_dot(node: Optional[Node], max_depth: int = 3) -> str:
    lines = ["digraph G {", "node [shape=circle, style=filled, color=lightblue];"]
    ids = itertools.count()

    def label(n: Node) -> str:
        if n.is_leaf():
            return f"{n.freq}\\n0x{n.sym:02X}"
        return f"{n.freq}"

    def traverse(n: Node, depth: int) -> int:
        my_id = next(ids)
        lines.append(f'n{my_id} [label="{label(n)}"];')
        if depth < max_depth and not n.is_leaf():
            for bit, child in (("0", n.left), ("1", n.right)):
                child_id = traverse(child, depth + 1)
                lines.append(f'n{my_id} -> n{child_id} [label="{bit}"];')
        return my_id

    if node is not None:
        traverse(node, 0)
    lines.append("}")
    return "\n".join(lines)


# -------------------------------------
# 2) Huffman tree
# -------------------------------------
class HuffmanTree:
    def __init__(self, root: Optional[Node] = None):
        self.root = root

    def is_empty(self) -> bool:
        return self.root is None

    @classmethod
    def build(cls, data: bytes) -> 'HuffmanTree':
        return cls.from_frequencies(build_freq_map(data))

    @classmethod
    def from_frequencies(cls, freq_map: Dict[int, int]) -> 'HuffmanTree':
        seq = itertools.count()
        h = [Node(sym, freq_map[sym], next(seq)) for sym in sorted(freq_map)]
        heapq.heapify(h)

        # empty data -> no tree
        if not h:
            return cls(None)

        # a lone symbol stays a bare leaf; generate_codes gives it one bit
        while len(h) > 1:
            a = heapq.heappop(h)
            b = heapq.heappop(h)
            heapq.heappush(h, Node(None, a.freq + b.freq, next(seq), a, b))
        return cls(heapq.heappop(h))

    # ---------------------------
    # 3) Walk tree -> code map
    # ---------------------------
    def generate_codes(self) -> Dict[int, str]:
        codes: Dict[int, str] = {}
        if self.root is None:
            return codes

        def walk(node: Node, prefix: str):
            if node.is_leaf():
                # leaf root: single-symbol data still spends one bit each
                codes[node.sym] = prefix or "0"
                return
            walk(node.left, prefix + "0")
            walk(node.right, prefix + "1")

        walk(self.root, "")
        return codes

    # ----------------------------------------------
    # 4) Encode / decode the packed bit stream
    # ----------------------------------------------
    def encode(self, data: bytes, codes: Optional[Dict[int, str]] = None) -> bytes:
        if codes is None:
            codes = self.generate_codes()
        table = {sym: (int(code, 2), len(code)) for sym, code in codes.items()}

        out = bytearray()
        acc = 0
        nbits = 0
        for b in data:
            value, length = table[b]
            acc = (acc << length) | value
            nbits += length
            while nbits >= 8:
                nbits -= 8
                out.append((acc >> nbits) & 0xFF)
            acc &= (1 << nbits) - 1

        # leftover bits go to the high end of one last byte
        if nbits:
            out.append((acc << (8 - nbits)) & 0xFF)
        return bytes(out)

    def decode(self, packed: bytes, original_length: int) -> bytes:
        if original_length == 0:
            return b""
        root = self.root
        if root is None:
            raise EmptyAlphabetMismatch(
                f"Empty tree cannot produce {original_length} bytes")

        if root.is_leaf():
            if original_length > len(packed) * 8:
                raise TruncatedInput(
                    f"Packed data holds {len(packed) * 8} bits, "
                    f"need {original_length}")
            return bytes([root.sym]) * original_length

        out = bytearray()
        node = root
        for byte in packed:
            for shift in range(7, -1, -1):
                node = node.right if (byte >> shift) & 1 else node.left
                if node.sym is not None:
                    out.append(node.sym)
                    if len(out) == original_length:
                        return bytes(out)
                    node = root
        raise TruncatedInput(
            f"Packed data ran out after {len(out)} of {original_length} bytes")

    # ----------------------------------------------------------------------
    # 5) Tree serialization (preorder): 0x00 + byte = leaf, 0x01 = internal
    # ----------------------------------------------------------------------
    def serialize(self) -> bytes:
        out = bytearray()
        if self.root is None:
            return bytes(out)

        def dfs(node: Node):
            if node.is_leaf():
                out.append(LEAF)
                out.append(node.sym)
                return
            out.append(INTERNAL)
            dfs(node.left)
            dfs(node.right)

        dfs(self.root)
        return bytes(out)

    @classmethod
    def deserialize(cls, blob: bytes) -> 'HuffmanTree':
        if not blob:
            return cls(None)
        n = len(blob)

        def dfs(i: int, depth: int) -> Tuple[Node, int]:
            if depth > MAX_TREE_DEPTH:
                raise MalformedTree(f"Tree deeper than {MAX_TREE_DEPTH} levels at {i}")
            if i >= n:
                raise MalformedTree(f"Tree data ran out at {i}")
            flag = blob[i]
            i += 1
            if flag == LEAF:
                if i >= n:
                    raise MalformedTree(f"Leaf at {i - 1} missing its symbol byte")
                return Node(blob[i], 0), i + 1
            if flag == INTERNAL:
                left, i = dfs(i, depth + 1)
                right, i = dfs(i, depth + 1)
                return Node(None, 0, left=left, right=right), i
            raise MalformedTree(f"Bad tree flag {flag} at {i - 1}")

        root, next_i = dfs(0, 0)
        if next_i != n:
            raise MalformedTree(f"{n - next_i} extra bytes after tree data")
        return cls(root)


def leaves(root: Optional[Node]) -> Iterable[Node]:
    """Yield leaves left to right."""
    if root is None:
        return
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_leaf():
            yield node
        else:
            stack.append(node.right)
            stack.append(node.left)


def encoded_bit_length(freq_map: Dict[int, int], codes: Dict[int, str]) -> int:
    return sum(count * len(codes[sym]) for sym, count in freq_map.items())
