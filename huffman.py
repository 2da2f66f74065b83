import heapq
from collections import Counter
from collections.abc import Mapping
from typing import Dict, Hashable, Iterable, List, NamedTuple, Optional


class FrequencyEntry(NamedTuple):
    """A symbol together with its number of occurrences."""

    symbol: Hashable
    count: int


def count_frequencies(symbols: Iterable[Hashable]) -> Dict[Hashable, int]:
    """Count occurrences of each distinct symbol.

    :param symbols: Symbol sequence (e.g. a ``str``); may be empty.
    :type symbols: Iterable[Hashable]
    :returns: Mapping from symbol to count, in order of first occurrence.
    :rtype: Dict[Hashable, int]
    """
    return dict(Counter(symbols))


class HuffmanNode:
    """Node stored in a :class:`HuffmanTree` arena.

    Children are referenced by their index in the arena, never by object.

    :ivar symbol: The symbol stored at a leaf; ``None`` for internal nodes.
    :type symbol: Hashable | None
    :ivar count: Total count of the subtree rooted at this node.
    :type count: int
    :ivar left: Arena index of the left child.
    :type left: int | None
    :ivar right: Arena index of the right child.
    :type right: int | None
    """

    __slots__ = ("symbol", "count", "left", "right")

    def __init__(self, symbol=None, count=0, left=None, right=None):
        """Create a Huffman node.

        :param symbol: Symbol for leaf nodes; ``None`` for internal nodes.
        :type symbol: Hashable | None
        :param int count: Count (weight) associated with this node.
        :param left: Arena index of the left child, if any.
        :type left: int | None
        :param right: Arena index of the right child, if any.
        :type right: int | None
        :returns: None
        :rtype: None
        """
        self.symbol = symbol
        self.count = count
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(symbol={self.symbol!r}, count={self.count})"
        return (
            f"HuffmanNode(count={self.count}, "
            f"left={self.left}, right={self.right})"
        )


class CodeTable:
    """Bidirectional mapping between symbols and their bit-string codes.

    Built once, either from a :class:`HuffmanTree` or from a parsed
    header, and only read afterwards.
    """

    def __init__(self, codes: Mapping):
        """Create a table from a ``symbol -> code`` mapping.

        :param codes: Mapping from symbol to a non-empty string of ``0``/``1``.
        :type codes: Mapping
        :returns: None
        :rtype: None
        :raises ValueError: If two symbols share a code.
        """
        self._codes: Dict[Hashable, str] = dict(codes)
        self._symbols: Dict[str, Hashable] = {}
        for symbol, code in self._codes.items():
            if code in self._symbols:
                raise ValueError(f"Duplicate code: {code}")
            self._symbols[code] = symbol

    @property
    def codes(self) -> Dict[Hashable, str]:
        """Copy of the ``symbol -> code`` direction."""
        return dict(self._codes)

    @property
    def symbols(self) -> Dict[str, Hashable]:
        """Copy of the ``code -> symbol`` direction."""
        return dict(self._symbols)

    def code_for(self, symbol: Hashable) -> str:
        """Return the code for ``symbol``.

        :raises KeyError: If ``symbol`` has no code in this table.
        """
        return self._codes[symbol]

    def symbol_for(self, code: str) -> Optional[Hashable]:
        """Return the symbol for ``code``, or ``None`` if it is not a code."""
        return self._symbols.get(code)

    def encoded_length(self, frequencies: Mapping) -> int:
        """Total bits needed for a message with the given symbol counts.

        :param frequencies: Mapping from symbol to count.
        :type frequencies: Mapping
        :returns: Sum of ``count * len(code)`` over all symbols.
        :rtype: int
        """
        return sum(
            count * len(self._codes[symbol])
            for symbol, count in frequencies.items()
        )

    def __len__(self):
        return len(self._codes)

    def __contains__(self, symbol):
        return symbol in self._codes

    def __iter__(self):
        return iter(self._codes.items())

    def __eq__(self, other):
        if not isinstance(other, CodeTable):
            return NotImplemented
        return self._codes == other._codes

    def __repr__(self):
        return f"CodeTable({self._codes!r})"


class HuffmanTree:
    """Static Huffman tree built by greedy forest merging.

    :ivar nodes: Arena of all nodes; children refer to indices in it.
    :type nodes: List[HuffmanNode]
    :ivar root: Arena index of the root node.
    :type root: int
    :ivar leaves: Mapping from symbol to the arena index of its leaf.
    :type leaves: Dict[Hashable, int]
    """

    def __init__(self, nodes: List[HuffmanNode], root: int,
                 leaves: Dict[Hashable, int]):
        self.nodes = nodes
        self.root = root
        self.leaves = leaves

    @classmethod
    def build(cls, frequencies) -> "HuffmanTree":
        """Build a tree from symbol counts.

        Ties are broken by sequence number: leaves are numbered in the
        order they are given, and each merged node takes the next number.
        Of the two nodes removed per step, the first (smaller count, or
        smaller sequence number on equal counts) becomes the left child.

        :param frequencies: Mapping ``symbol -> count`` or an iterable of
            ``(symbol, count)`` pairs.
        :returns: The built tree.
        :rtype: HuffmanTree
        :raises ValueError: If ``frequencies`` is empty, repeats a symbol
            or holds a negative count.
        """
        if isinstance(frequencies, Mapping):
            entries = [FrequencyEntry(s, c) for s, c in frequencies.items()]
        else:
            entries = [FrequencyEntry(s, c) for s, c in frequencies]
        if not entries:
            raise ValueError("Cannot build a Huffman tree without symbols")

        nodes: List[HuffmanNode] = []
        leaves: Dict[Hashable, int] = {}
        for entry in entries:
            if entry.symbol in leaves:
                raise ValueError(f"Duplicate symbol: {entry.symbol!r}")
            if entry.count < 0:
                raise ValueError(
                    f"Negative count for symbol {entry.symbol!r}: {entry.count}"
                )
            leaves[entry.symbol] = len(nodes)
            nodes.append(HuffmanNode(symbol=entry.symbol, count=entry.count))

        heap = [(node.count, index, index) for index, node in enumerate(nodes)]
        heapq.heapify(heap)
        sequence = len(nodes)

        while len(heap) > 1:
            left_count, _, left = heapq.heappop(heap)
            right_count, _, right = heapq.heappop(heap)
            merged = HuffmanNode(
                count=left_count + right_count, left=left, right=right
            )
            nodes.append(merged)
            heapq.heappush(heap, (merged.count, sequence, len(nodes) - 1))
            sequence += 1

        return cls(nodes, heap[0][2], leaves)

    def code_table(self) -> CodeTable:
        """Derive the prefix-free code of every leaf.

        Walks the arena once from the root, passing the path down; a left
        step appends ``0`` and a right step ``1``. A tree made of a single
        leaf gives that leaf the code ``"0"``.

        :returns: Table mapping every symbol to its code.
        :rtype: CodeTable
        """
        root = self.nodes[self.root]
        if root.is_leaf:
            return CodeTable({root.symbol: "0"})

        codes: Dict[Hashable, str] = {}
        stack = [(self.root, "")]
        while stack:
            index, prefix = stack.pop()
            node = self.nodes[index]
            if node.is_leaf:
                codes[node.symbol] = prefix
            else:
                stack.append((node.right, prefix + "1"))
                stack.append((node.left, prefix + "0"))
        return CodeTable({symbol: codes[symbol] for symbol in self.leaves})

    def __len__(self):
        return len(self.leaves)
