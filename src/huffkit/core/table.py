from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, Iterator, List, Optional, Sequence, Tuple

from bitarray import bitarray, frozenbitarray

from huffkit.core.bits import ENDIAN
from huffkit.core.errors import EmptyTable, MalformedTable, NotALeaf, NotInternalNode, UnknownSymbol


NO_CHILD = -1


@dataclass(frozen=True)
class Node:
    index: int
    weight: int
    left: int = NO_CHILD
    right: int = NO_CHILD
    symbol: Optional[Hashable] = None

    @property
    def is_leaf(self) -> bool:
        return self.left == NO_CHILD and self.right == NO_CHILD


class CodeTable:
    """
    Huffman code tree stored as one append-only array of nodes.

    Children always sit at lower indices than their parent, so the
    last node is the root. The table is never mutated after __init__;
    share it freely between encoders/decoders and threads.

    Besides navigation we precompute, per symbol, the leaf position
    in left-to-right order and the bit path from the root. Every node
    then covers a contiguous range of leaf positions, which makes
    covers() a constant-time range check.
    """

    __slots__ = ("_nodes", "_leaf_pos", "_ranges", "_codes", "_depth")

    def __init__(self, nodes: Sequence[Node]):
        self._nodes: Tuple[Node, ...] = tuple(nodes)
        self._check_structure()

        self._leaf_pos: Dict[Hashable, int] = {}
        self._ranges: List[Tuple[int, int]] = []
        self._codes: Dict[Hashable, frozenbitarray] = {}
        self._depth = 0

        if self._nodes:
            self._index_leaves()

    # ------------- structure ----------------
    def _check_structure(self) -> None:
        for i, n in enumerate(self._nodes):
            if n.index != i:
                raise MalformedTable(f"node {i} carries index {n.index}")
            if (n.left == NO_CHILD) != (n.right == NO_CHILD):
                raise MalformedTable(f"node {i} has exactly one child")
            if isinstance(n.weight, bool) or not isinstance(n.weight, int) or n.weight <= 0:
                raise MalformedTable(f"node {i} weight must be a positive int, got {n.weight!r}")
            if n.is_leaf:
                if n.symbol is None:
                    raise MalformedTable(f"leaf {i} has no symbol")
                continue
            if n.symbol is not None:
                raise MalformedTable(f"internal node {i} carries a symbol")
            if not (0 <= n.left < i and 0 <= n.right < i):
                raise MalformedTable(f"node {i} references a child at or after itself")
            if n.weight != self._nodes[n.left].weight + self._nodes[n.right].weight:
                raise MalformedTable(f"node {i} weight is not the sum of its children")

    def _index_leaves(self) -> None:
        root = self._nodes[-1]

        if root.is_leaf:
            # single symbol: fixed one-bit code '0'
            self._leaf_pos[root.symbol] = 0
            self._ranges = [(0, 1)]
            self._codes[root.symbol] = frozenbitarray("0", endian=ENDIAN)
            self._depth = 0
            return

        # pre-order, left first; explicit stack keeps deep trees off the call stack
        stack: List[Tuple[int, bitarray]] = [(root.index, bitarray(endian=ENDIAN))]
        while stack:
            idx, path = stack.pop()
            n = self._nodes[idx]
            if n.is_leaf:
                if n.symbol in self._leaf_pos:
                    raise MalformedTable(f"symbol appears on two leaves: {n.symbol!r}")
                self._leaf_pos[n.symbol] = len(self._leaf_pos)
                self._codes[n.symbol] = frozenbitarray(path)
                self._depth = max(self._depth, len(path))
                continue
            right = path.copy()
            right.append(1)
            path.append(0)
            stack.append((n.right, right))
            stack.append((n.left, path))

        # children precede parents, so one forward pass fills every range
        ranges: List[Tuple[int, int]] = [(0, 0)] * len(self._nodes)
        for n in self._nodes:
            if n.is_leaf:
                pos = self._leaf_pos.get(n.symbol, -1)
                ranges[n.index] = (pos, pos + 1)
            else:
                ranges[n.index] = (ranges[n.left][0], ranges[n.right][1])
        self._ranges = ranges

    # ------------- navigation ---------------
    def root(self) -> Node:
        if not self._nodes:
            raise EmptyTable("code table has no nodes")
        return self._nodes[-1]

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def left(self, node: Node) -> Node:
        if node.is_leaf:
            raise NotInternalNode(f"node {node.index} is a leaf")
        return self._nodes[node.left]

    def right(self, node: Node) -> Node:
        if node.is_leaf:
            raise NotInternalNode(f"node {node.index} is a leaf")
        return self._nodes[node.right]

    def is_leaf(self, node: Node) -> bool:
        return node.is_leaf

    def symbol(self, node: Node) -> Hashable:
        if not node.is_leaf:
            raise NotALeaf(f"node {node.index} is an internal node")
        return node.symbol

    def covers(self, node: Node, sym: Hashable) -> bool:
        try:
            pos = self._leaf_pos.get(sym)
        except TypeError:
            return False
        if pos is None:
            return False
        lo, hi = self._ranges[node.index]
        return lo <= pos < hi

    # ------------- codes --------------------
    def code_for(self, sym: Hashable) -> frozenbitarray:
        try:
            return self._codes[sym]
        except (KeyError, TypeError):
            raise UnknownSymbol(f"symbol not in alphabet: {sym!r}") from None

    def codebook(self) -> Dict[Hashable, frozenbitarray]:
        return dict(self._codes)

    def average_code_length(self) -> float:
        total = 0
        bits = 0
        for n in self._nodes:
            if n.is_leaf:
                total += n.weight
                bits += n.weight * len(self._codes[n.symbol])
        return bits / max(1, total)

    # ------------- info ---------------------
    @property
    def symbols(self) -> List[Hashable]:
        return list(self._codes)

    @property
    def leaf_count(self) -> int:
        return len(self._codes)

    @property
    def weight(self) -> int:
        return self.root().weight

    @property
    def depth(self) -> int:
        return self._depth

    def walk(self) -> Iterator[Tuple[Node, int]]:
        """
        Pre-order (node, depth) pairs, left subtree first.
        """
        if not self._nodes:
            return
        stack: List[Tuple[int, int]] = [(len(self._nodes) - 1, 0)]
        while stack:
            idx, level = stack.pop()
            n = self._nodes[idx]
            yield n, level
            if not n.is_leaf:
                stack.append((n.right, level + 1))
                stack.append((n.left, level + 1))

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __repr__(self) -> str:
        return f"CodeTable(nodes={len(self._nodes)}, symbols={self.leaf_count}, depth={self._depth})"
