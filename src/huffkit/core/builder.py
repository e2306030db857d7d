from __future__ import annotations

import heapq
from typing import Hashable, Iterable, List, Tuple, Union

from huffkit.core.alphabet import Alphabet
from huffkit.core.table import CodeTable, Node


AlphabetLike = Union[Alphabet, Iterable[Tuple[Hashable, int]]]


def build(alphabet: AlphabetLike) -> CodeTable:
    """
    Greedy Huffman merge.

    Heap entries are (weight, seq, node_index). seq counts pushes, so
    equal weights pop first-inserted first: leaves in alphabet order,
    then merged nodes in creation order. Same input -> same tree.

    Nothing is exposed until the whole array is built.
    """
    if not isinstance(alphabet, Alphabet):
        alphabet = Alphabet(alphabet)

    nodes: List[Node] = []
    heap: List[Tuple[int, int, int]] = []
    seq = 0

    for sym, weight in alphabet:
        idx = len(nodes)
        nodes.append(Node(index=idx, weight=weight, symbol=sym))
        heap.append((weight, seq, idx))
        seq += 1

    heapq.heapify(heap)

    while len(heap) > 1:
        wa, _, a = heapq.heappop(heap)
        wb, _, b = heapq.heappop(heap)
        idx = len(nodes)
        nodes.append(Node(index=idx, weight=wa + wb, left=a, right=b))
        heapq.heappush(heap, (wa + wb, seq, idx))
        seq += 1

    return CodeTable(nodes)
