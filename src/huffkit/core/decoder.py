from __future__ import annotations

from typing import Hashable, List

from huffkit.core.bits import BitSource, check_bit
from huffkit.core.errors import IncompleteInput, UnassignedCode
from huffkit.core.table import CodeTable


def decode(table: CodeTable, bits: BitSource) -> List[Hashable]:
    """
    Walk the tree one bit at a time; emit a symbol and go back to the
    root on every leaf. The input must end on a code word boundary.
    """
    root = table.root()
    out: List[Hashable] = []

    if table.is_leaf(root):
        # single symbol, fixed code '0'
        sym = table.symbol(root)
        for b in bits:
            if check_bit(b):
                raise UnassignedCode("bit 1 does not start any code word")
            out.append(sym)
        return out

    cur = root
    for b in bits:
        cur = table.right(cur) if check_bit(b) else table.left(cur)
        if table.is_leaf(cur):
            out.append(table.symbol(cur))
            cur = root

    if cur is not root:
        raise IncompleteInput(f"input ends inside a code word after {len(out)} symbols")
    return out


def decode_text(table: CodeTable, bits: BitSource) -> str:
    return "".join(decode(table, bits))
