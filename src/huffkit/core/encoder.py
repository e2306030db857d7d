from __future__ import annotations

from typing import Hashable, Iterable, Optional

from bitarray import bitarray

from huffkit.core.bits import BitSink, new_bits
from huffkit.core.errors import UnknownSymbol
from huffkit.core.table import CodeTable


def encode_symbol(table: CodeTable, sym: Hashable, sink: BitSink) -> int:
    """
    Walk root -> leaf for one symbol, emitting 0 for left and 1 for right.
    Returns the number of bits emitted.

    This is the reference walk; encode() uses the table's cached paths,
    which give the same bits.
    """
    cur = table.root()

    if table.is_leaf(cur):
        if not table.covers(cur, sym):
            raise UnknownSymbol(f"symbol not in alphabet: {sym!r}")
        sink.emit(0)
        return 1

    n = 0
    while not table.is_leaf(cur):
        nxt = table.left(cur)
        if table.covers(nxt, sym):
            sink.emit(0)
        else:
            nxt = table.right(cur)
            if not table.covers(nxt, sym):
                raise UnknownSymbol(f"symbol not in alphabet: {sym!r}")
            sink.emit(1)
        cur = nxt
        n += 1
    return n


def encode(table: CodeTable, symbols: Iterable[Hashable], sink: Optional[BitSink] = None) -> bitarray:
    """
    Concatenate the code of every symbol. No separators, no terminator.

    With a sink, every bit is also emitted to it. Nothing is emitted
    for a symbol that is not in the alphabet, but bits of the symbols
    before it may already have reached the sink.
    """
    out = new_bits()
    for sym in symbols:
        code = table.code_for(sym)
        out.extend(code)
        if sink is not None:
            for bit in code:
                sink.emit(bit)
    return out
