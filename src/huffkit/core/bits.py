from __future__ import annotations

from typing import Any, Iterable, Iterator, Protocol, runtime_checkable

from bitarray import bitarray

from huffkit.core.errors import InvalidBit


ENDIAN = "big"


@runtime_checkable
class BitSink(Protocol):
    """
    Anything that accepts bits one at a time.
    """

    def emit(self, bit: int) -> None:
        ...


@runtime_checkable
class BitSource(Protocol):
    """
    Finite iterable of 0/1 values. Restartable only if the
    underlying container is.
    """

    def __iter__(self) -> Iterator[int]:
        ...


class BitArraySink:
    """
    Default sink: collects bits into a bitarray.
    """

    def __init__(self, bits: bitarray | None = None):
        self.bits = bits if bits is not None else new_bits()

    def emit(self, bit: int) -> None:
        self.bits.append(bit)

    def __len__(self) -> int:
        return len(self.bits)


def new_bits() -> bitarray:
    return bitarray(endian=ENDIAN)


def check_bit(value: Any) -> int:
    """
    Accept bool and the ints 0/1. Everything else, including the
    characters '0' and '1', is not a bit.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int) and value in (0, 1):
        return value
    raise InvalidBit(f"invalid bit value: {value!r}")


def to_bits(values: Iterable[Any]) -> bitarray:
    out = new_bits()
    for v in values:
        out.append(check_bit(v))
    return out


def pack_bits(bits: bitarray) -> bytes:
    """
    Pack into bytes, MSB first, zero padded at the end.
    """
    return bitarray(bits, endian=ENDIAN).tobytes()


def unpack_bits(data: bytes, bit_len: int) -> bitarray:
    """
    Unpack bytes into exactly bit_len bits.
    """
    if bit_len < 0 or bit_len > len(data) * 8:
        raise ValueError(f"bit_len {bit_len} out of range for {len(data)} bytes")
    out = new_bits()
    out.frombytes(bytes(data))
    del out[bit_len:]
    return out
