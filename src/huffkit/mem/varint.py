from typing import Tuple


def encode_uvarint(n: int) -> bytes:
    """
    Unsigned LEB128: 7 bits per byte, low group first, high bit = more.
    Python ints are unbounded, so any non-negative int fits.
    """
    if n < 0:
        raise ValueError("uvarint cannot be negative")

    out = bytearray()
    while n > 0x7F:
        out.append((n & 0x7F) | 0x80)
        n >>= 7
    out.append(n)
    return bytes(out)


def decode_uvarint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Returns (value, new_offset). No width cap: weights and int symbols
    can be arbitrarily large; the input length bounds the work.
    """
    result = 0
    shift = 0
    for i in range(offset, len(data)):
        b = data[i]
        result |= (b & 0x7F) << shift
        if not b & 0x80:
            return result, i + 1
        shift += 7
    raise ValueError("uvarint truncated")


def encode_bytes(b: bytes) -> bytes:
    return encode_uvarint(len(b)) + b


def decode_bytes(data: bytes, offset: int) -> Tuple[bytes, int]:
    n, off = decode_uvarint(data, offset)
    if off + n > len(data):
        raise ValueError("length-prefixed bytes truncated")
    return bytes(data[off : off + n]), off + n
