from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable, List, Optional, Tuple, Union

import zstandard as zstd
from bitarray import bitarray

from huffkit.core.alphabet import Alphabet
from huffkit.core.bits import pack_bits, unpack_bits
from huffkit.core.builder import build
from huffkit.core.decoder import decode
from huffkit.core.encoder import encode
from huffkit.core.errors import CorruptPacket, HuffmanError, InvalidSymbol
from huffkit.core.table import CodeTable
from huffkit.mem.varint import decode_bytes, decode_uvarint, encode_bytes, encode_uvarint


MAGIC = b"HUF1"
VERSION = 1
DEFAULT_ZSTD_LEVEL = 10

FLAG_ZSTD = 0x01

# Symbol kind tags
# 0 = INT (non-negative, uvarint)
# 1 = STR (uvarint length + utf-8)
KIND_INT = 0
KIND_STR = 1


@dataclass
class PacketInfo:
    alphabet: Optional[Alphabet]  # None for an empty packet
    symbol_count: int
    bits: bitarray
    compressed: bool
    packet_bytes: int

    @property
    def bit_len(self) -> int:
        return len(self.bits)

    @property
    def alphabet_size(self) -> int:
        return len(self.alphabet) if self.alphabet is not None else 0


# ---------------------------------------
# Alphabet section
# ---------------------------------------
def _pack_symbol(sym: Hashable) -> bytes:
    if isinstance(sym, int) and not isinstance(sym, bool):
        if sym < 0:
            raise InvalidSymbol(f"packet int symbols must be non-negative: {sym}")
        return encode_uvarint(KIND_INT) + encode_uvarint(sym)
    if isinstance(sym, str):
        return encode_uvarint(KIND_STR) + encode_bytes(sym.encode("utf-8"))
    raise InvalidSymbol(f"packet symbols must be int or str, got {type(sym).__name__}")


def _unpack_symbol(data: bytes, off: int) -> Tuple[Hashable, int]:
    kind, off = decode_uvarint(data, off)
    if kind == KIND_INT:
        return decode_uvarint(data, off)
    if kind == KIND_STR:
        raw, off = decode_bytes(data, off)
        return raw.decode("utf-8"), off
    raise CorruptPacket(f"unknown symbol kind: {kind}")


def _pack_alphabet(alphabet: Optional[Alphabet]) -> bytes:
    if alphabet is None:
        return encode_uvarint(0)
    out = bytearray()
    out += encode_uvarint(len(alphabet))
    for sym, weight in alphabet:
        out += _pack_symbol(sym)
        out += encode_uvarint(weight)
    return bytes(out)


def _unpack_alphabet(data: bytes, off: int) -> Tuple[Optional[Alphabet], int]:
    nsym, off = decode_uvarint(data, off)
    if nsym == 0:
        return None, off
    pairs: List[Tuple[Hashable, int]] = []
    for _ in range(nsym):
        sym, off = _unpack_symbol(data, off)
        weight, off = decode_uvarint(data, off)
        pairs.append((sym, weight))
    return Alphabet(pairs), off


# ---------------------------------------
# Packet
# ---------------------------------------
def _frame(alphabet: Optional[Alphabet], count: int, bits: bitarray, zstd_level: Optional[int]) -> bytes:
    body = bytearray()
    body += _pack_alphabet(alphabet)
    body += encode_uvarint(count)
    body += encode_uvarint(len(bits))
    body += encode_bytes(pack_bits(bits))

    flags = 0
    payload = bytes(body)
    if zstd_level is not None:
        flags |= FLAG_ZSTD
        comp = zstd.ZstdCompressor(level=zstd_level).compress(payload)
        payload = encode_uvarint(len(body)) + comp

    return MAGIC + encode_uvarint(VERSION) + encode_uvarint(flags) + payload


def pack_packet(
    source: Union[CodeTable, Alphabet],
    symbols: Iterable[Hashable],
    zstd_level: Optional[int] = None,
) -> bytes:
    """
    Packet format:
      MAGIC (4) | version uvarint | flags uvarint | body

    body (zstd-compressed with a raw-length prefix when FLAG_ZSTD is set):
      [nsym] [kind, symbol, weight]... [count] [bit_len] [packed_len] [packed_bits]

    nsym == 0 marks an empty packet (count, bit_len and packed_len all 0).
    The table is not stored; the decoder rebuilds it from the alphabet.
    """
    if isinstance(source, CodeTable):
        alphabet = Alphabet((n.symbol, n.weight) for n in source if n.is_leaf)
    else:
        alphabet = source
    table = build(alphabet)

    syms = list(symbols)
    return _frame(alphabet, len(syms), encode(table, syms), zstd_level)


def unpack_packet(blob: bytes) -> PacketInfo:
    if len(blob) < len(MAGIC) or blob[: len(MAGIC)] != MAGIC:
        raise CorruptPacket("not a huffkit packet (bad magic)")

    try:
        return _unpack_body(blob)
    except CorruptPacket:
        raise
    except HuffmanError as e:
        raise CorruptPacket(f"bad alphabet: {e}") from e
    except (ValueError, zstd.ZstdError) as e:
        raise CorruptPacket(str(e)) from e


def _unpack_body(blob: bytes) -> PacketInfo:
    off = len(MAGIC)
    ver, off = decode_uvarint(blob, off)
    if ver != VERSION:
        raise CorruptPacket(f"unsupported packet version: {ver}")
    flags, off = decode_uvarint(blob, off)
    if flags & ~FLAG_ZSTD:
        raise CorruptPacket(f"unknown packet flags: {flags:#x}")

    body = blob[off:]
    if flags & FLAG_ZSTD:
        raw_len, zoff = decode_uvarint(body, 0)
        body = zstd.ZstdDecompressor().decompress(body[zoff:], max_output_size=raw_len)
        if len(body) != raw_len:
            raise CorruptPacket("zstd body length mismatch")

    alphabet, off = _unpack_alphabet(body, 0)
    count, off = decode_uvarint(body, off)
    bit_len, off = decode_uvarint(body, off)
    packed, off = decode_bytes(body, off)

    if off != len(body):
        raise CorruptPacket(f"{len(body) - off} trailing bytes after packet body")
    if len(packed) != (bit_len + 7) // 8:
        raise CorruptPacket("packed length does not match bit length")
    if alphabet is None and (count or bit_len):
        raise CorruptPacket("empty alphabet but non-empty payload")

    return PacketInfo(
        alphabet=alphabet,
        symbol_count=count,
        bits=unpack_bits(packed, bit_len),
        compressed=bool(flags & FLAG_ZSTD),
        packet_bytes=len(blob),
    )


def encode_packet(symbols: Iterable[Hashable], zstd_level: Optional[int] = None) -> bytes:
    """
    One-shot: alphabet from the symbols themselves.
    Empty input gives an empty packet (no alphabet, no bits).
    """
    syms = list(symbols)
    if not syms:
        return _frame(None, 0, bitarray(), zstd_level)
    return pack_packet(Alphabet.from_sample(syms), syms, zstd_level=zstd_level)


def decode_packet(blob: bytes) -> List[Hashable]:
    info = unpack_packet(blob)
    if info.alphabet is None:
        return []
    table = build(info.alphabet)
    try:
        out = decode(table, info.bits)
    except HuffmanError as e:
        raise CorruptPacket(f"bad code stream: {e}") from e
    if len(out) != info.symbol_count:
        raise CorruptPacket(f"expected {info.symbol_count} symbols, decoded {len(out)}")
    return out
