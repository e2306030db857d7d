from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from huffkit.api.packet import DEFAULT_ZSTD_LEVEL, decode_packet, encode_packet, unpack_packet
from huffkit.core.alphabet import Alphabet
from huffkit.core.builder import build
from huffkit.core.encoder import encode
from huffkit.core.errors import HuffmanError


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _write_text(path: str, text: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _write_bytes(path: str, data: bytes) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)


def _pretty(n: int) -> str:
    if n >= 1_000_000:
        return f"{n/1_000_000:.2f} MB"
    if n >= 1_000:
        return f"{n/1_000:.2f} KB"
    return f"{n} B"


def _ratio(raw: int, comp: int) -> float:
    return raw / max(1, comp)


def cmd_encode(args: argparse.Namespace) -> int:
    text = _read_text(args.infile)
    raw_bytes = len(text.encode("utf-8"))

    level = None if args.no_zstd else args.zstd_level
    blob = encode_packet(text, zstd_level=level)
    _write_bytes(args.outfile, blob)

    info = unpack_packet(blob)
    print("huffkit encode OK")
    print("------------------------------")
    print("outfile    :", args.outfile)
    print("symbols    :", info.symbol_count)
    print("alphabet   :", info.alphabet_size)
    print("bits       :", info.bit_len)
    print("zstd       :", "off" if level is None else f"level {level}")
    print("raw        :", _pretty(raw_bytes))
    print("packet     :", _pretty(len(blob)))
    print(f"ratio      : {_ratio(raw_bytes, len(blob)):.2f}x")
    print("------------------------------")
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    blob = _read_bytes(args.infile)
    symbols = decode_packet(blob)
    if not all(isinstance(s, str) for s in symbols):
        raise HuffmanError("packet holds non-text symbols; cannot write as text")
    text = "".join(symbols)
    _write_text(args.outfile, text)

    print("huffkit decode OK")
    print("------------------------------")
    print("outfile    :", args.outfile)
    print("symbols    :", len(symbols))
    print("packet     :", _pretty(len(blob)))
    print("------------------------------")
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    text = _read_text(args.infile)
    alphabet = Alphabet.from_sample(text)
    table = build(alphabet)
    bits = encode(table, text)

    print("huffkit stats")
    print("------------------------------")
    print("symbols    :", len(text))
    print("alphabet   :", len(alphabet))
    print("nodes      :", len(table))
    print("depth      :", table.depth)
    print(f"avg bits   : {table.average_code_length():.3f}")
    print("bits       :", len(bits))
    print("packed     :", _pretty((len(bits) + 7) // 8))
    print("------------------------------")

    if args.codes:
        for sym, code in sorted(table.codebook().items(), key=lambda kv: (len(kv[1]), kv[1].to01())):
            print(f"{sym!r:>8} {alphabet.weight_of(sym):>8} {code.to01()}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="huffkit", description="Huffman code table encoder/decoder")
    sub = p.add_subparsers(dest="cmd", required=True)

    e = sub.add_parser("encode", help="Encode a UTF-8 text file into a huffkit packet")
    e.add_argument("--in", dest="infile", required=True, help="Input text file")
    e.add_argument("--out", dest="outfile", required=True, help="Output packet file")
    e.add_argument("--zstd-level", type=int, default=DEFAULT_ZSTD_LEVEL, help="zstd level for the outer layer")
    e.add_argument("--no-zstd", action="store_true", help="Store the packet body uncompressed")
    e.set_defaults(func=cmd_encode)

    d = sub.add_parser("decode", help="Decode a huffkit packet back into text")
    d.add_argument("--in", dest="infile", required=True, help="Input packet file")
    d.add_argument("--out", dest="outfile", required=True, help="Output text file")
    d.set_defaults(func=cmd_decode)

    s = sub.add_parser("stats", help="Show code table statistics for a text file")
    s.add_argument("--in", dest="infile", required=True, help="Input text file")
    s.add_argument("--codes", action="store_true", help="Also print every symbol's code")
    s.set_defaults(func=cmd_stats)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except HuffmanError as e:
        print(f"huffkit: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
