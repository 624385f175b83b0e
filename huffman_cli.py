"""
Command line front end for the 128-symbol Huffman coder

How to run:
  python huffman_cli.py prob sample.txt probfile.txt
  python huffman_cli.py show probfile.txt
  python huffman_cli.py encode probfile.txt data.txt data.txt.enc
  python huffman_cli.py decode probfile.txt data.txt.enc data.txt.new
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import huffman as huff
import tables


def cmd_prob(args: argparse.Namespace) -> None:
    sample = Path(args.sample).read_bytes()
    table = tables.estimate_probabilities(sample)
    tables.write_prob_table(table, args.probfile)
    print(f"Character probabilities saved in \"{args.probfile}\"")


def cmd_show(args: argparse.Namespace) -> None:
    root = huff.build_huffman_tree(tables.read_prob_table(args.probfile))
    code_table = huff.generate_huffman_codes(root)
    print(tables.format_code_listing(code_table))
    tables.write_code_table(code_table, args.out)
    print(f"Huffman codes saved in \"{args.out}\"")


def _remove_partial(path) -> None:
    # Output is written chunk by chunk; drop it when a later chunk fails
    Path(path).unlink(missing_ok=True)


def cmd_encode(args: argparse.Namespace) -> None:
    root = huff.build_huffman_tree(tables.read_prob_table(args.probfile))
    code_table = huff.generate_huffman_codes(root)
    try:
        with open(args.data, "rb") as reader, open(args.encoded, "w", encoding="ascii", newline="") as writer:
            huff.encode_stream(code_table, reader, writer)
    except huff.HuffmanError:
        _remove_partial(args.encoded)
        raise
    print(f"Encoding done. Result in: \"{args.encoded}\"")


def cmd_decode(args: argparse.Namespace) -> None:
    root = huff.build_huffman_tree(tables.read_prob_table(args.probfile))
    # Undecodable bytes come through as lone surrogates and are reported by the decoder
    try:
        with open(args.encoded, "r", encoding="ascii", errors="surrogateescape", newline="") as reader, \
                open(args.decoded, "wb") as writer:
            huff.decode_stream(root, reader, writer)
    except huff.HuffmanError:
        _remove_partial(args.decoded)
        raise
    print(f"Decoding done. Result in: \"{args.decoded}\"")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffman128", description="Static Huffman coding over ASCII 0-127")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("prob", help="Estimate character probabilities from a sample file")
    p.add_argument("sample", help="Sample text file (ASCII only)")
    p.add_argument("probfile", help="Output probability table")
    p.set_defaults(func=cmd_prob)

    s = sub.add_parser("show", help="Print the Huffman codes and save them")
    s.add_argument("probfile", help="Probability table")
    s.add_argument("--out", type=str, default="codes.txt", help="Where to save all 128 codes")
    s.set_defaults(func=cmd_show)

    e = sub.add_parser("encode", help="Encode a file into a '0'/'1' text file")
    e.add_argument("probfile", help="Probability table")
    e.add_argument("data", help="File to encode")
    e.add_argument("encoded", help="Output file")
    e.set_defaults(func=cmd_encode)

    d = sub.add_parser("decode", help="Decode a '0'/'1' text file")
    d.add_argument("probfile", help="Probability table used for encoding")
    d.add_argument("encoded", help="Encoded file")
    d.add_argument("decoded", help="Output file")
    d.set_defaults(func=cmd_decode)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (huff.HuffmanError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
