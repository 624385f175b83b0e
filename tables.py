from pathlib import Path
from typing import List, Sequence, Tuple

from huffman import ALPHABET_SIZE, AlphabetSizeError, HuffmanError, SymbolRangeError


def estimate_probabilities(sample: bytes, alphabet_size: int = ALPHABET_SIZE) -> Tuple[float, ...]: # sample: training bytes
    counts = [0] * alphabet_size
    for i, b in enumerate(sample):
        if b >= alphabet_size:
            raise SymbolRangeError(b, i, alphabet_size)
        counts[b] += 1

    total = len(sample)
    if total == 0:
        return tuple(0.0 for _ in counts)
    return tuple(c / total for c in counts)


# Probability table file: one "%.10f" value per line, no header

def write_prob_table(table: Sequence[float], path) -> None:
    text = "\n".join(f"{p:.10f}" for p in table)
    Path(path).write_text(text, encoding="ascii")


def read_prob_table(path, alphabet_size: int = ALPHABET_SIZE) -> Tuple[float, ...]:
    try:
        text = Path(path).read_text(encoding="ascii")
    except UnicodeDecodeError as exc:
        raise HuffmanError(f"{path}: non-ASCII byte at offset {exc.start}") from None

    values: List[float] = []
    for line_no, line in enumerate(text.split(), start=1):
        try:
            values.append(float(line))
        except ValueError:
            raise HuffmanError(f"{path}: line {line_no} is not a probability: {line!r}") from None

    if len(values) != alphabet_size:
        raise AlphabetSizeError(alphabet_size, len(values))
    return tuple(values)


# Code table export

def format_code_listing(code_table: Sequence[str], first: int = 32, last: int = 126) -> str:
    """Printable characters only."""
    return "\n".join(f"  {chr(i)} : {code_table[i]}" for i in range(first, min(last, len(code_table) - 1) + 1))


def write_code_table(code_table: Sequence[str], path="codes.txt") -> None:
    Path(path).write_text("\n".join(code_table), encoding="ascii")
