import io
import random

import pytest

import huffman as huff


UNIFORM = [1.0 / 128] * 128
TWO_HOT = [0.5, 0.5] + [0.0] * 126


def english_table():
    rng = random.Random(7)
    weights = [rng.random() if 32 <= i < 127 else 0.0 for i in range(128)]
    weights[ord(' ')] = 5.0
    weights[ord('e')] = 3.0
    total = sum(weights)
    return [w / total for w in weights]


def check_weights(node):
    if huff.is_leaf(node):
        return node.weight
    total = check_weights(node.left) + check_weights(node.right)
    assert node.weight == pytest.approx(total)
    return node.weight


def test_build_rejects_wrong_table_length():
    with pytest.raises(huff.AlphabetSizeError) as exc:
        huff.build_huffman_tree([1.0 / 127] * 127)
    assert exc.value.expected == 128
    assert exc.value.actual == 127


def test_build_rejects_wrong_length_for_custom_alphabet():
    with pytest.raises(huff.AlphabetSizeError):
        huff.build_huffman_tree(UNIFORM, alphabet_size=4)


def test_every_symbol_is_a_leaf_exactly_once():
    root = huff.build_huffman_tree(english_table())
    symbols = [leaf.symbol for leaf in huff.iter_leaves(root)]
    assert sorted(symbols) == list(range(128))


def test_weight_invariant():
    root = huff.build_huffman_tree(english_table())
    check_weights(root)
    assert root.weight == pytest.approx(1.0)


def test_uniform_table_gives_seven_bit_codes():
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(UNIFORM))
    assert all(len(c) == 7 for c in codes)
    assert len(set(codes)) == 128


def test_all_zero_table_is_a_left_leaning_chain():
    codes = huff.generate_huffman_codes(huff.build_huffman_tree([0.0] * 128))
    assert codes[0] == "0" * 127
    assert codes[127] == "1"
    for symbol in range(1, 128):
        assert codes[symbol] == "0" * (127 - symbol) + "1"


def test_tie_break_is_deterministic():
    a = huff.generate_huffman_codes(huff.build_huffman_tree(UNIFORM))
    b = huff.generate_huffman_codes(huff.build_huffman_tree(list(UNIFORM)))
    assert a == b


def test_lower_index_goes_left_on_ties():
    root = huff.build_huffman_tree([0.25] * 4, alphabet_size=4)
    assert huff.generate_huffman_codes(root) == ["00", "01", "10", "11"]


def test_strict_comparison_keeps_earliest_lowest():
    # 0 and 2 tie for lowest; 0 is seen first and goes left, 2 takes the second slot
    root = huff.build_huffman_tree([0.1, 0.5, 0.1, 0.3], alphabet_size=4)
    first_merge = root.left if not huff.is_leaf(root.left) else root.right
    while not (huff.is_leaf(first_merge.left) and huff.is_leaf(first_merge.right)):
        first_merge = first_merge.left
    assert (first_merge.left.symbol, first_merge.right.symbol) == (0, 2)


def test_codes_are_prefix_free_and_non_empty():
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(english_table()))
    assert len(codes) == 128
    assert all(codes)
    for i, ci in enumerate(codes):
        for j, cj in enumerate(codes):
            if i != j:
                assert not cj.startswith(ci)


def test_frequent_symbols_get_shorter_codes():
    table = english_table()
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(table))
    assert len(codes[ord(' ')]) <= len(codes[ord('e')]) < len(codes[0])


def test_two_symbol_alphabet_example():
    root = huff.build_huffman_tree([0.5, 0.5], alphabet_size=2)
    codes = huff.generate_huffman_codes(root)
    assert codes == ["0", "1"]
    assert huff.huffman_encode(bytes([0, 1, 0]), codes) == "010"
    assert huff.huffman_decode("010", root) == bytes([0, 1, 0])


def test_two_hot_table_over_full_alphabet():
    root = huff.build_huffman_tree(TWO_HOT)
    codes = huff.generate_huffman_codes(root)
    assert codes[1] == "0"
    assert codes[0] == "11"
    assert all(c.startswith("10") for c in codes[2:])
    bits = huff.huffman_encode(bytes([0, 1, 0]), codes)
    assert bits == "11011"
    assert huff.huffman_decode(bits, root) == bytes([0, 1, 0])


def test_empty_input_round_trip():
    root = huff.build_huffman_tree(UNIFORM)
    codes = huff.generate_huffman_codes(root)
    assert huff.huffman_encode(b"", codes) == ""
    assert huff.huffman_decode("", root) == b""


def test_round_trip_random_ascii():
    rng = random.Random(1)
    table = english_table()
    root = huff.build_huffman_tree(table)
    codes = huff.generate_huffman_codes(root)
    data = bytes(rng.randrange(0, 128) for _ in range(5000))
    bits = huff.huffman_encode(data, codes)
    assert len(bits) == sum(len(codes[b]) for b in data)
    assert set(bits) <= {"0", "1"}
    assert huff.huffman_decode(bits, root) == data


def test_zero_probability_symbols_still_round_trip():
    root = huff.build_huffman_tree(TWO_HOT)
    codes = huff.generate_huffman_codes(root)
    data = bytes(range(128))
    assert huff.huffman_decode(huff.huffman_encode(data, codes), root) == data


def test_encode_rejects_byte_outside_alphabet():
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(UNIFORM))
    with pytest.raises(huff.SymbolRangeError) as exc:
        huff.huffman_encode(b"ab\xc3c", codes)
    assert exc.value.value == 0xC3
    assert exc.value.position == 2


def test_decode_single_bit_is_truncated():
    root = huff.build_huffman_tree(UNIFORM)
    with pytest.raises(huff.CorruptStreamError) as exc:
        huff.huffman_decode("1", root)
    assert exc.value.char is None
    assert exc.value.position == 1


def test_decode_rejects_foreign_characters():
    root = huff.build_huffman_tree(UNIFORM)
    with pytest.raises(huff.CorruptStreamError) as exc:
        huff.huffman_decode("0000000\n", root)
    assert exc.value.char == "\n"
    assert exc.value.position == 7


def test_errors_are_value_errors():
    assert issubclass(huff.CorruptStreamError, ValueError)
    assert issubclass(huff.SymbolRangeError, huff.HuffmanError)


def test_stream_round_trip_across_chunks():
    table = english_table()
    root = huff.build_huffman_tree(table)
    codes = huff.generate_huffman_codes(root)
    data = b"The quick brown fox jumps over the lazy dog.\n" * 40

    encoded = io.StringIO()
    bits = huff.encode_stream(codes, io.BytesIO(data), encoded, chunk_size=7)
    assert bits == len(encoded.getvalue())
    assert encoded.getvalue() == huff.huffman_encode(data, codes)

    decoded = io.BytesIO()
    # odd chunk size so codes straddle chunk boundaries
    written = huff.decode_stream(root, io.StringIO(encoded.getvalue()), decoded, chunk_size=5)
    assert written == len(data)
    assert decoded.getvalue() == data


def test_stream_errors_report_absolute_offsets():
    root = huff.build_huffman_tree(UNIFORM)
    codes = huff.generate_huffman_codes(root)

    with pytest.raises(huff.SymbolRangeError) as exc:
        huff.encode_stream(codes, io.BytesIO(b"abcdef\x80"), io.StringIO(), chunk_size=3)
    assert exc.value.position == 6

    with pytest.raises(huff.CorruptStreamError) as exc:
        huff.decode_stream(root, io.StringIO("0000000" + "01x"), io.BytesIO(), chunk_size=4)
    assert exc.value.position == 9

    with pytest.raises(huff.CorruptStreamError):
        huff.decode_stream(root, io.StringIO("0000000" + "010"), io.BytesIO(), chunk_size=4)


def test_encode_rejects_negative_symbols():
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(UNIFORM))
    with pytest.raises(huff.SymbolRangeError) as exc:
        huff.huffman_encode([65, -1, 66], codes)
    assert exc.value.value == -1
    assert exc.value.position == 1
