from typing import Iterator, List, Optional, Sequence

ALPHABET_SIZE = 128 # ASCII 0..127
CHUNK_SIZE = 64 * 1024


# Errors

class HuffmanError(ValueError):
    pass


class AlphabetSizeError(HuffmanError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"probability table must have {expected} entries, got {actual}")
        self.expected = expected
        self.actual = actual


class SymbolRangeError(HuffmanError):
    def __init__(self, value: int, position: int, alphabet_size: int = ALPHABET_SIZE):
        super().__init__(f"byte value {value} at offset {position} is outside the alphabet 0..{alphabet_size - 1}")
        self.value = value
        self.position = position


class CorruptStreamError(HuffmanError):
    def __init__(self, position: int, char: Optional[str] = None):
        if char is None:
            msg = f"encoded stream ends in the middle of a code (after {position} bits)"
        else:
            msg = f"invalid character {char!r} at offset {position} of encoded stream"
        super().__init__(msg)
        self.position = position
        self.char = char


# Tree

class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, weight):
        self.symbol = symbol    # int on leaves, None on internal nodes
        self.weight = weight    # probability mass of the subtree
        self.left = None
        self.right = None

    def __repr__(self):
        if is_leaf(self):
            return f"HuffmanNode(symbol={self.symbol}, weight={self.weight})"
        return f"HuffmanNode(weight={self.weight})"


def is_leaf(node: HuffmanNode) -> bool:
    return node.left is None and node.right is None


def iter_leaves(root: HuffmanNode) -> Iterator[HuffmanNode]:
    """Yield the leaves left to right."""
    stack = [root]
    while stack:
        node = stack.pop()
        if is_leaf(node):
            yield node
            continue
        stack.append(node.right)
        stack.append(node.left)


def _two_lowest(trees: List[HuffmanNode]):
    # Single left-to-right scan with strict comparisons: on equal weights the
    # earlier slot keeps its place, later ties can only take the second slot.
    # The C reference tool also needs t > lowest to take the second slot, so its
    # trees differ from these when a later tree ties the lowest one.
    lowest = second = None
    for i, node in enumerate(trees):
        if lowest is None:
            lowest = i
        elif node.weight < trees[lowest].weight:
            second = lowest
            lowest = i
        elif second is None or node.weight < trees[second].weight:
            second = i
    return lowest, second


def build_huffman_tree(probabilities: Sequence[float], alphabet_size: int = ALPHABET_SIZE) -> HuffmanNode:
    """
    Build the Huffman tree for a probability table, index = symbol

    Every symbol becomes a leaf, including the ones with probability 0.
    The two lightest trees are merged with the lighter one on the left ('0')
    and the merged tree takes the slot of the lighter one.
    """
    if alphabet_size < 2:
        raise ValueError(f"alphabet_size must be at least 2, got {alphabet_size}")
    if len(probabilities) != alphabet_size:
        raise AlphabetSizeError(alphabet_size, len(probabilities))

    trees = [HuffmanNode(symbol, float(p)) for symbol, p in enumerate(probabilities)]

    while len(trees) > 1:
        first, second = _two_lowest(trees)
        merged_node = HuffmanNode(None, trees[first].weight + trees[second].weight) # internal node with combined weight
        merged_node.left = trees[first]
        merged_node.right = trees[second]
        trees[first] = merged_node
        del trees[second]

    return trees[0] # root of the tree


# Codes

def generate_huffman_codes(root: HuffmanNode) -> List[str]: # root: root of the Huffman tree
    codes = {}
    def generate_codes_helper(node, current_code): # recursive helper function to traverse the tree and generate codes
        # Leaf node -> assign code
        if is_leaf(node):
            codes[node.symbol] = current_code
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return [codes[symbol] for symbol in range(len(codes))] # index = symbol


def huffman_encode(data: bytes, code_table: Sequence[str], offset: int = 0) -> str: # data: input bytes to encode, code_table: symbol -> Huffman code
    alphabet_size = len(code_table)
    for i, byte in enumerate(data):
        if not 0 <= byte < alphabet_size:
            raise SymbolRangeError(byte, offset + i, alphabet_size)
    return ''.join(code_table[byte] for byte in data)


def _walk(bitstring: str, root: HuffmanNode, node: HuffmanNode, offset: int, out: bytearray) -> HuffmanNode:
    # Returns the cursor so a chunked reader can carry it into the next chunk
    for i, bit in enumerate(bitstring):
        if bit == '0':
            node = node.left
        elif bit == '1':
            node = node.right
        else:
            raise CorruptStreamError(offset + i, bit)
        if is_leaf(node):
            out.append(node.symbol)
            node = root # reset to the root for the next symbol
    return node


def huffman_decode(bitstring: str, root: HuffmanNode) -> bytes: # bitstring: the encoded string of '0's and '1's, root: root of the Huffman tree
    decoded_bytes = bytearray()
    node = _walk(bitstring, root, root, 0, decoded_bytes)
    if node is not root:
        raise CorruptStreamError(len(bitstring))
    return bytes(decoded_bytes)


# Streams

def encode_stream(code_table: Sequence[str], reader, writer, chunk_size: int = CHUNK_SIZE) -> int:
    """
    Encode a binary reader into a text writer, chunk by chunk

    Returns the number of bits written.
    """
    offset = 0
    bits_written = 0
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            break
        bits = huffman_encode(chunk, code_table, offset)
        writer.write(bits)
        offset += len(chunk)
        bits_written += len(bits)
    return bits_written


def decode_stream(root: HuffmanNode, reader, writer, chunk_size: int = CHUNK_SIZE) -> int:
    """
    Decode a text reader of '0'/'1' characters into a binary writer

    Returns the number of bytes written.
    """
    node = root
    offset = 0
    bytes_written = 0
    while True:
        chunk = reader.read(chunk_size)
        if not chunk:
            break
        out = bytearray()
        node = _walk(chunk, root, node, offset, out)
        writer.write(bytes(out))
        offset += len(chunk)
        bytes_written += len(out)
    if node is not root:
        raise CorruptStreamError(offset)
    return bytes_written
