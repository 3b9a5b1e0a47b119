"""
Реализует построение статического кода Хаффмана по частотам байтов.
Частые значения кодируются короче, конец данных отмечается символом PSEUDO_EOF.
"""

import heapq
from typing import Dict, List, Optional, Tuple

from bitio import BitInputStream, BitOutputStream
from format import (ALPHABET_SIZE, BITS_PER_WORD, PSEUDO_EOF, SYMBOL_BITS,
                    FormatError, TruncatedStreamError)


class HuffmanNode:
    def __init__(self, symbol: Optional[int] = None, weight: int = 0,
                 left: Optional['HuffmanNode'] = None,
                 right: Optional['HuffmanNode'] = None):
        self.symbol = symbol
        self.weight = weight
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf:
            return f"Leaf({self.symbol}, w={self.weight})"
        return f"Node(w={self.weight})"


def count_frequencies(bit_in: BitInputStream) -> List[int]:
    """
    Считает частоты всех байтов источника за один проход и перематывает
    его в начало для второго прохода.
    """
    freqs = [0] * ALPHABET_SIZE

    word = bit_in.read_bits(BITS_PER_WORD)
    while word != -1:
        freqs[word] += 1
        word = bit_in.read_bits(BITS_PER_WORD)

    bit_in.reset()
    freqs[PSEUDO_EOF] = 0
    return freqs


def build_tree(frequencies: List[int]) -> HuffmanNode:
    """
    Жадно сливает два самых лёгких узла, пока не останется корень.

    При равном весе первыми извлекаются листья по возрастанию символа,
    затем внутренние узлы в порядке создания.
    """
    heap: List[Tuple[int, int, HuffmanNode]] = []
    for symbol, freq in enumerate(frequencies):
        if freq > 0 and symbol != PSEUDO_EOF:
            heap.append((freq, symbol, HuffmanNode(symbol=symbol, weight=freq)))
    heap.append((0, PSEUDO_EOF, HuffmanNode(symbol=PSEUDO_EOF, weight=0)))
    heapq.heapify(heap)

    order = ALPHABET_SIZE
    while len(heap) > 1:
        left_weight, _, left = heapq.heappop(heap)
        right_weight, _, right = heapq.heappop(heap)

        parent = HuffmanNode(weight=left_weight + right_weight,
                             left=left, right=right)
        heapq.heappush(heap, (parent.weight, order, parent))
        order += 1

    return heap[0][2]


class HuffmanTree:
    def __init__(self, root: Optional[HuffmanNode] = None):
        self.root = root
        self.codes: Dict[int, str] = {}
        self.decode_table: Dict[str, int] = {}

        if root is not None:
            self._generate_codes()

    def build(self, frequencies: List[int]):
        self.root = build_tree(frequencies)
        self._generate_codes()

    def _generate_codes(self):
        self.codes.clear()
        self.decode_table.clear()

        # единственный лист-корень получает пустой код
        def traverse(node: HuffmanNode, code: str):
            if node.is_leaf:
                self.codes[node.symbol] = code
                self.decode_table[code] = node.symbol
                return

            traverse(node.left, code + '0')
            traverse(node.right, code + '1')

        traverse(self.root, '')

    def code_lengths(self) -> Dict[int, int]:
        return {symbol: len(code) for symbol, code in self.codes.items()}

    def serialize(self, out: BitOutputStream):
        _write_node(self.root, out)

    @staticmethod
    def deserialize(bit_in: BitInputStream) -> 'HuffmanTree':
        return HuffmanTree(_read_node(bit_in, 0))


def _write_node(node: HuffmanNode, out: BitOutputStream):
    if node.is_leaf:
        out.write_bits(1, 1)
        out.write_bits(SYMBOL_BITS, node.symbol)
        return

    out.write_bits(1, 0)
    _write_node(node.left, out)
    _write_node(node.right, out)


def _read_node(bit_in: BitInputStream, depth: int) -> HuffmanNode:
    if depth >= ALPHABET_SIZE:
        raise FormatError("Tree header is deeper than the alphabet allows")

    flag = bit_in.read_bits(1)
    if flag == -1:
        raise TruncatedStreamError("Stream ended inside the tree header")

    if flag == 0:
        left = _read_node(bit_in, depth + 1)
        right = _read_node(bit_in, depth + 1)
        return HuffmanNode(left=left, right=right)

    symbol = bit_in.read_bits(SYMBOL_BITS)
    if symbol == -1:
        raise TruncatedStreamError("Stream ended inside the tree header")
    if symbol > PSEUDO_EOF:
        raise FormatError(f"Invalid symbol in tree header: {symbol}")

    return HuffmanNode(symbol=symbol)
