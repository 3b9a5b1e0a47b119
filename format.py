"""
Определяет формат сжатого потока: константы, магическое число и ошибки разбора.

Структура потока:
    [32 бита HUFF_MAGIC]
    [дерево в прямом порядке: 1 бит на узел, у листа ещё 9 бит символа]
    [коды Хаффмана исходных байтов]
    [код PSEUDO_EOF]
"""

from bitio import BitInputStream, BitOutputStream


HUFF_MAGIC = 0xFACE8200
BITS_PER_INT = 32
BITS_PER_WORD = 8
SYMBOL_BITS = 9
ALPHABET_SIZE = 257
PSEUDO_EOF = 256


class HuffError(ValueError):
    pass


class FormatError(HuffError):
    pass


class TruncatedStreamError(HuffError):
    pass


def write_magic(out: BitOutputStream):
    out.write_bits(BITS_PER_INT, HUFF_MAGIC)


def check_magic(bit_in: BitInputStream):
    magic = bit_in.read_bits(BITS_PER_INT)
    if magic != HUFF_MAGIC:
        raise FormatError("Not a Huffman-compressed stream: bad magic number")
