"""
Сжатие и разжатие потока статическим кодом Хаффмана.

Сжатие делает два прохода по источнику: подсчёт частот и кодирование тела.
Длина данных не хранится, тело завершается кодом PSEUDO_EOF.
"""

import io
from typing import Dict

from bitio import BitInputStream, BitOutputStream
from format import (BITS_PER_WORD, PSEUDO_EOF, TruncatedStreamError,
                    check_magic, write_magic)
from huffman import HuffmanTree, count_frequencies


def _write_code(out: BitOutputStream, code: str):
    # пустой код означает ноль бит
    if code:
        out.write_bits(len(code), int(code, 2))


def write_body(bit_in: BitInputStream, out: BitOutputStream, codes: Dict[int, str]) -> int:
    count = 0

    word = bit_in.read_bits(BITS_PER_WORD)
    while word != -1:
        _write_code(out, codes[word])
        count += 1
        word = bit_in.read_bits(BITS_PER_WORD)

    bit_in.reset()
    _write_code(out, codes[PSEUDO_EOF])
    return count


def read_body(bit_in: BitInputStream, out: BitOutputStream, decode_table: Dict[str, int]) -> int:
    """
    Читает тело по одному биту, пока накопленный код не совпадёт с кодом
    из таблицы. Коды префиксные, поэтому первое совпадение окончательное.
    Возвращает число записанных байтов.
    """
    written = 0
    code = ''

    while True:
        if code in decode_table:
            symbol = decode_table[code]
            if symbol == PSEUDO_EOF:
                return written

            out.write_bits(BITS_PER_WORD, symbol)
            written += 1
            code = ''
            continue

        bit = bit_in.read_bits(1)
        if bit == -1:
            raise TruncatedStreamError(
                f"Stream ended before end-of-data marker after {written} bytes"
            )
        code += '1' if bit else '0'


class CompressionStats:
    def __init__(self, original_size: int, header_bits: int,
                 body_bits: int, compressed_size: int):
        self.original_size = original_size
        self.header_bits = header_bits
        self.body_bits = body_bits
        self.compressed_size = compressed_size

        self.compression_ratio = (
            compressed_size / original_size * 100
            if original_size > 0 else 0
        )

    @property
    def bits_per_byte(self) -> float:
        if self.original_size == 0:
            return 0.0
        return self.body_bits / self.original_size

    def print_stats(self):
        print(f"Huffman Compression Statistics:")
        print(f"  Original size:       {self.original_size} bytes")
        print(f"  Header:              {self.header_bits} bits")
        print(f"  Body:                {self.body_bits} bits")
        if self.original_size > 0:
            print(f"  Bits per byte:       {self.bits_per_byte:.2f}")
        print(f"  Compressed size:     {self.compressed_size} bytes")
        print(f"  Compression ratio:   {self.compression_ratio:.1f}%")


class HuffProcessor:
    def compress(self, bit_in: BitInputStream, out: BitOutputStream) -> CompressionStats:
        freqs = count_frequencies(bit_in)
        tree = HuffmanTree()
        tree.build(freqs)

        start = out.bits_written
        write_magic(out)
        tree.serialize(out)
        header_end = out.bits_written

        original_size = write_body(bit_in, out, tree.codes)
        body_end = out.bits_written
        out.flush()

        return CompressionStats(
            original_size=original_size,
            header_bits=header_end - start,
            body_bits=body_end - header_end,
            compressed_size=(body_end - start + 7) // 8,
        )

    def decompress(self, bit_in: BitInputStream, out: BitOutputStream) -> int:
        check_magic(bit_in)
        tree = HuffmanTree.deserialize(bit_in)

        try:
            return read_body(bit_in, out, tree.decode_table)
        finally:
            out.flush()


def compress_bytes(data: bytes) -> bytes:
    output = io.BytesIO()
    HuffProcessor().compress(BitInputStream(io.BytesIO(data)), BitOutputStream(output))
    return output.getvalue()


def decompress_bytes(data: bytes) -> bytes:
    output = io.BytesIO()
    HuffProcessor().decompress(BitInputStream(io.BytesIO(data)), BitOutputStream(output))
    return output.getvalue()
