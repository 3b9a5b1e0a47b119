"""
Сжатие и разжатие отдельных файлов на диске.
"""

import os
from typing import Optional

from bitio import BitInputStream, BitOutputStream
from compressor import CompressionStats, HuffProcessor
from format import PSEUDO_EOF, HuffError, check_magic
from huffman import HuffmanTree


class FileCodec:
    def __init__(self, verbose: bool = True):
        self.verbose = verbose
        self.processor = HuffProcessor()

    def compress_file(self, src_path: str, dst_path: str) -> Optional[CompressionStats]:
        if not os.path.isfile(src_path):
            print(f"Error: {src_path} not found")
            return None

        if self.verbose:
            print(f"Compressing {src_path}...", end=" ")

        with open(src_path, 'rb') as src, open(dst_path, 'wb') as dst:
            stats = self.processor.compress(BitInputStream(src), BitOutputStream(dst))

        if self.verbose:
            print(f"OK ({stats.compression_ratio:.1f}%)")
            stats.print_stats()

        return stats

    def decompress_file(self, src_path: str, dst_path: str) -> bool:
        if not os.path.isfile(src_path):
            print(f"Error: {src_path} not found")
            return False

        if self.verbose:
            print(f"Decompressing {src_path}...", end=" ")

        with open(src_path, 'rb') as src, open(dst_path, 'wb') as dst:
            try:
                written = self.processor.decompress(BitInputStream(src), BitOutputStream(dst))
            except HuffError as e:
                print(f"FAILED\nError decompressing {src_path}: {e}")
                return False

        if self.verbose:
            print(f"OK ({written} bytes)")

        return True

    def show_codes(self, path: str) -> bool:
        if not os.path.isfile(path):
            print(f"Error: {path} not found")
            return False

        with open(path, 'rb') as f:
            bit_in = BitInputStream(f)
            try:
                check_magic(bit_in)
                tree = HuffmanTree.deserialize(bit_in)
            except HuffError as e:
                print(f"Error reading {path}: {e}")
                return False

        print(f"{'Symbol':<10} {'Length':>8}  Code")
        print("-" * 40)

        for symbol, code in sorted(tree.codes.items(), key=lambda item: (len(item[1]), item[0])):
            name = 'EOF' if symbol == PSEUDO_EOF else f"0x{symbol:02x}"
            print(f"{name:<10} {len(code):>8}  {code}")

        print("-" * 40)
        print(f"{len(tree.codes)} symbols")
        return True
