import unittest
import tempfile
import os
import io
import random
import shutil
import sys

from bitio import BitInputStream, BitOutputStream
from format import (HUFF_MAGIC, PSEUDO_EOF, ALPHABET_SIZE, HuffError,
                    FormatError, TruncatedStreamError)
from huffman import HuffmanNode, HuffmanTree, build_tree, count_frequencies
from compressor import HuffProcessor, compress_bytes, decompress_bytes
from file_codec import FileCodec
import main as cli


def reader(data: bytes) -> BitInputStream:
    return BitInputStream(io.BytesIO(data))


def frequencies_of(data: bytes):
    return count_frequencies(reader(data))


def check_strictly_binary(test, node: HuffmanNode):
    if node.is_leaf:
        return
    test.assertIsNotNone(node.left)
    test.assertIsNotNone(node.right)
    check_strictly_binary(test, node.left)
    check_strictly_binary(test, node.right)


class TestBitStreams(unittest.TestCase):
    def test_write_and_read_bits(self):
        buf = io.BytesIO()
        out = BitOutputStream(buf)
        out.write_bits(3, 0b101)
        out.write_bits(9, 256)
        out.write_bits(4, 0b0011)
        out.flush()

        self.assertEqual(out.bits_written, 16)
        self.assertEqual(buf.getvalue(), bytes([0b10110000, 0b00000011]))

        bit_in = reader(buf.getvalue())
        self.assertEqual(bit_in.read_bits(3), 0b101)
        self.assertEqual(bit_in.read_bits(9), 256)
        self.assertEqual(bit_in.read_bits(4), 0b0011)
        self.assertEqual(bit_in.read_bits(1), -1)

    def test_flush_pads_with_zeros(self):
        buf = io.BytesIO()
        out = BitOutputStream(buf)
        out.write_bits(1, 1)
        out.flush()
        self.assertEqual(buf.getvalue(), b'\x80')

    def test_zero_width_write(self):
        buf = io.BytesIO()
        out = BitOutputStream(buf)
        out.write_bits(0, 0)
        out.flush()
        self.assertEqual(out.bits_written, 0)
        self.assertEqual(buf.getvalue(), b'')

    def test_read_past_end(self):
        bit_in = reader(b'\xff')
        self.assertEqual(bit_in.read_bits(12), -1)
        self.assertEqual(reader(b'').read_bits(1), -1)

    def test_reset_returns_to_start_offset(self):
        raw = io.BytesIO(b'\x00ABC')
        raw.read(1)
        bit_in = BitInputStream(raw)
        self.assertEqual(bit_in.read_bits(8), ord('A'))
        self.assertEqual(bit_in.read_bits(4), ord('B') >> 4)
        bit_in.reset()
        self.assertEqual(bit_in.bits_read, 0)
        self.assertEqual(bit_in.read_bits(8), ord('A'))


class TestFrequencyCounter(unittest.TestCase):
    def test_counts(self):
        freqs = frequencies_of(b"AAAB")
        self.assertEqual(len(freqs), ALPHABET_SIZE)
        self.assertEqual(freqs[ord('A')], 3)
        self.assertEqual(freqs[ord('B')], 1)
        self.assertEqual(freqs[PSEUDO_EOF], 0)
        self.assertEqual(sum(freqs), 4)

    def test_empty_input(self):
        self.assertEqual(frequencies_of(b""), [0] * ALPHABET_SIZE)

    def test_source_is_rewound(self):
        bit_in = reader(b"xyz")
        count_frequencies(bit_in)
        self.assertEqual(bit_in.read_bits(8), ord('x'))


class TestTreeBuilder(unittest.TestCase):
    def test_concrete_scenario(self):
        tree = HuffmanTree()
        tree.build(frequencies_of(b"AAAB"))

        self.assertEqual(tree.code_lengths(), {ord('A'): 1, ord('B'): 2, PSEUDO_EOF: 2})
        self.assertEqual(tree.codes, {PSEUDO_EOF: '00', ord('B'): '01', ord('A'): '1'})
        self.assertEqual(tree.root.weight, 4)

    def test_empty_input_gives_single_leaf(self):
        root = build_tree([0] * ALPHABET_SIZE)
        self.assertTrue(root.is_leaf)
        self.assertEqual(root.symbol, PSEUDO_EOF)

        tree = HuffmanTree(root)
        self.assertEqual(tree.codes, {PSEUDO_EOF: ''})
        self.assertEqual(tree.decode_table, {'': PSEUDO_EOF})

    def test_sentinel_count_is_ignored(self):
        freqs = [0] * ALPHABET_SIZE
        freqs[PSEUDO_EOF] = 100
        root = build_tree(freqs)
        self.assertTrue(root.is_leaf)
        self.assertEqual(root.weight, 0)

    def test_single_symbol(self):
        tree = HuffmanTree()
        tree.build(frequencies_of(b"ZZZZ"))
        self.assertEqual(tree.codes, {PSEUDO_EOF: '0', ord('Z'): '1'})

    def test_strictly_binary(self):
        rng = random.Random(7)
        data = bytes(rng.choice(b"abcdefgh") for _ in range(500))
        root = build_tree(frequencies_of(data))
        check_strictly_binary(self, root)

    def test_frequent_symbols_get_shorter_codes(self):
        data = b"e" * 100 + b"t" * 50 + b"a" * 10 + b"q"
        tree = HuffmanTree()
        tree.build(frequencies_of(data))
        lengths = tree.code_lengths()
        self.assertLessEqual(lengths[ord('e')], lengths[ord('t')])
        self.assertLessEqual(lengths[ord('t')], lengths[ord('a')])
        self.assertLessEqual(lengths[ord('a')], lengths[ord('q')])

    def test_deterministic(self):
        data = b"abracadabra"
        first = HuffmanTree()
        first.build(frequencies_of(data))
        second = HuffmanTree()
        second.build(frequencies_of(data))
        self.assertEqual(first.codes, second.codes)


class TestCodeTable(unittest.TestCase):
    def test_prefix_free(self):
        data = b"The quick brown fox jumps over the lazy dog" * 3 + bytes(range(0, 256, 3))
        tree = HuffmanTree()
        tree.build(frequencies_of(data))

        codes = list(tree.codes.values())
        for i, a in enumerate(codes):
            for j, b in enumerate(codes):
                if i != j:
                    self.assertFalse(b.startswith(a), f"{a} is a prefix of {b}")

    def test_decode_table_is_inverse(self):
        tree = HuffmanTree()
        tree.build(frequencies_of(b"mississippi"))
        for symbol, code in tree.codes.items():
            self.assertEqual(tree.decode_table[code], symbol)
        self.assertEqual(len(tree.codes), len(tree.decode_table))


class TestHeaderCodec(unittest.TestCase):
    def roundtrip(self, tree: HuffmanTree) -> HuffmanTree:
        buf = io.BytesIO()
        out = BitOutputStream(buf)
        tree.serialize(out)
        out.flush()
        return HuffmanTree.deserialize(reader(buf.getvalue()))

    def test_header_isomorphism(self):
        rng = random.Random(42)
        for _ in range(5):
            data = bytes(rng.randint(0, 255) for _ in range(rng.randint(1, 2000)))
            tree = HuffmanTree()
            tree.build(frequencies_of(data))
            restored = self.roundtrip(tree)
            self.assertEqual(restored.codes, tree.codes)

    def test_single_leaf_header(self):
        tree = HuffmanTree(build_tree([0] * ALPHABET_SIZE))
        buf = io.BytesIO()
        out = BitOutputStream(buf)
        tree.serialize(out)
        self.assertEqual(out.bits_written, 10)

        restored = self.roundtrip(tree)
        self.assertTrue(restored.root.is_leaf)
        self.assertEqual(restored.codes, {PSEUDO_EOF: ''})

    def test_header_size(self):
        tree = HuffmanTree()
        tree.build(frequencies_of(b"AAAB"))
        out = BitOutputStream(io.BytesIO())
        tree.serialize(out)
        # два внутренних узла и три листа
        self.assertEqual(out.bits_written, 2 + 3 * 10)

    def test_truncated_header(self):
        with self.assertRaises(TruncatedStreamError):
            HuffmanTree.deserialize(reader(b'\x00'))

    def test_invalid_leaf_symbol(self):
        with self.assertRaises(FormatError):
            HuffmanTree.deserialize(reader(b'\xff\xc0'))

    def test_header_too_deep(self):
        with self.assertRaises(FormatError):
            HuffmanTree.deserialize(reader(b"\x00" * 40))


class TestHuffmanCompression(unittest.TestCase):
    def assertRoundTrip(self, data: bytes):
        self.assertEqual(decompress_bytes(compress_bytes(data)), data)

    def test_empty(self):
        self.assertRoundTrip(b"")

    def test_single_byte(self):
        self.assertRoundTrip(b"A")

    def test_all_byte_values(self):
        self.assertRoundTrip(bytes(range(256)))
        self.assertRoundTrip(bytes(range(256)) * 4)

    def test_runs(self):
        self.assertRoundTrip(b"\x00" * 1000)
        self.assertRoundTrip(b"A" * 300 + b"B" * 3 + b"\xff" * 77)

    def test_random_data(self):
        rng = random.Random(1234)
        for size in (2, 3, 17, 1000, 5000):
            self.assertRoundTrip(bytes(rng.getrandbits(8) for _ in range(size)))

    def test_text(self):
        self.assertRoundTrip("Привет, мир! Hello, world!\n".encode('utf-8') * 20)

    def test_concrete_body_size(self):
        out = BitOutputStream(io.BytesIO())
        stats = HuffProcessor().compress(reader(b"AAAB"), out)
        self.assertEqual(stats.body_bits, 7)
        self.assertEqual(stats.header_bits, 32 + 32)
        self.assertEqual(stats.original_size, 4)

    def test_empty_input_output(self):
        compressed = compress_bytes(b"")
        # магическое число, лист EOF (1 + 9 бит) и нулевое выравнивание
        self.assertEqual(compressed, b'\xfa\xce\x82\x00\xc0\x00')
        self.assertEqual(compressed[:4], HUFF_MAGIC.to_bytes(4, 'big'))

        stats = HuffProcessor().compress(reader(b""), BitOutputStream(io.BytesIO()))
        self.assertEqual(stats.header_bits, 42)
        self.assertEqual(stats.body_bits, 0)
        self.assertEqual(decompress_bytes(compressed), b"")

    def test_compression_benefit_for_skewed_input(self):
        data = b"aaaaaaaaaabbbbbc" * 200
        out = BitOutputStream(io.BytesIO())
        stats = HuffProcessor().compress(reader(data), out)
        self.assertLess(stats.body_bits, 8 * len(data))
        self.assertLess(stats.bits_per_byte, 8)
        self.assertLess(len(compress_bytes(data)), len(data))

    def test_source_rewound_after_compress(self):
        bit_in = reader(b"hello")
        HuffProcessor().compress(bit_in, BitOutputStream(io.BytesIO()))
        self.assertEqual(bit_in.read_bits(8), ord('h'))

    def test_trailing_data_is_ignored(self):
        data = b"some data"
        self.assertEqual(decompress_bytes(compress_bytes(data) + b"\xde\xad"), data)


class TestErrors(unittest.TestCase):
    def test_bad_magic(self):
        output = io.BytesIO()
        with self.assertRaises(FormatError):
            HuffProcessor().decompress(reader(b"\x00" * 16), BitOutputStream(output))
        self.assertEqual(output.getvalue(), b"")

    def test_empty_stream_is_format_error(self):
        with self.assertRaises(FormatError):
            decompress_bytes(b"")

    def test_errors_are_value_errors(self):
        self.assertTrue(issubclass(FormatError, HuffError))
        self.assertTrue(issubclass(TruncatedStreamError, HuffError))
        self.assertTrue(issubclass(HuffError, ValueError))

    def test_truncated_body(self):
        data = b"This is a test" * 20
        compressed = compress_bytes(data)
        for cut in (1, 2, 5, len(compressed) // 2):
            with self.assertRaises(TruncatedStreamError):
                decompress_bytes(compressed[:-cut])

    def test_every_truncation_after_magic(self):
        compressed = compress_bytes(b"AAAB")
        for size in range(4, len(compressed)):
            with self.assertRaises(TruncatedStreamError):
                decompress_bytes(compressed[:size])

    def test_partial_output_kept_on_truncation(self):
        data = b"abcdefgh" * 50
        compressed = compress_bytes(data)
        output = io.BytesIO()
        with self.assertRaises(TruncatedStreamError):
            HuffProcessor().decompress(reader(compressed[:-1]), BitOutputStream(output))
        self.assertTrue(data.startswith(output.getvalue()))
        self.assertGreater(len(output.getvalue()), 0)


class TestFileCodec(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.codec = FileCodec(verbose=False)

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def path(self, name: str) -> str:
        return os.path.join(self.temp_dir, name)

    def test_compress_decompress_file(self):
        original = b"Hello World! " * 100
        with open(self.path("test.txt"), 'wb') as f:
            f.write(original)

        stats = self.codec.compress_file(self.path("test.txt"), self.path("test.hf"))
        self.assertIsNotNone(stats)
        self.assertEqual(stats.original_size, len(original))
        self.assertEqual(stats.compressed_size, os.path.getsize(self.path("test.hf")))
        self.assertLess(stats.compressed_size, len(original))

        self.assertTrue(self.codec.decompress_file(self.path("test.hf"), self.path("out.txt")))
        with open(self.path("out.txt"), 'rb') as f:
            self.assertEqual(f.read(), original)

    def test_empty_file(self):
        open(self.path("empty"), 'wb').close()
        self.codec.compress_file(self.path("empty"), self.path("empty.hf"))
        self.assertEqual(os.path.getsize(self.path("empty.hf")), 6)
        self.assertTrue(self.codec.decompress_file(self.path("empty.hf"), self.path("empty.out")))
        self.assertEqual(os.path.getsize(self.path("empty.out")), 0)

    def test_decompress_invalid_file(self):
        with open(self.path("bad.hf"), 'wb') as f:
            f.write(b"not compressed at all")

        self.assertFalse(self.codec.decompress_file(self.path("bad.hf"), self.path("bad.out")))
        self.assertEqual(os.path.getsize(self.path("bad.out")), 0)

    def test_missing_file(self):
        self.assertIsNone(self.codec.compress_file(self.path("missing"), self.path("x.hf")))
        self.assertFalse(self.codec.decompress_file(self.path("missing"), self.path("x")))

    def test_show_codes(self):
        with open(self.path("a.txt"), 'wb') as f:
            f.write(b"abracadabra")
        self.codec.compress_file(self.path("a.txt"), self.path("a.hf"))
        self.assertTrue(self.codec.show_codes(self.path("a.hf")))
        self.assertFalse(self.codec.show_codes(self.path("a.txt")))


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_compress_and_decompress(self):
        src = os.path.join(self.temp_dir, "file.txt")
        with open(src, 'wb') as f:
            f.write(b"Content of file\n" * 50)

        self.assertEqual(cli.main(['compress', src, '-q']), 0)
        self.assertTrue(os.path.isfile(src + '.hf'))

        restored = os.path.join(self.temp_dir, "restored.txt")
        self.assertEqual(cli.main(['decompress', src + '.hf', '-o', restored, '-q']), 0)
        with open(restored, 'rb') as f:
            self.assertEqual(f.read(), b"Content of file\n" * 50)

        self.assertEqual(cli.main(['codes', src + '.hf']), 0)

    def test_decompress_failure_exit_code(self):
        src = os.path.join(self.temp_dir, "bad.hf")
        with open(src, 'wb') as f:
            f.write(b"\x01\x02\x03\x04\x05")
        self.assertEqual(cli.main(['decompress', src, '-q']), 1)

    def test_no_command(self):
        self.assertEqual(cli.main([]), 0)


def run_tests():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestBitStreams))
    suite.addTests(loader.loadTestsFromTestCase(TestFrequencyCounter))
    suite.addTests(loader.loadTestsFromTestCase(TestTreeBuilder))
    suite.addTests(loader.loadTestsFromTestCase(TestCodeTable))
    suite.addTests(loader.loadTestsFromTestCase(TestHeaderCodec))
    suite.addTests(loader.loadTestsFromTestCase(TestHuffmanCompression))
    suite.addTests(loader.loadTestsFromTestCase(TestErrors))
    suite.addTests(loader.loadTestsFromTestCase(TestFileCodec))
    suite.addTests(loader.loadTestsFromTestCase(TestCommandLine))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
