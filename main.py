"""
Командная строка для сжатия файлов кодом Хаффмана.
"""

import argparse
import sys
from file_codec import FileCodec


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Static Huffman file compressor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py compress notes.txt -o notes.txt.hf
  python main.py decompress notes.txt.hf -o notes.txt
  python main.py codes notes.txt.hf
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command')

    compress_parser = subparsers.add_parser('compress', help='Compress a file')
    compress_parser.add_argument('file', help='File to compress')
    compress_parser.add_argument('-o', '--output', help='Output path (default: FILE.hf)')
    compress_parser.add_argument('-q', '--quiet', action='store_true', help='Do not print statistics')

    decompress_parser = subparsers.add_parser('decompress', help='Decompress a file')
    decompress_parser.add_argument('file', help='Compressed file')
    decompress_parser.add_argument('-o', '--output', help='Output path (default: FILE.unhf)')
    decompress_parser.add_argument('-q', '--quiet', action='store_true', help='Do not print progress')

    codes_parser = subparsers.add_parser('codes', help='Show the code table of a compressed file')
    codes_parser.add_argument('file', help='Compressed file')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    codec = FileCodec(verbose=not getattr(args, 'quiet', False))

    try:
        if args.command == 'compress':
            ok = codec.compress_file(args.file, args.output or args.file + '.hf') is not None

        elif args.command == 'decompress':
            ok = codec.decompress_file(args.file, args.output or args.file + '.unhf')

        elif args.command == 'codes':
            ok = codec.show_codes(args.file)

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0 if ok else 1


if __name__ == '__main__':
    sys.exit(main())
