#!/usr/bin/env python3
import argparse
import sys
import time
from typing import Dict, List, Optional, Tuple

from bmp_image import BmpImage, PathLike, read_file_bytes
from huff_container import ContainerError, pack_container, read_layout
from huff_tree import HuffmanTree, Node, build_freq_map, encoded_bit_length, leaves

COMPRESSED_SUFFIX = ".compressed"
DECOMPRESSED_SUFFIX = ".decompressed.bmp"


def compressed_name(src: PathLike) -> str:
    return f"{src}{COMPRESSED_SUFFIX}"


def decompressed_name(src: PathLike) -> str:
    src = str(src)
    if COMPRESSED_SUFFIX in src:
        return src.replace(COMPRESSED_SUFFIX, DECOMPRESSED_SUFFIX)
    return src + DECOMPRESSED_SUFFIX


# -------------------------
# 1) Compressor
# -------------------------
def compress_file(src: PathLike, dst: Optional[PathLike] = None) -> Tuple[Optional[Node], Dict[str, object]]:
    """
    Compress the BMP at ``src`` into ``dst`` (default ``<src>.compressed``).

    Returns (root, stats). root is None when the pixel payload is empty.
    """
    if dst is None:
        dst = compressed_name(src)

    t0 = time.perf_counter()
    image = BmpImage.read(src)
    t_read = time.perf_counter()

    freq = build_freq_map(image.data)
    tree = HuffmanTree.from_frequencies(freq)
    t_tree = time.perf_counter()

    codes = tree.generate_codes()
    t_codes = time.perf_counter()

    packed = tree.encode(image.data, codes)
    tree_blob = tree.serialize()
    blob = pack_container(len(image.data), tree_blob, image.header, packed)
    t_pack = time.perf_counter()

    with open(dst, 'wb') as out:
        out.write(blob)
    t_write = time.perf_counter()

    original_bytes = len(image.data)
    compressed_bytes = len(blob)
    bits = encoded_bit_length(freq, codes)
    pad_count = (8 - bits % 8) % 8

    if original_bytes > 0:
        compression_ratio = compressed_bytes / original_bytes
        space_saved_percent = (1.0 - compression_ratio) * 100.0
    else:
        compression_ratio = None
        space_saved_percent = None

    stats = {
        "input": str(src),
        "output": str(dst),
        "original_bytes": original_bytes,
        "compressed_bytes": compressed_bytes,
        "tree_bytes": len(tree_blob),
        "unique_symbols": len(freq),
        "pad_count": pad_count,
        "compression_ratio": compression_ratio,
        "space_saved_percent": space_saved_percent,
        "time_read": t_read - t0,
        "time_tree_build": t_tree - t_read,
        "time_codes": t_codes - t_tree,
        "time_pack": t_pack - t_codes,
        "time_write": t_write - t_pack,
        "time_total": t_write - t0,
    }
    return tree.root, stats


# -------------------------
# 2) Decompressor
# -------------------------
def decompress_file(src: PathLike, dst: Optional[PathLike] = None) -> Dict[str, object]:
    if dst is None:
        dst = decompressed_name(src)

    t0 = time.perf_counter()
    raw = read_file_bytes(src)
    t_read = time.perf_counter()

    layout = read_layout(raw)
    tree = HuffmanTree.deserialize(layout.tree_blob)
    t_tree = time.perf_counter()

    data = tree.decode(layout.packed, layout.original_length)
    t_decode = time.perf_counter()

    BmpImage(layout.header, data).write(dst)
    t_write = time.perf_counter()

    return {
        "input": str(src),
        "output": str(dst),
        "compressed_size": len(raw),
        "restored_size": len(layout.header) + len(data),
        "payload_bytes": len(data),
        "tree_leaves": sum(1 for _ in leaves(tree.root)),
        "time_read": t_read - t0,
        "time_tree": t_tree - t_read,
        "time_decode": t_decode - t_tree,
        "time_write": t_write - t_decode,
        "time_total": t_write - t0,
    }


# -------------------------
# 3) Command line
# -------------------------
def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bmp-huff",
        description="Huffman compression for BMP images.",
    )
    subparsers = parser.add_subparsers(dest="command")

    p_compress = subparsers.add_parser("compress", help="Compress a .bmp file")
    p_compress.add_argument("input", help="Input .bmp path")
    p_compress.add_argument("-o", "--output", help=f"Output path (default: <input>{COMPRESSED_SUFFIX})")

    p_decompress = subparsers.add_parser("decompress", help="Restore a compressed .bmp")
    p_decompress.add_argument("input", help=f"Input {COMPRESSED_SUFFIX} path")
    p_decompress.add_argument("-o", "--output", help=f"Output path (default: <input>{DECOMPRESSED_SUFFIX})")

    return parser


def print_compress_report(stats: Dict[str, object]) -> None:
    print("Compression finished!")
    print(f"Original size:     {stats['original_bytes']} bytes")
    print(f"Compressed size:   {stats['compressed_bytes']} bytes")
    saved = stats["space_saved_percent"]
    if saved is None:
        print("Compression rate:  N/A (empty image data)")
    else:
        print(f"Compression rate:  {saved:.2f}%")
    print(f"Output file:       {stats['output']}")


def print_decompress_report(stats: Dict[str, object]) -> None:
    print("Decompression finished!")
    print(f"Restored file:     {stats['output']}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == "compress":
            _, stats = compress_file(args.input, args.output)
            print_compress_report(stats)
        else:
            stats = decompress_file(args.input, args.output)
            print_decompress_report(stats)
    except FileNotFoundError:
        print(f"Error: Input file '{args.input}' not found.", file=sys.stderr)
        return 1
    except ContainerError as e:
        print(f"Error: corrupt compressed file: {e}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
