"""Block floating-point 编解码

    from bfpcodec.formats.bfp import encode_tiles, decode_tiles, BFP8

    words = encode_tiles(x, BFP8, ExponentConvention.NATIVE)
    y = decode_tiles(words, BFP8, ExponentConvention.NATIVE)
"""
from bfpcodec.formats.types import (
    BFP2,
    BFP4,
    BFP8,
    BfpFormat,
    DataFormat,
    ExponentConvention,
    RoundingMode,
    bfp_format,
)
from bfpcodec.formats.bfp.exponent import rebias_exponent, resolve_shared_exponent
from bfpcodec.formats.bfp.scalar import dequantize_scalar, quantize_scalar
from bfpcodec.formats.bfp.pack import (
    pack_codes,
    pack_exponents,
    unpack_codes,
    unpack_exponents,
)
from bfpcodec.formats.bfp.tile import (
    IndexMap,
    decode_block,
    decode_tiles,
    encode_block,
    encode_tiles,
    face_major,
    row_major,
    words_per_tile,
)
from bfpcodec.formats.bfp.parallel import decode_tiles_parallel, encode_tiles_parallel

__all__ = [
    # types
    "BFP2",
    "BFP4",
    "BFP8",
    "BfpFormat",
    "DataFormat",
    "ExponentConvention",
    "RoundingMode",
    "bfp_format",
    # exponent
    "rebias_exponent",
    "resolve_shared_exponent",
    # scalar
    "quantize_scalar",
    "dequantize_scalar",
    # pack
    "pack_exponents",
    "unpack_exponents",
    "pack_codes",
    "unpack_codes",
    # tile
    "IndexMap",
    "row_major",
    "face_major",
    "words_per_tile",
    "encode_tiles",
    "decode_tiles",
    "encode_block",
    "decode_block",
    "encode_tiles_parallel",
    "decode_tiles_parallel",
]
