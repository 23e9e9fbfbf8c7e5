"""bfpcodec

fp32 (bfloat16 精度) ↔ block floating-point (Bfp2/Bfp4/Bfp8) 的逐 bit 编解码:

    import numpy as np
    from bfpcodec import encode_tiles, decode_tiles, BFP8, ExponentConvention

    x = np.random.randn(1024).astype(np.float32)
    words = encode_tiles(x, BFP8, ExponentConvention.NATIVE)
    y = decode_tiles(words, BFP8, ExponentConvention.NATIVE)

按名字量化:
    from bfpcodec.formats.quantize import quantize, dequantize

    words, meta = quantize(x, "bfp8_b")
    y = dequantize(words, "bfp8_b", meta)
"""
__version__ = "0.1.0"

from bfpcodec.formats.bfp import (
    BFP2,
    BFP4,
    BFP8,
    BfpFormat,
    DataFormat,
    ExponentConvention,
    RoundingMode,
    decode_block,
    decode_tiles,
    encode_block,
    encode_tiles,
)

__all__ = [
    "BFP2",
    "BFP4",
    "BFP8",
    "BfpFormat",
    "DataFormat",
    "ExponentConvention",
    "RoundingMode",
    "encode_tiles",
    "decode_tiles",
    "encode_block",
    "decode_block",
]
