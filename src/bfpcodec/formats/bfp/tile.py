"""
Tile 序列化

一个 tile = 32x32 元素 = 4 个 16x16 face (左上、右上、左下、右下)，
face 内每行 16 个元素构成一个 block，共享一个指数。

单 tile 输出布局:
    16 个指数 word: face0 row0..15, face1 row0..15, face2 ..., face3 ...
                    (每 word 4 个指数)
    数据 word:      face0 (行优先), face1, face2, face3

输入元素到 tile 坐标的映射由 IndexMap 决定，codec 本身不关心调用方的存储顺序。
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from bfpcodec.core.constants import (
    BLOCK_SIZE,
    EXP_WORDS_PER_TILE,
    FACE_HEIGHT,
    FACE_WIDTH,
    FACES_PER_TILE_COL,
    FACES_PER_TILE_ROW,
    ROWS_PER_TILE,
    TILE_SIZE,
    TILE_WIDTH,
)
from bfpcodec.core.config import get_config
from bfpcodec.core.contract import expect
from bfpcodec.core.log import logger
from bfpcodec.formats.bfp.exponent import resolve_shared_exponent
from bfpcodec.formats.bfp.pack import (
    pack_code_stream,
    pack_exponent_stream,
    unpack_code_stream,
    unpack_exponents,
)
from bfpcodec.formats.bfp.scalar import dequantize_scalar, quantize_scalar
from bfpcodec.formats.bits import bits_to_float, float_to_bits
from bfpcodec.formats.types import (
    BfpFormat,
    ExponentConvention,
    FormatLike,
    RoundingMode,
    bfp_format,
    default_convention,
)

# (tile, face_row, face_col, row, col) → 输入序列下标
IndexMap = Callable[[int, int, int, int, int], int]


def row_major(tile: int, face_row: int, face_col: int, row: int, col: int) -> int:
    """输入按 32x32 行优先存放"""
    return (tile * TILE_SIZE
            + (face_row * FACE_HEIGHT + row) * TILE_WIDTH
            + face_col * FACE_WIDTH + col)


def face_major(tile: int, face_row: int, face_col: int, row: int, col: int) -> int:
    """输入已按 face → 行 → 列 顺序排好，顺序读取即可"""
    face = face_row * FACES_PER_TILE_COL + face_col
    return (tile * TILE_SIZE
            + (face * FACE_HEIGHT + row) * FACE_WIDTH
            + col)


INDEX_MAPS = {
    "row_major": row_major,
    "face_major": face_major,
}


def get_index_map(name: str) -> IndexMap:
    """按名字获取映射 (row_major / face_major)"""
    if name not in INDEX_MAPS:
        raise ValueError(f"未知布局: {name}, 可用: {list(INDEX_MAPS.keys())}")
    return INDEX_MAPS[name]


@dataclass(frozen=True)
class CodecOptions:
    """一次编解码调用解析后的参数"""
    fmt: BfpFormat
    convention: ExponentConvention
    rounding: RoundingMode
    trace: bool


def resolve_options(
    fmt: FormatLike,
    convention: Optional[ExponentConvention] = None,
    rounding: Optional[RoundingMode] = None,
    trace: Optional[bool] = None,
) -> CodecOptions:
    """
    未显式指定的参数取默认值

    convention 缺省时，格式 tag (DataFormat / tag 名 / 数值) 取其搭配的约定，
    与 quantize 注册表一致; 只有裸 BfpFormat 才取全局配置。
    rounding / trace 缺省时取全局配置。
    """
    cfg = get_config()
    if convention is None:
        convention = cfg.convention if isinstance(fmt, BfpFormat) else default_convention(fmt)
    return CodecOptions(
        fmt=bfp_format(fmt),
        convention=convention,
        rounding=cfg.rounding if rounding is None else rounding,
        trace=cfg.trace if trace is None else trace,
    )


def _iter_rows():
    """按输出顺序遍历 tile 内 64 行: (face_row, face_col, row)"""
    for face_row in range(FACES_PER_TILE_ROW):
        for face_col in range(FACES_PER_TILE_COL):
            for row in range(FACE_HEIGHT):
                yield face_row, face_col, row


def words_per_tile(fmt: BfpFormat) -> int:
    return EXP_WORDS_PER_TILE + ROWS_PER_TILE * fmt.words_per_block(BLOCK_SIZE)


def _quantize_block(words: Sequence[int], opts: CodecOptions) -> Tuple[int, List[int]]:
    shared = resolve_shared_exponent(words, opts.convention)
    codes = [quantize_scalar(w, shared, opts.fmt, opts.convention, opts.rounding, opts.trace)
             for w in words]
    return shared, codes


def encode_tile(
    bits: np.ndarray,
    tile: int,
    opts: CodecOptions,
    index_map: IndexMap = row_major,
) -> List[int]:
    """
    编码单个 tile

    Args:
        bits: 全部输入的 fp32 bit 模式 (uint32)
        tile: tile 下标
        opts: resolve_options() 的结果
        index_map: 元素映射

    Returns:
        16 个指数 word + 数据 word
    """
    exponents: List[int] = []
    data: List[int] = []
    for face_row, face_col, row in _iter_rows():
        block = [int(bits[index_map(tile, face_row, face_col, row, col)])
                 for col in range(FACE_WIDTH)]
        shared, codes = _quantize_block(block, opts)
        exponents.append(shared)
        data.extend(pack_code_stream(codes, opts.fmt))
    return pack_exponent_stream(exponents) + data


def _tile_count(n: int) -> int:
    expect(n % TILE_SIZE == 0, f"element count must be a multiple of {TILE_SIZE}, got {n}")
    return n // TILE_SIZE


def encode_tiles(
    values,
    fmt: FormatLike,
    convention: Optional[ExponentConvention] = None,
    index_map: IndexMap = row_major,
    rounding: Optional[RoundingMode] = None,
) -> np.ndarray:
    """
    fp32 序列 → BFP tile word 序列

    Args:
        values: float32 序列，长度须为 1024 的倍数
        fmt: BFP 格式 (BfpFormat / DataFormat / tag 名)
        convention: 指数约定，默认取全局配置
        index_map: 输入元素到 tile 坐标的映射
        rounding: 舍入方式，默认取全局配置

    Returns:
        uint32 数组，每个 tile 依次输出
    """
    bits = float_to_bits(values).ravel()
    num_tiles = _tile_count(bits.size)
    opts = resolve_options(fmt, convention, rounding)
    logger.debug(f"encode {num_tiles} tile(s) as {opts.fmt} ({opts.convention.value})")

    out: List[int] = []
    for tile in range(num_tiles):
        out.extend(encode_tile(bits, tile, opts, index_map))
    return np.array(out, dtype=np.uint32)


def decode_tile(
    words: Sequence[int],
    tile: int,
    out_bits: np.ndarray,
    opts: CodecOptions,
    index_map: IndexMap = row_major,
):
    """解码单个 tile 的 word，写入 out_bits 中对应位置"""
    expect(len(words) == words_per_tile(opts.fmt),
           f"{opts.fmt} tile holds {words_per_tile(opts.fmt)} words, got {len(words)}")
    exponents: List[int] = []
    for word in words[:EXP_WORDS_PER_TILE]:
        exponents.extend(unpack_exponents(word))
    codes = unpack_code_stream(words[EXP_WORDS_PER_TILE:], opts.fmt)

    for r, (face_row, face_col, row) in enumerate(_iter_rows()):
        shared = exponents[r]
        for col in range(FACE_WIDTH):
            code = codes[r * FACE_WIDTH + col]
            out_bits[index_map(tile, face_row, face_col, row, col)] = dequantize_scalar(
                opts.fmt, code, shared, opts.convention, opts.trace)


def decode_tiles(
    words,
    fmt: FormatLike,
    convention: Optional[ExponentConvention] = None,
    index_map: IndexMap = row_major,
) -> np.ndarray:
    """
    BFP tile word 序列 → fp32 序列

    encode_tiles 的逆过程 (量化损失除外)。
    """
    words = np.ascontiguousarray(words, dtype=np.uint32).ravel()
    opts = resolve_options(fmt, convention)
    per_tile = words_per_tile(opts.fmt)
    expect(words.size % per_tile == 0,
           f"word count must be a multiple of {per_tile} for {opts.fmt}, got {words.size}")
    num_tiles = words.size // per_tile
    logger.debug(f"decode {num_tiles} tile(s) as {opts.fmt} ({opts.convention.value})")

    out_bits = np.zeros(num_tiles * TILE_SIZE, dtype=np.uint32)
    for tile in range(num_tiles):
        chunk = [int(w) for w in words[tile * per_tile:(tile + 1) * per_tile]]
        decode_tile(chunk, tile, out_bits, opts, index_map)
    return bits_to_float(out_bits)


def encode_block(
    values,
    fmt: FormatLike,
    convention: Optional[ExponentConvention] = None,
    rounding: Optional[RoundingMode] = None,
) -> Tuple[int, np.ndarray]:
    """
    单 block 编码 (不做 face / tile 循环)

    Returns:
        (共享指数字节, 16 / codes_per_word 个数据 word)
    """
    bits = float_to_bits(values).ravel()
    expect(bits.size == BLOCK_SIZE, f"block must hold {BLOCK_SIZE} elements, got {bits.size}")
    opts = resolve_options(fmt, convention, rounding)
    shared, codes = _quantize_block([int(b) for b in bits], opts)
    return shared, np.array(pack_code_stream(codes, opts.fmt), dtype=np.uint32)


def decode_block(
    shared_exp: int,
    words,
    fmt: FormatLike,
    convention: Optional[ExponentConvention] = None,
) -> np.ndarray:
    """encode_block 的逆过程"""
    opts = resolve_options(fmt, convention)
    words = [int(w) for w in np.ascontiguousarray(words, dtype=np.uint32).ravel()]
    expect(len(words) == opts.fmt.words_per_block(BLOCK_SIZE),
           f"{opts.fmt} block holds {opts.fmt.words_per_block(BLOCK_SIZE)} words, got {len(words)}")
    codes = unpack_code_stream(words, opts.fmt)
    out = [dequantize_scalar(opts.fmt, c, shared_exp, opts.convention, opts.trace) for c in codes]
    return bits_to_float(np.array(out, dtype=np.uint32))


def block_codes(
    values,
    fmt: FormatLike,
    convention: Optional[ExponentConvention] = None,
    rounding: Optional[RoundingMode] = None,
) -> Tuple[int, List[int]]:
    """单 block 量化，返回未打包的 code (调试 / 展示用)"""
    bits = float_to_bits(values).ravel()
    expect(bits.size == BLOCK_SIZE, f"block must hold {BLOCK_SIZE} elements, got {bits.size}")
    return _quantize_block([int(b) for b in bits], resolve_options(fmt, convention, rounding))
