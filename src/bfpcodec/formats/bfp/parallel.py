"""多 tile 并行编解码

tile 之间没有共享状态，按 tile 分发到线程池，结果按 tile 下标顺序拼接，
输出与串行版本逐 bit 一致。
"""
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import numpy as np

from bfpcodec.core.config import get_config
from bfpcodec.core.constants import TILE_SIZE
from bfpcodec.core.contract import expect
from bfpcodec.core.log import logger
from bfpcodec.formats.bfp.tile import (
    IndexMap,
    decode_tile,
    encode_tile,
    resolve_options,
    row_major,
    words_per_tile,
)
from bfpcodec.formats.bits import bits_to_float, float_to_bits
from bfpcodec.formats.types import ExponentConvention, FormatLike, RoundingMode


def _workers(workers: Optional[int]) -> int:
    n = get_config().workers if workers is None else workers
    expect(n >= 1, f"workers must be >= 1, got {n}")
    return n


def encode_tiles_parallel(
    values,
    fmt: FormatLike,
    convention: Optional[ExponentConvention] = None,
    index_map: IndexMap = row_major,
    rounding: Optional[RoundingMode] = None,
    workers: Optional[int] = None,
) -> np.ndarray:
    """encode_tiles 的线程池版本"""
    bits = float_to_bits(values).ravel()
    expect(bits.size % TILE_SIZE == 0,
           f"element count must be a multiple of {TILE_SIZE}, got {bits.size}")
    num_tiles = bits.size // TILE_SIZE
    opts = resolve_options(fmt, convention, rounding)
    n = _workers(workers)
    logger.debug(f"encode {num_tiles} tile(s) on {n} worker(s)")

    with ThreadPoolExecutor(max_workers=n) as pool:
        # map 保持提交顺序
        results = pool.map(lambda t: encode_tile(bits, t, opts, index_map), range(num_tiles))
        out = [w for tile_words in results for w in tile_words]
    return np.array(out, dtype=np.uint32)


def decode_tiles_parallel(
    words,
    fmt: FormatLike,
    convention: Optional[ExponentConvention] = None,
    index_map: IndexMap = row_major,
    workers: Optional[int] = None,
) -> np.ndarray:
    """decode_tiles 的线程池版本"""
    words = np.ascontiguousarray(words, dtype=np.uint32).ravel()
    opts = resolve_options(fmt, convention)
    per_tile = words_per_tile(opts.fmt)
    expect(words.size % per_tile == 0,
           f"word count must be a multiple of {per_tile} for {opts.fmt}, got {words.size}")
    num_tiles = words.size // per_tile
    out_bits = np.zeros(num_tiles * TILE_SIZE, dtype=np.uint32)
    n = _workers(workers)
    logger.debug(f"decode {num_tiles} tile(s) on {n} worker(s)")

    def _run(tile: int):
        chunk = [int(w) for w in words[tile * per_tile:(tile + 1) * per_tile]]
        # 各 tile 写入 out_bits 中互不重叠的位置
        decode_tile(chunk, tile, out_bits, opts, index_map)

    with ThreadPoolExecutor(max_workers=n) as pool:
        list(pool.map(_run, range(num_tiles)))
    return bits_to_float(out_bits)
