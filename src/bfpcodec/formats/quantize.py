"""量化类型支持

按名字注册 BFP tile 编解码，名字即格式 tag 的小写形式:
    bfp2_b / bfp4_b / bfp8_b: NATIVE 指数 (bfloat 风格)
    bfp2   / bfp4   / bfp8    : REBIASED 指数
"""
from typing import Callable, Dict

import numpy as np

from bfpcodec.core.constants import TILE_SIZE
from bfpcodec.formats.bfp.parallel import decode_tiles_parallel, encode_tiles_parallel
from bfpcodec.formats.bfp.tile import get_index_map
from bfpcodec.formats.types import (
    DataFormat,
    bfp_tags,
    parse_convention,
    parse_rounding,
)

# 量化类型注册表
_quantize_registry: Dict[str, Callable] = {}
# 反量化注册表
_dequantize_registry: Dict[str, Callable] = {}


def register_quantize(name: str):
    """
    注册量化转换函数

    示例:
        @register_quantize("bfp8_b")
        def to_bfp8_b(data: np.ndarray, **kwargs) -> tuple:
            ...
            return words, {"format": "bfp8_b"}
    """
    def decorator(func: Callable):
        _quantize_registry[name] = func
        return func
    return decorator


def register_dequantize(name: str):
    """注册反量化函数"""
    def decorator(func: Callable):
        _dequantize_registry[name] = func
        return func
    return decorator


def get_quantize(name: str) -> Callable:
    """获取量化函数"""
    if name not in _quantize_registry:
        raise ValueError(f"未知量化类型: {name}, 可用: {list(_quantize_registry.keys())}")
    return _quantize_registry[name]


def list_quantize() -> list:
    """列出所有注册的量化类型"""
    return list(_quantize_registry.keys())


def quantize(data: np.ndarray, qtype: str, **kwargs) -> tuple:
    """
    量化数据

    Args:
        data: 输入数据 (fp32)
        qtype: 量化类型名称
        **kwargs: 量化参数 (convention / rounding / layout / workers)

    Returns:
        (packed_words, meta_info)
    """
    func = get_quantize(qtype)
    return func(data, **kwargs)


def dequantize(data: np.ndarray, qtype: str, meta: dict = None) -> np.ndarray:
    """
    反量化数据

    Args:
        data: 量化后的 word
        qtype: 量化类型名称
        meta: quantize 返回的元信息

    Returns:
        还原的 fp32 数据 (按 original_shape 还原形状)
    """
    meta = meta or {}
    if qtype not in _dequantize_registry:
        raise ValueError(f"未知量化类型或无法反量化: {qtype}")
    return _dequantize_registry[qtype](data, meta)


def simulate_quantize(data: np.ndarray, qtype: str, **kwargs) -> np.ndarray:
    """
    模拟量化精度损失: quantize -> dequantize

    Example:
        >>> x = np.ones(1024, dtype=np.float32)
        >>> x_lossy = simulate_quantize(x, "bfp4_b")
    """
    if qtype == "float32":
        return data.astype(np.float32)

    packed, meta = quantize(data, qtype, **kwargs)
    return dequantize(packed, qtype, meta)


def _pad_to_tiles(flat: np.ndarray) -> np.ndarray:
    """补零到 tile 整数倍"""
    pad = (-flat.size) % TILE_SIZE
    if pad:
        flat = np.concatenate([flat, np.zeros(pad, dtype=np.float32)])
    return flat


def _make_bfp(tag: DataFormat, default_conv):
    name = tag.name.lower()

    @register_quantize(name)
    def to_bfp(data: np.ndarray, **kwargs) -> tuple:
        data = np.asarray(data, dtype=np.float32)
        convention = parse_convention(kwargs.get("convention", default_conv))
        rounding = kwargs.get("rounding")
        layout = kwargs.get("layout", "row_major")
        flat = _pad_to_tiles(data.ravel())

        words = encode_tiles_parallel(
            flat, tag,
            convention=convention,
            index_map=get_index_map(layout),
            rounding=None if rounding is None else parse_rounding(rounding),
            workers=kwargs.get("workers"),
        )
        return words, {
            "format": name,
            "convention": convention.value,
            "layout": layout,
            "num_tiles": flat.size // TILE_SIZE,
            "original_shape": data.shape,
        }

    @register_dequantize(name)
    def from_bfp(words: np.ndarray, meta: dict) -> np.ndarray:
        convention = parse_convention(meta.get("convention", default_conv))
        layout = meta.get("layout", "row_major")
        flat = decode_tiles_parallel(words, tag, convention=convention, index_map=get_index_map(layout))
        shape = meta.get("original_shape")
        if shape is None:
            return flat
        size = int(np.prod(shape))
        return flat[:size].reshape(shape)

    to_bfp.__doc__ = f"fp32 → {name} tile word"
    from_bfp.__doc__ = f"{name} tile word → fp32"
    return to_bfp, from_bfp


# === 内置量化类型 ===

for _tag, _fmt, _conv in bfp_tags():
    _make_bfp(_tag, _conv)
