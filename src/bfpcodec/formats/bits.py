"""fp32 bit 域工具

float ↔ bit 的转换统一走 numpy view 重解释，不依赖类型别名。
"""
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from bfpcodec.core.constants import (
    FP32_EXP_MASK,
    FP32_MANTISSA_MASK,
    FP32_SIGN_MASK,
    WORD_MASK,
)
from bfpcodec.core.contract import expect

ArrayLike = Union[np.ndarray, Sequence[float], float]


@dataclass(frozen=True)
class FloatFields:
    """fp32 拆分结果"""
    sign: int       # 1 bit
    exponent: int   # 8 bit, bias 127
    mantissa: int   # 23 bit, 不含隐藏位


def float_to_bits(values: ArrayLike) -> np.ndarray:
    """float32 → uint32 bit 模式"""
    arr = np.ascontiguousarray(values, dtype=np.float32)
    return arr.view(np.uint32)


def bits_to_float(bits) -> np.ndarray:
    """uint32 bit 模式 → float32"""
    arr = np.ascontiguousarray(bits, dtype=np.uint32)
    return arr.view(np.float32)


def float_bits(value: float) -> int:
    """单个 float → Python int bit 模式"""
    return int(float_to_bits([value])[0])


def bits_float(word: int) -> float:
    """单个 bit 模式 → Python float"""
    return float(bits_to_float([word & WORD_MASK])[0])


def split_fields(word: int) -> FloatFields:
    """拆分 sign / exponent / mantissa"""
    word = int(word)
    return FloatFields(
        sign=(word & FP32_SIGN_MASK) >> 31,
        exponent=(word & FP32_EXP_MASK) >> 23,
        mantissa=word & FP32_MANTISSA_MASK,
    )


def exponent_field(word: int) -> int:
    return (int(word) & FP32_EXP_MASK) >> 23


def get_byte(word: int, index: int) -> int:
    """取 word 的第 index 个字节 (0 为最低字节)"""
    expect(0 <= index < 4, f"byte index out of range: {index}")
    return (int(word) >> (8 * index)) & 0xFF


def clear_low16(values: ArrayLike) -> np.ndarray:
    """
    清零低 16 位尾数 (fp32 → bfloat16 截断)

    返回新的 float32 数组，不修改输入。
    """
    bits = float_to_bits(values).copy()
    bits &= np.uint32(0xFFFF0000)
    return bits.view(np.float32)


def format_bits(word: int, width: int = 32) -> str:
    """bit 串，调试输出用"""
    return format(int(word) & ((1 << width) - 1), f"0{width}b")
