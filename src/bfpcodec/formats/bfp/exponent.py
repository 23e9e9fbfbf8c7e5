"""共享指数求解"""
from typing import Sequence

from bfpcodec.core.constants import (
    BLOCK_SIZE,
    FP32_BIAS,
    REBIASED_BIAS,
    REBIASED_EXP_MAX,
)
from bfpcodec.core.contract import expect
from bfpcodec.formats.bits import exponent_field
from bfpcodec.formats.types import ExponentConvention


def rebias_exponent(exp: int) -> int:
    """bias-127 指数 → bias-15，截断到 [0, 31]"""
    se = exp - FP32_BIAS + REBIASED_BIAS
    if se > REBIASED_EXP_MAX:
        return REBIASED_EXP_MAX
    if se < 0:
        return 0
    return se


def resolve_shared_exponent(
    words: Sequence[int],
    convention: ExponentConvention = ExponentConvention.NATIVE,
) -> int:
    """
    求一个 block 的共享指数

    取 16 个元素指数域的最大值 (REBIASED 时先 rebias)。
    零值不做特殊处理，其指数域 0 正常参与比较。

    Args:
        words: 16 个 fp32 bit 模式
        convention: 指数约定

    Returns:
        8 位共享指数
    """
    expect(len(words) == BLOCK_SIZE, f"block must hold {BLOCK_SIZE} elements, got {len(words)}")
    shared = 0
    for word in words:
        exp = exponent_field(word)
        if convention is ExponentConvention.REBIASED:
            exp = rebias_exponent(exp)
        if exp > shared:
            shared = exp
    return shared
