"""
单元素 BFP 量化 / 反量化

量化: fp32 bit 模式 + 共享指数 → (mantissa_width + 1) 位 code
      sign 位于 bit[mantissa_width]，幅值位于低 mantissa_width 位
反量化: code + 共享指数 → fp32 bit 模式，尾数仅高 mantissa_width 位非零

两者都是全函数: 任意 32 位输入 (含 NaN/Inf 的 bit 模式) 都有确定输出，
NaN/Inf 不做特殊处理，按普通指数/尾数参与运算。
"""
from bfpcodec.core.constants import (
    FP32_BIAS,
    FP32_EXP_MANTISSA_MASK,
    FP32_EXP_MASK,
    FP32_HIDDEN_BIT,
    FP32_MANTISSA_MASK,
    REBIASED_BIAS,
    REBIASED_EXP_MAX,
    WORD_MASK,
)
from bfpcodec.core.contract import expect
from bfpcodec.core.log import logger
from bfpcodec.formats.bits import format_bits
from bfpcodec.formats.types import BfpFormat, ExponentConvention, RoundingMode

# 单次移位上限，与 32 位硬件移位器一致
_MAX_SHIFT_CHUNK = 31


def _align(mantissa: int, exp_diff: int) -> int:
    """按 exp_diff 右移对齐，每次最多移 31 位"""
    while exp_diff > _MAX_SHIFT_CHUNK:
        mantissa >>= _MAX_SHIFT_CHUNK
        exp_diff -= _MAX_SHIFT_CHUNK
    return mantissa >> exp_diff


def quantize_scalar(
    word: int,
    shared_exp: int,
    fmt: BfpFormat,
    convention: ExponentConvention = ExponentConvention.NATIVE,
    rounding: RoundingMode = RoundingMode.ROUND_HALF_UP,
    trace: bool = False,
) -> int:
    """
    fp32 → BFP code

    Args:
        word: fp32 bit 模式
        shared_exp: 所属 block 的共享指数 (8 位)
        fmt: BFP 格式
        convention: 指数约定，须与求共享指数时一致
        rounding: ROUND_HALF_UP 先加半个 LSB 再截断并饱和; TRUNCATE 直接截断
        trace: 输出逐步 bit 变化 (DEBUG)

    Returns:
        BFP code
    """
    expect(0 <= shared_exp <= 0xFF, f"shared exponent out of range: {shared_exp}")
    word = int(word) & WORD_MASK

    # +0.0 / -0.0
    if word & FP32_EXP_MANTISSA_MASK == 0:
        return 0

    mantissa = word & FP32_MANTISSA_MASK
    exp = (word & FP32_EXP_MASK) >> 23
    sign = word >> 31

    if trace:
        logger.debug(f"mantissa(23bit) {format_bits(mantissa, 23)}")
        logger.debug(f"shared exp {format_bits(shared_exp, 8)} exp {format_bits(exp, 8)}")

    if convention is ExponentConvention.REBIASED:
        se = exp - FP32_BIAS + REBIASED_BIAS
        # 饱和: 上溢取最大幅值，下溢清零尾数
        if se > REBIASED_EXP_MAX:
            se = REBIASED_EXP_MAX
            mantissa = FP32_MANTISSA_MASK
        elif se < 0:
            se = 0
            mantissa = 0
        exp = se

    mantissa |= FP32_HIDDEN_BIT
    if trace:
        logger.debug(f"mantissa(24bit) {format_bits(mantissa, 24)}")

    # shared_exp < exp 只在饱和路径出现，此时不移位
    if shared_exp >= exp:
        exp_diff = shared_exp - exp
        mantissa = _align(mantissa, exp_diff)
        if trace:
            logger.debug(f"exp_diff {exp_diff}")
            logger.debug(f"mantissa(shifting) {format_bits(mantissa)}")

    shift = fmt.mantissa_shift
    if rounding is RoundingMode.TRUNCATE:
        mantissa >>= shift
    else:
        mantissa += 1 << (shift - 1)
        mantissa >>= shift
        # 舍入溢出饱和，不进位到指数
        if mantissa > fmt.max_magnitude:
            mantissa = fmt.max_magnitude
        if trace:
            logger.debug(f"mantissa(rounded) {format_bits(mantissa, fmt.mantissa_width)}")

    if mantissa == 0:
        sign = 0
    return (sign << fmt.mantissa_width) | mantissa


def dequantize_scalar(
    fmt: BfpFormat,
    code: int,
    shared_exp: int,
    convention: ExponentConvention = ExponentConvention.NATIVE,
    trace: bool = False,
) -> int:
    """
    BFP code → fp32 bit 模式

    幅值为 0 时指数、尾数输出 0，符号位原样透传 (不做规范化)。
    否则左移直到 bit[mantissa_width - 1] 为 1，记移位次数 shift_cnt，
    再移一位去掉隐藏位; 指数 = shared_exp - shift_cnt。
    bfp2 只有 1 位幅值，非零时该位本身就是前导 1，shift_cnt 恒为 0。

    运算按 32 位无符号回绕。
    """
    expect(0 <= shared_exp <= 0xFF, f"shared exponent out of range: {shared_exp}")
    width = fmt.mantissa_width
    code = int(code) & ((1 << fmt.code_bits) - 1)
    sign = code >> width
    man = code & fmt.magnitude_mask

    if man == 0:
        exp = 0
        if trace:
            logger.debug("man == 0")
    else:
        leading = 1 << (width - 1)
        shift_cnt = 0
        while man & leading == 0:
            man <<= 1
            shift_cnt += 1
        # 再移一位，去掉隐藏位
        man = (man << 1) & fmt.magnitude_mask

        exp = (shared_exp - shift_cnt) & WORD_MASK
        if convention is ExponentConvention.REBIASED:
            exp = (exp - REBIASED_BIAS + FP32_BIAS) & WORD_MASK
        if trace:
            logger.debug(f"shift_cnt {shift_cnt} exp {exp}")

    return ((sign << 31) | (exp << 23) | (man << (23 - width))) & WORD_MASK
