"""32 位 word 打包 / 解包

指数: 每 word 4 个，字节 i 位于 bit[8i+7:8i]
code: 每 word codes_per_word 个 (bfp2=16, bfp4=8, bfp8=4)，
      下标 0 位于最低位
"""
from typing import List, Sequence

from bfpcodec.core.constants import EXPONENTS_PER_WORD, WORD_MASK
from bfpcodec.core.contract import expect
from bfpcodec.formats.bits import get_byte
from bfpcodec.formats.types import BfpFormat


def pack_exponents(exps: Sequence[int]) -> int:
    """4 个共享指数 → 1 个 word"""
    expect(len(exps) == EXPONENTS_PER_WORD,
           f"exponent word holds {EXPONENTS_PER_WORD} exponents, got {len(exps)}")
    word = 0
    for i, exp in enumerate(exps):
        word |= (int(exp) & 0xFF) << (i * 8)
    return word


def unpack_exponents(word: int) -> List[int]:
    return [get_byte(word, i) for i in range(EXPONENTS_PER_WORD)]


def pack_codes(codes: Sequence[int], fmt: BfpFormat) -> int:
    """codes_per_word 个 code → 1 个 word"""
    expect(len(codes) == fmt.codes_per_word,
           f"{fmt} word holds {fmt.codes_per_word} codes, got {len(codes)}")
    bits = fmt.slot_bits
    mask = (1 << bits) - 1
    word = 0
    # 从高位 slot 往低位填，[0] 落在最低位
    for code in reversed(codes):
        word = (word << bits) | (int(code) & mask)
    return word & WORD_MASK


def unpack_codes(word: int, fmt: BfpFormat) -> List[int]:
    bits = fmt.slot_bits
    mask = (1 << bits) - 1
    word = int(word)
    return [(word >> (i * bits)) & mask for i in range(fmt.codes_per_word)]


def pack_exponent_stream(exps: Sequence[int]) -> List[int]:
    """指数序列按 4 个一组打包，长度须为 4 的倍数"""
    expect(len(exps) % EXPONENTS_PER_WORD == 0,
           f"exponent count must be a multiple of {EXPONENTS_PER_WORD}, got {len(exps)}")
    return [pack_exponents(exps[i:i + EXPONENTS_PER_WORD])
            for i in range(0, len(exps), EXPONENTS_PER_WORD)]


def pack_code_stream(codes: Sequence[int], fmt: BfpFormat) -> List[int]:
    """code 序列按 codes_per_word 个一组打包"""
    k = fmt.codes_per_word
    expect(len(codes) % k == 0, f"code count must be a multiple of {k}, got {len(codes)}")
    return [pack_codes(codes[i:i + k], fmt) for i in range(0, len(codes), k)]


def unpack_code_stream(words: Sequence[int], fmt: BfpFormat) -> List[int]:
    codes: List[int] = []
    for word in words:
        codes.extend(unpack_codes(word, fmt))
    return codes
