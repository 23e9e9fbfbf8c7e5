"""数据格式定义

DataFormat 保留硬件侧声明的全部格式 tag，codec 只实现其中的
Bfp2 / Bfp4 / Bfp8 及其 _b 变体，其余 tag 仅作保留。

BFP 相关常量 (尾数宽度、移位、最大值、每 word 个数) 集中在
_BFP_TABLE 中推导，避免在各处重复魔数。
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Tuple, Union

from bfpcodec.core.contract import ContractError


class DataFormat(IntEnum):
    """硬件数据格式 tag"""
    FLOAT32 = 0
    FLOAT16 = 1
    BFP8 = 2
    BFP4 = 3
    TF32 = 4
    FLOAT16_B = 5
    BFP8_B = 6
    BFP4_B = 7
    INT32 = 8
    UINT16 = 9
    LF8 = 10
    BFP2 = 11
    INT8 = 14
    BFP2_B = 15
    UINT32 = 24
    FP8_E4M3 = 0x1A
    UINT8 = 30
    RAW_UINT8 = 0xF0
    RAW_UINT16 = 0xF1
    RAW_UINT32 = 0xF2
    INVALID = 0xFF


class ExponentConvention(Enum):
    """共享指数约定"""
    NATIVE = "native"       # bias-127 原样保留
    REBIASED = "rebiased"   # 转为 5 位 bias-15，截断到 [0, 31]


class RoundingMode(Enum):
    """尾数宽度缩减方式"""
    ROUND_HALF_UP = "round_half_up"
    TRUNCATE = "truncate"


@dataclass(frozen=True)
class BfpFormat:
    """
    BFP 格式描述

    Attributes:
        name: 格式名 (bfp2/bfp4/bfp8)
        mantissa_width: 每元素保留的尾数位数
        codes_per_word: 每个 32 位 word 打包的 code 数
    """
    name: str
    mantissa_width: int
    codes_per_word: int

    @property
    def mantissa_shift(self) -> int:
        """24 位尾数 (含隐藏位) 缩减到 mantissa_width 的右移位数"""
        return 24 - self.mantissa_width

    @property
    def max_magnitude(self) -> int:
        return (1 << self.mantissa_width) - 1

    @property
    def code_bits(self) -> int:
        """符号位 + 尾数位"""
        return self.mantissa_width + 1

    @property
    def slot_bits(self) -> int:
        """每个 code 在 word 中占用的 bit 数"""
        return 32 // self.codes_per_word

    @property
    def sign_mask(self) -> int:
        return 1 << self.mantissa_width

    @property
    def magnitude_mask(self) -> int:
        return self.max_magnitude

    def words_per_block(self, block_size: int = 16) -> int:
        return block_size // self.codes_per_word

    def __str__(self) -> str:
        return self.name


BFP2 = BfpFormat("bfp2", mantissa_width=1, codes_per_word=16)
BFP4 = BfpFormat("bfp4", mantissa_width=3, codes_per_word=8)
BFP8 = BfpFormat("bfp8", mantissa_width=7, codes_per_word=4)

# tag → (格式, 默认指数约定)
# _b 变体沿用 bfloat 风格的 8 位指数，普通变体使用 5 位 rebias 指数
_BFP_TABLE: Dict[DataFormat, Tuple[BfpFormat, ExponentConvention]] = {
    DataFormat.BFP2: (BFP2, ExponentConvention.REBIASED),
    DataFormat.BFP4: (BFP4, ExponentConvention.REBIASED),
    DataFormat.BFP8: (BFP8, ExponentConvention.REBIASED),
    DataFormat.BFP2_B: (BFP2, ExponentConvention.NATIVE),
    DataFormat.BFP4_B: (BFP4, ExponentConvention.NATIVE),
    DataFormat.BFP8_B: (BFP8, ExponentConvention.NATIVE),
}

BFP_FORMATS = (BFP2, BFP4, BFP8)

FormatLike = Union[BfpFormat, DataFormat, str, int]


def _parse_tag(fmt: Union[DataFormat, str, int]) -> DataFormat:
    if isinstance(fmt, DataFormat):
        return fmt
    if isinstance(fmt, str):
        key = fmt.strip().upper()
        if key not in DataFormat.__members__:
            raise ContractError(f"未知格式 tag: {fmt}")
        return DataFormat[key]
    try:
        return DataFormat(fmt)
    except ValueError:
        raise ContractError(f"未知格式 tag: {fmt}") from None


def is_bfp(fmt: FormatLike) -> bool:
    """是否为 codec 支持的 BFP 格式"""
    if isinstance(fmt, BfpFormat):
        return True
    try:
        return _parse_tag(fmt) in _BFP_TABLE
    except ContractError:
        return False


def bfp_format(fmt: FormatLike) -> BfpFormat:
    """
    解析为 BfpFormat

    接受 BfpFormat、DataFormat、tag 名 ("bfp8_b") 或 tag 数值。
    非 BFP 格式属于调用错误，抛出 ContractError。
    """
    if isinstance(fmt, BfpFormat):
        return fmt
    tag = _parse_tag(fmt)
    if tag not in _BFP_TABLE:
        raise ContractError(f"不支持的格式: {tag.name} (仅支持 Bfp2/Bfp4/Bfp8 及 _b 变体)")
    return _BFP_TABLE[tag][0]


def default_convention(fmt: Union[DataFormat, str, int]) -> ExponentConvention:
    """tag 默认搭配的指数约定"""
    tag = _parse_tag(fmt)
    if tag not in _BFP_TABLE:
        raise ContractError(f"不支持的格式: {tag.name}")
    return _BFP_TABLE[tag][1]


def parse_convention(value: Union[ExponentConvention, str]) -> ExponentConvention:
    if isinstance(value, ExponentConvention):
        return value
    try:
        return ExponentConvention(value.strip().lower())
    except ValueError:
        raise ContractError(f"未知指数约定: {value}") from None


def parse_rounding(value: Union[RoundingMode, str]) -> RoundingMode:
    if isinstance(value, RoundingMode):
        return value
    try:
        return RoundingMode(value.strip().lower())
    except ValueError:
        raise ContractError(f"未知舍入方式: {value}") from None


def bfp_tags():
    """所有 BFP tag 及其格式、默认约定"""
    return [(tag, fmt, conv) for tag, (fmt, conv) in _BFP_TABLE.items()]
