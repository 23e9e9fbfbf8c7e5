"""格式表测试"""
import pytest

from bfpcodec.core.contract import ContractError
from bfpcodec.formats.types import (
    BFP2,
    BFP4,
    BFP8,
    DataFormat,
    ExponentConvention,
    RoundingMode,
    bfp_format,
    bfp_tags,
    default_convention,
    is_bfp,
    parse_convention,
    parse_rounding,
)


class TestBfpTable:
    """派生常量"""

    @pytest.mark.parametrize("fmt,width,shift,max_mag,k,slot", [
        (BFP2, 1, 23, 1, 16, 2),
        (BFP4, 3, 21, 7, 8, 4),
        (BFP8, 7, 17, 127, 4, 8),
    ])
    def test_derived(self, fmt, width, shift, max_mag, k, slot):
        assert fmt.mantissa_width == width
        assert fmt.mantissa_shift == shift
        assert fmt.max_magnitude == max_mag
        assert fmt.codes_per_word == k
        assert fmt.slot_bits == slot
        assert fmt.code_bits == slot
        assert fmt.words_per_block() == 16 // k

    def test_b_variant_same_layout(self):
        """_b 变体与普通变体 bit 布局相同，仅默认约定不同"""
        assert bfp_format(DataFormat.BFP8_B) is bfp_format(DataFormat.BFP8)
        assert default_convention(DataFormat.BFP8_B) is ExponentConvention.NATIVE
        assert default_convention(DataFormat.BFP8) is ExponentConvention.REBIASED

    def test_six_tags(self):
        assert len(bfp_tags()) == 6


class TestResolve:
    """tag 解析"""

    def test_by_name_and_value(self):
        assert bfp_format("bfp4_b") is BFP4
        assert bfp_format(11) is BFP2
        assert bfp_format(BFP8) is BFP8

    @pytest.mark.parametrize("tag", [DataFormat.FLOAT16, DataFormat.INT8, "lf8", 0xF0])
    def test_reserved_tags_rejected(self, tag):
        with pytest.raises(ContractError, match="不支持的格式"):
            bfp_format(tag)

    def test_unknown_tag(self):
        with pytest.raises(ContractError, match="未知格式"):
            bfp_format("bfp16")
        with pytest.raises(ContractError):
            bfp_format(200)

    def test_is_bfp(self):
        assert is_bfp("bfp2")
        assert not is_bfp("float32")
        assert not is_bfp("nope")

    def test_parse_enums(self):
        assert parse_convention("Rebiased") is ExponentConvention.REBIASED
        assert parse_rounding("truncate") is RoundingMode.TRUNCATE
        with pytest.raises(ContractError):
            parse_convention("bias7")
