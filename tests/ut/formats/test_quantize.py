"""量化注册表测试"""
import pytest
import numpy as np

from bfpcodec.formats.bfp.parallel import encode_tiles_parallel
from bfpcodec.formats.bfp.tile import decode_block, decode_tiles, encode_block, encode_tiles
from bfpcodec.formats.quantize import (
    dequantize,
    get_quantize,
    list_quantize,
    quantize,
    register_dequantize,
    register_quantize,
    simulate_quantize,
)
from bfpcodec.core.config import set_config
from bfpcodec.formats.types import BFP8, DataFormat, ExponentConvention


class TestRegistry:
    """注册与查询"""

    def test_builtin_types(self):
        names = list_quantize()
        for name in ("bfp2", "bfp4", "bfp8", "bfp2_b", "bfp4_b", "bfp8_b"):
            assert name in names

    def test_unknown(self):
        with pytest.raises(ValueError, match="未知量化类型"):
            get_quantize("bfp16")
        with pytest.raises(ValueError, match="未知量化类型"):
            dequantize(np.zeros(4, dtype=np.uint32), "bfp16")

    def test_float32_not_dequantizable(self):
        """float32 只在 simulate_quantize 中直通，packed word 不能按 float32 反量化"""
        with pytest.raises(ValueError, match="无法反量化"):
            dequantize(np.zeros(4, dtype=np.uint32), "float32")

    def test_custom_registration(self):
        @register_quantize("identity_test")
        def to_identity(data, **kwargs):
            return data.view(np.uint32), {}

        @register_dequantize("identity_test")
        def from_identity(data, meta):
            return data.view(np.float32)

        x = np.array([1.0, 2.0], dtype=np.float32)
        np.testing.assert_array_equal(simulate_quantize(x, "identity_test"), x)


class TestBfpTypes:
    """bfp 量化类型"""

    def test_default_conventions(self):
        x = np.ones(1024, dtype=np.float32)
        _, meta_b = quantize(x, "bfp8_b")
        _, meta = quantize(x, "bfp8")
        assert meta_b["convention"] == "native"
        assert meta["convention"] == "rebiased"

    def test_matches_tile_encoder(self, random_tiles):
        words, meta = quantize(random_tiles, "bfp8_b")
        np.testing.assert_array_equal(words, encode_tiles(random_tiles, BFP8, ExponentConvention.NATIVE))
        assert meta["num_tiles"] == 3

    def test_padding_and_shape(self, rng):
        x = rng.standard_normal((3, 100)).astype(np.float32)
        words, meta = quantize(x, "bfp4_b")
        assert meta["num_tiles"] == 1
        assert meta["original_shape"] == (3, 100)
        y = dequantize(words, "bfp4_b", meta)
        assert y.shape == (3, 100)
        assert y.dtype == np.float32

    def test_convention_override(self):
        x = np.full(1024, 2.0 ** 20, dtype=np.float32)
        words, meta = quantize(x, "bfp8_b", convention="rebiased")
        assert meta["convention"] == "rebiased"
        # rebias 饱和到 31
        assert int(words[0]) == 0x1F1F1F1F

    def test_layout_option(self, random_tiles):
        words, meta = quantize(random_tiles, "bfp2_b", layout="face_major")
        assert meta["layout"] == "face_major"
        y = dequantize(words, "bfp2_b", meta)
        assert y.shape == random_tiles.shape
        with pytest.raises(ValueError, match="未知布局"):
            quantize(random_tiles, "bfp2_b", layout="col_major")

    def test_simulate_error(self, rng):
        x = rng.standard_normal(2048).astype(np.float32)
        y = simulate_quantize(x, "bfp8_b")
        assert np.allclose(x, y, atol=0.1)
        assert not np.array_equal(x, y)

    def test_float32_passthrough(self):
        x = np.array([1.5], dtype=np.float32)
        np.testing.assert_array_equal(simulate_quantize(x, "float32"), x)


class TestTagConvention:
    """tile 入口传入格式 tag 时，与同名量化类型使用相同的指数约定"""

    @pytest.mark.parametrize("name", ["bfp2", "bfp4", "bfp8", "bfp2_b", "bfp4_b", "bfp8_b"])
    def test_tag_matches_registry(self, random_tiles, name):
        words, _ = quantize(random_tiles, name)
        tag = DataFormat[name.upper()]
        np.testing.assert_array_equal(encode_tiles(random_tiles, tag), words)
        np.testing.assert_array_equal(encode_tiles(random_tiles, name), words)
        np.testing.assert_array_equal(encode_tiles_parallel(random_tiles, tag, workers=2), words)
        np.testing.assert_array_equal(
            decode_tiles(words, tag).view(np.uint32),
            dequantize(words, name, {}).view(np.uint32),
        )

    def test_rebiased_tag_saturates(self):
        x = np.full(1024, 2.0 ** 20, dtype=np.float32)
        words = encode_tiles(x, DataFormat.BFP8)
        assert int(words[0]) == 0x1F1F1F1F
        assert np.array_equal(words, quantize(x, "bfp8")[0])

    def test_tag_ignores_global_convention(self):
        """全局 convention 只作用于裸 BfpFormat"""
        x = np.full(1024, 2.0 ** 20, dtype=np.float32)
        set_config(convention="native")
        assert int(encode_tiles(x, DataFormat.BFP8)[0]) == 0x1F1F1F1F
        assert int(encode_tiles(x, BFP8)[0]) == 0x93939393
        set_config(convention="rebiased")
        assert int(encode_tiles(x, DataFormat.BFP8_B)[0]) == 0x93939393
        assert int(encode_tiles(x, BFP8)[0]) == 0x1F1F1F1F

    def test_block_entry_uses_tag_convention(self):
        block = np.full(16, 2.0 ** 20, dtype=np.float32)
        shared, words = encode_block(block, "bfp8")
        assert shared == 31
        # 饱和为最大幅值 127: 2^(31-15) * (1 + 126/128)
        assert np.all(decode_block(shared, words, "bfp8") == 130048.0)

        shared, words = encode_block(block, DataFormat.BFP8_B)
        assert shared == 147
        assert np.all(decode_block(shared, words, DataFormat.BFP8_B) == 2.0 ** 20)
