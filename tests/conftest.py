import pytest
import numpy as np

from bfpcodec.core import log
from bfpcodec.core.config import reset_config
from bfpcodec.formats.bits import clear_low16


@pytest.fixture(autouse=True)
def clean_state():
    """每个测试前后重置全局配置和日志"""
    reset_config()
    log.set_sink(None)
    log.set_level(log.INFO)
    yield
    reset_config()
    log.set_sink(None)
    log.set_level(log.INFO)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def zero_grad_block():
    """AdamW 梯度 block，已截断为 bfloat16"""
    return clear_low16(np.array([
        0.0339, 0.0339, 0.0339, 0.0339, 0.0339, 0.0275, 0.0008, -0.0210,
        -0.0674, -0.0991, -0.1128, -0.1270, -0.0496, 0.0004, 0.0359, 0.0471,
    ], dtype=np.float32))


@pytest.fixture
def random_tiles(rng):
    """3 个 tile 的 bfloat16 精度随机数据"""
    return clear_low16(rng.standard_normal(3 * 1024).astype(np.float32))
