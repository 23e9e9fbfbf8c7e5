"""全局配置测试"""
import pytest

from bfpcodec.core.config import CodecConfig, get_config, reset_config, set_config
from bfpcodec.core.contract import ContractError
from bfpcodec.formats.types import ExponentConvention, RoundingMode


class TestConfig:
    """get / set / reset"""

    def test_defaults(self):
        cfg = get_config()
        assert cfg.rounding is RoundingMode.ROUND_HALF_UP
        assert cfg.convention is ExponentConvention.NATIVE
        assert cfg.workers == 4
        assert cfg.trace is False

    def test_set_by_name(self):
        cfg = set_config(rounding="truncate", convention="rebiased", workers=2, trace=True)
        assert cfg.rounding is RoundingMode.TRUNCATE
        assert cfg.convention is ExponentConvention.REBIASED
        assert cfg.workers == 2
        assert get_config().trace is True

    def test_reset(self):
        set_config(workers=8)
        reset_config()
        assert get_config().workers == 4

    def test_invalid_workers(self):
        with pytest.raises(ValueError, match="workers"):
            set_config(workers=0)

    def test_invalid_name(self):
        with pytest.raises(ContractError):
            set_config(rounding="banker")

    def test_validate_types(self):
        with pytest.raises(ValueError, match="rounding"):
            CodecConfig(rounding="truncate").validate()

    def test_failed_set_keeps_previous(self):
        set_config(workers=2)
        with pytest.raises(ValueError):
            set_config(workers=-1, trace=True)
        assert get_config().workers == 2
        assert get_config().trace is False
