"""全局配置模块"""
import threading
from dataclasses import dataclass, replace
from typing import Optional

from bfpcodec.core.constants import DEFAULT_WORKERS
from bfpcodec.formats.types import (
    ExponentConvention,
    RoundingMode,
    parse_convention,
    parse_rounding,
)


@dataclass
class CodecConfig:
    """Codec 配置"""
    rounding: RoundingMode = RoundingMode.ROUND_HALF_UP
    convention: ExponentConvention = ExponentConvention.NATIVE
    workers: int = DEFAULT_WORKERS   # 多 tile 并行线程数
    trace: bool = False              # 逐 bit 调试输出 (DEBUG 级别)

    def validate(self):
        """验证配置"""
        if not isinstance(self.rounding, RoundingMode):
            raise ValueError(f"rounding must be a RoundingMode, got '{self.rounding}'")
        if not isinstance(self.convention, ExponentConvention):
            raise ValueError(f"convention must be an ExponentConvention, got '{self.convention}'")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")


# 全局配置实例 (线程安全)
_config_lock = threading.Lock()
_global_config: Optional[CodecConfig] = None


def get_config() -> CodecConfig:
    """获取全局配置"""
    global _global_config
    with _config_lock:
        if _global_config is None:
            _global_config = CodecConfig()
        return _global_config


def set_config(
    rounding=None,
    convention=None,
    workers: int = None,
    trace: bool = None,
) -> CodecConfig:
    """设置全局配置"""
    global _global_config
    with _config_lock:
        cfg = replace(_global_config or CodecConfig())

        if rounding is not None:
            cfg.rounding = parse_rounding(rounding)
        if convention is not None:
            cfg.convention = parse_convention(convention)
        for key, value in {"workers": workers, "trace": trace}.items():
            if value is not None:
                setattr(cfg, key, value)

        # 验证通过后才替换，失败时保留原配置
        cfg.validate()
        _global_config = cfg
        return _global_config


def reset_config():
    """重置为默认配置"""
    global _global_config
    with _config_lock:
        _global_config = CodecConfig()
