"""日志模块

轻量 logger，支持注入输出 sink，
便于测试断言 codec 发出的诊断信息。
"""
import sys
from contextlib import contextmanager
from datetime import datetime
from enum import IntEnum
from typing import Callable, Iterator, List, Optional

class Level(IntEnum):
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

DEBUG, INFO, WARN, ERROR = Level.DEBUG, Level.INFO, Level.WARN, Level.ERROR

Sink = Callable[[Level, str, str], None]

_level = INFO
_module = "bfpcodec"
_sink: Optional[Sink] = None

def set_level(level: Level):
    global _level
    _level = level

def get_level() -> Level:
    return _level

def set_module(name: str):
    global _module
    _module = name

def set_sink(sink: Optional[Sink]):
    """替换输出目标，None 恢复为 stdout/stderr"""
    global _sink
    _sink = sink

def _default_sink(level: Level, module: str, msg: str):
    ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    line = f"[{ts}] [{level.name}] [{module}] {msg}"
    out = sys.stderr if level >= WARN else sys.stdout
    print(line, file=out)

def _log(level: Level, module: str, msg: str):
    if level < _level:
        return
    (_sink or _default_sink)(level, module, msg)

def is_enabled(level: Level) -> bool:
    return level >= _level

class Logger:
    def __init__(self, module: str = ""):
        self.module = module or _module

    def debug(self, msg: str):
        _log(DEBUG, self.module, msg)

    def info(self, msg: str):
        _log(INFO, self.module, msg)

    def warn(self, msg: str):
        _log(WARN, self.module, msg)

    def error(self, msg: str):
        _log(ERROR, self.module, msg)

logger = Logger()


class CapturedLog:
    """capture() 收集到的日志记录"""

    def __init__(self):
        self.records: List[tuple] = []

    def __call__(self, level: Level, module: str, msg: str):
        self.records.append((level, module, msg))

    @property
    def messages(self) -> List[str]:
        return [msg for _, _, msg in self.records]

    def at(self, level: Level) -> List[str]:
        return [msg for lv, _, msg in self.records if lv == level]


@contextmanager
def capture(level: Level = DEBUG) -> Iterator[CapturedLog]:
    """
    临时收集日志

    示例:
        with capture() as log:
            quantize_scalar(...)
        assert "exp_diff" in log.messages[0]
    """
    global _sink, _level
    old_sink, old_level = _sink, _level
    captured = CapturedLog()
    _sink, _level = captured, level
    try:
        yield captured
    finally:
        _sink, _level = old_sink, old_level
