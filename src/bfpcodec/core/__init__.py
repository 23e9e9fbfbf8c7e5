"""核心模块"""
from bfpcodec.core.log import logger
from bfpcodec.core.contract import ContractError, expect

__all__ = [
    "logger",
    "ContractError",
    "expect",
]
