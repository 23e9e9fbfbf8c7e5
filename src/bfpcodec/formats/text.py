"""文本 block 加载

文件格式: 空白分隔的浮点数，第一个为默认值，其后最多 16 个为 block 数据。
不足 16 个时用默认值补齐。
"""
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np

from bfpcodec.core.constants import BLOCK_SIZE
from bfpcodec.core.log import logger
from bfpcodec.formats.bits import clear_low16


def read_block(path: Union[str, Path], block_size: int = BLOCK_SIZE) -> Tuple[float, List[float]]:
    """
    读取默认值和 block 数据

    文件不存在、无法读取或不是文本时记录错误并返回 (0.0, [])，由调用方决定回退方式。
    遇到第一个无法解析的 token 即停止读取。

    Returns:
        (默认值, 最多 block_size 个值)
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"无法读取文件 {path}: {e}")
        return 0.0, []

    tokens = iter(text.split())
    default = 0.0
    values: List[float] = []
    try:
        default = float(next(tokens))
        for tok in tokens:
            if len(values) >= block_size:
                break
            values.append(float(tok))
    except StopIteration:
        pass
    except ValueError as e:
        logger.warn(f"{path}: 停止解析于无效 token ({e})")
    return default, values


def load_demo_block(path: Union[str, Path], block_size: int = BLOCK_SIZE) -> np.ndarray:
    """
    读取并整理为 bfloat16 精度的 block

    无数据时全部使用默认值，不足时用默认值补齐，最后清零低 16 位。
    """
    default, values = read_block(path, block_size)
    if not values:
        logger.error("未读到数据，使用默认值填充")
        values = [default] * block_size
    else:
        values = values + [default] * (block_size - len(values))
    return clear_low16(np.array(values, dtype=np.float32))
