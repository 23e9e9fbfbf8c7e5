"""bfpcodec CLI entry point."""
from pathlib import Path
from typing import Optional

import numpy as np
import typer
from rich.console import Console
from rich.table import Table

from bfpcodec.core import log
from bfpcodec.core.config import get_config, set_config
from bfpcodec.core.contract import ContractError
from bfpcodec.formats.bfp.scalar import quantize_scalar
from bfpcodec.formats.bfp.tile import block_codes, decode_block, encode_block
from bfpcodec.formats.bits import clear_low16, float_to_bits, format_bits
from bfpcodec.formats.quantize import list_quantize
from bfpcodec.formats.text import load_demo_block
from bfpcodec.formats.types import (
    RoundingMode,
    bfp_format,
    bfp_tags,
    default_convention,
    parse_convention,
)

console = Console()

app = typer.Typer(
    name="bfpcodec",
    help="Block floating-point (Bfp2/Bfp4/Bfp8) codec",
    no_args_is_help=True,
)

# 梯度归零回归用例
ZERO_GRAD_BLOCK = [
    0.0339, 0.0339, 0.0339, 0.0339, 0.0339, 0.0275, 0.0008, -0.0210,
    -0.0674, -0.0991, -0.1128, -0.1270, -0.0496, 0.0004, 0.0359, 0.0471,
]


@app.callback()
def main(trace: bool = typer.Option(False, "--trace", help="逐 bit 调试输出")):
    if trace:
        set_config(trace=True)
        log.set_level(log.DEBUG)


def _resolve(fmt: str, convention: Optional[str]):
    try:
        bfp = bfp_format(fmt)
        conv = default_convention(fmt) if convention is None else parse_convention(convention)
    except ContractError as e:
        console.print(f"[red]✗[/] {e}")
        raise typer.Exit(code=1)
    return bfp, conv


def _bits_table(title: str, values: np.ndarray) -> Table:
    table = Table(title=title)
    table.add_column("Bfloat16 Value", justify="right")
    table.add_column("Bit pattern")
    for value, bits in zip(values, float_to_bits(values)):
        table.add_row(f"{float(value):.6g}", format_bits(int(bits)))
    return table


def _show_block(block: np.ndarray, fmt: str, convention: Optional[str], truncate: bool):
    bfp, conv = _resolve(fmt, convention)
    rounding = RoundingMode.TRUNCATE if truncate else RoundingMode.ROUND_HALF_UP

    console.print(_bits_table(f"16 bfloat16 values before being packed into {fmt}", block))

    shared, words = encode_block(block, bfp, conv, rounding)
    _, codes = block_codes(block, bfp, conv, rounding)
    console.print(f"\nPacking into {fmt} ({conv.value})")
    console.print(f"Shared exponent : {shared}")
    console.print("Sign + Mantissa : " + " ".join(f"{c:x}" for c in codes))
    console.print("Packed words    : " + " ".join(f"{int(w):08x}" for w in words))

    decoded = decode_block(shared, words, bfp, conv)
    console.print()
    console.print(_bits_table(f"16 bfloat16 values after unpacking from {fmt}", decoded))


@app.command("pack")
def cmd_pack(
    path: Path = typer.Argument(Path("data.txt"), help="数据文件: 默认值 + 最多 16 个值"),
    fmt: str = typer.Option("bfp8_b", "--fmt", help="格式 tag (bfp2/bfp4/bfp8 及 _b 变体)"),
    convention: Optional[str] = typer.Option(None, "--convention", help="native / rebiased，默认取 tag 约定"),
    truncate: bool = typer.Option(False, "--truncate", help="截断代替四舍五入"),
):
    """读取文本 block，打包并解包展示"""
    block = load_demo_block(path)
    _show_block(block, fmt, convention, truncate)


@app.command("zero-grad")
def cmd_zero_grad(
    fmt: str = typer.Option("bfp8_b", "--fmt"),
    convention: Optional[str] = typer.Option(None, "--convention"),
):
    """AdamW 梯度 block 回归用例"""
    block = clear_low16(np.array(ZERO_GRAD_BLOCK, dtype=np.float32))
    _show_block(block, fmt, convention, truncate=False)


@app.command("scalar")
def cmd_scalar(
    word: str = typer.Argument(..., help="fp32 bit 模式 (如 0xff800000)"),
    shared_exp: str = typer.Argument(..., help="共享指数 (如 0xff)"),
    fmt: str = typer.Option("bfp8_b", "--fmt"),
    convention: Optional[str] = typer.Option(None, "--convention"),
    truncate: bool = typer.Option(False, "--truncate"),
):
    """量化单个 fp32 bit 模式"""
    bfp, conv = _resolve(fmt, convention)
    rounding = RoundingMode.TRUNCATE if truncate else RoundingMode.ROUND_HALF_UP
    try:
        code = quantize_scalar(int(word, 0), int(shared_exp, 0), bfp, conv, rounding,
                               trace=get_config().trace)
    except (ValueError, ContractError) as e:
        console.print(f"[red]✗[/] {e}")
        raise typer.Exit(code=1)
    console.print(f"{code:x}")


@app.command("formats")
def cmd_formats():
    """列出支持的格式"""
    table = Table(title="BFP formats")
    for col in ("tag", "value", "width", "codes/word", "convention"):
        table.add_column(col)
    for tag, fmt, conv in bfp_tags():
        table.add_row(tag.name.lower(), str(int(tag)), str(fmt.mantissa_width),
                      str(fmt.codes_per_word), conv.value)
    console.print(table)
    console.print("quantize types: " + ", ".join(list_quantize()))


if __name__ == "__main__":
    app()
