"""前置条件检查

codec 没有可恢复的错误类型，违反调用约定属于编程错误，
统一通过 expect() 抛出 ContractError。与 assert 不同，
python -O 下依然生效。
"""


class ContractError(AssertionError):
    """调用约定被违反"""


def expect(condition: bool, msg: str = "contract violated"):
    if not condition:
        raise ContractError(msg)
