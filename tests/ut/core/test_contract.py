"""前置条件检查测试"""
import pytest

from bfpcodec.core.contract import ContractError, expect


class TestExpect:

    def test_pass(self):
        expect(True, "never raised")

    def test_fail(self):
        with pytest.raises(ContractError, match="block length"):
            expect(False, "block length")

    def test_is_assertion_error(self):
        assert issubclass(ContractError, AssertionError)
