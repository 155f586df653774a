"""Tests for the allowance gate."""

import pytest

from offerfill.allowance import AllowanceGate
from offerfill.errors import AllowanceRequestFailed, FillErrorReason
from tests.helpers import COLLATERAL, MAKER, SETTLEMENT, FakeTokenClient


class TestAllowanceGate:
    """Tests for AllowanceGate.ensure_allowance."""

    def test_sufficient_allowance_left_alone(self):
        tokens = FakeTokenClient(allowances={MAKER: 100})
        gate = AllowanceGate(tokens, COLLATERAL)

        assert gate.ensure_allowance(MAKER, SETTLEMENT, 100) == 100
        assert tokens.approve_calls == []

    def test_short_allowance_approved_with_buffer(self):
        """One approval for required + 1."""
        tokens = FakeTokenClient(allowances={MAKER: 10})
        gate = AllowanceGate(tokens, COLLATERAL)

        assert gate.ensure_allowance(MAKER, SETTLEMENT, 40) == 41
        assert tokens.approve_calls == [(COLLATERAL, MAKER, SETTLEMENT, 41)]

    def test_idempotent(self):
        """A second call with the same requirement sends nothing."""
        tokens = FakeTokenClient()
        gate = AllowanceGate(tokens, COLLATERAL)

        gate.ensure_allowance(MAKER, SETTLEMENT, 40)
        gate.ensure_allowance(MAKER, SETTLEMENT, 40)
        assert len(tokens.approve_calls) == 1

    def test_custom_buffer(self):
        tokens = FakeTokenClient()
        gate = AllowanceGate(tokens, COLLATERAL, buffer=0)

        assert gate.ensure_allowance(MAKER, SETTLEMENT, 40) == 40

    def test_negative_buffer_rejected(self):
        with pytest.raises(ValueError):
            AllowanceGate(FakeTokenClient(), COLLATERAL, buffer=-1)

    def test_failed_approval(self):
        tokens = FakeTokenClient()
        tokens.fail_approve = True
        gate = AllowanceGate(tokens, COLLATERAL)

        with pytest.raises(AllowanceRequestFailed) as exc_info:
            gate.ensure_allowance(MAKER, SETTLEMENT, 40)
        assert exc_info.value.reason is FillErrorReason.ALLOWANCE_REQUEST_FAILED
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_approval_not_reflected(self):
        """An approval that leaves the allowance short is a failure."""
        tokens = FakeTokenClient(allowances={MAKER: 5})
        tokens.ignore_approve = True
        gate = AllowanceGate(tokens, COLLATERAL)

        with pytest.raises(AllowanceRequestFailed, match="after approval"):
            gate.ensure_allowance(MAKER, SETTLEMENT, 40)
