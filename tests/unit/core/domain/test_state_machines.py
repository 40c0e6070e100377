"""
core/domain/state_machines.py 테스트

정산 상태 전이 규칙 테스트
"""

import pytest

from core.domain.state_machines import SettlementState, SettlementStateMachine
from core.types import SettlementStatus


class TestSettlementStateMachine:
    """SettlementStateMachine 테스트"""

    def test_initial_unsettled(self) -> None:
        machine = SettlementStateMachine()

        assert machine.state == "unsettled"
        assert machine.is_settled is False
        assert machine.can_settle is True
        assert machine.can_rollback is False

    def test_settled(self) -> None:
        machine = SettlementStateMachine(SettlementState.SETTLED)

        assert machine.is_settled is True
        assert machine.can_settle is False
        assert machine.can_rollback is True

    def test_rolled_back_can_resettle(self) -> None:
        machine = SettlementStateMachine(SettlementState.ROLLED_BACK)

        assert machine.can_rollback is False
        assert machine.can_settle is True

    @pytest.mark.parametrize(
        "from_state, to_state, allowed",
        [
            ("unsettled", "settled", True),
            ("unsettled", "rolled_back", False),
            ("settled", "settled", False),
            ("settled", "rolled_back", True),
            ("rolled_back", "settled", True),
            ("rolled_back", "rolled_back", False),
            ("settled", "unsettled", False),
        ],
    )
    def test_can_transition(self, from_state: str, to_state: str, allowed: bool) -> None:
        assert SettlementStateMachine(from_state).can_transition(to_state) is allowed

    def test_invalid_state(self) -> None:
        with pytest.raises(ValueError):
            SettlementStateMachine("closed")


class TestFromStatus:
    """레코드 상태 → 상태 머신"""

    def test_no_record(self) -> None:
        assert SettlementStateMachine.from_status(None).state == "unsettled"

    def test_settled(self) -> None:
        machine = SettlementStateMachine.from_status(SettlementStatus.SETTLED)

        assert machine.is_settled is True
        assert machine.can_rollback is True

    def test_rolled_back(self) -> None:
        machine = SettlementStateMachine.from_status(SettlementStatus.ROLLED_BACK)

        assert machine.state == "rolled_back"
        assert machine.is_settled is False
        assert machine.can_settle is True
