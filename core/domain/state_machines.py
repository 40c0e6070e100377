"""
State Machines

월마감 정산 상태 전이 규칙.
(user_id, ledger_type, month) 키마다 하나의 상태 머신이 존재하며,
정산 레코드의 status 컬럼에서 복원된다 (레코드 없음 = UNSETTLED).

    UNSETTLED ──settle──▶ SETTLED ──rollback──▶ ROLLED_BACK
                            ▲                        │
                            └────────settle──────────┘

상태 머신은 전제 조건 검사만 담당한다.
실제 전이는 정산 레코드 저장소의 version 비교(compare-and-swap) 쓰기로 일어나며,
동시 요청 중 하나만 성공한다.
"""

from enum import Enum

from core.types import SettlementStatus


class SettlementState(str, Enum):
    """정산 상태 (UNSETTLED는 레코드가 없는 상태)"""

    UNSETTLED = "unsettled"
    SETTLED = SettlementStatus.SETTLED.value
    ROLLED_BACK = SettlementStatus.ROLLED_BACK.value


class SettlementStateMachine:
    """정산 상태 머신

    settle / rollback 만이 전이를 일으키며, 각 전이는 현재 상태를 전제 조건으로 한다.

    Args:
        initial_state: 현재 상태 (기본: UNSETTLED)
    """

    TRANSITIONS: dict[SettlementState, frozenset[SettlementState]] = {
        SettlementState.UNSETTLED: frozenset({SettlementState.SETTLED}),
        SettlementState.SETTLED: frozenset({SettlementState.ROLLED_BACK}),
        SettlementState.ROLLED_BACK: frozenset({SettlementState.SETTLED}),
    }

    def __init__(self, initial_state: str | SettlementState = SettlementState.UNSETTLED):
        self._state = SettlementState(initial_state)

    @classmethod
    def from_status(cls, status: SettlementStatus | None) -> "SettlementStateMachine":
        """정산 레코드 상태에서 생성"""
        if status is None:
            return cls(SettlementState.UNSETTLED)
        return cls(SettlementStatus(status).value)

    @property
    def state(self) -> str:
        return self._state.value

    @property
    def is_settled(self) -> bool:
        return self._state == SettlementState.SETTLED

    @property
    def can_settle(self) -> bool:
        return self.can_transition(SettlementState.SETTLED)

    @property
    def can_rollback(self) -> bool:
        return self.can_transition(SettlementState.ROLLED_BACK)

    def can_transition(self, to_state: str | SettlementState) -> bool:
        return SettlementState(to_state) in self.TRANSITIONS[self._state]
