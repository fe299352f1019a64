"""State machine tracking a single chunked scan."""
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from common.errors import BackendError, ErrorCode


class ScanState(str, Enum):
    """Lifecycle states of one scan over one file."""

    PENDING = "PENDING"
    HEADER = "HEADER"
    FILLING = "FILLING"
    INVOKING = "INVOKING"
    FOUND = "FOUND"
    EXHAUSTED = "EXHAUSTED"
    EMPTY = "EMPTY"
    FAILED = "FAILED"


TERMINAL_STATES: FrozenSet[ScanState] = frozenset(
    {ScanState.FOUND, ScanState.EXHAUSTED, ScanState.EMPTY, ScanState.FAILED}
)
_TRANSITIONS: Dict[ScanState, FrozenSet[ScanState]] = {
    ScanState.PENDING: frozenset({ScanState.HEADER, ScanState.FILLING, ScanState.EMPTY}),
    ScanState.HEADER: frozenset({ScanState.FILLING, ScanState.EMPTY}),
    ScanState.FILLING: frozenset({ScanState.INVOKING, ScanState.EXHAUSTED, ScanState.EMPTY}),
    ScanState.INVOKING: frozenset({ScanState.FILLING, ScanState.FOUND, ScanState.EXHAUSTED}),
}


class ScanStateMachine:
    """Validates and records the transitions of one scan."""

    def __init__(self) -> None:
        self._state = ScanState.PENDING
        self.history: List[Tuple[ScanState, Optional[str]]] = [(ScanState.PENDING, None)]

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def finished(self) -> bool:
        return self._state in TERMINAL_STATES

    def transition(self, target: ScanState, *, detail: str | None = None) -> None:
        if target == self._state:
            return
        if not self._can_transition(target):
            raise BackendError(
                ErrorCode.STATE_ERROR,
                f"Invalid transition {self._state.value} -> {target.value}",
            )
        self._state = target
        self.history.append((target, detail))

    def mark_failed(self, detail: str | None = None) -> None:
        if self._state in TERMINAL_STATES:
            return
        self._state = ScanState.FAILED
        self.history.append((ScanState.FAILED, detail))

    def _can_transition(self, target: ScanState) -> bool:
        if self._state in TERMINAL_STATES:
            return False
        if target == ScanState.FAILED:
            return True
        return target in _TRANSITIONS.get(self._state, frozenset())
