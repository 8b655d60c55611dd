"""
State Machine for chat request lifecycle.
Implements deterministic state transitions with validation and hooks.

States: IDLE → PENDING → IDLE
"""

import logging
from enum import Enum
from typing import Optional, Callable, Awaitable, Dict, Set
import time

logger = logging.getLogger(__name__)


class UIState(str, Enum):
    """
    Chat UI states.

    IDLE: No request in flight, form accepts input
    PENDING: A worker request is outstanding, typing indicator shown
    """
    IDLE = "IDLE"
    PENDING = "PENDING"


class StateMachine:
    """
    Deterministic state machine for the submit-to-settle cycle.

    Enforces valid state transitions and notifies hooks on every change.
    """

    ALLOWED_TRANSITIONS: Dict[UIState, Set[UIState]] = {
        UIState.IDLE: {
            UIState.PENDING,  # Non-empty submit
        },
        UIState.PENDING: {
            UIState.IDLE,  # Request settled
        },
    }

    def __init__(self, initial_state: UIState = UIState.IDLE):
        """
        Initialize state machine.

        Args:
            initial_state: Starting state (default: IDLE)
        """
        self._current_state: UIState = initial_state
        self._state_history: list[dict] = []
        self._on_transition_hooks: list[Callable] = []

        logger.debug(f"State machine initialized in state: {initial_state.value}")
        self._record_state_change(None, initial_state, "initialization")

    @property
    def current_state(self) -> UIState:
        """Get current state."""
        return self._current_state

    @property
    def state_history(self) -> list[dict]:
        """Get state history for debugging."""
        return self._state_history.copy()

    def can_transition(self, to_state: UIState) -> bool:
        """
        Check if transition to target state is allowed.

        Args:
            to_state: Target state

        Returns:
            True if transition is allowed, False otherwise
        """
        return to_state in self.ALLOWED_TRANSITIONS.get(self._current_state, set())

    async def transition(self, to_state: UIState, reason: str = "") -> bool:
        """
        Transition to new state with validation and hooks.

        Args:
            to_state: Target state
            reason: Optional reason for transition (for logging)

        Returns:
            True if transition succeeded, False if not allowed
        """
        if not self.can_transition(to_state):
            logger.error(
                f"Invalid state transition: {self._current_state.value} → {to_state.value}. "
                f"Allowed transitions: {sorted(s.value for s in self.get_allowed_transitions())}"
            )
            return False

        from_state = self._current_state
        self._current_state = to_state
        self._record_state_change(from_state, to_state, reason)

        log_msg = f"State transition: {from_state.value} → {to_state.value}"
        if reason:
            log_msg += f" (reason: {reason})"
        logger.info(log_msg)

        await self._execute_transition_hooks(from_state, to_state)

        return True

    def register_on_transition(
        self,
        callback: Callable[[UIState, UIState], Awaitable[None]]
    ) -> None:
        """
        Register callback to execute on any state transition.

        Args:
            callback: Async callback function receiving (from_state, to_state)
        """
        self._on_transition_hooks.append(callback)

    def _record_state_change(
        self,
        from_state: Optional[UIState],
        to_state: UIState,
        reason: str
    ) -> None:
        """Record state change in history."""
        self._state_history.append({
            "from_state": from_state.value if from_state else None,
            "to_state": to_state.value,
            "reason": reason,
            "timestamp": int(time.time() * 1000),
        })

    async def _execute_transition_hooks(
        self,
        from_state: UIState,
        to_state: UIState
    ) -> None:
        """Execute all on_transition hooks."""
        for callback in self._on_transition_hooks:
            try:
                await callback(from_state, to_state)
            except Exception as e:
                logger.error(f"Error in on_transition hook: {e}", exc_info=True)

    def get_allowed_transitions(self) -> Set[UIState]:
        """Get all allowed transitions from current state."""
        return self.ALLOWED_TRANSITIONS.get(self._current_state, set()).copy()
