"""
State machine for the checkout lifecycle

Open --check_in--> Closed (terminal). Checking out constructs a new Open
checkout; there is no transition back out of Closed.
"""

from typing import Dict, Set, Optional
from datetime import datetime


class CheckoutStateMachine:
    OPEN = 'Open'
    CLOSED = 'Closed'

    TERMINAL_STATES = {CLOSED}

    TRANSITIONS: Dict[str, Set[str]] = {
        OPEN: {CLOSED},
        # CLOSED is terminal
    }

    @classmethod
    def state_of(cls, checkin_at: Optional[datetime]) -> str:
        """Derive the lifecycle state from the checkin timestamp"""
        return cls.OPEN if checkin_at is None else cls.CLOSED

    @classmethod
    def can_transition(cls, from_state: str, to_state: str) -> bool:
        """
        Check if transition is valid.

        Unlike request workflows, staying in the same state is not a
        valid transition: closing a closed checkout is an error.
        """
        if from_state in cls.TERMINAL_STATES:
            return False
        return to_state in cls.TRANSITIONS.get(from_state, set())
