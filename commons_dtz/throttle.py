"""
throttle.py
===========
Edit-rate limiting: at most one successful edit per ``EDIT_INTERVAL`` seconds,
per Commons bot policy.

Each run gets its own ``RateState`` unless it asks for the process-wide state
of its user via ``shared_rate_state``. Runs sharing a state serialize their
edits on its lock.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

log = logging.getLogger(__name__)

EDIT_INTERVAL = 5.0


@dataclass
class RateState:
    last_edit: Optional[float] = None  # monotonic time of the last successful edit
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class RateLimiter:
    def __init__(self, interval=EDIT_INTERVAL, clock=time.monotonic, sleep=time.sleep):
        self.interval = interval
        self.clock = clock
        self.sleep = sleep

    def remaining(self, state: RateState) -> float:
        if state.last_edit is None:
            return 0.0
        return max(0.0, self.interval - (self.clock() - state.last_edit))

    def wait(self, state: RateState) -> None:
        """Block until ``interval`` seconds have passed since the last edit."""
        delay = self.remaining(state)
        if delay > 0:
            log.debug("rate limit: sleeping %.2fs", delay)
            self.sleep(delay)

    def mark(self, state: RateState) -> None:
        state.last_edit = self.clock()


_shared_states: Dict[str, RateState] = {}
_shared_lock = threading.Lock()


def shared_rate_state(username: str) -> RateState:
    """Process-wide rate state for ``username``, created on first use."""
    with _shared_lock:
        state = _shared_states.get(username)
        if state is None:
            state = _shared_states[username] = RateState()
        return state
