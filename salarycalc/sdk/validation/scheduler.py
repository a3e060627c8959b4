"""Debounce scheduler for real-time field validation.

A request submitted under a key supersedes any pending request for the same
key; only the latest one runs once the debounce window has elapsed.
Nothing runs on a background thread: the caller drives execution with
run_due() (e.g. from its event loop tick) or flush(). The clock is
injectable so tests never sleep.
"""

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class PendingCall:
    """A scheduled call. Cancelled calls never run."""

    key: str
    due: float
    func: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    seq: int = 0
    cancelled: bool = field(default=False)


class Debouncer:
    """Cancel-on-supersede scheduler keyed by field name."""

    def __init__(self, delay_ms: int = 300, clock: Optional[Callable[[], float]] = None):
        self.delay = max(0, delay_ms) / 1000.0
        self.clock = clock or time.monotonic
        self._pending: Dict[str, PendingCall] = {}
        self._seq = itertools.count(1)

    @property
    def pending(self) -> List[str]:
        """Keys with a request waiting to run."""
        return list(self._pending)

    def submit(self, key: str, func: Callable[..., Any], *args: Any) -> PendingCall:
        """Schedule func(*args) after the delay, replacing any pending call for key."""
        previous = self._pending.get(key)
        if previous is not None:
            previous.cancelled = True
            logger.debug(f"debounce: superseded pending request for {key}")
        call = PendingCall(
            key=key,
            due=self.clock() + self.delay,
            func=func,
            args=args,
            seq=next(self._seq),
        )
        self._pending[key] = call
        return call

    def cancel(self, key: str) -> bool:
        """Cancel the pending call for key. Returns True if one was pending."""
        call = self._pending.pop(key, None)
        if call is None:
            return False
        call.cancelled = True
        return True

    def run_due(self, now: Optional[float] = None) -> List[Any]:
        """Run every pending call whose window has elapsed, in submit order.

        Returns:
            List of return values of the calls that ran
        """
        now = self.clock() if now is None else now
        due = sorted(
            (c for c in self._pending.values() if c.due <= now),
            key=lambda c: c.seq,
        )
        return [self._run(call) for call in due]

    def flush(self) -> List[Any]:
        """Run every pending call immediately, in submit order."""
        calls = sorted(self._pending.values(), key=lambda c: c.seq)
        return [self._run(call) for call in calls]

    def _run(self, call: PendingCall) -> Any:
        if self._pending.get(call.key) is call:
            del self._pending[call.key]
        return call.func(*call.args)
