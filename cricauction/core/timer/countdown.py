"""
Auto-resolution countdown and debounced calls.

Every bid or pass restarts the countdown; only the most recent action's
timers are live. A timer that fires after it was superseded is dropped
here, and the engine drops fires that belong to a lot that has already
changed.
"""

from enum import IntEnum
from typing import Callable, Hashable, List, Optional

from cricauction.core.timer.scheduler import Scheduler, TimerHandle
from cricauction.utils.logger import get_logger

logger = get_logger("timer")


class WarningStage(IntEnum):
    """Stages of the auto-resolution countdown."""
    FAIR_WARNING = 1
    FINAL_WARNING = 2
    AUTO_SELL = 3


class AutoResolutionTimer:
    """
    Three-stage countdown: fair warning, final warning, forced resolve.

    ``on_stage(stage, token)`` is invoked for each stage that fires while
    its token is still current.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_stage: Callable[[WarningStage, Hashable], None],
        fair_warning_delay: float = 5.0,
        final_warning_delay: float = 15.0,
        auto_sell_delay: float = 25.0,
    ):
        self.scheduler = scheduler
        self.on_stage = on_stage
        self.delays = {
            WarningStage.FAIR_WARNING: fair_warning_delay,
            WarningStage.FINAL_WARNING: final_warning_delay,
            WarningStage.AUTO_SELL: auto_sell_delay,
        }
        self._handles: List[TimerHandle] = []
        self._token: Optional[Hashable] = None

    @property
    def active(self) -> bool:
        return any(not h.cancelled for h in self._handles)

    @property
    def token(self) -> Optional[Hashable]:
        return self._token

    def restart(self, token: Hashable) -> None:
        """Cancel the running chain and start a new one tied to ``token``."""
        self.cancel()
        self._token = token
        for stage, delay in self.delays.items():
            handle = self.scheduler.call_later(delay, self._make_fire(stage, token))
            self._handles.append(handle)

    def cancel(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles = []
        self._token = None

    def _make_fire(self, stage: WarningStage, token: Hashable) -> Callable[[], None]:
        def fire() -> None:
            if token != self._token:
                logger.debug(f"Ignoring stale {stage.name} for {token}")
                return
            if stage is WarningStage.AUTO_SELL:
                self._handles = []
                self._token = None
            self.on_stage(stage, token)
        return fire


class DebouncedCall:
    """
    A single delayed call; triggering again replaces the pending one.

    Used for the bidding-policy tick that follows every state change.
    """

    def __init__(self, scheduler: Scheduler, delay: float, callback: Callable[[Hashable], None]):
        self.scheduler = scheduler
        self.delay = delay
        self.callback = callback
        self._handle: Optional[TimerHandle] = None
        self._token: Optional[Hashable] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled

    def trigger(self, token: Hashable) -> None:
        self.cancel()
        self._token = token
        self._handle = self.scheduler.call_later(self.delay, lambda: self._fire(token))

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._token = None

    def _fire(self, token: Hashable) -> None:
        if token != self._token:
            logger.debug(f"Ignoring stale policy tick for {token}")
            return
        self._handle = None
        self._token = None
        self.callback(token)
