"""
Timers: cancellable schedulers and the debounced auto-resolution countdown.
"""

from cricauction.core.timer.scheduler import (
    Scheduler,
    TimerHandle,
    VirtualScheduler,
    AsyncioScheduler,
)
from cricauction.core.timer.countdown import (
    AutoResolutionTimer,
    DebouncedCall,
    WarningStage,
)

__all__ = [
    "Scheduler",
    "TimerHandle",
    "VirtualScheduler",
    "AsyncioScheduler",
    "AutoResolutionTimer",
    "DebouncedCall",
    "WarningStage",
]
