"""Background tasks: expiry sweep and keep-alive."""

from .expiry_sweep import ExpirySweepScheduler
from .keep_alive import KeepAlivePinger
from .periodic import PeriodicTask

__all__ = ["ExpirySweepScheduler", "KeepAlivePinger", "PeriodicTask"]
