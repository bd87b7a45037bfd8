"""
Runtime loop: queues utterances and drives the controller tick by tick.

Usage:
    from jammo.runtime import Runtime, RuntimeConfig
"""
from .events import Event, EventType, EventQueue
from .runtime import Runtime, RuntimeConfig, StepResult

__all__ = [
    "Event",
    "EventType",
    "EventQueue",
    "Runtime",
    "RuntimeConfig",
    "StepResult",
]
