"""Relay command dispatch."""

from scandrink_bridge.infrastructure.dispatch.command_dispatcher import (
    DEFAULT_CONTROL_TOPIC,
    CommandDispatcher,
    DispatcherState,
)

__all__ = ["CommandDispatcher", "DEFAULT_CONTROL_TOPIC", "DispatcherState"]
