"""Ordered, retrying relay command queue in front of the broker connection."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from contextlib import suppress
from dataclasses import dataclass, field

from scandrink_bridge.domain.entities import Command
from scandrink_bridge.domain.ports import BrokerConnection, CommandSink
from scandrink_bridge.domain.relay_types import BrokerConnectionState, RequeuePolicy

logger = logging.getLogger(__name__)

DEFAULT_CONTROL_TOPIC = "/scandrink/relay/control"


@dataclass(slots=True)
class DispatcherState:
    """Queue, in-flight marker and timers owned by one dispatcher."""

    queue: deque[Command] = field(default_factory=deque)
    in_flight: Command | None = None
    publish_task: asyncio.Task[None] | None = None
    drain_scheduled: bool = False
    retry_handle: asyncio.TimerHandle | None = None
    published_count: int = 0
    failed_attempts: int = 0
    above_warning_threshold: bool = False


class CommandDispatcher(CommandSink):
    """Drain queued relay commands into the broker one publish at a time.

    At most one publish is in flight. While the broker is not connected the
    head of the queue is left in place and the drain is retried after
    `retry_delay_seconds`. A failed publish puts the command back according to
    `requeue_policy` and is retried without limit; with the default `TAIL`
    policy this moves it behind commands enqueued after it.

    All methods must be called from the event loop thread.
    """

    def __init__(
        self,
        connection: BrokerConnection,
        *,
        topic: str = DEFAULT_CONTROL_TOPIC,
        qos: int = 1,
        retry_delay_seconds: float = 1.0,
        requeue_policy: RequeuePolicy = RequeuePolicy.TAIL,
        queue_warning_threshold: int | None = None,
    ) -> None:
        if qos not in {0, 1, 2}:
            raise ValueError("qos must be one of 0, 1, 2.")

        self._connection = connection
        self._topic = topic
        self._qos = qos
        self._retry_delay_seconds = max(retry_delay_seconds, 0.001)
        self._requeue_policy = requeue_policy
        self._queue_warning_threshold = queue_warning_threshold
        self._state = DispatcherState()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stopping = False

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def pending_count(self) -> int:
        """Return queued commands plus the one being published, if any."""

        in_flight = 0 if self._state.in_flight is None else 1
        return len(self._state.queue) + in_flight

    @property
    def in_flight(self) -> bool:
        return self._state.in_flight is not None

    def pending_commands(self) -> list[Command]:
        """Return queued commands in drain order, excluding the in-flight one."""

        return list(self._state.queue)

    async def start(self) -> None:
        """Bind to the running loop and drain anything queued so far."""

        self._loop = asyncio.get_running_loop()
        self._stopping = False
        self._state.drain_scheduled = False
        self._state.retry_handle = None
        self._connection.add_state_listener(self._on_connection_state)
        self._schedule_drain()

    async def stop(self) -> None:
        """Cancel timers and any in-flight publish; queued commands are kept."""

        self._stopping = True
        retry_handle = self._state.retry_handle
        if retry_handle is not None:
            retry_handle.cancel()
            self._state.retry_handle = None

        task = self._state.publish_task
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

        # A task cancelled before its first step never reaches its own requeue.
        command = self._state.in_flight
        if command is not None:
            self._state.queue.appendleft(command)
            self._state.in_flight = None
            self._state.publish_task = None

    def enqueue(self, command: Command) -> None:
        """Append a command to the tail and trigger a drain."""

        self._state.queue.append(command)
        self._check_warning_threshold()
        self._schedule_drain()

    def _schedule_drain(self, delay_seconds: float = 0.0) -> None:
        if self._stopping:
            return
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return
            self._loop = loop

        if delay_seconds <= 0:
            if self._state.drain_scheduled:
                return
            self._state.drain_scheduled = True
            loop.call_soon(self._drain)
            return

        if self._state.retry_handle is not None:
            return
        self._state.retry_handle = loop.call_later(delay_seconds, self._on_retry_timer)

    def _on_retry_timer(self) -> None:
        self._state.retry_handle = None
        self._drain()

    def _on_connection_state(self, state: BrokerConnectionState) -> None:
        if state is BrokerConnectionState.CONNECTED and self._state.queue:
            logger.info(
                "Broker connected, draining %s pending relay command(s).",
                len(self._state.queue),
            )
            self._schedule_drain()

    def _drain(self) -> None:
        self._state.drain_scheduled = False
        if self._stopping or self._state.in_flight is not None or not self._state.queue:
            return

        if not self._connection.is_connected():
            self._schedule_drain(self._retry_delay_seconds)
            return

        assert self._loop is not None
        command = self._state.queue.popleft()
        self._state.in_flight = command
        self._state.publish_task = self._loop.create_task(
            self._publish(command),
            name="relay-command-publish",
        )

    async def _publish(self, command: Command) -> None:
        payload = command.to_json()
        try:
            delivered = await self._connection.publish(self._topic, payload, self._qos)
        except asyncio.CancelledError:
            self._state.queue.appendleft(command)
            self._state.in_flight = None
            self._state.publish_task = None
            raise
        except Exception:
            logger.exception("Relay command publish raised for order %s.", command.order_id)
            delivered = False

        if delivered:
            self._state.published_count += 1
            logger.info("Relay command sent to '%s': %s", self._topic, payload)
        else:
            self._state.failed_attempts += 1
            self._requeue(command)
            logger.warning(
                "Relay command publish failed for order %s, requeued at %s (%s pending).",
                command.order_id,
                self._requeue_policy.value,
                len(self._state.queue),
            )

        self._state.in_flight = None
        self._state.publish_task = None
        self._schedule_drain()

    def _requeue(self, command: Command) -> None:
        if self._requeue_policy is RequeuePolicy.HEAD:
            self._state.queue.appendleft(command)
        else:
            self._state.queue.append(command)

    def _check_warning_threshold(self) -> None:
        threshold = self._queue_warning_threshold
        if threshold is None:
            return
        above = len(self._state.queue) > threshold
        if above and not self._state.above_warning_threshold:
            logger.warning(
                "Relay command queue holds %s commands (threshold %s); broker may be down.",
                len(self._state.queue),
                threshold,
            )
        self._state.above_warning_threshold = above


__all__ = ["CommandDispatcher", "DEFAULT_CONTROL_TOPIC", "DispatcherState"]
