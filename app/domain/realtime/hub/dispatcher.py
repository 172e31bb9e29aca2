"""Single-consumer command loop in front of the realtime hub.

Every state change goes through one asyncio task. A command is applied by
``RealtimeHub.handle`` and its deliveries are flushed to the sink before the
next command is taken, so observers never see a partially applied transition
and the deliveries of one command keep their order.
"""

import asyncio
import contextlib
from typing import Any, Protocol

from loguru import logger

from ..delivery import Delivery
from ..live import FollowerInfo, LiveStream
from .commands import Command, NotifyFollowers
from .hub import RealtimeHub


class DeliverySink(Protocol):
    async def emit(self, delivery: Delivery) -> None: ...


class FollowerLookup(Protocol):
    async def get_followers(self, user_id: str) -> FollowerInfo | None: ...


class EventDispatcher:
    """Serializes commands into the hub and forwards the resulting deliveries.

    Args:
        hub: State owner; only ever touched from the consumer task.
        sink: Transport that performs the actual emits.
        followers: Optional follower directory queried after a stream starts.
    """

    def __init__(
        self,
        hub: RealtimeHub,
        sink: DeliverySink,
        followers: FollowerLookup | None = None,
    ):
        self._hub = hub
        self._sink = sink
        self._followers = followers
        self._queue: asyncio.Queue[tuple[Command, asyncio.Future]] | None = None
        self._worker: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()
        self._in_flight: tuple[Command, asyncio.Future] | None = None

    @property
    def hub(self) -> RealtimeHub:
        return self._hub

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(), name="realtime-dispatcher")
        logger.info("Realtime dispatcher started")

    async def stop(self) -> None:
        for task in list(self._background):
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

        # The worker clears _in_flight on its way out, so read it first.
        in_flight = self._in_flight
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker

        if in_flight is not None and not in_flight[1].done():
            logger.warning("Command cancelled mid-apply: {!r}", in_flight[0])
            in_flight[1].cancel()

        if self._queue is not None:
            while not self._queue.empty():
                _, future = self._queue.get_nowait()
                if not future.done():
                    future.cancel()

        self._worker = None
        self._queue = None
        logger.info("Realtime dispatcher stopped")

    async def submit(self, command: Command) -> Any:
        """Queue a command and wait until it has been applied and flushed.

        Returns the command's ack value (``None`` for commands without one).
        """
        if not self.running:
            await self.start()
        assert self._queue is not None

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        await self._queue.put((command, future))
        return await future

    async def drain(self) -> None:
        """Wait until the queue and any pending follower lookups are done."""
        while True:
            if self._queue is not None:
                await self._queue.join()
            if not self._background:
                return
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _run(self) -> None:
        assert self._queue is not None
        queue = self._queue

        while True:
            command, future = await queue.get()
            self._in_flight = (command, future)
            try:
                await self._apply(command, future)
            finally:
                self._in_flight = None
                queue.task_done()

    async def _apply(self, command: Command, future: asyncio.Future) -> None:
        try:
            result = self._hub.handle(command)
        except Exception as exc:
            logger.exception("Command failed: {!r}", command)
            if not future.done():
                future.set_exception(exc)
            return

        await self._flush(result.deliveries)

        if result.started_stream is not None:
            self._spawn_follower_lookup(result.started_stream)

        if not future.done():
            future.set_result(result.ack)

    async def _flush(self, deliveries: list[Delivery]) -> None:
        for delivery in deliveries:
            try:
                await self._sink.emit(delivery)
            except Exception:
                logger.exception("Emit failed: event={} to={}", delivery.event, delivery.to)

    # ==================== FOLLOWERS ====================

    def _spawn_follower_lookup(self, stream: LiveStream) -> None:
        if self._followers is None:
            return
        task = asyncio.create_task(
            self._notify_followers(stream.stream_id, stream.host_user_id),
            name=f"followers-{stream.stream_id}",
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _notify_followers(self, stream_id: str, host_user_id: str) -> None:
        assert self._followers is not None
        try:
            info = await self._followers.get_followers(host_user_id)
        except Exception:
            logger.exception("Follower lookup failed: stream_id={} host={}", stream_id, host_user_id)
            return

        if info is None or not info.follower_ids:
            logger.debug("No followers to notify: stream_id={}", stream_id)
            return

        await self.submit(NotifyFollowers(stream_id, info.host_name, list(info.follower_ids)))
