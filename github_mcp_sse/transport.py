# =============================================================================
# GitHub MCP SSE Gateway - SSE Transport Channel
# =============================================================================
"""
Per-session Server-Sent Events channel.

A channel pairs one outbound event stream with the dispatch work triggered
by POSTs addressed to its session. Events are queued by `send` and the
keep-alive task, and drained by `events()`, which backs the
`EventSourceResponse` serving `/sse`. The response ends the iterator when
the client disconnects or the server begins shutting down.

Lifecycle: CONNECTING -> OPEN -> CLOSED. Closing is idempotent and
synchronous so it is safe from a generator's `finally` during cancellation.
On close the keep-alive task and any in-flight dispatches are cancelled,
the reader is woken, and the on-close callback deregisters the session.
"""

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, Callable, Coroutine, Optional

from mcp import types
from sse_starlette import ServerSentEvent

logger = logging.getLogger(__name__)

# Line separator for every frame: "event: message\ndata: <json>\n\n".
SEPARATOR = "\n"


def keepalive_event() -> ServerSentEvent:
    """Comment-only heartbeat frame (`: ping`)."""
    return ServerSentEvent(comment="ping", sep=SEPARATOR)


class ChannelState(str, Enum):
    """
    Transport channel states.

    Attributes:
        CONNECTING: Created, stream not yet opened.
        OPEN: Streaming; accepts frames and dispatches.
        CLOSED: Terminal; every write is a no-op.
    """

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class TransportChannel:
    """
    Outbound SSE stream for one session.

    Attributes:
        session_id: Identifier of the owning session.
        endpoint: URL the client must POST its messages to.
        keepalive_interval: Seconds between heartbeat frames.
        state: Current ChannelState.
    """

    def __init__(
        self,
        session_id: str,
        endpoint: str,
        keepalive_interval: float = 10.0,
        on_close: Optional[Callable[[str], object]] = None,
    ) -> None:
        """
        Initialize the channel.

        Args:
            session_id: Identifier of the owning session.
            endpoint: URL announced in the initial `endpoint` event.
            keepalive_interval: Seconds between heartbeat frames.
            on_close: Called once with `session_id` when the channel closes.
        """
        self.session_id = session_id
        self.endpoint = endpoint
        self.keepalive_interval = keepalive_interval
        self.state = ChannelState.CONNECTING

        self._on_close = on_close
        self._queue: asyncio.Queue[Optional[ServerSentEvent]] = asyncio.Queue()
        self._keepalive_task: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def is_open(self) -> bool:
        return self.state is ChannelState.OPEN

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> None:
        """
        Announce the POST endpoint and start the keep-alive.

        Raises:
            RuntimeError: If the channel was already opened.
        """
        if self.state is not ChannelState.CONNECTING:
            raise RuntimeError(f"Channel {self.session_id} is {self.state.value}")

        self.state = ChannelState.OPEN
        self._queue.put_nowait(
            ServerSentEvent(self.endpoint, event="endpoint", sep=SEPARATOR)
        )
        self._keepalive_task = asyncio.create_task(
            self._keepalive(), name=f"sse-keepalive-{self.session_id}"
        )

    def close(self) -> None:
        """Move to CLOSED and release everything the channel owns."""
        if self.state is ChannelState.CLOSED:
            return

        self.state = ChannelState.CLOSED

        if self._keepalive_task is not None:
            self._keepalive_task.cancel()
            self._keepalive_task = None

        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

        # Wake the reader so the streaming response ends.
        self._queue.put_nowait(None)

        logger.debug(f"Channel {self.session_id} closed")
        if self._on_close is not None:
            self._on_close(self.session_id)

    async def _keepalive(self) -> None:
        while self.is_open:
            await asyncio.sleep(self.keepalive_interval)
            if not self._write(keepalive_event()):
                return

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def _write(self, event: ServerSentEvent) -> bool:
        if not self.is_open:
            return False
        self._queue.put_nowait(event)
        return True

    def send(self, message: types.JSONRPCMessage) -> bool:
        """
        Queue one JSON-RPC message as a `message` event.

        Returns:
            False if the channel is no longer open; the message is dropped.
        """
        if not self.is_open:
            logger.debug(f"Dropping message for closed session {self.session_id}")
            return False

        data = message.model_dump_json(by_alias=True, exclude_none=True)
        return self._write(ServerSentEvent(data, event="message", sep=SEPARATOR))

    def spawn(self, coro: Coroutine) -> Optional[asyncio.Task]:
        """
        Run `coro` as a task that is cancelled if the channel closes first.

        Returns:
            The task, or None if the channel is not open (`coro` is discarded).
        """
        if not self.is_open:
            coro.close()
            return None

        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    async def events(self) -> AsyncIterator[ServerSentEvent]:
        """
        Yield queued events until the channel closes.

        Events queued before the close are still delivered. Leaving the
        iterator for any reason (disconnect, write failure, shutdown)
        closes the channel.
        """
        try:
            while True:
                event = await self._queue.get()
                if event is None:
                    break
                yield event
        finally:
            self.close()

    def __repr__(self) -> str:
        return f"<TransportChannel {self.session_id} {self.state.value}>"
