#!/usr/bin/env python3
"""
------------------------------------------
Mixing :mod:`pathqueue` with :mod:`asyncio`
------------------------------------------

Usage::

    async def print_events(path):
        events = pathqueue.asyncio.EventQueue()
        with pathqueue.queue.Queue(delegate=events) as queue:
            queue.add_path(path)
            async for notification in events:
                print(notification.name, notification.path)
"""

# Standard library.
import asyncio
import dataclasses
import logging
import typing

# Internal modules.
import pathqueue.notification

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)


@dataclasses.dataclass(frozen=True)
class Notification:
    name: str
    path: str
    source: typing.Any = None


class EventQueue:
    """
    Forwards deliveries from the monitor thread into an event loop.

    Usable as a :class:`~pathqueue.event.Delegate`
    and as a handler of a :class:`~pathqueue.notification.Center`.
    It must be created in the loop that consumes it.
    Deliveries arriving after that loop closed are dropped.
    """

    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        # TODO[mypy issue 4001]: Remove type ignore.
        super().__init__(*args, **kwargs)  # type: ignore[call-arg]
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue[typing.Optional[Notification]]()

    def __aiter__(self) -> "EventQueue":
        return self

    async def __anext__(self) -> Notification:
        notification = await self.get()
        if notification is None:
            raise StopAsyncIteration()
        return notification

    def __call__(
        self, name: str, attributes: pathqueue.notification.Attributes
    ) -> None:
        self.put(
            Notification(
                name=name,
                path=attributes["path"],
                source=attributes.get("source"),
            )
        )

    def on_event(
        self, queue: typing.Any, event_name: str, path: str
    ) -> None:
        self.put(Notification(name=event_name, path=path, source=queue))

    def put(self, notification: typing.Optional[Notification]) -> None:
        """Thread-safe push. :data:`None` marks the end."""
        try:
            self._loop.call_soon_threadsafe(
                self._queue.put_nowait, notification
            )
        except RuntimeError:
            _logger.debug("Event loop closed. Dropped %s.", notification)

    def close(self) -> None:
        """End iteration once queued notifications are consumed."""
        self.put(None)

    async def get(self) -> typing.Optional[Notification]:
        """
        Wait for the next notification.

        :returns: :data:`None` if closed and drained.
        """
        notification = await self._queue.get()
        if notification is None:
            # Let other consumers see the end too.
            self._queue.put_nowait(None)
        return notification
