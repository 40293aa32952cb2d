#!/usr/bin/env python3
"""
--------------------
Notification center
--------------------

In-process broadcast of named notifications.
Handlers are called in the publishing thread,
which is the monitor thread for events of a queue.
"""

# Standard libraries.
import collections.abc
import contextlib
import logging
import threading
import typing

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)

Attributes = dict[str, typing.Any]
Handler = collections.abc.Callable[[str, Attributes], typing.Any]


class Publisher(typing.Protocol):
    def publish(self, name: str, attributes: Attributes) -> None:
        ...


class Center:
    """
    Thread-safe :class:`Publisher` fanning out to subscribers.

    Subscribing with a name of :data:`None`
    receives every published notification.
    """

    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        # TODO[mypy issue 4001]: Remove type ignore.
        super().__init__(*args, **kwargs)  # type: ignore[call-arg]
        self._handlers: dict[typing.Optional[str], list[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(
        self, handler: Handler, name: typing.Optional[str] = None
    ) -> None:
        with self._lock:
            self._handlers.setdefault(name, []).append(handler)

    def unsubscribe(
        self, handler: Handler, name: typing.Optional[str] = None
    ) -> None:
        """
        Remove a single subscription of ``handler`` to ``name``.

        :raises ValueError: If ``handler`` is not subscribed to ``name``.
        """
        with self._lock:
            handlers = self._handlers.get(name, [])
            handlers.remove(handler)
            if not handlers:
                del self._handlers[name]

    @contextlib.contextmanager
    def subscribed(
        self, handler: Handler, name: typing.Optional[str] = None
    ) -> collections.abc.Iterator[Handler]:
        self.subscribe(handler, name)
        try:
            yield handler
        finally:
            self.unsubscribe(handler, name)

    def publish(self, name: str, attributes: Attributes) -> None:
        """
        Call handlers of ``name`` and of all names.

        Handlers are called without holding the lock,
        so they may subscribe and unsubscribe.
        Exceptions from handlers propagate to the publisher.
        """
        with self._lock:
            handlers = list(self._handlers.get(name, ()))
            handlers.extend(self._handlers.get(None, ()))
        _logger.debug("Publishing %s to %d handlers.", name, len(handlers))
        for handler in handlers:
            handler(name, attributes)


default_center = Center()
"""Default sink of queues without an explicit notification center."""
