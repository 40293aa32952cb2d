#!/usr/bin/env python3
"""
-----------------
Path event queue
-----------------

Usage::

    import pathqueue.event
    import pathqueue.queue

    class Printer:
        def on_event(self, queue, event_name, path):
            print(event_name, path)

    with pathqueue.queue.Queue(delegate=Printer()) as queue:
        queue.add_path(
            "a.txt",
            pathqueue.event.Event.WRITE | pathqueue.event.Event.DELETE,
        )
        ...

A path replaced by an atomic save keeps reporting the old file,
if anything at all.
Remove and add the path again after a ``Delete`` or ``Rename``
to follow the new file.
"""

# Standard libraries.
import datetime
import functools
import logging
import threading
import types
import typing

# Internal packages.
import pathqueue.configuration
import pathqueue.dispatch
import pathqueue.event
import pathqueue.kernel
import pathqueue.monitor
import pathqueue.notification
import pathqueue.registry

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)


class Queue:
    """
    Reports kernel events of registered paths.

    The kernel handle is opened by the first :meth:`add_path`,
    which also starts a monitor thread.
    Events are delivered in that thread.
    Every other method may be called from any thread,
    including from within a delivery.

    Keyword arguments left as :data:`None`
    take their value from ``configuration``.
    """

    def __init__(
        self,
        *args: typing.Any,
        configuration: typing.Optional[
            pathqueue.configuration.Entries
        ] = None,
        delegate: typing.Optional[pathqueue.event.Delegate] = None,
        always_post_notifications: typing.Optional[bool] = None,
        sleep_interval: typing.Optional[datetime.timedelta] = None,
        notification_center: typing.Optional[
            pathqueue.notification.Publisher
        ] = None,
        handle_factory: typing.Optional[
            pathqueue.registry.HandleFactory
        ] = None,
        **kwargs: typing.Any,
    ) -> None:
        # TODO[mypy issue 4001]: Remove type ignore.
        super().__init__(*args, **kwargs)  # type: ignore[call-arg]
        if configuration is None:
            configuration = pathqueue.configuration.Entries()
        if always_post_notifications is None:
            always_post_notifications = (
                configuration.always_post_notifications
            )
        if sleep_interval is None:
            sleep_interval = configuration.sleep_interval
        if notification_center is None:
            notification_center = pathqueue.notification.default_center
        if handle_factory is None:
            handle_factory = functools.partial(
                pathqueue.kernel.open_handle, configuration.kernel_backend
            )
        self._closed = False
        self._dispatcher = pathqueue.dispatch.Dispatcher(
            source=self,
            notification_center=notification_center,
            delegate=delegate,
            always_post_notifications=always_post_notifications,
        )
        self._registry = pathqueue.registry.Registry(
            handle_factory=handle_factory
        )
        self._monitor = pathqueue.monitor.Monitor(
            dispatch=self._dispatcher.dispatch,
            registry=self._registry,
            sleep_interval=sleep_interval,
        )
        self._start_lock = threading.Lock()
        """Guards starting the monitor against closing."""

    def __enter__(self) -> "Queue":
        return self

    def __exit__(
        self,
        exc_type: typing.Optional[typing.Type[BaseException]],
        exc_value: typing.Optional[BaseException],
        traceback: typing.Optional[types.TracebackType],
    ) -> None:
        del exc_type
        del exc_value
        del traceback
        self.close()

    @property
    def always_post_notifications(self) -> bool:
        """Whether to publish events even if there is a delegate."""
        return self._dispatcher.always_post_notifications

    @always_post_notifications.setter
    def always_post_notifications(self, value: bool) -> None:
        self._dispatcher.always_post_notifications = value

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def delegate(self) -> typing.Optional[pathqueue.event.Delegate]:
        return self._dispatcher.delegate

    @delegate.setter
    def delegate(
        self, value: typing.Optional[pathqueue.event.Delegate]
    ) -> None:
        self._dispatcher.delegate = value

    @property
    def notification_center(self) -> pathqueue.notification.Publisher:
        return self._dispatcher.notification_center

    @property
    def sleep_interval(self) -> datetime.timedelta:
        """Longest wait for kernel events before checking for stops."""
        return self._monitor.sleep_interval

    @sleep_interval.setter
    def sleep_interval(self, value: datetime.timedelta) -> None:
        self._monitor.sleep_interval = value

    def add_path(
        self,
        path: pathqueue.registry.PathType,
        flags: pathqueue.event.Event = pathqueue.event.Event.ALL,
    ) -> bool:
        """
        Start reporting ``flags`` changes of ``path``.

        :returns:
            Whether ``path`` started being watched.
            Adding an already watched path does nothing,
            and does not change the changes it is watched for.
            Paths that cannot be opened are logged and skipped.
        :raises pathqueue.registry.Registry.Closed:
            If the queue was closed.
        """
        added = self._registry.add(path, flags)
        if added:
            self._start_monitor()
        return added

    def remove_path(self, path: pathqueue.registry.PathType) -> bool:
        """
        Stop reporting changes of ``path``.

        :returns: Whether ``path`` was being watched.
        """
        return self._registry.remove(path)

    def remove_all_paths(self) -> None:
        self._registry.remove_all()

    def number_of_watched_paths(self) -> int:
        return len(self._registry)

    def watched_paths(self) -> list[str]:
        return self._registry.paths()

    def close(self) -> None:
        """
        Stop the monitor, and release every kernel resource.

        The monitor thread is joined
        unless this is called from a delivery within it.
        """
        with self._start_lock:
            if self._closed:
                return
            self._closed = True
        monitor = self._monitor
        monitor.stop()
        if monitor.ident is not None and (
            monitor is not threading.current_thread()
        ):
            monitor.join()
        self._registry.close()
        _logger.debug("Queue closed.")

    def _start_monitor(self) -> None:
        with self._start_lock:
            if self._closed or self._monitor.ident is not None:
                return
            self._monitor.start()
