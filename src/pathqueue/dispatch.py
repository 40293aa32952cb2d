#!/usr/bin/env python3
"""
---------------
Event dispatch
---------------
"""

# Standard libraries.
import typing

# Internal packages.
import pathqueue.event
import pathqueue.notification


class Dispatcher:
    """
    Deliver named events to a delegate and a notification sink.

    Each kind in a flag set is delivered separately,
    in :data:`~pathqueue.event.dispatch_order`.
    Events go to :attr:`delegate` if it is set.
    They are published to :attr:`notification_center`
    if there is no delegate,
    or if :attr:`always_post_notifications` is set.
    """

    def __init__(
        self,
        *args: typing.Any,
        source: typing.Any,
        notification_center: pathqueue.notification.Publisher,
        delegate: typing.Optional[pathqueue.event.Delegate] = None,
        always_post_notifications: bool = False,
        **kwargs: typing.Any,
    ) -> None:
        # TODO[mypy issue 4001]: Remove type ignore.
        super().__init__(*args, **kwargs)  # type: ignore[call-arg]
        self.always_post_notifications = always_post_notifications
        self.delegate = delegate
        self.notification_center = notification_center
        self.source = source
        """Passed as the ``queue`` of every delivered event."""

    def dispatch(self, path: str, flags: pathqueue.event.Event) -> None:
        for event_name in pathqueue.event.to_names(flags):
            self.deliver(event_name, path)

    def deliver(self, event_name: str, path: str) -> None:
        """
        Deliver a single named event.

        :raises AttributeError:
            If :attr:`delegate` does not have ``on_event``.
        """
        delegate = self.delegate
        if delegate is not None:
            delegate.on_event(self.source, event_name, path)
        if delegate is None or self.always_post_notifications:
            self.notification_center.publish(
                event_name, {"source": self.source, "path": path}
            )
