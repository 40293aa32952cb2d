#!/usr/bin/env python3
"""
------------------------
Public event vocabulary
------------------------

Kinds of changes reported for watched paths,
the names they are delivered under,
and the contract a delegate has to satisfy to receive them.
"""

# Standard libraries.
import enum
import typing


class Event(enum.IntFlag):
    """
    Kinds of changes that can be watched for.

    Combine them with ``|`` to form an interest set
    for :meth:`~pathqueue.queue.Queue.add_path`.
    Values match the vnode filter flags of :func:`select.kqueue`
    so that they can be handed to the kernel without translation.
    """

    DELETE = 0x01
    """Item was removed."""
    WRITE = 0x02
    """Item contents changed."""
    SIZE_INCREASE = 0x04
    """Item size increased."""
    ATTRIBUTE_CHANGE = 0x08
    """Item attributes changed."""
    LINK_COUNT_CHANGED = 0x10
    """Item link count changed."""
    RENAME = 0x20
    """Item was renamed."""
    ACCESS_REVOCATION = 0x40
    """Access to item was revoked."""
    ALL = 0x7F
    """All of the above."""

    @property
    def notification_name(self) -> str:
        """
        Name used as broadcast topic and as delegate ``event_name``.

        :raises KeyError: If ``self`` is not a single kind of change.
        """
        return _notification_names[self]


_notification_names: dict[Event, str] = {
    Event.RENAME: "Rename",
    Event.WRITE: "Write",
    Event.DELETE: "Delete",
    Event.ATTRIBUTE_CHANGE: "AttributeChange",
    Event.SIZE_INCREASE: "SizeIncrease",
    Event.LINK_COUNT_CHANGED: "LinkCountChanged",
    Event.ACCESS_REVOCATION: "AccessRevocation",
}

dispatch_order: tuple[Event, ...] = tuple(_notification_names)
"""Order in which kinds sharing one kernel event are delivered."""

notification_names: tuple[str, ...] = tuple(
    _notification_names.values()
)
"""All broadcast topics, in :data:`dispatch_order`."""


def split(flags: Event) -> list[Event]:
    """Single kinds set in ``flags``, in :data:`dispatch_order`."""
    return [kind for kind in dispatch_order if kind & flags]


def to_names(flags: Event) -> list[str]:
    """Notification names of ``flags``, in :data:`dispatch_order`."""
    return [kind.notification_name for kind in split(flags)]


class Delegate(typing.Protocol):
    """
    Single consumer of events of a :class:`~pathqueue.queue.Queue`.

    .. admonition:: Required capability

       The dispatcher calls :meth:`on_event` without checking
       that the delegate provides it.
       Setting a delegate without this method is a contract violation
       that raises :exc:`AttributeError` inside the monitor thread
       for every delivered event.
    """

    def on_event(
        self, queue: typing.Any, event_name: str, path: str
    ) -> typing.Any:
        ...
