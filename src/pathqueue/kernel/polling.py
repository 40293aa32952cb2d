#!/usr/bin/env python3
"""
-------------------------------
:func:`os.stat` polling handle
-------------------------------

Fallback for platforms without a usable kernel facility.
Changes are detected by comparing status snapshots
once per :meth:`Handle.poll` timeout.
Renames cannot be observed this way.
A path whose inode disappears or is replaced reports a deletion once,
and the watch then stays silent like a stale kernel descriptor.
"""

# Standard libraries.
import dataclasses
import datetime
import itertools
import logging
import os
import threading
import typing

# Internal packages.
import pathqueue.event
import pathqueue.kernel

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)

_Event = pathqueue.event.Event


@dataclasses.dataclass(frozen=True)
class Snapshot:
    device: int
    inode: int
    mode: int
    user_id: int
    group_id: int
    size: int
    link_count: int
    modified_ns: int
    changed_ns: int

    @classmethod
    def from_stat(cls, status: os.stat_result) -> "Snapshot":
        return cls(
            device=status.st_dev,
            inode=status.st_ino,
            mode=status.st_mode,
            user_id=status.st_uid,
            group_id=status.st_gid,
            size=status.st_size,
            link_count=status.st_nlink,
            modified_ns=status.st_mtime_ns,
            changed_ns=status.st_ctime_ns,
        )


def compare(
    old: Snapshot, new: typing.Optional[Snapshot]
) -> pathqueue.event.Event:
    """Changes from ``old`` to ``new``, :data:`None` if it is gone."""
    if new is None or (new.device, new.inode) != (old.device, old.inode):
        return _Event.DELETE
    flags = _Event(0)
    if new.modified_ns != old.modified_ns or new.size != old.size:
        flags |= _Event.WRITE
    if new.size > old.size:
        flags |= _Event.SIZE_INCREASE
    if new.link_count != old.link_count:
        flags |= _Event.LINK_COUNT_CHANGED
    if (new.mode, new.user_id, new.group_id) != (
        old.mode,
        old.user_id,
        old.group_id,
    ) or (not flags and new.changed_ns != old.changed_ns):
        flags |= _Event.ATTRIBUTE_CHANGE
    return flags


@dataclasses.dataclass
class _Target:
    path: str
    snapshot: typing.Optional[Snapshot]
    """:data:`None` once the watched inode is gone."""


class Handle(pathqueue.kernel.Handle):
    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        super().__init__(*args, **kwargs)
        self._lock = threading.Lock()
        self._targets: dict[int, _Target] = {}
        self._tokens = itertools.count(1)
        self._wake_up = threading.Event()
        """Set on close to end a :meth:`poll` early."""

    def watch(
        self, path: str, flags: pathqueue.event.Event
    ) -> pathqueue.kernel.Watch:
        del flags
        self._check_open()
        snapshot = Snapshot.from_stat(os.stat(path))
        token = next(self._tokens)
        with self._lock:
            self._targets[token] = _Target(path=path, snapshot=snapshot)
        _logger.debug("Path %s polled as token %d.", path, token)
        return pathqueue.kernel.Watch(descriptor=token, token=token)

    def unwatch(self, watch: pathqueue.kernel.Watch) -> None:
        del watch
        self._check_open()

    def release(self, watch: pathqueue.kernel.Watch) -> None:
        with self._lock:
            self._targets.pop(watch.token, None)

    def poll(
        self, timeout: datetime.timedelta
    ) -> list[pathqueue.kernel.RawEvent]:
        self._check_open()
        self._wake_up.wait(timeout.total_seconds())
        self._check_open()
        with self._lock:
            targets = list(self._targets.items())
        raw_events: list[pathqueue.kernel.RawEvent] = []
        for token, target in targets:
            old_snapshot = target.snapshot
            if old_snapshot is None:
                continue
            try:
                new_snapshot: typing.Optional[Snapshot] = (
                    Snapshot.from_stat(os.stat(target.path))
                )
            except FileNotFoundError:
                new_snapshot = None
            flags = compare(old_snapshot, new_snapshot)
            if flags & _Event.DELETE:
                new_snapshot = None
            target.snapshot = new_snapshot
            if flags:
                raw_events.append(
                    pathqueue.kernel.RawEvent(token=token, flags=flags)
                )
        return raw_events

    def close(self) -> None:
        super().close()
        self._wake_up.set()
        with self._lock:
            self._targets.clear()
