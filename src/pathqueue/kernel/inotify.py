#!/usr/bin/env python3
"""
--------------------------------------------
:mod:`inotify_simple` based event handle
--------------------------------------------

Linux only.
inotify keeps no descriptor open per path.
Instead, the watch descriptor returned by the kernel
stands in as the descriptor of the watch.

Paths resolving to the same inode share one watch descriptor.
Each registration still gets its own token,
and the watch descriptor is removed from the kernel
only when the last registration using it is removed.

inotify has no direct counterpart for size increases
and link count changes.
They are derived from :func:`os.stat` of the watched path
when ``MODIFY`` and ``ATTRIB`` events arrive.
"""

# Standard libraries.
import dataclasses
import datetime
import itertools
import logging
import os
import threading
import typing

# External dependencies.
import inotify_simple

# Internal packages.
import pathqueue.event
import pathqueue.kernel

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)

_Event = pathqueue.event.Event
_flags = inotify_simple.flags

_masks: dict[pathqueue.event.Event, int] = {
    _Event.RENAME: _flags.MOVE_SELF,
    _Event.WRITE: _flags.MODIFY,
    _Event.DELETE: _flags.DELETE_SELF,
    _Event.ATTRIBUTE_CHANGE: _flags.ATTRIB,
    _Event.SIZE_INCREASE: _flags.MODIFY,
    _Event.LINK_COUNT_CHANGED: _flags.ATTRIB,
    _Event.ACCESS_REVOCATION: _flags.UNMOUNT,
}


def to_mask(flags: pathqueue.event.Event) -> int:
    mask = 0
    for kind, kind_mask in _masks.items():
        if kind & flags:
            mask |= kind_mask
    return mask


@dataclasses.dataclass
class _Target:
    path: str
    size: int
    link_count: int
    tokens: set[int] = dataclasses.field(default_factory=set)
    ignored: bool = False
    """Whether the kernel already removed the watch descriptor."""

    @classmethod
    def from_path(cls, path: str) -> "_Target":
        try:
            status = os.stat(path)
        except OSError:
            return cls(path=path, size=0, link_count=0)
        return cls(
            path=path, size=status.st_size, link_count=status.st_nlink
        )

    def translate(self, mask: int) -> pathqueue.event.Event:
        flags = _Event(0)
        if mask & _flags.MOVE_SELF:
            flags |= _Event.RENAME
        if mask & _flags.MODIFY:
            flags |= _Event.WRITE
            size = self._stat("st_size")
            if size is not None:
                if size > self.size:
                    flags |= _Event.SIZE_INCREASE
                self.size = size
        if mask & _flags.DELETE_SELF:
            flags |= _Event.DELETE
        if mask & _flags.ATTRIB:
            # Unlinking leaves nothing to stat, and no links.
            link_count = self._stat("st_nlink") or 0
            if link_count != self.link_count:
                flags |= _Event.LINK_COUNT_CHANGED
                self.link_count = link_count
            else:
                flags |= _Event.ATTRIBUTE_CHANGE
        if mask & _flags.UNMOUNT:
            flags |= _Event.ACCESS_REVOCATION
        if mask & _flags.IGNORED:
            self.ignored = True
        return flags

    def _stat(self, field: str) -> typing.Optional[int]:
        try:
            return getattr(os.stat(self.path), field)
        except OSError:
            return None


class Handle(pathqueue.kernel.Handle):
    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        super().__init__(*args, **kwargs)
        self._inotify = inotify_simple.INotify()
        self._lock = threading.Lock()
        """Guards target bookkeeping against the polling thread."""
        self._targets: dict[int, _Target] = {}
        self._tokens = itertools.count(1)

    def watch(
        self, path: str, flags: pathqueue.event.Event
    ) -> pathqueue.kernel.Watch:
        self._check_open()
        mask = to_mask(flags) | _flags.MASK_ADD
        with self._lock:
            descriptor = self._inotify.add_watch(path, mask)
            target = self._targets.get(descriptor)
            if target is None or target.ignored:
                target = self._targets[descriptor] = _Target.from_path(
                    path
                )
            token = next(self._tokens)
            target.tokens.add(token)
        _logger.debug("Path %s watched with wd %d.", path, descriptor)
        return pathqueue.kernel.Watch(descriptor=descriptor, token=token)

    def unwatch(self, watch: pathqueue.kernel.Watch) -> None:
        self._check_open()
        with self._lock:
            target = self._targets.get(watch.descriptor)
            if target is None or target.ignored:
                return
            if target.tokens - {watch.token}:
                return
            self._inotify.rm_watch(watch.descriptor)

    def release(self, watch: pathqueue.kernel.Watch) -> None:
        with self._lock:
            target = self._targets.get(watch.descriptor)
            if target is None:
                return
            target.tokens.discard(watch.token)
            if not target.tokens:
                del self._targets[watch.descriptor]

    def poll(
        self, timeout: datetime.timedelta
    ) -> list[pathqueue.kernel.RawEvent]:
        self._check_open()
        try:
            inotify_events = self._inotify.read(
                timeout=int(timeout.total_seconds() * 1000)
            )
        except ValueError as error:
            # Raised by the closed inotify file object.
            raise pathqueue.kernel.HandleClosed() from error
        raw_events: list[pathqueue.kernel.RawEvent] = []
        with self._lock:
            for inotify_event in inotify_events:
                if inotify_event.mask & _flags.Q_OVERFLOW:
                    _logger.warning("inotify event queue overflowed.")
                    continue
                target = self._targets.get(inotify_event.wd)
                if target is None:
                    continue
                flags = target.translate(inotify_event.mask)
                if not flags:
                    continue
                raw_events.extend(
                    pathqueue.kernel.RawEvent(token=token, flags=flags)
                    for token in sorted(target.tokens)
                )
        return raw_events

    def close(self) -> None:
        if self.closed:
            return
        super().close()
        self._inotify.close()
        with self._lock:
            self._targets.clear()
        _logger.debug("Closed inotify.")
