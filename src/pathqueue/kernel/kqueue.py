#!/usr/bin/env python3
"""
----------------------------------------
:func:`select.kqueue` vnode event handle
----------------------------------------

Available on macOS and the BSDs.
Every watched path holds an open file descriptor,
and the kqueue reports vnode events for it
until the descriptor is closed.
"""

# Standard libraries.
import datetime
import itertools
import logging
import os
import select
import typing

# Internal packages.
import pathqueue.event
import pathqueue.kernel

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)

# Opens for event notification only, without preventing unmounting.
_open_flags = getattr(os, "O_EVTONLY", os.O_RDONLY)
_add_flags = select.KQ_EV_ADD | select.KQ_EV_ENABLE | select.KQ_EV_CLEAR
_max_events = 64


class Handle(pathqueue.kernel.Handle):
    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        super().__init__(*args, **kwargs)
        self._kqueue = select.kqueue()
        self._tokens = itertools.count(1)

    def watch(
        self, path: str, flags: pathqueue.event.Event
    ) -> pathqueue.kernel.Watch:
        self._check_open()
        descriptor = os.open(path, _open_flags)
        token = next(self._tokens)
        try:
            self._kqueue.control(
                [
                    select.kevent(
                        descriptor,
                        filter=select.KQ_FILTER_VNODE,
                        flags=_add_flags,
                        fflags=int(flags),
                        udata=token,
                    )
                ],
                0,
                0,
            )
        except BaseException:
            os.close(descriptor)
            raise
        _logger.debug("Path %s opened as fd %d.", path, descriptor)
        return pathqueue.kernel.Watch(descriptor=descriptor, token=token)

    def unwatch(self, watch: pathqueue.kernel.Watch) -> None:
        self._check_open()
        self._kqueue.control(
            [
                select.kevent(
                    watch.descriptor,
                    filter=select.KQ_FILTER_VNODE,
                    flags=select.KQ_EV_DELETE,
                )
            ],
            0,
            0,
        )

    def release(self, watch: pathqueue.kernel.Watch) -> None:
        try:
            os.close(watch.descriptor)
        except OSError as error:
            _logger.warning(
                "Unable to close fd %d: %s", watch.descriptor, error
            )

    def poll(
        self, timeout: datetime.timedelta
    ) -> list[pathqueue.kernel.RawEvent]:
        self._check_open()
        try:
            kevents = self._kqueue.control(
                None, _max_events, timeout.total_seconds()
            )
        except ValueError as error:
            # Raised by the closed kqueue object.
            raise pathqueue.kernel.HandleClosed() from error
        all_events = pathqueue.event.Event.ALL
        return [
            pathqueue.kernel.RawEvent(
                token=kevent.udata,
                flags=pathqueue.event.Event(kevent.fflags & all_events),
            )
            for kevent in kevents
            if kevent.filter == select.KQ_FILTER_VNODE and kevent.fflags
        ]

    def close(self) -> None:
        if self.closed:
            return
        super().close()
        self._kqueue.close()
        _logger.debug("Closed kqueue.")
