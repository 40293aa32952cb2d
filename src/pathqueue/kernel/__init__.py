#!/usr/bin/env python3
"""
.. automodule:: pathqueue.kernel.inotify
.. automodule:: pathqueue.kernel.kqueue
.. automodule:: pathqueue.kernel.polling

----------------------------
Kernel event handle backends
----------------------------

A :class:`Handle` multiplexes any number of watched paths
into a single bounded wait.
Backends are imported only when they are opened
so that platform specific modules are never loaded elsewhere.
"""

# Backends are wrapped in a function
# so that imports are only done when the respective handles are used.
# pylint: disable=import-outside-toplevel

# Standard libraries.
import dataclasses
import datetime
import logging
import typing

# External dependencies.
import watchdog.utils.platform

# Internal packages.
import pathqueue.event

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)

backend_names = ("inotify", "kqueue", "polling")


class HandleClosed(Exception):
    """The handle was closed. No more events will be reported."""


@dataclasses.dataclass(frozen=True)
class Watch:
    descriptor: int
    """OS resource kept open while the path is watched."""
    token: int
    """Reported back with every event of this watch."""


class RawEvent(typing.NamedTuple):
    token: int
    flags: pathqueue.event.Event


class Handle:
    """
    Base class of kernel event handles.

    Methods other than :meth:`poll` may be called from any thread,
    including while another thread is blocked in :meth:`poll`.
    Closing is only safe once no thread is in :meth:`poll`.
    """

    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        # TODO[mypy issue 4001]: Remove type ignore.
        super().__init__(*args, **kwargs)  # type: ignore[call-arg]
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__module__}.{type(self).__name__} {state}>"

    @property
    def closed(self) -> bool:
        return self._closed

    def watch(self, path: str, flags: pathqueue.event.Event) -> Watch:
        """
        Start reporting ``flags`` changes of ``path``.

        :raises OSError:
            If ``path`` cannot be opened or registered,
            including when descriptor limits are reached.
        """
        raise NotImplementedError()

    def unwatch(self, watch: Watch) -> None:
        """
        Tell the kernel to stop reporting changes for ``watch``.

        :raises OSError: If the kernel refuses.
        """
        raise NotImplementedError()

    def release(self, watch: Watch) -> None:
        """Close the resources of ``watch``. Never raises."""
        raise NotImplementedError()

    def poll(self, timeout: datetime.timedelta) -> list[RawEvent]:
        """
        Wait up to ``timeout`` for events.

        :returns: Events available, possibly none if timed out.
        :raises HandleClosed: If the handle is closed.
        :raises OSError: On transient failures. Polling may be retried.
        """
        raise NotImplementedError()

    def close(self) -> None:
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise HandleClosed()


def default_backend() -> str:
    if watchdog.utils.platform.is_linux():
        return "inotify"
    if watchdog.utils.platform.is_darwin() or (
        watchdog.utils.platform.is_bsd()
    ):
        return "kqueue"
    return "polling"


def open_handle(backend: str = "auto") -> Handle:
    """
    Create a handle using the given ``backend``.

    :param backend:
        One of :data:`backend_names`,
        or ``"auto"`` to pick from the running platform.
    :raises ValueError: If ``backend`` is not known.
    :raises OSError: If the kernel refuses to create the handle.
    """
    if backend == "auto":
        backend = default_backend()
    _logger.debug("Opening %s kernel handle.", backend)
    if backend == "inotify":
        import pathqueue.kernel.inotify

        return pathqueue.kernel.inotify.Handle()
    if backend == "kqueue":
        import pathqueue.kernel.kqueue

        return pathqueue.kernel.kqueue.Handle()
    if backend == "polling":
        import pathqueue.kernel.polling

        return pathqueue.kernel.polling.Handle()
    raise ValueError(f"Unknown kernel backend: {backend}")
