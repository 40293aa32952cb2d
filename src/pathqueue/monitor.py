#!/usr/bin/env python3
"""
-------------------
Event monitor loop
-------------------
"""

# Standard libraries.
import collections.abc
import datetime
import logging
import typing

# External dependencies.
import watchdog.utils

# Internal packages.
import pathqueue.event
import pathqueue.kernel
import pathqueue.registry

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)

DispatchCallback = collections.abc.Callable[
    [str, pathqueue.event.Event], typing.Any
]


class Monitor(watchdog.utils.BaseThread):
    """
    Daemon thread polling the kernel handle of a registry.

    Each poll waits at most :attr:`sleep_interval`
    so that :meth:`stop` is noticed within that duration.
    Events of tokens no longer in the registry are dropped.
    Remaining events are masked with the interest set of their entry
    and handed to ``dispatch``.
    """

    def __init__(
        self,
        *args: typing.Any,
        dispatch: DispatchCallback,
        registry: pathqueue.registry.Registry,
        sleep_interval: datetime.timedelta = datetime.timedelta(seconds=1),
        **kwargs: typing.Any,
    ) -> None:
        # TODO[mypy issue 4001]: Remove type ignore.
        super().__init__(*args, **kwargs)  # type: ignore[call-arg]
        self.dispatch = dispatch
        self.registry = registry
        self.sleep_interval = sleep_interval
        self.name = "pathqueue.monitor"

    def on_thread_start(self) -> None:
        _logger.debug("Monitor starting.")

    def on_thread_stop(self) -> None:
        _logger.debug("Monitor stop requested.")

    def run(self) -> None:
        while self.should_keep_running():
            try:
                self.poll_once()
            except pathqueue.kernel.HandleClosed:
                _logger.debug("Kernel handle closed.")
                break
            except OSError as error:
                _logger.debug("Polling failed. Retrying: %s", error)
                self.stopped_event.wait(self.sleep_interval.total_seconds())
            except Exception:  # pylint: disable=broad-except
                _logger.exception("Unexpected error while monitoring.")
        _logger.debug("Monitor stopped.")

    def poll_once(self) -> None:
        """
        Run a single poll and dispatch its events.

        :raises pathqueue.kernel.HandleClosed:
            If the kernel handle was closed.
        :raises OSError: If polling failed.

        Errors from ``dispatch`` are logged per event,
        so that the rest of the batch is still dispatched.
        """
        handle = self.registry.handle
        if handle is None:
            # Nothing was ever watched.
            self.stopped_event.wait(self.sleep_interval.total_seconds())
            return
        for raw_event in handle.poll(self.sleep_interval):
            entry = self.registry.resolve(raw_event.token)
            if entry is None:
                _logger.debug(
                    "Dropping event of unknown token %d.", raw_event.token
                )
                continue
            flags = raw_event.flags & entry.flags
            if not flags:
                continue
            try:
                self.dispatch(entry.path, flags)
            except Exception:  # pylint: disable=broad-except
                _logger.exception(
                    "Unable to dispatch events of %s.", entry.path
                )
