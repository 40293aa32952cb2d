#!/usr/bin/env python3
"""
------------
Test helpers
------------
"""

# Standard libraries.
import datetime
import errno
import itertools
import pathlib
import queue
import tempfile
import threading
import typing
import unittest
import unittest.mock

# Internal packages.
import pathqueue.event
import pathqueue.kernel


class UsesTemporaryDirectory(unittest.TestCase):
    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        super().__init__(*args, **kwargs)
        self.temporary_directory: pathlib.Path

    def setUp(self) -> None:
        super().setUp()
        directory = (  # pylint: disable=consider-using-with
            tempfile.TemporaryDirectory()
        )
        self.addCleanup(directory.cleanup)
        self.temporary_directory = pathlib.Path(directory.name)


class ThreadedMock(unittest.mock.Mock):
    """
    A mock object to be called in a different thread.

    Example::

        callee = ThreadedMock()
        call_thread = threading.Thread(target=callee, args=(42,))
        call_thread.start()
        callee.assert_called_with_soon(42)
        call_thread.join()
    """

    def __init__(
        self,
        *args: typing.Any,
        timeout: datetime.timedelta = datetime.timedelta(seconds=2),
        **kwargs: typing.Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._call_found = threading.Event()
        """Set when an :data:`_expected_call` had been found."""
        self._expected_call: typing.Optional[typing.Any] = None
        self._mock_lock = threading.Lock()
        """Guards against changes to :data:`_expected_call`."""
        self.timeout = timeout
        """Timeout duration when `self` is waiting to be called."""

    def __call__(self, *args: typing.Any, **kwargs: typing.Any) -> typing.Any:
        return_value = super().__call__(*args, **kwargs)
        new_call = unittest.mock.call(*args, **kwargs)
        with self._mock_lock:
            expected_call = self._expected_call
            if (expected_call is None) or (new_call == expected_call):
                self._call_found.set()
        return return_value

    def assert_called_with_soon(
        self, *args: typing.Any, **kwargs: typing.Any
    ) -> None:
        """
        Wait for this mock to be called with the given arguments.

        Calls with other arguments before then are allowed.
        Use :meth:`~unittest.mock.Mock.reset_mock` beforehand
        to ignore calls already made.
        """
        with self._mock_lock:
            self._expected_call = unittest.mock.call(*args, **kwargs)
            self._call_found.clear()
            if self._expected_call in self.call_args_list:
                self._call_found.set()
        was_call_found = self._call_found.wait(self.timeout.total_seconds())
        with self._mock_lock:
            # Fail with the usual assertion message.
            if not was_call_found:
                self.assert_called_with(*args, **kwargs)
            self._expected_call = None
            self._call_found.clear()

    def assert_called_soon(self) -> None:
        """Wait for this mock to be called."""
        was_call_found = self._call_found.wait(self.timeout.total_seconds())
        with self._mock_lock:
            if not was_call_found:
                self.assert_called()
            self._call_found.clear()


class SyntheticHandle(pathqueue.kernel.Handle):
    """
    Kernel handle whose events are injected by tests.

    Descriptors and tokens are counted separately,
    so that tests notice if one is used in place of the other.
    """

    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        super().__init__(*args, **kwargs)
        self._descriptors = itertools.count(100)
        self._events = queue.SimpleQueue[
            typing.Optional[pathqueue.kernel.RawEvent]
        ]()
        self._lock = threading.Lock()
        """Guards watch bookkeeping shared with test threads."""
        self._tokens = itertools.count(1)
        self.failing_paths: set[str] = set()
        """Paths that fail to open, as if out of descriptors."""
        self.open_descriptors: set[int] = set()
        self.poll_error: typing.Optional[OSError] = None
        """Raised by the next :meth:`poll`, once."""
        self.unwatch_error: typing.Optional[OSError] = None
        """Raised by every :meth:`unwatch` while set."""
        self.watches: dict[int, str] = {}
        """Path of every watched token."""

    def watch(
        self, path: str, flags: pathqueue.event.Event
    ) -> pathqueue.kernel.Watch:
        del flags
        self._check_open()
        if path in self.failing_paths:
            raise OSError(errno.EMFILE, "Too many open files", path)
        watch = pathqueue.kernel.Watch(
            descriptor=next(self._descriptors), token=next(self._tokens)
        )
        with self._lock:
            self.open_descriptors.add(watch.descriptor)
            self.watches[watch.token] = path
        return watch

    def unwatch(self, watch: pathqueue.kernel.Watch) -> None:
        self._check_open()
        if self.unwatch_error is not None:
            raise self.unwatch_error

    def release(self, watch: pathqueue.kernel.Watch) -> None:
        with self._lock:
            self.open_descriptors.discard(watch.descriptor)
            self.watches.pop(watch.token, None)

    def inject(self, token: int, flags: pathqueue.event.Event) -> None:
        self._events.put(pathqueue.kernel.RawEvent(token=token, flags=flags))

    def inject_path(self, path: str, flags: pathqueue.event.Event) -> None:
        """
        Report ``flags`` for every token watching ``path``.

        :raises KeyError: If ``path`` is not watched.
        """
        with self._lock:
            tokens = [
                token
                for token, watched_path in self.watches.items()
                if watched_path == path
            ]
        if not tokens:
            raise KeyError(path)
        for token in tokens:
            self.inject(token, flags)

    def poll(
        self, timeout: datetime.timedelta
    ) -> list[pathqueue.kernel.RawEvent]:
        self._check_open()
        poll_error, self.poll_error = self.poll_error, None
        if poll_error is not None:
            raise poll_error
        try:
            raw_event = self._events.get(timeout=timeout.total_seconds())
        except queue.Empty:
            return []
        raw_events: list[pathqueue.kernel.RawEvent] = []
        while raw_event is not None:
            raw_events.append(raw_event)
            try:
                raw_event = self._events.get_nowait()
            except queue.Empty:
                break
        self._check_open()
        return raw_events

    def close(self) -> None:
        super().close()
        # Wakes up a pending poll.
        self._events.put(None)
