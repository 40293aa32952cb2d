#!/usr/bin/env python3

# Standard library.
import datetime
import os
import time
import typing
import unittest

# External dependencies.
import watchdog.utils.platform

# Internal packages.
import pathqueue.event
import pathqueue.kernel
import pathqueue.unittest

Event = pathqueue.event.Event


def collect(
    handle: pathqueue.kernel.Handle,
    token: int,
    expected: pathqueue.event.Event,
    timeout: datetime.timedelta = datetime.timedelta(seconds=2),
) -> pathqueue.event.Event:
    """Poll until ``expected`` flags are reported for ``token``."""
    flags = Event(0)
    deadline = time.monotonic() + timeout.total_seconds()
    while (flags & expected) != expected and time.monotonic() < deadline:
        for raw_event in handle.poll(datetime.timedelta(milliseconds=50)):
            if raw_event.token == token:
                flags |= raw_event.flags
    return flags


@unittest.skipUnless(
    watchdog.utils.platform.is_linux(), "Requires inotify."
)
class TestHandle(pathqueue.unittest.UsesTemporaryDirectory):
    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        super().__init__(*args, **kwargs)
        self.handle: pathqueue.kernel.Handle
        self.path: str

    def setUp(self) -> None:
        super().setUp()
        self.handle = pathqueue.kernel.open_handle("inotify")
        self.addCleanup(self.handle.close)
        self.path = str(self.temporary_directory / "a.txt")
        with open(self.path, "w", encoding="utf-8") as file:
            file.write("Initial.")

    def test_to_mask(self) -> None:
        # Only importable on Linux.
        # pylint: disable=import-outside-toplevel
        import inotify_simple
        import pathqueue.kernel.inotify

        flags = inotify_simple.flags
        self.assertEqual(
            pathqueue.kernel.inotify.to_mask(Event.WRITE | Event.DELETE),
            flags.MODIFY | flags.DELETE_SELF,
        )
        self.assertEqual(
            pathqueue.kernel.inotify.to_mask(Event.LINK_COUNT_CHANGED),
            flags.ATTRIB,
        )

    def test_watch_missing_path_raises(self) -> None:
        with self.assertRaises(OSError):
            self.handle.watch(
                str(self.temporary_directory / "missing"), Event.ALL
            )

    def test_write_with_growth(self) -> None:
        watch = self.handle.watch(self.path, Event.ALL)
        with open(self.path, "a", encoding="utf-8") as file:
            file.write(" Appended.")
        expected = Event.WRITE | Event.SIZE_INCREASE
        self.assertEqual(
            collect(self.handle, watch.token, expected) & expected,
            expected,
        )

    def test_attribute_change(self) -> None:
        watch = self.handle.watch(self.path, Event.ALL)
        os.chmod(self.path, 0o600)
        self.assertTrue(
            collect(self.handle, watch.token, Event.ATTRIBUTE_CHANGE)
            & Event.ATTRIBUTE_CHANGE
        )

    def test_link_count_changed(self) -> None:
        watch = self.handle.watch(self.path, Event.ALL)
        os.link(self.path, str(self.temporary_directory / "b.txt"))
        self.assertTrue(
            collect(self.handle, watch.token, Event.LINK_COUNT_CHANGED)
            & Event.LINK_COUNT_CHANGED
        )

    def test_rename(self) -> None:
        watch = self.handle.watch(self.path, Event.ALL)
        os.rename(self.path, str(self.temporary_directory / "b.txt"))
        self.assertTrue(
            collect(self.handle, watch.token, Event.RENAME) & Event.RENAME
        )

    def test_delete(self) -> None:
        watch = self.handle.watch(self.path, Event.ALL)
        os.remove(self.path)
        self.assertTrue(
            collect(self.handle, watch.token, Event.DELETE) & Event.DELETE
        )

    def test_same_inode_shares_descriptor(self) -> None:
        other_path = str(self.temporary_directory / "b.txt")
        os.link(self.path, other_path)
        watch = self.handle.watch(self.path, Event.ALL)
        other_watch = self.handle.watch(other_path, Event.ALL)
        self.assertEqual(watch.descriptor, other_watch.descriptor)
        self.assertNotEqual(watch.token, other_watch.token)
        # Still watched through the other registration.
        self.handle.unwatch(watch)
        self.handle.release(watch)
        with open(other_path, "a", encoding="utf-8") as file:
            file.write(" Appended.")
        self.assertTrue(
            collect(self.handle, other_watch.token, Event.WRITE)
            & Event.WRITE
        )

    def test_poll_after_close_raises(self) -> None:
        self.handle.close()
        with self.assertRaises(pathqueue.kernel.HandleClosed):
            self.handle.poll(datetime.timedelta(milliseconds=10))
