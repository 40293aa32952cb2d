#!/usr/bin/env python3
"""
--------------
Watch registry
--------------
"""

# Standard libraries.
import collections.abc
import dataclasses
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

HandleFactory = collections.abc.Callable[[], pathqueue.kernel.Handle]
PathType = typing.Union[str, os.PathLike[str]]


@dataclasses.dataclass(frozen=True)
class Entry:
    """A watched path and the kernel resources watching it."""

    path: str
    flags: pathqueue.event.Event
    watch: pathqueue.kernel.Watch

    @property
    def descriptor(self) -> int:
        return self.watch.descriptor

    @property
    def token(self) -> int:
        return self.watch.token


class Registry:
    """
    Thread-safe mapping of paths to their :class:`Entry`.

    The kernel handle is opened on the first :meth:`add`
    and kept until :meth:`close`.
    Entries are indexed by path and by token,
    and both indices change together under a single lock.
    That lock is also taken by :meth:`resolve`
    so that a monitor thread never sees a half removed entry.
    """

    class Closed(RuntimeError):
        """The registry was closed and cannot watch anymore."""

    def __init__(
        self,
        *args: typing.Any,
        handle_factory: HandleFactory = pathqueue.kernel.open_handle,
        **kwargs: typing.Any,
    ) -> None:
        # TODO[mypy issue 4001]: Remove type ignore.
        super().__init__(*args, **kwargs)  # type: ignore[call-arg]
        self._closed = False
        self._entries: dict[str, Entry] = {}
        self._entries_by_token: dict[int, Entry] = {}
        self._handle: typing.Optional[pathqueue.kernel.Handle] = None
        self._handle_factory = handle_factory
        self._lock = threading.Lock()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        with self._lock:
            return os.fspath(path) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def handle(self) -> typing.Optional[pathqueue.kernel.Handle]:
        """The kernel handle, if a path was ever added."""
        return self._handle

    @property
    def closed(self) -> bool:
        return self._closed

    def count(self) -> int:
        return len(self)

    def add(
        self,
        path: PathType,
        flags: pathqueue.event.Event = pathqueue.event.Event.ALL,
    ) -> bool:
        """
        Start watching ``path`` for ``flags`` changes.

        :returns:
            Whether a new entry was created.
            Nothing is done if ``path`` is already watched,
            even if ``flags`` differ from the existing entry.
        :raises Registry.Closed: If :meth:`close` was called.

        Failing to open ``path`` is not an error.
        It is logged and no entry is created.
        Running out of file descriptors is a common cause.
        """
        path = os.fspath(path)
        flags = pathqueue.event.Event(flags & pathqueue.event.Event.ALL)
        if not flags:
            _logger.debug("Not watching %s for no events.", path)
            return False
        with self._lock:
            if self._closed:
                raise self.Closed("Unable to add path: " + path)
            entry = self._entries.get(path)
            if entry is not None:
                if entry.flags != flags:
                    _logger.debug(
                        "Path %s already watched for %r. Ignoring %r.",
                        path,
                        entry.flags,
                        flags,
                    )
                return False
            try:
                handle = self._open_handle()
                watch = handle.watch(path, flags)
            except OSError as error:
                _logger.warning(
                    "Unable to watch path %s."
                    " The process may have hit its open file"
                    " descriptor limit. %s",
                    path,
                    error,
                )
                return False
            entry = Entry(path=path, flags=flags, watch=watch)
            self._entries[path] = entry
            self._entries_by_token[entry.token] = entry
        _logger.debug("Watching %s with token %d.", path, entry.token)
        return True

    def remove(self, path: PathType) -> bool:
        """
        Stop watching ``path``.

        :returns: Whether ``path`` was being watched.
        """
        path = os.fspath(path)
        with self._lock:
            entry = self._entries.get(path)
            if entry is None:
                return False
            self._discard(entry)
        _logger.debug("Stopped watching %s.", path)
        return True

    def remove_all(self) -> None:
        with self._lock:
            for entry in list(self._entries.values()):
                self._discard(entry)

    def resolve(self, token: int) -> typing.Optional[Entry]:
        """The entry reporting events with ``token``, if still watched."""
        with self._lock:
            return self._entries_by_token.get(token)

    def paths(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def close(self) -> None:
        """Stop watching all paths, and close the kernel handle."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for entry in list(self._entries.values()):
                self._discard(entry)
            handle = self._handle
            if handle is not None:
                handle.close()
        _logger.debug("Registry closed.")

    def _open_handle(self) -> pathqueue.kernel.Handle:
        """Lock must be held."""
        handle = self._handle
        if handle is None:
            handle = self._handle = self._handle_factory()
        return handle

    def _discard(self, entry: Entry) -> None:
        """Lock must be held."""
        handle = self._handle
        assert handle is not None
        try:
            handle.unwatch(entry.watch)
        except (OSError, pathqueue.kernel.HandleClosed) as error:
            _logger.debug(
                "Unable to unregister %s from kernel: %s",
                entry.path,
                error,
            )
        finally:
            handle.release(entry.watch)
            del self._entries[entry.path]
            del self._entries_by_token[entry.token]
