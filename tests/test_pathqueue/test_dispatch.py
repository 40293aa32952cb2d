#!/usr/bin/env python3

# Standard library.
import typing
import unittest
import unittest.mock

# Internal packages.
import pathqueue.dispatch
import pathqueue.event
import pathqueue.notification

Event = pathqueue.event.Event


class TestDispatcher(unittest.TestCase):
    def __init__(self, *args: typing.Any, **kwargs: typing.Any) -> None:
        super().__init__(*args, **kwargs)
        self.center: pathqueue.notification.Center
        self.delegate: unittest.mock.Mock
        self.dispatcher: pathqueue.dispatch.Dispatcher
        self.handler: unittest.mock.Mock
        self.source: object

    def setUp(self) -> None:
        super().setUp()
        self.center = pathqueue.notification.Center()
        self.handler = unittest.mock.Mock()
        self.center.subscribe(self.handler)
        self.delegate = unittest.mock.Mock()
        self.source = object()
        self.dispatcher = pathqueue.dispatch.Dispatcher(
            source=self.source, notification_center=self.center
        )

    def test_without_delegate_publishes_only(self) -> None:
        self.dispatcher.dispatch("a", Event.WRITE)
        self.handler.assert_called_once_with(
            "Write", {"source": self.source, "path": "a"}
        )

    def test_with_delegate_calls_delegate_only(self) -> None:
        self.dispatcher.delegate = self.delegate
        self.dispatcher.dispatch("a", Event.DELETE)
        self.delegate.on_event.assert_called_once_with(
            self.source, "Delete", "a"
        )
        self.handler.assert_not_called()

    def test_with_delegate_and_always_post_does_both(self) -> None:
        self.dispatcher.delegate = self.delegate
        self.dispatcher.always_post_notifications = True
        self.dispatcher.dispatch("a", Event.RENAME)
        self.delegate.on_event.assert_called_once_with(
            self.source, "Rename", "a"
        )
        self.handler.assert_called_once_with(
            "Rename", {"source": self.source, "path": "a"}
        )

    def test_multiple_flags_are_delivered_in_order(self) -> None:
        self.dispatcher.delegate = self.delegate
        self.dispatcher.dispatch("a", Event.SIZE_INCREASE | Event.WRITE)
        self.assertEqual(
            self.delegate.on_event.call_args_list,
            [
                unittest.mock.call(self.source, "Write", "a"),
                unittest.mock.call(self.source, "SizeIncrease", "a"),
            ],
        )

    def test_all_flags_publish_every_name(self) -> None:
        self.dispatcher.dispatch("a", Event.ALL)
        self.assertEqual(
            [call.args[0] for call in self.handler.call_args_list],
            list(pathqueue.event.notification_names),
        )

    def test_delegate_without_on_event_raises(self) -> None:
        self.dispatcher.delegate = typing.cast(
            pathqueue.event.Delegate, object()
        )
        with self.assertRaises(AttributeError):
            self.dispatcher.dispatch("a", Event.WRITE)

    def test_empty_flags_deliver_nothing(self) -> None:
        self.dispatcher.delegate = self.delegate
        self.dispatcher.always_post_notifications = True
        self.dispatcher.dispatch("a", Event(0))
        self.delegate.on_event.assert_not_called()
        self.handler.assert_not_called()

    def test_deliver_single_name(self) -> None:
        self.dispatcher.deliver("AccessRevocation", "a")
        self.handler.assert_called_once_with(
            "AccessRevocation", {"source": self.source, "path": "a"}
        )
