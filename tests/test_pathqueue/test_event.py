#!/usr/bin/env python3

# Standard library.
import unittest

# Internal packages.
import pathqueue.event

Event = pathqueue.event.Event


class TestEvent(unittest.TestCase):
    def test_values_match_vnode_filter_flags(self) -> None:
        self.assertEqual(Event.DELETE, 0x01)
        self.assertEqual(Event.WRITE, 0x02)
        self.assertEqual(Event.SIZE_INCREASE, 0x04)
        self.assertEqual(Event.ATTRIBUTE_CHANGE, 0x08)
        self.assertEqual(Event.LINK_COUNT_CHANGED, 0x10)
        self.assertEqual(Event.RENAME, 0x20)
        self.assertEqual(Event.ACCESS_REVOCATION, 0x40)

    def test_all_is_union_of_kinds(self) -> None:
        union = Event(0)
        for kind in pathqueue.event.dispatch_order:
            union |= kind
        self.assertEqual(union, Event.ALL)

    def test_notification_name(self) -> None:
        self.assertEqual(Event.WRITE.notification_name, "Write")
        self.assertEqual(
            Event.LINK_COUNT_CHANGED.notification_name, "LinkCountChanged"
        )

    def test_notification_name_raises_if_not_single_kind(self) -> None:
        with self.assertRaises(KeyError):
            _ = (Event.WRITE | Event.DELETE).notification_name


class TestDispatchOrder(unittest.TestCase):
    def test_order(self) -> None:
        self.assertEqual(
            pathqueue.event.notification_names,
            (
                "Rename",
                "Write",
                "Delete",
                "AttributeChange",
                "SizeIncrease",
                "LinkCountChanged",
                "AccessRevocation",
            ),
        )


class TestSplit(unittest.TestCase):
    def test_uses_dispatch_order(self) -> None:
        self.assertEqual(
            pathqueue.event.split(
                Event.SIZE_INCREASE | Event.RENAME | Event.WRITE
            ),
            [Event.RENAME, Event.WRITE, Event.SIZE_INCREASE],
        )

    def test_empty_flags(self) -> None:
        self.assertEqual(pathqueue.event.split(Event(0)), [])


class TestToNames(unittest.TestCase):
    def test_write_and_size_increase(self) -> None:
        self.assertEqual(
            pathqueue.event.to_names(Event.WRITE | Event.SIZE_INCREASE),
            ["Write", "SizeIncrease"],
        )

    def test_all(self) -> None:
        self.assertEqual(
            pathqueue.event.to_names(Event.ALL),
            list(pathqueue.event.notification_names),
        )


class TestDelegate(unittest.TestCase):
    class Recorder:
        def on_event(
            self, queue: object, event_name: str, path: str
        ) -> None:
            pass

    def test_can_be_satisfied_by_classes(self) -> None:
        _: pathqueue.event.Delegate = self.Recorder()
