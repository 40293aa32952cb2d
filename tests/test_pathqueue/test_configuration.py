#!/usr/bin/env python3

# Standard library.
import datetime
import json
import os
import pathlib
import unittest
import unittest.mock

# External dependencies.
import pydantic

# Internal packages.
import pathqueue.configuration
import pathqueue.unittest


class TestEntries(unittest.TestCase):
    def test_default(self) -> None:
        with unittest.mock.patch.dict(os.environ, clear=True):
            entries = pathqueue.configuration.Entries()
        self.assertFalse(entries.always_post_notifications)
        self.assertEqual(entries.kernel_backend, "auto")
        self.assertEqual(
            entries.sleep_interval, datetime.timedelta(seconds=1)
        )
        self.assertIsInstance(entries.configuration_path, pathlib.Path)
        self.assertEqual(entries.configuration_path.name, "config.json")

    def test_reads_environment(self) -> None:
        with unittest.mock.patch.dict(
            os.environ,
            {
                "PATHQUEUE_ALWAYS_POST_NOTIFICATIONS": "true",
                "pathqueue_kernel_backend": "polling",
                "PATHQUEUE_SLEEP_INTERVAL": "PT2.5S",
            },
            clear=True,
        ):
            entries = pathqueue.configuration.Entries()
        self.assertTrue(entries.always_post_notifications)
        self.assertEqual(entries.kernel_backend, "polling")
        self.assertEqual(
            entries.sleep_interval, datetime.timedelta(seconds=2.5)
        )

    def test_rejects_unknown_backend(self) -> None:
        with self.assertRaises(pydantic.ValidationError):
            pathqueue.configuration.Entries(kernel_backend="epoll")


class TestLoad(pathqueue.unittest.UsesTemporaryDirectory):
    def test_without_file_uses_environment(self) -> None:
        configuration_path = self.temporary_directory / "config.json"
        with unittest.mock.patch.dict(
            os.environ,
            {"PATHQUEUE_CONFIGURATION_PATH": str(configuration_path)},
            clear=True,
        ):
            entries = pathqueue.configuration.load()
        self.assertEqual(entries.configuration_path, configuration_path)
        self.assertEqual(entries.kernel_backend, "auto")

    def test_reads_file(self) -> None:
        configuration_path = self.temporary_directory / "config.json"
        configuration_path.write_text(
            json.dumps(
                {"kernel_backend": "polling", "sleep_interval": 5}
            )
        )
        with unittest.mock.patch.dict(
            os.environ,
            {"PATHQUEUE_CONFIGURATION_PATH": str(configuration_path)},
            clear=True,
        ):
            entries = pathqueue.configuration.load()
        self.assertEqual(entries.kernel_backend, "polling")
        self.assertEqual(
            entries.sleep_interval, datetime.timedelta(seconds=5)
        )

    def test_invalid_file_raises(self) -> None:
        configuration_path = self.temporary_directory / "config.json"
        configuration_path.write_text(
            json.dumps({"kernel_backend": "epoll"})
        )
        with unittest.mock.patch.dict(
            os.environ,
            {"PATHQUEUE_CONFIGURATION_PATH": str(configuration_path)},
            clear=True,
        ):
            with self.assertRaises(pydantic.ValidationError):
                pathqueue.configuration.load()
