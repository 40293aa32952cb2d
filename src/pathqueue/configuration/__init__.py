#!/usr/bin/env python3
"""
------------------------
Configuration management
------------------------

Entries are read from environment variables prefixed with ``PATHQUEUE_``,
and then from a JSON file at :attr:`Entries.configuration_path`
if it exists.
"""

# Standard library.
import datetime
import logging
import pathlib
import typing

# External dependencies.
import pydantic_settings

# Internal modules.
import pathqueue.phill.appdirs

# TODO[mypy issue #1422]: __loader__ not defined
_loader_name: str = __loader__.name  # type: ignore[name-defined]
_logger = logging.getLogger(_loader_name)

# TODO[mypy issue 4145]: Missing global `__spec__` in stub.
_app_paths = pathqueue.phill.appdirs.AppPaths.from_module_spec(
    __spec__  # type: ignore[name-defined]
)

KernelBackend = typing.Literal["auto", "inotify", "kqueue", "polling"]


class Entries(pydantic_settings.BaseSettings):
    configuration_path: pathlib.Path = (
        _app_paths.user_config / "config.json"
    )
    always_post_notifications: bool = False
    kernel_backend: KernelBackend = "auto"
    sleep_interval: datetime.timedelta = datetime.timedelta(seconds=1)

    model_config = pydantic_settings.SettingsConfigDict(
        case_sensitive=False,
        env_prefix="PATHQUEUE_",
        extra="allow",
    )


def load() -> Entries:
    """
    Entries from the environment, replaced by the configuration file.

    :raises pydantic.ValidationError:
        If the configuration file has invalid entries.
    """
    settings = Entries()
    configuration_path = settings.configuration_path
    if configuration_path.exists():
        _logger.debug("Loading configuration from %s.", configuration_path)
        settings = Entries.model_validate_json(
            configuration_path.read_text()
        )
    return settings
