#!/usr/bin/env python3
"""
-----------------------------------
Application directories as paths
-----------------------------------
"""

# Standard library.
import importlib.machinery
import importlib.metadata
import pathlib
import typing

# External dependencies.
import appdirs


def from_module_spec(
    module_spec: importlib.machinery.ModuleSpec,
) -> appdirs.AppDirs:
    """
    Directories named after the distribution providing a module.

    Falls back to the top-level package name
    if the distribution is not installed.
    """
    distribution_name = module_spec.name.partition(".")[0]
    try:
        distribution = importlib.metadata.distribution(distribution_name)
    except importlib.metadata.PackageNotFoundError:
        return appdirs.AppDirs(appname=distribution_name)
    return appdirs.AppDirs(appname=distribution.metadata["Name"])


class AppPaths(appdirs.AppDirs):

    __Self = typing.TypeVar("__Self", bound="AppPaths")

    @classmethod
    def from_app_dirs(
        cls: typing.Type[__Self],
        app_dirs: appdirs.AppDirs,
    ) -> __Self:
        return cls(
            appname=app_dirs.appname,
            appauthor=app_dirs.appauthor,
            version=app_dirs.version,
            roaming=app_dirs.roaming,
            multipath=app_dirs.multipath,
        )

    @classmethod
    def from_module_spec(
        cls: typing.Type[__Self],
        module_spec: importlib.machinery.ModuleSpec,
    ) -> __Self:
        app_dirs = from_module_spec(module_spec)
        return cls.from_app_dirs(app_dirs)

    @property
    def user_config(self) -> pathlib.Path:
        return pathlib.Path(self.user_config_dir)
