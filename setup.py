#!/usr/bin/env python3

# Standard libraries.
import setuptools  # type: ignore


setuptools.setup(
    name="pathqueue",
    version="0.0.1",
    description="Kernel file change notification queue",
    author="Boni Lindsley",
    author_email="boni.lindsley@gmail.com",
    package_dir={
        "": "src",
        "test_pathqueue": "tests/test_pathqueue",
    },
    packages=setuptools.find_packages(where="src"),
    license="MIT",
    install_requires=[
        "appdirs >= 1.4.4",
        "inotify_simple >= 1.3.5; sys_platform == 'linux'",
        "pydantic >= 2.0",
        "pydantic-settings >= 2.0",
        "watchdog >= 2.1.6",
    ],
    extras_require={
        "dev": [
            "black >= 21.9b0",
            "coverage[toml] >= 6.0.2",
            "mypy >= 0.910",
            "pytest >= 6.2.5",
            "Sphinx >= 4.2.0",
            "tox >= 3.24.4",
        ],
        "test": [
            "pytest >= 6.2.5",
        ],
    },
    python_requires=">= 3.9",
)
