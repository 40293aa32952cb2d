#!/usr/bin/env python3
"""
.. automodule:: pathqueue.phill.appdirs
"""
