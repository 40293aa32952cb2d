#!/usr/bin/env python3
"""
.. automodule:: pathqueue.asyncio
.. automodule:: pathqueue.configuration
.. automodule:: pathqueue.dispatch
.. automodule:: pathqueue.event
.. automodule:: pathqueue.kernel
.. automodule:: pathqueue.monitor
.. automodule:: pathqueue.notification
.. automodule:: pathqueue.phill
.. automodule:: pathqueue.queue
.. automodule:: pathqueue.registry
.. automodule:: pathqueue.unittest
"""
