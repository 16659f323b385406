"""Test utilities for synthfs filesystems.

Drive a Filesystem in-process, without a host or transport::

    from synthfs.testing import TestHost
"""

from synthfs.testing.host import HostError, TestHost

__all__ = [
    "HostError",
    "TestHost",
]
