"""
Editing hosts.

HostEditor is the contract the lifecycle controller drives; MemoryHost
and ConsoleHost are the two hosts shipped with ordo.
"""

from ordo.host.base import HostEditor
from ordo.host.console import ConsoleHost
from ordo.host.memory import MemoryHost

__all__ = ["HostEditor", "ConsoleHost", "MemoryHost"]
