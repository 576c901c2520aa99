"""Helper modules for PortReconciler."""

from .port_discovery import find_port_owners
from .port_terminator import terminate_port_owner
from .types import PortOwner, ReclaimReport

__all__ = ["PortOwner", "ReclaimReport", "find_port_owners", "terminate_port_owner"]
