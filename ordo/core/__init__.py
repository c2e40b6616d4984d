"""
Core module - configuration, logging, document state and the lifecycle controller.
"""

from ordo.core.config import OrdoConfig
from ordo.core.logging import get_secure_logger, SecureLogFilter

__all__ = ["OrdoConfig", "get_secure_logger", "SecureLogFilter"]
