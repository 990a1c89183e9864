"""
Core module - Configuration, wire models and errors
"""

from .config import Config
from .exceptions import AdStudioError, ApiError, TransportError, WorkflowValidationError

__all__ = [
    'Config',
    'AdStudioError',
    'ApiError',
    'TransportError',
    'WorkflowValidationError',
]
