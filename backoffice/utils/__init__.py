"""Utility modules."""
from .transaction import TransactionContext
from .startup_check import validate_environment, get_missing_vars, get_invalid_settings

__all__ = [
    "TransactionContext",
    "validate_environment",
    "get_missing_vars",
    "get_invalid_settings",
]
