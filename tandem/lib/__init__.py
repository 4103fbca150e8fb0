"""
Lib package for Tandem.

Contains shared utilities:
- exceptions.py: Exception hierarchy
- errors.py: Transient message catalog with i18n
- logging.py: structlog setup
- debounce.py: Cancellable debounce timer for note persistence
- streams.py: Helpers for observed store streams
"""

from tandem.lib.exceptions import (
    ConfigurationError,
    ContractViolation,
    ProgressStoreError,
    StateError,
    StoreError,
    TandemException,
)

__all__ = [
    "ConfigurationError",
    "ContractViolation",
    "ProgressStoreError",
    "StateError",
    "StoreError",
    "TandemException",
]
