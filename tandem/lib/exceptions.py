"""
Custom exception hierarchy for Tandem.

Provides structured exception types for the weekly rhythm engine:
- Configuration failures
- Store (repository) I/O failures, reported to the user as transient messages
- Contract violations for programmer errors (rejected loudly, never coerced)

All exceptions inherit from TandemException, enabling catch-all for
Tandem-specific errors while keeping the ability to catch specific types.
"""

from __future__ import annotations


class TandemException(Exception):
    """Base exception for all Tandem errors."""


class ConfigurationError(TandemException):
    """Missing or invalid environment configuration."""


class ContractViolation(TandemException, ValueError):
    """Programmer error: a value outside a closed set or a malformed identifier.

    Subclasses ValueError so parsing helpers behave like the stdlib parsers.
    """


class StoreError(TandemException):
    """Task/week/goal store failures (I/O error during create/update/delete)."""


class ProgressStoreError(StoreError):
    """Checkpoint persistence failures."""


class StateError(TandemException):
    """Wizard used in an invalid lifecycle state (not loaded, already closed)."""
