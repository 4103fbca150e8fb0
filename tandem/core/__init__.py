"""
Core package for Tandem.

Exports:
    - week_calendar: ISO week identifiers and boundaries
    - SideEffect, SideEffectChannel: one-shot UI instructions
    - AuthContext: awaited authenticated identity
"""

from . import week_calendar
from .auth import AuthContext, AuthenticatedUser
from .side_effects import SideEffect, SideEffectChannel, SideEffectType

__all__ = [
    "AuthContext",
    "AuthenticatedUser",
    "SideEffect",
    "SideEffectChannel",
    "SideEffectType",
    "week_calendar",
]
