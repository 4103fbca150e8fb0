"""Tandem: the weekly rhythm engine (plan, execute, review, repeat) for two partners."""

__version__ = "0.1.0"
