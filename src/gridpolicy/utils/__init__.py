"""Utility modules for the gridpolicy simulation core.

This module provides domain enumerations, type aliases, error types and the
shared logger used across the energy-policy simulation.
"""

from . import enums, errors, types

__all__ = ["enums", "errors", "types"]
