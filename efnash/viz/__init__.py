"""Visualization module."""

from .profile import ProfileDisplay, display_solutions

__all__ = [
    "ProfileDisplay",
    "display_solutions",
]
