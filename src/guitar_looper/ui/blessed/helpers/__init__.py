"""Blessed UI helper functions."""

from .terminal import write_lines

__all__ = ["write_lines"]
