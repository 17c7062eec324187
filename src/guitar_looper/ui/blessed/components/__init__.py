"""Rendering components for the blessed UI."""

from .dashboard import create_progress_bar, render_dashboard
from .panels import render_footer, render_panel

__all__ = [
    "create_progress_bar",
    "render_dashboard",
    "render_footer",
    "render_panel",
]
