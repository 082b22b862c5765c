"""Rendering layer: formats sessions and traces for display."""

from phasegate.visualization.console import (
    format_timeline,
    print_error,
    render_roles,
    render_snapshot,
    render_trace,
)

__all__ = [
    "format_timeline",
    "print_error",
    "render_roles",
    "render_snapshot",
    "render_trace",
]
