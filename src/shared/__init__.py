"""Shared utilities and helpers."""
from shared.progress import ConsoleProgress, set_progress_callback

__all__ = [
    'ConsoleProgress',
    'set_progress_callback',
]
