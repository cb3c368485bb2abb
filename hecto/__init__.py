"""Hecto - a small terminal text editor."""

from .model import Buffer, Line, Position, DocumentError, DocumentIOError, DocumentDecodeError
from .view import Direction, Frame, TerminalView, render_rows

__all__ = [
    'Buffer',
    'Line',
    'Position',
    'DocumentError',
    'DocumentIOError',
    'DocumentDecodeError',
    'Direction',
    'Frame',
    'TerminalView',
    'render_rows',
]
