"""Terminal interface using Blessed for display and Curtsies for input."""

import logging
import blessed
from typing import Optional
import sys
import select

from .constants import EditorConstants
from .view import Frame

logger = logging.getLogger(__name__)


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._curtsies_input: Optional[object] = None
        # Virtual screen state for minimal updates
        self._last_rows: list[str] | None = None
        self._last_status: str | None = None

    def setup(self):
        """Enter fullscreen mode and prepare terminal."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            from curtsies import Input
            # Entering the context puts the tty in raw mode
            self._curtsies_input = Input(keynames='curtsies')
            self._curtsies_input.__enter__()

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self._curtsies_input is not None:
            try:
                self._curtsies_input.__exit__(None, None, None)
            except OSError as e:
                logger.warning("Could not restore terminal mode: %s", e)
            finally:
                self._curtsies_input = None
        if self.is_fullscreen:
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False

    def invalidate_frame(self) -> None:
        """Forget the last frame so the next draw repaints everything."""
        self._last_rows = None
        self._last_status = None

    def compose_rows(self, frame: Frame) -> list[str]:
        """Lay out the text area of a frame as exactly frame.num_rows rows."""
        width = self.width
        rows = []
        for y in range(frame.num_rows):
            if y < len(frame.lines):
                # Tabs count as one column in the buffer
                text = frame.lines[y].replace('\t', ' ')
            elif frame.banner and y == frame.num_rows // 2:
                padding = max(0, (width - len(frame.banner)) // 2 - 1)
                text = EditorConstants.EMPTY_ROW_MARKER + " " * padding + frame.banner
            else:
                text = EditorConstants.EMPTY_ROW_MARKER
            rows.append(text[:width].ljust(width))
        return rows

    def compose_status(self, frame: Frame) -> str:
        """Status bar text: the message when there is one, else the position line."""
        width = self.width
        if frame.message:
            text = f" {frame.message}"
        else:
            help_text = EditorConstants.HELP_MESSAGE
            text = f" {frame.status}"
            gap = width - len(text) - len(help_text) - 1
            if gap > 0:
                text = text + " " * gap + help_text
        return text[:width].ljust(width)

    def update_frame(self, frame: Frame, prompt: Optional[str] = None) -> None:
        """Diff against last frame and write only changes.

        Falls back to a full clear on first paint or when the geometry changes.
        With a prompt, the status bar shows it and the cursor sits at its end.
        """
        rows = self.compose_rows(frame)
        if self._last_rows is None or len(self._last_rows) != len(rows) or \
                any(len(old) != len(new) for old, new in zip(self._last_rows, rows)):
            print(self.term.home + self.term.clear, end='')
            self._last_rows = ["" for _ in rows]
            self._last_status = None

        for y, text in enumerate(rows):
            if text != self._last_rows[y]:
                print(self.term.move(y, 0) + text, end='')
                self._last_rows[y] = text

        if prompt is not None:
            status = f" {prompt}"[:self.width].ljust(self.width)
        else:
            status = self.compose_status(frame)
        if status != self._last_status:
            print(self.term.move(self.term.height - 1, 0) + self.term.reverse + status + self.term.normal,
                  end='')
            self._last_status = status

        if prompt is not None:
            print(self.term.move(self.term.height - 1, min(len(prompt) + 1, self.width - 1))
                  + self.term.normal_cursor, end='', flush=True)
        else:
            print(self.term.move(frame.cursor_y, frame.cursor_x) + self.term.normal_cursor, end='', flush=True)

    def get_key(self, timeout=None):
        """Get a single keypress from the user.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The curtsies key name, or None if nothing arrived in time.
        """
        if self._curtsies_input is None:
            return None
        if timeout is None:
            return str(next(self._curtsies_input))
        r, _, _ = select.select([sys.stdin], [], [], float(timeout))
        if not r:
            return None
        return str(next(self._curtsies_input))

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows (excluding status line)."""
        return self.term.height - EditorConstants.STATUS_LINES
