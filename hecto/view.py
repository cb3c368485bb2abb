"""Cursor and viewport tracking, and the per-frame projection of the buffer."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .constants import EditorConstants
from .model import Buffer, Position


class Direction(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"


@dataclass
class Frame:
    """Everything the terminal layer needs to draw one screen."""
    lines: list[str]
    cursor_x: int
    cursor_y: int
    status: str
    message: Optional[str] = None
    num_rows: int = 0
    banner: Optional[str] = None


def render_rows(buffer: Buffer, offset: Position, width: int, height: int) -> list[str]:
    """Return the visible slice of each buffer row in the viewport.

    Rows below the end of the buffer are left out.
    """
    rows = []
    for y in range(offset.y, offset.y + height):
        line = buffer.line(y)
        if line is None:
            break
        rows.append(line.render(offset.x, offset.x + width))
    return rows


class TerminalView:
    """Keeps the cursor inside the buffer and the viewport around the cursor.

    The buffer is only read here; edits go through the Buffer and are
    followed by a cursor move. Dimensions are supplied from outside on
    every frame since the terminal may be resized at any time.
    """

    def __init__(self, buffer: Buffer, num_columns: int = 80, num_rows: int = 24):
        self.buffer = buffer
        self.cursor = Position()
        self.offset = Position()
        self.num_columns = max(1, num_columns)
        self.num_rows = max(1, num_rows)

    def resize(self, width: int, height: int) -> None:
        self.num_columns = max(1, width)
        self.num_rows = max(1, height)
        self.reconcile_viewport()

    def set_buffer(self, buffer: Buffer) -> None:
        """Switch to a freshly loaded buffer, resetting cursor and scroll."""
        self.buffer = buffer
        self.cursor = Position()
        self.offset = Position()

    def move(self, direction: Direction) -> None:
        x, y = self.cursor.x, self.cursor.y
        line_count = self.buffer.line_count()

        if direction is Direction.UP:
            y = max(0, y - 1)
        elif direction is Direction.DOWN:
            y = min(line_count, y + 1)
        elif direction is Direction.LEFT:
            if x > 0:
                x -= 1
            elif y > 0:
                y -= 1
                x = self.buffer.line_length(y)
        elif direction is Direction.RIGHT:
            if x < self.buffer.line_length(y):
                x += 1
            elif y < line_count:
                y += 1
                x = 0
        elif direction is Direction.HOME:
            x = 0
        elif direction is Direction.END:
            x = self.buffer.line_length(y)
        elif direction is Direction.PAGE_UP:
            y = max(0, y - self.num_rows)
        elif direction is Direction.PAGE_DOWN:
            y = min(line_count, y + self.num_rows)

        # Vertical moves can land on a shorter line
        x = min(x, self.buffer.line_length(y))
        self.cursor = Position(x, y)
        self.reconcile_viewport()

    def clamp_cursor(self) -> None:
        y = min(self.cursor.y, self.buffer.line_count())
        x = min(self.cursor.x, self.buffer.line_length(y))
        self.cursor = Position(x, y)
        self.reconcile_viewport()

    def reconcile_viewport(self, width: Optional[int] = None, height: Optional[int] = None) -> None:
        """Scroll the least amount that keeps the cursor on screen."""
        if width is not None:
            self.num_columns = max(1, width)
        if height is not None:
            self.num_rows = max(1, height)

        if self.cursor.y < self.offset.y:
            self.offset.y = self.cursor.y
        elif self.cursor.y >= self.offset.y + self.num_rows:
            self.offset.y = self.cursor.y - self.num_rows + 1

        if self.cursor.x < self.offset.x:
            self.offset.x = self.cursor.x
        elif self.cursor.x >= self.offset.x + self.num_columns:
            self.offset.x = self.cursor.x - self.num_columns + 1

    def status_line(self) -> str:
        name = self.buffer.filename or EditorConstants.UNNAMED_BUFFER
        modified = " (modified)" if self.buffer.is_modified() else ""
        return (f"{name}{modified} - {self.buffer.line_count()} lines"
                f" | Ln {self.cursor.y + 1}, Col {self.cursor.x + 1}")

    def frame(self, status_message: Optional[str] = None, banner: Optional[str] = None) -> Frame:
        return Frame(
            lines=render_rows(self.buffer, self.offset, self.num_columns, self.num_rows),
            cursor_x=self.cursor.x - self.offset.x,
            cursor_y=self.cursor.y - self.offset.y,
            status=self.status_line(),
            message=status_message,
            num_rows=self.num_rows,
            banner=banner,
        )
