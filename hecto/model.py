"""Text buffer model: positions, lines and the buffer that owns them."""

import errno
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Iterator, Optional

from .constants import EditorConstants

logger = logging.getLogger(__name__)


@dataclass
class Position:
    x: int = 0
    y: int = 0


class DocumentError(Exception):
    """Base class for recoverable load/save failures."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class DocumentIOError(DocumentError):
    """The file could not be read or written."""

    @classmethod
    def from_os_error(cls, action: str, path: str, error: OSError) -> "DocumentIOError":
        if isinstance(error, PermissionError):
            message = f"Error: Permission denied {action} {path}"
        elif error.errno == errno.ENOSPC:
            message = "Error: No space left on device"
        elif isinstance(error, IsADirectoryError):
            message = f"Error: {path} is a directory"
        else:
            message = f"Error: Failed {action} {path}: {error.strerror or error}"
        return cls(message, path)


class DocumentDecodeError(DocumentError):
    """The file exists but is not valid UTF-8."""


class Line:
    """A single row of text.

    The content is kept as a ``str`` so columns are codepoint indices. The
    length is cached and refreshed after every mutation. Each mutation
    rebuilds the string, which is fine for lines about as wide as a
    terminal.
    """

    __slots__ = ("_data", "_length")

    def __init__(self, data: str = ""):
        self._data = data
        self._length = len(data)

    @property
    def data(self) -> str:
        return self._data

    def length(self) -> int:
        return self._length

    def render(self, start: int, end: int) -> str:
        """Return the text between start and end, clamped to the line.

        Out-of-range or inverted bounds give an empty string.
        """
        end = min(max(end, 0), self._length)
        start = min(max(start, 0), end)
        return self._data[start:end]

    def insert(self, col: int, ch: str) -> None:
        if len(ch) != 1:
            raise ValueError(f"expected a single character, got {ch!r}")
        if not 0 <= col <= self._length:
            raise IndexError(f"insert column {col} outside line of length {self._length}")
        self._data = self._data[:col] + ch + self._data[col:]
        self._update_length()

    def delete(self, col: int) -> None:
        if not 0 <= col < self._length:
            raise IndexError(f"delete column {col} outside line of length {self._length}")
        self._data = self._data[:col] + self._data[col + 1:]
        self._update_length()

    def append(self, other: "Line") -> None:
        self._data = self._data + other.data
        self._update_length()

    def split(self, col: int) -> tuple["Line", "Line"]:
        """Return the halves before and after col as new lines."""
        if not 0 <= col <= self._length:
            raise IndexError(f"split column {col} outside line of length {self._length}")
        return Line(self._data[:col]), Line(self._data[col:])

    def _update_length(self) -> None:
        self._length = len(self._data)

    def __len__(self) -> int:
        return self._length

    def __str__(self) -> str:
        return self._data

    def __repr__(self) -> str:
        return f"Line({self._data!r})"

    def __eq__(self, other):
        if not isinstance(other, Line):
            return NotImplemented
        return self._data == other.data


class Buffer:
    """An ordered list of lines backed by an optional file.

    An empty file is zero lines. The row just past the last line is the
    synthetic end-of-buffer row: the cursor may sit there, and typing there
    materializes a real line.
    """

    def __init__(self, lines: Optional[list[Line]] = None, filename: Optional[str] = None):
        self._lines: list[Line] = list(lines) if lines else []
        self.filename = filename
        self.modified = False

    @classmethod
    def from_text(cls, text: str, filename: Optional[str] = None) -> "Buffer":
        segments = text.split("\n")
        # A final terminator does not start another line
        if segments and segments[-1] == "":
            segments.pop()
        lines = [Line(seg[:-1] if seg.endswith("\r") else seg) for seg in segments]
        return cls(lines, filename=filename)

    @classmethod
    def open(cls, path: str) -> "Buffer":
        """Load a file into a new buffer.

        A path that does not exist yet gives an empty buffer with that
        name. Raises DocumentIOError if the file exists but cannot be read,
        and DocumentDecodeError if it is not valid UTF-8.
        """
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except FileNotFoundError:
            logger.info("New file %s", path)
            return cls(filename=path)
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            raise DocumentIOError.from_os_error("reading", path, e) from e

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Could not decode %s: %s", path, e)
            raise DocumentDecodeError(f"Error: {path} is not valid UTF-8", path) from e

        buffer = cls.from_text(text, filename=path)
        logger.info("Opened %s (%d lines)", path, buffer.line_count())
        return buffer

    def line(self, y: int) -> Optional[Line]:
        if 0 <= y < len(self._lines):
            return self._lines[y]
        return None

    def line_count(self) -> int:
        return len(self._lines)

    def line_length(self, y: int) -> int:
        """Length of row y, with 0 for the synthetic end-of-buffer row."""
        line = self.line(y)
        return line.length() if line is not None else 0

    def is_empty(self) -> bool:
        return not self._lines

    def is_modified(self) -> bool:
        return self.modified

    def contents(self) -> list[str]:
        return [line.data for line in self._lines]

    def __iter__(self) -> Iterator[Line]:
        return iter(self._lines)

    def insert(self, pos: Position, ch: str) -> None:
        if ch == "\n":
            self.split_line(pos)
            return
        self._check_row(pos.y)
        if pos.y == len(self._lines):
            line = Line()
            line.insert(pos.x, ch)
            self._lines.append(line)
        else:
            self._lines[pos.y].insert(pos.x, ch)
        self.modified = True

    def split_line(self, pos: Position) -> None:
        self._check_row(pos.y)
        if pos.y == len(self._lines):
            # Enter on the end-of-buffer row adds an empty line
            self._lines.append(Line())
        else:
            before, after = self._lines[pos.y].split(pos.x)
            self._lines[pos.y:pos.y + 1] = [before, after]
        self.modified = True

    def delete(self, pos: Position) -> bool:
        """Delete the character at pos, joining with the next line at end of line.

        Does nothing on the end-of-buffer row or at the end of the last line.
        Returns True if the buffer changed.
        """
        line = self.line(pos.y)
        if line is None:
            return False
        if pos.x < line.length():
            line.delete(pos.x)
        elif pos.y + 1 < len(self._lines):
            line.append(self._lines.pop(pos.y + 1))
        else:
            return False
        self.modified = True
        return True

    def save(self, destination: Optional[str] = None) -> None:
        """Write every line followed by a newline, atomically.

        On success the buffer takes the destination as its filename and is
        no longer modified. On failure raises DocumentIOError and leaves the
        modified flag alone.
        """
        filename = destination or self.filename
        if not filename:
            raise DocumentIOError("Error: No file name")

        dir_name = os.path.dirname(filename) or "."
        temp_filename = None
        try:
            with tempfile.NamedTemporaryFile(mode="w", encoding="utf-8", newline="\n",
                                             dir=dir_name,
                                             prefix=EditorConstants.ATOMIC_SAVE_PREFIX,
                                             suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
                                             delete=False) as temp_file:
                temp_filename = temp_file.name
                for line in self._lines:
                    temp_file.write(line.data)
                    temp_file.write("\n")
                temp_file.flush()
                os.fsync(temp_file.fileno())
            if os.path.exists(filename):
                try:
                    shutil.copymode(filename, temp_filename)
                except OSError as mode_error:
                    logger.debug("Could not copy mode of %s: %s", filename, mode_error)
            os.replace(temp_filename, filename)
        except OSError as e:
            logger.warning("Could not save %s: %s", filename, e)
            if temp_filename and os.path.exists(temp_filename):
                try:
                    os.remove(temp_filename)
                except OSError:
                    logger.debug("Could not remove %s", temp_filename)
            raise DocumentIOError.from_os_error("saving", filename, e) from e

        self.filename = filename
        self.modified = False
        logger.info("Saved %s (%d lines)", filename, len(self._lines))

    def _check_row(self, y: int) -> None:
        if not 0 <= y <= len(self._lines):
            raise IndexError(f"row {y} outside buffer of {len(self._lines)} lines")
