"""Command pattern implementation for editor actions.

The edit helpers at the top of the module combine a buffer mutation with
the cursor move that follows it, so the cursor always ends up right after
the inserted text or at the deletion point.
"""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Optional, TYPE_CHECKING
from .keyboard import KeyType
from .model import Buffer
from .view import Direction, TerminalView

if TYPE_CHECKING:
    from .editor import Editor
    from .keyboard import KeyEvent


def insert_character(buffer: Buffer, view: TerminalView, ch: str) -> bool:
    """Insert ch at the cursor and step past it."""
    if ch == '\n':
        return insert_newline(buffer, view)
    buffer.insert(view.cursor, ch)
    view.move(Direction.RIGHT)
    return True


def insert_newline(buffer: Buffer, view: TerminalView) -> bool:
    """Split the line at the cursor and move to the start of the new line."""
    buffer.split_line(view.cursor)
    view.move(Direction.DOWN)
    view.move(Direction.HOME)
    return True


def delete_backward(buffer: Buffer, view: TerminalView) -> bool:
    """Delete the character before the cursor, joining lines at column 0."""
    if view.cursor.x == 0 and view.cursor.y == 0:
        return False
    view.move(Direction.LEFT)
    return buffer.delete(view.cursor)


def delete_forward(buffer: Buffer, view: TerminalView) -> bool:
    """Delete the character under the cursor; the cursor stays put."""
    changed = buffer.delete(view.cursor)
    view.clamp_cursor()
    return changed


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            key_event: The key event that triggered this command

        Returns:
            True if the command modified the buffer
        """
        pass


class MovementCommand(EditorCommand):
    """Moves the cursor in one direction."""

    def __init__(self, direction: Direction):
        self.direction = direction

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        editor.view.move(self.direction)
        return False


class EditCommand(EditorCommand):
    """Base class for editing commands."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        return self._edit(editor, key_event)

    @abstractmethod
    def _edit(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Perform the edit and report whether anything changed."""
        pass


class InsertTextCommand(EditCommand):
    def _edit(self, editor, key_event):
        char = key_event.value
        # Filter out control characters
        if len(char) != 1 or (ord(char) < 32 and char != '\t') or ord(char) == 127:
            return False
        return insert_character(editor.buffer, editor.view, char)


class InsertNewlineCommand(EditCommand):
    def _edit(self, editor, key_event):
        return insert_newline(editor.buffer, editor.view)


class BackspaceCommand(EditCommand):
    def _edit(self, editor, key_event):
        return delete_backward(editor.buffer, editor.view)


class DeleteCharCommand(EditCommand):
    def _edit(self, editor, key_event):
        return delete_forward(editor.buffer, editor.view)


class SystemCommand(EditorCommand):
    """Base class for system commands like save and quit."""

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """System commands don't modify buffer content."""
        self._execute_system(editor, key_event)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'Editor', key_event: 'KeyEvent'):
        """Perform the system action."""
        pass


class QuitCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.request_quit()


class SaveCommand(SystemCommand):
    def _execute_system(self, editor, key_event):
        editor.handle_save()


class CommandRegistry:
    """Maps key events to commands; keys without a command are ignored."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], EditorCommand] = {}
        self._text_command = InsertTextCommand()
        self._register_defaults()

    def _register_defaults(self):
        movements = {
            'up': Direction.UP,
            'down': Direction.DOWN,
            'left': Direction.LEFT,
            'right': Direction.RIGHT,
            'home': Direction.HOME,
            'end': Direction.END,
            'page_up': Direction.PAGE_UP,
            'page_down': Direction.PAGE_DOWN,
        }
        for name, direction in movements.items():
            self.register(KeyType.SPECIAL, name, MovementCommand(direction))

        self.register(KeyType.SPECIAL, 'enter', InsertNewlineCommand())
        self.register(KeyType.SPECIAL, 'backspace', BackspaceCommand())
        self.register(KeyType.SPECIAL, 'delete', DeleteCharCommand())
        self.register(KeyType.CTRL, 'q', QuitCommand())
        self.register(KeyType.CTRL, 's', SaveCommand())

    def register(self, key_type: KeyType, value: str, command: EditorCommand):
        self._commands[(key_type, value)] = command

    def get_command(self, key_event: 'KeyEvent') -> Optional[EditorCommand]:
        if key_event.key_type == KeyType.REGULAR:
            return self._text_command
        return self._commands.get((key_event.key_type, key_event.value))

    def execute(self, editor: 'Editor', key_event: 'KeyEvent') -> bool:
        """Run the command bound to key_event.

        Returns:
            True if the buffer was modified
        """
        command = self.get_command(key_event)
        if command is None:
            return False
        return command.execute(editor, key_event)
