"""Main editor controller."""

import logging
import os
import sys
import select
import signal
import termios
from typing import Optional
from .terminal import TerminalInterface
from .model import Buffer, DocumentError
from .view import TerminalView
from .keyboard import KeyboardHandler, KeyEvent, KeyType
from .constants import EditorConstants
from .commands import CommandRegistry
from .version import get_version

logger = logging.getLogger(__name__)


class Editor:
    """Single-buffer editor: reads a key, applies it, redraws."""

    def __init__(self):
        """Initialize the editor components."""
        self.terminal = TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.buffer = Buffer()
        self.view = TerminalView(self.buffer, self.terminal.width, self.terminal.height)
        self.command_registry = CommandRegistry()
        self.running = False
        # Create pipe for resize signaling
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()
        self.status_message: Optional[str] = None
        self.prompt_mode = None  # None, 'save_filename', 'save_filename_quit' or 'quit_confirm'
        self.prompt_input = ""

    @property
    def modified(self) -> bool:
        return self.buffer.is_modified()

    @property
    def filename(self) -> Optional[str]:
        return self.buffer.filename

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame # Unused
        # Write to pipe to wake up select()
        os.write(self._resize_pipe_w, EditorConstants.RESIZE_PIPE_MARKER)

    def _disable_flow_control(self):
        """Let Ctrl-S and Ctrl-Q reach the editor instead of the tty driver.

        Returns the previous termios settings, or None if they could not be read.
        """
        try:
            old_settings = termios.tcgetattr(sys.stdin)
            new_settings = list(old_settings)
            new_settings[0] &= ~(termios.IXON | termios.IXOFF)
            termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
            return old_settings
        except (termios.error, AttributeError, OSError) as e:
            logger.debug("Could not change flow control settings: %s", e)
            return None

    def run(self):
        """Run the main editor loop."""
        logger.info("Starting editor on %s", self.buffer.filename or "an unnamed buffer")
        self.terminal.setup()
        self.running = True
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)

        try:
            with self.terminal.term.cbreak():
                old_settings = self._disable_flow_control()
                try:
                    need_draw = True
                    while self.running:
                        if need_draw:
                            self._draw()
                            need_draw = False

                        # Block until a key arrives or the terminal is resized
                        ready, _, _ = select.select([0, self._resize_pipe_r], [], [])

                        if self._resize_pipe_r in ready:
                            os.read(self._resize_pipe_r, 1024)
                            self.terminal.invalidate_frame()
                            need_draw = True
                        elif 0 in ready:
                            key_event = self.keyboard.get_key_event(timeout=0)
                            if key_event:
                                self._handle_key_event(key_event)
                                need_draw = True
                finally:
                    if old_settings:
                        try:
                            termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
                        except (termios.error, OSError) as e:
                            logger.debug("Could not restore terminal settings: %s", e)
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self.terminal.cleanup()
            logger.info("Editor stopped")

    def _draw(self):
        """Draw the current editor state to terminal."""
        self.view.resize(self.terminal.width, self.terminal.height)
        banner = None
        if self.buffer.is_empty():
            banner = EditorConstants.WELCOME_MESSAGE.format(get_version())
        frame = self.view.frame(self.status_message, banner=banner)
        logger.debug("Cursor %s, offset %s, viewport %dx%d",
                     self.view.cursor, self.view.offset, self.view.num_columns, self.view.num_rows)
        self.terminal.update_frame(frame, prompt=self.prompt_text())

    def prompt_text(self) -> Optional[str]:
        """Text for the status bar while a prompt is active."""
        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            return EditorConstants.SAVE_AS_PROMPT + self.prompt_input
        if self.prompt_mode == 'quit_confirm':
            return EditorConstants.QUIT_CONFIRM_PROMPT
        return None

    def _handle_key_event(self, key_event: KeyEvent):
        """Handle a keyboard event.

        Args:
            key_event: KeyEvent object with parsed key information
        """
        # Clear status message on any keypress (except in prompt mode)
        if self.status_message and not self.prompt_mode:
            self.status_message = None

        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            self._handle_filename_prompt(key_event)
            return
        if self.prompt_mode == 'quit_confirm':
            self._handle_quit_confirm(key_event)
            return

        if key_event.key_type == KeyType.SPECIAL and key_event.value == 'escape':
            return

        if self.command_registry.execute(self, key_event):
            logger.debug("Edited buffer with %s at %s", key_event.value, self.view.cursor)

    def load_file(self, filename: str):
        """Load a file into the editor.

        A failure is reported on the status line and leaves an empty,
        unnamed buffer so nothing gets written over the unreadable file.

        Args:
            filename: Path to file to load
        """
        try:
            buffer = Buffer.open(filename)
        except DocumentError as e:
            logger.error("Could not open %s: %s", filename, e)
            self.status_message = str(e)
            buffer = Buffer()
        self.buffer = buffer
        self.view.set_buffer(buffer)

    def save_file(self, filename: str) -> bool:
        """Save the buffer to filename.

        Returns:
            True if save succeeded, False otherwise
        """
        try:
            self.buffer.save(filename)
        except DocumentError as e:
            self.status_message = str(e)
            return False
        self.status_message = f"Saved to {filename}"
        return True

    def handle_save(self):
        """Handle Ctrl-S save command."""
        if self.buffer.filename:
            self.save_file(self.buffer.filename)
        else:
            self.prompt_mode = 'save_filename'
            self.prompt_input = ""

    def request_quit(self):
        """Handle Ctrl-Q: quit now, or ask first if there are unsaved changes."""
        if self.modified:
            self.prompt_mode = 'quit_confirm'
        else:
            self.running = False

    def _handle_filename_prompt(self, key_event):
        """Handle keypress during filename prompt."""
        if (key_event.key_type == KeyType.SPECIAL and key_event.value == 'escape') or \
           (key_event.key_type == KeyType.CTRL and key_event.value == 'g'):  # ESC or Ctrl-G
            self.prompt_mode = None
            self.prompt_input = ""
            self.status_message = "Save cancelled"
        elif key_event.key_type == KeyType.SPECIAL and key_event.value == 'enter':
            if self.prompt_input:
                quitting = self.prompt_mode == 'save_filename_quit'
                self.prompt_mode = None
                if self.save_file(self.prompt_input) and quitting:
                    self.running = False
                self.prompt_input = ""
        elif key_event.key_type == KeyType.SPECIAL and key_event.value == 'backspace':
            if self.prompt_input:
                self.prompt_input = self.prompt_input[:-1]
        elif key_event.key_type == KeyType.REGULAR:
            char = key_event.value
            if ord(char[0]) >= 32:
                self.prompt_input += char

    def _handle_quit_confirm(self, key_event):
        """Handle keypress during quit confirmation."""
        self.prompt_mode = None
        if key_event.key_type != KeyType.REGULAR:
            return
        char = key_event.value.lower()
        if char == 'y':
            if self.buffer.filename:
                # A failed save keeps the editor open so the user can retry
                if self.save_file(self.buffer.filename):
                    self.running = False
            else:
                self.prompt_mode = 'save_filename_quit'
                self.prompt_input = ""
        elif char == 'n':
            self.running = False
