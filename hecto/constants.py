"""Constants and configuration for the hecto editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    APP_NAME = "hecto"
    APP_AUTHOR = "hecto"

    # Screen layout
    STATUS_LINES = 1  # Rows reserved at the bottom for the status bar
    EMPTY_ROW_MARKER = "~"
    WELCOME_MESSAGE = "Hecto editor -- version {}"
    UNNAMED_BUFFER = "[No Name]"

    # File operations
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary save files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize

    # Prompts
    SAVE_AS_PROMPT = "Save as: "
    QUIT_CONFIRM_PROMPT = "Save changes before exit? (y/n) "
    HELP_MESSAGE = "Ctrl-S save | Ctrl-Q quit"

    # Logging
    LOG_FILENAME = "hecto.log"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    DEFAULT_LOG_LEVEL = "INFO"
    LOG_LEVEL_ENV = "HECTO_LOG_LEVEL"
    LOG_FILE_ENV = "HECTO_LOG_FILE"
