#!/usr/bin/env python3
"""Hecto - a small terminal text editor.

Usage:
    python main.py [filename]

Controls:
    Arrow keys, Home/End, PageUp/PageDown: Move the cursor
    Ctrl-S: Save file
    Ctrl-Q: Quit (prompts to save if modified)
    Type to insert text
    Backspace / Delete: Delete before / under the cursor
    Enter: Split the line
"""

from hecto.__main__ import main


if __name__ == "__main__":
    main()
